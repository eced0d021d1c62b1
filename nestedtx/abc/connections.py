"""
Interface definition for connectors and connections.

A connector holds everything needed to reach a database. Calling its connect() method produces a
connection, which stays unusable until it is opened. A connection can be opened and closed any
number of times, and works as a context manager that opens it on entry and closes it on exit.
"""


import logging

from abc import ABCMeta, abstractmethod


from ..exceptions import ConnectionOpenError, ConnectionNotOpenError, verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    "Connector",
    "connection",
]


log = logging.getLogger(__name__)


class Connector(metaclass=ABCMeta):
    """
    Abstract factory for connections of a single type.

    :param connection_type: The connection subclass that connect() instantiates.
    """

    def __init__(self, connection_type):
        assert issubclass(connection_type, connection)
        self._connection_type = connection_type

    @property
    def connection_type(self):
        """The connection subclass that connect() instantiates."""
        return self._connection_type

    def connect(self, *args, **kwargs):
        """
        Return a new, unopened connection. Any arguments are passed on to the connection type
        after the connector itself.
        """
        return self._connection_type(self, *args, **kwargs)


# noinspection PyPep8Naming
class connection(metaclass=ABCMeta):
    """
    Abstract base for a link to a database, created by a Connector. Subclasses acquire their
    resources in open() and release them in close(), calling up to this class in both.
    """

    def __init__(self, connector):
        verify_type(connector, Connector)
        verify_type(self, connector.connection_type)
        self._connector = connector
        self._is_open = False

    def __del__(self):
        if not getattr(self, '_is_open', False):
            return
        # Exceptions cannot propagate out of a finalizer.
        try:
            self._release()
        except Exception:
            log.exception("Failed to close unreferenced connection %r.", self)

    @property
    def connector(self):
        """The connector that created this connection."""
        return self._connector

    @property
    def is_open(self):
        return self._is_open

    @abstractmethod
    def open(self):
        """Open the connection. Raises ConnectionOpenError if it is already open."""
        self.verify_closed()
        self._is_open = True

    @abstractmethod
    def close(self):
        """Close the connection. Raises ConnectionNotOpenError if it is not open."""
        self.verify_open()
        self._is_open = False

    def _release(self):
        """Close a connection that is being garbage collected while still open."""
        self.close()

    def verify_open(self):
        if not self._is_open:
            raise ConnectionNotOpenError("%r is not open." % (self,))

    def verify_closed(self):
        if self._is_open:
            raise ConnectionOpenError("%r is already open." % (self,))

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
        return False
