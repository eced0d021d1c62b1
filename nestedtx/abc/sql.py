"""
Interface definition for SQL connections. Statements are handed to the driver as written; nestedtx
does not translate or rewrite SQL.
"""


from abc import ABCMeta, abstractmethod


from . import configurations
from . import connections

from ..exceptions import verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    "RecordSet",
    "CursorRecordSet",
    "SQLConnector",
    "sql_connection",
]


class RecordSet(metaclass=ABCMeta):
    """
    Iterator over the rows a statement produced, each one yielded as a tuple.
    """

    @abstractmethod
    def _next(self):
        """Return the next row, or raise StopIteration when there are none left."""
        raise NotImplementedError()

    def __next__(self):
        return tuple(self._next())

    def __iter__(self):
        return self


class CursorRecordSet(RecordSet):
    """
    Record set reading from a DB-API cursor. The cursor is closed as soon as the last row has been
    read.
    """

    def __init__(self, cursor):
        self._cursor = cursor

    @property
    def row_count(self):
        """The driver's rowcount for the statement, or -1 if it did not report one."""
        if self._cursor is None:
            return -1
        return self._cursor.rowcount

    @property
    def exhausted(self):
        """Whether every row has been read and the cursor closed."""
        return self._cursor is None

    def _next(self):
        if self._cursor is None:
            raise StopIteration()
        row = self._cursor.fetchone()
        if row is None:
            self.close()
            raise StopIteration()
        return row

    def close(self):
        """Close the cursor without reading the remaining rows."""
        if self._cursor is not None:
            cursor, self._cursor = self._cursor, None
            cursor.close()


class SQLConnector(connections.Connector, configurations.Configurable, metaclass=ABCMeta):
    """
    Connector for a SQL database reached through a particular driver module.

    :param connection_type: The sql_connection subclass that connect() instantiates.
    :param driver: The name of the driver module, if known.
    """

    def __init__(self, connection_type, driver=None):
        verify_type(driver, str, non_empty=True, allow_none=True)
        assert issubclass(connection_type, sql_connection)

        super().__init__(connection_type)

        self._driver = driver

    @property
    def driver(self):
        """The name of the driver module."""
        return self._driver


# noinspection PyPep8Naming
class sql_connection(connections.connection, metaclass=ABCMeta):
    """
    Abstract base for connections that run SQL statements and stored procedures.
    """

    def __init__(self, connector, *args, **kwargs):
        verify_type(connector, SQLConnector)
        super().__init__(connector, *args, **kwargs)

    @abstractmethod
    def _execute(self, statement, parameters):
        """Run a statement on the driver. Return a RecordSet if it produced rows, else None."""
        raise NotImplementedError()

    @abstractmethod
    def _call(self, name, *parameters):
        """Run a stored procedure on the driver. Return a RecordSet or None, as _execute() does."""
        raise NotImplementedError()

    def execute(self, statement, parameters=()):
        """
        Run a SQL statement.

        Example:
            for name, balance in connection.execute("SELECT name, balance FROM accounts"):
                ...

        :param statement: The statement, using the driver's placeholder style.
        :param parameters: The values bound to the placeholders.
        :return: A RecordSet over the result rows, or None.
        """
        self.verify_open()
        verify_type(statement, str, non_empty=True)
        result = self._execute(statement, parameters)
        assert result is None or isinstance(result, RecordSet)
        return result

    def call(self, name, *parameters):
        """
        Run a stored procedure.

        :param name: The procedure name.
        :param parameters: The procedure's arguments.
        :return: A RecordSet over the result rows, or None.
        """
        self.verify_open()
        verify_type(name, str, non_empty=True)
        result = self._call(name, *parameters)
        assert result is None or isinstance(result, RecordSet)
        return result
