"""
nestedtx.db.sqlite
==================

Nested transactions on SQLite databases, through the standard library's sqlite3 module.

The sqlite3 module reports autocommit as an isolation_level of None. While a nested transaction is
open, the connection is switched to the DEFERRED isolation level and an explicit BEGIN is issued.
"""


import os
import sqlite3


from ..abc import sql
from ..abc import transactions

from ..configurations import ConfigManager
from ..exceptions import InvalidPathError, OperationNotSupportedError, verify_type
from ..plugins import config_loader


__author__ = 'Aaron Hosford'
__all__ = [
    'SQLiteConnector',
    'sqlite_connection',
]


MEMORY_ONLY = ':memory:'

TRANSACTION_ISOLATION_LEVEL = 'DEFERRED'


@config_loader
class SQLiteConnector(sql.SQLConnector):
    """
    Describes a SQLite database and how connections to it should behave.

    Config section example:
        [Orders Database]
        Type = SQLiteConnector
        Path = /srv/data/orders.db
        Autocommit = yes
        Timeout = 5
        Strict Nesting = no

    :param path: The database file, or None (or ':memory:') for a private in-memory database.
    :param autocommit: Whether connections start in autocommit mode. (Default True)
    :param timeout: Seconds to wait for another connection's lock, or None for sqlite3's default.
    :param strict: Whether connections raise on unbalanced commits or rollbacks. (Default False)
    """

    @classmethod
    def load_config_value(cls, manager, value, *args, **kwargs):
        """Build a connector from a bare database path."""
        verify_type(manager, ConfigManager)
        verify_type(value, str, non_empty=True)
        return cls(value, *args, **kwargs)

    @classmethod
    def load_config_section(cls, manager, section, *args, **kwargs):
        verify_type(manager, ConfigManager)
        verify_type(section, str, non_empty=True)
        return cls(
            manager.load_option(section, 'Path', default=None),
            *args,
            autocommit=manager.load_option(section, 'Autocommit', 'bool', default=True),
            timeout=manager.load_option(section, 'Timeout', 'number', default=None),
            strict=manager.load_option(section, 'Strict Nesting', 'bool', default=False),
            **kwargs
        )

    def __init__(self, path=None, autocommit=True, timeout=None, strict=False):
        verify_type(path, str, non_empty=True, allow_none=True)
        if path == MEMORY_ONLY:
            path = None
        if path is not None and (os.path.isdir(path) or
                                 not os.path.isdir(os.path.dirname(os.path.abspath(path)))):
            raise InvalidPathError("Not a usable database file path: %s" % path)
        verify_type(autocommit, bool)
        verify_type(timeout, (int, float), allow_none=True)
        verify_type(strict, bool)

        super().__init__(sqlite_connection, 'sqlite3')

        self._path = path
        self._autocommit = autocommit
        self._timeout = timeout
        self._strict = strict

    @property
    def memory_only(self):
        """Whether the database lives only in memory."""
        return self._path is None

    @property
    def path(self):
        """The database file path, or None for an in-memory database."""
        return self._path

    @property
    def autocommit(self):
        return self._autocommit

    @property
    def timeout(self):
        return self._timeout

    @property
    def strict(self):
        return self._strict

    def connect(self, strict=None):
        """
        Return a new, unopened connection.

        :param strict: Overrides the connector's strict setting for this one connection.
        """
        return super().connect(strict=self._strict if strict is None else strict)

    def __str__(self):
        return MEMORY_ONLY if self._path is None else self._path

    def __repr__(self):
        return '%s(%s)' % (type(self).__name__, '' if self._path is None else repr(self._path))


# noinspection PyPep8Naming
class sqlite_connection(sql.sql_connection, transactions.transactional_connection):
    """
    Connection to a SQLite database with nested transactions.

    Example:
        with SQLiteConnector('orders.db').connect() as connection:
            with connection.nested():
                connection.execute("DELETE FROM orders WHERE shipped")
    """

    driver_errors = (sqlite3.Error,)

    def __init__(self, connector, strict=False):
        verify_type(connector, SQLiteConnector)
        super().__init__(connector, strict=strict)
        self._handle = None

    def __repr__(self):
        return '<%s %s>' % (type(self).__name__, self._connector)

    @property
    def handle(self):
        """The open sqlite3.Connection."""
        self.verify_open()
        return self._handle

    def _open_handle(self):
        connector = self._connector
        options = {}
        if connector.timeout is not None:
            options['timeout'] = connector.timeout
        isolation_level = None if connector.autocommit else TRANSACTION_ISOLATION_LEVEL
        self._handle = sqlite3.connect(str(connector), isolation_level=isolation_level, **options)

    def _close_handle(self):
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    def _get_autocommit(self):
        return self._handle.isolation_level is None

    def _set_autocommit(self, autocommit):
        self._handle.isolation_level = None if autocommit else TRANSACTION_ISOLATION_LEVEL

    def _begin_transaction(self):
        self._handle.execute('BEGIN')

    def _commit_transaction(self):
        self._handle.commit()

    def _rollback_transaction(self):
        self._handle.rollback()

    def _execute(self, statement, parameters):
        cursor = self._handle.cursor()
        cursor.execute(statement, parameters)
        return sql.CursorRecordSet(cursor)

    def _call(self, name, *parameters):
        raise OperationNotSupportedError("SQLite has no stored procedures.")
