"""
nestedtx.db.dbapi
=================

Nested transactions through any PEP 249 (DB-API 2.0) driver whose connections expose their
autocommit mode, such as psycopg2, psycopg, pyodbc, mysql.connector or pymysql.

With autocommit off, a DB-API driver opens a transaction implicitly at the next statement, so
beginning the outermost scope only has to switch autocommit off.
"""


import importlib
import logging


from ..abc import sql
from ..abc import transactions

from ..configurations import ConfigManager
from ..exceptions import OperationNotSupportedError, verify_type
from ..plugins import config_loader
from ..security.credentials import Credential


__author__ = 'Aaron Hosford'
__all__ = [
    'parse_parameters',
    'DBAPIConnector',
    'dbapi_connection',
]


log = logging.getLogger(__name__)


def parse_parameters(string_value):
    """
    Split 'key=value' terms separated by semicolons into a dict of connect() keyword arguments. A
    value may itself contain '='. Empty terms are ignored; a term without a key, or a repeated key,
    raises ValueError.

        >>> parse_parameters('host=db.example.com; dbname=warehouse')
        {'host': 'db.example.com', 'dbname': 'warehouse'}
    """
    verify_type(string_value, str)
    results = {}
    for term in filter(None, (term.strip() for term in string_value.split(';'))):
        key, separator, value = term.partition('=')
        key = key.strip()
        if not separator or not key or key in results:
            raise ValueError("Malformed connection parameter: %r" % term)
        results[key] = value.strip()
    return results


@config_loader
class DBAPIConnector(sql.SQLConnector):
    """
    Describes a database reached through a DB-API driver module and how connections to it should
    behave.

    Config section example:
        [Warehouse]
        Type = DBAPIConnector
        Module = psycopg2
        Parameters = host=db.example.com; dbname=warehouse
        Credential = #Warehouse Login
        Strict Nesting = yes

    :param module: The driver module's import name.
    :param parameters: Keyword arguments for the driver's connect() function.
    :param credential: A Credential supplying the user and password keyword arguments.
    :param autocommit: The mode new connections are switched to, or None to keep the driver's.
    :param strict: Whether connections raise on unbalanced commits or rollbacks. (Default False)
    :param user_keyword: The connect() keyword for the credential's user.
    :param password_keyword: The connect() keyword for the credential's password.
    """

    @classmethod
    def load_config_value(cls, manager, value, *args, **kwargs):
        """Build a connector from 'module; key=value; ...', e.g. 'psycopg2; dbname=warehouse'."""
        verify_type(manager, ConfigManager)
        verify_type(value, str, non_empty=True)
        module, _, parameters = value.partition(';')
        return cls(module.strip(), parse_parameters(parameters), *args, **kwargs)

    @classmethod
    def load_config_section(cls, manager, section, *args, **kwargs):
        verify_type(manager, ConfigManager)
        verify_type(section, str, non_empty=True)
        return cls(
            manager.load_option(section, 'Module'),
            manager.load_option(section, 'Parameters', parse_parameters, default={}),
            *args,
            credential=manager.load_option(section, 'Credential', Credential, default=None),
            autocommit=manager.load_option(section, 'Autocommit', 'bool', default=None),
            strict=manager.load_option(section, 'Strict Nesting', 'bool', default=False),
            user_keyword=manager.load_option(section, 'User Keyword', default='user'),
            password_keyword=manager.load_option(section, 'Password Keyword', default='password'),
            **kwargs
        )

    def __init__(self, module, parameters=None, credential=None, autocommit=None, strict=False,
                 user_keyword='user', password_keyword='password'):
        verify_type(module, str, non_empty=True)
        parameters = dict(parameters or {})
        for key in parameters:
            verify_type(key, str, non_empty=True)
        verify_type(credential, Credential, allow_none=True)
        verify_type(autocommit, bool, allow_none=True)
        verify_type(strict, bool)
        verify_type(user_keyword, str, non_empty=True)
        verify_type(password_keyword, str, non_empty=True)

        if credential and (user_keyword in parameters or password_keyword in parameters):
            raise ValueError("Login given both in the parameters and as a credential.")

        super().__init__(dbapi_connection, module)

        self._module_name = module
        self._module = None
        self._parameters = parameters
        self._credential = credential or None
        self._autocommit = autocommit
        self._strict = strict
        self._user_keyword = user_keyword
        self._password_keyword = password_keyword

    @property
    def module(self):
        """The driver module, imported on first access."""
        if self._module is None:
            self._module = importlib.import_module(self._module_name)
        return self._module

    @property
    def parameters(self):
        return dict(self._parameters)

    @property
    def credential(self):
        return self._credential

    @property
    def autocommit(self):
        return self._autocommit

    @property
    def strict(self):
        return self._strict

    def get_connect_arguments(self):
        """The keyword arguments for the driver's connect(), with the credential filled in."""
        kwargs = dict(self._parameters)
        if self._credential is not None:
            if self._credential.user is not None:
                kwargs[self._user_keyword] = self._credential.user
            if self._credential.password is not None:
                kwargs[self._password_keyword] = self._credential.password
        return kwargs

    def connect(self, strict=None):
        """
        Return a new, unopened connection.

        :param strict: Overrides the connector's strict setting for this one connection.
        """
        return super().connect(strict=self._strict if strict is None else strict)

    def __str__(self):
        # No password.
        terms = [self._module_name]
        terms.extend('%s=%s' % item for item in sorted(self._parameters.items()))
        if self._credential is not None and self._credential.user is not None:
            terms.append('%s=%s' % (self._user_keyword, self._credential.user))
        return '; '.join(terms)

    def __repr__(self):
        args = [repr(self._module_name)]
        if self._parameters:
            args.append(repr(self._parameters))
        if self._credential is not None:
            args.append('credential=%r' % (self._credential,))
        if self._autocommit is not None:
            args.append('autocommit=%r' % (self._autocommit,))
        if self._strict:
            args.append('strict=True')
        return '%s(%s)' % (type(self).__name__, ', '.join(args))


# noinspection PyPep8Naming
class dbapi_connection(sql.sql_connection, transactions.transactional_connection):
    """
    Connection through a DB-API driver module with nested transactions. Drivers expose autocommit
    either as an attribute (psycopg2, pyodbc) or as an autocommit(value) method paired with
    get_autocommit() (pymysql); both are handled.
    """

    def __init__(self, connector, strict=False):
        verify_type(connector, DBAPIConnector)
        super().__init__(connector, strict=strict)
        # Importing here surfaces a missing driver at connect() time.
        self._module = connector.module
        self._handle = None

    def __repr__(self):
        return '<%s %s>' % (type(self).__name__, self._connector)

    @property
    def driver_errors(self):
        """The driver module's Error class, per PEP 249, or Exception if it has none."""
        error = getattr(self._module, 'Error', None)
        if isinstance(error, type) and issubclass(error, Exception):
            return (error,)
        return (Exception,)

    @property
    def handle(self):
        """The open driver connection."""
        self.verify_open()
        return self._handle

    def _open_handle(self):
        self._handle = self._module.connect(**self._connector.get_connect_arguments())
        if self._connector.autocommit is not None:
            self._set_autocommit(self._connector.autocommit)

    def _close_handle(self):
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    def _get_autocommit(self):
        autocommit = getattr(self._handle, 'autocommit', None)
        if callable(autocommit):
            return self._handle.get_autocommit()
        if autocommit is None:
            raise OperationNotSupportedError("The %s driver does not report its autocommit mode." %
                                             self._connector.driver)
        return autocommit

    def _set_autocommit(self, autocommit):
        setter = getattr(self._handle, 'autocommit', None)
        if callable(setter):
            setter(autocommit)
        else:
            self._handle.autocommit = autocommit

    def _begin_transaction(self):
        log.debug("Driver transaction on %r starts with the next statement.", self)

    def _commit_transaction(self):
        self._handle.commit()

    def _rollback_transaction(self):
        self._handle.rollback()

    def _execute(self, statement, parameters):
        cursor = self._handle.cursor()
        if parameters:
            cursor.execute(statement, parameters)
        else:
            cursor.execute(statement)
        return self._wrap_results(cursor)

    def _call(self, name, *parameters):
        cursor = self._handle.cursor()
        if not hasattr(cursor, 'callproc'):
            cursor.close()
            raise OperationNotSupportedError("The %s driver does not support stored procedures." %
                                             self._connector.driver)
        cursor.callproc(name, parameters)
        return self._wrap_results(cursor)

    @staticmethod
    def _wrap_results(cursor):
        # Statements that produce no result table have no description.
        if cursor.description is None:
            cursor.close()
            return None
        return sql.CursorRecordSet(cursor)
