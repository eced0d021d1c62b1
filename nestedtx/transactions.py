"""
nestedtx.transactions
=====================

Conveniences for composing units of work into transactions.
"""


import functools
import logging


from .abc.connections import Connector
from .abc.transactions import transactional_connection
from .configurations import ConfigManager, get_nestedtx_config_manager
from .exceptions import verify_callable, verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    'establish',
    'transactional',
]


log = logging.getLogger(__name__)


def establish(connector, *args, manager=None, **kwargs):
    """
    Create a transactional connection from a connector and open it.

    Example:
        connection = establish(SQLiteConnector('orders.db'))
        try:
            connection.transaction(place_order, connection, order)
        finally:
            connection.close()

    :param connector: A Connector instance, or the name of a config section describing one.
    :param args: Additional positional arguments passed to the connector's connect() method.
    :param manager: The ConfigManager used to load a connector by name. Defaults to the nestedtx
        config manager.
    :param kwargs: Additional keyword arguments passed to the connector's connect() method.
    :return: The open connection.
    """
    if isinstance(connector, str):
        if manager is None:
            manager = get_nestedtx_config_manager()
        verify_type(manager, ConfigManager)
        connector = manager.load_section(connector)
    verify_type(connector, Connector)

    connection = connector.connect(*args, **kwargs)
    verify_type(connection, transactional_connection)

    connection.open()
    return connection


def transactional(function):
    """
    Decorator for functions whose first argument is a transactional connection. The decorated
    function's body runs inside a transaction scope on that connection, so decorated functions can
    call each other freely and only the outermost call commits or rolls back.

    Example:
        @transactional
        def withdraw(connection, account, amount):
            connection.execute("UPDATE accounts SET balance = balance - ? WHERE name = ?",
                               (amount, account))

        @transactional
        def transfer(connection, source, target, amount):
            withdraw(connection, source, amount)
            deposit(connection, target, amount)

    :param function: The function to wrap.
    :return: The wrapped function.
    """
    verify_callable(function)

    @functools.wraps(function)
    def wrapper(connection, *args, **kwargs):
        verify_type(connection, transactional_connection)
        log.debug("Running %s in a transaction on %r.", function.__qualname__, connection)
        return connection.transaction(function, connection, *args, **kwargs)

    return wrapper
