"""
nestedtx.exceptions
===================

Exceptions raised by nestedtx, all rooted at NestedTxException. Where a built-in exception already
names the same kind of failure (KeyError, ConnectionError, ...), it is mixed in so that callers can
catch either.
"""


__author__ = 'Aaron Hosford'
__all__ = [
    'NestedTxException',
    'ConfigurationError',
    'InvalidConfigurationError',
    'ConfigSectionNotFoundError',
    'ConfigParameterNotFoundError',
    'SecurityError',
    'EncryptionError',
    'DecryptionError',
    'PasswordRequiredError',
    'PluginError',
    'PluginExistsError',
    'InvalidPluginError',
    'PluginNotFoundError',
    'InvalidPathError',
    'OperationNotSupportedError',
    'ConnectionStatusError',
    'ConnectionOpenError',
    'ConnectionNotOpenError',
    'ConnectionFailedError',
    'TransactionError',
    'CommitError',
    'RollbackError',
    'UnbalancedTransactionError',
    'TransactionOpenError',
    'verify_type',
    'verify_callable',
]


class NestedTxException(Exception):
    """Root of the nestedtx exception hierarchy."""


class ConfigurationError(NestedTxException):
    """A config file could not be used as given."""


class InvalidConfigurationError(ConfigurationError):
    """A config file is missing or malformed."""


class ConfigSectionNotFoundError(KeyError, ConfigurationError):
    """No config section has the requested name."""


class ConfigParameterNotFoundError(KeyError, ConfigurationError):
    """The config section has no option with the requested name."""


class SecurityError(NestedTxException):
    """A password or credential could not be handled."""


class EncryptionError(SecurityError):
    """A value could not be encrypted."""


class DecryptionError(SecurityError):
    """A token could not be decrypted, usually because the master password is wrong."""


class PasswordRequiredError(KeyError, SecurityError):
    """A password was needed but none was available."""


class PluginError(NestedTxException):
    """A config loader plugin could not be registered or found."""


class PluginExistsError(KeyError, PluginError):
    """A different plugin is already registered under this name."""


class InvalidPluginError(ValueError, PluginError):
    """The object cannot serve as a plugin."""


class PluginNotFoundError(KeyError, PluginError):
    """No plugin is registered under this name."""


class InvalidPathError(OSError, NestedTxException):
    """The path cannot hold a database file."""


class OperationNotSupportedError(NotImplementedError, NestedTxException):
    """The driver or object does not offer this operation."""


class ConnectionStatusError(ConnectionError, NestedTxException):
    """The connection is not in the state the operation requires."""


class ConnectionOpenError(ConnectionStatusError):
    """The operation requires a closed connection."""


class ConnectionNotOpenError(ConnectionStatusError):
    """The operation requires an open connection."""


class ConnectionFailedError(ConnectionStatusError):
    """The driver could not establish the connection."""


class TransactionError(NestedTxException):
    """The driver failed to begin a transaction or to restore its autocommit mode."""


class CommitError(TransactionError):
    """The driver failed to commit the outermost transaction."""


class RollbackError(TransactionError):
    """The driver failed to roll back the outermost transaction."""


class UnbalancedTransactionError(TransactionError):
    """A strict connection was asked to commit or roll back with no transaction open."""


class TransactionOpenError(TransactionError):
    """A strict connection was closed while a transaction was still open."""


def verify_type(obj, typ, *, non_empty=False, allow_none=False):
    """
    Raise TypeError unless obj is an instance of typ (a type or a tuple of types). With non_empty,
    a falsy obj raises ValueError as well. With allow_none, None always passes.
    """
    if obj is None and allow_none:
        return
    if not isinstance(obj, typ):
        names = ' or '.join(t.__name__ for t in (typ if isinstance(typ, tuple) else (typ,)))
        raise TypeError("Expected %s, got %s." % (names, type(obj).__name__))
    if non_empty and not obj:
        raise ValueError("Expected a non-empty %s." % type(obj).__name__)


def verify_callable(obj, *, allow_none=False):
    """Raise TypeError unless obj is callable (or None, with allow_none)."""
    if obj is None and allow_none:
        return
    if not callable(obj):
        raise TypeError("Expected a callable, got %s." % type(obj).__name__)
