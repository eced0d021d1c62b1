"""
nestedtx.abc.transactions
=========================

Interface definition and nesting logic for transactional connections.

A transactional connection wraps a driver connection that only supports a single, non-reentrant
begin/commit/rollback cycle, and layers nested transaction scopes on top of it. Every call to
begin() increments the nesting depth, and every call to commit() or rollback() decrements it. Only
the outermost begin() (depth 0 -> 1) and the outermost commit() or rollback() (depth 1 -> 0) are
forwarded to the driver; the calls in between are counted but not forwarded.

Note that a nested rollback() does not abort anything by itself. It is the responsibility of the
caller to propagate the failure outward so that the outermost scope also rolls back. The
transaction() method and the nested() context manager do this automatically by re-raising.

Each connection is meant to be driven from a single thread of control at a time. The depth counter
and the driver transaction calls are guarded by a re-entrant lock, but statements executed through
the handle are not, so sharing a connection between threads still requires external coordination.
"""


import contextlib
import logging
import threading

from abc import ABCMeta, abstractmethod


from . import connections

from ..exceptions import CommitError, ConnectionFailedError, RollbackError, TransactionError, \
    TransactionOpenError, UnbalancedTransactionError, verify_callable


__author__ = 'Aaron Hosford'
__all__ = [
    "transactional_connection",
]


log = logging.getLogger(__name__)


# noinspection PyPep8Naming
class transactional_connection(connections.connection, metaclass=ABCMeta):
    """
    Base for connections that layer nested transaction scopes over a driver with only one
    transaction at a time.

    Subclasses supply the driver primitives (_open_handle(), _close_handle(), _get_autocommit(),
    _set_autocommit(), _begin_transaction(), _commit_transaction(), _rollback_transaction()); this
    class supplies the nesting rules.
    """

    # The exception types raised by the driver. Subclasses should narrow this to the driver's own
    # error hierarchy.
    driver_errors = (Exception,)

    def __init__(self, connector, strict=False):
        super().__init__(connector)
        self._strict = bool(strict)
        self._depth = 0
        self._natural_autocommit = None
        self._transaction_lock = threading.RLock()

    @property
    def strict(self):
        """Whether unbalanced commits or rollbacks, and closing mid-transaction, are errors."""
        return self._strict

    @property
    def depth(self):
        """The number of currently open transaction scopes."""
        return self._depth

    @property
    def in_transaction(self):
        """Whether a transaction is logically open."""
        return self._depth > 0

    @property
    def natural_autocommit(self):
        """The driver's autocommit mode as observed when the connection was opened."""
        return self._natural_autocommit

    @property
    @abstractmethod
    def handle(self):
        """The underlying driver connection, for executing statements directly."""
        raise NotImplementedError()

    @abstractmethod
    def _open_handle(self):
        """Ask the driver to establish the underlying connection."""
        raise NotImplementedError()

    @abstractmethod
    def _close_handle(self):
        """Ask the driver to close the underlying connection."""
        raise NotImplementedError()

    @abstractmethod
    def _get_autocommit(self):
        """Return the driver's current autocommit mode."""
        raise NotImplementedError()

    @abstractmethod
    def _set_autocommit(self, autocommit):
        """Set the driver's autocommit mode."""
        raise NotImplementedError()

    @abstractmethod
    def _begin_transaction(self):
        """Start a driver-level transaction. Called with autocommit already suspended."""
        raise NotImplementedError()

    @abstractmethod
    def _commit_transaction(self):
        """Commit the driver-level transaction."""
        raise NotImplementedError()

    @abstractmethod
    def _rollback_transaction(self):
        """Roll back the driver-level transaction."""
        raise NotImplementedError()

    def open(self):
        """
        Open the connection. The driver's autocommit mode is captured at this point and treated as
        the connection's natural mode until it is closed.
        """
        super().open()
        try:
            self._open_handle()
            autocommit = bool(self._get_autocommit())
        except BaseException as exc:
            self._is_open = False
            self._close_handle()
            if isinstance(exc, self.driver_errors):
                log.exception("Driver failed to connect using %r.", self._connector)
                raise ConnectionFailedError("Could not connect using %r." %
                                            (self._connector,)) from exc
            raise
        with self._transaction_lock:
            self._natural_autocommit = autocommit
            self._depth = 0
        log.debug("Opened %r with autocommit %s.", self, 'on' if autocommit else 'off')

    def close(self):
        """
        Close the connection. If a transaction is still open, the driver transaction is rolled back
        first. In strict mode, a TransactionOpenError is then raised.
        """
        open_depth = self._shut_down()
        if open_depth and self._strict:
            raise TransactionOpenError("Connection closed with %s open transaction scope(s)." %
                                       open_depth)

    def _release(self):
        # Called while finalizing; strict nesting is not enforced here.
        self._shut_down()

    def _shut_down(self):
        self.verify_open()
        with self._transaction_lock:
            open_depth = self._depth
            try:
                if open_depth:
                    log.warning("Closing %r with %s open transaction scope(s). Rolling back.",
                                self, open_depth)
                    self._depth = 0
                    self._end_transaction(self._rollback_transaction, RollbackError, 'rollback')
            finally:
                self._close_handle()
                super().close()
        log.debug("Closed %r.", self)
        return open_depth

    def begin(self):
        """
        Begin a new transaction, returning the transaction nesting depth. Only the outermost call
        starts a driver transaction, and only if the connection's natural mode is autocommit;
        otherwise the driver is presumed to already be inside a transaction boundary.

        :return: The new nesting depth.
        """
        self.verify_open()
        with self._transaction_lock:
            if not self._depth and self._natural_autocommit:
                log.debug("Beginning driver transaction on %r.", self)
                try:
                    self._set_autocommit(False)
                    self._begin_transaction()
                except self.driver_errors as exc:
                    log.exception("Driver failed to begin a transaction on %r.", self)
                    self._restore_autocommit('begin')
                    raise TransactionError("Driver failed to begin a transaction.") from exc
            self._depth += 1
            log.debug("Transaction depth on %r is now %s.", self, self._depth)
            return self._depth

    def commit(self):
        """
        End the current transaction scope. Only the outermost commit is forwarded to the driver;
        inner commits return True immediately, deferring the decision to the outermost scope.

        :return: True if the commit succeeded (or was deferred).
        """
        return self._end_scope(self._commit_transaction, CommitError, 'commit')

    def rollback(self):
        """
        Roll back the current transaction scope. Only the outermost rollback is forwarded to the
        driver. An inner rollback does NOT abort the enclosing transaction; the caller must
        propagate the failure so the outermost scope rolls back as well.

        :return: True if the rollback succeeded (or was deferred).
        """
        return self._end_scope(self._rollback_transaction, RollbackError, 'rollback')

    def transaction(self, work, *args, **kwargs):
        """
        Run work inside a transaction scope. If work returns normally, the scope is committed and
        the result of work is returned. If work raises, the scope is rolled back and the exception
        is re-raised. Work may itself open further scopes on this connection.

        Example:
            def transfer(connection, source, target, amount):
                connection.transaction(withdraw, connection, source, amount)
                connection.transaction(deposit, connection, target, amount)

            connection.transaction(transfer, connection, 'checking', 'savings', 100)

        :param work: A callable implementing the unit of work.
        :param args: Positional arguments passed to work.
        :param kwargs: Keyword arguments passed to work.
        :return: The return value of work.
        """
        verify_callable(work)
        self.begin()
        try:
            result = work(*args, **kwargs)
        except BaseException:
            self.rollback()
            raise
        self.commit()
        return result

    @contextlib.contextmanager
    def nested(self):
        """
        A context manager that opens a transaction scope for the duration of a with block,
        committing it if the block exits normally and rolling it back if the block raises.

        Example:
            with connection.nested():
                connection.execute("UPDATE accounts SET balance = 0")
        """
        self.begin()
        try:
            yield self
        except BaseException:
            self.rollback()
            raise
        self.commit()

    def _end_scope(self, finish, error_type, action):
        self.verify_open()
        with self._transaction_lock:
            if not self._depth:
                if self._strict:
                    raise UnbalancedTransactionError("Cannot %s: no transaction is open." % action)
                log.warning("Ignoring %s on %r: no transaction is open.", action, self)
                return True
            self._depth -= 1
            log.debug("Transaction depth on %r is now %s.", self, self._depth)
            if self._depth:
                return True
            self._end_transaction(finish, error_type, action)
            return True

    def _end_transaction(self, finish, error_type, action):
        # The depth has already been decremented; it is not restored if the driver fails.
        log.debug("Issuing driver %s on %r.", action, self)
        try:
            finish()
        except self.driver_errors as exc:
            log.exception("Driver %s failed on %r.", action, self)
            if self._natural_autocommit:
                self._restore_autocommit(action)
            raise error_type("Driver %s failed." % action) from exc
        if self._natural_autocommit:
            try:
                self._set_autocommit(True)
            except self.driver_errors as exc:
                # The transaction itself has already ended.
                log.exception("Driver could not restore autocommit on %r after %s.", self, action)
                raise TransactionError("Driver failed to restore autocommit after %s." %
                                       action) from exc

    def _restore_autocommit(self, action):
        # Only called while another driver error is already propagating.
        try:
            self._set_autocommit(True)
        except self.driver_errors:
            log.warning("Could not restore autocommit on %r after failed %s.", self, action,
                        exc_info=True)
