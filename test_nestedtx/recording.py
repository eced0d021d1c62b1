"""
A fake driver which records every call the transactional layer makes to it.
"""


from nestedtx.abc.connections import Connector
from nestedtx.abc.transactions import transactional_connection


class DriverError(Exception):
    """Raised by the recording driver when told to fail."""


class RecordingConnector(Connector):

    def __init__(self, autocommit=True, strict=False):
        super().__init__(recording_connection)
        self.autocommit = autocommit
        self.strict = strict
        self.fail_connect = False
        self.fail_begin = False
        self.fail_commit = False
        self.fail_rollback = False
        self.fail_restore_autocommit = False
        self.calls = []

    def connect(self, strict=None):
        return super().connect(strict=self.strict if strict is None else strict)

    def count(self, name):
        return sum(1 for call in self.calls if call == name or call[0] == name)

    def __repr__(self):
        return type(self).__name__ + '()'


# noinspection PyPep8Naming
class recording_connection(transactional_connection):

    driver_errors = (DriverError,)

    def __init__(self, connector, strict=False):
        super().__init__(connector, strict=strict)
        self.autocommit = None

    @property
    def handle(self):
        return self

    def _record(self, call):
        self._connector.calls.append(call)

    def _open_handle(self):
        self._record('connect')
        if self._connector.fail_connect:
            raise DriverError('connect')
        self.autocommit = self._connector.autocommit

    def _close_handle(self):
        self._record('close')

    def _get_autocommit(self):
        self._record('get_autocommit')
        return self.autocommit

    def _set_autocommit(self, autocommit):
        self._record(('set_autocommit', autocommit))
        if autocommit and self._connector.fail_restore_autocommit:
            raise DriverError('set_autocommit')
        self.autocommit = autocommit

    def _begin_transaction(self):
        self._record('begin')
        if self._connector.fail_begin:
            raise DriverError('begin')

    def _commit_transaction(self):
        self._record('commit')
        if self._connector.fail_commit:
            raise DriverError('commit')

    def _rollback_transaction(self):
        self._record('rollback')
        if self._connector.fail_rollback:
            raise DriverError('rollback')
