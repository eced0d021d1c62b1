import os
import shutil
import tempfile
import unittest

from nestedtx.db.sqlite import SQLiteConnector, sqlite_connection
from nestedtx.exceptions import InvalidPathError, OperationNotSupportedError
from nestedtx.transactions import establish, transactional


@transactional
def adjust(connection, name, amount):
    connection.execute("UPDATE accounts SET balance = balance + ? WHERE name = ?", (amount, name))
    balance = next(connection.execute("SELECT balance FROM accounts WHERE name = ?", (name,)))[0]
    if balance < 0:
        raise ValueError("Insufficient funds: %s" % name)


@transactional
def transfer(connection, source, target, amount):
    adjust(connection, target, amount)
    adjust(connection, source, -amount)


def get_balances(connection):
    return dict(connection.execute("SELECT name, balance FROM accounts"))


class TestSQLiteInMemory(unittest.TestCase):

    autocommit = True

    def setUp(self):
        self.connector = SQLiteConnector(autocommit=self.autocommit)
        self.connection = establish(self.connector)
        self.connection.execute("CREATE TABLE accounts (name TEXT PRIMARY KEY, balance INTEGER)")
        self.connection.execute("INSERT INTO accounts VALUES ('checking', 100)")
        self.connection.execute("INSERT INTO accounts VALUES ('savings', 50)")
        if not self.autocommit:
            self.connection.handle.commit()

    def tearDown(self):
        self.connection.close()

    def testConnectionType(self):
        self.assertIsInstance(self.connection, sqlite_connection)
        self.assertTrue(self.connector.memory_only)
        self.assertEqual(str(self.connector), ':memory:')

    def testNaturalAutocommit(self):
        self.assertIs(self.connection.natural_autocommit, self.autocommit)

    def testTransferCommits(self):
        transfer(self.connection, 'checking', 'savings', 30)
        self.assertEqual(get_balances(self.connection), {'checking': 70, 'savings': 80})
        self.assertFalse(self.connection.handle.in_transaction)
        self.assertEqual(self.connection.depth, 0)

    def testFailedTransferRollsBack(self):
        with self.assertRaises(ValueError):
            transfer(self.connection, 'savings', 'checking', 500)
        self.assertEqual(get_balances(self.connection), {'checking': 100, 'savings': 50})
        self.assertFalse(self.connection.handle.in_transaction)
        self.assertEqual(self.connection.depth, 0)

    def testNestedRollbackDiscardsEverything(self):
        self.connection.begin()
        self.connection.execute("INSERT INTO accounts VALUES ('brokerage', 10)")
        self.connection.begin()
        self.connection.execute("DELETE FROM accounts WHERE name = 'checking'")
        self.connection.rollback()
        self.assertTrue(self.connection.handle.in_transaction)
        self.connection.rollback()
        self.assertEqual(get_balances(self.connection), {'checking': 100, 'savings': 50})

    def testAutocommitRestored(self):
        self.connection.transaction(lambda: None)
        if self.autocommit:
            self.assertIsNone(self.connection.handle.isolation_level)
        else:
            self.assertEqual(self.connection.handle.isolation_level, 'DEFERRED')

    def testExecuteReturnsRows(self):
        rows = list(self.connection.execute("SELECT name FROM accounts ORDER BY name"))
        self.assertEqual(rows, [('checking',), ('savings',)])

    def testCallNotSupported(self):
        with self.assertRaises(OperationNotSupportedError):
            self.connection.call('some_procedure', 1, 2)


class TestSQLiteWithoutAutocommit(TestSQLiteInMemory):

    autocommit = False


class TestSQLiteFile(unittest.TestCase):

    def setUp(self):
        self.folder = tempfile.mkdtemp()
        self.path = os.path.join(self.folder, 'accounts.db')
        self.connector = SQLiteConnector(self.path, timeout=1)
        with self.connector.connect() as connection:
            connection.execute("CREATE TABLE accounts (name TEXT PRIMARY KEY, balance INTEGER)")
            connection.execute("INSERT INTO accounts VALUES ('checking', 100)")

    def tearDown(self):
        shutil.rmtree(self.folder)

    def testChangesInvisibleUntilOutermostCommit(self):
        with self.connector.connect() as writer, self.connector.connect() as reader:
            writer.begin()
            writer.execute("INSERT INTO accounts VALUES ('savings', 50)")
            writer.begin()
            writer.execute("UPDATE accounts SET balance = 0 WHERE name = 'checking'")
            writer.commit()
            self.assertEqual(get_balances(reader), {'checking': 100})
            writer.commit()
            self.assertEqual(get_balances(reader), {'checking': 0, 'savings': 50})

    def testCloseRollsBackOpenTransaction(self):
        connection = establish(self.connector)
        connection.begin()
        connection.execute("DELETE FROM accounts")
        with self.assertLogs('nestedtx.abc.transactions', level='WARNING'):
            connection.close()
        with self.connector.connect() as connection:
            self.assertEqual(get_balances(connection), {'checking': 100})

    def testRepr(self):
        self.assertEqual(repr(self.connector), 'SQLiteConnector(%r)' % self.path)


class TestSQLiteConnector(unittest.TestCase):

    def testInvalidPath(self):
        folder = tempfile.mkdtemp()
        try:
            with self.assertRaises(InvalidPathError):
                SQLiteConnector(os.path.join(folder, 'missing', 'accounts.db'))
            with self.assertRaises(InvalidPathError):
                SQLiteConnector(folder)
        finally:
            shutil.rmtree(folder)

    def testStrictOverride(self):
        connector = SQLiteConnector(strict=True)
        self.assertTrue(connector.connect().strict)
        self.assertFalse(connector.connect(strict=False).strict)


if __name__ == '__main__':
    unittest.main()
