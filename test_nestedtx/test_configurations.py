import os
import shutil
import tempfile
import unittest

from nestedtx.configurations import ConfigManager, get_config_search_paths, load_config
from nestedtx.db.sqlite import SQLiteConnector, sqlite_connection
from nestedtx.exceptions import ConfigParameterNotFoundError, ConfigSectionNotFoundError, \
    InvalidConfigurationError, InvalidPluginError, PluginExistsError, PluginNotFoundError
from nestedtx.plugins import CONFIG_LOADERS, PluginGroup
from nestedtx.security.credentials import Credential
from nestedtx.strings import parse_bool, parse_number
from nestedtx.transactions import establish


CONFIG = {
    'Paths': {
        'Root': '/srv/data',
        'Database': '${Root}/orders.db',
        'Backup': '${Paths:Root}/backup',
        'Price': '$$5',
    },
    'Orders Database': {
        'Type': 'SQLiteConnector',
        'Path': ':memory:',
        'Autocommit': 'no',
        'Timeout': '2.5',
        'Strict Nesting': 'yes',
    },
    'Application': {
        'Database': '#Orders Database',
        'Verbose': 'on',
        'Retries': '3',
    },
}


class TestConfigManager(unittest.TestCase):

    def setUp(self):
        self.manager = ConfigManager(CONFIG)

    def testInterpolation(self):
        self.assertEqual(self.manager.get_option('Paths', 'Database'), '/srv/data/orders.db')
        self.assertEqual(self.manager.get_option('Paths', 'Backup'), '/srv/data/backup')
        self.assertEqual(self.manager.get_option('Paths', 'Price'), '$5')
        self.assertEqual(self.manager.get_option('Paths', 'Database', raw=True),
                         '${Root}/orders.db')

    def testMissing(self):
        with self.assertRaises(ConfigParameterNotFoundError):
            self.manager.get_option('Paths', 'Nowhere')
        with self.assertRaises(ConfigSectionNotFoundError):
            self.manager.get_option('Nowhere', 'Root')
        with self.assertRaises(ConfigSectionNotFoundError):
            self.manager.load_section('Nowhere')
        self.assertIsNone(self.manager.load_option('Paths', 'Nowhere', default=None))
        self.assertEqual(self.manager.load_section('Nowhere', default={}), {})

    def testLoadOptionWithLoader(self):
        self.assertIs(self.manager.load_option('Application', 'Verbose', 'bool'), True)
        self.assertEqual(self.manager.load_option('Application', 'Retries', 'number'), 3)
        self.assertEqual(self.manager.load_option('Application', 'Retries'), '3')

    def testLoadSectionByType(self):
        connector = self.manager.load_section('Orders Database')
        self.assertIsInstance(connector, SQLiteConnector)
        self.assertTrue(connector.memory_only)
        self.assertFalse(connector.autocommit)
        self.assertEqual(connector.timeout, 2.5)
        self.assertTrue(connector.strict)
        self.assertIs(self.manager.load_section('Orders Database'), connector)

    def testLoadSectionAsDict(self):
        self.assertEqual(self.manager.load_section('Paths', raw_dict_loader),
                         {'root', 'database', 'backup', 'price'})
        self.assertEqual(self.manager.load_section('Application')['retries'], '3')

    def testObjectReference(self):
        connector = self.manager.load_option('Application', 'Database')
        self.assertIsInstance(connector, SQLiteConnector)
        self.assertIs(self.manager.load_value('#Orders Database'), connector)
        self.assertEqual(self.manager.load_value('##literal'), '#literal')

    def testUnknownLoader(self):
        with self.assertRaises(PluginNotFoundError):
            self.manager.load_option('Application', 'Retries', 'no such loader')

    def testLoaders(self):
        self.assertIs(CONFIG_LOADERS['sqliteconnector'], SQLiteConnector)
        self.assertIs(CONFIG_LOADERS['Credential'], Credential)
        self.assertIs(CONFIG_LOADERS['bool'], parse_bool)
        self.assertIs(CONFIG_LOADERS['number'], parse_number)


def raw_dict_loader(content):
    return set(content)


class TestEstablishFromConfig(unittest.TestCase):

    def testEstablishBySectionName(self):
        manager = ConfigManager(CONFIG)
        connection = establish('Orders Database', manager=manager)
        try:
            self.assertIsInstance(connection, sqlite_connection)
            self.assertTrue(connection.is_open)
            self.assertTrue(connection.strict)
            self.assertIs(connection.natural_autocommit, False)
        finally:
            connection.close()

    def testEstablishStrictOverride(self):
        manager = ConfigManager(CONFIG)
        connection = establish('Orders Database', strict=False, manager=manager)
        try:
            self.assertFalse(connection.strict)
        finally:
            connection.close()


class TestConfigFiles(unittest.TestCase):

    def setUp(self):
        self.folder = tempfile.mkdtemp()
        with open(os.path.join(self.folder, 'orders.ini'), 'w') as config_file:
            config_file.write('[Orders]\nPath = :memory:\nTimeout = 1\n')
        with open(os.path.join(self.folder, 'orders.cfg'), 'w') as config_file:
            config_file.write('[Orders]\nTimeout = 5\nStrict Nesting = yes\n')

    def tearDown(self):
        shutil.rmtree(self.folder)

    def testSearchPaths(self):
        self.assertEqual(get_config_search_paths('orders', dirs=[self.folder, None]),
                         [os.path.join(self.folder, 'orders.ini'),
                          os.path.join(self.folder, 'orders.cfg')])
        self.assertEqual(get_config_search_paths('absent', dirs=[self.folder]), [])

    def testPrecedence(self):
        config = load_config('orders', dirs=[self.folder])
        # .ini takes precedence over .cfg
        self.assertEqual(config['Orders']['Timeout'], '1')
        self.assertEqual(config['Orders']['Strict Nesting'], 'yes')

    def testManagerFromPath(self):
        manager = ConfigManager(os.path.join(self.folder, 'orders.ini'))
        connector = manager.load_section('Orders', SQLiteConnector)
        self.assertEqual(connector.timeout, 1)
        self.assertFalse(connector.strict)

    def testManagerFromMissingPath(self):
        with self.assertRaises(InvalidConfigurationError):
            ConfigManager(os.path.join(self.folder, 'absent.ini'))


class TestStrings(unittest.TestCase):

    def testParseBool(self):
        self.assertIs(parse_bool('Yes'), True)
        self.assertIs(parse_bool(' off '), False)
        self.assertIs(parse_bool('', default=False), False)
        with self.assertRaises(ValueError):
            parse_bool('maybe')

    def testParseNumber(self):
        self.assertEqual(parse_number('2.5'), 2.5)
        self.assertEqual(parse_number('3'), 3)
        self.assertIsInstance(parse_number('3'), int)
        with self.assertRaises(ValueError):
            parse_number("'three'")


class TestPluginGroup(unittest.TestCase):

    def setUp(self):
        self.group = PluginGroup('nestedtx.test_plugins')

    def testRegister(self):
        self.group.register('Alpha', len)
        self.assertIs(self.group['alpha'], len)
        self.assertIn('ALPHA', self.group)
        self.assertEqual(list(self.group), ['Alpha'])
        self.group.register('alpha', len)  # Same value is fine
        with self.assertRaises(PluginExistsError):
            self.group.register('alpha', max)
        with self.assertRaises(PluginNotFoundError):
            self.group['beta']

    def testDecorator(self):
        @self.group.plugin
        def gamma():
            pass

        @self.group.plugin('Delta')
        def renamed():
            pass

        self.assertIs(self.group['gamma'], gamma)
        self.assertIs(self.group['delta'], renamed)

    def testNotCallable(self):
        with self.assertRaises(InvalidPluginError):
            self.group.register('constant', 42)

    def testLoadWithoutEntryPoints(self):
        self.group.load(warn=False)
        self.assertEqual(len(self.group), 0)


if __name__ == '__main__':
    unittest.main()
