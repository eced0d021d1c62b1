"""
nestedtx.configurations
=======================

Builds connectors and credentials from INI-style config files. A section says which registered
config loader builds it through its Type option:

    [Paths]
    Root = /srv/data

    [Orders Database]
    Type = SQLiteConnector
    Path = ${Paths:Root}/orders.db
    Strict Nesting = yes

Option values may refer to other options as ${section:option}, or as ${option} within the same
section, and $$ stands for a literal $. A value of the form #Section is replaced by the object built
from that section; ## escapes a leading # that should be kept.
"""


import configparser
import logging
import os
import re
import threading


from .exceptions import ConfigParameterNotFoundError, ConfigSectionNotFoundError, \
    InvalidConfigurationError, verify_type
from .plugins import CONFIG_LOADERS


__author__ = 'Aaron Hosford'
__all__ = [
    'get_config_search_paths',
    'load_config',
    'ConfigManager',
    'get_nestedtx_config_manager',
]


log = logging.getLogger(__name__)


CONFIG_NAME = 'nestedtx'
CONFIG_EXTENSIONS = ('.ini', '.cfg', '.conf')
CONFIG_DIR_VARIABLE = 'NESTEDTX_CONFIG'
DEFAULT_CONFIG_DIRS = (os.curdir, '~/.config/nestedtx', '/etc/nestedtx')

SECTION_REFERENCE = '#'
TYPE_OPTION = 'Type'

# Matches $$ (group 1 is '$') or ${reference} (group 2 is the reference).
_INTERPOLATION = re.compile(r'\$(\$|\{([^}]*)\})')

_default_manager = None
_default_manager_lock = threading.Lock()


def get_config_search_paths(name=CONFIG_NAME, dirs=None):
    """
    Return the paths of the existing config files with the given base name, highest precedence
    first. Unless dirs is given, the directory named by NESTEDTX_CONFIG is searched, then the
    working directory, ~/.config/nestedtx and /etc/nestedtx. Within a directory, .ini beats .cfg,
    which beats .conf.
    """
    if dirs is None:
        dirs = (os.environ.get(CONFIG_DIR_VARIABLE),) + DEFAULT_CONFIG_DIRS
    paths = []
    for folder in dirs:
        if not folder:
            continue
        folder = os.path.abspath(os.path.expanduser(folder))
        for extension in CONFIG_EXTENSIONS:
            path = os.path.join(folder, name + extension)
            if path not in paths and os.path.isfile(path):
                paths.append(path)
    return paths


def load_config(name=CONFIG_NAME, dirs=None):
    """
    Merge every config file found by get_config_search_paths() into one parser. Where two files set
    the same option, the one with the higher precedence wins.

    :return: A configparser.ConfigParser instance.
    """
    config = configparser.ConfigParser(interpolation=None)
    for path in reversed(get_config_search_paths(name, dirs)):
        config.read(path, encoding='utf-8')
        log.debug("Read config file %s.", path)
    return config


class ConfigManager:
    """
    Resolves option references in a parsed config and builds objects from it with the registered
    config loaders. Each object is built once per section (or option) and loader, and the same
    instance is returned on later requests.

    :param config: A ConfigParser, a dict mapping section names to option dicts, or the path of a
        config file.
    """

    def __init__(self, config):
        if isinstance(config, str):
            path = config
            config = configparser.ConfigParser(interpolation=None)
            if not config.read(path, encoding='utf-8'):
                raise InvalidConfigurationError("Config file not found: %s" % path)
        elif isinstance(config, dict):
            sections = config
            config = configparser.ConfigParser(interpolation=None)
            config.read_dict(sections)
        verify_type(config, configparser.ConfigParser)

        self._config = config
        self._built = {}
        self._lock = threading.RLock()

    def has_section(self, section):
        return self._config.has_section(section)

    def has_option(self, section, option):
        return self._config.has_option(section, option)

    def get_section(self, section):
        """Return a copy of a section's options, uninterpolated, keyed by lower-cased name."""
        if not self._config.has_section(section):
            raise ConfigSectionNotFoundError(section)
        return dict(self._config[section])

    def get_option(self, section, option, default=NotImplemented, raw=False):
        """
        Return the string value of an option.

        :param section: The section name.
        :param option: The option name. Option names are not case sensitive.
        :param default: Returned if the option is missing. Without it, a missing section or option
            raises ConfigSectionNotFoundError or ConfigParameterNotFoundError.
        :param raw: If True, references in the value are left unresolved.
        :return: The value, or the default.
        """
        verify_type(section, str, non_empty=True)
        verify_type(option, str, non_empty=True)
        if not self._config.has_option(section, option):
            if default is not NotImplemented:
                return default
            if not self._config.has_section(section):
                raise ConfigSectionNotFoundError(section)
            raise ConfigParameterNotFoundError(section, option)
        value = self._config.get(section, option)
        return value if raw else self.interpolate(value, section)

    def interpolate(self, value, section):
        """Resolve the ${...} references and $$ escapes in a value read from the given section."""
        verify_type(value, str)

        def resolve(match):
            if match.group(1) == '$':
                return '$'
            reference = match.group(2)
            if ':' in reference:
                target_section, option = reference.split(':', 1)
            else:
                target_section, option = section, reference
            return self.get_option(target_section, option)

        return _INTERPOLATION.sub(resolve, value)

    def load_value(self, value, loader=None):
        """
        Build an object from a string. A #Section value builds that section instead.

        :param value: The string.
        :param loader: A loader name, a Configurable subclass, or any callable accepting the string.
            By default the string is returned as is.
        :return: The object.
        """
        verify_type(value, str)
        if value.startswith(SECTION_REFERENCE):
            value = value[1:]
            if not value.startswith(SECTION_REFERENCE):
                return self.load_section(value, loader)
        loader = self._resolve_loader(loader)
        if hasattr(loader, 'load_config_value'):
            return loader.load_config_value(self, value)
        return loader(value)

    def load_option(self, section, option, loader=None, default=NotImplemented):
        """
        Build an object from an option's value, as load_value() does.

        :param default: Returned, unbuilt, if the option is missing.
        """
        try:
            value = self.get_option(section, option)
        except KeyError:
            if default is NotImplemented:
                raise
            return default
        return self._build((section, option.lower(), loader),
                           lambda: self.load_value(value, loader))

    def load_section(self, section, loader=None, default=NotImplemented):
        """
        Build an object from a whole section. If no loader is given, the section's Type option
        names one. If there is none either, the section's options are returned as a dict.

        :param default: Returned, unbuilt, if the section is missing.
        """
        verify_type(section, str, non_empty=True)
        if not self._config.has_section(section):
            if default is NotImplemented:
                raise ConfigSectionNotFoundError(section)
            return default
        if loader is None:
            loader = self._config.get(section, TYPE_OPTION, fallback=None) or dict
        loader = self._resolve_loader(loader)

        def build():
            log.debug("Building %r from config section %r.", loader, section)
            if hasattr(loader, 'load_config_section'):
                return loader.load_config_section(self, section)
            return loader(self.get_section(section))

        return self._build((section, None, loader), build)

    @staticmethod
    def _resolve_loader(loader):
        if loader is None:
            return str
        if isinstance(loader, str):
            return CONFIG_LOADERS[loader]
        return loader

    def _build(self, key, build):
        with self._lock:
            if key not in self._built:
                self._built[key] = build()
            return self._built[key]


def get_nestedtx_config_manager(refresh=False):
    """
    Return the process-wide ConfigManager for the nestedtx config files found on the search path.
    The files are read on first use, and again whenever refresh is True.
    """
    global _default_manager
    with _default_manager_lock:
        if refresh or _default_manager is None:
            _default_manager = ConfigManager(load_config())
        return _default_manager
