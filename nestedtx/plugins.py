"""
nestedtx.plugins
================

Registry of the config loaders a config file can refer to by name, e.g. in a section's Type
option. Loaders register themselves with the config_loader decorator. Other installed
distributions can contribute loaders through the 'nestedtx.config_loader' entry point group.
"""


import importlib.metadata
import warnings

from collections.abc import Mapping


from .exceptions import InvalidPluginError, PluginExistsError, PluginNotFoundError, verify_type


__author__ = 'Aaron Hosford'
__all__ = [
    'PluginGroup',
    'CONFIG_LOADERS',
    'load_plugins',
    'config_loader',
]


class PluginGroup(Mapping):
    """
    A read-only mapping from plugin names to plugins for one entry point group. Names are matched
    without regard to case, but iteration yields them as they were registered.
    """

    def __init__(self, name):
        verify_type(name, str, non_empty=True)
        self._name = name
        self._plugins = {}  # Lower-cased name -> (registered name, plugin)

    @property
    def name(self):
        """The entry point group name."""
        return self._name

    def load(self, warn=True):
        """
        Register every plugin that installed distributions declare for this group.

        :param warn: If True, a plugin that fails to import is reported as a warning and skipped.
            Otherwise the import error is raised.
        """
        for entry_point in importlib.metadata.entry_points(group=self._name):
            try:
                plugin = entry_point.load()
            except Exception as exc:
                if not warn:
                    raise
                warnings.warn("Could not load %s plugin %r: %s" %
                              (self._name, entry_point.name, exc))
                continue
            self.register(entry_point.name, plugin)

    def register(self, name, plugin):
        """
        Add a plugin under the given name. Registering the same plugin twice is harmless;
        registering a different one under a taken name raises PluginExistsError.
        """
        verify_type(name, str, non_empty=True)
        if not callable(plugin):
            raise InvalidPluginError("Plugin %r is not callable." % name)
        key = name.lower()
        if key in self._plugins and self._plugins[key][1] is not plugin:
            raise PluginExistsError(name)
        self._plugins[key] = (name, plugin)

    def plugin(self, name_or_plugin):
        """
        Decorator form of register(). Use it bare to register under the object's own name, or
        with a string argument to choose the name:

            @CONFIG_LOADERS.plugin
            class SQLiteConnector(...):
                ...

            @CONFIG_LOADERS.plugin('bool')
            def parse_bool(string):
                ...
        """
        if isinstance(name_or_plugin, str):
            def decorator(plugin):
                self.register(name_or_plugin, plugin)
                return plugin
            return decorator
        self.register(name_or_plugin.__name__, name_or_plugin)
        return name_or_plugin

    def __getitem__(self, name):
        if isinstance(name, str) and name.lower() in self._plugins:
            return self._plugins[name.lower()][1]
        raise PluginNotFoundError(name)

    def __iter__(self):
        return iter([name for name, _ in self._plugins.values()])

    def __len__(self):
        return len(self._plugins)


CONFIG_LOADERS = PluginGroup('nestedtx.config_loader')

config_loader = CONFIG_LOADERS.plugin


def load_plugins(warn=True):
    """Register the config loaders contributed by other installed distributions."""
    CONFIG_LOADERS.load(warn)
