"""
Interface for objects a ConfigManager can build.
"""


from abc import ABCMeta, abstractmethod


from ..exceptions import OperationNotSupportedError


__author__ = 'Aaron Hosford'
__all__ = [
    "Configurable",
]


class Configurable(metaclass=ABCMeta):
    """
    Base class for types that can be described in a config file. Once registered with
    nestedtx.plugins.config_loader, a subclass can be named in a section's Type option.
    """

    @classmethod
    def load_config_value(cls, manager, value, *args, **kwargs):
        """
        Build an instance from a single option value. Types that need a whole section to describe
        them leave this unsupported.
        """
        raise OperationNotSupportedError("%s cannot be built from a single value." % cls.__name__)

    @classmethod
    @abstractmethod
    def load_config_section(cls, manager, section, *args, **kwargs):
        """
        Build an instance from the options of a config section.

        :param manager: The nestedtx.configurations.ConfigManager doing the loading.
        :param section: The section name.
        :return: The new instance.
        """
        raise NotImplementedError()
