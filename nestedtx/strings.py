"""
Parsers for the scalar option values in config files, registered as config loaders so a connector
can ask for them by name.
"""


from .exceptions import verify_type
from .plugins import config_loader


__author__ = 'Aaron Hosford'
__all__ = [
    'parse_bool',
    'parse_number',
]


TRUE_STRINGS = frozenset(['1', 'on', 't', 'true', 'y', 'yes'])
FALSE_STRINGS = frozenset(['0', 'off', 'f', 'false', 'n', 'no'])


@config_loader('bool')
def parse_bool(string, default=NotImplemented):
    """
    Interpret yes/no, true/false, on/off or 1/0, in any case, as a bool.

    :param string: The option value.
    :param default: Returned for an empty value. Without it, an empty value is an error.
    :return: The bool.
    """
    verify_type(string, str)
    word = string.strip().lower()
    if word in TRUE_STRINGS:
        return True
    if word in FALSE_STRINGS:
        return False
    if not word and default is not NotImplemented:
        return default
    raise ValueError("Not a Boolean value: %r" % string)


@config_loader('number')
def parse_number(string):
    """Parse an int, or failing that a float, e.g. a lock timeout in seconds."""
    verify_type(string, str, non_empty=True)
    try:
        return int(string)
    except ValueError:
        return float(string)
