"""
Database login credentials, loadable from config files without storing passwords in the clear.
"""


import os


from ..abc.configurations import Configurable
from ..configurations import ConfigManager
from ..exceptions import PasswordRequiredError, verify_type
from ..plugins import config_loader
from . import encryption


__author__ = 'Aaron Hosford'
__all__ = [
    'Credential',
]


@config_loader
class Credential(Configurable):
    """
    A database user name and password, with the server (domain) they belong to if known.

    A config section names the user and domain directly. The password is never written there as is;
    the section gives either an Encrypted Password, made with nestedtx.security.encryption.encrypt()
    and unlocked by the master password, or a Password Variable naming the environment variable
    that holds it:

        [Warehouse Login]
        User = loader
        Domain = db.example.com
        Password Variable = WAREHOUSE_PASSWORD
    """

    @classmethod
    def load_config_value(cls, manager, value, *args, **kwargs):
        """
        Build a credential from a user@domain option value. Its password comes from the environment
        variable get_password_variable() names, e.g. DB_EXAMPLE_COM_LOADER_PASSWORD for
        loader@db.example.com.
        """
        verify_type(manager, ConfigManager)
        verify_type(value, str, non_empty=True)
        user, domain = value.split('@')
        password = os.environ.get(cls.get_password_variable(user, domain))
        return cls(*args, user=user or None, password=password, domain=domain or None, **kwargs)

    @classmethod
    def load_config_section(cls, manager, section, *args, **kwargs):
        verify_type(manager, ConfigManager)
        verify_type(section, str, non_empty=True)

        if manager.has_option(section, 'Password'):
            raise ValueError("Config section %r gives its password in the clear." % section)

        if manager.has_option(section, 'Encrypted Password'):
            token = manager.get_option(section, 'Encrypted Password', raw=True)
            variable = manager.load_option(section, 'Master Password Variable', default=None)
            master = os.environ.get(variable) if variable else None
            password = encryption.from_bytes(encryption.decrypt(token, master))
        elif manager.has_option(section, 'Password Variable'):
            variable = manager.load_option(section, 'Password Variable')
            if variable not in os.environ:
                raise PasswordRequiredError("Environment variable %s is not set." % variable)
            password = os.environ[variable]
        else:
            password = None

        return cls(
            *args,
            user=manager.load_option(section, 'User', default=None),
            password=password,
            domain=manager.load_option(section, 'Domain', default=None),
            **kwargs
        )

    @staticmethod
    def get_password_variable(user, domain):
        """The environment variable holding the password for user@domain."""
        name = '%s_%s_PASSWORD' % (domain, user)
        return ''.join(char if char.isalnum() else '_' for char in name).upper()

    def __init__(self, user, password, domain=None):
        super().__init__()
        verify_type(user, str, non_empty=True, allow_none=True)
        verify_type(password, str, allow_none=True)
        verify_type(domain, str, non_empty=True, allow_none=True)
        self._user = user
        self._password = password or None
        self._domain = domain

    @property
    def user(self):
        return self._user

    @property
    def password(self):
        return self._password

    @property
    def domain(self):
        return self._domain

    @property
    def is_complete(self):
        """Whether both a user and a password are known."""
        return self._user is not None and self._password is not None

    def __bool__(self):
        return self._user is not None or self._password is not None

    def __iter__(self):
        return iter((self._user, self._password, self._domain))

    def __eq__(self, other):
        if not isinstance(other, Credential):
            return NotImplemented
        return tuple(self) == tuple(other)

    def __hash__(self):
        return hash(tuple(self))

    # The password is left out of both string forms.

    def __str__(self):
        return '%s@%s' % (self._user, self._domain)

    def __repr__(self):
        return '%s(%r, <hidden>, %r)' % (type(self).__name__, self._user, self._domain)
