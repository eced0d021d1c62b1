"""
Security- and credential-related functionality.

Database passwords never appear in config files in plain text. A credential section either names an
environment variable that holds the password, or carries the password encrypted with a key derived
from the master password. The master password is passed in explicitly or read from the
NESTEDTX_MASTER_PASSWORD environment variable.
"""


from . import credentials, encryption


__author__ = 'Aaron Hosford'
__all__ = [
    'credentials',
    'encryption',
]
