"""
nestedtx.security.encryption
============================

Symmetric encryption of database passwords with Fernet tokens, so config files only ever hold
ciphertext. The key is derived from a master password, passed in or read from the
NESTEDTX_MASTER_PASSWORD environment variable.

Example:
    token = encrypt('hunter2', 'master password')
    assert from_bytes(decrypt(token, 'master password')) == 'hunter2'
"""


import base64
import hashlib
import os


from cryptography.fernet import Fernet, InvalidToken

from ..exceptions import DecryptionError, EncryptionError, PasswordRequiredError


__author__ = 'Aaron Hosford'
__all__ = [
    'MASTER_PASSWORD_VARIABLE',
    'to_bytes',
    'from_bytes',
    'get_master_password',
    'get_encryption_key',
    'encrypt',
    'decrypt',
]


MASTER_PASSWORD_VARIABLE = 'NESTEDTX_MASTER_PASSWORD'


def to_bytes(data):
    """UTF-8 encode a str. Anything else is passed to bytes()."""
    return data.encode('utf-8') if isinstance(data, str) else bytes(data)


def from_bytes(data):
    """UTF-8 decode bytes. A str is returned unchanged."""
    return data if isinstance(data, str) else bytes(data).decode('utf-8')


def get_master_password(password=None):
    """
    Return the given master password, or the one in the NESTEDTX_MASTER_PASSWORD environment
    variable if none is given. Raises PasswordRequiredError if neither is available.
    """
    password = password or os.environ.get(MASTER_PASSWORD_VARIABLE)
    if not password:
        raise PasswordRequiredError("No master password given and %s is not set." %
                                    MASTER_PASSWORD_VARIABLE)
    return password


def get_encryption_key(password):
    """Derive a Fernet key (the URL-safe base64 form of a SHA-256 digest) from a password."""
    return base64.urlsafe_b64encode(hashlib.sha256(to_bytes(password)).digest())


def _get_fernet(password):
    return Fernet(get_encryption_key(get_master_password(password)))


def encrypt(data, password=None):
    """
    Encrypt a str or bytes value.

    :param data: The plain text.
    :param password: The master password, if not taken from the environment.
    :return: The Fernet token, as bytes.
    """
    fernet = _get_fernet(password)
    try:
        return fernet.encrypt(to_bytes(data))
    except (TypeError, ValueError) as exc:
        raise EncryptionError("Could not encrypt the data.") from exc


def decrypt(data, password=None):
    """
    Decrypt a Fernet token made by encrypt(). The plain text is returned as bytes; pass it to
    from_bytes() for a str. A token made with a different master password raises DecryptionError.
    """
    fernet = _get_fernet(password)
    try:
        return fernet.decrypt(to_bytes(data))
    except InvalidToken as exc:
        raise DecryptionError("Could not decrypt the data.") from exc
