"""
nestedtx.db
===========

Database drivers
"""


from . import dbapi
from . import sqlite


__author__ = 'Aaron Hosford'
__all__ = [
    'dbapi',
    'sqlite',
]
