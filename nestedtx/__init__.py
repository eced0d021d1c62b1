"""
Nested transactions for database connections that only support one transaction at a time.
"""


from . import abc, db, exceptions, plugins, security
from . import configurations, strings, transactions

from .transactions import establish, transactional


__version__ = '1.0.0'

__author__ = 'Aaron Hosford'
__author_email__ = 'hosford42@gmail.com'
__description__ = 'nestedtx: Nested Transactions over Single-Transaction Database Connections'
__long_description__ = __doc__
__license__ = 'MIT (https://opensource.org/licenses/MIT)'
__install_requires__ = [
    # 3rd-party
    'cryptography',
]
__packages__ = [
    'nestedtx',
    'nestedtx.abc',
    'nestedtx.db',
    'nestedtx.security',
    'test_nestedtx',
]
__package_data__ = {}
__entry_points__ = {}


plugins.load_plugins()
