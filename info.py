"""
info.py
=======

Package metadata for setup.py, collected from the literal dunder assignments (__version__,
__author__, ...) in nestedtx/__init__.py. The file is parsed rather than imported, so building the
package does not require its dependencies to be installed.
"""

import ast
import os


name = 'nestedtx'

_init_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), name, '__init__.py')

with open(_init_path, encoding='utf-8') as _init_file:
    _tree = ast.parse(_init_file.read(), _init_path)

doc = ast.get_docstring(_tree)

dunders = {}
for _node in _tree.body:
    if isinstance(_node, ast.Assign) and len(_node.targets) == 1 \
            and isinstance(_node.targets[0], ast.Name):
        _target = _node.targets[0].id
        if _target.startswith('__') and _target.endswith('__'):
            try:
                dunders[_target] = ast.literal_eval(_node.value)
            except ValueError:
                pass  # Computed values, such as __long_description__ = __doc__


info = {
    'name': name,
    'version': dunders['__version__'],
    'author': dunders['__author__'],
    'author_email': dunders.get('__author_email__'),
    'description': dunders.get('__description__', doc),
    'long_description': doc,
    'license': dunders.get('__license__'),
    'install_requires': dunders.get('__install_requires__', []),
    'packages': dunders.get('__packages__', [name]),
    'package_data': dunders.get('__package_data__', {}),
    'entry_points': dunders.get('__entry_points__', {}),
    'python_requires': '>=3.10',
}
