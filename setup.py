"""
setup.py
========

Setup script for the nestedtx package. The metadata itself lives in info.py.
"""

import os
import sys

from setuptools import setup


_here = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, _here)

import info  # noqa: E402

setup(**info.info)
