"""
Interface definitions for nestedtx.

(ABC = Abstract Base Classes)
"""


from . import configurations, connections, sql, transactions


__author__ = 'Aaron Hosford'
