"""
Hierarchy index module for the boundary chooser.

This module builds the State -> LGA -> Ward lookups and the senatorial
district index from loaded boundary data.
"""

from boundary_chooser.hierarchy.index_builder import HierarchicalIndexBuilder

__all__ = [
    'HierarchicalIndexBuilder'
]
