"""
Boundary Chooser - hierarchical State/LGA/Ward boundary indexing.

This package loads administrative boundary feature collections, builds the
parent/child lookup indices used by the chooser UI, and reconciles an external
senatorial district table against the canonical LGA names.
"""

__version__ = "1.0.0"
__author__ = "Data Analytics Team"
