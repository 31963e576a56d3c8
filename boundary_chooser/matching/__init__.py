"""
Name matching components.
"""

from .correction_table import CorrectionTable

__all__ = ['CorrectionTable']
