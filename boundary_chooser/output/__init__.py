"""
Report output components.
"""

from .report_generator import ReportGenerator

__all__ = ['ReportGenerator']
