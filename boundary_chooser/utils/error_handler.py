"""
Error handling utilities for the boundary chooser.

This module provides helpers to attach context to failures and log them with
a level matching their severity.
"""

import logging
from datetime import datetime
from typing import Any, Dict

from ..exceptions import get_error_severity


def create_error_context(operation: str, **kwargs) -> Dict[str, Any]:
    """
    Create error context information.

    Args:
        operation: Name of the operation that failed
        **kwargs: Additional context values

    Returns:
        Dictionary containing error context
    """
    context = {
        'operation': operation,
        'timestamp': datetime.now().isoformat()
    }
    context.update(kwargs)
    return context


def log_error_details(logger: logging.Logger, error: Exception, context: Dict[str, Any]):
    """
    Log detailed error information.

    Args:
        logger: Logger instance
        error: Exception that occurred
        context: Context information
    """
    severity = get_error_severity(error)
    error_info = {
        'error_type': type(error).__name__,
        'message': str(error),
        'severity': severity,
        'context': context
    }

    if hasattr(error, 'to_dict'):
        error_info.update(error.to_dict())

    if severity == 'critical':
        logger.critical(f"Critical error: {error_info}")
    elif severity == 'high':
        logger.error(f"High severity error: {error_info}")
    elif severity == 'medium':
        logger.warning(f"Medium severity error: {error_info}")
    else:
        logger.info(f"Low severity error: {error_info}")
