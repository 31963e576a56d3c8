"""
Data utility functions for name normalization and null handling.

This module provides the name normalizer used as the join key between the
boundary datasets and the external district table, plus small helpers for
reading loosely-typed property bags.
"""

import re
from typing import Any, Iterable, Mapping, Optional

import pandas as pd


_SEPARATORS = re.compile(r'[-_/]')
_DISALLOWED = re.compile(r'[^a-z0-9 ]')
_WHITESPACE = re.compile(r'\s+')


def is_null_or_empty(value: Any) -> bool:
    """
    Check if a value is null, empty, or contains only whitespace.

    Args:
        value: Value to check

    Returns:
        True if value is null/empty, False otherwise
    """
    if value is None:
        return True

    if isinstance(value, str):
        return not value.strip()

    # pd.isna on containers returns an array, only scalars are null candidates
    if isinstance(value, (list, tuple, dict, set)):
        return False

    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def safe_string_conversion(value: Any) -> str:
    """
    Safely convert a value to string, handling nulls and cleaning whitespace.

    Args:
        value: Value to convert to string

    Returns:
        Cleaned string value or empty string if null
    """
    if is_null_or_empty(value):
        return ""

    return str(value).strip()


def normalize_name(raw: Any) -> str:
    """
    Normalize an administrative unit name for cross-dataset matching.

    Steps, in order: trim, lowercase, ``&`` to ``and``, hyphens/underscores/
    slashes to spaces, drop anything outside ``[a-z0-9 ]``, collapse whitespace.

    Args:
        raw: Name as it appears in a source dataset

    Returns:
        Normalized name, or empty string for null input

    Example:
        >>> normalize_name("Kano_Municipal!")
        'kano municipal'
    """
    if is_null_or_empty(raw):
        return ""

    name = str(raw).strip().lower()
    name = name.replace('&', 'and')
    name = _SEPARATORS.sub(' ', name)
    name = _DISALLOWED.sub('', name)
    name = _WHITESPACE.sub(' ', name)

    # Stripped characters can leave an edge space behind
    return name.strip()


def first_present(record: Mapping[str, Any], keys: Iterable[str]) -> Optional[str]:
    """
    Return the first non-empty value among several accepted key spellings.

    Args:
        record: Record to read from
        keys: Candidate keys in priority order

    Returns:
        Cleaned string value, or None if no key holds a value
    """
    for key in keys:
        if key in record and not is_null_or_empty(record[key]):
            return safe_string_conversion(record[key])
    return None
