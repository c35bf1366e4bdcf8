"""
Device Page Extractors
Positional extraction of numeric fields from the ONT web pages
"""

from .positional import FieldTable, extract_fields, parse_leading_float
from .pon_status import STATUS_TABLE, extract_status
from .pon_counters import COUNTERS_TABLE, extract_counters

__all__ = [
    'FieldTable',
    'extract_fields',
    'parse_leading_float',
    'STATUS_TABLE',
    'extract_status',
    'COUNTERS_TABLE',
    'extract_counters'
]
