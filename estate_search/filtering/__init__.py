"""
Filtering module for property searches.

This module holds the filter state, validates parsed filters against the
known filter values and reconciles filter removals with follow-up searches.
"""

from .filter_reconciler import FilterReconciler
from .filter_state import FilterDimension, FilterSetters, FilterState, apply_extracted_filters
from .filter_validator import FilterValidator

__all__ = [
    'FilterReconciler',
    'FilterDimension',
    'FilterSetters',
    'FilterState',
    'FilterValidator',
    'apply_extracted_filters',
]
