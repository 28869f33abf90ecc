"""Timing primitives for coalescing follow-up searches."""

from .debouncer import Debouncer

__all__ = ['Debouncer']
