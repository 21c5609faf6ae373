"""Diagnostics and debugging utilities for qacademy."""

from .core import assert_normalized, state_norm, state_overlap_fidelity
from .debug_mode import (
    debug_context,
    debug_norm_tolerance,
    is_debug_enabled,
    set_debug_enabled,
)

__all__ = [
    "state_norm",
    "assert_normalized",
    "state_overlap_fidelity",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_norm_tolerance",
    "debug_context",
]
