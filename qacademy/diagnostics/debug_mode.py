"""Debug mode for the gate library.

While enabled, every unitary kernel compares the state norm before and after
it runs and raises if they differ by more than the debug tolerance.

Environment:
    QACADEMY_DEBUG       "1", "true", "yes" or "on" enables debug mode.
    QACADEMY_DEBUG_ATOL  Norm tolerance (default 1e-9).
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

_DEBUG_ENV_VAR = "QACADEMY_DEBUG"
_ATOL_ENV_VAR = "QACADEMY_DEBUG_ATOL"
_TRUTHY = ("1", "true", "yes", "on")

_debug_enabled: bool = os.getenv(_DEBUG_ENV_VAR, "0").strip().lower() in _TRUTHY
_norm_atol: float = float(os.getenv(_ATOL_ENV_VAR, "1e-9"))


def is_debug_enabled() -> bool:
    """Return whether norm checks run after each unitary gate."""
    return _debug_enabled


def set_debug_enabled(enabled: bool) -> None:
    global _debug_enabled
    _debug_enabled = bool(enabled)


def debug_norm_tolerance() -> float:
    """Absolute tolerance used by the debug-mode norm check."""
    return _norm_atol


@contextmanager
def debug_context(enabled: bool = True, atol: Optional[float] = None) -> Iterator[None]:
    """
    Temporarily enable or disable debug mode, optionally with a different
    norm tolerance. Both settings are restored on exit.

    Example
    -------
    >>> with debug_context(True, atol=1e-12):
    ...     circuit.execute()
    """
    global _debug_enabled, _norm_atol
    if atol is not None and atol < 0:
        raise ValueError(f"atol must be >= 0, got {atol}")

    prev_enabled, prev_atol = _debug_enabled, _norm_atol
    _debug_enabled = bool(enabled)
    if atol is not None:
        _norm_atol = float(atol)
    try:
        yield
    finally:
        _debug_enabled, _norm_atol = prev_enabled, prev_atol


__all__ = [
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_norm_tolerance",
    "debug_context",
]
