"""Heuristic error-correction layers."""

from .layers import (
    SYNDROME_FIDELITY_BOOST,
    ErrorCorrectionCode,
    ErrorCorrectionLayer,
    apply_error_correction,
)

__all__ = [
    "SYNDROME_FIDELITY_BOOST",
    "ErrorCorrectionCode",
    "ErrorCorrectionLayer",
    "apply_error_correction",
]
