"""Measurement and collapse."""

from .collapse import collapse, marginal_probability_zero, measure_qubit

__all__ = ["marginal_probability_zero", "collapse", "measure_qubit"]
