"""Circuit orchestration."""

from .core import Circuit
from .results import CircuitStatus, ExecutionResult, StepSnapshot

__all__ = ["Circuit", "CircuitStatus", "ExecutionResult", "StepSnapshot"]
