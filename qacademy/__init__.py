"""QAcademy - a PyTorch state-vector simulator for small teaching circuits."""

__version__ = "0.1.0"

# Backend operations
from .backend import (
    MAX_DENSE_QUBITS,
    from_amplitudes,
    probabilities,
    state_description,
    to_amplitudes,
    zero_state,
)

# Circuit orchestration
from .circuit import Circuit, CircuitStatus, ExecutionResult, StepSnapshot
from .core import Amplitude, Device, default_device, device

# Error correction
from .correction import ErrorCorrectionCode, ErrorCorrectionLayer, apply_error_correction

# Diagnostics
from .diagnostics import (
    assert_normalized,
    debug_context,
    is_debug_enabled,
    set_debug_enabled,
    state_norm,
)
from .errors import CircuitBusyError, ExecutionCancelled, InvalidQubitIndex, QAcademyError

# Gates
from .gates import Gate, GateType, apply_gate

# Bridge I/O
from .io import (
    SCHEMA_VERSION,
    BridgeResults,
    circuit_to_payload,
    dump_bridge_payload,
    load_bridge_payload,
    payload_to_circuit,
    payload_to_results,
    results_to_payload,
)
from .logging import configure_logging, get_logger, set_log_level

# Measurement
from .measurement import collapse, marginal_probability_zero, measure_qubit

# Noise
from .noise import NoiseEvent, NoiseModel, NoiseType, OperationMode, apply_noise

__all__ = [
    "__version__",
    # Backend
    "MAX_DENSE_QUBITS",
    "zero_state",
    "probabilities",
    "to_amplitudes",
    "from_amplitudes",
    "state_description",
    # Core
    "Amplitude",
    "Device",
    "device",
    "default_device",
    # Circuit
    "Circuit",
    "CircuitStatus",
    "ExecutionResult",
    "StepSnapshot",
    # Gates
    "Gate",
    "GateType",
    "apply_gate",
    # Measurement
    "marginal_probability_zero",
    "collapse",
    "measure_qubit",
    # Noise
    "OperationMode",
    "NoiseModel",
    "NoiseType",
    "NoiseEvent",
    "apply_noise",
    # Error correction
    "ErrorCorrectionCode",
    "ErrorCorrectionLayer",
    "apply_error_correction",
    # I/O
    "SCHEMA_VERSION",
    "BridgeResults",
    "circuit_to_payload",
    "payload_to_circuit",
    "dump_bridge_payload",
    "load_bridge_payload",
    "results_to_payload",
    "payload_to_results",
    # Errors
    "QAcademyError",
    "InvalidQubitIndex",
    "CircuitBusyError",
    "ExecutionCancelled",
    # Diagnostics
    "state_norm",
    "assert_normalized",
    "is_debug_enabled",
    "set_debug_enabled",
    "debug_context",
    # Logging
    "get_logger",
    "set_log_level",
    "configure_logging",
]
