"""Hardware-bridge wire format for circuits and execution results.

Circuits go out as the camelCase payload described in schema.py and
results come back in the matching results record. ``SCHEMA_VERSION`` is
stamped on every exported circuit; payloads with a different major
version are rejected.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple

import torch

from ..backend.statevector import from_amplitudes
from ..circuit import Circuit, ExecutionResult
from ..core.amplitude import Amplitude
from ..correction.layers import ErrorCorrectionLayer
from ..logging import get_logger
from ..noise.model import NoiseEvent, NoiseModel, NoiseType, OperationMode
from .schema import validate_bridge_payload, validate_results_payload

logger = get_logger(__name__)

SCHEMA_VERSION = "1.0.0"


def _timestamp(value: Any = None) -> str:
    if value is None:
        value = datetime.now(timezone.utc)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
    return str(value)


def _noise_model_to_payload(model: NoiseModel) -> Dict[str, float]:
    return {
        "dephasingRate": model.dephasing_rate,
        "relaxationRate": model.relaxation_rate,
        "gateErrorRate": model.gate_error_rate,
        "measurementError": model.measurement_error,
        "atomLossRate": model.atom_loss_rate,
        "continuousOperationCorrection": model.continuous_operation_correction,
    }


def _noise_model_from_payload(obj: Mapping[str, Any]) -> NoiseModel:
    return NoiseModel(
        dephasing_rate=float(obj["dephasingRate"]),
        relaxation_rate=float(obj["relaxationRate"]),
        gate_error_rate=float(obj["gateErrorRate"]),
        measurement_error=float(obj["measurementError"]),
        atom_loss_rate=float(obj["atomLossRate"]),
        continuous_operation_correction=float(obj["continuousOperationCorrection"]),
    )


def circuit_to_payload(circuit: Circuit, timestamp: Any = None) -> Dict[str, Any]:
    """
    Convert a Circuit's definition to the bridge payload.

    Only the definition is exported: gates, mode, noise model and layers.
    State, measurements and metrics are not part of the payload.

    Parameters
    ----------
    circuit : Circuit
        Circuit to convert.
    timestamp : datetime or str, optional
        Export time. Defaults to now; datetimes are written as ISO-8601 UTC.

    Returns
    -------
    dict
        JSON-serializable payload.
    """
    gates = []
    for gate in circuit.gates:
        gate_obj: Dict[str, Any] = {
            "type": gate.type.value,
            "targetQubit": gate.target_qubit,
        }
        if gate.control_qubit is not None:
            gate_obj["controlQubit"] = gate.control_qubit
        if gate.control_qubit2 is not None:
            gate_obj["controlQubit2"] = gate.control_qubit2
        gates.append(gate_obj)

    layers = [
        {
            "name": layer.name,
            "code": layer.code.value,
            "syndromeQubits": layer.syndrome_qubits,
            "dataQubits": layer.data_qubits,
            "threshold": layer.threshold,
        }
        for layer in circuit.error_correction_layers
    ]

    return {
        "name": circuit.name,
        "qubitCount": circuit.qubit_count,
        "gates": gates,
        "operationMode": circuit.operation_mode.value,
        "noiseModel": _noise_model_to_payload(circuit.noise_model),
        "errorCorrectionLayers": layers,
        "version": SCHEMA_VERSION,
        "timestamp": _timestamp(timestamp),
    }


def payload_to_circuit(
    obj: dict, generator: Optional[torch.Generator] = None
) -> Circuit:
    """
    Rebuild an idle Circuit from a bridge payload.

    Parameters
    ----------
    obj : dict
        Payload following the circuit record layout.
    generator : torch.Generator, optional
        Random source for the new circuit.

    Raises
    ------
    ValueError
        If the payload is malformed, has an unsupported major version, or
        names an unknown gate, mode or code. Index errors surface as
        InvalidQubitIndex.
    """
    validate_bridge_payload(obj)

    major = obj["version"].split(".")[0]
    if major != SCHEMA_VERSION.split(".")[0]:
        raise ValueError(
            f"Unsupported payload version {obj['version']!r}; "
            f"expected {SCHEMA_VERSION}."
        )

    layers = [
        ErrorCorrectionLayer(
            name=layer["name"],
            code=layer["code"],
            syndrome_qubits=layer["syndromeQubits"],
            data_qubits=layer["dataQubits"],
            threshold=float(layer["threshold"]),
        )
        for layer in obj.get("errorCorrectionLayers", [])
    ]

    circuit = Circuit(
        obj["qubitCount"],
        OperationMode.parse(obj["operationMode"]),
        name=obj["name"],
        noise_model=_noise_model_from_payload(obj["noiseModel"]),
        error_correction_layers=layers,
        generator=generator,
    )
    for gate in obj["gates"]:
        circuit.add_gate(
            gate["type"],
            gate["targetQubit"],
            gate.get("controlQubit"),
            gate.get("controlQubit2"),
        )

    logger.debug(
        "decoded payload %r: %d qubit(s), %d gate(s)",
        circuit.name,
        circuit.qubit_count,
        len(circuit),
    )
    return circuit


def dump_bridge_payload(circuit: Circuit, path: str) -> None:
    """Write a circuit's bridge payload to a JSON file."""
    obj = circuit_to_payload(circuit)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2, ensure_ascii=False)


def load_bridge_payload(
    path: str, generator: Optional[torch.Generator] = None
) -> Circuit:
    """
    Load a Circuit from a bridge payload file.

    Raises
    ------
    ValueError
        If the file is not valid JSON or not a valid payload.
    FileNotFoundError
        If the file does not exist.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Bridge payload file not found: {path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in file {path}: {e}")

    return payload_to_circuit(obj, generator=generator)


@dataclass(frozen=True)
class BridgeResults:
    """
    Decoded results record.

    ``measurements`` maps qubit -> {bit: count}. ``final_state_vector`` is
    None when the bridge did not return one.
    """

    measurements: Dict[int, Dict[int, int]]
    final_state_vector: Optional[Tuple[Amplitude, ...]]
    fidelity: float
    execution_time_ms: float
    noise_events: Tuple[NoiseEvent, ...]
    atom_replenishments: int
    coherence_time_seconds: float

    def final_state(self) -> Optional[torch.Tensor]:
        """The final state as a complex tensor, or None."""
        if self.final_state_vector is None:
            return None
        return from_amplitudes(self.final_state_vector)


def results_to_payload(result: ExecutionResult, shots: int = 100) -> Dict[str, Any]:
    """
    Encode an ExecutionResult as a bridge results record.

    Each measured qubit reports its recorded outcome with all ``shots``
    counts; the simulator does not resample.
    """
    if shots < 1:
        raise ValueError(f"shots must be >= 1, got {shots}")

    measurements = {
        str(qubit): {str(bit): shots}
        for qubit, bit in sorted(result.measurement_results.items())
    }
    vector = [
        {"real": amp.real, "imaginary": amp.imaginary}
        for amp in (Amplitude.from_complex(v) for v in result.state.detach().cpu().tolist())
    ]
    events = [
        {
            "timestamp": event.timestamp,
            "qubit": event.qubit,
            "type": event.type.value,
            "magnitude": event.magnitude,
        }
        for event in result.noise_events
    ]
    return {
        "measurements": measurements,
        "finalStateVector": vector,
        "fidelity": result.fidelity,
        "executionTimeMs": result.execution_time * 1000.0,
        "noiseEvents": events,
        "atomReplenishments": result.atom_replenishment_count,
        "coherenceTimeSeconds": result.coherence_time,
    }


def payload_to_results(obj: dict) -> BridgeResults:
    """
    Decode a results record.

    Raises
    ------
    ValueError
        If the record is malformed or names an unknown noise type.
    """
    validate_results_payload(obj)

    measurements = {
        int(qubit): {int(bit): int(count) for bit, count in counts.items()}
        for qubit, counts in obj["measurements"].items()
    }

    vector = obj.get("finalStateVector")
    amplitudes = None
    if vector is not None:
        amplitudes = tuple(
            Amplitude(float(a["real"]), float(a["imaginary"])) for a in vector
        )

    events = tuple(
        NoiseEvent(
            qubit=int(e["qubit"]),
            type=NoiseType(e["type"]),
            magnitude=float(e["magnitude"]),
            timestamp=float(e["timestamp"]),
        )
        for e in obj["noiseEvents"]
    )

    return BridgeResults(
        measurements=measurements,
        final_state_vector=amplitudes,
        fidelity=float(obj["fidelity"]),
        execution_time_ms=float(obj["executionTimeMs"]),
        noise_events=events,
        atom_replenishments=int(obj["atomReplenishments"]),
        coherence_time_seconds=float(obj["coherenceTimeSeconds"]),
    )


__all__ = [
    "SCHEMA_VERSION",
    "BridgeResults",
    "circuit_to_payload",
    "payload_to_circuit",
    "dump_bridge_payload",
    "load_bridge_payload",
    "results_to_payload",
    "payload_to_results",
]
