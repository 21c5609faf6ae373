"""Bridge wire schema definition and validation.

Two records cross the hardware bridge. The circuit payload is sent:

    {
        "name": <string>,
        "qubitCount": <integer >= 1>,
        "gates": [
            {
                "type": <string>,            # "H", "X", ..., "CCX", "M"
                "targetQubit": <integer>,
                "controlQubit": <integer>,   # optional
                "controlQubit2": <integer>,  # optional, Toffoli only
            },
            ...
        ],
        "operationMode": <string>,           # "Standard", "Continuous", ...
        "noiseModel": {
            "dephasingRate": <number>,
            "relaxationRate": <number>,
            "gateErrorRate": <number>,
            "measurementError": <number>,
            "atomLossRate": <number>,
            "continuousOperationCorrection": <number>,
        },
        "errorCorrectionLayers": [
            {"name", "code", "syndromeQubits", "dataQubits", "threshold"},
            ...
        ],
        "version": "1.0.0",
        "timestamp": <ISO-8601 string>
    }

and the results record comes back:

    {
        "measurements": {"<qubit>": {"<bit>": <count>}},
        "finalStateVector": [{"real": <number>, "imaginary": <number>}],  # optional
        "fidelity": <number>,
        "executionTimeMs": <number>,
        "noiseEvents": [{"timestamp", "qubit", "type", "magnitude"}],
        "atomReplenishments": <integer>,
        "coherenceTimeSeconds": <number>
    }

Qubit ordering is little-endian throughout: qubit 0 is the least
significant bit of a basis index.
"""

from __future__ import annotations

from typing import Any

NOISE_MODEL_KEYS = (
    "dephasingRate",
    "relaxationRate",
    "gateErrorRate",
    "measurementError",
    "atomLossRate",
    "continuousOperationCorrection",
)

LAYER_KEYS = ("name", "code", "syndromeQubits", "dataQubits", "threshold")


def bridge_payload_schema() -> dict:
    """
    Return a structural description of the bridge records.

    This is not a JSON Schema document; it lists fields, types and whether
    they are required, in the same shape for both records.
    """
    number = {"type": "number", "required": True}
    return {
        "circuit": {
            "name": {"type": "string", "required": True},
            "qubitCount": {"type": "integer", "required": True, "min": 1},
            "gates": {
                "type": "list",
                "required": True,
                "items": {
                    "type": {"type": "string", "required": True},
                    "targetQubit": {"type": "integer", "required": True, "min": 0},
                    "controlQubit": {"type": "integer", "required": False, "min": 0},
                    "controlQubit2": {"type": "integer", "required": False, "min": 0},
                },
            },
            "operationMode": {"type": "string", "required": True},
            "noiseModel": {
                "type": "dict",
                "required": True,
                "items": {key: dict(number, min=0, max=1) for key in NOISE_MODEL_KEYS},
            },
            "errorCorrectionLayers": {
                "type": "list",
                "required": False,
                "items": {
                    "name": {"type": "string", "required": True},
                    "code": {"type": "string", "required": True},
                    "syndromeQubits": {"type": "integer", "required": True, "min": 0},
                    "dataQubits": {"type": "integer", "required": True, "min": 0},
                    "threshold": dict(number, min=0, max=1),
                },
            },
            "version": {"type": "string", "required": True},
            "timestamp": {"type": "string", "required": False},
        },
        "results": {
            "measurements": {"type": "dict", "required": True},
            "finalStateVector": {
                "type": "list",
                "required": False,
                "items": {"real": number, "imaginary": number},
            },
            "fidelity": number,
            "executionTimeMs": number,
            "noiseEvents": {
                "type": "list",
                "required": True,
                "items": {
                    "timestamp": number,
                    "qubit": {"type": "integer", "required": True, "min": 0},
                    "type": {"type": "string", "required": True},
                    "magnitude": number,
                },
            },
            "atomReplenishments": {"type": "integer", "required": True, "min": 0},
            "coherenceTimeSeconds": number,
        },
    }


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require(obj: dict, key: str, where: str) -> Any:
    if key not in obj:
        raise ValueError(f"{where} missing required field '{key}'.")
    return obj[key]


def _check_qubit_field(gate: dict, key: str, n_qubits: int, i: int) -> None:
    q = gate[key]
    if not _is_int(q):
        raise ValueError(
            f"Gate at index {i}: field '{key}' must be an integer, got {type(q).__name__}."
        )
    if q < 0 or q >= n_qubits:
        raise ValueError(
            f"Gate at index {i}: {key} = {q} is out of range [0, {n_qubits})."
        )


def validate_bridge_payload(obj: dict) -> None:
    """
    Validate a circuit payload's structure.

    Checks required fields, types and index ranges. Gate names, operation
    modes and code labels are resolved later by the decoder, which raises
    ValueError for unknown values.

    Raises
    ------
    ValueError
        If the object does not conform to the circuit record layout.
    """
    if not isinstance(obj, dict):
        raise ValueError("Bridge payload must be a dictionary object.")

    where = "Bridge payload"
    version = _require(obj, "version", where)
    if not isinstance(version, str):
        raise ValueError("Field 'version' must be a string.")

    if not isinstance(_require(obj, "name", where), str):
        raise ValueError("Field 'name' must be a string.")

    n_qubits = _require(obj, "qubitCount", where)
    if not _is_int(n_qubits):
        raise ValueError("Field 'qubitCount' must be an integer.")
    if n_qubits < 1:
        raise ValueError(f"Field 'qubitCount' must be >= 1, got {n_qubits}.")

    if not isinstance(_require(obj, "operationMode", where), str):
        raise ValueError("Field 'operationMode' must be a string.")

    gates = _require(obj, "gates", where)
    if not isinstance(gates, list):
        raise ValueError("Field 'gates' must be a list.")
    for i, gate in enumerate(gates):
        if not isinstance(gate, dict):
            raise ValueError(f"Gate at index {i} must be a dictionary object.")
        if not isinstance(_require(gate, "type", f"Gate at index {i}"), str):
            raise ValueError(f"Gate at index {i}: field 'type' must be a string.")
        _require(gate, "targetQubit", f"Gate at index {i}")
        for key in ("targetQubit", "controlQubit", "controlQubit2"):
            if gate.get(key) is not None:
                _check_qubit_field(gate, key, n_qubits, i)

    noise = _require(obj, "noiseModel", where)
    if not isinstance(noise, dict):
        raise ValueError("Field 'noiseModel' must be a dictionary object.")
    for key in NOISE_MODEL_KEYS:
        value = _require(noise, key, "Field 'noiseModel'")
        if not _is_number(value):
            raise ValueError(f"noiseModel.{key} must be a number.")

    layers = obj.get("errorCorrectionLayers", [])
    if not isinstance(layers, list):
        raise ValueError("Field 'errorCorrectionLayers' must be a list.")
    for i, layer in enumerate(layers):
        if not isinstance(layer, dict):
            raise ValueError(f"Error correction layer at index {i} must be a dictionary object.")
        for key in LAYER_KEYS:
            _require(layer, key, f"Error correction layer at index {i}")
        for key in ("syndromeQubits", "dataQubits"):
            if not _is_int(layer[key]):
                raise ValueError(
                    f"Error correction layer at index {i}: field '{key}' must be an integer."
                )
        if not _is_number(layer["threshold"]):
            raise ValueError(
                f"Error correction layer at index {i}: field 'threshold' must be a number."
            )

    timestamp = obj.get("timestamp")
    if timestamp is not None and not isinstance(timestamp, str):
        raise ValueError("Field 'timestamp' must be a string.")


def validate_results_payload(obj: dict) -> None:
    """
    Validate a results record returned by the bridge.

    Raises
    ------
    ValueError
        If the object does not conform to the results record layout.
    """
    if not isinstance(obj, dict):
        raise ValueError("Results payload must be a dictionary object.")

    where = "Results payload"
    measurements = _require(obj, "measurements", where)
    if not isinstance(measurements, dict):
        raise ValueError("Field 'measurements' must be a dictionary object.")
    for qubit, counts in measurements.items():
        if not isinstance(counts, dict):
            raise ValueError(f"measurements[{qubit!r}] must be a dictionary object.")
        for bit, count in counts.items():
            if str(bit) not in ("0", "1"):
                raise ValueError(f"measurements[{qubit!r}] has invalid outcome {bit!r}.")
            if not _is_int(count) or count < 0:
                raise ValueError(
                    f"measurements[{qubit!r}][{bit!r}] must be a non-negative integer."
                )

    for key in ("fidelity", "executionTimeMs", "coherenceTimeSeconds"):
        if not _is_number(_require(obj, key, where)):
            raise ValueError(f"Field '{key}' must be a number.")

    replenishments = _require(obj, "atomReplenishments", where)
    if not _is_int(replenishments) or replenishments < 0:
        raise ValueError("Field 'atomReplenishments' must be a non-negative integer.")

    events = _require(obj, "noiseEvents", where)
    if not isinstance(events, list):
        raise ValueError("Field 'noiseEvents' must be a list.")
    for i, event in enumerate(events):
        if not isinstance(event, dict):
            raise ValueError(f"Noise event at index {i} must be a dictionary object.")
        for key in ("timestamp", "qubit", "type", "magnitude"):
            _require(event, key, f"Noise event at index {i}")
        if not _is_int(event["qubit"]):
            raise ValueError(f"Noise event at index {i}: field 'qubit' must be an integer.")

    vector = obj.get("finalStateVector")
    if vector is not None:
        if not isinstance(vector, list):
            raise ValueError("Field 'finalStateVector' must be a list.")
        for i, amp in enumerate(vector):
            if not isinstance(amp, dict):
                raise ValueError(f"finalStateVector[{i}] must be a dictionary object.")
            for key in ("real", "imaginary"):
                if not _is_number(_require(amp, key, f"finalStateVector[{i}]")):
                    raise ValueError(f"finalStateVector[{i}].{key} must be a number.")


__all__ = [
    "NOISE_MODEL_KEYS",
    "LAYER_KEYS",
    "bridge_payload_schema",
    "validate_bridge_payload",
    "validate_results_payload",
]
