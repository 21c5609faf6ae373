"""Tests for the hardware-bridge wire format."""

from __future__ import annotations

import copy
import json
import os
import tempfile
from datetime import datetime, timezone

import pytest
import torch

from qacademy.circuit import Circuit
from qacademy.correction import ErrorCorrectionLayer
from qacademy.errors import InvalidQubitIndex
from qacademy.io import (
    SCHEMA_VERSION,
    bridge_payload_schema,
    circuit_to_payload,
    dump_bridge_payload,
    load_bridge_payload,
    payload_to_circuit,
    payload_to_results,
    results_to_payload,
    validate_bridge_payload,
)
from qacademy.noise import NoiseModel, NoiseType, OperationMode


def sample_circuit() -> Circuit:
    circuit = Circuit(
        3,
        OperationMode.FAULT_TOLERANT,
        name="GHZ",
        error_correction_layers=[ErrorCorrectionLayer("inner", "Steane [[7,1,3]]", 6, 7, 0.02)],
        seed=9,
    )
    circuit.add_gate("H", 0)
    circuit.add_gate("CNOT", 1, control=0)
    circuit.add_gate("CCX", 2, control=0, control2=1)
    circuit.add_gate("SWAP", 0, control=2)
    circuit.add_gate("M", 2)
    return circuit


class TestCircuitPayload:
    def test_layout(self) -> None:
        stamp = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        payload = circuit_to_payload(sample_circuit(), timestamp=stamp)

        assert payload["version"] == SCHEMA_VERSION == "1.0.0"
        assert payload["timestamp"] == "2026-01-02T03:04:05Z"
        assert payload["name"] == "GHZ"
        assert payload["qubitCount"] == 3
        assert payload["operationMode"] == "Fault-Tolerant"
        assert payload["gates"][0] == {"type": "H", "targetQubit": 0}
        assert payload["gates"][2] == {
            "type": "CCX",
            "targetQubit": 2,
            "controlQubit": 0,
            "controlQubit2": 1,
        }
        assert payload["noiseModel"]["continuousOperationCorrection"] == 0.98
        assert payload["errorCorrectionLayers"] == [
            {
                "name": "inner",
                "code": "Steane [[7,1,3]]",
                "syndromeQubits": 6,
                "dataQubits": 7,
                "threshold": 0.02,
            }
        ]
        json.dumps(payload)

    def test_default_timestamp_is_utc_iso(self) -> None:
        payload = circuit_to_payload(Circuit(1))
        parsed = datetime.fromisoformat(payload["timestamp"].replace("Z", "+00:00"))
        assert parsed.tzinfo is not None

    def test_round_trip(self) -> None:
        original = sample_circuit()
        rebuilt = payload_to_circuit(circuit_to_payload(original))

        assert rebuilt.name == original.name
        assert rebuilt.qubit_count == original.qubit_count
        assert rebuilt.operation_mode is original.operation_mode
        assert rebuilt.gates == original.gates
        assert rebuilt.noise_model == original.noise_model
        assert rebuilt.error_correction_layers == original.error_correction_layers

    def test_round_trip_preserves_ideal_simulation(self) -> None:
        original = Circuit(2)
        original.add_gate("H", 0)
        original.add_gate("CNOT", 1, control=0)
        original.add_gate("S", 1)
        rebuilt = Circuit.from_bridge_payload(original.export_for_bridge())
        assert torch.allclose(original.execute().state, rebuilt.execute().state)

    def test_legacy_continuous_tag_is_accepted(self) -> None:
        original = Circuit(2, OperationMode.CONTINUOUS, seed=1)
        original.add_gate("H", 0)
        original.add_gate("CNOT", 1, control=0)
        payload = circuit_to_payload(original)
        assert payload["operationMode"] == "Continuous"

        payload["operationMode"] = "Continuous (Harvard-MIT)"
        rebuilt = payload_to_circuit(json.loads(json.dumps(payload)))
        assert rebuilt.operation_mode is OperationMode.CONTINUOUS
        assert rebuilt.gates == original.gates
        assert rebuilt.noise_model == original.noise_model

    def test_file_round_trip(self) -> None:
        original = sample_circuit()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "circuit.json")
            dump_bridge_payload(original, path)
            loaded = load_bridge_payload(path)
        assert loaded.gates == original.gates

    def test_load_errors(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_bridge_payload("/nonexistent/circuit.json")
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "bad.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{not json")
            with pytest.raises(ValueError, match="Invalid JSON"):
                load_bridge_payload(path)


class TestPayloadValidation:
    @pytest.fixture
    def payload(self) -> dict:
        return circuit_to_payload(sample_circuit())

    def test_valid_payload_passes(self, payload: dict) -> None:
        validate_bridge_payload(payload)

    @pytest.mark.parametrize("field", ["version", "name", "qubitCount", "gates", "noiseModel"])
    def test_missing_field(self, payload: dict, field: str) -> None:
        del payload[field]
        with pytest.raises(ValueError, match=field):
            payload_to_circuit(payload)

    def test_out_of_range_qubit(self, payload: dict) -> None:
        payload["gates"][1]["controlQubit"] = 3
        with pytest.raises(ValueError, match="out of range"):
            validate_bridge_payload(payload)

    def test_boolean_is_not_an_integer(self, payload: dict) -> None:
        payload["gates"][0]["targetQubit"] = True
        with pytest.raises(ValueError, match="integer"):
            validate_bridge_payload(payload)

    def test_unknown_gate(self, payload: dict) -> None:
        payload["gates"][0]["type"] = "RX"
        with pytest.raises(ValueError, match="Unsupported gate name"):
            payload_to_circuit(payload)

    def test_unknown_mode(self, payload: dict) -> None:
        payload["operationMode"] = "Warp"
        with pytest.raises(ValueError, match="Unknown operation mode"):
            payload_to_circuit(payload)

    def test_major_version_mismatch(self, payload: dict) -> None:
        payload["version"] = "2.0.0"
        with pytest.raises(ValueError, match="Unsupported payload version"):
            payload_to_circuit(payload)

    def test_minor_version_accepted(self, payload: dict) -> None:
        payload["version"] = "1.2.0"
        assert payload_to_circuit(payload).qubit_count == 3

    def test_noise_rate_out_of_range(self, payload: dict) -> None:
        payload["noiseModel"]["dephasingRate"] = 2.0
        with pytest.raises(ValueError, match="dephasing_rate"):
            payload_to_circuit(payload)

    def test_missing_control_surfaces_from_circuit(self, payload: dict) -> None:
        del payload["gates"][1]["controlQubit"]
        with pytest.raises(ValueError, match="control"):
            payload_to_circuit(payload)

    def test_clamped_register_rejects_high_index(self) -> None:
        payload = circuit_to_payload(Circuit(8))
        payload["qubitCount"] = 12
        payload["gates"] = [{"type": "X", "targetQubit": 10}]
        with pytest.raises(InvalidQubitIndex):
            payload_to_circuit(payload)

    def test_not_a_dict(self) -> None:
        with pytest.raises(ValueError, match="dictionary"):
            validate_bridge_payload([])  # type: ignore[arg-type]


class TestResultsPayload:
    def test_encode(self) -> None:
        circuit = Circuit(2, seed=2)
        circuit.add_gate("X", 1)
        circuit.add_gate("M", 1)
        result = circuit.execute()
        payload = results_to_payload(result, shots=256)

        assert payload["measurements"] == {"1": {"1": 256}}
        assert payload["finalStateVector"][2] == {"real": 1.0, "imaginary": 0.0}
        assert payload["fidelity"] == 1.0
        assert payload["executionTimeMs"] == pytest.approx(result.execution_time * 1000.0)
        assert payload["noiseEvents"] == []
        assert payload["atomReplenishments"] == 0
        assert payload["coherenceTimeSeconds"] == 0.0
        json.dumps(payload)

    def test_shots_validated(self) -> None:
        result = Circuit(1).execute()
        with pytest.raises(ValueError, match="shots"):
            results_to_payload(result, shots=0)

    def test_decode_round_trip(self) -> None:
        circuit = Circuit(
            1,
            OperationMode.CONTINUOUS,
            noise_model=NoiseModel(atom_loss_rate=1.0),
            seed=4,
        )
        circuit.add_gate("H", 0)
        circuit.add_gate("M", 0)
        result = circuit.execute()

        decoded = payload_to_results(json.loads(json.dumps(results_to_payload(result))))
        assert decoded.measurements == {0: {result.measurement_results[0]: 100}}
        assert decoded.atom_replenishments == result.atom_replenishment_count == 2
        assert decoded.coherence_time_seconds == pytest.approx(0.2)
        assert NoiseType.ATOM_LOSS in [e.type for e in decoded.noise_events]
        assert torch.allclose(decoded.final_state(), result.state)

    def test_state_vector_optional(self) -> None:
        payload = results_to_payload(Circuit(1).execute())
        del payload["finalStateVector"]
        decoded = payload_to_results(payload)
        assert decoded.final_state_vector is None
        assert decoded.final_state() is None

    def test_decode_rejects_bad_records(self) -> None:
        payload = results_to_payload(Circuit(1).execute())
        bad = copy.deepcopy(payload)
        bad["measurements"] = {"0": {"2": 5}}
        with pytest.raises(ValueError, match="invalid outcome"):
            payload_to_results(bad)

        bad = copy.deepcopy(payload)
        del bad["fidelity"]
        with pytest.raises(ValueError, match="fidelity"):
            payload_to_results(bad)

        bad = copy.deepcopy(payload)
        bad["noiseEvents"] = [{"timestamp": 0.0, "qubit": 0, "type": "cosmicRay", "magnitude": 1.0}]
        with pytest.raises(ValueError):
            payload_to_results(bad)


def test_schema_describes_both_records() -> None:
    schema = bridge_payload_schema()
    assert set(schema) == {"circuit", "results"}
    assert schema["circuit"]["qubitCount"]["required"] is True
    assert schema["results"]["finalStateVector"]["required"] is False
