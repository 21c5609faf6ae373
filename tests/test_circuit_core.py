"""Tests for the Circuit orchestrator."""

from __future__ import annotations

import math

import pytest
import torch

from qacademy.circuit import Circuit, CircuitStatus, ExecutionResult, StepSnapshot
from qacademy.correction import ErrorCorrectionLayer
from qacademy.errors import CircuitBusyError, ExecutionCancelled, InvalidQubitIndex
from qacademy.gates import GateType
from qacademy.noise import NoiseModel, NoiseType, OperationMode


def quiet_model(**overrides) -> NoiseModel:
    params = dict(
        dephasing_rate=0.0,
        relaxation_rate=0.0,
        gate_error_rate=0.0,
        measurement_error=0.0,
        atom_loss_rate=0.0,
        continuous_operation_correction=1.0,
    )
    params.update(overrides)
    return NoiseModel(**params)


def bell_circuit(**kwargs) -> Circuit:
    circuit = Circuit(2, **kwargs)
    circuit.add_gate("H", 0)
    circuit.add_gate("CNOT", 1, control=0)
    return circuit


class TestConstruction:
    def test_defaults(self) -> None:
        circuit = Circuit()
        assert circuit.qubit_count == 2
        assert circuit.operation_mode is OperationMode.STANDARD
        assert circuit.status is CircuitStatus.IDLE
        assert not circuit.is_running
        assert circuit.fidelity == 1.0
        assert circuit.gates == ()
        assert circuit.noise_model == NoiseModel.ideal()
        assert circuit.get_probabilities() == [1.0, 0.0, 0.0, 0.0]
        assert circuit.get_state_description() == "1.000|00⟩"

    @pytest.mark.parametrize(
        "mode,requested,expected",
        [
            (OperationMode.STANDARD, 20, 8),
            (OperationMode.STANDARD, 3, 3),
            ("Continuous", 5, 5),
        ],
    )
    def test_qubit_count_clamped_to_mode(self, mode, requested: int, expected: int) -> None:
        assert Circuit(requested, mode).qubit_count == expected

    def test_rejects_empty_register(self) -> None:
        with pytest.raises(ValueError, match="qubit_count"):
            Circuit(0)

    def test_noisy_modes_default_to_neutral_atom_model(self) -> None:
        circuit = Circuit(2, OperationMode.CONTINUOUS)
        assert circuit.noise_model == NoiseModel.neutral_atom_array()


class TestGateList:
    def test_add_gate_returns_record(self) -> None:
        circuit = Circuit(3)
        gate = circuit.add_gate("ccx", 2, control=0, control2=1)
        assert gate.type is GateType.TOFFOLI
        assert circuit.gates == (gate,)
        assert len(circuit) == 1

    def test_invalid_target_raises_and_is_not_stored(self) -> None:
        circuit = Circuit(2)
        with pytest.raises(InvalidQubitIndex) as excinfo:
            circuit.add_gate("H", 2)
        assert excinfo.value.qubit == 2
        assert excinfo.value.qubit_count == 2
        assert circuit.gates == ()

    def test_invalid_control_raises(self) -> None:
        circuit = Circuit(2)
        with pytest.raises(InvalidQubitIndex) as excinfo:
            circuit.add_gate("CNOT", 0, control=-1)
        assert excinfo.value.role == "control"

    def test_float_index_rejected_when_added(self) -> None:
        circuit = Circuit(2)
        with pytest.raises(TypeError):
            circuit.add_gate("CNOT", 1, control=0.0)
        with pytest.raises(TypeError):
            circuit.add_gate("H", 1.0)
        assert circuit.gates == ()
        circuit.add_gate("CNOT", 1, control=0)
        assert circuit.gates[0].control_qubit == 0
        circuit.execute()

    def test_duplicate_qubits_raise(self) -> None:
        circuit = Circuit(3)
        with pytest.raises(InvalidQubitIndex, match="distinct"):
            circuit.add_gate("SWAP", 1, control=1)

    @pytest.mark.parametrize(
        "name,control,control2",
        [
            ("CNOT", None, None),
            ("CCX", 0, None),
            ("H", 1, None),
            ("CNOT", None, 1),
        ],
    )
    def test_operand_mismatch_raises(self, name, control, control2) -> None:
        circuit = Circuit(3)
        with pytest.raises(ValueError):
            circuit.add_gate(name, 2, control, control2)
        assert circuit.gates == ()

    def test_unknown_gate(self) -> None:
        with pytest.raises(ValueError, match="Unsupported gate name"):
            Circuit(1).add_gate("RZ", 0)

    def test_remove_gate(self) -> None:
        circuit = bell_circuit()
        removed = circuit.remove_gate(0)
        assert removed.type is GateType.HADAMARD
        assert [g.type for g in circuit.gates] == [GateType.CNOT]
        with pytest.raises(IndexError):
            circuit.remove_gate(5)

    def test_clear_gates_resets(self) -> None:
        circuit = bell_circuit()
        circuit.execute()
        circuit.clear_gates()
        assert circuit.gates == ()
        assert circuit.get_probabilities() == [1.0, 0.0, 0.0, 0.0]
        assert circuit.status is CircuitStatus.IDLE

    def test_reset_keeps_gates(self) -> None:
        circuit = bell_circuit()
        circuit.add_gate("M", 0)
        circuit.execute()
        circuit.reset()
        assert len(circuit.gates) == 3
        assert circuit.measurement_results == {}
        assert circuit.fidelity == 1.0
        assert circuit.get_state_description() == "1.000|00⟩"


class TestExecute:
    def test_bell_state(self) -> None:
        circuit = bell_circuit()
        result = circuit.execute()
        assert isinstance(result, ExecutionResult)
        assert circuit.status is CircuitStatus.COMPLETED
        assert circuit.get_state_description() == "0.707|00⟩ + 0.707|11⟩"
        assert torch.allclose(
            result.probabilities,
            torch.tensor([0.5, 0.0, 0.0, 0.5], dtype=torch.float64),
        )
        assert result.gates_applied == 2
        assert result.n_qubits == 2
        assert result.execution_time >= 0.0

    def test_standard_mode_is_noise_free(self) -> None:
        circuit = bell_circuit(seed=1)
        for _ in range(10):
            circuit.add_gate("T", 1)
        result = circuit.execute()
        assert result.fidelity == 1.0
        assert result.noise_events == ()
        assert result.atom_replenishment_count == 0

    def test_execute_starts_from_zero_state(self) -> None:
        circuit = Circuit(1)
        circuit.add_gate("X", 0)
        first = circuit.execute().state
        second = circuit.execute().state
        assert torch.equal(first, second)
        assert circuit.get_probabilities() == [0.0, 1.0]

    def test_measure_gates_are_correlated(self) -> None:
        circuit = bell_circuit(seed=5)
        circuit.add_gate("M", 0)
        circuit.add_gate("M", 1)
        seen = set()
        for _ in range(30):
            result = circuit.execute()
            assert result.measurement_results[0] == result.measurement_results[1]
            seen.add(result.measurement_results[0])
        assert seen == {0, 1}

    def test_result_is_a_snapshot(self) -> None:
        circuit = bell_circuit()
        circuit.add_gate("M", 0)
        result = circuit.execute()
        result.state.zero_()
        assert sum(circuit.get_probabilities()) == pytest.approx(1.0)
        with pytest.raises(TypeError):
            result.measurement_results[0] = 1  # type: ignore[index]
        with pytest.raises(AttributeError):
            result.fidelity = 0.1  # type: ignore[misc]

    def test_state_vector_is_a_copy(self) -> None:
        circuit = Circuit(1)
        state = circuit.state_vector
        state[0] = 0
        assert circuit.get_probabilities() == [1.0, 0.0]

    def test_amplitudes(self) -> None:
        circuit = Circuit(1)
        circuit.add_gate("Y", 0)
        circuit.execute()
        amps = circuit.amplitudes()
        assert amps[0].probability == pytest.approx(0.0)
        assert amps[1].imaginary == pytest.approx(1.0)

    def test_bad_check_interval(self) -> None:
        with pytest.raises(ValueError, match="check_interval"):
            bell_circuit().execute(check_interval=0)


class TestNoisyExecution:
    def test_fidelity_decays_and_is_bounded(self) -> None:
        circuit = Circuit(
            2, OperationMode.CONTINUOUS, noise_model=quiet_model(gate_error_rate=0.2), seed=0
        )
        for _ in range(6):
            circuit.add_gate("H", 0)
        fidelities = []
        circuit.execute(observer=lambda snap: fidelities.append(snap.fidelity))
        assert len(fidelities) == 6
        assert all(b <= a for a, b in zip(fidelities, fidelities[1:]))
        assert all(0.5 <= f <= 1.0 for f in fidelities)
        assert math.isclose(fidelities[0], 0.8)
        assert fidelities[-1] == 0.5

    def test_atom_replenishment(self) -> None:
        circuit = Circuit(2, "Continuous", noise_model=quiet_model(atom_loss_rate=1.0), seed=0)
        for _ in range(4):
            circuit.add_gate("X", 1)
        result = circuit.execute()
        assert result.atom_replenishment_count == 4
        assert math.isclose(result.coherence_time, 0.4)
        assert [e.type for e in result.noise_events] == [NoiseType.ATOM_LOSS] * 4
        assert result.fidelity == 1.0

    def test_error_correction_boosts_fidelity(self) -> None:
        circuit = Circuit(
            2,
            OperationMode.FAULT_TOLERANT,
            noise_model=quiet_model(gate_error_rate=0.1),
            error_correction_layers=[ErrorCorrectionLayer("s", "Surface Code", 4, 5, 1.0)],
            seed=0,
        )
        circuit.add_gate("H", 0)
        circuit.add_gate("H", 1)
        snapshots = []
        result = circuit.execute(observer=snapshots.append)
        assert [s.syndromes for s in snapshots] == [1, 1]
        assert math.isclose(result.fidelity, (0.9 * 1.01) ** 2)

    def test_layers_ignored_outside_fault_tolerant_mode(self) -> None:
        circuit = Circuit(
            1,
            OperationMode.CONTINUOUS,
            noise_model=quiet_model(),
            error_correction_layers=[ErrorCorrectionLayer("s", "Surface Code", 1, 1, 1.0)],
        )
        circuit.add_gate("H", 0)
        snapshots = []
        circuit.execute(observer=snapshots.append)
        assert snapshots[0].syndromes == 0

    def test_seeded_circuits_are_reproducible(self) -> None:
        model = NoiseModel(dephasing_rate=0.3, relaxation_rate=0.3, atom_loss_rate=0.2)

        def run() -> ExecutionResult:
            circuit = Circuit(3, OperationMode.CONTINUOUS, noise_model=model, seed=42)
            for q in range(3):
                circuit.add_gate("H", q)
                circuit.add_gate("M", q)
            return circuit.execute()

        a, b = run(), run()
        assert torch.equal(a.state, b.state)
        assert dict(a.measurement_results) == dict(b.measurement_results)
        assert [(e.qubit, e.type) for e in a.noise_events] == [
            (e.qubit, e.type) for e in b.noise_events
        ]
        assert a.fidelity == b.fidelity

    def test_public_measure_records_outcome(self) -> None:
        circuit = Circuit(2, seed=3)
        assert circuit.measure(1) == 0
        assert circuit.measurement_results == {1: 0}
        with pytest.raises(InvalidQubitIndex):
            circuit.measure(2)

    def test_measuring_twice_gives_the_same_outcome(self) -> None:
        for seed in range(50):
            circuit = Circuit(2, seed=seed)
            circuit.add_gate("H", 0)
            circuit.add_gate("CNOT", 1, control=0)
            circuit.execute()
            first = circuit.measure(0)
            assert circuit.measure(0) == first
            assert circuit.measure(1) == first


class TestObserverAndCancellation:
    def test_observer_sees_every_step(self) -> None:
        circuit = bell_circuit()
        snapshots = []
        circuit.execute(observer=snapshots.append)
        assert [s.index for s in snapshots] == [0, 1]
        assert all(isinstance(s, StepSnapshot) for s in snapshots)
        assert snapshots[0].gate.type is GateType.HADAMARD
        assert torch.allclose(
            snapshots[0].probabilities,
            torch.tensor([0.5, 0.5, 0.0, 0.0], dtype=torch.float64),
        )

    def test_cancellation_stops_and_leaves_idle(self) -> None:
        circuit = Circuit(1)
        for _ in range(10):
            circuit.add_gate("X", 0)
        calls = []

        def should_cancel() -> bool:
            calls.append(1)
            return len(calls) > 2

        with pytest.raises(ExecutionCancelled) as excinfo:
            circuit.execute(should_cancel=should_cancel, check_interval=3)
        assert excinfo.value.gates_applied == 6
        assert circuit.status is CircuitStatus.IDLE
        # six X gates on one qubit is the identity
        assert circuit.get_probabilities() == [1.0, 0.0]

    def test_mutation_during_execution_is_rejected(self) -> None:
        circuit = bell_circuit()

        def observer(snapshot: StepSnapshot) -> None:
            assert circuit.is_running
            circuit.add_gate("H", 0)

        with pytest.raises(CircuitBusyError):
            circuit.execute(observer=observer)
        assert circuit.status is CircuitStatus.IDLE
        assert len(circuit.gates) == 2

    def test_reentrant_execute_is_rejected(self) -> None:
        circuit = bell_circuit()
        with pytest.raises(CircuitBusyError):
            circuit.execute(observer=lambda snap: circuit.execute())

    def test_repr(self) -> None:
        text = repr(bell_circuit(name="bell"))
        assert "bell" in text
        assert "gates=2" in text
