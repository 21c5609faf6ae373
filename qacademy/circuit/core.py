"""The circuit orchestrator: gate list, owned state vector and execution."""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import torch

from ..backend.statevector import (
    check_qubit,
    probabilities,
    state_description,
    to_amplitudes,
    zero_state,
)
from ..core.amplitude import Amplitude
from ..core.device import Device, resolve_device
from ..correction.layers import ErrorCorrectionLayer, apply_error_correction
from ..errors import CircuitBusyError, ExecutionCancelled, InvalidQubitIndex
from ..gates.library import apply_gate
from ..gates.types import Gate, GateType
from ..logging import get_logger
from ..measurement.collapse import measure_qubit
from ..noise.model import NoiseEvent, NoiseModel, NoiseType, OperationMode
from ..noise.stochastic import apply_noise, decay_fidelity, replenish_atoms
from .results import CircuitStatus, ExecutionResult, StepSnapshot

logger = get_logger(__name__)

Observer = Callable[[StepSnapshot], None]


def _make_generator(seed: Optional[int]) -> torch.Generator:
    generator = torch.Generator()
    if seed is None:
        generator.seed()
    else:
        generator.manual_seed(int(seed))
    return generator


class Circuit:
    """
    An n-qubit circuit that owns its state vector and random source.

    Gates are appended while the circuit is idle and run in insertion order
    by ``execute()``. Each step applies the gate, then, depending on the
    operation mode, post-gate noise, atom replenishment and the
    error-correction layers.

    The state vector is never handed out directly: ``state_vector``,
    ``ExecutionResult`` and observer snapshots are all copies.

    Example
    -------
    >>> circuit = Circuit(2, seed=7)
    >>> circuit.add_gate("H", 0)
    >>> circuit.add_gate("CNOT", 1, control=0)
    >>> result = circuit.execute()
    >>> circuit.get_state_description()
    '0.707|00⟩ + 0.707|11⟩'
    """

    def __init__(
        self,
        qubit_count: int = 2,
        operation_mode: OperationMode | str = OperationMode.STANDARD,
        *,
        name: str = "New Circuit",
        noise_model: Optional[NoiseModel] = None,
        error_correction_layers: Iterable[ErrorCorrectionLayer] = (),
        generator: Optional[torch.Generator] = None,
        seed: Optional[int] = None,
        device: Device | str | torch.device | None = None,
    ) -> None:
        """
        Initialize a Circuit in the idle state at |0...0⟩.

        Parameters
        ----------
        qubit_count:
            Requested register size, >= 1. Clamped to the mode's
            ``max_qubits``.
        operation_mode:
            OperationMode or its wire tag.
        name:
            Display name, carried into exports.
        noise_model:
            Noise parameters. Defaults to ``NoiseModel.for_mode(mode)``.
        error_correction_layers:
            Layers consulted after each gate in fault-tolerant mode.
        generator:
            Random source for noise and measurement. Takes precedence over
            ``seed``.
        seed:
            Seed for a fresh generator when ``generator`` is not given. If
            both are None the generator is seeded nondeterministically.
        device:
            Where the state vector lives.
        """
        mode = OperationMode.parse(operation_mode)
        if qubit_count < 1:
            raise ValueError(f"Circuit requires qubit_count >= 1, got {qubit_count}")

        clamped = min(int(qubit_count), mode.max_qubits)
        if clamped != qubit_count:
            logger.info(
                "qubit_count %d clamped to %d for %s mode",
                qubit_count,
                clamped,
                mode.value,
            )

        self.name = name
        self._qubit_count = clamped
        self._mode = mode
        self._noise_model = noise_model if noise_model is not None else NoiseModel.for_mode(mode)
        self._layers: List[ErrorCorrectionLayer] = list(error_correction_layers)
        self._generator = generator if generator is not None else _make_generator(seed)
        self._device = resolve_device(device)

        self._gates: List[Gate] = []
        self._status = CircuitStatus.IDLE
        self._execution_time = 0.0
        self._reset_state()

    # ------------------------------------------------------------------
    # Read-only views

    @property
    def qubit_count(self) -> int:
        return self._qubit_count

    @property
    def operation_mode(self) -> OperationMode:
        return self._mode

    @property
    def noise_model(self) -> NoiseModel:
        return self._noise_model

    @property
    def error_correction_layers(self) -> Tuple[ErrorCorrectionLayer, ...]:
        return tuple(self._layers)

    @property
    def gates(self) -> Tuple[Gate, ...]:
        return tuple(self._gates)

    @property
    def state_vector(self) -> torch.Tensor:
        """A clone of the current state vector."""
        return self._state.clone()

    @property
    def measurement_results(self) -> Dict[int, int]:
        return dict(self._measurements)

    @property
    def fidelity(self) -> float:
        return self._fidelity

    @property
    def atom_replenishment_count(self) -> int:
        return self._atom_replenishment_count

    @property
    def coherence_time(self) -> float:
        return self._coherence_time

    @property
    def noise_history(self) -> Tuple[NoiseEvent, ...]:
        return tuple(self._noise_history)

    @property
    def execution_time(self) -> float:
        return self._execution_time

    @property
    def status(self) -> CircuitStatus:
        return self._status

    @property
    def is_running(self) -> bool:
        return self._status is CircuitStatus.EXECUTING

    @property
    def generator(self) -> torch.Generator:
        return self._generator

    @property
    def device(self) -> Device:
        return self._device

    def __len__(self) -> int:
        return len(self._gates)

    def __repr__(self) -> str:
        return (
            f"Circuit(name={self.name!r}, qubit_count={self._qubit_count}, "
            f"mode={self._mode.value!r}, gates={len(self._gates)}, "
            f"status={self._status.value!r})"
        )

    # ------------------------------------------------------------------
    # Gate list

    def _ensure_idle(self, action: str) -> None:
        if self._status is CircuitStatus.EXECUTING:
            raise CircuitBusyError(f"cannot {action} while the circuit is executing")

    def add_gate(
        self,
        gate_type: GateType | str,
        target: int,
        control: Optional[int] = None,
        control2: Optional[int] = None,
    ) -> Gate:
        """
        Append a gate and return the stored record.

        For SWAP, ``control`` is the second swapped qubit. Toffoli needs
        both ``control`` and ``control2``.

        Raises
        ------
        InvalidQubitIndex
            If any index is outside the register or a qubit is repeated.
        TypeError
            If an index is not an integer.
        ValueError
            If the gate name is unknown or the controls do not match the
            gate type.
        CircuitBusyError
            If called while executing.
        """
        self._ensure_idle("add a gate")
        gt = GateType.parse(gate_type)

        expected = gt.n_controls
        given = [c for c in (control, control2) if c is not None]
        if control is None and control2 is not None:
            raise ValueError("control2 given without control")
        if len(given) != expected:
            raise ValueError(
                f"{gt.display_name} gate takes {expected} control qubit(s), "
                f"got {len(given)}"
            )

        target = check_qubit(target, self._qubit_count, role="target")
        if control is not None:
            control = check_qubit(control, self._qubit_count, role="control")
        if control2 is not None:
            control2 = check_qubit(control2, self._qubit_count, role="control2")

        qubits = [q for q in (target, control, control2) if q is not None]
        if len(set(qubits)) != len(qubits):
            raise InvalidQubitIndex(
                qubits[-1],
                self._qubit_count,
                role="control",
                message=f"gate qubits must be distinct, got {qubits}",
            )

        gate = Gate(gt, target, control, control2)
        self._gates.append(gate)
        return gate

    def remove_gate(self, index: int) -> Gate:
        """Remove and return the gate at ``index``."""
        self._ensure_idle("remove a gate")
        if not -len(self._gates) <= index < len(self._gates):
            raise IndexError(
                f"gate index {index} out of range for {len(self._gates)} gate(s)"
            )
        return self._gates.pop(index)

    def clear_gates(self) -> None:
        """Remove every gate and reset the circuit."""
        self._ensure_idle("clear gates")
        self._gates.clear()
        self.reset()

    def add_error_correction_layer(self, layer: ErrorCorrectionLayer) -> None:
        self._ensure_idle("add an error correction layer")
        self._layers.append(layer)

    # ------------------------------------------------------------------
    # Execution

    def _reset_state(self) -> None:
        self._state = zero_state(self._qubit_count, device=self._device)
        self._measurements: Dict[int, int] = {}
        self._noise_history: List[NoiseEvent] = []
        self._atom_losses = 0
        self._atom_replenishment_count = 0
        self._fidelity = 1.0
        self._coherence_time = 0.0

    def reset(self) -> None:
        """
        Return to |0...0⟩ and clear every derived metric.

        The gate list is kept.
        """
        self._ensure_idle("reset")
        self._reset_state()
        self._status = CircuitStatus.IDLE

    def _measure(self, qubit: int) -> int:
        readout_error = (
            self._noise_model.measurement_error if self._mode.noise_enabled else None
        )
        outcome = measure_qubit(self._state, qubit, self._generator, readout_error)
        self._measurements[qubit] = outcome
        return outcome

    def measure(self, qubit: int) -> int:
        """
        Measure ``qubit``, collapse the state and record the outcome.

        With noise enabled the readout probability is perturbed by up to
        ``noise_model.measurement_error``.

        Raises
        ------
        InvalidQubitIndex
            If qubit is outside the register.
        """
        self._ensure_idle("measure")
        qubit = check_qubit(qubit, self._qubit_count)
        return self._measure(qubit)

    def _step(self, gate: Gate) -> Tuple[List[NoiseEvent], int]:
        if gate.type is GateType.MEASURE:
            self._measure(gate.target_qubit)
        else:
            apply_gate(self._state, gate, self._qubit_count)

        events: List[NoiseEvent] = []
        if self._mode.noise_enabled:
            events = apply_noise(
                self._state, gate.target_qubit, self._noise_model, self._generator
            )
            self._noise_history.extend(events)
            self._atom_losses += sum(1 for e in events if e.type is NoiseType.ATOM_LOSS)
            self._fidelity = decay_fidelity(self._fidelity, self._noise_model)

        if self._mode.replenishes_atoms:
            outcome = replenish_atoms(
                self._atom_losses,
                self._atom_replenishment_count,
                self._fidelity,
                self._coherence_time,
            )
            self._atom_replenishment_count = outcome.replenished
            self._fidelity = outcome.fidelity
            self._coherence_time = outcome.coherence_time

        syndromes = 0
        if self._mode.corrects_errors and self._layers:
            self._fidelity, syndromes = apply_error_correction(
                self._fidelity, self._layers, self._generator
            )

        return events, syndromes

    def execute(
        self,
        *,
        observer: Optional[Observer] = None,
        should_cancel: Optional[Callable[[], bool]] = None,
        check_interval: int = 64,
    ) -> ExecutionResult:
        """
        Run every gate from a fresh |0...0⟩ state.

        Prior measurements, noise history and metrics are cleared first.

        Parameters
        ----------
        observer:
            Called with a StepSnapshot after each gate step.
        should_cancel:
            Polled before every ``check_interval``-th gate (including the
            first); returning True stops the run with ExecutionCancelled and
            leaves the circuit idle with the partial state in place.
        check_interval:
            Number of gates between cancellation checks, >= 1.

        Returns
        -------
        ExecutionResult
            An immutable snapshot of the completed run.

        Raises
        ------
        CircuitBusyError
            If the circuit is already executing.
        ExecutionCancelled
            If ``should_cancel`` returned True.
        """
        self._ensure_idle("execute")
        if check_interval < 1:
            raise ValueError(f"check_interval must be >= 1, got {check_interval}")

        self._reset_state()
        self._status = CircuitStatus.EXECUTING
        logger.debug(
            "executing %r: %d gate(s) on %d qubit(s), mode=%s",
            self.name,
            len(self._gates),
            self._qubit_count,
            self._mode.value,
        )

        start = time.perf_counter()
        applied = 0
        completed = False
        try:
            for index, gate in enumerate(self._gates):
                if (
                    should_cancel is not None
                    and index % check_interval == 0
                    and should_cancel()
                ):
                    raise ExecutionCancelled(applied)

                events, syndromes = self._step(gate)
                applied += 1

                if observer is not None:
                    observer(
                        StepSnapshot(
                            index=index,
                            gate=gate,
                            fidelity=self._fidelity,
                            probabilities=probabilities(self._state).detach().clone(),
                            noise_events=tuple(events),
                            syndromes=syndromes,
                        )
                    )
            completed = True
        finally:
            self._execution_time = time.perf_counter() - start
            self._status = CircuitStatus.COMPLETED if completed else CircuitStatus.IDLE

        logger.debug(
            "executed %r in %.6fs, fidelity=%.6f, noise events=%d",
            self.name,
            self._execution_time,
            self._fidelity,
            len(self._noise_history),
        )
        return self.result(gates_applied=applied)

    def result(self, gates_applied: Optional[int] = None) -> ExecutionResult:
        """Snapshot the current state and metrics as an ExecutionResult."""
        state = self._state.detach().clone()
        return ExecutionResult(
            state=state,
            probabilities=probabilities(state),
            measurement_results=self._measurements,
            fidelity=self._fidelity,
            atom_replenishment_count=self._atom_replenishment_count,
            coherence_time=self._coherence_time,
            noise_events=tuple(self._noise_history),
            execution_time=self._execution_time,
            gates_applied=len(self._gates) if gates_applied is None else gates_applied,
        )

    # ------------------------------------------------------------------
    # Inspection

    def amplitudes(self) -> Tuple[Amplitude, ...]:
        return to_amplitudes(self._state)

    def get_probabilities(self) -> List[float]:
        return probabilities(self._state).detach().cpu().tolist()

    def get_state_description(self) -> str:
        return state_description(self._state, self._qubit_count)

    # ------------------------------------------------------------------
    # Wire format

    def export_for_bridge(self, timestamp: Optional[Any] = None) -> Dict[str, Any]:
        """
        Serialize this circuit's definition for the hardware bridge.

        See ``qacademy.io.bridge.circuit_to_payload``.
        """
        from ..io.bridge import circuit_to_payload

        return circuit_to_payload(self, timestamp=timestamp)

    @classmethod
    def from_bridge_payload(
        cls,
        obj: Dict[str, Any],
        generator: Optional[torch.Generator] = None,
    ) -> "Circuit":
        """Rebuild a circuit from a bridge payload."""
        from ..io.bridge import payload_to_circuit

        return payload_to_circuit(obj, generator=generator)
