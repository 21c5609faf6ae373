"""State-vector backend."""

from .statevector import (
    MAX_DENSE_QUBITS,
    basis_indices,
    check_qubit,
    from_amplitudes,
    infer_n_qubits,
    probabilities,
    state_description,
    to_amplitudes,
    zero_state,
)

__all__ = [
    "MAX_DENSE_QUBITS",
    "zero_state",
    "infer_n_qubits",
    "check_qubit",
    "basis_indices",
    "probabilities",
    "to_amplitudes",
    "from_amplitudes",
    "state_description",
]
