"""Bell-pair example: ideal versus continuous-operation noise.

Builds the same two-qubit entangling circuit in STANDARD and CONTINUOUS
mode, runs each once, measures both qubits, and prints the final state,
fidelity estimate and the result record sent back over the bridge.
"""

from __future__ import annotations

import json

import qacademy as qa


def build(mode: qa.OperationMode) -> qa.Circuit:
    circuit = qa.Circuit(2, mode, name=f"Bell ({mode.value})", seed=0)
    circuit.add_gate("H", 0)
    circuit.add_gate("CNOT", 1, control=0)
    return circuit


def main() -> None:
    """Run the ideal and noisy Bell circuits and report the results."""
    for mode in (qa.OperationMode.STANDARD, qa.OperationMode.CONTINUOUS):
        circuit = build(mode)
        circuit.execute()
        print(f"{circuit.name}: {circuit.get_state_description()}")

        circuit.add_gate("M", 0)
        circuit.add_gate("M", 1)
        result = circuit.execute()
        outcomes = dict(result.measurement_results)
        print(f"  measured q0={outcomes[0]} q1={outcomes[1]}")
        print(f"  fidelity estimate: {result.fidelity:.6f}")
        print(f"  noise events: {len(result.noise_events)}")

    payload = qa.circuit_to_payload(build(qa.OperationMode.CONTINUOUS))
    print("\nBridge payload:")
    print(json.dumps(payload, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
