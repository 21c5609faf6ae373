"""Hardware-bridge import and export."""

from .bridge import (
    SCHEMA_VERSION,
    BridgeResults,
    circuit_to_payload,
    dump_bridge_payload,
    load_bridge_payload,
    payload_to_circuit,
    payload_to_results,
    results_to_payload,
)
from .schema import bridge_payload_schema, validate_bridge_payload, validate_results_payload

__all__ = [
    "SCHEMA_VERSION",
    "BridgeResults",
    "circuit_to_payload",
    "payload_to_circuit",
    "dump_bridge_payload",
    "load_bridge_payload",
    "results_to_payload",
    "payload_to_results",
    "bridge_payload_schema",
    "validate_bridge_payload",
    "validate_results_payload",
]
