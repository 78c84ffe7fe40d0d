"""
Circuit gates: an elementary gate bound to the wires of a register.

A CircuitGate is immutable and validated once at construction. A gate
sequence is a plain list of CircuitGate objects in application order.
"""

import numbers
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from .errors import StructuralError
from .gates import ControlledGate, Gate
from .utils import DEFAULT_ATOL


@dataclass(frozen=True)
class CircuitGate:
    """
    Gate acting on an ordered tuple of 1-based wire indices.

    The k-th wire carries local bit k (least significant first) of the
    gate's matrix.

    Args:
        wires: Wire indices, one per wire of the gate, distinct and >= 1
        gate: Elementary gate

    Raises:
        StructuralError: on arity mismatch, repeated or non-positive wires
    """

    wires: Tuple[int, ...]
    gate: Gate

    def __post_init__(self):
        wires = tuple(int(w) for w in self.wires)
        object.__setattr__(self, "wires", wires)

        if len(wires) < 1:
            raise StructuralError("Need at least one wire to act on.")
        if len(wires) != self.gate.num_wires:
            raise StructuralError(
                f"{self.gate!r} affects {self.gate.num_wires} wires but "
                f"{len(wires)} wires, {wires}, were passed."
            )
        if len(set(wires)) != len(wires):
            raise StructuralError(f"Wire indices must be unique, got {wires}.")
        if min(wires) < 1:
            raise StructuralError(f"Wire index cannot be smaller than 1, got {wires}.")

    @property
    def req_wires(self) -> int:
        """Minimum number of register wires needed to host this gate."""
        return max(self.wires)

    def adjoint(self) -> "CircuitGate":
        return CircuitGate(self.wires, self.gate.adjoint())

    def isclose(self, other, atol: float = DEFAULT_ATOL) -> bool:
        """Same wires in the same order and approximately equal gates."""
        if not isinstance(other, CircuitGate) or self.wires != other.wires:
            return False
        return self.gate.isclose(other.gate, atol=atol)

    def __str__(self):
        return f"{self.gate!r} q{list(self.wires)}"


def adjoint(gates: Sequence[CircuitGate]) -> List[CircuitGate]:
    """Adjoint of a gate sequence: reversed order, each gate adjointed."""
    return [cg.adjoint() for cg in reversed(gates)]


def req_wires(gates: Union[CircuitGate, Iterable[CircuitGate]]) -> int:
    """Register size needed for a gate or gate sequence (0 when empty)."""
    if isinstance(gates, CircuitGate):
        return gates.req_wires
    return max((cg.req_wires for cg in gates), default=0)


# =============================================================================
# Construction helpers
# =============================================================================

def _as_tuple(wires) -> Tuple[int, ...]:
    if isinstance(wires, numbers.Integral):
        return (wires,)
    return tuple(wires)


def single_qubit_circuit_gate(wire: int, gate: Gate) -> CircuitGate:
    return CircuitGate((wire,), gate)


def two_qubit_circuit_gate(wire1: int, wire2: int, gate: Gate) -> CircuitGate:
    return CircuitGate((wire1, wire2), gate)


def controlled_circuit_gate(targets, controls, gate: Gate) -> CircuitGate:
    """
    Gate on `targets` controlled by `controls` (each an int or a tuple).

    controlled_circuit_gate(2, 1, XGate()) is a CNOT with control 1 and
    target 2.
    """
    targets = _as_tuple(targets)
    controls = _as_tuple(controls)
    return CircuitGate(targets + controls, ControlledGate(gate, len(controls)))


def circuit_gate(wires, gate: Gate, *controls: int) -> CircuitGate:
    """
    General helper: plain gate on `wires`, or controlled if controls are given.

    circuit_gate(1, XGate()) is a plain X on wire 1;
    circuit_gate((1, 2), SwapGate(), 3) swaps wires 1 and 2 when wire 3 is |1⟩.
    """
    if not controls:
        return CircuitGate(_as_tuple(wires), gate)
    return controlled_circuit_gate(wires, controls, gate)
