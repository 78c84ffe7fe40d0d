"""
Diagonal unitary synthesis.

Decomposes a diagonal unitary on K qubits into CNOT and Rz gates, following
Bullock & Markov, "Smaller circuits for arbitrary n-qubit diagonal
computations" (https://arxiv.org/abs/quant-ph/0303039).

At each level the least significant remaining wire is the target. The phase
difference between the target's |0⟩ and |1⟩ entries is a function of the
upper bits; stepping through the upper-bit parities in Gray-code order lets
one CNOT plus one Rz realize each term. What is left acts trivially on the
target, so the next level works on half as many entries, one wire higher.
"""

import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .circuit import CircuitGate, controlled_circuit_gate, single_qubit_circuit_gate
from .errors import NumericalError, PreconditionError
from .gates import RzGate, XGate
from .utils import DEFAULT_ATOL, bit_positions, gray_encode, num_qubits, odd_parity

logger = logging.getLogger(__name__)


class GrayCodeCache:
    """
    Memo for the parity vectors and ±1 flip codes behind the η matrix.

    Entries are keyed by integer pairs and never change once computed, so a
    single cache can be shared between synthesis calls and threads. Cached
    vectors are read-only arrays.
    """

    def __init__(self):
        self._parities: Dict[Tuple[int, int], np.ndarray] = {}
        self._flip_codes: Dict[Tuple[int, int], np.ndarray] = {}
        self._lock = threading.Lock()

    def _insert(self, table, key, vec) -> np.ndarray:
        vec.flags.writeable = False
        with self._lock:
            return table.setdefault(key, vec)

    def parity(self, m: int, l: int) -> np.ndarray:
        """Parity of (x & m) for every upper index x in 0..l-1, as 0/1."""
        key = (m, l)
        vec = self._parities.get(key)
        if vec is not None:
            return vec

        vec = odd_parity(np.arange(l, dtype=np.int64) & m)
        return self._insert(self._parities, key, vec)

    def flip_code(self, m: int, l: int) -> np.ndarray:
        """
        Column of the η matrix for Gray code m, of length l-1.

        Entry i-1 is +1, -1 or 0 as the parity of (i & m) flips from even to
        odd, odd to even, or stays put between upper index i-1 and i.
        """
        key = (m, l)
        vec = self._flip_codes.get(key)
        if vec is not None:
            return vec

        vec = np.diff(self.parity(m, l))
        return self._insert(self._flip_codes, key, vec)


def eta(d: np.ndarray, l: int) -> np.ndarray:
    """
    Differences between the target phase of neighbouring upper indices.

    Entry i-1 (i = 1..l-1) is arg(d[2i-2] d[2i+1] / (d[2i-1] d[2i])), the
    principal argument in (-π, π].
    """
    even, odd = d[0:2 * l:2], d[1:2 * l:2]
    return np.angle(even[:-1] * odd[1:] / (odd[:-1] * even[1:]))


def _cnot(target: int, control: int) -> CircuitGate:
    return controlled_circuit_gate(target, control, XGate())


def _synthesize_level(d: np.ndarray, j: int, wires: Sequence[int],
                      cache: GrayCodeCache, atol: float) -> Tuple[List[CircuitGate], np.ndarray]:
    """Gates that strip the target-wire dependence of d, and the remainder."""
    target = wires[j]
    l = len(d) // 2
    gates: List[CircuitGate] = []

    codes = [gray_encode(k) for k in range(1, l)]
    psi = eta(d, l)
    eta_plus = np.column_stack([cache.flip_code(m, l) for m in codes])

    alpha = np.zeros(l)
    alpha[1:] = -0.5 * np.linalg.solve(eta_plus, psi)

    gate_wires = bit_positions(gray_encode(1))
    old_wires: Tuple[int, ...] = ()

    for k in range(1, l):
        # CNOT parity moves from gray(k-1) to gray(k)
        for w in sorted(set(gate_wires) ^ set(old_wires)):
            gates.append(_cnot(target, wires[j + w]))
        old_wires = gate_wires
        gate_wires = bit_positions(gray_encode(k + 1))
        gates.append(single_qubit_circuit_gate(target, RzGate(alpha[k])))

    for w in reversed(old_wires):
        gates.append(_cnot(target, wires[j + w]))

    # peel off all rotations at once, sign flipped where the parity is odd
    signs = 1 - 2 * np.column_stack([cache.parity(m, l) for m in codes])
    beta = signs @ alpha[1:]
    d = d * np.exp(0.5j * np.outer(beta, [1, -1])).ravel()

    if not np.allclose(d[0::2], d[1::2], atol=atol):
        alpha[0] = np.angle(d[0]) - np.angle(d[1])
        gates.insert(0, single_qubit_circuit_gate(target, RzGate(-alpha[0])))
        d[0::2] /= np.exp(0.5j * alpha[0])
        d[1::2] /= np.exp(-0.5j * alpha[0])

    if not np.allclose(d[0::2], d[1::2], atol=atol):
        raise NumericalError(
            f"Diagonal still depends on wire {target} after synthesis "
            f"(max deviation {np.max(np.abs(d[0::2] - d[1::2])):.3g})"
        )

    return gates, d[0::2]


def compile_diagonal(entries, num_wires: int, wires: Optional[Sequence[int]] = None,
                     depth: int = 0, gates: Optional[List[CircuitGate]] = None,
                     cache: Optional[GrayCodeCache] = None,
                     atol: float = DEFAULT_ATOL) -> List[CircuitGate]:
    """
    Compile a diagonal unitary into CNOT and Rz gates.

    The circuit reproduces diag(entries) up to a global phase and uses
    O(2^K) gates for 2^K entries. Entry index bit k (least significant
    first) belongs to wire wires[depth + k].

    Args:
        entries: 2^K unit-modulus diagonal entries
        num_wires: Register size N
        wires: Wires of the diagonal; defaults to 1, ..., depth + K
        depth: Index into `wires` of the first target wire
        gates: Accumulator list, extended in place and returned
        cache: Gray-code column cache; a fresh one is used when omitted
        atol: Tolerance of the equality checks

    Returns:
        Gate sequence in application order

    Raises:
        PreconditionError: if the entry count is not a power of two >= 2 or
            the wires do not fit the register
        NumericalError: if a level leaves the diagonal dependent on its target
    """
    d = np.array(entries, dtype=complex).reshape(-1)
    K = num_qubits(len(d))
    if K < 1:
        raise PreconditionError(f"Diagonal length {len(d)} is not a power of two >= 2")

    if wires is None:
        wires = tuple(range(1, depth + K + 1))
    wires = tuple(wires)
    if len(wires) < depth + K:
        raise PreconditionError(
            f"{len(wires)} wires given but {depth + K} needed for a {K}-qubit diagonal at depth {depth}"
        )
    if num_wires < max(wires[depth:depth + K]):
        raise PreconditionError(
            f"Circuit size `{num_wires}` too small for wires `{list(wires[depth:depth + K])}`."
        )

    if gates is None:
        gates = []
    if cache is None:
        cache = GrayCodeCache()

    start = len(gates)
    worklist = [(d, depth)]
    while worklist:
        d, j = worklist.pop()
        if len(d) == 2:
            beta = np.angle(d[0]) - np.angle(d[1])
            gates.append(single_qubit_circuit_gate(wires[j], RzGate(-beta)))
            continue

        level, rest = _synthesize_level(d, j, wires, cache, atol)
        gates.extend(level)
        worklist.append((rest, j + 1))

    logger.debug("diagonal on %d qubits compiled into %d gates", K, len(gates) - start)
    return gates
