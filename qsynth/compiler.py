"""
Compile unitary matrices into elementary gate sequences.

Supported inputs are 2x2 and 4x4 unitaries and diagonal unitaries of any
power-of-two size. Every synthesizer reproduces its input up to a global
phase; only compile_1qubit reports that phase.

The two-qubit synthesis follows Vatan & Williams, "Optimal quantum circuits
for general two-qubit gates" (https://arxiv.org/abs/quant-ph/0308006).
"""

import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .circuit import CircuitGate, controlled_circuit_gate, single_qubit_circuit_gate
from .diagonal import compile_diagonal
from .errors import NumericalError, PreconditionError, UnsupportedSizeError
from .gates import (HadamardGate, RxGate, RzGate, SdagGate, SGate, XGate,
                    I_gate, X_gate, Y_gate, Z_gate, Rx_gate, Rz_gate)
from .utils import DEFAULT_ATOL, is_diagonal, is_unitary, num_qubits

logger = logging.getLogger(__name__)

# Magic basis: E† (A ⊗ B) E is real orthogonal for A, B in SU(2)
E = np.array([[1,  1j,  0,  0],
              [0,   0, 1j,  1],
              [0,   0, 1j, -1],
              [1, -1j,  0,  0]]) / np.sqrt(2)

# A = p·I + q·iZ + r·iX + s·iY and B = a·I + b·iZ + c·iX + d·(-iY)
_SU2_BASIS_A = np.array([I_gate, 1j * Z_gate, 1j * X_gate, 1j * Y_gate])
_SU2_BASIS_B = np.array([I_gate, 1j * Z_gate, 1j * X_gate, -1j * Y_gate])

# _SO4_BASIS[i, j] = E† (A_i ⊗ B_j) E, real and orthogonal under the
# Frobenius inner product with squared norm 4
_SO4_BASIS = np.array([[np.real(E.conj().T @ np.kron(a, b) @ E) for b in _SU2_BASIS_B]
                       for a in _SU2_BASIS_A])

# Eigensolver attempts for the real eigenbasis of U·Uᵀ
EIGH_ATTEMPTS = 16


def _check_wires(wires, n: int, num_wires: int) -> Tuple[int, ...]:
    if wires is None:
        wires = tuple(range(1, n + 1))
    wires = tuple(wires)
    if len(wires) != n:
        raise PreconditionError(f"{n}-qubit matrix needs {n} wires, got {list(wires)}")
    if num_wires < max(wires):
        raise PreconditionError(
            f"Circuit size `{num_wires}` too small for wires `{list(wires)}`."
        )
    return wires


# =============================================================================
# Single-qubit synthesis
# =============================================================================

def compile_1qubit(m, num_wires: int, wires: Optional[Sequence[int]] = None,
                   atol: float = DEFAULT_ATOL) -> Tuple[List[CircuitGate], complex]:
    """
    Compile a U(2) matrix into Rz, Rx, Rz rotations.

    The rotations are returned in application order, Rz(θ2), Rx(φ), Rz(θ1),
    so that m = phase · Rz(θ1) Rx(φ) Rz(θ2).

    When sin φ vanishes the two Z angles are not separately determined. For
    a diagonal input (φ = 0) all of the Z rotation goes into θ1; for an
    anti-diagonal input (φ = π) likewise, with θ2 = 0.

    Args:
        m: 2x2 unitary matrix
        num_wires: Register size N
        wires: One-element wire sequence, default (1,)
        atol: Tolerance used to detect the degenerate cases

    Returns:
        (gates, phase) with phase * embed(gates) == m
    """
    m = np.asarray(m, dtype=complex)
    if m.shape != (2, 2):
        raise PreconditionError(f"compile_1qubit needs a 2x2 matrix, got shape {m.shape}")
    (wire,) = _check_wires(wires, 1, num_wires)

    # remove the global phase; fall back to the off-diagonal pair for
    # anti-diagonal input
    prod = m[0, 0] * m[1, 1]
    if abs(prod) < atol:
        prod = -m[0, 1] * m[1, 0]
    phase = np.sqrt(prod / abs(prod))
    b = m / phase

    # cos(φ/2) = sqrt(b11 b22) = |b11|; arctan2 stays accurate near φ = 0
    # and φ = π where arccos loses half the digits
    phi = 2 * np.arctan2(abs(b[1, 0]), abs(b[0, 0]))
    sin_phi = np.sin(phi)

    if abs(sin_phi) < atol:
        theta2 = 0.0
        if np.cos(phi) > 0:
            theta1 = np.angle(b[1, 1] / b[0, 0])
        else:
            theta1 = np.angle(b[1, 0] / b[0, 1])
    else:
        theta1 = np.angle(2j * b[1, 0] * b[1, 1] / sin_phi)
        theta2 = -np.angle(2j * b[0, 0] * b[1, 0] / sin_phi)

    # half-angle sign ambiguity: recompute the phase from the actual product
    r = Rz_gate(theta1) @ Rx_gate(phi) @ Rz_gate(theta2)
    phase = np.trace(r.conj().T @ m) / 2

    gates = [
        single_qubit_circuit_gate(wire, RzGate(theta2)),
        single_qubit_circuit_gate(wire, RxGate(phi)),
        single_qubit_circuit_gate(wire, RzGate(theta1)),
    ]
    return gates, phase


# =============================================================================
# SO(4) factorization
# =============================================================================

def decompose_so4(m, atol: float = DEFAULT_ATOL) -> Tuple[np.ndarray, np.ndarray]:
    """
    Split M in SO(4) into A, B in SU(2) with E† (A ⊗ B) E = M.

    A is the first Kronecker factor, i.e. acts on the more significant wire.
    Writing A = [[p+iq, s+ir], [-s+ir, p-iq]] and
    B = [[a+ib, -d+ic], [d+ic, a-ib]], the 16 products of (p, q, r, s) with
    (a, b, c, d) are linear in the entries of M. Row 0 of that table is
    (pa, pb, pc, pd), so B = row / p, and A then follows from B. Row 0 is
    only a usable pivot when p is not small; the row of largest norm is
    tried first, so a vanishing p or a (e.g. for CNOT- or SWAP-like
    inputs) never ends up in a denominator. The overall sign of the pair
    is arbitrary.

    Raises:
        PreconditionError: for a matrix that is not 4x4
        NumericalError: if M is not the image of a tensor product
    """
    m = np.asarray(m)
    if m.shape != (4, 4):
        raise PreconditionError(f"decompose_so4 only works on 4x4 matrices, got shape {m.shape}")

    products = np.einsum("ijkl,kl->ij", _SO4_BASIS, m) / 4
    norms = np.linalg.norm(products, axis=1)

    for row in np.argsort(-norms, kind="stable"):
        if norms[row] < atol:
            break
        for sign in (1, -1):
            if sign < 0:
                logger.debug("decompose_so4: retrying row %d with negated pivot", row)
            b_coeffs = products[row] / (sign * norms[row])
            a_coeffs = products @ b_coeffs

            if not np.isclose(a_coeffs @ a_coeffs, 1, atol=atol):
                continue
            A = np.tensordot(a_coeffs, _SU2_BASIS_A, axes=1)
            B = np.tensordot(b_coeffs, _SU2_BASIS_B, axes=1)
            if np.allclose(E.conj().T @ np.kron(A, B) @ E, m, atol=atol):
                return A, B
        logger.debug("decompose_so4: pivot row %d rejected", row)

    raise NumericalError("decompose_so4: matrix is not the magic-basis image of A ⊗ B")


# =============================================================================
# Two-qubit synthesis
# =============================================================================

def _real_eigenbasis(P2: np.ndarray, atol: float) -> np.ndarray:
    """
    Real orthogonal K with Kᵀ·P2·K diagonal, for a symmetric unitary P2.

    The real and imaginary parts of P2 commute, so they share a set of real
    eigenvectors, which eigh of Re + Im finds unless two distinct
    eigenvalues of P2 collide in Re + Im (as for CNOT or SWAP). Further
    attempts use seeded random weights of the two parts.
    """
    rng = np.random.default_rng(0)
    weights = [(1.0, 1.0)] + [tuple(rng.normal(size=2)) for _ in range(EIGH_ATTEMPTS - 1)]

    for w_re, w_im in weights:
        _, K = np.linalg.eigh(w_re * np.real(P2) + w_im * np.imag(P2))
        if is_diagonal(K.T @ P2 @ K, atol=atol):
            return K
        logger.debug("real eigenbasis: weights (%.3g, %.3g) mix eigenspaces, retrying", w_re, w_im)

    raise NumericalError("compile_2qubit: failed to diagonalize U·Uᵀ with real eigenvectors")


def compile_2qubit(m, num_wires: int, wires: Optional[Sequence[int]] = None,
                   atol: float = DEFAULT_ATOL) -> List[CircuitGate]:
    """
    Compile a U(4) matrix into single-qubit rotations, CNOTs and S/H gates.

    With U = E† m E, the symmetric unitary U·Uᵀ = P² is diagonalized by a
    real orthogonal K₂, giving U = K₂·Diag·K₂⁻¹·K₁ with K₁ in SO(4). Hence
    m = (A ⊗ B)·E·Diag·E†·(C ⊗ D), where E is realized by S, S, H, CNOT and
    Diag by compile_diagonal.

    The local matrix of m reads its least significant bit from wires[0].

    Args:
        m: 4x4 unitary matrix
        num_wires: Register size N
        wires: Two wires, default (1, 2)
        atol: Tolerance of the internal consistency checks

    Returns:
        Gate sequence reproducing m up to a global phase
    """
    m = np.asarray(m, dtype=complex)
    if m.shape != (4, 4):
        raise PreconditionError(f"compile_2qubit needs a 4x4 matrix, got shape {m.shape}")
    w1, w2 = _check_wires(wires, 2, num_wires)

    U = E.conj().T @ m @ E
    P2 = U @ U.T

    K_2 = _real_eigenbasis(P2, atol)
    D = np.diag(K_2.T @ P2 @ K_2).copy()

    det_K2 = np.linalg.det(K_2)
    D[0] = D[0] / det_K2 ** 2
    K_2[:, 0] = K_2[:, 0] * det_K2

    Diag = np.sqrt(D)
    Diag[0] = Diag[0] * np.linalg.det(U) / np.prod(Diag)

    P = K_2 @ np.diag(Diag) @ np.linalg.inv(K_2)
    K_1 = np.linalg.inv(P) @ U

    C, D_ = decompose_so4(np.real(np.linalg.inv(K_2) @ K_1), atol=np.sqrt(atol))
    A, B = decompose_so4(K_2, atol=np.sqrt(atol))

    cg: List[CircuitGate] = []
    cg.extend(compile_1qubit(C, num_wires, [w2], atol=atol)[0])
    cg.extend(compile_1qubit(D_, num_wires, [w1], atol=atol)[0])

    # E†
    cg.extend([controlled_circuit_gate(w2, w1, XGate()),
               single_qubit_circuit_gate(w1, HadamardGate()),
               single_qubit_circuit_gate(w2, SdagGate()),
               single_qubit_circuit_gate(w1, SdagGate())])
    compile_diagonal(Diag, num_wires, wires=(w1, w2), gates=cg, atol=np.sqrt(atol))
    # E
    cg.extend([single_qubit_circuit_gate(w1, SGate()),
               single_qubit_circuit_gate(w2, SGate()),
               single_qubit_circuit_gate(w1, HadamardGate()),
               controlled_circuit_gate(w2, w1, XGate())])

    cg.extend(compile_1qubit(A, num_wires, [w2], atol=atol)[0])
    cg.extend(compile_1qubit(B, num_wires, [w1], atol=atol)[0])

    logger.debug("two-qubit unitary on wires (%d, %d) compiled into %d gates", w1, w2, len(cg))
    return cg


# =============================================================================
# Dispatch
# =============================================================================

def compile(m, num_wires: int, wires: Optional[Sequence[int]] = None,
            atol: float = DEFAULT_ATOL) -> List[CircuitGate]:
    """
    Compile a unitary matrix into a gate sequence.

    Diagonal unitaries of any power-of-two size go to compile_diagonal,
    other 2x2 and 4x4 unitaries to compile_1qubit and compile_2qubit.
    The result equals m up to a global phase.

    Args:
        m: Square unitary matrix
        num_wires: Register size N
        wires: Wires the matrix acts on, least significant bit first;
               defaults to 1, ..., log2(dim)
        atol: Tolerance of the unitarity and diagonality checks

    Returns:
        Gate sequence in application order

    Raises:
        PreconditionError: non-square or non-unitary input, bad wires
        UnsupportedSizeError: non-diagonal input larger than 4x4

    Examples:
        >>> import numpy as np
        >>> from qsynth import compile, embed, H_gate, I_gate, allclose_up_to_global_phase
        >>> gates = compile(H_gate, 2, [1])
        >>> allclose_up_to_global_phase(embed(gates, 2), np.kron(I_gate, H_gate))
        True
    """
    m = np.asarray(m, dtype=complex)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        raise PreconditionError("Only square matrices can be compiled into a quantum circuit")
    if not is_unitary(m, atol=atol):
        raise PreconditionError("Only unitary matrices can be compiled into a quantum circuit")

    dim = m.shape[0]
    if is_diagonal(m, atol=atol):
        n = num_qubits(dim)
        if n < 1:
            raise PreconditionError(f"Matrix dimension {dim} is not a power of two >= 2")
        logger.debug("compile: %dx%d diagonal unitary", dim, dim)
        return compile_diagonal(np.diag(m), num_wires, _check_wires(wires, n, num_wires), atol=atol)

    if dim == 2:
        logger.debug("compile: single-qubit unitary")
        return compile_1qubit(m, num_wires, wires, atol=atol)[0]

    if dim == 4:
        logger.debug("compile: two-qubit unitary")
        return compile_2qubit(m, num_wires, wires, atol=atol)

    raise UnsupportedSizeError(
        f"Cannot compile a non-diagonal {dim}x{dim} unitary; only 2x2, 4x4 and diagonal matrices are supported"
    )
