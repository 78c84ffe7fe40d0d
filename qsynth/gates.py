"""
Quantum gate definitions.

This module contains the elementary gates synthesized circuits are built
from. Raw matrices are available as module constants (X_gate, H_gate, ...)
and functions of the rotation angle (Rx_gate, Rz_gate, ...); the gate
classes wrap them with the interface circuit gates and the embedding need:
arity, dense and sparse matrices, adjoint and approximate equality.

The gate set is closed: every elementary gate has its own class, and
MatrixGate is the fallback for an arbitrary unitary.
"""

import numpy as np
import scipy.sparse as sp

from .errors import PreconditionError
from .utils import DEFAULT_ATOL, num_qubits

# =============================================================================
# Single-qubit gates
# =============================================================================

X_gate = np.array([[0, 1],      # Pauli X gate (NOT gate)
                   [1, 0]], dtype=complex)

Y_gate = np.array([[ 0, -1j],   # Pauli Y gate
                   [1j,   0]])

Z_gate = np.array([[1,  0],     # Pauli Z gate = P(π) = S²
                   [0, -1]], dtype=complex)

H_gate = np.array([[1,  1],     # Hadamard gate
                   [1, -1]], dtype=complex) * np.sqrt(1/2)

S_gate = np.array([[1,  0],     # Phase gate = P(π/2) = T²
                   [0, 1j]])

Sdag_gate = np.array([[1,   0],  # S† = P(-π/2)
                      [0, -1j]])

T_gate = np.array([[1,                  0],   # T gate = P(π/4)
                   [0, np.exp(np.pi / -4j)]])

Tdag_gate = np.array([[1,                 0],   # T† gate = P(-π/4)
                      [0, np.exp(np.pi / 4j)]])

I_gate = np.array([[1, 0],      # Identity gate
                   [0, 1]], dtype=complex)


def P_gate(phi):
    """Phase shift gate P(φ) = diag(1, e^{iφ})"""
    return np.array([[1,              0],
                     [0, np.exp(phi * 1j)]])


def Rx_gate(theta):
    """X rotation gate Rx(θ)"""
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c,    -1j * s],
                     [-1j * s,    c]])


def Ry_gate(theta):
    """Y rotation gate Ry(θ)"""
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -s],
                     [s,  c]], dtype=complex)


def Rz_gate(theta):
    """Z rotation gate Rz(θ)"""
    return np.array([[np.exp(-1j * theta / 2),                    0],
                     [                      0, np.exp(1j * theta / 2)]])


# =============================================================================
# Two-qubit gates
# =============================================================================

SWAP_gate = np.array([[1, 0, 0, 0],   # Swap gate
                      [0, 0, 1, 0],
                      [0, 1, 0, 0],
                      [0, 0, 0, 1]], dtype=complex)


# =============================================================================
# Gate classes
# =============================================================================

class Gate:
    """
    Abstract elementary gate acting on a fixed number of wires.

    Subclasses provide matrix() and adjoint(). Parametric gates list their
    parameter attribute names in `params` so isclose() can compare them.
    """

    name = "gate"
    num_wires = 1
    params = ()

    def matrix(self) -> np.ndarray:
        raise NotImplementedError

    def sparse_matrix(self) -> sp.csr_matrix:
        """Matrix as scipy CSR; explicit zeros are not stored."""
        return sp.csr_matrix(self.matrix())

    def adjoint(self) -> "Gate":
        raise NotImplementedError

    def isclose(self, other, atol: float = DEFAULT_ATOL) -> bool:
        """
        Approximate equality under this gate's own type.

        Gates of different concrete types never compare equal, even when
        their matrices coincide.
        """
        if type(self) is not type(other):
            return False
        return all(np.isclose(getattr(self, p), getattr(other, p), atol=atol)
                   for p in self.params)

    def __repr__(self):
        args = ", ".join(f"{getattr(self, p):.6g}" for p in self.params)
        return f"{type(self).__name__}({args})"


class _FixedGate(Gate):
    _matrix = I_gate

    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    def adjoint(self) -> Gate:
        return self


class XGate(_FixedGate):
    name = "X"
    _matrix = X_gate


class YGate(_FixedGate):
    name = "Y"
    _matrix = Y_gate


class ZGate(_FixedGate):
    name = "Z"
    _matrix = Z_gate


class HadamardGate(_FixedGate):
    name = "H"
    _matrix = H_gate


class SGate(_FixedGate):
    name = "S"
    _matrix = S_gate

    def adjoint(self) -> Gate:
        return SdagGate()


class SdagGate(_FixedGate):
    name = "Sdag"
    _matrix = Sdag_gate

    def adjoint(self) -> Gate:
        return SGate()


class TGate(_FixedGate):
    name = "T"
    _matrix = T_gate

    def adjoint(self) -> Gate:
        return TdagGate()


class TdagGate(_FixedGate):
    name = "Tdag"
    _matrix = Tdag_gate

    def adjoint(self) -> Gate:
        return TGate()


class SwapGate(_FixedGate):
    name = "SWAP"
    num_wires = 2
    _matrix = SWAP_gate


class _RotationGate(Gate):
    params = ("theta",)
    _fn = staticmethod(Rz_gate)

    def __init__(self, theta: float):
        self.theta = float(theta)

    def matrix(self) -> np.ndarray:
        return self._fn(self.theta)

    def adjoint(self) -> Gate:
        return type(self)(-self.theta)


class RxGate(_RotationGate):
    """Rotation exp(-iθX/2)."""
    name = "Rx"
    _fn = staticmethod(Rx_gate)


class RyGate(_RotationGate):
    """Rotation exp(-iθY/2)."""
    name = "Ry"
    _fn = staticmethod(Ry_gate)


class RzGate(_RotationGate):
    """Rotation exp(-iθZ/2) = diag(e^{-iθ/2}, e^{iθ/2})."""
    name = "Rz"
    _fn = staticmethod(Rz_gate)


class PhaseShiftGate(Gate):
    """Phase shift P(φ) = diag(1, e^{iφ})."""

    name = "P"
    params = ("phi",)

    def __init__(self, phi: float):
        self.phi = float(phi)

    def matrix(self) -> np.ndarray:
        return P_gate(self.phi)

    def adjoint(self) -> Gate:
        return PhaseShiftGate(-self.phi)


class ControlledGate(Gate):
    """
    Gate U applied when all control wires are |1⟩.

    Wires are ordered targets first, then controls, so the target occupies
    the low local bits and U sits in the last block of the matrix:

        CNOT = ControlledGate(XGate(), 1) = [[1, 0, 0, 0],
                                             [0, 1, 0, 0],
                                             [0, 0, 0, 1],
                                             [0, 0, 1, 0]]

    Args:
        target: Gate applied to the target wires
        num_controls: Number of control wires
    """

    name = "C"

    def __init__(self, target: Gate, num_controls: int = 1):
        if num_controls < 1:
            raise PreconditionError("A controlled gate needs at least one control wire")
        self.target = target
        self.num_controls = num_controls
        self.num_wires = target.num_wires + num_controls

    def matrix(self) -> np.ndarray:
        tdim = 2 ** self.target.num_wires
        m = np.eye(2 ** self.num_wires, dtype=complex)
        m[-tdim:, -tdim:] = self.target.matrix()
        return m

    def sparse_matrix(self) -> sp.csr_matrix:
        tdim = 2 ** self.target.num_wires
        ident = sp.identity(2 ** self.num_wires - tdim, dtype=complex, format="csr")
        return sp.block_diag([ident, self.target.sparse_matrix()], format="csr")

    def adjoint(self) -> Gate:
        return ControlledGate(self.target.adjoint(), self.num_controls)

    def isclose(self, other, atol: float = DEFAULT_ATOL) -> bool:
        if type(self) is not type(other):
            return False
        return (self.num_controls == other.num_controls
                and self.target.isclose(other.target, atol=atol))

    def __repr__(self):
        return f"ControlledGate({self.target!r}, {self.num_controls})"


class MatrixGate(Gate):
    """
    Generic gate defined by an arbitrary 2^M x 2^M matrix.

    Args:
        matrix: Square matrix whose dimension is a power of two
    """

    name = "U"

    def __init__(self, matrix):
        matrix = np.array(matrix, dtype=complex)
        if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
            raise PreconditionError(f"MatrixGate needs a square matrix, got shape {matrix.shape}")
        n = num_qubits(matrix.shape[0])
        if n < 1:
            raise PreconditionError(f"MatrixGate dimension {matrix.shape[0]} is not a power of two")
        self._matrix = matrix
        self.num_wires = n

    def matrix(self) -> np.ndarray:
        return self._matrix.copy()

    def adjoint(self) -> Gate:
        return MatrixGate(self._matrix.conj().T)

    def isclose(self, other, atol: float = DEFAULT_ATOL) -> bool:
        if type(self) is not type(other):
            return False
        return (self._matrix.shape == other._matrix.shape
                and np.allclose(self._matrix, other._matrix, atol=atol))

    def __repr__(self):
        return f"MatrixGate(<{self._matrix.shape[0]}x{self._matrix.shape[1]}>)"
