"""
Utility functions for gate synthesis.

This module provides helper functions for:
- Operator comparison (accounting for global phase)
- Unitarity and diagonality predicates
- Binary and Gray-code bit manipulation
"""

import numpy as np
import scipy.sparse as sp
from typing import List, Tuple

# Absolute tolerance used by every soft comparison in the package
DEFAULT_ATOL = 1e-8


def _dense(a) -> np.ndarray:
    if sp.issparse(a):
        return a.toarray()
    return np.asarray(a)


# =============================================================================
# Operator comparison
# =============================================================================

def global_phase(v, w, atol: float = DEFAULT_ATOL) -> complex:
    """
    Return the scalar c such that v ≈ c * w.

    The pivot is the largest entry of w, so the estimate is stable even when
    most entries are zero. Returns 0 when w vanishes.

    Args:
        v: First state or operator (array-like or scipy sparse)
        w: Second state or operator (array-like or scipy sparse)
        atol: Entries of w below this magnitude are treated as zero
    """
    v = _dense(v).reshape(-1)
    w = _dense(w).reshape(-1)

    idx = np.argmax(np.abs(w))
    if np.abs(w[idx]) < atol:
        return 0j
    return v[idx] / w[idx]


def allclose_up_to_global_phase(v, w, atol: float = DEFAULT_ATOL) -> bool:
    """
    Check if two states or operators are equal up to a global phase.

    Global phase has no physical significance, and every synthesizer in this
    package drops it, so compiled circuits must be compared this way. Using
    np.abs() is incorrect: it destroys relative phases.

    Args:
        v: First state or operator (array-like or scipy sparse)
        w: Second state or operator (array-like or scipy sparse)
        atol: Absolute tolerance for comparison

    Returns:
        True if v == c * w for some unit-modulus c
    """
    v = _dense(v)
    w = _dense(w)
    if v.shape != w.shape:
        return False

    phase = global_phase(v, w, atol)
    if phase == 0:
        # Both should be ~0; fallback to direct comparison
        return np.allclose(v, w, atol=atol)
    if not np.isclose(abs(phase), 1.0, atol=np.sqrt(atol)):
        return False
    return np.allclose(v, phase * w, atol=atol)


def is_unitary(m, atol: float = DEFAULT_ATOL) -> bool:
    """Check U·U† = I for a square matrix."""
    m = _dense(m)
    if m.ndim != 2 or m.shape[0] != m.shape[1]:
        return False
    return np.allclose(m @ m.conj().T, np.eye(m.shape[0]), atol=atol)


def is_diagonal(m, atol: float = DEFAULT_ATOL) -> bool:
    """Check that all off-diagonal entries vanish."""
    m = _dense(m)
    return np.allclose(m, np.diag(np.diag(m)), atol=atol)


def num_qubits(dim: int) -> int:
    """
    Number of qubits spanned by a dimension, or -1 if dim is not 2^k.

    Args:
        dim: Matrix dimension
    """
    if dim < 1 or dim & (dim - 1):
        return -1
    return dim.bit_length() - 1


# =============================================================================
# Binary utilities
# =============================================================================

def int_to_bits(x: int, n: int) -> List[int]:
    """
    Convert integer to list of bits (LSB first).

    Args:
        x: Integer to convert
        n: Number of bits

    Returns:
        List of n bits, LSB first
    """
    return [(x >> i) & 1 for i in range(n)]


def odd_parity(x) -> np.ndarray:
    """
    1 where x has an odd number of set bits, 0 elsewhere.

    Works elementwise on non-negative integers below 2^63.

    >>> odd_parity([0, 1, 3, 7]).tolist()
    [0, 1, 0, 1]
    """
    x = np.array(x, dtype=np.int64)
    for shift in (32, 16, 8, 4, 2, 1):
        x ^= x >> shift
    return x & 1


def gray_encode(n: int) -> int:
    """Reflected binary Gray code: consecutive values differ in one bit."""
    return n ^ (n >> 1)


def bit_positions(n: int) -> Tuple[int, ...]:
    """
    Positions of the set bits of n, 1-based and ascending.

    >>> bit_positions(0b1011)
    (1, 2, 4)
    """
    return tuple(i + 1 for i, bit in enumerate(int_to_bits(n, n.bit_length())) if bit)
