"""
Operator embedding.

Places the matrix of an M-wire gate into the 2^N-dimensional space of an
N-wire register, acting as identity on the other wires. The result is built
directly in sparse form; the dense 2^N x 2^N operator is never formed.

Ordering convention: wire w has stride 2^(w-1), so wire 1 is the least
significant bit of the basis index. For a single-qubit gate G on wire 1 of a
2-wire register the embedding equals np.kron(I, G).
"""

import logging
from typing import Iterable, Sequence, Union

import numpy as np
import scipy.sparse as sp

from .circuit import CircuitGate, req_wires
from .errors import PreconditionError

logger = logging.getLogger(__name__)


def _local_to_full(indices: np.ndarray, strides: np.ndarray) -> np.ndarray:
    """Map M-bit local indices onto full-register offsets via per-bit strides."""
    full = np.zeros_like(indices)
    for k, stride in enumerate(strides):
        full += ((indices >> k) & 1) * stride
    return full


def distribute_to_wires(gmat, wires: Sequence[int], num_wires: int) -> sp.csr_matrix:
    """
    Embed a 2^M x 2^M matrix acting on `wires` into an N-wire register.

    Each stored entry of gmat is mapped to full-register row and column
    indices through the strides of the target wires, then replicated over all
    2^(N-M) settings of the complementary wires. The output stores exactly
    nnz(gmat) * 2^(N-M) entries.

    Args:
        gmat: Gate matrix (dense or scipy sparse)
        wires: Target wires (1-based, distinct, any order)
        num_wires: Register size N

    Returns:
        2^N x 2^N CSR matrix
    """
    wires = np.atleast_1d(np.asarray(wires, dtype=np.int64))
    M = len(wires)
    if M < 1:
        raise PreconditionError("Need at least one wire to act on.")
    if wires.min() < 1:
        raise PreconditionError(f"Wire index cannot be smaller than 1, got {wires.tolist()}.")
    if len(np.unique(wires)) != M:
        raise PreconditionError(f"Wire indices must be unique, got {wires.tolist()}.")
    if num_wires < wires.max():
        raise PreconditionError(
            f"Circuit size `{num_wires}` too small for gate applied to wires `{wires.tolist()}`."
        )

    gmat = sp.coo_matrix(gmat, dtype=complex)
    if gmat.shape != (2 ** M, 2 ** M):
        raise PreconditionError(
            f"Matrix of shape {gmat.shape} cannot act on {M} wires."
        )

    # complementary wires
    taken = set(wires.tolist())
    iwcompl = np.array([w for w in range(1, num_wires + 1) if w not in taken], dtype=np.int64)

    strides = 2 ** np.arange(num_wires, dtype=np.int64)
    wstrides = strides[wires - 1]
    cstrides = strides[iwcompl - 1]

    rows = _local_to_full(gmat.row.astype(np.int64), wstrides)
    cols = _local_to_full(gmat.col.astype(np.int64), wstrides)
    offsets = _local_to_full(np.arange(2 ** (num_wires - M), dtype=np.int64), cstrides)

    rowind = (offsets[:, None] + rows[None, :]).ravel()
    colind = (offsets[:, None] + cols[None, :]).ravel()
    values = np.tile(gmat.data, len(offsets))

    dim = 2 ** num_wires
    return sp.coo_matrix((values, (rowind, colind)), shape=(dim, dim)).tocsr()


def embed(gates: Union[CircuitGate, Iterable[CircuitGate]], num_wires: int = 0) -> sp.csr_matrix:
    """
    Sparse matrix of a circuit gate or gate sequence on an N-wire register.

    For a sequence, gates are given in application order, so the combined
    operator is the product of the per-gate embeddings with the last gate as
    the left-most factor.

    Args:
        gates: A CircuitGate or an iterable of them
        num_wires: Register size; 0 selects the smallest register that hosts
                   every gate

    Returns:
        2^N x 2^N CSR matrix

    A Hadamard on wire 1 of a 2-wire register,
    embed(CircuitGate((1,), HadamardGate()), 2), equals np.kron(I, H).
    """
    if isinstance(gates, CircuitGate):
        gates = [gates]
    gates = list(gates)

    nmin = req_wires(gates)
    if num_wires == 0:
        num_wires = nmin
    elif num_wires < nmin:
        raise PreconditionError(
            f"Circuit size `{num_wires}` too small; gate sequence requires {nmin} wires."
        )
    if num_wires < 1:
        raise PreconditionError("Cannot embed an empty gate sequence without a register size.")

    gmat = sp.identity(2 ** num_wires, dtype=complex, format="csr")
    for cg in gates:
        gmat = distribute_to_wires(cg.gate.sparse_matrix(), cg.wires, num_wires) @ gmat

    logger.debug("embedded %d gates into %d wires (nnz=%d)", len(gates), num_wires, gmat.nnz)
    return gmat
