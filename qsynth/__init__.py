"""
Qsynth - Quantum gate synthesis in Python.

This package compiles unitary matrices (1- and 2-qubit, and diagonal
unitaries on any number of qubits) into sequences of elementary single- and
two-qubit gates, and embeds gates and gate sequences into the operator space
of a multi-qubit register to check the result.

Modules:
    gates     - Elementary gate set (H, X, S, Rz, controlled gates, ...)
    circuit   - CircuitGate: a gate bound to register wires
    embedding - Sparse embedding of gates into an N-wire register
    diagonal  - Gray-code synthesis of diagonal unitaries
    compiler  - Single-qubit, SO(4) and two-qubit synthesis, compile()
    utils     - Phase-insensitive comparison, bit helpers

Quick Start:
    >>> import numpy as np
    >>> from qsynth import compile, embed, H_gate, I_gate, allclose_up_to_global_phase
    >>> gates = compile(H_gate, 2, [1])
    >>> allclose_up_to_global_phase(embed(gates, 2), np.kron(I_gate, H_gate))
    True
"""

# Gates
from .gates import (
    # Raw matrices
    X_gate,
    Y_gate,
    Z_gate,
    H_gate,
    S_gate,
    Sdag_gate,
    T_gate,
    Tdag_gate,
    I_gate,
    SWAP_gate,
    P_gate,
    Rx_gate,
    Ry_gate,
    Rz_gate,
    # Gate classes
    Gate,
    XGate,
    YGate,
    ZGate,
    HadamardGate,
    SGate,
    SdagGate,
    TGate,
    TdagGate,
    RxGate,
    RyGate,
    RzGate,
    PhaseShiftGate,
    SwapGate,
    ControlledGate,
    MatrixGate,
)

# Circuit gates
from .circuit import (
    CircuitGate,
    adjoint,
    req_wires,
    circuit_gate,
    single_qubit_circuit_gate,
    two_qubit_circuit_gate,
    controlled_circuit_gate,
)

# Embedding
from .embedding import (
    distribute_to_wires,
    embed,
)

# Synthesis
from .diagonal import (
    GrayCodeCache,
    compile_diagonal,
)

from .compiler import (
    E,
    compile,
    compile_1qubit,
    compile_2qubit,
    decompose_so4,
)

# Errors
from .errors import (
    QsynthError,
    PreconditionError,
    UnsupportedSizeError,
    StructuralError,
    NumericalError,
)

# Utilities
from .utils import (
    DEFAULT_ATOL,
    allclose_up_to_global_phase,
    global_phase,
    is_unitary,
    is_diagonal,
    gray_encode,
)

__version__ = "0.1.0"
__all__ = [
    # Gates
    "X_gate",
    "Y_gate",
    "Z_gate",
    "H_gate",
    "S_gate",
    "Sdag_gate",
    "T_gate",
    "Tdag_gate",
    "I_gate",
    "SWAP_gate",
    "P_gate",
    "Rx_gate",
    "Ry_gate",
    "Rz_gate",
    "Gate",
    "XGate",
    "YGate",
    "ZGate",
    "HadamardGate",
    "SGate",
    "SdagGate",
    "TGate",
    "TdagGate",
    "RxGate",
    "RyGate",
    "RzGate",
    "PhaseShiftGate",
    "SwapGate",
    "ControlledGate",
    "MatrixGate",
    # Circuit gates
    "CircuitGate",
    "adjoint",
    "req_wires",
    "circuit_gate",
    "single_qubit_circuit_gate",
    "two_qubit_circuit_gate",
    "controlled_circuit_gate",
    # Embedding
    "distribute_to_wires",
    "embed",
    # Synthesis
    "GrayCodeCache",
    "compile_diagonal",
    "E",
    "compile",
    "compile_1qubit",
    "compile_2qubit",
    "decompose_so4",
    # Errors
    "QsynthError",
    "PreconditionError",
    "UnsupportedSizeError",
    "StructuralError",
    "NumericalError",
    # Utils
    "DEFAULT_ATOL",
    "allclose_up_to_global_phase",
    "global_phase",
    "is_unitary",
    "is_diagonal",
    "gray_encode",
]
