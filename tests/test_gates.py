"""Tests for the elementary gate set."""

import numpy as np
import pytest

from qsynth import (
    X_gate, Y_gate, Z_gate, H_gate, S_gate, T_gate, I_gate, SWAP_gate,
    Rx_gate, Rz_gate, P_gate,
    XGate, YGate, ZGate, HadamardGate, SGate, SdagGate, TGate, TdagGate,
    RxGate, RyGate, RzGate, PhaseShiftGate, SwapGate, ControlledGate, MatrixGate,
    PreconditionError, is_unitary,
)


ALL_GATES = [
    XGate(), YGate(), ZGate(), HadamardGate(), SGate(), SdagGate(), TGate(), TdagGate(),
    RxGate(0.3), RyGate(-1.2), RzGate(2.5), PhaseShiftGate(0.7), SwapGate(),
    ControlledGate(XGate(), 1), ControlledGate(RyGate(0.4), 2), ControlledGate(SwapGate(), 1),
    MatrixGate(np.kron(H_gate, S_gate)),
]


class TestGateMatrices:
    """Tests for the raw gate matrices."""

    def test_h_gate_is_self_inverse(self):
        """H² = I."""
        assert np.allclose(H_gate @ H_gate, I_gate)

    def test_s_squared_is_z(self):
        """S² = Z."""
        assert np.allclose(S_gate @ S_gate, Z_gate)

    def test_t_squared_is_s(self):
        """T² = S."""
        assert np.allclose(T_gate @ T_gate, S_gate)

    def test_rz_is_diagonal_phase(self):
        """Rz(θ) = diag(e^{-iθ/2}, e^{iθ/2})."""
        theta = 0.9
        assert np.allclose(Rz_gate(theta), np.diag([np.exp(-0.45j), np.exp(0.45j)]))

    def test_rx_pi_is_x_up_to_phase(self):
        """Rx(π) = -iX."""
        assert np.allclose(Rx_gate(np.pi), -1j * X_gate)

    def test_phase_shift(self):
        """P(π/2) = S."""
        assert np.allclose(P_gate(np.pi / 2), S_gate)

    def test_pauli_anticommute(self):
        """XY = iZ."""
        assert np.allclose(X_gate @ Y_gate, 1j * Z_gate)


class TestGateClasses:
    """Tests for the gate class interface."""

    @pytest.mark.parametrize("gate", ALL_GATES, ids=repr)
    def test_matrix_is_unitary(self, gate):
        """Every gate matrix is unitary and has the declared arity."""
        m = gate.matrix()
        assert m.shape == (2 ** gate.num_wires, 2 ** gate.num_wires)
        assert is_unitary(m)

    @pytest.mark.parametrize("gate", ALL_GATES, ids=repr)
    def test_sparse_matches_dense(self, gate):
        """sparse_matrix() and matrix() agree."""
        assert np.allclose(gate.sparse_matrix().toarray(), gate.matrix())

    @pytest.mark.parametrize("gate", ALL_GATES, ids=repr)
    def test_adjoint_inverts(self, gate):
        """G† G = I."""
        adj = gate.adjoint()
        assert adj.num_wires == gate.num_wires
        assert np.allclose(adj.matrix() @ gate.matrix(), np.eye(2 ** gate.num_wires))

    def test_s_and_sdag_are_adjoint_types(self):
        """S† is an SdagGate, T† a TdagGate."""
        assert isinstance(SGate().adjoint(), SdagGate)
        assert isinstance(SdagGate().adjoint(), SGate)
        assert isinstance(TGate().adjoint(), TdagGate)
        assert isinstance(TdagGate().adjoint(), TGate)

    def test_matrix_returns_copy(self):
        """Mutating a returned matrix does not change the gate."""
        gate = HadamardGate()
        m = gate.matrix()
        m[0, 0] = 42
        assert np.allclose(gate.matrix(), H_gate)


class TestControlledGate:
    """Tests for controlled gates."""

    def test_cnot_matrix(self):
        """Target is the low bit, so X fills the last 2x2 block."""
        cnot = np.array([[1, 0, 0, 0],
                         [0, 1, 0, 0],
                         [0, 0, 0, 1],
                         [0, 0, 1, 0]])
        assert np.allclose(ControlledGate(XGate(), 1).matrix(), cnot)

    def test_toffoli_matrix(self):
        """Two controls on X give the Toffoli permutation."""
        m = ControlledGate(XGate(), 2).matrix()
        expected = np.eye(8)
        expected[6:, 6:] = X_gate.real
        assert np.allclose(m, expected)

    def test_controlled_swap_arity(self):
        """Arity is target arity plus control count."""
        assert ControlledGate(SwapGate(), 1).num_wires == 3

    def test_needs_a_control(self):
        """Zero controls is rejected."""
        with pytest.raises(PreconditionError):
            ControlledGate(XGate(), 0)


class TestMatrixGate:
    """Tests for the generic matrix gate."""

    def test_arity_from_dimension(self):
        """An 8x8 matrix acts on three wires."""
        assert MatrixGate(np.eye(8)).num_wires == 3

    @pytest.mark.parametrize("shape", [(2, 3), (3, 3), (1, 1), (4,)])
    def test_rejects_bad_shapes(self, shape):
        """Non-square or non-power-of-two matrices are rejected."""
        with pytest.raises(PreconditionError):
            MatrixGate(np.ones(shape))

    def test_adjoint_is_conjugate_transpose(self):
        """MatrixGate(U)† = MatrixGate(U†)."""
        u = np.kron(S_gate, H_gate)
        assert np.allclose(MatrixGate(u).adjoint().matrix(), u.conj().T)


class TestGateEquality:
    """Tests for approximate gate equality."""

    def test_same_parameters(self):
        """Rotations with nearly equal angles compare equal."""
        assert RxGate(0.5).isclose(RxGate(0.5 + 1e-12))

    def test_different_parameters(self):
        """Rotations with different angles differ."""
        assert not RxGate(0.5).isclose(RxGate(0.6))

    def test_different_types_never_equal(self):
        """Rx and Ry with the same angle differ; so do X and MatrixGate(X)."""
        assert not RxGate(0.5).isclose(RyGate(0.5))
        assert not XGate().isclose(MatrixGate(X_gate))

    def test_fixed_gates(self):
        """Two Hadamards are equal."""
        assert HadamardGate().isclose(HadamardGate())

    def test_controlled(self):
        """Controlled gates compare base gate and control count."""
        assert ControlledGate(RzGate(0.1), 1).isclose(ControlledGate(RzGate(0.1), 1))
        assert not ControlledGate(RzGate(0.1), 1).isclose(ControlledGate(RzGate(0.1), 2))
        assert not ControlledGate(RzGate(0.1), 1).isclose(ControlledGate(RzGate(0.2), 1))

    def test_matrix_gates(self):
        """Matrix gates compare their matrices."""
        assert MatrixGate(SWAP_gate).isclose(MatrixGate(SWAP_gate + 1e-12))
        assert not MatrixGate(SWAP_gate).isclose(MatrixGate(np.eye(4)))
