"""Tests for standard quantum gates and the rotation builder."""

import math

import pytest
import torch

from qtomo.gates import CNOT, CZ, RCNOT, H, S, T, is_unitary, rotation
from qtomo.quobj import DTYPE, Ket, Operator, tensor

Z = torch.tensor([[1, 0], [0, -1]], dtype=DTYPE)
X = torch.tensor([[0, 1], [1, 0]], dtype=DTYPE)
I2 = torch.eye(2, dtype=DTYPE)


class TestStaticGates:
    """Tests for the gate constants."""

    @pytest.mark.parametrize("gate", [H, S, T, CNOT, RCNOT, CZ])
    def test_unitary(self, gate):
        assert is_unitary(gate)

    def test_single_qubit_dims(self):
        for gate in (H, S, T):
            assert gate.dims == (2,)

    def test_two_qubit_dims(self):
        for gate in (CNOT, RCNOT, CZ):
            assert gate.dims == (2, 2)
            assert gate.shape == (4, 4)

    def test_hermitian_tags(self):
        assert H.is_hermitian
        assert CNOT.is_hermitian
        assert RCNOT.is_hermitian
        assert CZ.is_hermitian
        assert not S.is_hermitian
        assert not T.is_hermitian

    def test_hadamard_maps_zero_to_plus(self):
        plus = Ket([1, 1]) / math.sqrt(2)
        assert (H @ Ket([1, 0])).isclose(plus)

    def test_phase_gate_relations(self):
        assert torch.allclose((S @ S).data, Z)
        assert torch.allclose((T @ T).data, S.data)

    def test_cnot_flips_target_when_control_set(self):
        one_zero = tensor(Ket([0, 1]), Ket([1, 0]))
        one_one = tensor(Ket([0, 1]), Ket([0, 1]))
        assert (CNOT @ one_zero).isclose(one_one)

    def test_rcnot_flips_target_when_control_clear(self):
        zero_zero = tensor(Ket([1, 0]), Ket([1, 0]))
        zero_one = tensor(Ket([1, 0]), Ket([0, 1]))
        assert (RCNOT @ zero_zero).isclose(zero_one)
        one_zero = tensor(Ket([0, 1]), Ket([1, 0]))
        assert (RCNOT @ one_zero).isclose(one_zero)

    def test_cz_phase(self):
        one_one = tensor(Ket([0, 1]), Ket([0, 1]))
        assert (CZ @ one_one).isclose(-one_one)

    def test_constants_cannot_be_mutated(self):
        H.data[0, 0] = 5.0
        assert H[0, 0].item() == pytest.approx(1 / math.sqrt(2))


class TestRotation:
    """Tests for rotation(theta, n)."""

    def test_zero_angle_is_identity(self):
        assert torch.allclose(rotation(0.0).data, I2)

    def test_pi_about_z(self):
        assert torch.allclose(rotation(math.pi, (0, 0, 1)).data, -1j * Z)

    def test_half_pi_about_x(self):
        expected = (I2 - 1j * X) / math.sqrt(2)
        assert torch.allclose(rotation(math.pi / 2).data, expected)

    def test_axis_is_normalized(self):
        a = rotation(0.7, (1, 1, 0))
        b = rotation(0.7, (3, 3, 0))
        assert a.isclose(b)

    def test_full_turn_is_minus_identity(self):
        assert torch.allclose(rotation(2 * math.pi, (0, 1, 0)).data, -I2)

    def test_unitary_and_untagged(self, rng):
        for _ in range(5):
            axis = rng.normal(size=3)
            theta = float(rng.uniform(-math.pi, math.pi))
            gate = rotation(theta, axis)
            assert isinstance(gate, Operator)
            assert gate.dims == (2,)
            assert is_unitary(gate)
            assert not gate.is_hermitian

    def test_bad_axis(self):
        with pytest.raises(ValueError):
            rotation(1.0, (1, 0))
        with pytest.raises(ValueError):
            rotation(1.0, (0, 0, 0))


class TestIsUnitary:
    """Tests for the unitarity check."""

    def test_rejects_non_unitary(self):
        assert not is_unitary(torch.tensor([[1, 1], [0, 1]], dtype=DTYPE))

    def test_rejects_non_square(self):
        assert not is_unitary(torch.zeros(2, 3, dtype=DTYPE))

    def test_accepts_raw_tensor(self):
        assert is_unitary(X)
