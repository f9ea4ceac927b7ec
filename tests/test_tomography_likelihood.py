"""Tests for the sensing matrix and the likelihood function."""

import pytest
import torch

from qtomo.exceptions import DimensionError
from qtomo.gates import rotation
from qtomo.quobj import DTYPE, Ket, Operator, normalize, tensor, vectorize
from qtomo.tomography import (
    apply_process,
    axial_states,
    build_sensing_matrix,
    choi_from_unitary,
    loglikelihood,
    loglikelihood_gradient,
    prepare_data,
)

Z = torch.tensor([[1, 0], [0, -1]], dtype=DTYPE)


def _axial_densities():
    return [normalize(Operator.from_ket(ket)) for ket in axial_states()]


class TestSensingMatrix:
    """Tests for build_sensing_matrix and the reference model."""

    def test_shape(self, sensing_matrix):
        assert sensing_matrix.shape == (36, 16)
        assert sensing_matrix.dtype == DTYPE

    def test_identity_channel_predicts_born_rule(self, sensing_matrix):
        choi = choi_from_unitary(torch.eye(2, dtype=DTYPE))
        predictions = sensing_matrix @ vectorize(choi)
        rhos = _axial_densities()
        expected = torch.stack([
            torch.trace(rho.data @ (effect.data / 3))
            for rho in rhos
            for effect in rhos
        ])
        assert torch.allclose(predictions, expected)

    def test_trace_preserving_channel_predictions_sum_to_probe_count(self, sensing_matrix):
        choi = choi_from_unitary(torch.eye(2, dtype=DTYPE))
        predictions = sensing_matrix @ vectorize(choi)
        assert predictions.sum().real.item() == pytest.approx(6.0)
        assert torch.allclose(predictions.imag, torch.zeros(36, dtype=torch.float64))

    def test_z_flip_predictions(self, sensing_matrix):
        choi = choi_from_unitary(Z)
        predictions = (sensing_matrix @ vectorize(choi)).real.reshape(6, 6)
        # |+⟩ becomes |−⟩, so the |+⟩ effect never fires and the |−⟩ one always does
        assert predictions[0, 0].item() == pytest.approx(0.0, abs=1e-12)
        assert predictions[0, 1].item() == pytest.approx(1 / 3)
        # |0⟩ is unchanged
        assert predictions[5, 5].item() == pytest.approx(1 / 3)

    def test_agrees_with_apply_process(self, sensing_matrix):
        """Predictions equal Tr[E Φ(ρ)] for a channel with a complex Choi matrix."""
        gate = rotation(0.9, (1, 0, 0))
        choi = choi_from_unitary(gate)
        predictions = sensing_matrix @ vectorize(choi)
        rhos = _axial_densities()
        expected = torch.stack([
            torch.trace((effect.data / 3) @ apply_process(choi, rho).data)
            for rho in rhos
            for effect in rhos
        ])
        assert torch.allclose(predictions, expected)

    def test_accepts_kets(self):
        from_kets = build_sensing_matrix(axial_states(), [rho / 3 for rho in _axial_densities()])
        from_ops = build_sensing_matrix(_axial_densities(), [rho / 3 for rho in _axial_densities()])
        assert torch.allclose(from_kets, from_ops)

    def test_row_order(self):
        probes = _axial_densities()[:2]
        effects = _axial_densities()[4:]
        sensing = build_sensing_matrix(probes, effects)
        expected = vectorize(tensor(probes[1].transpose(), effects[0])).conj()
        assert torch.allclose(sensing[2], expected)

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            build_sensing_matrix([], [Operator(torch.eye(2))])
        with pytest.raises(ValueError):
            build_sensing_matrix([Ket([1, 0])], [])

    def test_dimension_mismatch(self):
        with pytest.raises(DimensionError):
            build_sensing_matrix([Ket([1, 0])], [Operator(torch.eye(3))])

    def test_probe_dims_must_agree(self):
        with pytest.raises(DimensionError):
            build_sensing_matrix(
                [Ket([1, 0, 0, 0], dims=(2, 2)), Ket([1, 0, 0, 0], dims=(4,))],
                [Operator(torch.eye(4))],
            )

    def test_invalid_probe_type(self):
        with pytest.raises(TypeError):
            build_sensing_matrix([torch.eye(2)], [Operator(torch.eye(2))])


class TestLikelihood:
    """Tests for the objective and its gradient."""

    def test_prepare_data_flattens_table(self, z_rotation_frequencies, sensing_matrix):
        counts, sensing = prepare_data(z_rotation_frequencies, sensing_matrix)
        assert counts.shape == (36,)
        assert counts.dtype == torch.float64
        assert counts[6].item() == pytest.approx(z_rotation_frequencies[1, 0])
        assert sensing.dtype == DTYPE

    def test_value_matches_definition(self, z_rotation_frequencies, sensing_matrix):
        counts, sensing = prepare_data(z_rotation_frequencies, sensing_matrix)
        choi = torch.eye(4, dtype=DTYPE) / 2
        probs = (sensing @ vectorize(choi)).real
        expected = -(counts * torch.log(probs)).sum().item()
        assert loglikelihood(counts, choi, sensing) == pytest.approx(expected)

    def test_true_process_beats_identity(self, z_rotation_frequencies, sensing_matrix):
        counts, sensing = prepare_data(z_rotation_frequencies, sensing_matrix)
        # Small depolarization keeps every prediction positive
        mixed = torch.eye(4, dtype=DTYPE) / 2
        z_choi = 0.9 * choi_from_unitary(Z) + 0.1 * mixed
        id_choi = 0.9 * choi_from_unitary(torch.eye(2, dtype=DTYPE)) + 0.1 * mixed
        assert loglikelihood(counts, z_choi, sensing) < loglikelihood(counts, id_choi, sensing)

    def test_gradient_matches_finite_difference(
        self, z_rotation_frequencies, sensing_matrix, random_matrix
    ):
        counts, sensing = prepare_data(z_rotation_frequencies, sensing_matrix)
        choi = torch.eye(4, dtype=DTYPE) / 2
        raw = random_matrix(4)
        direction = 0.5 * (raw + raw.conj().transpose(0, 1))

        grad = loglikelihood_gradient(counts, choi, sensing)
        assert grad.shape == (4, 4)

        eps = 1e-6
        forward = loglikelihood(counts, choi + eps * direction, sensing)
        backward = loglikelihood(counts, choi - eps * direction, sensing)
        numeric = (forward - backward) / (2 * eps)
        analytic = torch.vdot(grad.reshape(-1), direction.reshape(-1)).real.item()
        assert numeric == pytest.approx(analytic, rel=1e-5, abs=1e-8)
