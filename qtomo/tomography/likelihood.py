"""Linear likelihood model of a process tomography experiment.

A tomography experiment prepares probe states ``ρ_i`` and measures effects
``E_j``. For a Choi matrix ``C`` the predicted frequency of the pair
``(i, j)`` is ``Tr[E_j Φ(ρ_i)] = Tr[(ρ_iᵀ ⊗ E_j) C]``, which is linear in
``vec(C)``, so all predictions are ``A @ vec(C)`` for a fixed sensing matrix
``A`` whose row ``i * n_effects + j`` is the conjugate of ``vec(ρ_iᵀ ⊗ E_j)``.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import torch

from qtomo.exceptions import DimensionError
from qtomo.quobj import DTYPE, Ket, Operator, normalize, tensor, unvectorize, vectorize


def _as_density(state: Ket | Operator) -> Operator:
    if isinstance(state, Ket):
        return normalize(Operator.from_ket(state))
    if isinstance(state, Operator):
        return state
    raise TypeError(f"probe states must be Kets or Operators, got {type(state).__name__}")


def build_sensing_matrix(
    probe_states: Sequence[Ket | Operator],
    measurement_effects: Sequence[Operator],
) -> torch.Tensor:
    """
    Build the sensing matrix ``A`` of a process tomography experiment.

    Parameters
    ----------
    probe_states:
        Prepared states. Kets are turned into trace-normalized projectors;
        Operators are used as given.
    measurement_effects:
        Measurement operators, conventionally scaled so that they sum to the
        identity.

    Returns
    -------
    torch.Tensor
        Complex tensor of shape ``(len(probe_states) * len(measurement_effects), d⁴)``.
        Row ``i * len(measurement_effects) + j`` is ``vec(ρ_iᵀ ⊗ E_j)`` conjugated,
        so that ``A @ vec(C)`` lists ``Tr[E_j Φ(ρ_i)]`` for the channel of
        :func:`~qtomo.tomography.choi.apply_process`. The measurement data
        must be ordered the same way.

    Raises
    ------
    ValueError
        If either sequence is empty.
    DimensionError
        If the probes (or the effects) do not share dims, or probes and
        effects act on spaces of different dimension.
    """
    if len(probe_states) == 0 or len(measurement_effects) == 0:
        raise ValueError("need at least one probe state and one measurement effect")

    rhos = [_as_density(state) for state in probe_states]
    effects = list(measurement_effects)
    for group, name in ((rhos, "probe states"), (effects, "measurement effects")):
        for item in group[1:]:
            if item.dims != group[0].dims:
                raise DimensionError(
                    f"{name} must share subspace dimensions: {group[0].dims} vs {item.dims}"
                )
    if rhos[0].shape[0] != effects[0].shape[0]:
        raise DimensionError(
            f"probe dimension {rhos[0].shape[0]} does not match effect dimension {effects[0].shape[0]}"
        )

    rows = [
        vectorize(tensor(rho.transpose(), effect)).conj()
        for rho in rhos
        for effect in effects
    ]
    return torch.stack(rows)


def axial_states() -> List[Ket]:
    """The six (unnormalized) axial Bloch states ``|+⟩, |−⟩, |+i⟩, |−i⟩, |1⟩, |0⟩``."""
    return [
        Ket([1, 1]),
        Ket([1, -1]),
        Ket([1, 1j]),
        Ket([1, -1j]),
        Ket([0, 1]),
        Ket([1, 0]),
    ]


def single_qubit_likelihood_model() -> torch.Tensor:
    """
    Sensing matrix of the reference single-qubit experiment.

    The six axial states are used both as probes and, divided by three so
    that they sum to the identity, as measurement effects. The result has
    shape ``(36, 16)``.
    """
    rhos = [normalize(Operator.from_ket(ket)) for ket in axial_states()]
    effects = [rho / 3 for rho in rhos]
    return build_sensing_matrix(rhos, effects)


def _predictions(choi: torch.Tensor, sensing: torch.Tensor) -> torch.Tensor:
    return sensing @ vectorize(choi)


def loglikelihood(counts: torch.Tensor, choi: torch.Tensor, sensing: torch.Tensor) -> float:
    """
    Negative log-likelihood ``-Re[M · log(A vec(C))]``.

    Binomial statistics of the observed frequencies ``M`` up to an additive
    constant.
    """
    probs = _predictions(choi, sensing)
    return float(-(counts * torch.log(probs)).sum().real)


def loglikelihood_gradient(
    counts: torch.Tensor, choi: torch.Tensor, sensing: torch.Tensor
) -> torch.Tensor:
    """Gradient ``unvec(-A† (M / (A vec(C))))`` of :func:`loglikelihood`."""
    probs = _predictions(choi, sensing)
    return unvectorize(-(sensing.conj().transpose(0, 1) @ (counts / probs)))


def prepare_data(counts, sensing) -> Tuple[torch.Tensor, torch.Tensor]:
    """Cast measurement frequencies and the sensing matrix to solver dtypes.

    ``counts`` may be a flat sequence or a ``(n_probes, n_effects)`` table,
    which is flattened row by row to match the row order of
    :func:`build_sensing_matrix`.
    """
    counts = torch.as_tensor(counts, dtype=torch.float64).reshape(-1)
    sensing = torch.as_tensor(sensing, dtype=DTYPE)
    return counts, sensing


__all__ = [
    "build_sensing_matrix",
    "axial_states",
    "single_qubit_likelihood_model",
    "loglikelihood",
    "loglikelihood_gradient",
    "prepare_data",
]
