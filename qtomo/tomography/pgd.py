"""Maximum-likelihood process tomography by projected gradient descent.

Implements the CPTP-constrained gradient descent of Knee et al.,
Phys. Rev. A 98, 062336 (2018). Every outer iteration takes a gradient step
from the current Choi matrix, projects it onto the CPTP set to obtain a
search direction ``D``, and backtracks along the straight segment
``C + αD`` until an Armijo sufficient-decrease condition holds. Since ``C``
and ``C + D`` are both physical, every accepted iterate stays physical.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import torch

from qtomo.diagnostics import min_eigenvalue, tp_residual
from qtomo.exceptions import ConvergenceError, DimensionError
from qtomo.logging import get_logger
from qtomo.quobj import DTYPE, isqrt

from .config import PGDConfig
from .likelihood import loglikelihood, loglikelihood_gradient, prepare_data
from .projection import project_cptp

logger = get_logger(__name__)

# Objective value "before" the first iteration; any real start beats it.
_INITIAL_PREVIOUS_COST = 1e6
_NORMALIZATION_TOLERANCE = 0.1


class Status(Enum):
    """Exit status of the tomography solver."""

    CONVERGED = "converged"
    MAX_ITER = "max_iter"


@dataclass
class ProcessTomographyResult:
    """
    Outcome of :func:`fit_process_tomography`.

    Attributes:
        choi: Final ``d² x d²`` Choi matrix. Only meaningful as an estimate
            when ``status`` is ``Status.CONVERGED``.
        fun: Negative log-likelihood at ``choi``.
        nit: Number of outer iterations performed.
        status: Solver exit status.
        message: Human-readable explanation of the status.
        history: Objective value before the first iteration followed by the
            value after every outer iteration; non-increasing.
        tp_residual: Largest entry of ``|Tr_out C - I|`` at the solution.
        min_eigenvalue: Smallest eigenvalue of the solution.
    """

    choi: torch.Tensor
    fun: float
    nit: int
    status: Status
    message: str
    history: List[float] = field(default_factory=list)
    tp_residual: Optional[float] = None
    min_eigenvalue: Optional[float] = None

    @property
    def converged(self) -> bool:
        return self.status is Status.CONVERGED


def _validate(counts: torch.Tensor, sensing: torch.Tensor) -> int:
    """Check solver preconditions and return the system dimension ``d``."""
    if sensing.dim() != 2:
        raise DimensionError(f"sensing matrix must be 2-D, got shape {tuple(sensing.shape)}")
    if sensing.shape[0] != counts.shape[0]:
        raise DimensionError(
            f"sensing matrix has {sensing.shape[0]} rows but {counts.shape[0]} "
            f"measurement frequencies were given"
        )
    total = float(counts.sum())
    if not abs(total - 1.0) < _NORMALIZATION_TOLERANCE:
        raise ValueError(f"measurement frequencies are not normalized (sum = {total:.6g})")
    side = isqrt(sensing.shape[1], what="sensing matrix column count")
    return isqrt(side, what="Choi matrix side")


def fit_process_tomography(
    counts,
    sensing,
    config: Optional[PGDConfig] = None,
    verbose: bool = False,
) -> ProcessTomographyResult:
    """
    Reconstruct a Choi matrix from measurement frequencies.

    Args:
        counts: Observed frequencies ``M``, one per row of ``sensing``, summing
            to 1 (within 0.1). A ``(n_probes, n_effects)`` table is flattened
            row by row.
        sensing: Sensing matrix ``A`` of shape ``(len(M), d⁴)``, e.g. from
            :func:`~qtomo.tomography.likelihood.build_sensing_matrix`.
        config: Solver metaparameters; defaults to :class:`PGDConfig`.
        verbose: Log the starting and final objective at INFO instead of
            DEBUG level.

    Returns:
        ProcessTomographyResult. Hitting ``config.max_iter`` is reported
        through ``status`` rather than raised.

    Raises:
        DimensionError: If ``A`` and ``M`` disagree in length or ``A`` does
            not have ``d⁴`` columns.
        ValueError: If ``M`` is not normalized.
        ConvergenceError: If a CPTP projection exceeds its round cap.
    """
    counts, sensing = prepare_data(counts, sensing)
    d = _validate(counts, sensing)
    if config is None:
        config = PGDConfig()
    report = logger.info if verbose else logger.debug

    choi = torch.eye(d * d, dtype=DTYPE) / d
    mu = config.step_scale / d ** 2
    gamma = config.backtrack_factor

    previous = _INITIAL_PREVIOUS_COST
    current = loglikelihood(counts, choi, sensing)
    history = [current]
    report("starting cost = %.12g", current)

    status = Status.CONVERGED
    nit = 0
    while previous - current > config.tol:
        if nit >= config.max_iter:
            status = Status.MAX_ITER
            break

        previous = current
        grad = loglikelihood_gradient(counts, choi, sensing)
        target = project_cptp(
            choi - grad / mu,
            tol=config.projection_tol,
            max_iter=config.projection_max_iter,
        )
        direction = target - choi
        slope = gamma * float(torch.vdot(direction.reshape(-1), grad.reshape(-1)).real)

        alpha = 1.0
        halvings = 0
        current = loglikelihood(counts, choi + alpha * direction, sensing)
        # NaN costs fail the sufficient-decrease test
        while not current <= previous + alpha * slope:
            if halvings >= config.max_backtracks:
                # Step abandoned; an unchanged objective ends the outer loop.
                logger.debug("line search exhausted after %d halvings", halvings)
                alpha = 0.0
                current = previous
                break
            alpha /= 2.0
            halvings += 1
            current = loglikelihood(counts, choi + alpha * direction, sensing)

        choi = choi + alpha * direction
        nit += 1
        history.append(current)
        logger.debug("iteration %d: cost = %.12g, alpha = %.3g", nit, current, alpha)

    report("final cost = %.12g", current)

    if status is Status.CONVERGED:
        message = f"Converged after {nit} iterations"
    else:
        message = f"Hit iteration limit ({config.max_iter}) before converging"
        logger.warning(message)

    return ProcessTomographyResult(
        choi=choi,
        fun=current,
        nit=nit,
        status=status,
        message=message,
        history=history,
        tp_residual=tp_residual(choi),
        min_eigenvalue=min_eigenvalue(choi),
    )


def pdg_process_tomo(
    counts,
    sensing,
    verbose: bool = False,
    config: Optional[PGDConfig] = None,
) -> torch.Tensor:
    """
    Maximum-likelihood Choi matrix by projected gradient descent.

    Thin wrapper around :func:`fit_process_tomography` returning only the
    converged Choi matrix.

    Raises:
        ConvergenceError: If the solver hits its iteration cap; the
            unfinished iterate is not returned.
    """
    result = fit_process_tomography(counts, sensing, config=config, verbose=verbose)
    if not result.converged:
        raise ConvergenceError(result.message, iterations=result.nit)
    return result.choi


__all__ = [
    "Status",
    "ProcessTomographyResult",
    "fit_process_tomography",
    "pdg_process_tomo",
]
