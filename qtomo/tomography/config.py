"""Configuration for the projected-gradient-descent tomography solver."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PGDConfig:
    """
    Metaparameters of :func:`~qtomo.tomography.pgd.fit_process_tomography`.

    The defaults reproduce the reference algorithm of Knee et al.,
    Phys. Rev. A 98, 062336 (2018).

    Args:
        step_scale: Gradient steps are ``∇f / μ`` with ``μ = step_scale / d²``.
        backtrack_factor: Armijo constant ``γ`` in the sufficient-decrease
            test ``f(C + αD) <= f(C) + α γ Re⟨D, ∇f⟩``.
        tol: Outer loop stops once the objective improves by less than this
            (absolute) amount.
        max_iter: Cap on outer iterations.
        max_backtracks: Cap on step halvings per iteration. When exhausted,
            the step is abandoned and the objective stays put, which ends
            the outer loop.
        projection_tol: Threshold on the composite Dykstra residual of the
            CPTP projector.
        projection_max_iter: Cap on CPTP projector rounds per projection.
    """

    step_scale: float = 1.5
    backtrack_factor: float = 0.3
    tol: float = 1e-10
    max_iter: int = 10_000
    max_backtracks: int = 60
    projection_tol: float = 1e-4
    projection_max_iter: int = 10_000

    def __post_init__(self) -> None:
        if self.step_scale <= 0.0:
            raise ValueError(f"step_scale must be positive, got {self.step_scale}")
        if not 0.0 < self.backtrack_factor < 1.0:
            raise ValueError(
                f"backtrack_factor must lie in (0, 1), got {self.backtrack_factor}"
            )
        if self.tol <= 0.0 or self.projection_tol <= 0.0:
            raise ValueError("tolerances must be positive")
        if self.max_iter < 1 or self.projection_max_iter < 1:
            raise ValueError("iteration caps must be at least 1")
        if self.max_backtracks < 0:
            raise ValueError(f"max_backtracks must be >= 0, got {self.max_backtracks}")


__all__ = ["PGDConfig"]
