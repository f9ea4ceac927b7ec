"""
Maximum-likelihood quantum process tomography.

This subpackage turns measurement frequencies into a physical (CPTP) Choi
matrix:

- ``likelihood`` builds the sensing matrix and the negative log-likelihood.
- ``projection`` projects onto the CPTP set with Dykstra's algorithm.
- ``pgd`` runs the projected gradient descent solver.
- ``choi`` builds Choi matrices and applies them to states.
"""

from . import choi, likelihood, pgd, projection
from .choi import apply_process, choi_from_kraus, choi_from_unitary
from .config import PGDConfig
from .likelihood import (
    axial_states,
    build_sensing_matrix,
    loglikelihood,
    loglikelihood_gradient,
    prepare_data,
    single_qubit_likelihood_model,
)
from .pgd import ProcessTomographyResult, Status, fit_process_tomography, pdg_process_tomo
from .projection import project_cp, project_cptp, project_tp, tp_helper_matrices

__all__ = [
    "choi",
    "likelihood",
    "pgd",
    "projection",
    # Configuration and results
    "PGDConfig",
    "Status",
    "ProcessTomographyResult",
    # Likelihood model
    "axial_states",
    "build_sensing_matrix",
    "single_qubit_likelihood_model",
    "loglikelihood",
    "loglikelihood_gradient",
    "prepare_data",
    # Projection
    "tp_helper_matrices",
    "project_tp",
    "project_cp",
    "project_cptp",
    # Solver
    "fit_process_tomography",
    "pdg_process_tomo",
    # Choi helpers
    "apply_process",
    "choi_from_kraus",
    "choi_from_unitary",
]
