"""qtomo - quantum objects and maximum-likelihood process tomography in PyTorch."""

__version__ = "0.1.0"

# Quantum objects
from .quobj import (
    DTYPE,
    Bra,
    Ket,
    Operator,
    QuObject,
    normalize,
    partial_trace,
    qeye,
    tensor,
    unvectorize,
    vectorize,
)

# Gates and noise
from .gates import CNOT, CZ, RCNOT, H, S, T, rotation
from .noise import power_law_noise

# Diagnostics
from .diagnostics import is_cptp_choi, is_psd, tp_residual

# Tomography
from .tomography import (
    PGDConfig,
    ProcessTomographyResult,
    Status,
    apply_process,
    build_sensing_matrix,
    choi_from_kraus,
    choi_from_unitary,
    fit_process_tomography,
    pdg_process_tomo,
    project_cptp,
    single_qubit_likelihood_model,
)

# Errors and logging
from .exceptions import ConvergenceError, DimensionError
from .logging import configure_logging, get_logger, set_log_level

__all__ = [
    "__version__",
    # Quantum objects
    "DTYPE",
    "QuObject",
    "Ket",
    "Bra",
    "Operator",
    "tensor",
    "partial_trace",
    "vectorize",
    "unvectorize",
    "normalize",
    "qeye",
    # Gates and noise
    "H",
    "S",
    "T",
    "CNOT",
    "RCNOT",
    "CZ",
    "rotation",
    "power_law_noise",
    # Diagnostics
    "is_psd",
    "tp_residual",
    "is_cptp_choi",
    # Tomography
    "PGDConfig",
    "Status",
    "ProcessTomographyResult",
    "build_sensing_matrix",
    "single_qubit_likelihood_model",
    "project_cptp",
    "fit_process_tomography",
    "pdg_process_tomo",
    "apply_process",
    "choi_from_kraus",
    "choi_from_unitary",
    # Errors and logging
    "ConvergenceError",
    "DimensionError",
    "get_logger",
    "set_log_level",
    "configure_logging",
]
