"""Exception types raised by qtomo."""


class DimensionError(ValueError):
    """Subspace dimensions of quantum objects or arrays are inconsistent.

    Raised when binary operations receive operands with different ``dims``,
    when an array length does not match the requested dimensions, and when a
    structural operation (such as a partial trace) names a subsystem that
    does not exist.
    """


class ConvergenceError(RuntimeError):
    """An iterative routine hit its iteration cap before converging."""

    def __init__(self, message: str, iterations: int) -> None:
        super().__init__(message)
        self.iterations = iterations


__all__ = ["DimensionError", "ConvergenceError"]
