# gpsclimb/errors

"""
gpsclimb.errors

Central exception hierarchy for gpsclimb.

Rationale:
  - Library code raises specific, meaningful errors.
  - Callers can catch GPSClimbError (broad) or specific subclasses (narrow).
  - Contract violations (e.g. a GradeSegment with end <= start) are NOT part
    of this hierarchy; they fail with AssertionError / ValueError.
"""


class GPSClimbError(RuntimeError):
    """Base class for all gpsclimb runtime errors."""


# ---- Geodesy errors ----------------------------

class ConvergenceError(GPSClimbError):
    """
    The iterative ellipsoidal distance did not converge.

    Attributes:
      max_iterations: the iteration budget that was exhausted
      tolerance:      the requested convergence tolerance
      residual:       |lambda_n - lambda_(n-1)| after the last iteration
    """

    def __init__(self, max_iterations: int, tolerance: float, residual: float):
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.residual = residual
        super().__init__(
            f"distance did not converge within {max_iterations} iterations "
            f"(tolerance={tolerance:g}, residual={residual:g})"
        )


# ---- Track file errors -------------------------

class TrackFormatError(GPSClimbError):
    """Errors reading track files handed to the analysis core."""

class InvalidGpxError(TrackFormatError):
    """GPX file could not be parsed or did not contain expected data structures."""


# ---- Configuration errors ----------------------

class ConfigError(GPSClimbError):
    """Configuration file or environment value could not be interpreted."""


# ---- CLI / selection errors --------------------

class FzfNotFoundError(GPSClimbError):
    """fzf is required but not available on PATH."""
