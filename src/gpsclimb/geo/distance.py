# gpsclimb/geo/distance.py
"""
Geodesic distance between two latitude/longitude points

Two interchangeable functions, both returning meters:

- simple_distance():  haversine on a sphere with the mean Earth radius.
                      Fast, never fails, ~0.5% accurate. Used for track
                      accumulation.
- precise_distance(): Vincenty's inverse formula on an ellipsoid (WGS-84 by
                      default). Iterative; raises ConvergenceError when the
                      iteration budget is exhausted.

Inputs are degrees, all trigonometry happens in radians.

References:
  https://www.movable-type.co.uk/scripts/latlong.html
  https://www.movable-type.co.uk/scripts/latlong-vincenty.html
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

from haversine import Unit, haversine

from gpsclimb.errors import ConvergenceError
from gpsclimb.geo.coordinates import GeoCoordinate

logger = logging.getLogger(__name__)

# Mean Earth radius in meters
EARTH_RADIUS_M = 6_371_000.0

DEFAULT_TOLERANCE = 1e-12
DEFAULT_MAX_ITERATIONS = 200

# Smallest positive float, substituted for a zero sin(sigma)
_TINY = math.ulp(0.0)


class Ellipsoid(NamedTuple):
    """Reference ellipsoid: semi-major axis `a` (meters) and flattening `f`."""

    a: float
    f: float


WGS84 = Ellipsoid(a=6_378_137.0, f=1 / 298.257223563)


def simple_distance(a: GeoCoordinate, b: GeoCoordinate) -> float:
    """Great-circle distance in meters between `a` and `b`."""
    central_angle = haversine(
        (a.latitude, a.longitude),
        (b.latitude, b.longitude),
        unit=Unit.RADIANS,
    )
    return EARTH_RADIUS_M * central_angle


def precise_distance(
    a: GeoCoordinate,
    b: GeoCoordinate,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    ellipsoid: Ellipsoid = WGS84,
) -> float:
    """
    Ellipsoidal distance in meters between `a` and `b` (Vincenty inverse).

    The auxiliary longitude difference lambda is refined until two successive
    values differ by less than `tolerance`, at most `max_iterations` times.

    Raises:
      ConvergenceError: no convergence within `max_iterations`
      ValueError:       tolerance <= 0 or max_iterations < 0
    """
    if tolerance <= 0:
        raise ValueError(f"tolerance must be > 0 (got {tolerance})")
    if max_iterations < 0:
        raise ValueError(f"max_iterations must be >= 0 (got {max_iterations})")

    # Identical points: nothing to iterate
    if a.latitude == b.latitude and a.longitude == b.longitude:
        return 0.0

    major = ellipsoid.a
    flat = ellipsoid.f
    minor = (1 - flat) * major
    second_ecc = (major * major - minor * minor) / (minor * minor)

    u_a = math.atan((1 - flat) * math.tan(math.radians(a.latitude)))
    sin_u_a, cos_u_a = math.sin(u_a), math.cos(u_a)
    u_b = math.atan((1 - flat) * math.tan(math.radians(b.latitude)))
    sin_u_b, cos_u_b = math.sin(u_b), math.cos(u_b)

    lon_diff = math.radians(b.longitude - a.longitude)

    lam = lon_diff
    residual = math.inf
    sigma = sin_sigma = cos_sigma = cos2_alpha = cos_2sigma_m = 0.0

    for _ in range(max_iterations):
        sin_lam, cos_lam = math.sin(lam), math.cos(lam)
        q = cos_u_b * sin_lam
        p = cos_u_a * sin_u_b - sin_u_a * cos_u_b * cos_lam
        sin_sigma = math.sqrt(q * q + p * p)
        cos_sigma = sin_u_a * sin_u_b + cos_u_a * cos_u_b * cos_lam
        sigma = math.atan2(sin_sigma, cos_sigma)

        if sin_sigma == 0.0:
            sin_sigma = _TINY

        sin_alpha = cos_u_a * cos_u_b * sin_lam / sin_sigma
        cos2_alpha = 1 - sin_alpha * sin_alpha
        # equatorial line: cos2_alpha == 0 makes the term undefined
        if cos2_alpha != 0.0:
            cos_2sigma_m = cos_sigma - 2 * sin_u_a * sin_u_b / cos2_alpha
        else:
            cos_2sigma_m = math.nan
        if math.isnan(cos_2sigma_m):
            cos_2sigma_m = 0.0

        c = flat / 16.0 * cos2_alpha * (4 + flat * (4 - 3 * cos2_alpha))
        previous = lam
        lam = lon_diff + (1 - c) * flat * sin_alpha * (
            sigma + c * sin_sigma * (
                cos_2sigma_m + c * cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m)
            )
        )

        residual = abs(lam - previous)
        if residual < tolerance:
            break

    if not residual < tolerance:
        logger.debug(
            "Vincenty did not converge: max_iterations=%d tolerance=%g residual=%g",
            max_iterations, tolerance, residual,
        )
        raise ConvergenceError(max_iterations, tolerance, residual)

    uu = cos2_alpha * second_ecc
    big_a = 1 + uu / 16384 * (4096 + uu * (-768 + uu * (320 - 175 * uu)))
    big_b = uu / 1024 * (256 + uu * (-128 + uu * (74 - 47 * uu)))
    delta_sigma = big_b * sin_sigma * (
        cos_2sigma_m + big_b / 4 * (
            cos_sigma * (-1 + 2 * cos_2sigma_m * cos_2sigma_m)
            - big_b / 6 * cos_2sigma_m
            * (-3 + 4 * sin_sigma * sin_sigma)
            * (-3 + 4 * cos_2sigma_m * cos_2sigma_m)
        )
    )

    return minor * big_a * (sigma - delta_sigma)
