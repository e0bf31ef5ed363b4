"""
gpsclimb configuration loader

This module centralizes *all* configuration handling for gpsclimb.

The analysis core itself takes every parameter as an argument; this loader
only decides which values the CLI (and any other caller that wants
configured defaults) hands to it.

Design goals:
- Keep the CLI Unix-friendly: flags override everything.
- Provide the documented defaults if no config exists.
- Allow per-machine config without committing personal preferences:
    ~/.config/gpsclimb/config.toml
- Allow repo-local config:
    <repo_root>/config/config.toml
- Allow environment variable overrides for automation.

Precedence (highest to lowest) for any given value:
1) CLI argument (handled by the CLI)
2) Environment variables (GPSCLIMB_*)
3) User config: ~/.config/gpsclimb/config.toml
4) Repo config: <repo_root>/config/config.toml
5) Hard defaults

Example config.toml:

    [paths]
    track_root = "~/GPS/_work"

    [grades]
    segment_length = 25.0

    [distance]
    tolerance = 1e-12
    max_iterations = 200

    [climbs]
    epsilon = 1.0
    minimum_grade = 0.03
    max_join_distance = 0.0

This module uses Python's built-in tomllib on Python 3.11+, or `tomli` if installed.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from gpsclimb.analyze.climbs import (
    DEFAULT_EPSILON,
    DEFAULT_MAX_JOIN_DISTANCE,
    DEFAULT_MINIMUM_GRADE,
)
from gpsclimb.analyze.grades import DEFAULT_SEGMENT_LENGTH
from gpsclimb.errors import ConfigError
from gpsclimb.geo.distance import DEFAULT_MAX_ITERATIONS, DEFAULT_TOLERANCE


# ---------------------------------------------------------------------------
# TOML loading helpers
# ---------------------------------------------------------------------------
def _load_toml(path: Path) -> dict[str, Any]:
    """
    Parse a TOML file at `path`.

    Behavior:
    - If the file does not exist, return an empty dict (non-fatal).
    - If the file exists but is invalid TOML, raise ConfigError
      with a clear, user-facing message.

    Rationale:
    - Missing config files are normal and expected.
    - Malformed config files indicate user intent and should fail loudly.
    """
    if not path.is_file():
        return {}

    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib

    try:
        return tomllib.loads(path.read_text(encoding="utf-8")) or {}
    except (tomllib.TOMLDecodeError, OSError, UnicodeDecodeError) as e:
        # Wrap parsing errors with file context for usability
        raise ConfigError(f"Failed to parse TOML config: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Generic coercion helpers
# ---------------------------------------------------------------------------
def _deep_get(d: dict[str, Any], dotted_key: str) -> Any:
    """
    Fetch nested dictionary values using dot-separated keys.

    Example:
        _deep_get(cfg, "climbs.epsilon")

    Returns None if any part of the path is missing.
    """
    cur: Any = d
    for part in dotted_key.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return None
        cur = cur[part]
    return cur


def _as_path(v: Any) -> Optional[Path]:
    """
    Coerce a config value into a pathlib.Path if possible.

    Returns None if value cannot be interpreted as a path.
    """
    if v is None:
        return None
    if isinstance(v, Path):
        return v.expanduser()
    if isinstance(v, str):
        return Path(v).expanduser()
    return None


def _as_float(v: Any, key: str, origin: str) -> float:
    """
    Coerce TOML numbers and numeric strings (environment) into floats.

    Unlike paths, a malformed number is never silently replaced by the
    default: the user asked for a specific value and should hear about it.
    """
    if isinstance(v, bool):
        raise ConfigError(f"{key} from {origin} must be a number, got {v!r}")
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} from {origin} must be a number, got {v!r}") from e


def _as_int(v: Any, key: str, origin: str) -> int:
    f = _as_float(v, key, origin)
    if not f.is_integer():
        raise ConfigError(f"{key} from {origin} must be an integer, got {v!r}")
    return int(f)


# ---------------------------------------------------------------------------
# Repo discovery + defaults
# ---------------------------------------------------------------------------
def find_repo_root(start: Path) -> Optional[Path]:
    """
    Walk upward from `start` looking for the gpsclimb repo root.

    Heuristic:
    - The presence of a `config/` directory marks the repo root
    """
    start = start.resolve()
    for p in [start] + list(start.parents):
        if (p / "config").is_dir():
            return p
    return None


def default_track_root() -> Path:
    """Directory searched for GPX files when none are given on the CLI."""
    return Path.home() / "GPS" / "_work"


# ---------------------------------------------------------------------------
# Typed config dataclasses
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class DistanceConfig:
    """Parameters of the precise (Vincenty) distance."""

    tolerance: float = DEFAULT_TOLERANCE
    max_iterations: int = DEFAULT_MAX_ITERATIONS


@dataclass(frozen=True)
class ClimbConfig:
    """Parameters of climb detection."""

    epsilon: float = DEFAULT_EPSILON
    minimum_grade: float = DEFAULT_MINIMUM_GRADE
    max_join_distance: float = DEFAULT_MAX_JOIN_DISTANCE


@dataclass(frozen=True)
class GPSClimbConfig:
    """
    Fully merged gpsclimb configuration.

    Attributes:
    - track_root:     where the CLI looks for GPX files
    - segment_length: grade segment length in meters
    - distance:       precise distance parameters
    - climbs:         climb detection parameters
    - source:         provenance map showing where each value came from
    """

    track_root: Path
    segment_length: float
    distance: DistanceConfig
    climbs: ClimbConfig
    source: dict[str, str]


# dotted key -> (environment variable, coercion)
_NUMERIC_KEYS = {
    "grades.segment_length": ("GPSCLIMB_SEGMENT_LENGTH", _as_float),
    "distance.tolerance": ("GPSCLIMB_VINCENTY_TOLERANCE", _as_float),
    "distance.max_iterations": ("GPSCLIMB_VINCENTY_MAX_ITERATIONS", _as_int),
    "climbs.epsilon": ("GPSCLIMB_CLIMB_EPSILON", _as_float),
    "climbs.minimum_grade": ("GPSCLIMB_CLIMB_MINIMUM_GRADE", _as_float),
    "climbs.max_join_distance": ("GPSCLIMB_CLIMB_MAX_JOIN_DISTANCE", _as_float),
}


def _validate(values: dict[str, Any], src: dict[str, str]) -> None:
    """Reject values the analysis core would refuse anyway, naming their origin."""
    checks = {
        "grades.segment_length": lambda v: v > 0,
        "distance.tolerance": lambda v: v > 0,
        "distance.max_iterations": lambda v: v >= 0,
        "climbs.epsilon": lambda v: v >= 0,
        "climbs.max_join_distance": lambda v: v >= 0,
    }
    for key, ok in checks.items():
        if not ok(values[key]):
            raise ConfigError(f"{key}={values[key]!r} from {src[key]} is out of range")


# ---------------------------------------------------------------------------
# Main config loader
# ---------------------------------------------------------------------------
def load_config(
    repo_root: Optional[Path] = None,
    repo_config_path: Optional[Path] = None,
    user_config_path: Optional[Path] = None,
) -> GPSClimbConfig:
    """
    Load, merge, and validate all gpsclimb configuration.

    This function is the single authoritative entry point
    for configuration access.
    """

    # Locate repo and config files
    if repo_root is None:
        repo_root = find_repo_root(Path(__file__).resolve())
    if repo_config_path is None and repo_root is not None:
        repo_config_path = repo_root / "config" / "config.toml"
    if user_config_path is None:
        user_config_path = Path.home() / ".config" / "gpsclimb" / "config.toml"

    # Load raw TOML dicts
    repo_cfg = _load_toml(repo_config_path) if repo_config_path else {}
    user_cfg = _load_toml(user_config_path) if user_config_path else {}

    # ------------------------------------------------------------------
    # Defaults
    # ------------------------------------------------------------------
    track_root = default_track_root()
    values: dict[str, Any] = {
        "grades.segment_length": DEFAULT_SEGMENT_LENGTH,
        "distance.tolerance": DEFAULT_TOLERANCE,
        "distance.max_iterations": DEFAULT_MAX_ITERATIONS,
        "climbs.epsilon": DEFAULT_EPSILON,
        "climbs.minimum_grade": DEFAULT_MINIMUM_GRADE,
        "climbs.max_join_distance": DEFAULT_MAX_JOIN_DISTANCE,
    }

    # Track provenance for debugging and audits
    src = {key: "default" for key in values}
    src["paths.track_root"] = "default"

    # ------------------------------------------------------------------
    # Repo config, then user config (overrides repo)
    # ------------------------------------------------------------------
    for cfg, origin in ((repo_cfg, f"repo:{repo_config_path}"), (user_cfg, f"user:{user_config_path}")):
        p = _as_path(_deep_get(cfg, "paths.track_root"))
        if p is not None:
            track_root = p
            src["paths.track_root"] = origin

        for key, (_env, coerce) in _NUMERIC_KEYS.items():
            raw = _deep_get(cfg, key)
            if raw is None:
                continue
            values[key] = coerce(raw, key, origin)
            src[key] = origin

    # ------------------------------------------------------------------
    # Environment variable overrides (highest non-CLI precedence)
    # ------------------------------------------------------------------
    env_root = os.environ.get("GPSCLIMB_TRACK_ROOT")
    if env_root:
        track_root = Path(env_root).expanduser()
        src["paths.track_root"] = "env:GPSCLIMB_TRACK_ROOT"

    for key, (env, coerce) in _NUMERIC_KEYS.items():
        raw = os.environ.get(env)
        if not raw:
            continue
        values[key] = coerce(raw.strip(), key, f"env:{env}")
        src[key] = f"env:{env}"

    _validate(values, src)

    return GPSClimbConfig(
        track_root=track_root.expanduser(),
        segment_length=values["grades.segment_length"],
        distance=DistanceConfig(
            tolerance=values["distance.tolerance"],
            max_iterations=values["distance.max_iterations"],
        ),
        climbs=ClimbConfig(
            epsilon=values["climbs.epsilon"],
            minimum_grade=values["climbs.minimum_grade"],
            max_join_distance=values["climbs.max_join_distance"],
        ),
        source=src,
    )
