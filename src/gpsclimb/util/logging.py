# gpsclimb/util/logging.py
from __future__ import annotations

import datetime
import logging
import sys


def log(msg: str) -> None:
    """Print a timestamped log line (local time with timezone) to stderr."""
    ts = datetime.datetime.now().astimezone().isoformat(timespec="seconds")
    print(f"{ts}  {msg}", file=sys.stderr)


def configure_library_logging(verbose: bool) -> None:
    """Route the analysis modules' debug records to stderr when `verbose`."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s  %(name)s  %(message)s",
        stream=sys.stderr,
    )
