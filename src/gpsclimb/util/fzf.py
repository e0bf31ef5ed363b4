# gpsclimb/util/fzf.py
"""
Helper functions for track selection using `fzf`
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from shutil import which

from gpsclimb.errors import FzfNotFoundError, GPSClimbError


def fzf_select_paths(
        paths: list[Path], *,
        header: str,
        multi: bool = True,
) -> list[Path]:
    """
    Let the user pick from `paths` by file name; returns the chosen full paths.

    An aborted selection (Esc / Ctrl-C, exit status 130) returns [].
    """
    if not which("fzf"):
        raise FzfNotFoundError("fzf not found on PATH. Install fzf or pass GPX files explicitly.")

    # line is: "name<TAB>fullpath", only the name is shown and searched
    lines = [f"{p.name}\t{p}" for p in paths]
    input_text = "\n".join(lines) + "\n"

    cmd = [
        "fzf",
        "--delimiter=\t",
        "--nth=1",
        "--with-nth=1",
        "--height=60%",
        "--layout=reverse",
        "--border",
        "--header", header,
    ]
    if multi:
        cmd.append("--multi")

    proc = subprocess.run(
        cmd,
        input=input_text.encode(),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    if proc.returncode not in (0, 1, 130):
        raise GPSClimbError(proc.stderr.decode(errors="replace"))

    selected: list[Path] = []
    for line in proc.stdout.decode().splitlines():
        line = line.strip()
        if not line:
            continue
        path_str = line.split("\t", 1)[1] if "\t" in line else line
        selected.append(Path(path_str).expanduser().resolve())
    return selected
