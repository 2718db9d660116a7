#!/usr/bin/env python3
"""Console-script wrappers for the trending-keyword pipeline.

After an editable install (``pip install -e .``) the following commands become
available system-wide:

* ``tw-trends``        – ranked keywords, served from cache when fresh
* ``tw-trends-fresh``  – ranked keywords, cache bypassed (``nocache``)
* ``tw-trends-json``   – JSON payload only, as the HTTP boundary would return it

The functions below simply forward to ``scripts/fetch_keywords.py`` so there is
no business-logic duplication.
"""
from __future__ import annotations

import sys
from pathlib import Path
from subprocess import run

PYTHON = sys.executable
ROOT = Path(__file__).resolve().parents[1]  # Repository root
SCRIPT = ROOT / "scripts" / "fetch_keywords.py"


def build_command(*flags: str) -> list[str]:
    """Return the command list that runs the fetch script with *flags* and any CLI extras."""
    return [PYTHON, str(SCRIPT), *flags, *sys.argv[1:]]


def _exec(cmd: list[str]) -> None:  # noqa: WPS421 (subprocess wrapper)
    """Execute *cmd* and propagate its exit status."""
    run(cmd, check=True)


# ---------------------------------------------------------------------------
# Entry-points
# ---------------------------------------------------------------------------

def trends() -> None:
    """Rank keywords, reusing a fresh cache."""
    _exec(build_command())


def trends_fresh() -> None:
    """Rank keywords with the cache bypassed."""
    _exec(build_command("--nocache"))


def trends_json() -> None:
    """Print the JSON payload only."""
    _exec(build_command("--json"))
