#!/usr/bin/env python3
"""Check the tax year YAML tables from a source checkout.

Usage: ``scripts/validate_config.py [2024 ...]``. The exit status is
non-zero when any configured year reports a problem.
"""

from __future__ import annotations

import sys
from pathlib import Path

# Running from a checkout: make ``src`` importable without an install.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from lankatax.backend.config.validator import main  # noqa: E402


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
