# -*- coding: utf-8 -*-
"""CLI module entry point for `python -m webcamguard.gui`."""

from __future__ import annotations

from webcamguard.main import main


if __name__ == "__main__":
    raise SystemExit(main())
