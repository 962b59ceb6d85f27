# -*- coding: utf-8 -*-
"""Save captured frames to disk."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from webcamguard.core.frame_history import FrameHistory

logger = logging.getLogger(__name__)


def frame_filename(prefix: str, moment: datetime | None = None) -> str:
    """Return `<prefix>-<UTC timestamp>.jpg` with a filesystem-safe timestamp."""
    moment = moment or datetime.now(timezone.utc)
    stamp = moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3] + "Z"
    return f"{prefix}-{stamp}.jpg"


def save_latest_frame(
    history: FrameHistory,
    directory: str | Path,
    prefix: str,
    moment: datetime | None = None,
) -> Path | None:
    """Write the newest frame of the history; None when nothing was captured."""
    frame = history.latest()
    if frame is None:
        return None
    target = Path(directory) / frame_filename(prefix, moment)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(frame)
    logger.info("Saved frame (%d bytes) to %s", len(frame), target)
    return target
