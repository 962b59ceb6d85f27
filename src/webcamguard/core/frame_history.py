# -*- coding: utf-8 -*-
"""Bounded newest-first history of captured frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from webcamguard.constants import FRAME_HISTORY_SIZE


@dataclass(frozen=True)
class FrameHistory:
    """Immutable ring of encoded frames; `push` returns a new history."""

    frames: tuple[bytes, ...] = field(default_factory=tuple)
    capacity: int = FRAME_HISTORY_SIZE

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError("FrameHistory capacity must be >= 1")
        if len(self.frames) > self.capacity:
            object.__setattr__(self, "frames", tuple(self.frames[: self.capacity]))

    def push(self, frame: bytes) -> "FrameHistory":
        """Insert a frame at the front, evicting the oldest beyond capacity."""
        return FrameHistory(frames=(frame, *self.frames)[: self.capacity], capacity=self.capacity)

    def latest(self) -> bytes | None:
        return self.frames[0] if self.frames else None

    def __len__(self) -> int:
        return len(self.frames)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.frames)

    def __bool__(self) -> bool:
        return bool(self.frames)
