# -*- coding: utf-8 -*-
"""Tests for drawing detection regions."""

from __future__ import annotations

import numpy as np

from webcamguard.models.analysis_result import DetectionArea
from webcamguard.pipeline import overlay


def test_draw_does_not_modify_input() -> None:
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    result = overlay.draw(image, [DetectionArea(20, 20, 60, 40)], 200, 100)
    assert not image.any()
    assert result is not image


def test_draw_outlines_region_in_red() -> None:
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    result = overlay.draw(image, [DetectionArea(20, 20, 60, 40)], 200, 100)
    assert tuple(result[20, 50]) == overlay.REGION_COLOR
    # interior stays untouched
    assert not result[40, 50].any()


def test_relative_regions_are_scaled() -> None:
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    result = overlay.draw(image, [DetectionArea(0.1, 0.2, 0.5, 0.5)], 200, 100)
    assert tuple(result[20, 60]) == overlay.REGION_COLOR


def test_draw_resizes_to_target_dimensions() -> None:
    image = np.zeros((48, 64, 3), dtype=np.uint8)
    result = overlay.draw(image, [], 128, 96)
    assert result.shape == (96, 128, 3)


def test_degenerate_region_is_skipped() -> None:
    image = np.zeros((100, 200, 3), dtype=np.uint8)
    result = overlay.draw(image, [DetectionArea(50, 50, 0, 0, 0.9, "face")], 200, 100)
    assert not result.any()
