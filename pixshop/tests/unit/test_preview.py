"""
Unit tests for the full-screen preview transform.
"""

import pytest

from pixshop.editing.preview import MAX_SCALE, MIN_SCALE, PreviewTransform


def test_zoom_keeps_point_under_cursor_fixed():
    preview = PreviewTransform()
    mouse = (200.0, 100.0)
    # Image-space point under the cursor before zooming
    before = ((mouse[0] - preview.x) / preview.scale, (mouse[1] - preview.y) / preview.scale)

    preview.zoom(-500, *mouse)

    after = ((mouse[0] - preview.x) / preview.scale, (mouse[1] - preview.y) / preview.scale)
    assert preview.scale == pytest.approx(1.5)
    assert after == pytest.approx(before)


def test_zoom_is_clamped():
    preview = PreviewTransform()

    preview.zoom(100000, 0, 0)
    assert preview.scale == MIN_SCALE

    preview.zoom(-100000, 0, 0)
    assert preview.scale == MAX_SCALE


def test_pan_and_reset():
    preview = PreviewTransform()
    preview.zoom(-1000, 10, 10)
    preview.pan(15, -5)

    preview.reset()

    assert (preview.scale, preview.x, preview.y) == (1.0, 0.0, 0.0)
