"""Bounding box and reading angle from OCR word polygons."""

import math
from typing import Optional, Sequence

import numpy as np

from ..models.schemas import BoundingBox, OcrWord


def text_angle(words: Sequence[OcrWord]) -> int:
    """
    Dominant reading direction of a group of words, snapped to 90 degrees.

    Each word contributes its baseline vector (second vertex minus first).
    Returns one of 0, 90, -90, 180.
    """
    baselines = [
        np.subtract(word.polygon[1], word.polygon[0])
        for word in words
        if len(word.polygon) >= 2
    ]
    if not baselines:
        return 0

    dx, dy = np.sum(baselines, axis=0)
    if dx == 0 and dy == 0:
        return 0

    degrees = math.degrees(math.atan2(dy, dx))
    # Half-up rounding so -135 snaps to -90 and 135 snaps to 180
    angle = int(math.floor(degrees / 90 + 0.5)) * 90
    if angle > 180:
        angle -= 360
    elif angle <= -180:
        angle += 360
    return angle


def normalized_bounding_box(
    words: Sequence[OcrWord],
    image_width: float,
    image_height: float,
) -> Optional[BoundingBox]:
    """Enclosing box of all word polygons, relative to the image size."""
    if not words or image_width <= 0 or image_height <= 0:
        return None

    vertices = [vertex for word in words for vertex in word.polygon]
    if not vertices:
        return None

    points = np.asarray(vertices, dtype=float)
    # OCR polygons occasionally overhang the image edge
    points[:, 0] = np.clip(points[:, 0], 0, image_width)
    points[:, 1] = np.clip(points[:, 1], 0, image_height)

    min_x, min_y = points.min(axis=0)
    max_x, max_y = points.max(axis=0)

    return BoundingBox(
        x=float(min_x / image_width),
        y=float(min_y / image_height),
        width=float((max_x - min_x) / image_width),
        height=float((max_y - min_y) / image_height),
        angle=text_angle(words),
    )


def to_pixel_rect(
    box: BoundingBox, image_width: float, image_height: float
) -> tuple[float, float, float, float]:
    """Inverse of the normalization: (x, y, width, height) in pixels."""
    return (
        box.x * image_width,
        box.y * image_height,
        box.width * image_width,
        box.height * image_height,
    )
