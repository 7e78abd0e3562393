"""Queue-based flood fill with per-channel tolerance and dark-line borders."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Sequence, Tuple

import pygame

from sketchbox.paint.surface import RGBA, ColorLike, Point, new_canvas, parse_color, replace_pixels

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 30
MAX_FILL_PIXELS = 1_000_000

# Seeds this transparent are always filled, even when they already match.
TRANSPARENT_ALPHA = 20
# Near-black, mostly opaque pixels stop the fill like a drawn outline would.
BORDER_CHANNEL = 40
BORDER_ALPHA = 128
MIN_ALPHA_TOLERANCE = 128


@dataclass(frozen=True)
class FillRequest:
    seed: Point
    color: ColorLike
    tolerance: int = DEFAULT_TOLERANCE


def render_fill_color(color: ColorLike) -> RGBA:
    """Return the pixel a stroke of ``color`` actually leaves on the canvas."""
    probe = new_canvas((1, 1))
    pygame.draw.rect(probe, parse_color(color), probe.get_rect())
    return tuple(probe.get_at((0, 0)))


def is_border(pixel: Sequence[int]) -> bool:
    r, g, b, a = pixel
    return r < BORDER_CHANNEL and g < BORDER_CHANNEL and b < BORDER_CHANNEL and a > BORDER_ALPHA


def within_tolerance(pixel: Sequence[int], target: Sequence[int], tolerance: int, alpha_tolerance: int) -> bool:
    return (
        abs(pixel[0] - target[0]) <= tolerance
        and abs(pixel[1] - target[1]) <= tolerance
        and abs(pixel[2] - target[2]) <= tolerance
        and abs(pixel[3] - target[3]) <= alpha_tolerance
    )


def flood_fill(
    surface: pygame.Surface,
    seed: Point,
    color: ColorLike,
    tolerance: int = DEFAULT_TOLERANCE,
    max_pixels: int = MAX_FILL_PIXELS,
) -> int:
    """Repaint the 4-connected region around ``seed`` and return the pixel count.

    Neighbours join the region when they are within ``tolerance`` of the seed
    color on R, G and B and within ``max(tolerance, 128)`` on alpha, so
    antialiased edges fill in. Border pixels are never entered. Filled pixels
    are written fully opaque. At most ``max_pixels`` pixels are painted; a fill
    that hits the cap keeps what it painted.
    """
    width, height = surface.get_size()
    x, y = seed
    if x < 0 or y < 0 or x >= width or y >= height:
        return 0

    pixels = bytearray(pygame.image.tobytes(surface, "RGBA"))
    offset = (y * width + x) * 4
    target = tuple(pixels[offset:offset + 4])
    fill = render_fill_color(color)
    logger.debug("Flood fill at %s: target %s, fill %s, tolerance %d", seed, target, fill, tolerance)

    if within_tolerance(target, fill, tolerance, tolerance) and target[3] >= TRANSPARENT_ALPHA:
        logger.debug("Target color already matches fill color, skipping")
        return 0

    alpha_tolerance = max(tolerance, MIN_ALPHA_TOLERANCE)
    painted = bytes((fill[0], fill[1], fill[2], 255))
    visited = bytearray(width * height)
    visited[y * width + x] = 1
    queue: Deque[Tuple[int, int]] = deque([(x, y)])
    filled = 0

    while queue and filled < max_pixels:
        cx, cy = queue.popleft()
        index = (cy * width + cx) * 4
        pixels[index:index + 4] = painted
        filled += 1

        for nx, ny in ((cx + 1, cy), (cx - 1, cy), (cx, cy + 1), (cx, cy - 1)):
            if nx < 0 or ny < 0 or nx >= width or ny >= height:
                continue
            key = ny * width + nx
            if visited[key]:
                continue
            neighbour = pixels[key * 4:key * 4 + 4]
            if is_border(neighbour):
                visited[key] = 1
                continue
            if within_tolerance(neighbour, target, tolerance, alpha_tolerance):
                visited[key] = 1
                queue.append((nx, ny))

    if queue:
        logger.debug("Flood fill stopped at the %d pixel limit", max_pixels)
    logger.debug("Flood fill complete, filled %d pixels", filled)

    replace_pixels(surface, pygame.image.frombytes(bytes(pixels), (width, height), "RGBA"))
    return filled


def apply_fill(surface: pygame.Surface, request: FillRequest, max_pixels: int = MAX_FILL_PIXELS) -> int:
    return flood_fill(surface, request.seed, request.color, request.tolerance, max_pixels)
