from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import pygame

from sketchbox.paint.surface import new_canvas, replace_pixels

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    x: float
    y: float
    width: float
    height: float

    def to_rect(self) -> pygame.Rect:
        return pygame.Rect(
            int(round(self.x)),
            int(round(self.y)),
            max(1, int(round(self.width))),
            max(1, int(round(self.height))),
        )


def letterbox(canvas_size: Tuple[int, int], image_size: Tuple[int, int]) -> Placement:
    """Fit ``image_size`` inside ``canvas_size`` keeping its aspect ratio, centred."""
    canvas_w, canvas_h = canvas_size
    image_w, image_h = image_size
    canvas_ratio = canvas_w / canvas_h
    image_ratio = image_w / image_h
    if image_ratio > canvas_ratio:
        draw_w = canvas_w
        draw_h = canvas_w / image_ratio
        return Placement(0, (canvas_h - draw_h) / 2, draw_w, draw_h)
    draw_h = canvas_h
    draw_w = canvas_h * image_ratio
    return Placement((canvas_w - draw_w) / 2, 0, draw_w, draw_h)


def _as_rgba(image: pygame.Surface) -> pygame.Surface:
    # smoothscale needs 24/32-bit input and the canvas needs per-pixel alpha.
    if image.get_bitsize() == 32 and image.get_flags() & pygame.SRCALPHA:
        return image
    converted = new_canvas(image.get_size())
    converted.blit(image, (0, 0))
    return converted


def blit_letterboxed(surface: pygame.Surface, image: Optional[pygame.Surface]) -> Optional[Placement]:
    """Replace the canvas content with ``image`` letterboxed into it.

    Returns ``None`` and leaves the canvas alone for a missing or empty image.
    """
    if image is None:
        return None
    image_w, image_h = image.get_size()
    canvas_w, canvas_h = surface.get_size()
    if image_w <= 0 or image_h <= 0 or canvas_w <= 0 or canvas_h <= 0:
        logger.warning("Skipping import of a %dx%d image", image_w, image_h)
        return None

    placement = letterbox((canvas_w, canvas_h), (image_w, image_h))
    rect = placement.to_rect()
    scaled = pygame.transform.smoothscale(_as_rgba(image), rect.size)
    replace_pixels(surface, scaled, rect.topleft)
    logger.debug("Imported %dx%d image into %s", image_w, image_h, rect)
    return placement


def decode_image(data: bytes, namehint: str = "") -> Optional[pygame.Surface]:
    try:
        return pygame.image.load(io.BytesIO(data), namehint)
    except (pygame.error, OSError, ValueError):
        logger.warning("Could not decode image data (%d bytes)", len(data))
        return None


def load_image_file(path: Path) -> Optional[pygame.Surface]:
    try:
        return pygame.image.load(str(path))
    except (pygame.error, OSError):
        logger.warning("Could not load image %s", path)
        return None
