from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import pygame

from sketchbox.paint.history import Snapshot

Point = Tuple[int, int]
RGBA = Tuple[int, int, int, int]
ColorLike = Union[str, Sequence[int], pygame.Color]

TOOLS = ("pencil", "eraser", "square", "circle", "bucket")
FREEHAND_TOOLS = {"pencil", "eraser"}
SHAPE_TOOLS = {"square", "circle"}
CLEAR: RGBA = (0, 0, 0, 0)


def parse_color(value: ColorLike) -> pygame.Color:
    """Accept ``#rrggbb``/``#rrggbbaa``, color names, or 3/4-int sequences."""
    if isinstance(value, pygame.Color):
        return pygame.Color(*value)
    if isinstance(value, str):
        return pygame.Color(value)
    channels = [int(channel) for channel in value]
    if len(channels) not in {3, 4}:
        raise ValueError(f"Expected 3 or 4 color channels, got {len(channels)}")
    return pygame.Color(*channels)


def validate_tool(tool: str) -> str:
    if tool not in TOOLS:
        raise ValueError(f"Unknown tool: {tool}")
    return tool


def new_canvas(size: Tuple[int, int]) -> pygame.Surface:
    surface = pygame.Surface(size, pygame.SRCALPHA)
    surface.fill(CLEAR)
    return surface


def replace_pixels(surface: pygame.Surface, source: pygame.Surface, dest: Point = (0, 0)) -> None:
    """Overwrite ``surface`` with ``source`` at ``dest``; uncovered pixels end up clear.

    Adding onto a cleared surface copies every channel exactly, alpha
    included, where a normal blit would blend.
    """
    surface.fill(CLEAR)
    surface.blit(source, dest, special_flags=pygame.BLEND_RGBA_ADD)


def _draw_segment(surface: pygame.Surface, color: pygame.Color, start: Point, end: Point, width: int) -> None:
    width = max(1, int(width))
    if start != end:
        pygame.draw.line(surface, color, start, end, width)
    # Round caps and joins.
    radius = width / 2
    if radius >= 1:
        pygame.draw.circle(surface, color, start, radius)
        pygame.draw.circle(surface, color, end, radius)


def _draw_shape(surface: pygame.Surface, tool: str, color: pygame.Color, start: Point, end: Point, width: int) -> None:
    width = max(1, int(width))
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if tool == "square":
        rect = pygame.Rect(int(start[0]), int(start[1]), int(dx), int(dy))
        rect.normalize()
        pygame.draw.rect(surface, color, rect, width)
    elif tool == "circle":
        radius = math.hypot(dx, dy)
        if radius >= 1:
            pygame.draw.circle(surface, color, start, radius, width)


@dataclass
class DrawState:
    tool: str
    color: pygame.Color
    size: int
    start: Point
    last: Point
    committed: Snapshot
    base: Optional[pygame.Surface] = None


class PixelSurface:
    """RGBA pixel grid that strokes, shapes and snapshots are rendered onto."""

    def __init__(self, width: int, height: int) -> None:
        self.surface = new_canvas((width, height))
        self.state: Optional[DrawState] = None

    @property
    def size(self) -> Tuple[int, int]:
        return self.surface.get_size()

    @property
    def width(self) -> int:
        return self.surface.get_width()

    @property
    def height(self) -> int:
        return self.surface.get_height()

    @property
    def drawing(self) -> bool:
        return self.state is not None

    def get_pixel(self, x: int, y: int) -> RGBA:
        return tuple(self.surface.get_at((x, y)))

    def snapshot(self) -> Snapshot:
        return Snapshot.capture(self.surface)

    def restore(self, snapshot: Snapshot) -> None:
        replace_pixels(self.surface, snapshot.to_surface())

    def resize(self, size: Tuple[int, int], snapshot: Snapshot) -> None:
        """Swap in a grid of ``size`` and reflow ``snapshot`` into it unscaled.

        Any gesture in progress is dropped; its pixels were never committed.
        """
        self.state = None
        self.surface = new_canvas(size)
        self.restore(snapshot)

    def begin_stroke(
        self,
        point: Point,
        tool: str,
        color: ColorLike,
        width: int,
        base: Optional[Snapshot] = None,
    ) -> None:
        validate_tool(tool)
        if tool not in FREEHAND_TOOLS and tool not in SHAPE_TOOLS:
            raise ValueError(f"Tool {tool} does not draw strokes")
        draw_color = pygame.Color(*CLEAR) if tool == "eraser" else parse_color(color)
        self.cancel_stroke()
        committed = base if base is not None else self.snapshot()
        base_surface = committed.to_surface() if tool in SHAPE_TOOLS else None
        self.state = DrawState(
            tool=tool,
            color=draw_color,
            size=max(1, int(width)),
            start=point,
            last=point,
            committed=committed,
            base=base_surface,
        )

    def stroke_to(self, point: Point) -> None:
        state = self.state
        if state is None:
            return
        if state.tool in FREEHAND_TOOLS:
            _draw_segment(self.surface, state.color, state.last, point, state.size)
        else:
            replace_pixels(self.surface, state.base)
            _draw_shape(self.surface, state.tool, state.color, state.start, point, state.size)
        state.last = point

    def end_stroke(self) -> bool:
        """Finish the gesture; whatever was previewed stays on the canvas."""
        if self.state is None:
            return False
        self.state = None
        return True

    def cancel_stroke(self) -> None:
        """Drop the gesture in progress and repaint its committed starting point."""
        state = self.state
        if state is None:
            return
        self.state = None
        self.restore(state.committed)
