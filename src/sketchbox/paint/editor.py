from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pygame

from sketchbox.config import canvas_size, coerce_int, fill_settings
from sketchbox.paint.fill import DEFAULT_TOLERANCE, MAX_FILL_PIXELS, flood_fill
from sketchbox.paint.history import HistoryLog, Snapshot, encode_png, png_data_uri
from sketchbox.paint.importer import blit_letterboxed, decode_image, load_image_file
from sketchbox.paint.surface import ColorLike, PixelSurface, new_canvas, parse_color, replace_pixels, validate_tool

logger = logging.getLogger(__name__)

Listener = Callable[[str, Snapshot], None]


@dataclass
class BrushSettings:
    tool: str = "pencil"
    color: ColorLike = "#000000"
    size: int = 5
    tolerance: int = DEFAULT_TOLERANCE


class Editor:
    """One drawing session: a pixel surface and the history behind it.

    Every finished edit (stroke, fill, import, clear) commits exactly one
    history entry and notifies the listeners with ``(kind, snapshot)``.
    Undo and redo only move the history cursor and repaint from the stored
    snapshot.
    """

    def __init__(
        self,
        width: int,
        height: int,
        settings: Optional[BrushSettings] = None,
        *,
        max_fill_pixels: int = MAX_FILL_PIXELS,
    ) -> None:
        self.canvas = PixelSurface(width, height)
        self.settings = settings or BrushSettings()
        self.max_fill_pixels = max_fill_pixels
        self.history = HistoryLog(self.canvas.snapshot())
        self._listeners: List[Listener] = []

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "Editor":
        width, height = canvas_size(config)
        tolerance, max_pixels = fill_settings(config)
        paint = config.get("paint", {})
        tool = paint.get("default_tool", "pencil")
        settings = BrushSettings(
            tool=validate_tool(tool),
            color=parse_color(paint.get("default_color", "#000000")),
            size=coerce_int(paint.get("default_size"), 5, minimum=1),
            tolerance=tolerance,
        )
        return cls(width, height, settings, max_fill_pixels=max_pixels)

    @property
    def surface(self) -> pygame.Surface:
        return self.canvas.surface

    @property
    def size(self):
        return self.canvas.size

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, kind: str, snapshot: Snapshot) -> None:
        for listener in list(self._listeners):
            listener(kind, snapshot)

    def _commit(self, kind: str) -> Snapshot:
        snapshot = self.history.commit(self.canvas.snapshot())
        logger.debug("Committed %s, history %d/%d", kind, self.history.cursor + 1, len(self.history))
        self._notify(kind, snapshot)
        return snapshot

    def set_tool(self, tool: str) -> None:
        self.settings.tool = validate_tool(tool)

    def set_color(self, color: ColorLike) -> None:
        self.settings.color = parse_color(color)

    def set_size(self, size: int) -> None:
        self.settings.size = max(1, int(size))

    def set_tolerance(self, tolerance: int) -> None:
        self.settings.tolerance = max(0, min(255, int(tolerance)))

    def pointer_down(self, x: float, y: float) -> None:
        tool = self.settings.tool
        if tool == "bucket":
            self.fill(x, y)
            return
        self.canvas.begin_stroke(
            (x, y),
            tool,
            self.settings.color,
            self.settings.size,
            base=self.history.current,
        )

    def pointer_move(self, x: float, y: float) -> None:
        self.canvas.stroke_to((x, y))

    def pointer_up(self) -> Optional[Snapshot]:
        if not self.canvas.end_stroke():
            return None
        return self._commit("stroke")

    def fill(
        self,
        x: float,
        y: float,
        color: Optional[ColorLike] = None,
        tolerance: Optional[int] = None,
    ) -> Optional[int]:
        """Bucket-fill at ``(x, y)``; returns the pixel count, ``None`` off-canvas."""
        seed = (int(math.floor(x)), int(math.floor(y)))
        width, height = self.canvas.size
        if not (0 <= seed[0] < width and 0 <= seed[1] < height):
            return None
        self.canvas.cancel_stroke()
        filled = flood_fill(
            self.canvas.surface,
            seed,
            self.settings.color if color is None else color,
            self.settings.tolerance if tolerance is None else tolerance,
            self.max_fill_pixels,
        )
        self._commit("fill")
        return filled

    def import_image(self, image: Optional[pygame.Surface]) -> bool:
        self.canvas.cancel_stroke()
        if blit_letterboxed(self.canvas.surface, image) is None:
            return False
        self._commit("import")
        return True

    def import_bytes(self, data: bytes, namehint: str = "") -> bool:
        return self.import_image(decode_image(data, namehint))

    def import_file(self, path: Path) -> bool:
        return self.import_image(load_image_file(path))

    def undo(self) -> Snapshot:
        self.canvas.cancel_stroke()
        snapshot = self.history.undo()
        self.canvas.restore(snapshot)
        return snapshot

    def redo(self) -> Snapshot:
        self.canvas.cancel_stroke()
        snapshot = self.history.redo()
        self.canvas.restore(snapshot)
        return snapshot

    def reset(self) -> Snapshot:
        self.canvas.cancel_stroke()
        snapshot = self.history.reset()
        self.canvas.restore(snapshot)
        self._notify("clear", snapshot)
        return snapshot

    def resize(self, width: int, height: int) -> None:
        if (width, height) == self.canvas.size:
            return
        self.canvas.resize((max(1, width), max(1, height)), self.history.current)

    def current_snapshot(self) -> bytes:
        """PNG of the last committed state, sized to the current canvas."""
        rendered = new_canvas(self.canvas.size)
        replace_pixels(rendered, self.history.current.to_surface())
        return encode_png(rendered)

    def current_snapshot_data_uri(self) -> str:
        return png_data_uri(self.current_snapshot())
