from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pygame

from sketchbox.config import coerce_int, load_config
from sketchbox.logging_config import setup_logging_from_config
from sketchbox.paint.editor import Editor
from sketchbox.paint.history import Snapshot
from sketchbox.paint.surface import parse_color
from sketchbox.paths import ensure_directories, get_data_root
from sketchbox.ui.common import (
    Button,
    create_window,
    history_shortcut,
    is_pointer_motion,
    is_primary_pointer_event,
    pointer_event_pos,
)

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int]
Point = Tuple[int, int]

TOOLS = [
    ("pencil", "Pencil"),
    ("eraser", "Eraser"),
    ("square", "Square"),
    ("circle", "Circle"),
    ("bucket", "Bucket"),
]
ACTIONS = [
    ("undo", "Undo"),
    ("redo", "Redo"),
    ("clear", "Clear"),
    ("import", "Import"),
    ("save", "Save"),
]
IMAGE_FILETYPES = [("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.webp"), ("All files", "*.*")]


def _write_atomic(data: bytes, path: Path) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    tmp_path.write_bytes(data)
    os.replace(tmp_path, path)


def _unique_export_path(export_dir: Path, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H%M%S")
    candidate = export_dir / f"{stamp}.png"
    counter = 1
    while candidate.exists():
        candidate = export_dir / f"{stamp}_{counter}.png"
        counter += 1
    return candidate


def _palette_from_config(config: Dict[str, Any]) -> List[Color]:
    palette = []
    for entry in config.get("paint", {}).get("palette", []):
        try:
            palette.append(tuple(parse_color(entry))[:3])
        except (TypeError, ValueError):
            logger.warning("Ignoring palette entry %r", entry)
    return palette


def _brush_sizes(config: Dict[str, Any]) -> List[int]:
    sizes = []
    for value in config.get("paint", {}).get("brush_sizes", []):
        size = coerce_int(value, 0)
        if size > 0 and size not in sizes:
            sizes.append(size)
    return sizes or [5]


def _ask_open_image(initial_dir: Path) -> Optional[Path]:
    """Open a Tk file-open dialog and return the picked image path."""
    import tkinter as tk
    from tkinter import filedialog
    try:
        root = tk.Tk()
    except tk.TclError:
        logger.warning("No file dialog available")
        return None
    root.withdraw()
    path = filedialog.askopenfilename(
        initialdir=str(initial_dir),
        filetypes=IMAGE_FILETYPES,
        title="Import image…",
    )
    root.destroy()
    return Path(path) if path else None


def _canvas_rect_for(screen_rect: pygame.Rect, panel_width: int, margin: int) -> pygame.Rect:
    return pygame.Rect(
        panel_width + 2 * margin,
        margin,
        max(1, screen_rect.width - panel_width - 3 * margin),
        max(1, screen_rect.height - 2 * margin),
    )


class PaintApp:
    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = config if config is not None else load_config()
        self.data_root = get_data_root(self.config)
        dirs = ensure_directories(self.data_root)
        self.export_dir = dirs["exports"]

        self.editor = Editor.from_config(self.config)
        self.editor.add_listener(self._on_commit)

        self.margin = 12
        self.menu_pad = 10
        self.menu_gap = 8
        self.menu_bg = (238, 234, 226)
        self.panel_width = 150
        canvas_w, canvas_h = self.editor.size
        window_size = (canvas_w + self.panel_width + 3 * self.margin, canvas_h + 2 * self.margin)
        self.screen, self.screen_rect = create_window(window_size)
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("sans", 16)

        self.palette = _palette_from_config(self.config)
        self.size_values = _brush_sizes(self.config)
        if self.editor.settings.size not in self.size_values:
            self.size_values.append(self.editor.settings.size)
            self.size_values.sort()

        self.tool_buttons: Dict[str, Button] = {}
        self.size_buttons: Dict[int, Button] = {}
        self.palette_buttons: List[Button] = []
        self.action_buttons: Dict[str, Button] = {}
        self.controls_rect = pygame.Rect(0, 0, 0, 0)
        self.canvas_rect = pygame.Rect(0, 0, 0, 0)
        self._layout()
        self.editor.resize(*self.canvas_rect.size)

        self.pointer_down = False
        self.status = "Ready"
        self.last_export: Optional[Path] = None
        self.clear_armed = False

    def _layout(self) -> None:
        self.controls_rect = pygame.Rect(
            self.margin,
            self.margin,
            self.panel_width,
            max(1, self.screen_rect.height - 2 * self.margin),
        )
        self.canvas_rect = _canvas_rect_for(self.screen_rect, self.panel_width, self.margin)
        self._build_ui()

    def _build_ui(self) -> None:
        self.tool_buttons.clear()
        self.size_buttons.clear()
        self.palette_buttons.clear()
        self.action_buttons.clear()

        pad = self.menu_pad
        gap = self.menu_gap
        left = self.controls_rect.left + pad
        inner_w = self.controls_rect.width - pad * 2
        row_h = self.font.get_height() + 10
        top = self.controls_rect.top + pad

        for tool, label in TOOLS:
            self.tool_buttons[tool] = Button(rect=pygame.Rect(left, top, inner_w, row_h), label=label, fill=(245, 245, 245))
            top += row_h + gap

        top += gap
        size_w = max(1, (inner_w - gap * (len(self.size_values) - 1)) // len(self.size_values))
        for idx, size in enumerate(self.size_values):
            rect = pygame.Rect(left + idx * (size_w + gap), top, size_w, row_h)
            self.size_buttons[size] = Button(rect=rect, label=str(size), fill=(245, 245, 245))
        top += row_h + 2 * gap

        swatch = max(14, (inner_w - gap) // 2)
        swatch_h = max(14, row_h - 4)
        for idx, color in enumerate(self.palette):
            row = idx // 2
            col = idx % 2
            rect = pygame.Rect(left + col * (swatch + gap), top + row * (swatch_h + gap // 2), swatch, swatch_h)
            self.palette_buttons.append(Button(rect=rect, fill=color, border_width=1))
        rows = (len(self.palette) + 1) // 2
        top += rows * (swatch_h + gap // 2) + gap

        for action, label in ACTIONS:
            self.action_buttons[action] = Button(rect=pygame.Rect(left, top, inner_w, row_h), label=label, fill=(245, 245, 245))
            top += row_h + gap
        self._refresh_action_state()

    def _refresh_action_state(self) -> None:
        if not self.action_buttons:
            return
        self.action_buttons["undo"].enabled = self.editor.history.can_undo
        self.action_buttons["redo"].enabled = self.editor.history.can_redo

    def _on_commit(self, kind: str, snapshot: Snapshot) -> None:
        if kind == "clear":
            # A cleared drawing no longer matches anything exported from it.
            self.last_export = None
            self.status = "Canvas cleared"
        else:
            self.status = f"{kind.capitalize()} done"
        self._refresh_action_state()

    def _local(self, pos: Point) -> Point:
        return (pos[0] - self.canvas_rect.left, pos[1] - self.canvas_rect.top)

    def _handle_resize(self, size: Tuple[int, int]) -> None:
        self.screen = pygame.display.get_surface() or pygame.display.set_mode(size, pygame.RESIZABLE)
        self.screen_rect = self.screen.get_rect()
        self.pointer_down = False
        self._layout()
        self.editor.resize(*self.canvas_rect.size)
        logger.debug("Canvas resized to %s", self.canvas_rect.size)

    def _run_action(self, action: str) -> None:
        if action != "clear":
            self.clear_armed = False
        if action == "undo":
            self.editor.undo()
            self.status = "Undo"
        elif action == "redo":
            self.editor.redo()
            self.status = "Redo"
        elif action == "clear":
            # Clear wipes the canvas, so it takes two presses in a row.
            if self.clear_armed:
                self.clear_armed = False
                self.editor.reset()
            else:
                self.clear_armed = True
                self.status = "Press Clear again to clear the canvas"
        elif action == "import":
            self._import()
        elif action == "save":
            self._export()
        self._refresh_action_state()

    def _import(self) -> None:
        path = _ask_open_image(self.data_root)
        if path is None:
            return
        if self.editor.import_file(path):
            self.status = f"Imported {path.name}"
        else:
            self.status = f"Could not import {path.name}"

    def _export(self) -> Optional[Path]:
        path = _unique_export_path(self.export_dir)
        try:
            _write_atomic(self.editor.current_snapshot(), path)
        except (OSError, pygame.error) as exc:
            logger.error("Export to %s failed: %s", path, exc)
            self.status = "Save failed"
            return None
        logger.info("Exported drawing to %s", path)
        self.last_export = path
        self.status = f"Saved {path.name}"
        return path

    def _handle_pointer_down(self, pos: Point) -> None:
        if self.canvas_rect.collidepoint(pos):
            self.clear_armed = False
            self.pointer_down = True
            self.editor.pointer_down(*self._local(pos))
            return

        for tool, button in self.tool_buttons.items():
            if button.hit(pos):
                self.editor.set_tool(tool)
                return

        for size, button in self.size_buttons.items():
            if button.hit(pos):
                self.editor.set_size(size)
                return

        for idx, button in enumerate(self.palette_buttons):
            if button.hit(pos):
                self.editor.set_color(self.palette[idx])
                return

        for action, button in self.action_buttons.items():
            if button.hit(pos):
                self._run_action(action)
                return

    def _handle_pointer_move(self, pos: Point) -> None:
        if self.pointer_down:
            self.editor.pointer_move(*self._local(pos))

    def _handle_pointer_up(self) -> None:
        self.pointer_down = False
        self.editor.pointer_up()

    def _draw(self) -> None:
        self.screen.fill((252, 248, 240))
        pygame.draw.rect(self.screen, self.menu_bg, self.controls_rect, border_radius=8)
        pygame.draw.rect(self.screen, (255, 255, 255), self.canvas_rect)
        self.screen.blit(self.editor.surface, self.canvas_rect.topleft)
        pygame.draw.rect(self.screen, (200, 200, 200), self.canvas_rect, width=2)

        settings = self.editor.settings
        for tool, button in self.tool_buttons.items():
            button.draw(self.screen, self.font)
            if tool == settings.tool:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=3, border_radius=8)

        for size, button in self.size_buttons.items():
            button.draw(self.screen, self.font)
            if size == settings.size:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=3, border_radius=8)

        current = tuple(parse_color(settings.color))[:3]
        for idx, button in enumerate(self.palette_buttons):
            button.draw(self.screen)
            if self.palette[idx] == current:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=3)

        for button in self.action_buttons.values():
            button.draw(self.screen, self.font)

        text = self.font.render(self.status, True, (60, 60, 60))
        self.screen.blit(text, (self.controls_rect.left + self.menu_pad, self.controls_rect.bottom - text.get_height() - self.menu_pad))

    def run(self) -> None:
        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.VIDEORESIZE:
                    self._handle_resize(event.size)
                elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                    running = False
                elif history_shortcut(event) is not None:
                    self._run_action(history_shortcut(event))
                elif is_primary_pointer_event(event, is_down=True):
                    pos = pointer_event_pos(event, self.screen_rect)
                    if pos is not None:
                        self._handle_pointer_down(pos)
                elif is_pointer_motion(event):
                    pos = pointer_event_pos(event, self.screen_rect)
                    if pos is not None:
                        self._handle_pointer_move(pos)
                elif is_primary_pointer_event(event, is_down=False):
                    self._handle_pointer_up()

            self._draw()
            pygame.display.flip()
            self.clock.tick(60)

        pygame.quit()


def main() -> None:
    config = load_config()
    setup_logging_from_config(config)
    try:
        PaintApp(config).run()
    except Exception:
        logger.exception("SketchBox paint stopped unexpectedly")
        pygame.quit()


if __name__ == "__main__":
    main()
