"""Immutable canvas snapshots and the linear undo/redo log built on them."""

from __future__ import annotations

import base64
import io
import logging
import zlib
from dataclasses import dataclass
from typing import List, Tuple

import pygame

logger = logging.getLogger(__name__)

Size = Tuple[int, int]


@dataclass(frozen=True)
class Snapshot:
    """Full copy of a canvas: zlib-compressed row-major RGBA bytes.

    A snapshot with no data is the blank sentinel; rendering it clears the
    canvas whatever its size.
    """

    size: Size
    data: bytes = b""

    @classmethod
    def capture(cls, surface: pygame.Surface) -> "Snapshot":
        raw = pygame.image.tobytes(surface, "RGBA")
        return cls(size=surface.get_size(), data=zlib.compress(raw))

    @property
    def is_blank(self) -> bool:
        return not self.data

    def to_surface(self) -> pygame.Surface:
        if self.is_blank:
            return pygame.Surface((0, 0), pygame.SRCALPHA)
        raw = zlib.decompress(self.data)
        return pygame.image.frombytes(raw, self.size, "RGBA")


BLANK = Snapshot(size=(0, 0))


def encode_png(surface: pygame.Surface) -> bytes:
    buffer = io.BytesIO()
    pygame.image.save(surface, buffer, "snapshot.png")
    return buffer.getvalue()


def png_data_uri(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


class HistoryLog:
    """Snapshots plus a cursor; ``entries[cursor]`` is what the canvas shows.

    Committing after an undo drops every entry past the cursor, so a redo
    tail never survives a new edit. Undo at the first entry and redo at the
    last are no-ops. A reset keeps the whole list and appends a blank
    entry, so anything undone before the clear is still reachable.
    """

    def __init__(self, initial: Snapshot) -> None:
        self._entries: List[Snapshot] = [initial]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> Snapshot:
        return self._entries[self._cursor]

    @property
    def entries(self) -> Tuple[Snapshot, ...]:
        return tuple(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def commit(self, snapshot: Snapshot) -> Snapshot:
        discarded = len(self._entries) - self._cursor - 1
        del self._entries[self._cursor + 1:]
        self._entries.append(snapshot)
        self._cursor = len(self._entries) - 1
        if discarded:
            logger.debug("Commit discarded %d redo entries", discarded)
        return snapshot

    def undo(self) -> Snapshot:
        if self.can_undo:
            self._cursor -= 1
        return self.current

    def redo(self) -> Snapshot:
        if self.can_redo:
            self._cursor += 1
        return self.current

    def reset(self) -> Snapshot:
        """Append ``BLANK`` after every entry, redo tail included, and move onto it."""
        self._entries.append(BLANK)
        self._cursor = len(self._entries) - 1
        return BLANK
