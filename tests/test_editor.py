import pytest

from sketchbox.config import DEFAULT_CONFIG, _deep_merge
from sketchbox.paint.editor import BrushSettings, Editor
from sketchbox.paint.history import BLANK, encode_png
from sketchbox.paint.surface import new_canvas


def _editor(width=20, height=20, **settings):
    return Editor(width, height, BrushSettings(**settings))


def _draw_line(editor, start, end):
    editor.pointer_down(*start)
    editor.pointer_move(*end)
    return editor.pointer_up()


def test_session_starts_with_blank_snapshot():
    editor = _editor()
    assert len(editor.history) == 1
    assert editor.history.cursor == 0
    assert editor.surface.get_at((0, 0)).a == 0


def test_each_stroke_commits_once():
    editor = _editor()
    _draw_line(editor, (2, 2), (18, 2))
    _draw_line(editor, (2, 8), (18, 8))
    assert len(editor.history) == 3
    assert editor.history.cursor == 2


def test_zero_length_stroke_still_commits():
    editor = _editor()
    editor.pointer_down(5, 5)
    snapshot = editor.pointer_up()

    assert snapshot is not None
    assert len(editor.history) == 2
    assert editor.history.current == editor.history.entries[0]


def test_pointer_up_without_gesture_does_not_commit():
    editor = _editor()
    assert editor.pointer_up() is None
    assert len(editor.history) == 1


def test_bucket_tool_fills_on_pointer_down():
    editor = _editor(tool="bucket", color="#ff0000")
    kinds = []
    editor.add_listener(lambda kind, _snapshot: kinds.append(kind))

    editor.pointer_down(3, 3)
    editor.pointer_move(4, 4)
    editor.pointer_up()

    assert kinds == ["fill"]
    assert tuple(editor.surface.get_at((19, 19))) == (255, 0, 0, 255)


def test_fill_is_idempotent_but_still_commits():
    editor = _editor(color="#ff0000")
    editor.fill(1, 1)
    before = editor.history.current

    filled = editor.fill(1, 1)

    assert filled == 0
    assert len(editor.history) == 3
    assert editor.history.cursor == 2
    assert editor.history.current == before


def test_fill_outside_canvas_is_ignored():
    editor = _editor()
    assert editor.fill(25, 3) is None
    assert editor.fill(-0.5, 3) is None
    assert len(editor.history) == 1


def test_fill_floors_fractional_coordinates():
    editor = _editor(width=4, height=4, color="blue")
    assert editor.fill(3.9, 3.9) == 16


def test_fill_respects_configured_limit():
    editor = Editor(10, 10, BrushSettings(color="green"), max_fill_pixels=7)
    assert editor.fill(0, 0) == 7


def test_undo_redo_round_trip_is_byte_identical():
    editor = _editor()
    initial = editor.current_snapshot()
    _draw_line(editor, (2, 2), (18, 2))
    editor.set_tool("square")
    _draw_line(editor, (3, 5), (15, 15))
    editor.set_tool("bucket")
    editor.set_color("#00ff00")
    editor.pointer_down(0, 19)
    final = editor.current_snapshot()
    final_entry = editor.history.current

    for _ in range(3):
        editor.undo()
    assert editor.current_snapshot() == initial
    for _ in range(3):
        editor.redo()

    assert editor.current_snapshot() == final
    assert editor.canvas.snapshot() == final_entry


def test_new_edit_after_undo_discards_redo():
    editor = _editor()
    _draw_line(editor, (2, 2), (18, 2))
    discarded = editor.history.current
    editor.undo()

    _draw_line(editor, (2, 10), (18, 10))
    for _ in range(3):
        editor.redo()

    assert discarded not in editor.history.entries
    assert editor.surface.get_at((10, 2)).a == 0
    assert editor.surface.get_at((10, 10)).a == 255


def test_reset_clears_and_notifies():
    editor = _editor()
    events = []
    editor.add_listener(lambda kind, snapshot: events.append((kind, snapshot)))
    _draw_line(editor, (2, 2), (18, 2))

    snapshot = editor.reset()

    assert snapshot is BLANK
    assert events[-1] == ("clear", BLANK)
    assert editor.surface.get_at((10, 2)).a == 0
    assert editor.current_snapshot() == encode_png(new_canvas((20, 20)))

    editor.undo()
    assert editor.surface.get_at((10, 2)).a == 255


def test_reset_after_undo_keeps_undone_entries():
    editor = _editor()
    _draw_line(editor, (2, 2), (18, 2))
    _draw_line(editor, (2, 10), (18, 10))
    editor.undo()

    editor.reset()

    assert len(editor.history) == 4
    assert editor.history.cursor == 3
    assert editor.surface.get_at((10, 2)).a == 0

    editor.undo()
    assert editor.surface.get_at((10, 2)).a == 255
    assert editor.surface.get_at((10, 10)).a == 255


def test_fill_during_shape_gesture_discards_the_preview():
    editor = _editor(width=10, height=10, tool="square", color="#000000")
    editor.pointer_down(1, 1)
    editor.pointer_move(8, 8)
    assert tuple(editor.surface.get_at((7, 5))) == (0, 0, 0, 255)

    editor.fill(0, 0, "#ff0000")

    assert tuple(editor.surface.get_at((7, 5))) == (255, 0, 0, 255)
    assert editor.pointer_up() is None
    assert len(editor.history) == 2
    restored = editor.history.current.to_surface()
    assert tuple(restored.get_at((7, 5))) == (255, 0, 0, 255)


def test_second_pointer_down_discards_unfinished_stroke():
    editor = _editor()
    editor.pointer_down(2, 2)
    editor.pointer_move(18, 2)

    editor.pointer_down(2, 10)
    editor.pointer_move(18, 10)
    editor.pointer_up()

    assert editor.surface.get_at((10, 2)).a == 0
    assert editor.surface.get_at((10, 10)).a == 255
    assert len(editor.history) == 2


def test_removed_listener_is_not_called():
    editor = _editor()
    calls = []

    def listener(kind, snapshot):
        calls.append(kind)

    editor.add_listener(listener)
    editor.remove_listener(listener)
    _draw_line(editor, (1, 1), (5, 5))
    assert calls == []


def test_import_commits_once():
    editor = _editor(width=100, height=100)
    image = new_canvas((200, 100))
    image.fill((255, 0, 0, 255))

    assert editor.import_image(image)

    assert len(editor.history) == 2
    assert editor.surface.get_at((50, 10)).a == 0
    red, green, blue, _alpha = editor.surface.get_at((50, 50))
    assert red > 240 and green < 15 and blue < 15


def test_failed_import_leaves_session_untouched():
    editor = _editor()
    _draw_line(editor, (2, 2), (18, 2))
    before = editor.canvas.snapshot()

    assert not editor.import_bytes(b"garbage")
    assert not editor.import_image(new_canvas((0, 5)))

    assert len(editor.history) == 2
    assert editor.canvas.snapshot() == before


def test_import_bytes_accepts_png():
    editor = _editor(width=10, height=10)
    image = new_canvas((10, 10))
    image.fill((0, 0, 255, 255))

    assert editor.import_bytes(encode_png(image), "drawing.png")
    red, green, blue, alpha = editor.surface.get_at((5, 5))
    assert blue > 240 and red < 15 and green < 15
    assert alpha > 240


def test_resize_mid_gesture_rerenders_last_commit():
    editor = _editor()
    _draw_line(editor, (2, 2), (18, 2))
    editor.pointer_down(2, 10)
    editor.pointer_move(18, 10)
    assert editor.surface.get_at((10, 10)).a == 255

    editor.resize(30, 12)

    assert editor.size == (30, 12)
    assert editor.surface.get_at((10, 10)).a == 0
    assert editor.surface.get_at((10, 2)).a == 255
    assert editor.pointer_up() is None
    assert len(editor.history) == 2


def test_current_snapshot_ignores_uncommitted_gesture():
    editor = _editor()
    committed = editor.current_snapshot()
    editor.pointer_down(2, 2)
    editor.pointer_move(18, 18)

    assert editor.current_snapshot() == committed
    assert editor.current_snapshot_data_uri().startswith("data:image/png;base64,")


def test_settings_validation():
    editor = _editor()
    with pytest.raises(ValueError):
        editor.set_tool("spray")
    with pytest.raises(ValueError):
        editor.set_color("not-a-color")
    editor.set_size(0)
    assert editor.settings.size == 1
    editor.set_tolerance(400)
    assert editor.settings.tolerance == 255


def test_from_config_reads_canvas_and_fill_settings():
    config = _deep_merge(DEFAULT_CONFIG, {
        "canvas": {"width": 40, "height": 30},
        "paint": {"default_tool": "circle", "default_size": 9, "default_color": "#123456"},
        "fill": {"tolerance": 12, "max_pixels": 99},
    })

    editor = Editor.from_config(config)

    assert editor.size == (40, 30)
    assert editor.settings.tool == "circle"
    assert editor.settings.size == 9
    assert tuple(editor.settings.color) == (0x12, 0x34, 0x56, 255)
    assert editor.settings.tolerance == 12
    assert editor.max_fill_pixels == 99
