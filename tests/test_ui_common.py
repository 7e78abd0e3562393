import pygame

from sketchbox.ui.common import Button, history_shortcut, is_pointer_motion, is_primary_pointer_event, pointer_event_pos


def test_primary_pointer_event_accepts_left_mouse_button():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=1, pos=(10, 10))
    assert is_primary_pointer_event(event, is_down=True)


def test_primary_pointer_event_accepts_touch_emulated_mouse_button_zero():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=0, pos=(10, 10), touch=True)
    assert is_primary_pointer_event(event, is_down=True)


def test_primary_pointer_event_rejects_right_mouse_button():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(10, 10))
    assert not is_primary_pointer_event(event, is_down=True)


def test_pointer_up_is_not_a_down_event():
    event = pygame.event.Event(pygame.MOUSEBUTTONUP, button=1, pos=(10, 10))
    assert is_primary_pointer_event(event, is_down=False)
    assert not is_primary_pointer_event(event, is_down=True)


def test_pointer_event_pos_scales_finger_coordinates():
    screen_rect = pygame.Rect(0, 0, 200, 100)
    finger = pygame.event.Event(pygame.FINGERMOTION, x=0.5, y=0.25, dx=0.0, dy=0.0)
    assert is_pointer_motion(finger)
    assert pointer_event_pos(finger, screen_rect) == (100, 25)
    key = pygame.event.Event(pygame.KEYDOWN, key=pygame.K_a, mod=0)
    assert pointer_event_pos(key, screen_rect) is None


def test_history_shortcut():
    def key(k, mod):
        return pygame.event.Event(pygame.KEYDOWN, key=k, mod=mod)

    assert history_shortcut(key(pygame.K_z, pygame.KMOD_LCTRL)) == "undo"
    assert history_shortcut(key(pygame.K_z, pygame.KMOD_LCTRL | pygame.KMOD_LSHIFT)) == "redo"
    assert history_shortcut(key(pygame.K_y, pygame.KMOD_RCTRL)) == "redo"
    assert history_shortcut(key(pygame.K_z, 0)) is None
    assert history_shortcut(pygame.event.Event(pygame.MOUSEMOTION, pos=(0, 0))) is None


def test_disabled_button_does_not_hit():
    button = Button(rect=pygame.Rect(0, 0, 10, 10), label="Undo")
    assert button.hit((5, 5))
    button.enabled = False
    assert not button.hit((5, 5))
