"""Tests for keypad input."""

import pytest
import jax.numpy as jnp
from chip8vm import key_at, press_key, release_key, set_key, set_keypad, KEYPAD_LAYOUT


class TestLayout:
    """Test the 4x4 keypad layout."""

    def test_corners(self):
        assert key_at(0, 0) == 0x1
        assert key_at(0, 3) == 0xC
        assert key_at(3, 0) == 0xA
        assert key_at(3, 3) == 0xF

    def test_zero_key(self):
        assert key_at(3, 1) == 0x0

    def test_layout_covers_every_key(self):
        keys = sorted(key for row in KEYPAD_LAYOUT for key in row)
        assert keys == list(range(16))

    def test_invalid_position(self):
        with pytest.raises(ValueError):
            key_at(4, 0)
        with pytest.raises(ValueError):
            key_at(0, -1)


class TestKeyState:
    """Test setting key states."""

    def test_press_and_release(self, fresh_state):
        state = press_key(fresh_state, 0xA)
        assert state.keypad[0xA]
        assert jnp.sum(state.keypad) == 1

        state = release_key(state, 0xA)
        assert not jnp.any(state.keypad)

    def test_set_key(self, fresh_state):
        state = set_key(fresh_state, 3, True)
        assert state.keypad[3]

    def test_invalid_key(self, fresh_state):
        with pytest.raises(ValueError):
            press_key(fresh_state, 16)

    def test_set_keypad(self, fresh_state):
        pressed = [False] * 16
        pressed[2] = pressed[15] = True
        state = set_keypad(fresh_state, pressed)
        assert state.keypad[2]
        assert state.keypad[15]
        assert jnp.sum(state.keypad) == 2

    def test_set_keypad_wrong_size(self, fresh_state):
        with pytest.raises(ValueError):
            set_keypad(fresh_state, [True] * 4)
