"""CHIP-8 keypad input.

The machine sees 16 independent key states. ``KEYPAD_LAYOUT`` gives their
arrangement on the physical 4x4 pad so hosts can map a grid of real keys.
"""

import jax.numpy as jnp

from chip8vm.constants import KEYPAD_LAYOUT, NUM_KEYS
from chip8vm.state import MachineState


def _check_key(key: int) -> int:
    if not 0 <= key < NUM_KEYS:
        raise ValueError(f"Key index must be in 0x0-0xF, got {key}")
    return key


def key_at(row: int, column: int) -> int:
    """Key index at a position of the 4x4 pad."""
    if not (0 <= row < len(KEYPAD_LAYOUT) and 0 <= column < len(KEYPAD_LAYOUT[0])):
        raise ValueError(f"No key at row {row}, column {column}")
    return KEYPAD_LAYOUT[row][column]


def set_key(state: MachineState, key: int, pressed: bool) -> MachineState:
    """Set one key's pressed state."""
    return state.replace(keypad=state.keypad.at[_check_key(key)].set(pressed))


def press_key(state: MachineState, key: int) -> MachineState:
    return set_key(state, key, True)


def release_key(state: MachineState, key: int) -> MachineState:
    return set_key(state, key, False)


def set_keypad(state: MachineState, pressed) -> MachineState:
    """Replace all 16 key states at once, e.g. from a host's key snapshot."""
    keypad = jnp.asarray(pressed, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Keypad must have {NUM_KEYS} entries, got shape {keypad.shape}")
    return state.replace(keypad=keypad)
