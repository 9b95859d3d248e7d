"""Test configuration and fixtures for chip8vm tests."""

import pytest
import jax.numpy as jnp
from chip8vm import create_state, load_program


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def vy_shift_state():
    """Provide a fresh state with COSMAC shift behavior."""
    return create_state(shift_uses_vy=True)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def load_words(state, words):
    """Helper to load a program given as 16-bit instruction words."""
    program = b"".join(word.to_bytes(2, "big") for word in words)
    return load_program(state, program)
