"""Tests for register load, index register and random operations."""

import jax.numpy as jnp
from chip8vm import execute


class TestBasicMemory:
    """Test basic register operations."""

    def test_set_every_register(self, fresh_state):
        """6XNN - Set VX = NN."""
        state = fresh_state
        for x in range(16):
            state = execute(state, 0x6000 | (x << 8) | (0x10 + x))
        for x in range(16):
            assert state.V[x] == 0x10 + x

    def test_add_basic(self, fresh_state):
        """7XNN - Add NN to VX."""
        state = fresh_state.replace(V=fresh_state.V.at[1].set(0x10))
        state = execute(state, 0x7105)
        assert state.V[1] == 0x15

    def test_add_wraps_without_flag(self, fresh_state):
        """7XNN - 250 + 10 wraps to 4 and leaves VF alone."""
        state = fresh_state.replace(V=fresh_state.V.at[1].set(250))
        state = execute(state, 0x710A)
        assert state.V[1] == 4
        assert state.V[15] == 0


class TestIndexRegister:
    """Test I register operations."""

    def test_set_index(self, fresh_state):
        """ANNN - Set I register to NNN."""
        state = execute(fresh_state, 0xA123)
        assert state.I == 0x123

    def test_set_index_maximum(self, fresh_state):
        state = execute(fresh_state, 0xAFFF)
        assert state.I == 0xFFF

    def test_add_to_index(self, fresh_state):
        """FX1E - I += VX."""
        state = execute(fresh_state, 0xA300)
        state = execute(state, 0x6020)
        state = execute(state, 0xF01E)
        assert state.I == 0x320
        assert state.V[15] == 0

    def test_add_to_index_wraps_at_sixteen_bits(self, fresh_state):
        """FX1E - 16-bit wraparound, VF untouched."""
        state = fresh_state.replace(I=jnp.asarray(0xFFFF, dtype=jnp.uint16))
        state = execute(state, 0x6002)
        state = execute(state, 0x6F07)
        state = execute(state, 0xF01E)
        assert state.I == 0x0001
        assert state.V[15] == 7


class TestRandom:
    """Test random number generation."""

    def test_random_zero_mask(self, fresh_state):
        """CXNN - Random AND with 0x00 should always be 0."""
        state = execute(fresh_state, 0xC000)
        assert state.V[0] == 0

    def test_random_bit_mask(self, fresh_state):
        """CXNN - Random AND with specific mask."""
        state = fresh_state
        for _ in range(8):
            state = execute(state, 0xC20F)
            assert 0 <= state.V[2] <= 15

    def test_random_mask_single_bit(self, fresh_state):
        state = fresh_state
        for _ in range(8):
            state = execute(state, 0xC380)
            assert int(state.V[3]) in (0, 0x80)

    def test_random_advances_rng(self, fresh_state):
        state = execute(fresh_state, 0xC0FF)
        assert not jnp.array_equal(state.rng, fresh_state.rng)

    def test_random_preserves_state(self, fresh_state):
        """CXNN - Only VX changes."""
        state = execute(fresh_state, 0x6142)
        state = execute(state, 0xA300)

        new_state = execute(state, 0xC0FF)

        assert new_state.V[1] == 0x42
        assert new_state.I == 0x300
        assert new_state.pc == state.pc
