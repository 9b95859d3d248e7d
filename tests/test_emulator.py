"""Tests for the step/tick engine and program loading."""

import pytest
import jax
import jax.numpy as jnp
from chip8vm import (
    step, tick_timers, run_steps, run_frame, run_frames_with_progress,
    load_program, load_rom, Fault, OutOfBoundsAccessError, PROGRAM_START, MEMORY_SIZE,
    INSTRUCTIONS_PER_TICK,
)
from conftest import load_words


class TestInitialState:
    """Test the power-on state."""

    def test_initial_state(self, fresh_state):
        assert fresh_state.pc == PROGRAM_START
        assert fresh_state.I == 0
        assert not jnp.any(fresh_state.V)
        assert fresh_state.stack.pointer == 0
        assert fresh_state.delay_timer == 0
        assert fresh_state.sound_timer == 0
        assert not jnp.any(fresh_state.keypad)
        assert int(fresh_state.fault) == Fault.NONE
        assert fresh_state.awaiting_key == -1
        assert not jnp.any(fresh_state.memory[PROGRAM_START:])


class TestLoading:
    """Test program loading."""

    def test_load_program(self, fresh_state):
        state = load_program(fresh_state, bytes([0x12, 0x34, 0x56]))
        assert [int(b) for b in state.memory[PROGRAM_START:PROGRAM_START + 3]] == [0x12, 0x34, 0x56]

    def test_load_program_fills_memory(self, fresh_state):
        state = load_program(fresh_state, bytes(MEMORY_SIZE - PROGRAM_START))
        assert state.memory.shape == (MEMORY_SIZE,)

    def test_load_program_too_large(self, fresh_state):
        with pytest.raises(OutOfBoundsAccessError):
            load_program(fresh_state, bytes(MEMORY_SIZE - PROGRAM_START + 1))

    def test_load_rom(self, fresh_state, tmp_path):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(bytes([0x60, 0x2A]))
        state = step(load_rom(fresh_state, str(rom)))
        assert state.V[0] == 0x2A


class TestStep:
    """Test single-step execution."""

    def test_step_runs_program(self, fresh_state):
        state = load_words(fresh_state, [0x6005, 0x7003, 0x8014])
        state = step(step(step(state)))
        assert state.V[0] == 8
        assert state.pc == PROGRAM_START + 6

    def test_skip_over_instruction(self, fresh_state):
        state = load_words(fresh_state, [0x3000, 0x6001, 0x6102])  # V0 == 0 skips
        state = step(step(state))
        assert state.V[0] == 0
        assert state.V[1] == 2

    def test_fetch_past_memory_faults(self, fresh_state):
        state = load_words(fresh_state, [0x1FFF])  # pc = 0xFFF, second byte off the end
        state = step(state)
        assert state.pc == 0xFFF

        state = step(state)
        assert int(state.fault) == Fault.OUT_OF_BOUNDS
        assert state.pc == 0xFFF

    def test_fetch_from_jump_offset_overflow_faults(self, fresh_state):
        state = load_words(fresh_state, [0x60FF, 0xBFFF])
        state = step(step(step(state)))
        assert int(state.fault) == Fault.OUT_OF_BOUNDS

    def test_faulted_machine_does_not_move(self, fresh_state):
        state = load_words(fresh_state, [0x00EE, 0x6001])
        state = step(state)
        assert int(state.fault) == Fault.STACK_UNDERFLOW

        later = step(step(state))
        assert later.pc == state.pc
        assert later.V[1] == 0
        assert int(later.fault) == Fault.STACK_UNDERFLOW

    def test_step_is_jittable(self, fresh_state):
        state = load_words(fresh_state, [0x6005, 0x7003])
        jit_step = jax.jit(step)
        state = jit_step(jit_step(state))
        assert state.V[0] == 8


class TestTimers:
    """Test the 60Hz timer tick."""

    def test_tick_decrements(self, fresh_state):
        state = fresh_state.replace(
            delay_timer=jnp.asarray(5, dtype=jnp.uint8),
            sound_timer=jnp.asarray(2, dtype=jnp.uint8),
        )
        state = tick_timers(state)
        assert state.delay_timer == 4
        assert state.sound_timer == 1

    def test_tick_stops_at_zero(self, fresh_state):
        state = fresh_state.replace(delay_timer=jnp.asarray(1, dtype=jnp.uint8))
        state = tick_timers(state)
        assert state.delay_timer == 0
        state = tick_timers(state)
        assert state.delay_timer == 0
        assert state.sound_timer == 0

    def test_step_does_not_tick(self, fresh_state):
        state = load_words(fresh_state, [0x600A, 0xF015, 0x6000])
        state = step(step(step(state)))
        assert state.delay_timer == 10


class TestRunners:
    """Test the jitted multi-step runners."""

    def test_run_steps(self, fresh_state):
        state = load_words(fresh_state, [0x6005, 0x7003, 0x1204])  # Loop on last instruction
        state = run_steps(state, 10)
        assert state.V[0] == 8
        assert state.pc == 0x204

    def test_run_steps_stops_on_fault(self, fresh_state):
        state = load_words(fresh_state, [0x6001, 0x00EE, 0x6102])
        state = run_steps(state, 5)
        assert int(state.fault) == Fault.STACK_UNDERFLOW
        assert state.pc == PROGRAM_START + 2
        assert state.V[1] == 0

    def test_run_frame_ticks_once(self, fresh_state):
        state = load_words(fresh_state, [0x600A, 0xF015, 0x1204])
        state = run_frame(state)
        assert state.delay_timer == 9

    def test_run_frame_step_count(self, fresh_state):
        words = [0x7001] * (INSTRUCTIONS_PER_TICK + 5)
        state = run_frame(load_words(fresh_state, words))
        assert state.V[0] == INSTRUCTIONS_PER_TICK

    def test_run_frames_with_progress(self, fresh_state):
        state = load_words(fresh_state, [0x60FF, 0xF015, 0x1204])
        state = run_frames_with_progress(state, 3, desc="test")
        assert state.delay_timer == 0xFF - 3
