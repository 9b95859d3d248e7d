"""Main CHIP-8 execution engine.

Every function here is pure: it takes a ``MachineState`` and returns the next
one. ``step`` and ``tick_timers`` are the two clocks a host drives; both can
be jitted.
"""

from functools import partial

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import decode, decode_nibbles, read_nibbles
from chip8vm.dispatch import dispatch
from chip8vm.constants import PROGRAM_START, MEMORY_SIZE, INSTRUCTIONS_PER_TICK
from chip8vm.errors import Fault, OutOfBoundsAccessError
from chip8vm.instructions.misc import resume_key_wait
from chip8vm.logging import scan_with_progress


def execute(state: MachineState, instruction: int) -> MachineState:
    """Execute single CHIP-8 instruction word.

    The pc is expected to already point past the instruction, as it does
    after ``fetch``.
    """
    return dispatch(state, decode(instruction))


def fetch(state: MachineState) -> tuple[MachineState, tuple]:
    """Fetch the instruction at pc as four nibbles and advance pc by two.

    A pc whose second byte lies past the end of memory records an
    out-of-bounds fault instead; pc stays put and the nibbles are zero.
    """
    pc = state.pc.astype(jnp.int32)
    in_bounds = pc + 1 < MEMORY_SIZE
    nibbles = read_nibbles(state.memory, jnp.where(in_bounds, pc, 0))
    nibbles = tuple(jnp.where(in_bounds, nibble, jnp.zeros_like(nibble)) for nibble in nibbles)
    state = state.replace(pc=jnp.where(in_bounds, state.pc + 2, state.pc).astype(state.pc.dtype))
    return state.with_fault(~in_bounds, Fault.OUT_OF_BOUNDS), nibbles


def _fetch_and_execute(state: MachineState) -> MachineState:
    fetched, nibbles = fetch(state)
    executed = jax.lax.cond(
        fetched.fault != int(Fault.NONE),
        lambda: fetched,
        lambda: dispatch(fetched, decode_nibbles(nibbles)),
    )
    # A failing step leaves the machine as it was, apart from the fault code
    return jax.lax.cond(
        executed.fault != int(Fault.NONE),
        lambda: state.replace(fault=executed.fault),
        lambda: executed,
    )


def _advance(state: MachineState) -> MachineState:
    return jax.lax.cond(state.awaiting_key >= 0, resume_key_wait, _fetch_and_execute, state)


def step(state: MachineState) -> MachineState:
    """Run one CPU cycle.

    A faulted machine does not move. A machine waiting on FX0A only polls
    the keypad. Otherwise one instruction is fetched and executed.
    """
    return jax.lax.cond(state.fault != int(Fault.NONE), lambda s: s, _advance, state)


def tick_timers(state: MachineState) -> MachineState:
    """Decrement the delay and sound timers once (60Hz tick), stopping at zero."""
    return state.replace(
        delay_timer=jnp.where(state.delay_timer > 0, state.delay_timer - 1, state.delay_timer),
        sound_timer=jnp.where(state.sound_timer > 0, state.sound_timer - 1, state.sound_timer),
    )


def run_instruction(state, _):
    state = step(state)
    return state, None


@partial(jax.jit, static_argnums=1)
def run_steps(state: MachineState, n: int) -> MachineState:
    """Run ``n`` CPU steps under a single jitted scan."""
    state, _ = jax.lax.scan(run_instruction, state, length=n)
    return state


def _frame(state: MachineState) -> MachineState:
    state = jax.lax.fori_loop(0, INSTRUCTIONS_PER_TICK, lambda _, s: step(s), state)
    return tick_timers(state)


@jax.jit
def run_frame(state: MachineState) -> MachineState:
    """Run one 60Hz frame: ``INSTRUCTIONS_PER_TICK`` CPU steps, then a timer tick."""
    return _frame(state)


def run_frames_with_progress(state: MachineState, n_frames: int, desc: str | None = None) -> MachineState:
    """Run ``n_frames`` frames in one jitted scan with a live tqdm bar."""
    @scan_with_progress(n_frames, desc=desc or f"Running ({n_frames:,} frames)")
    def frame(state, _):
        return _frame(state), None

    state, _ = jax.jit(lambda s: jax.lax.scan(frame, s, jnp.arange(n_frames)))(state)
    return state


def load_program(state: MachineState, program: bytes) -> MachineState:
    """Copy a program image into memory starting at 0x200."""
    end = PROGRAM_START + len(program)
    if end > MEMORY_SIZE:
        raise OutOfBoundsAccessError(
            f"program of {len(program)} bytes does not fit in memory "
            f"(max {MEMORY_SIZE - PROGRAM_START})"
        )
    program_array = jnp.array(list(program), dtype=jnp.uint8)
    return state.replace(memory=state.memory.at[PROGRAM_START:end].set(program_array))


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
