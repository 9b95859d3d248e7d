"""CHIP-8 machine state structures."""

import jax
import jax.numpy as jnp
from flax.struct import dataclass, PyTreeNode, field

from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS, NO_KEY_WAIT,
)
from chip8vm.errors import Fault


@dataclass(frozen=True)
class StackState:
    """Call stack: return addresses plus the index of the next free slot."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.int32))


class MachineState(PyTreeNode):
    """Complete CHIP-8 machine state.

    The display is indexed ``[row, column]``. ``V[0xF]`` doubles as the
    carry/borrow/collision flag. ``awaiting_key`` holds the destination
    register of a pending FX0A, or ``NO_KEY_WAIT``. ``fault`` holds a
    ``Fault`` code once a step has failed.
    """
    rng: jax.Array
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.asarray(PROGRAM_START, dtype=jnp.uint16))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_HEIGHT, SCREEN_WIDTH), dtype=jnp.bool_))
    keypad: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_KEYS, dtype=jnp.bool_))
    awaiting_key: jnp.ndarray = field(default_factory=lambda: jnp.asarray(NO_KEY_WAIT, dtype=jnp.int32))
    fault: jnp.ndarray = field(default_factory=lambda: jnp.asarray(int(Fault.NONE), dtype=jnp.uint8))
    shift_uses_vy: bool = field(pytree_node=False, default=False)

    def with_fault(self, condition, fault: Fault) -> "MachineState":
        """Record ``fault`` when ``condition`` holds, keeping any earlier fault."""
        code = jnp.where(
            (self.fault == int(Fault.NONE)) & condition,
            jnp.asarray(int(fault), dtype=jnp.uint8),
            self.fault,
        )
        return self.replace(fault=code)


def create_state(rng: jax.Array = jax.random.PRNGKey(0), shift_uses_vy: bool = False) -> MachineState:
    """Create initial machine state with font data loaded."""
    state = MachineState(rng, shift_uses_vy=shift_uses_vy)
    return state.replace(memory=state.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))
