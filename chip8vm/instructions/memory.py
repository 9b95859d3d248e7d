"""CHIP-8 register load and address register operations."""

import jax
import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction


def execute_set(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """6XNN - Set VX = NN."""
    value = jnp.asarray(instruction.nn, dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(value))


def execute_add(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """7XNN - Add NN to VX modulo 256. VF is left alone."""
    total = state.V[instruction.x].astype(jnp.uint16) + jnp.asarray(instruction.nn, dtype=jnp.uint16)
    return state.replace(V=state.V.at[instruction.x].set((total & 0xFF).astype(jnp.uint8)))


def execute_set_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """ANNN - Set I = NNN."""
    return state.replace(I=jnp.asarray(instruction.nnn, dtype=jnp.uint16))


def execute_random(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """CXNN - Set VX = random & NN."""
    key, subkey = jax.random.split(state.rng)
    random_value = jax.random.randint(subkey, shape=(), minval=0, maxval=256).astype(jnp.uint8)
    masked = random_value & jnp.asarray(instruction.nn, dtype=jnp.uint8)
    return state.replace(V=state.V.at[instruction.x].set(masked), rng=key)
