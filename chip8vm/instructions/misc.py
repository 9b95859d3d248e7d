"""CHIP-8 timer, keypad and memory transfer instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, GLYPH_HEIGHT, MEMORY_SIZE, NUM_REGISTERS, NO_KEY_WAIT
from chip8vm.errors import Fault


def first_pressed_key(keypad: jnp.ndarray) -> jnp.ndarray:
    """Lowest index among pressed keys, as a register value."""
    return jnp.argmax(keypad).astype(jnp.uint8)


def execute_get_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX07 - Set VX to delay timer value."""
    return state.replace(V=state.V.at[instruction.x].set(state.delay_timer))


def execute_wait_for_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX0A - Wait for key press.

    With a key already down the key index is stored at once. Otherwise the
    pc is put back on this instruction and ``awaiting_key`` records VX;
    ``step`` then polls the keypad until a key arrives.
    """
    def key_pressed_action(state):
        return state.replace(V=state.V.at[instruction.x].set(first_pressed_key(state.keypad)))

    def wait_action(state):
        return state.replace(
            pc=state.pc - 2,
            awaiting_key=jnp.asarray(instruction.x, dtype=jnp.int32),
        )

    return jax.lax.cond(jnp.any(state.keypad), key_pressed_action, wait_action, state)


def resume_key_wait(state: MachineState) -> MachineState:
    """Poll the keypad for a pending FX0A.

    No key: the state is returned untouched. A key: its index goes to the
    waiting register and the pc moves past the FX0A instruction.
    """
    def resolve(state):
        return state.replace(
            V=state.V.at[state.awaiting_key].set(first_pressed_key(state.keypad)),
            pc=state.pc + 2,
            awaiting_key=jnp.full_like(state.awaiting_key, NO_KEY_WAIT),
        )

    return jax.lax.cond(jnp.any(state.keypad), resolve, lambda s: s, state)


def execute_set_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX15 - Set delay timer to VX."""
    return state.replace(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX18 - Set sound timer to VX."""
    return state.replace(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX1E - Add VX to I, wrapping at 16 bits. VF is not touched."""
    return state.replace(I=state.I + state.V[instruction.x].astype(jnp.uint16))


def execute_font_character(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + state.V[instruction.x].astype(jnp.uint16) * GLYPH_HEIGHT
    return state.replace(I=font_address.astype(jnp.uint16))


def execute_bcd_conversion(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = jnp.arange(3) + state.I.astype(jnp.int32)
    state = state.replace(memory=state.memory.at[indices].set(digits, mode='drop'))
    return state.with_fault(indices[-1] >= MEMORY_SIZE, Fault.OUT_OF_BOUNDS)


def execute_store_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS)
    current_memory_values = state.memory[jnp.minimum(base_indices, MEMORY_SIZE - 1)]
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    new_memory = state.memory.at[base_indices].set(new_memory_values, mode='drop')

    state = state.replace(memory=new_memory)
    return state.with_fault(base_indices[0] + instruction.x >= MEMORY_SIZE, Fault.OUT_OF_BOUNDS)


def execute_load_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    base_indices = state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS)
    memory_values = state.memory[jnp.minimum(base_indices, MEMORY_SIZE - 1)]
    new_V = jnp.where(register_mask, memory_values, state.V)

    state = state.replace(V=new_V)
    return state.with_fault(base_indices[0] + instruction.x >= MEMORY_SIZE, Fault.OUT_OF_BOUNDS)
