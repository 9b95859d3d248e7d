"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.errors import Fault
from chip8vm.stack import pop


def no_op(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """No operation (0NNN and every unassigned opcode)."""
    return state


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(display=jnp.zeros_like(state.display))


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine."""
    stack, address, underflow = pop(state.stack)
    state = state.replace(stack=stack, pc=jnp.where(underflow, state.pc, address))
    return state.with_fault(underflow, Fault.STACK_UNDERFLOW)
