"""CHIP-8 register-to-register operations (8XYN).

Each operation maps ``(vx, vy)`` to ``(result, flag)``. The result goes to
VX; the flag is written to VF only for add, subtract and shift, after the
result, so VF as destination ends up holding the flag.
"""

import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER

_NO_FLAG = jnp.zeros((), dtype=jnp.uint8)


def alu_set(vx, vy):
    """8XY0 - Set: VX = VY."""
    return vy, _NO_FLAG


def alu_or(vx, vy):
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, _NO_FLAG


def alu_and(vx, vy):
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, _NO_FLAG


def alu_xor(vx, vy):
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, _NO_FLAG


def alu_add(vx, vy):
    """8XY4 - Add: VX += VY, VF = carry."""
    total = vx.astype(jnp.uint16) + vy.astype(jnp.uint16)
    carry = (total > 0xFF).astype(jnp.uint8)
    return (total & 0xFF).astype(jnp.uint8), carry


def alu_sub_xy(vx, vy):
    """8XY5 - Subtract: VX -= VY, VF = no borrow."""
    no_borrow = (vx >= vy).astype(jnp.uint8)
    return (vx - vy).astype(jnp.uint8), no_borrow


def alu_shift_right(vx, vy):
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    return (vx >> 1).astype(jnp.uint8), (vx & 1).astype(jnp.uint8)


def alu_sub_yx(vx, vy):
    """8XY7 - Subtract swapped: VX = VY - VX, VF = no borrow."""
    no_borrow = (vy >= vx).astype(jnp.uint8)
    return (vy - vx).astype(jnp.uint8), no_borrow


def alu_shift_left(vx, vy):
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    return (vx << 1).astype(jnp.uint8), ((vx >> 7) & 1).astype(jnp.uint8)


def make_alu_instruction(operation, sets_flag: bool = False, shift: bool = False):
    """Factory for 8XYN handlers."""
    def alu_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        vx = state.V[instruction.x]
        vy = state.V[instruction.y]
        if shift and state.shift_uses_vy:
            vx = vy
        result, flag = operation(vx, vy)
        new_V = state.V.at[instruction.x].set(result)
        if sets_flag:
            new_V = new_V.at[FLAG_REGISTER].set(flag)
        return state.replace(V=new_V)
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add, sets_flag=True)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy, sets_flag=True)
execute_alu_shift_right = make_alu_instruction(alu_shift_right, sets_flag=True, shift=True)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx, sets_flag=True)
execute_alu_shift_left = make_alu_instruction(alu_shift_left, sets_flag=True, shift=True)
