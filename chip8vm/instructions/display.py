"""CHIP-8 sprite drawing (DXYN)."""

import jax.numpy as jnp
from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, MEMORY_SIZE, FLAG_REGISTER
from chip8vm.errors import Fault

SPRITE_WIDTH = 8

# Pre-computed coordinate grids, shaped like the display
rows, cols = jnp.meshgrid(jnp.arange(SCREEN_HEIGHT), jnp.arange(SCREEN_WIDTH), indexing='ij')


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - Draw sprite at (VX, VY) with height N.

    Sprite rows come from memory[I:I+N], one bit per pixel, MSB leftmost.
    Pixels are XORed onto the display, wrapping around both edges. VF is set
    to 1 when any lit pixel is turned off.
    """
    origin_x = state.V[instruction.x].astype(jnp.int32) % SCREEN_WIDTH
    origin_y = state.V[instruction.y].astype(jnp.int32) % SCREEN_HEIGHT
    height = jnp.asarray(instruction.n, dtype=jnp.int32)
    base = state.I.astype(jnp.int32)

    row_offset = (rows - origin_y) % SCREEN_HEIGHT
    col_offset = (cols - origin_x) % SCREEN_WIDTH
    in_sprite = (row_offset < height) & (col_offset < SPRITE_WIDTH)

    addresses = jnp.minimum(base + row_offset, MEMORY_SIZE - 1)
    sprite_bytes = state.memory[addresses]
    bit_shift = jnp.clip(SPRITE_WIDTH - 1 - col_offset, 0, SPRITE_WIDTH - 1)
    sprite = (((sprite_bytes >> bit_shift) & 1) == 1) & in_sprite

    collision = jnp.any(state.display & sprite)
    state = state.replace(
        display=state.display ^ sprite,
        V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8)),
    )
    return state.with_fault((height > 0) & (base + height > MEMORY_SIZE), Fault.OUT_OF_BOUNDS)
