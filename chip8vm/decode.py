"""CHIP-8 instruction fetching and decoding.

An instruction is two bytes read big-endian at the program counter and split
into four nibbles. The nibble helpers are plain bit arithmetic and work on
Python ints as well as JAX scalars.
"""

from chex import dataclass

import jax.numpy as jnp


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int     # Full 16-bit word
    family: int  # First nibble
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit count)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def split_byte(byte):
    """Split a byte into its (high, low) nibbles."""
    return (byte >> 4) & 0xF, byte & 0xF


def combine_two_nibbles(high, low):
    """Combine two nibbles into an 8-bit value."""
    return (high << 4) | low


def combine_three_nibbles(high, middle, low):
    """Combine three nibbles into a 12-bit address."""
    return (high << 8) | (middle << 4) | low


def read_nibbles(memory: jnp.ndarray, address) -> tuple:
    """Read the instruction at ``address`` as four nibbles.

    Only ``memory[address]`` and ``memory[address + 1]`` are touched; the
    caller is responsible for checking ``address + 1`` is in bounds.
    """
    high_byte = memory[address].astype(jnp.uint16)
    low_byte = memory[address + 1].astype(jnp.uint16)
    return (*split_byte(high_byte), *split_byte(low_byte))


def decode_nibbles(nibbles) -> DecodedInstruction:
    """Derive every operand of an instruction from its four nibbles."""
    family, x, y, n = nibbles
    return DecodedInstruction(
        raw=(family << 12) | combine_three_nibbles(x, y, n),
        family=family,
        x=x,
        y=y,
        n=n,
        nn=combine_two_nibbles(y, n),
        nnn=combine_three_nibbles(x, y, n),
    )


def decode(instruction) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    high, low = (instruction >> 8) & 0xFF, instruction & 0xFF
    return decode_nibbles((*split_byte(high), *split_byte(low)))
