"""CHIP-8 instruction dispatch.

Instructions are matched against a table of nibble patterns. A hex digit in a
pattern must match exactly; any other character is a wildcard. Rules are
tried most specific first, so ``00E0`` wins over ``0NNN``, and a trailing
catch-all turns every unassigned opcode into a no-op.
"""

from typing import Callable, NamedTuple

import jax
import jax.lax
import jax.numpy as jnp

from chip8vm.state import MachineState
from chip8vm.decode import DecodedInstruction
from chip8vm.instructions.system import no_op, execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed,
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left,
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers,
)

Handler = Callable[[MachineState, DecodedInstruction], MachineState]


class Rule(NamedTuple):
    """One dispatch table entry."""
    pattern: str
    mask: int
    expected: int
    handler: Handler


def compile_pattern(pattern: str, handler: Handler) -> Rule:
    """Turn a pattern like ``"8XY4"`` into a mask/expected-bits rule."""
    if len(pattern) != 4:
        raise ValueError(f"Instruction pattern must have four nibbles, got '{pattern}'")
    mask = expected = 0
    for char in pattern:
        mask <<= 4
        expected <<= 4
        if char in "0123456789ABCDEF":
            mask |= 0xF
            expected |= int(char, 16)
    return Rule(pattern, mask, expected, handler)


def build_table(patterns: dict[str, Handler]) -> tuple[Rule, ...]:
    """Order rules by number of fixed nibbles, most specific first."""
    rules = [compile_pattern(pattern, handler) for pattern, handler in patterns.items()]
    rules.sort(key=lambda rule: -bin(rule.mask).count("1"))
    return tuple(rules) + (compile_pattern("____", no_op),)


INSTRUCTION_TABLE = build_table({
    "00E0": execute_clear_screen,
    "00EE": execute_return,
    "0NNN": no_op,
    "1NNN": execute_jump,
    "2NNN": execute_call,
    "3XNN": execute_skip_if_equal_immediate,
    "4XNN": execute_skip_if_not_equal_immediate,
    "5XY0": execute_skip_if_equal_register,
    "6XNN": execute_set,
    "7XNN": execute_add,
    "8XY0": execute_alu_set,
    "8XY1": execute_alu_or,
    "8XY2": execute_alu_and,
    "8XY3": execute_alu_xor,
    "8XY4": execute_alu_add,
    "8XY5": execute_alu_sub_xy,
    "8XY6": execute_alu_shift_right,
    "8XY7": execute_alu_sub_yx,
    "8XYE": execute_alu_shift_left,
    "9XY0": execute_skip_if_not_equal_register,
    "ANNN": execute_set_index,
    "BNNN": execute_jump_with_offset,
    "CXNN": execute_random,
    "DXYN": execute_display,
    "EX9E": execute_skip_if_key_pressed,
    "EXA1": execute_skip_if_key_not_pressed,
    "FX07": execute_get_delay_timer,
    "FX0A": execute_wait_for_key,
    "FX15": execute_set_delay_timer,
    "FX18": execute_set_sound_timer,
    "FX1E": execute_add_to_index,
    "FX29": execute_font_character,
    "FX33": execute_bcd_conversion,
    "FX55": execute_store_registers,
    "FX65": execute_load_registers,
})

_MASKS = jnp.array([rule.mask for rule in INSTRUCTION_TABLE], dtype=jnp.uint16)
_EXPECTED = jnp.array([rule.expected for rule in INSTRUCTION_TABLE], dtype=jnp.uint16)
_HANDLERS = [rule.handler for rule in INSTRUCTION_TABLE]


def match_rule(instruction) -> jnp.ndarray:
    """Index of the first table rule matching a 16-bit instruction."""
    raw = jnp.asarray(instruction, dtype=jnp.uint16)
    return jnp.argmax((raw & _MASKS) == _EXPECTED)


def dispatch(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Run the single handler selected for a decoded instruction."""
    return jax.lax.switch(match_rule(instruction.raw), _HANDLERS, state, instruction)
