"""CHIP-8 virtual machine interpreter."""

from chip8vm.state import MachineState, StackState, create_state
from chip8vm.emulator import (
    execute, fetch, step, tick_timers, run_steps, run_frame, run_frames_with_progress,
    load_program, load_rom,
)
from chip8vm.decode import (
    DecodedInstruction, decode, decode_nibbles, read_nibbles, split_byte,
    combine_two_nibbles, combine_three_nibbles,
)
from chip8vm.dispatch import INSTRUCTION_TABLE, dispatch, match_rule
from chip8vm.errors import (
    Fault, MachineError, StackOverflowError, StackUnderflowError, OutOfBoundsAccessError,
    raise_for_fault,
)
from chip8vm.keypad import key_at, press_key, release_key, set_key, set_keypad
from chip8vm.constants import *
from chip8vm.machine import Machine
from chip8vm.rendering import display_to_rgb, create_color_scheme

__all__ = [
    "MachineState",
    "StackState",
    "create_state",
    "execute",
    "fetch",
    "step",
    "tick_timers",
    "run_steps",
    "run_frame",
    "run_frames_with_progress",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "decode",
    "decode_nibbles",
    "read_nibbles",
    "split_byte",
    "combine_two_nibbles",
    "combine_three_nibbles",
    "INSTRUCTION_TABLE",
    "dispatch",
    "match_rule",
    "Fault",
    "MachineError",
    "StackOverflowError",
    "StackUnderflowError",
    "OutOfBoundsAccessError",
    "raise_for_fault",
    "key_at",
    "press_key",
    "release_key",
    "set_key",
    "set_keypad",
    "Machine",
    "display_to_rgb",
    "create_color_scheme",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "MEMORY_SIZE",
    "STACK_SIZE",
    "FLAG_REGISTER",
    "KEYPAD_LAYOUT",
    "INSTRUCTIONS_PER_TICK",
]
