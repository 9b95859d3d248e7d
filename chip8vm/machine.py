"""Stateful facade over the pure CHIP-8 engine.

``Machine`` holds the current ``MachineState``, replaces it after every
call, and turns recorded faults into ``MachineError`` exceptions. Hosts that
want plain functions (or to jit/vmap whole runs) use ``chip8vm.emulator``
directly.
"""

import jax
import numpy as np

from chip8vm.constants import NO_KEY_WAIT
from chip8vm.emulator import step, tick_timers, run_steps, run_frame, load_program
from chip8vm.errors import error_for_fault
from chip8vm.keypad import set_key
from chip8vm.logging import ConsoleLogger
from chip8vm.state import MachineState, create_state

_jit_step = jax.jit(step)
_jit_tick = jax.jit(tick_timers)


class Machine:
    """A CHIP-8 machine driven by a host loop.

    Args:
        seed: Seed for the CXNN random number generator
        shift_uses_vy: Shift VY into VX for 8XY6/8XYE (COSMAC behavior)
        logger: Logger for host-side events; a ConsoleLogger by default
    """

    def __init__(self, seed: int = 0, shift_uses_vy: bool = False, logger: ConsoleLogger | None = None):
        self.seed = seed
        self.shift_uses_vy = shift_uses_vy
        self.logger = logger or ConsoleLogger(name="chip8vm")
        self._program = b""
        self.state = self._fresh_state()

    def _fresh_state(self) -> MachineState:
        return create_state(jax.random.PRNGKey(self.seed), shift_uses_vy=self.shift_uses_vy)

    def load(self, program: bytes) -> None:
        """Load a program image at 0x200."""
        self.state = load_program(self.state, program)
        self._program = bytes(program)
        self.logger.info(f"Loaded program ({len(program)} bytes)")

    def load_rom(self, filename: str) -> None:
        """Load a program image from a ROM file."""
        with open(filename, "rb") as f:
            program = f.read()
        self.load(program)
        self.logger.info(f"ROM: {filename}")

    def reset(self) -> None:
        """Return to power-on state, reloading the last program."""
        self.state = self._fresh_state()
        if self._program:
            self.state = load_program(self.state, self._program)
        self.logger.info("Machine reset")

    def _commit(self, state: MachineState) -> None:
        self.state = state
        error = error_for_fault(state.fault, int(state.pc))
        if error is not None:
            self.logger.error(f"{type(error).__name__}: {error}")
            raise error

    def step(self) -> None:
        """Run one CPU cycle, raising the MachineError of a failed step."""
        self._commit(_jit_step(self.state))

    def run(self, n: int) -> None:
        """Run ``n`` CPU cycles. Stops on the first fault and raises it."""
        self._commit(run_steps(self.state, n))

    def tick(self) -> None:
        """Apply one 60Hz timer tick."""
        self.state = _jit_tick(self.state)

    def run_frame(self) -> None:
        """Run one 60Hz frame of CPU cycles followed by a timer tick."""
        self._commit(run_frame(self.state))

    def press_key(self, key: int) -> None:
        self.state = set_key(self.state, key, True)

    def release_key(self, key: int) -> None:
        self.state = set_key(self.state, key, False)

    @property
    def display(self) -> np.ndarray:
        """Read-only (32, 64) boolean frame buffer."""
        frame = np.array(self.state.display, dtype=np.bool_)
        frame.setflags(write=False)
        return frame

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def delay_timer(self) -> int:
        return int(self.state.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self.state.sound_timer)

    @property
    def sound_active(self) -> bool:
        """True while the sound timer is running and a tone should play."""
        return self.sound_timer > 0

    @property
    def waiting_for_key(self) -> bool:
        """True while an FX0A instruction is waiting for a key press."""
        return int(self.state.awaiting_key) != NO_KEY_WAIT
