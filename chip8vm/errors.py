"""Machine faults and the exceptions they surface as."""

import enum


class Fault(enum.IntEnum):
    """Fault codes recorded in ``MachineState.fault`` by a failing step."""
    NONE = 0
    STACK_OVERFLOW = 1
    STACK_UNDERFLOW = 2
    OUT_OF_BOUNDS = 3


class MachineError(Exception):
    """Base error for faults raised out of the interpreter core."""

    fault = Fault.NONE

    def __init__(self, message: str, pc: int | None = None):
        super().__init__(message)
        self.pc = pc


class StackOverflowError(MachineError):
    """Raised when a call is made with all 16 stack slots in use."""

    fault = Fault.STACK_OVERFLOW


class StackUnderflowError(MachineError):
    """Raised when a return is made with an empty stack."""

    fault = Fault.STACK_UNDERFLOW


class OutOfBoundsAccessError(MachineError):
    """Raised when an instruction reads or writes outside memory."""

    fault = Fault.OUT_OF_BOUNDS


_ERRORS = {
    Fault.STACK_OVERFLOW: (StackOverflowError, "call stack overflow"),
    Fault.STACK_UNDERFLOW: (StackUnderflowError, "return with empty call stack"),
    Fault.OUT_OF_BOUNDS: (OutOfBoundsAccessError, "memory access out of bounds"),
}


def error_for_fault(fault: int, pc: int | None = None) -> MachineError | None:
    """Build the exception matching a fault code, or None for Fault.NONE."""
    fault = Fault(int(fault))
    if fault == Fault.NONE:
        return None
    error_cls, message = _ERRORS[fault]
    if pc is not None:
        message = f"{message} at pc=0x{pc:03X}"
    return error_cls(message, pc=pc)


def raise_for_fault(state) -> None:
    """Raise the MachineError recorded in a state, if any."""
    error = error_for_fault(state.fault, int(state.pc))
    if error is not None:
        raise error
