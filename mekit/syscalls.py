"""System call stack frames and the handler table they are dispatched to."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

Handler = Callable[[int, "StackFrame"], object]


@dataclass
class StackFrame:
    """Registers saved on entry to a system call; ``syscall_id`` selects the call."""

    rax: int = 0
    rbx: int = 0
    rcx: int = 0
    rdx: int = 0
    rsi: int = 0
    rdi: int = 0
    rbp: int = 0
    r8: int = 0
    r9: int = 0
    r10: int = 0
    r11: int = 0
    r12: int = 0
    r13: int = 0
    r14: int = 0
    r15: int = 0
    syscall_id: int = 0


class SyscallTable:
    """A fixed number of handler slots; every handler sees every call."""

    def __init__(self, size):
        if size < 0:
            raise ValueError(f"table size must not be negative, got {size}")
        self._handlers: list[Optional[Handler]] = [None] * size

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, index, handler):
        """Put ``handler`` in slot ``index``; None empties the slot."""
        if not 0 <= index < len(self._handlers):
            raise IndexError(f"syscall slot {index} out of range")
        if handler is not None and not callable(handler):
            raise TypeError("handler must be callable")
        self._handlers[index] = handler

    def dispatch(self, frame):
        """Call each registered handler, in slot order, with the call id and frame."""
        for handler in self._handlers:
            if handler is not None:
                handler(frame.syscall_id, frame)