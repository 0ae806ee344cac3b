"""Console logging for the CHIP-8 virtual machine.

A small levelled logger with optional colours and elapsed-time prefixes, plus
a machine-aware subclass that reports program loads, traced instructions and
halts.
"""

import time
import sys
from typing import Optional

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_RESET = "\033[0m"


class ConsoleLogger:
    """Console logger with levels, optional colours and elapsed-time stamps."""

    def __init__(
        self,
        name: str = "chipvm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.log_level = log_level.upper()
        if self.log_level not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")

        self.name = name
        self.stream = stream if stream is not None else sys.stdout
        # Colours only on a terminal
        self.use_colors = use_colors and hasattr(self.stream, "isatty") and self.stream.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def _format_message(self, level: str, message: str) -> str:
        timestamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{_COLORS[level]}{level_str}{_RESET}"
        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        """Write ``message`` if ``level`` is at or above the logger's level."""
        if LEVELS.index(level) >= LEVELS.index(self.log_level):
            print(self._format_message(level, message), file=self.stream, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)


class MachineLogger(ConsoleLogger):
    """Logger that knows how to report virtual machine events.

    Halts are also recorded in :attr:`halts`, newest last, keeping at most
    ``max_halts`` entries.
    """

    def __init__(self, name: str = "chipvm", max_halts: int = 64, **kwargs):
        super().__init__(name, **kwargs)
        if max_halts < 1:
            raise ValueError(f"max_halts must be positive, got {max_halts}")
        self.max_halts = max_halts
        self.halts = []

    def log_program_loaded(self, size: int, source: Optional[str] = None):
        origin = f" from {source}" if source else ""
        self.info(f"Loaded {size} byte program{origin} at 0x200")

    def log_instruction(self, pc: int, instruction: int, text: str):
        self.debug(f"0x{pc:03X}: {instruction:04X}  {text}")

    def log_halt(self, pc: int, instruction: int, reason: str, text: str):
        """Report a transition into the halted state.

        An explicit halt instruction is routine; every other reason is a
        malformed or unsupported program and is reported as an error.
        """
        self.halts.append({"pc": pc, "instruction": instruction, "reason": reason})
        del self.halts[:-self.max_halts]

        message = f"Halted at 0x{pc:03X} ({instruction:04X} {text}): {reason}"
        if reason == "HALT_INSTRUCTION":
            self.info(message)
        else:
            self.error(message)

    def log_reset(self):
        """Forget recorded halts; the machine has been returned to its initial state."""
        self.halts.clear()
        self.debug("Reset")
