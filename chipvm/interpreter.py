"""Stateful CHIP-8 interpreter used by rendering/input shells.

The pure functions in :mod:`chipvm.emulator` transform immutable machine
states. :class:`Interpreter` owns one such state, swaps it on every call and
exposes side-effect-free accessors for rendering and debugging. It is not
internally synchronised; callers must serialise all calls.
"""

from typing import Optional, Sequence

import jax
import numpy as np
from tqdm import tqdm

from chipvm import emulator
from chipvm.constants import (
    DEFAULT_INSTRUCTION_FREQUENCY, DEFAULT_TIMER_FREQUENCY, MEMORY_SIZE, NUM_KEYS, NO_KEY,
)
from chipvm.decode import mnemonic
from chipvm.logging import MachineLogger
from chipvm.random_source import RandomByteFn, jax_random_byte
from chipvm.state import MachineState, MachineStatus, HaltReason, create_state


class Interpreter:
    """Single CHIP-8 virtual machine instance."""

    def __init__(
        self,
        seed: int = 0,
        random_byte: RandomByteFn = jax_random_byte,
        jit: bool = True,
        instruction_frequency: int = DEFAULT_INSTRUCTION_FREQUENCY,
        timer_frequency: int = DEFAULT_TIMER_FREQUENCY,
        logger: Optional[MachineLogger] = None,
        trace: bool = False,
    ):
        """Create a machine with the font loaded and everything else zeroed.

        Args:
            seed: Seed for the PRNG key consumed by the random instruction
            random_byte: Source of random bytes (see :mod:`chipvm.random_source`)
            jit: Compile the step function with ``jax.jit``
            instruction_frequency: Emulated instruction clock in Hz (typically 700)
            timer_frequency: Timer tick rate in Hz (typically 60)
            logger: Logger for diagnostics; a default :class:`MachineLogger` if None
            trace: Log every executed instruction at DEBUG level
        """
        if instruction_frequency <= 0 or timer_frequency <= 0:
            raise ValueError(
                f"Frequencies must be positive, got instruction_frequency={instruction_frequency} "
                f"and timer_frequency={timer_frequency}"
            )
        if instruction_frequency < timer_frequency:
            raise ValueError(
                f"instruction_frequency ({instruction_frequency}) must be at least "
                f"timer_frequency ({timer_frequency})"
            )

        self.random_byte = random_byte
        self.instruction_frequency = instruction_frequency
        self.timer_frequency = timer_frequency
        self.logger = logger if logger is not None else MachineLogger()
        self.trace = trace
        self._step_fn = emulator.jit_step if jit else emulator.step
        self._state = create_state(jax.random.PRNGKey(seed))

    @property
    def state(self) -> MachineState:
        """Current immutable machine state."""
        return self._state

    @property
    def instructions_per_frame(self) -> int:
        """Number of instructions executed between two timer ticks."""
        return self.instruction_frequency // self.timer_frequency

    # Program loading

    def load_program(self, program: Sequence[int] | bytes):
        """Write ``program`` into memory at 0x200."""
        self._state = emulator.load_program(self._state, program)
        self.logger.log_program_loaded(len(program))

    def load_rom(self, filename: str):
        """Read a ROM file and load it at 0x200."""
        with open(filename, 'rb') as f:
            rom_data = f.read()
        self._state = emulator.load_program(self._state, rom_data)
        self.logger.log_program_loaded(len(rom_data), filename)

    # Execution

    def step(self) -> MachineStatus:
        """Execute exactly one instruction and return the resulting status."""
        if bool(self._state.halted):
            return MachineStatus.HALTED

        pc = int(self._state.pc)
        if self.trace:
            instruction = int(emulator.fetch(self._state))
            self.logger.log_instruction(pc, instruction, mnemonic(instruction))

        self._state = self._step_fn(self._state, random_byte=self.random_byte)

        if bool(self._state.halted):
            self._report_halt()
            return MachineStatus.HALTED
        return self.status

    def run(self, n: int, progress: bool = False) -> int:
        """Step up to ``n`` times, stopping early if the machine halts.

        Returns:
            Number of steps actually taken
        """
        steps = range(n)
        if progress:
            steps = tqdm(steps, desc="chipvm", unit="instr")

        executed = 0
        for _ in steps:
            status = self.step()
            executed += 1
            if status == MachineStatus.HALTED:
                break
        return executed

    def run_frame(self) -> MachineStatus:
        """Run one timer period worth of instructions, then tick the timers."""
        self.run(self.instructions_per_frame)
        self.tick_timers()
        return self.status

    def tick_timers(self):
        self._state = emulator.tick_timers(self._state)

    def _report_halt(self):
        reason = HaltReason(int(self._state.halt_reason))
        instruction = int(emulator.fetch(self._state))
        self.logger.log_halt(int(self._state.pc), instruction, reason.name, mnemonic(instruction))

    # Input

    def key_pressed(self, key: int):
        """Mark ``key`` (0x0-0xF) as held; completes a pending key wait."""
        self._check_key(key)
        self._state = emulator.key_pressed(self._state, key)

    def key_released(self, key: int):
        self._check_key(key)
        self._state = emulator.key_released(self._state, key)

    @staticmethod
    def _check_key(key: int):
        if not 0 <= key < NUM_KEYS:
            raise ValueError(f"Key index must be in 0..{NUM_KEYS - 1}, got {key}")

    def reset(self):
        """Return to the just-constructed state. Loaded program bytes are kept."""
        self._state = emulator.reset(self._state)
        self.logger.log_reset()

    # Read accessors

    @property
    def registers(self) -> list[int]:
        return [int(v) for v in np.asarray(self._state.V)]

    @property
    def pc(self) -> int:
        return int(self._state.pc)

    @property
    def index(self) -> int:
        return int(self._state.I)

    @property
    def stack_pointer(self) -> int:
        return int(self._state.stack.pointer)

    @property
    def stack(self) -> list[int]:
        """Return addresses currently on the stack, oldest first."""
        data = np.asarray(self._state.stack.data)
        return [int(address) for address in data[:self.stack_pointer]]

    @property
    def delay_timer(self) -> int:
        return int(self._state.space.delay_timer)

    @property
    def sound_timer(self) -> int:
        return int(self._state.space.sound_timer)

    @property
    def key_state(self) -> int:
        """Bitmask of held keys; bit ``k`` is key ``k``."""
        return int(self._state.space.keys)

    @property
    def halted(self) -> bool:
        return bool(self._state.halted)

    @property
    def halt_reason(self) -> HaltReason:
        return HaltReason(int(self._state.halt_reason))

    @property
    def awaiting_key(self) -> Optional[int]:
        """Register waiting for a key press, or None."""
        register = int(self._state.awaiting_key)
        return None if register == NO_KEY else register

    @property
    def status(self) -> MachineStatus:
        return emulator.status(self._state)

    @property
    def frame(self) -> np.ndarray:
        """Copy of the framebuffer as a ``(64, 32)`` boolean array indexed ``[x, y]``."""
        return np.array(self._state.display, dtype=np.bool_)

    def read_memory(self, start: int, length: int) -> bytes:
        if start < 0 or length < 0 or start + length > MEMORY_SIZE:
            raise ValueError(f"Memory range 0x{start:X}+{length} is outside 0x000-0x{MEMORY_SIZE - 1:X}")
        return bytes(np.asarray(self._state.memory[start:start + length]).tolist())

    def dump_registers(self) -> str:
        """Format pc, stack pointer, index and V0-VF as a four-column table."""
        lines = [f"PC: 0x{self.pc:04X}\tSP: 0x{self.stack_pointer:02X}\tI: 0x{self.index:04X}"]
        registers = self.registers
        for row in range(4):
            cells = [f"V{row + 4 * col:X}: 0x{registers[row + 4 * col]:02X}" for col in range(4)]
            lines.append("\t".join(cells))
        return "\n".join(lines)

    def dump_memory(self, start: int, end: int, width: int = 16) -> str:
        """Hex dump of memory in ``[start, end)``, ``width`` bytes per line."""
        if width <= 0:
            raise ValueError(f"width must be positive, got {width}")
        data = self.read_memory(start, end - start)
        lines = []
        for offset in range(0, len(data), width):
            chunk = " ".join(f"{byte:02X}" for byte in data[offset:offset + width])
            lines.append(f"0x{start + offset:04X}: {chunk}")
        return "\n".join(lines)
