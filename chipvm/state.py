"""CHIP-8 machine state structures."""

from dataclasses import field
from enum import IntEnum

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode

from chipvm.constants import (
    PROGRAM_START, FONT_START, FONT_DATA, MEMORY_SIZE, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NO_KEY,
)


class HaltReason(IntEnum):
    """Why the machine stopped executing."""
    NONE = 0
    HALT_INSTRUCTION = 1
    UNKNOWN_OPCODE = 2
    STACK_OVERFLOW = 3
    STACK_UNDERFLOW = 4


class MachineStatus(IntEnum):
    RUNNING = 0
    AWAITING_KEY = 1
    HALTED = 2


class StackState(PyTreeNode):
    """Return-address stack for subroutine calls."""
    data: jnp.ndarray = field(default_factory=lambda: jnp.zeros(STACK_SIZE, dtype=jnp.uint16))
    pointer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))


class AddressSpace(PyTreeNode):
    """Memory, registers, stack, program counter, timers and key state.

    ``keys`` is a 16-bit mask: bit ``k`` set means key ``k`` is held down.
    """
    memory: jnp.ndarray = field(default_factory=lambda: jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8))
    V: jnp.ndarray = field(default_factory=lambda: jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8))
    I: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))
    pc: jnp.ndarray = field(default_factory=lambda: jnp.astype(PROGRAM_START, jnp.uint16))
    stack: StackState = StackState()
    delay_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    sound_timer: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    keys: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint16))


class MachineState(PyTreeNode):
    """Complete VM state: address space, framebuffer and execution status."""
    rng: jax.Array
    space: AddressSpace = AddressSpace()
    display: jnp.ndarray = field(default_factory=lambda: jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_))
    halted: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.bool_))
    halt_reason: jnp.ndarray = field(default_factory=lambda: jnp.zeros((), dtype=jnp.uint8))
    awaiting_key: jnp.ndarray = field(default_factory=lambda: jnp.full((), NO_KEY, dtype=jnp.int32))

    # Shorthands used throughout the instruction handlers and tests.
    @property
    def V(self) -> jnp.ndarray:
        return self.space.V

    @property
    def I(self) -> jnp.ndarray:
        return self.space.I

    @property
    def pc(self) -> jnp.ndarray:
        return self.space.pc

    @property
    def memory(self) -> jnp.ndarray:
        return self.space.memory

    @property
    def stack(self) -> StackState:
        return self.space.stack

    def with_space(self, **changes) -> "MachineState":
        """Return a copy with fields of the address space replaced."""
        return self.replace(space=self.space.replace(**changes))


def create_address_space() -> AddressSpace:
    """Create an address space with the font set loaded at ``FONT_START``."""
    space = AddressSpace()
    return space.replace(memory=space.memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA))


def create_state(rng: jax.Array = jax.random.PRNGKey(0)) -> MachineState:
    """Create initial machine state with font data loaded."""
    return MachineState(rng=rng, space=create_address_space())
