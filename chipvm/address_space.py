"""Controlled reads and writes on the CHIP-8 address space.

Every function is pure: it takes an :class:`AddressSpace` and returns a new
one. Addresses are masked to 12 bits and values to 8 bits, so memory can never
be accessed out of bounds.
"""

from typing import Sequence

import jax.numpy as jnp

from chipvm import stack
from chipvm.constants import ADDRESS_MASK, MEMORY_SIZE, PROGRAM_START, NUM_KEYS
from chipvm.state import AddressSpace, StackState, create_address_space


def read_byte(space: AddressSpace, address) -> jnp.ndarray:
    return space.memory[address & ADDRESS_MASK]


def write_byte(space: AddressSpace, address, value) -> AddressSpace:
    value = jnp.astype(jnp.asarray(value) & 0xFF, jnp.uint8)
    return space.replace(memory=space.memory.at[address & ADDRESS_MASK].set(value))


def read_block(space: AddressSpace, address, length: int) -> jnp.ndarray:
    """Read ``length`` bytes starting at ``address``, wrapping at the end of memory."""
    return space.memory[(address + jnp.arange(length)) & ADDRESS_MASK]


def write_block(space: AddressSpace, address, values: jnp.ndarray) -> AddressSpace:
    """Write ``values`` starting at ``address``, wrapping at the end of memory."""
    values = jnp.astype(values, jnp.uint8)
    indices = (address + jnp.arange(values.shape[0])) & ADDRESS_MASK
    return space.replace(memory=space.memory.at[indices].set(values))


def read_register(space: AddressSpace, register) -> jnp.ndarray:
    return space.V[register & 0xF]


def write_register(space: AddressSpace, register, value) -> AddressSpace:
    value = jnp.astype(jnp.asarray(value) & 0xFF, jnp.uint8)
    return space.replace(V=space.V.at[register & 0xF].set(value))


def push_return(space: AddressSpace, address) -> AddressSpace:
    return space.replace(stack=stack.push(space.stack, address))


def pop_return(space: AddressSpace) -> tuple[AddressSpace, jnp.ndarray]:
    new_stack, address = stack.pop(space.stack)
    return space.replace(stack=new_stack), address


def stack_full(space: AddressSpace) -> jnp.ndarray:
    return stack.is_full(space.stack)


def stack_empty(space: AddressSpace) -> jnp.ndarray:
    return stack.is_empty(space.stack)


def tick_timers(space: AddressSpace) -> AddressSpace:
    """Decrement delay and sound timers by one, floored at zero."""
    return space.replace(
        delay_timer=jnp.where(space.delay_timer > 0, space.delay_timer - 1, 0).astype(jnp.uint8),
        sound_timer=jnp.where(space.sound_timer > 0, space.sound_timer - 1, 0).astype(jnp.uint8),
    )


def reset_address_space(space: AddressSpace) -> AddressSpace:
    """Restore registers, pc, index, stack, timers and keys. Memory is kept."""
    fresh = create_address_space()
    return fresh.replace(memory=space.memory)


def load_program(space: AddressSpace, program: Sequence[int] | bytes) -> AddressSpace:
    """Write program bytes into memory starting at ``PROGRAM_START``."""
    program = bytes(program)
    if len(program) > MEMORY_SIZE - PROGRAM_START:
        raise ValueError(
            f"Program of {len(program)} bytes does not fit in "
            f"{MEMORY_SIZE - PROGRAM_START} bytes of program memory"
        )
    if not program:
        return space
    data = jnp.array(list(program), dtype=jnp.uint8)
    return space.replace(memory=space.memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(data))


def press_key(space: AddressSpace, key) -> AddressSpace:
    bit = jnp.left_shift(jnp.uint16(1), jnp.astype(key & 0xF, jnp.uint16))
    return space.replace(keys=space.keys | bit)


def release_key(space: AddressSpace, key) -> AddressSpace:
    bit = jnp.left_shift(jnp.uint16(1), jnp.astype(key & 0xF, jnp.uint16))
    return space.replace(keys=space.keys & ~bit)


def is_key_down(space: AddressSpace, key) -> jnp.ndarray:
    shift = jnp.astype(key & 0xF, jnp.uint16)
    return (jnp.right_shift(space.keys, shift) & 1) == 1


def any_key_down(space: AddressSpace) -> jnp.ndarray:
    return space.keys != 0


def first_key_down(space: AddressSpace) -> jnp.ndarray:
    """Lowest index of a key currently held down (0 when none are)."""
    bits = (jnp.right_shift(space.keys, jnp.arange(NUM_KEYS, dtype=jnp.uint16)) & 1) == 1
    return jnp.argmax(bits)
