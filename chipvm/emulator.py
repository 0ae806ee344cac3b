"""Main CHIP-8 emulator execution engine."""

from functools import lru_cache, partial
from typing import Sequence

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import MachineState, MachineStatus
from chipvm.decode import decode, Operation
from chipvm.constants import ADDRESS_MASK, NO_KEY
from chipvm import address_space
from chipvm.display import create_frame
from chipvm.random_source import RandomByteFn, jax_random_byte
from chipvm.instructions.system import (
    execute_halt, execute_clear_screen, execute_return, execute_unknown
)
from chipvm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chipvm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chipvm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chipvm.instructions.display import execute_display
from chipvm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer,
    execute_set_sound_timer, execute_add_to_index, execute_font_character,
    execute_bcd_conversion, execute_store_registers, execute_load_registers
)


@lru_cache(maxsize=None)
def _handlers(random_byte: RandomByteFn) -> tuple:
    """Dispatch table indexed by :class:`Operation`."""
    handlers = {
        Operation.HALT: execute_halt,
        Operation.CLEAR_SCREEN: execute_clear_screen,
        Operation.RETURN: execute_return,
        Operation.JUMP: execute_jump,
        Operation.CALL: execute_call,
        Operation.SKIP_EQ_BYTE: execute_skip_if_equal_immediate,
        Operation.SKIP_NE_BYTE: execute_skip_if_not_equal_immediate,
        Operation.SKIP_EQ_REG: execute_skip_if_equal_register,
        Operation.LOAD_BYTE: execute_set,
        Operation.ADD_BYTE: execute_add,
        Operation.LOAD_REG: execute_alu_set,
        Operation.OR: execute_alu_or,
        Operation.AND: execute_alu_and,
        Operation.XOR: execute_alu_xor,
        Operation.ADD_REG: execute_alu_add,
        Operation.SUB_REG: execute_alu_sub_xy,
        Operation.SHIFT_RIGHT: execute_alu_shift_right,
        Operation.SUBN_REG: execute_alu_sub_yx,
        Operation.SHIFT_LEFT: execute_alu_shift_left,
        Operation.SKIP_NE_REG: execute_skip_if_not_equal_register,
        Operation.LOAD_INDEX: execute_set_index,
        Operation.JUMP_V0: execute_jump_with_offset,
        Operation.RANDOM: partial(execute_random, random_byte=random_byte),
        Operation.DRAW: execute_display,
        Operation.SKIP_KEY_PRESSED: execute_skip_if_key_pressed,
        Operation.SKIP_KEY_NOT_PRESSED: execute_skip_if_key_not_pressed,
        Operation.LOAD_DELAY: execute_get_delay_timer,
        Operation.LOAD_KEY: execute_wait_for_key,
        Operation.SET_DELAY: execute_set_delay_timer,
        Operation.SET_SOUND: execute_set_sound_timer,
        Operation.ADD_INDEX: execute_add_to_index,
        Operation.LOAD_FONT: execute_font_character,
        Operation.STORE_BCD: execute_bcd_conversion,
        Operation.STORE_REGISTERS: execute_store_registers,
        Operation.LOAD_REGISTERS: execute_load_registers,
        Operation.UNKNOWN: execute_unknown,
    }
    return tuple(handlers[operation] for operation in Operation)


def execute(state: MachineState, instruction: int, random_byte: RandomByteFn = jax_random_byte) -> MachineState:
    """Execute single CHIP-8 instruction as if it were fetched from ``state.pc``.

    The pc is advanced past the instruction before dispatch, so jumps, calls
    and returns overwrite it and skips add 2 more. An instruction that halts
    the machine or leaves it waiting for a key keeps the pc on itself.
    """
    decoded_instruction = decode(instruction)
    next_pc = jnp.astype((state.pc + 2) & ADDRESS_MASK, jnp.uint16)

    new_state = jax.lax.switch(
        decoded_instruction.operation,
        _handlers(random_byte),
        state.with_space(pc=next_pc), decoded_instruction
    )

    stalled = new_state.halted | (new_state.awaiting_key != NO_KEY)
    return new_state.with_space(pc=jnp.where(stalled, state.pc, new_state.pc))


def fetch(state: MachineState) -> jnp.ndarray:
    """Fetch the instruction word at pc, most-significant byte first."""
    high = address_space.read_byte(state.space, state.pc)
    low = address_space.read_byte(state.space, state.pc + 1)
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def step(state: MachineState, random_byte: RandomByteFn = jax_random_byte) -> MachineState:
    """Fetch and execute one instruction. A halted machine is left untouched."""
    return jax.lax.cond(
        state.halted,
        lambda s: s,
        lambda s: execute(s, fetch(s), random_byte),
        state
    )


jit_step = jax.jit(step, static_argnames="random_byte")


@partial(jax.jit, static_argnames=("n", "random_byte"))
def run_n_instruction(state: MachineState, n: int, random_byte: RandomByteFn = jax_random_byte) -> MachineState:
    """Run ``n`` steps inside a single compiled loop."""
    return jax.lax.fori_loop(0, n, lambda _, s: step(s, random_byte), state)


def tick_timers(state: MachineState) -> MachineState:
    """Decrement delay and sound timers once (called at the timer rate)."""
    return state.replace(space=address_space.tick_timers(state.space))


def key_pressed(state: MachineState, key: int) -> MachineState:
    """Mark ``key`` as held, completing a pending key wait."""
    state = state.replace(space=address_space.press_key(state.space, key))

    def complete_wait(state):
        register = state.awaiting_key
        return state.replace(
            awaiting_key=jnp.full((), NO_KEY, dtype=jnp.int32)
        ).with_space(
            V=state.V.at[register].set(jnp.astype(key & 0xF, jnp.uint8)),
            pc=jnp.astype((state.pc + 2) & ADDRESS_MASK, jnp.uint16),
        )

    return jax.lax.cond(state.awaiting_key != NO_KEY, complete_wait, lambda s: s, state)


def key_released(state: MachineState, key: int) -> MachineState:
    return state.replace(space=address_space.release_key(state.space, key))


def reset(state: MachineState) -> MachineState:
    """Restore the just-constructed state, keeping memory and the PRNG key."""
    return MachineState(
        rng=state.rng,
        space=address_space.reset_address_space(state.space),
        display=create_frame(),
    )


def status(state: MachineState) -> MachineStatus:
    if bool(state.halted):
        return MachineStatus.HALTED
    if int(state.awaiting_key) != NO_KEY:
        return MachineStatus.AWAITING_KEY
    return MachineStatus.RUNNING


def load_program(state: MachineState, program: Sequence[int] | bytes) -> MachineState:
    """Load program bytes into CHIP-8 memory starting at 0x200."""
    return state.replace(space=address_space.load_program(state.space, program))


def load_rom(state: MachineState, filename: str) -> MachineState:
    """Load ROM data into CHIP-8 memory starting at 0x200."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    return load_program(state, rom_data)
