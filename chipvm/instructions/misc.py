"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.constants import FONT_START, GLYPH_SIZE, NUM_REGISTERS, NO_KEY
from chipvm.address_space import any_key_down, first_key_down, read_block, write_block


def execute_get_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX07 - Set VX to delay timer value."""
    return state.with_space(V=state.V.at[instruction.x].set(state.space.delay_timer))


def execute_set_delay_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX15 - Set delay timer to VX."""
    return state.with_space(delay_timer=state.V[instruction.x])


def execute_set_sound_timer(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX18 - Set sound timer to VX."""
    return state.with_space(sound_timer=state.V[instruction.x])


def execute_add_to_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX1E - Add VX to I register (16-bit wrapping, VF untouched)."""
    new_i = state.I + jnp.astype(state.V[instruction.x], jnp.uint16)
    return state.with_space(I=jnp.astype(new_i, jnp.uint16))


def execute_wait_for_key(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX0A - Wait for key press.

    With a key already down the lowest one is loaded at once. Otherwise the
    machine records which register is waiting and stalls on this instruction
    until a key press completes the load.
    """
    def key_pressed_action(state):
        pressed_key = jnp.astype(first_key_down(state.space), jnp.uint8)
        return state.replace(
            awaiting_key=jnp.full((), NO_KEY, dtype=jnp.int32)
        ).with_space(V=state.V.at[instruction.x].set(pressed_key))

    def wait_action(state):
        return state.replace(awaiting_key=jnp.astype(instruction.x, jnp.int32))

    return jax.lax.cond(any_key_down(state.space), key_pressed_action, wait_action, state)


def execute_font_character(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX29 - Set I to location of sprite for digit VX."""
    font_address = FONT_START + jnp.astype(state.V[instruction.x], jnp.uint16) * GLYPH_SIZE
    return state.with_space(I=jnp.astype(font_address, jnp.uint16))


def execute_bcd_conversion(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    value = state.V[instruction.x]

    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    return state.replace(space=write_block(state.space, state.I, digits))


def execute_store_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX55 - Store V0 through VF in memory starting at I. I is unchanged."""
    return state.replace(space=write_block(state.space, state.I, state.V))


def execute_load_registers(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """FX65 - Load V0 through VF from memory starting at I. I is unchanged."""
    return state.with_space(V=read_block(state.space, state.I, NUM_REGISTERS))
