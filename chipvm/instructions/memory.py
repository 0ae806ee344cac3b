"""CHIP-8 memory and register operations."""

import jax.numpy as jnp
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.random_source import RandomByteFn, jax_random_byte


def execute_set(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """6XNN - Set VX = NN."""
    return state.with_space(V=state.V.at[instruction.x].set(jnp.astype(instruction.nn, jnp.uint8)))


def execute_add(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """7XNN - Add NN to VX (wrapping, VF untouched)."""
    result = (jnp.astype(state.V[instruction.x], jnp.int32) + instruction.nn) & 0xFF
    return state.with_space(V=state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8)))


def execute_set_index(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """ANNN - Set I = NNN."""
    return state.with_space(I=jnp.astype(instruction.nnn, jnp.uint16))


def execute_random(
    state: MachineState,
    instruction: DecodedInstruction,
    random_byte: RandomByteFn = jax_random_byte,
) -> MachineState:
    """CXNN - Set VX = random & NN."""
    key, random_value = random_byte(state.rng)
    value = jnp.astype(random_value, jnp.uint8) & jnp.astype(instruction.nn, jnp.uint8)
    return state.replace(rng=key).with_space(V=state.V.at[instruction.x].set(value))
