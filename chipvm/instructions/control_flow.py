"""CHIP-8 control flow instructions."""

import jax
import jax.lax
import jax.numpy as jnp
from chipvm.state import MachineState, HaltReason
from chipvm.decode import DecodedInstruction
from chipvm.constants import ADDRESS_MASK
from chipvm.address_space import push_return, stack_full, is_key_down
from chipvm.instructions.system import halt


def execute_jump(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """1NNN - Jump to address NNN."""
    return state.with_space(pc=jnp.astype(instruction.nnn, jnp.uint16))


def execute_call(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """2NNN - Call subroutine at NNN.

    The pc has already been advanced, so the pushed address is the
    instruction following the call.
    """
    def do_call(state):
        state = state.replace(space=push_return(state.space, state.pc))
        return execute_jump(state, instruction)

    return jax.lax.cond(
        stack_full(state.space),
        lambda s: halt(s, HaltReason.STACK_OVERFLOW),
        do_call,
        state
    )


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        condition = condition_fn(state, instruction)
        return jax.lax.cond(
            condition,
            lambda s: s.with_space(pc=jnp.astype((s.pc + 2) & ADDRESS_MASK, jnp.uint16)),
            lambda s: s,
            state
        )
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)

execute_skip_if_key_pressed = make_skip_instruction(
    lambda state, inst: is_key_down(state.space, state.V[inst.x])
)

execute_skip_if_key_not_pressed = make_skip_instruction(
    lambda state, inst: ~is_key_down(state.space, state.V[inst.x])
)


def execute_jump_with_offset(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """BNNN - Jump to address NNN + V0."""
    jump_address = (jnp.astype(instruction.nnn, jnp.uint16) + jnp.astype(state.V[0], jnp.uint16)) & ADDRESS_MASK
    return state.with_space(pc=jnp.astype(jump_address, jnp.uint16))
