"""CHIP-8 system instructions (0x0xxx) and machine faults."""

import jax
import jax.numpy as jnp
from chipvm.state import MachineState, HaltReason
from chipvm.decode import DecodedInstruction
from chipvm.address_space import pop_return, stack_empty
from chipvm.display import clear


def halt(state: MachineState, reason: HaltReason) -> MachineState:
    """Stop the machine, recording why."""
    return state.replace(
        halted=jnp.ones((), dtype=jnp.bool_),
        halt_reason=jnp.astype(int(reason), jnp.uint8),
    )


def execute_halt(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """0000 - Halt execution."""
    return halt(state, HaltReason.HALT_INSTRUCTION)


def execute_unknown(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """Unrecognised opcode."""
    return halt(state, HaltReason.UNKNOWN_OPCODE)


def execute_clear_screen(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00E0 - Clear display."""
    return state.replace(display=clear(state.display))


def execute_return(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """00EE - Return from subroutine."""
    def do_return(state):
        space, address = pop_return(state.space)
        return state.replace(space=space.replace(pc=address))

    return jax.lax.cond(
        stack_empty(state.space),
        lambda s: halt(s, HaltReason.STACK_UNDERFLOW),
        do_return,
        state
    )
