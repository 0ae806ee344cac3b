"""CHIP-8 display operations."""

import jax.numpy as jnp
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.constants import MAX_SPRITE_HEIGHT, MEMORY_SIZE, FLAG_REGISTER
from chipvm.address_space import read_block
from chipvm.display import draw_sprite


def execute_display(state: MachineState, instruction: DecodedInstruction) -> MachineState:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision.

    A sprite whose bytes would run past the end of memory is drawn empty:
    no pixel changes and VF is cleared.
    """
    in_bounds = jnp.astype(state.I, jnp.int32) + instruction.n <= MEMORY_SIZE

    # Fixed-size read keeps shapes static; rows past N are zeroed and draw nothing.
    rows = read_block(state.space, state.I, MAX_SPRITE_HEIGHT)
    rows = jnp.where((jnp.arange(MAX_SPRITE_HEIGHT) < instruction.n) & in_bounds, rows, 0).astype(jnp.uint8)

    display, collided = draw_sprite(state.display, state.V[instruction.x], state.V[instruction.y], rows)
    return state.replace(display=display).with_space(
        V=state.V.at[FLAG_REGISTER].set(jnp.astype(collided, jnp.uint8))
    )
