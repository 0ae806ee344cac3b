"""CHIP-8 ALU operations (8xxx)."""

import jax.numpy as jnp
from chipvm.state import MachineState
from chipvm.decode import DecodedInstruction
from chipvm.constants import FLAG_REGISTER


def alu_set(vx: int, vy: int) -> tuple[int, None]:
    """8XY0 - Set: VX = VY."""
    return vy, None


def alu_or(vx: int, vy: int) -> tuple[int, None]:
    """8XY1 - Binary OR: VX |= VY."""
    return vx | vy, None


def alu_and(vx: int, vy: int) -> tuple[int, None]:
    """8XY2 - Binary AND: VX &= VY."""
    return vx & vy, None


def alu_xor(vx: int, vy: int) -> tuple[int, None]:
    """8XY3 - Logical XOR: VX ^= VY."""
    return vx ^ vy, None


def alu_add(vx: int, vy: int) -> tuple[int, int]:
    """8XY4 - Add: VX += VY, VF = carry."""
    result = jnp.astype(vx, jnp.int32) + vy
    carry = jnp.astype(result > 255, jnp.uint8)
    return result & 0xFF, carry


def alu_sub_xy(vx: int, vy: int) -> tuple[int, int]:
    """8XY5 - Subtract: VX -= VY, VF = 1 when there is no borrow."""
    not_borrow = jnp.astype(vx >= vy, jnp.uint8)
    result = (jnp.astype(vx, jnp.int32) - vy) & 0xFF
    return result, not_borrow


def alu_shift_right(vx: int, vy: int) -> tuple[int, int]:
    """8XY6 - Shift right: VX >>= 1, VF = bit shifted out."""
    shifted_bit = vx & 1
    result = vx >> 1
    return result, shifted_bit


def alu_sub_yx(vx: int, vy: int) -> tuple[int, int]:
    """8XY7 - Subtract: VX = VY - VX, VF = 1 when there is no borrow."""
    not_borrow = jnp.astype(vy >= vx, jnp.uint8)
    result = (jnp.astype(vy, jnp.int32) - vx) & 0xFF
    return result, not_borrow


def alu_shift_left(vx: int, vy: int) -> tuple[int, int]:
    """8XYE - Shift left: VX <<= 1, VF = bit shifted out."""
    shifted_bit = (vx & 0x80) >> 7
    result = (jnp.astype(vx, jnp.int32) << 1) & 0xFF
    return result, shifted_bit


def make_alu_instruction(alu_fn):
    """Wrap a pure ALU function as an instruction handler.

    The result is written to VX first and the flag (if any) to VF second, so
    when X is F the flag wins.
    """
    def alu_instruction(state: MachineState, instruction: DecodedInstruction) -> MachineState:
        result, flag = alu_fn(state.V[instruction.x], state.V[instruction.y])
        new_V = state.V.at[instruction.x].set(jnp.astype(result, jnp.uint8))
        if flag is not None:
            new_V = new_V.at[FLAG_REGISTER].set(jnp.astype(flag, jnp.uint8))
        return state.with_space(V=new_V)
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
