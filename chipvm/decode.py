"""CHIP-8 instruction decoding."""

from enum import IntEnum

import numpy as np
import jax.numpy as jnp
from chex import dataclass


class Operation(IntEnum):
    """Documented CHIP-8 operations, in dispatch-table order."""
    HALT = 0
    CLEAR_SCREEN = 1
    RETURN = 2
    JUMP = 3
    CALL = 4
    SKIP_EQ_BYTE = 5
    SKIP_NE_BYTE = 6
    SKIP_EQ_REG = 7
    LOAD_BYTE = 8
    ADD_BYTE = 9
    LOAD_REG = 10
    OR = 11
    AND = 12
    XOR = 13
    ADD_REG = 14
    SUB_REG = 15
    SHIFT_RIGHT = 16
    SUBN_REG = 17
    SHIFT_LEFT = 18
    SKIP_NE_REG = 19
    LOAD_INDEX = 20
    JUMP_V0 = 21
    RANDOM = 22
    DRAW = 23
    SKIP_KEY_PRESSED = 24
    SKIP_KEY_NOT_PRESSED = 25
    LOAD_DELAY = 26
    LOAD_KEY = 27
    SET_DELAY = 28
    SET_SOUND = 29
    ADD_INDEX = 30
    LOAD_FONT = 31
    STORE_BCD = 32
    STORE_REGISTERS = 33
    LOAD_REGISTERS = 34
    UNKNOWN = 35


def _byte_table(entries: dict) -> jnp.ndarray:
    table = np.full(256, Operation.UNKNOWN, dtype=np.int32)
    for key, operation in entries.items():
        table[key] = operation
    return jnp.asarray(table)


# Families whose operation is selected by the high nibble alone. Entries for
# 0x0, 0x8, 0xE and 0xF are resolved through the secondary tables below.
_FAMILY_TABLE = jnp.asarray(np.array([
    Operation.UNKNOWN,
    Operation.JUMP,
    Operation.CALL,
    Operation.SKIP_EQ_BYTE,
    Operation.SKIP_NE_BYTE,
    Operation.SKIP_EQ_REG,
    Operation.LOAD_BYTE,
    Operation.ADD_BYTE,
    Operation.UNKNOWN,
    Operation.SKIP_NE_REG,
    Operation.LOAD_INDEX,
    Operation.JUMP_V0,
    Operation.RANDOM,
    Operation.DRAW,
    Operation.UNKNOWN,
    Operation.UNKNOWN,
], dtype=np.int32))

# The 0x0 family is matched on its low byte, so every 0N00 word halts.
_SYSTEM_TABLE = _byte_table({
    0x00: Operation.HALT,
    0xE0: Operation.CLEAR_SCREEN,
    0xEE: Operation.RETURN,
})

_ALU_TABLE = jnp.asarray(np.array([
    Operation.LOAD_REG,
    Operation.OR,
    Operation.AND,
    Operation.XOR,
    Operation.ADD_REG,
    Operation.SUB_REG,
    Operation.SHIFT_RIGHT,
    Operation.SUBN_REG,
    *([Operation.UNKNOWN] * 6),
    Operation.SHIFT_LEFT,
    Operation.UNKNOWN,
], dtype=np.int32))

_KEY_TABLE = _byte_table({
    0x9E: Operation.SKIP_KEY_PRESSED,
    0xA1: Operation.SKIP_KEY_NOT_PRESSED,
})

_MISC_TABLE = _byte_table({
    0x07: Operation.LOAD_DELAY,
    0x0A: Operation.LOAD_KEY,
    0x15: Operation.SET_DELAY,
    0x18: Operation.SET_SOUND,
    0x1E: Operation.ADD_INDEX,
    0x29: Operation.LOAD_FONT,
    0x33: Operation.STORE_BCD,
    0x55: Operation.STORE_REGISTERS,
    0x65: Operation.LOAD_REGISTERS,
})


@dataclass(frozen=True)
class DecodedInstruction:
    """Decoded CHIP-8 instruction with extracted operands."""
    raw: int
    operation: int  # Operation dispatch index
    x: int       # Second nibble (VX register)
    y: int       # Third nibble (VY register)
    n: int       # Fourth nibble (4-bit immediate)
    nn: int      # Last byte (8-bit immediate)
    nnn: int     # Last 12 bits (12-bit address)


def decode_operation(instruction: int) -> jnp.ndarray:
    """Select the operation for a 16-bit instruction word."""
    family = (instruction & 0xF000) >> 12
    nn = instruction & 0x00FF
    n = instruction & 0x000F
    return jnp.select(
        [family == 0x0, family == 0x8, family == 0xE, family == 0xF],
        [_SYSTEM_TABLE[nn], _ALU_TABLE[n], _KEY_TABLE[nn], _MISC_TABLE[nn]],
        _FAMILY_TABLE[family],
    )


def decode(instruction: int) -> DecodedInstruction:
    """Decode 16-bit instruction into components."""
    return DecodedInstruction(
        raw=instruction,
        operation=decode_operation(instruction),
        x=(instruction & 0x0F00) >> 8,
        y=(instruction & 0x00F0) >> 4,
        n=instruction & 0x000F,
        nn=instruction & 0x00FF,
        nnn=instruction & 0x0FFF
    )


_MNEMONICS = {
    Operation.HALT: "HLT",
    Operation.CLEAR_SCREEN: "CLS",
    Operation.RETURN: "RET",
    Operation.JUMP: "JP 0x{nnn:03X}",
    Operation.CALL: "CALL 0x{nnn:03X}",
    Operation.SKIP_EQ_BYTE: "SE V{x:X}, 0x{nn:02X}",
    Operation.SKIP_NE_BYTE: "SNE V{x:X}, 0x{nn:02X}",
    Operation.SKIP_EQ_REG: "SE V{x:X}, V{y:X}",
    Operation.LOAD_BYTE: "LD V{x:X}, 0x{nn:02X}",
    Operation.ADD_BYTE: "ADD V{x:X}, 0x{nn:02X}",
    Operation.LOAD_REG: "LD V{x:X}, V{y:X}",
    Operation.OR: "OR V{x:X}, V{y:X}",
    Operation.AND: "AND V{x:X}, V{y:X}",
    Operation.XOR: "XOR V{x:X}, V{y:X}",
    Operation.ADD_REG: "ADD V{x:X}, V{y:X}",
    Operation.SUB_REG: "SUB V{x:X}, V{y:X}",
    Operation.SHIFT_RIGHT: "SHR V{x:X}",
    Operation.SUBN_REG: "SUBN V{x:X}, V{y:X}",
    Operation.SHIFT_LEFT: "SHL V{x:X}",
    Operation.SKIP_NE_REG: "SNE V{x:X}, V{y:X}",
    Operation.LOAD_INDEX: "LD I, 0x{nnn:03X}",
    Operation.JUMP_V0: "JP V0, 0x{nnn:03X}",
    Operation.RANDOM: "RND V{x:X}, 0x{nn:02X}",
    Operation.DRAW: "DRW V{x:X}, V{y:X}, {n}",
    Operation.SKIP_KEY_PRESSED: "SKP V{x:X}",
    Operation.SKIP_KEY_NOT_PRESSED: "SKNP V{x:X}",
    Operation.LOAD_DELAY: "LD V{x:X}, DT",
    Operation.LOAD_KEY: "LD V{x:X}, K",
    Operation.SET_DELAY: "LD DT, V{x:X}",
    Operation.SET_SOUND: "LD ST, V{x:X}",
    Operation.ADD_INDEX: "ADD I, V{x:X}",
    Operation.LOAD_FONT: "LD F, V{x:X}",
    Operation.STORE_BCD: "LD B, V{x:X}",
    Operation.STORE_REGISTERS: "LD [I], VF",
    Operation.LOAD_REGISTERS: "LD VF, [I]",
    Operation.UNKNOWN: "??? 0x{raw:04X}",
}


def mnemonic(instruction: int) -> str:
    """Human-readable form of one instruction word, for logs and dumps."""
    instruction = int(instruction) & 0xFFFF
    decoded = decode(instruction)
    operation = Operation(int(decoded.operation))
    return _MNEMONICS[operation].format(
        raw=decoded.raw, x=decoded.x, y=decoded.y, n=decoded.n, nn=decoded.nn, nnn=decoded.nnn
    )
