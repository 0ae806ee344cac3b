"""CHIP-8 virtual machine package."""

from chipvm.state import AddressSpace, MachineState, MachineStatus, HaltReason, create_state, create_address_space
from chipvm.emulator import (
    execute, fetch, step, jit_step, run_n_instruction, tick_timers, key_pressed, key_released, reset, status,
    load_program, load_rom,
)
from chipvm.decode import DecodedInstruction, Operation, decode, mnemonic
from chipvm.display import draw_sprite
from chipvm.interpreter import Interpreter
from chipvm.random_source import jax_random_byte, constant_random_byte
from chipvm.constants import *
from chipvm.rendering import frame_to_rgb, frame_to_text, color_palette

__all__ = [
    "AddressSpace",
    "MachineState",
    "MachineStatus",
    "HaltReason",
    "create_state",
    "create_address_space",
    "fetch",
    "execute",
    "step",
    "jit_step",
    "run_n_instruction",
    "tick_timers",
    "key_pressed",
    "key_released",
    "reset",
    "status",
    "load_program",
    "load_rom",
    "DecodedInstruction",
    "Operation",
    "decode",
    "mnemonic",
    "draw_sprite",
    "Interpreter",
    "jax_random_byte",
    "constant_random_byte",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "frame_to_rgb",
    "frame_to_text",
    "color_palette",
]
