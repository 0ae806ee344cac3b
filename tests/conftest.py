"""Test configuration and fixtures for CHIP-8 virtual machine tests."""

import pytest
import jax.numpy as jnp
from chipvm import create_state, Interpreter, constant_random_byte
from chipvm.logging import MachineLogger


@pytest.fixture
def fresh_state():
    """Provide a fresh machine state for each test."""
    return create_state()


@pytest.fixture
def quiet_logger():
    """Logger that only reports errors, so test output stays readable."""
    return MachineLogger(log_level="ERROR", use_colors=False, show_timestamps=False)


@pytest.fixture
def interpreter(quiet_logger):
    """Provide an interpreter with a fixed random source."""
    return Interpreter(random_byte=RANDOM_SOURCE, logger=quiet_logger)


# Shared so the compiled step function is reused across tests.
RANDOM_SOURCE = constant_random_byte(0xA5)


def set_registers(state, **registers):
    """Helper to set V registers by name, e.g. ``set_registers(state, V1=3)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.with_space(V=V)


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.with_space(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )
