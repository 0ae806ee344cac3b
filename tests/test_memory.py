"""Tests for memory and register operations (6XNN, 7XNN, ANNN, CXNN)."""

import jax
import jax.numpy as jnp
import pytest
from chipvm import execute, constant_random_byte, jax_random_byte
from conftest import set_registers


class TestRegisterLoads:

    def test_set_register(self, fresh_state):
        """6XNN - Set VX = NN."""
        state = execute(fresh_state, 0x6A42)

        assert state.V[0xA] == 0x42
        assert state.pc == fresh_state.pc + 2

    def test_add_immediate(self, fresh_state):
        """7XNN - Add NN to VX."""
        state = set_registers(fresh_state, V3=0x10)

        state = execute(state, 0x7305)

        assert state.V[3] == 0x15

    def test_add_immediate_wraps_without_flag(self, fresh_state):
        """7XNN - Overflow wraps and leaves VF untouched."""
        state = set_registers(fresh_state, V3=0xFF, VF=0x00)

        state = execute(state, 0x7302)

        assert state.V[3] == 0x01
        assert state.V[15] == 0

    def test_set_then_add_end_to_end(self, fresh_state):
        state = execute(fresh_state, 0x6002)
        state = execute(state, 0x7002)

        assert state.V[0] == 4
        assert state.pc == 0x204


class TestIndex:

    def test_set_index(self, fresh_state):
        """ANNN - Set I = NNN."""
        state = execute(fresh_state, 0xA123)

        assert state.I == 0x123

    def test_set_index_max(self, fresh_state):
        state = execute(fresh_state, 0xAFFF)

        assert state.I == 0xFFF


class TestRandom:
    """CXNN - Set VX = random & NN."""

    def test_random_masks_with_immediate(self, fresh_state):
        state = execute(fresh_state, 0xC10F, random_byte=constant_random_byte(0xAB))

        assert state.V[1] == 0x0B

    def test_random_zero_mask(self, fresh_state):
        state = execute(fresh_state, 0xC100, random_byte=constant_random_byte(0xFF))

        assert state.V[1] == 0

    def test_random_full_mask_returns_source_byte(self, fresh_state):
        state = execute(fresh_state, 0xC5FF, random_byte=constant_random_byte(0x5A))

        assert state.V[5] == 0x5A

    def test_default_source_advances_key(self, fresh_state):
        state = execute(fresh_state, 0xC1FF)

        assert not jnp.array_equal(state.rng, fresh_state.rng)

    def test_default_source_is_deterministic_per_key(self):
        _, first = jax_random_byte(jax.random.PRNGKey(7))
        _, second = jax_random_byte(jax.random.PRNGKey(7))

        assert first == second
        assert 0 <= int(first) <= 255

    @pytest.mark.parametrize("mask", [0x01, 0x0F, 0xF0])
    def test_default_source_respects_mask(self, fresh_state, mask):
        state = fresh_state
        for _ in range(8):
            state = execute(state, 0xC200 | mask)
            assert int(state.V[2]) & ~mask == 0
