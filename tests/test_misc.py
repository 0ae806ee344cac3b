"""Tests for miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
import pytest
from chipvm import execute, key_pressed, key_released, FONT_DATA, NO_KEY
from chipvm.address_space import press_key
from conftest import set_registers


class TestTimers:
    """Test timer-related instructions."""

    def test_misc_timer_instructions(self, fresh_state):
        """Test timer set and get operations."""
        state = fresh_state

        # Test FX15: Set delay timer
        state = execute(state, 0x6030)  # V0 = 48
        state = execute(state, 0xF015)  # Set delay timer to V0
        assert state.space.delay_timer == 48

        # Test FX18: Set sound timer
        state = execute(state, 0x6120)  # V1 = 32
        state = execute(state, 0xF118)  # Set sound timer to V1
        assert state.space.sound_timer == 32

        # Test FX07: Get delay timer
        state = execute(state, 0xF207)  # V2 = delay timer
        assert state.V[2] == 48


class TestIndexArithmetic:

    def test_add_to_index(self, fresh_state):
        """FX1E - I += VX."""
        state = set_registers(fresh_state, V3=0x10)
        state = execute(state, 0xA300)

        state = execute(state, 0xF31E)

        assert state.I == 0x310

    def test_add_to_index_leaves_vf(self, fresh_state):
        """FX1E - No flag is set even when I passes 0xFFF."""
        state = set_registers(fresh_state, V3=0x10, VF=0x00)
        state = execute(state, 0xAFFF)

        state = execute(state, 0xF31E)

        assert state.I == 0x100F
        assert state.V[15] == 0

    def test_add_to_index_wraps_16_bits(self, fresh_state):
        state = set_registers(fresh_state, V1=0x02)
        state = state.with_space(I=jnp.uint16(0xFFFF))

        state = execute(state, 0xF11E)

        assert state.I == 0x0001


class TestFont:

    @pytest.mark.parametrize("digit", range(16))
    def test_font_character_address(self, fresh_state, digit):
        """FX29 - I points at the 5-byte glyph for VX."""
        state = set_registers(fresh_state, V4=digit)

        state = execute(state, 0xF429)

        assert state.I == digit * 5
        glyph = state.memory[state.I:state.I + 5]
        assert jnp.array_equal(glyph, FONT_DATA[digit * 5:digit * 5 + 5])


class TestBCD:
    """Test BCD conversion."""

    def test_misc_bcd_conversion(self, fresh_state):
        """Test BCD conversion with 156."""
        state = fresh_state

        state = execute(state, 0x609C)  # V0 = 156
        state = execute(state, 0xA300)  # I = 0x300
        state = execute(state, 0xF033)  # BCD conversion

        assert state.memory[0x300] == 1  # Hundreds
        assert state.memory[0x301] == 5  # Tens
        assert state.memory[0x302] == 6  # Ones
        assert state.I == 0x300

    @pytest.mark.parametrize("value,digits", [(0, (0, 0, 0)), (7, (0, 0, 7)), (42, (0, 4, 2)), (255, (2, 5, 5))])
    def test_bcd_edge_cases(self, fresh_state, value, digits):
        state = set_registers(fresh_state, V0=value)
        state = execute(state, 0xA300)

        state = execute(state, 0xF033)

        assert tuple(int(d) for d in state.memory[0x300:0x303]) == digits


class TestRegisterBlocks:

    def test_store_registers(self, fresh_state):
        """FX55 - All of V0..VF are written; I is unchanged."""
        values = jnp.arange(16, dtype=jnp.uint8) * 3
        state = fresh_state.with_space(V=values)
        state = execute(state, 0xA400)

        state = execute(state, 0xF055)

        assert jnp.array_equal(state.memory[0x400:0x410], values)
        assert state.I == 0x400

    def test_load_registers(self, fresh_state):
        """FX65 - All of V0..VF are read; I is unchanged."""
        values = jnp.arange(16, dtype=jnp.uint8) + 0x40
        state = fresh_state.with_space(memory=fresh_state.memory.at[0x500:0x510].set(values))
        state = execute(state, 0xA500)

        state = execute(state, 0xF065)

        assert jnp.array_equal(state.V, values)
        assert state.I == 0x500

    def test_store_then_load_round_trip(self, fresh_state):
        values = jnp.array([9, 8, 7, 6, 5, 4, 3, 2, 1, 0, 11, 12, 13, 14, 15, 16], dtype=jnp.uint8)
        state = fresh_state.with_space(V=values)
        state = execute(state, 0xA600)
        state = execute(state, 0xF055)
        state = state.with_space(V=jnp.zeros(16, dtype=jnp.uint8))

        state = execute(state, 0xF065)

        assert jnp.array_equal(state.V, values)

    def test_store_near_end_of_memory_wraps(self, fresh_state):
        """Block writes past 0xFFF wrap to the start of memory instead of escaping it."""
        values = jnp.full(16, 0xEE, dtype=jnp.uint8)
        state = fresh_state.with_space(V=values)
        state = execute(state, 0xAFF8)

        state = execute(state, 0xF055)

        assert jnp.all(state.memory[0xFF8:] == 0xEE)
        assert jnp.all(state.memory[:8] == 0xEE)


class TestWaitForKey:
    """FX0A - Wait for key press."""

    def test_waits_without_key(self, fresh_state):
        state = execute(fresh_state, 0xF30A)

        assert state.pc == fresh_state.pc
        assert state.awaiting_key == 3

    def test_repeated_execution_keeps_waiting(self, fresh_state):
        state = fresh_state
        for _ in range(5):
            state = execute(state, 0xF30A)
            assert state.pc == fresh_state.pc
            assert state.awaiting_key == 3

    def test_key_press_completes_wait(self, fresh_state):
        state = execute(fresh_state, 0xF30A)

        state = key_pressed(state, 7)

        assert state.V[3] == 7
        assert state.awaiting_key == NO_KEY
        assert state.pc == fresh_state.pc + 2

    def test_key_already_down_loads_immediately(self, fresh_state):
        state = fresh_state.replace(space=press_key(fresh_state.space, 0xB))

        state = execute(state, 0xF30A)

        assert state.V[3] == 0xB
        assert state.awaiting_key == NO_KEY
        assert state.pc == fresh_state.pc + 2

    def test_lowest_key_wins_when_several_down(self, fresh_state):
        space = press_key(press_key(fresh_state.space, 9), 4)
        state = fresh_state.replace(space=space)

        state = execute(state, 0xF10A)

        assert state.V[1] == 4

    def test_release_does_not_complete_wait(self, fresh_state):
        state = execute(fresh_state, 0xF30A)

        state = key_released(state, 7)

        assert state.awaiting_key == 3
        assert state.pc == fresh_state.pc

    def test_key_press_without_wait_only_sets_key(self, fresh_state):
        state = key_pressed(fresh_state, 5)

        assert state.space.keys == 1 << 5
        assert state.pc == fresh_state.pc
        assert jnp.all(state.V == 0)


class TestUndefinedMisc:

    @pytest.mark.parametrize("instruction", [0xF000, 0xF0FF, 0xF130, 0xF0A1])
    def test_undefined_fx_halts(self, fresh_state, instruction):
        state = execute(fresh_state, instruction)

        assert state.halted
        assert state.pc == fresh_state.pc
