"""Tests for console and machine loggers."""

import io

import pytest
from chipvm.logging import ConsoleLogger, MachineLogger


def make_logger(cls=ConsoleLogger, level="INFO"):
    stream = io.StringIO()
    return cls(log_level=level, use_colors=False, show_timestamps=False, stream=stream), stream


def test_level_filtering():
    logger, stream = make_logger(level="WARNING")

    logger.info("hidden")
    logger.warning("shown")
    logger.error("also shown")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "[ WARNING][chipvm] shown" in output
    assert "also shown" in output


def test_level_is_case_insensitive():
    logger, stream = make_logger(level="debug")

    logger.debug("details")

    assert "details" in stream.getvalue()


@pytest.mark.parametrize("level", ["LOUD", "CRITICAL", ""])
def test_unknown_level(level):
    with pytest.raises(ValueError):
        ConsoleLogger(log_level=level)


def test_colors_disabled_for_non_tty():
    logger = ConsoleLogger(use_colors=True, stream=io.StringIO())

    assert not logger.use_colors


def test_program_loaded_message():
    logger, stream = make_logger(MachineLogger)

    logger.log_program_loaded(4, "pong.ch8")

    assert "Loaded 4 byte program from pong.ch8 at 0x200" in stream.getvalue()


def test_halt_levels():
    logger, stream = make_logger(MachineLogger, level="ERROR")

    logger.log_halt(0x202, 0x0000, "HALT_INSTRUCTION", "HLT")
    logger.log_halt(0x300, 0x8008, "UNKNOWN_OPCODE", "??? 0x8008")

    output = stream.getvalue()
    assert "HALT_INSTRUCTION" not in output
    assert "Halted at 0x300 (8008 ??? 0x8008): UNKNOWN_OPCODE" in output
    assert [halt["reason"] for halt in logger.halts] == ["HALT_INSTRUCTION", "UNKNOWN_OPCODE"]


def test_halt_history_is_capped():
    logger, _ = make_logger(MachineLogger, level="ERROR")
    logger.max_halts = 3

    for pc in range(0x200, 0x20A, 2):
        logger.log_halt(pc, 0x0000, "HALT_INSTRUCTION", "HLT")

    assert [halt["pc"] for halt in logger.halts] == [0x204, 0x206, 0x208]


def test_bad_halt_history_size():
    with pytest.raises(ValueError):
        MachineLogger(max_halts=0)


def test_reset_clears_halt_history():
    logger, _ = make_logger(MachineLogger, level="ERROR")
    logger.log_halt(0x200, 0x0000, "HALT_INSTRUCTION", "HLT")

    logger.log_reset()

    assert logger.halts == []
