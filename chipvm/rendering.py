"""Turn framebuffers into pixel arrays and text for shells.

Every function takes a ``(64, 32)`` frame indexed ``[x, y]``, such as
:attr:`chipvm.Interpreter.frame` or ``MachineState.display``, and keeps that
axis order. ``pygame.surfarray`` uses the same order, so no transpose is
needed there. Row-major image libraries want ``rgb.transpose(1, 0, 2)``.
"""

import numpy as np

from chipvm.constants import SCREEN_WIDTH, SCREEN_HEIGHT

# name -> (on, off)
COLOR_SCHEMES = {
    "classic": ((0, 255, 0), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),
    "retro": ((255, 255, 0), (64, 0, 64)),
}


def color_palette(scheme: str = "classic") -> np.ndarray:
    """Palette for a named scheme: a ``(2, 3)`` uint8 array, row 0 off and row 1 on."""
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {sorted(COLOR_SCHEMES)}"
        )
    on_color, off_color = COLOR_SCHEMES[scheme]
    return np.array([off_color, on_color], dtype=np.uint8)


def _as_frame(frame) -> np.ndarray:
    pixels = np.asarray(frame, dtype=np.bool_)
    if pixels.shape != (SCREEN_WIDTH, SCREEN_HEIGHT):
        raise ValueError(
            f"Expected a ({SCREEN_WIDTH}, {SCREEN_HEIGHT}) frame, got shape {pixels.shape}"
        )
    return pixels


def frame_to_rgb(frame, scale: int = 8, palette=None) -> np.ndarray:
    """Colour a frame and upscale each pixel to a ``scale`` x ``scale`` block.

    Args:
        frame: Boolean ``(64, 32)`` frame indexed ``[x, y]``
        scale: Integer upscaling factor
        palette: ``(2, 3)`` array from :func:`color_palette`; classic green if None

    Returns:
        uint8 array of shape ``(64 * scale, 32 * scale, 3)``
    """
    if scale < 1:
        raise ValueError(f"scale must be at least 1, got {scale}")
    palette = color_palette() if palette is None else np.asarray(palette, dtype=np.uint8)
    if palette.shape != (2, 3):
        raise ValueError(f"palette must have shape (2, 3), got {palette.shape}")

    rgb = palette[_as_frame(frame).astype(np.intp)]
    return rgb.repeat(scale, axis=0).repeat(scale, axis=1)


def frame_to_text(frame, on: str = "#", off: str = ".") -> str:
    """One line per screen row, for terminals and logs."""
    pixels = _as_frame(frame)
    return "\n".join(
        "".join(on if pixel else off for pixel in pixels[:, y]) for y in range(SCREEN_HEIGHT)
    )
