"""CHIP-8 monochrome framebuffer and XOR sprite blit.

The frame is a boolean array of shape ``(SCREEN_WIDTH, SCREEN_HEIGHT)`` indexed
``[x, y]``. Sprites wrap around both edges: a pixel at sprite column ``col`` and
row ``row`` lands on ``((x + col) % 64, (y + row) % 32)``.
"""

import jax.numpy as jnp

from chipvm.constants import SCREEN_WIDTH, SCREEN_HEIGHT

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def create_frame() -> jnp.ndarray:
    return jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_)


def clear(frame: jnp.ndarray) -> jnp.ndarray:
    return jnp.zeros_like(frame)


def sprite_mask(x, y, rows: jnp.ndarray) -> jnp.ndarray:
    """Rasterise sprite rows onto a full-screen boolean mask.

    Args:
        x: Column of the sprite's left edge (wrapped modulo the width)
        y: Row of the sprite's top edge (wrapped modulo the height)
        rows: 1-D array of sprite bytes, most-significant bit leftmost

    Returns:
        Boolean array shaped like the frame, True where the sprite has a set bit
    """
    rows = jnp.asarray(rows, dtype=jnp.uint8)
    height = rows.shape[0]
    if height == 0:
        return jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_)

    sprite_x = jnp.astype(x, jnp.int32) % SCREEN_WIDTH
    sprite_y = jnp.astype(y, jnp.int32) % SCREEN_HEIGHT

    col_offset = (xx - sprite_x) % SCREEN_WIDTH
    row_offset = (yy - sprite_y) % SCREEN_HEIGHT
    covered = (col_offset < 8) & (row_offset < height)

    sprite_bytes = rows[jnp.minimum(row_offset, height - 1)]
    bits = (sprite_bytes >> (7 - jnp.minimum(col_offset, 7))) & 1
    return (bits == 1) & covered


def draw_sprite(frame: jnp.ndarray, x, y, rows: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """XOR a sprite onto the frame.

    Returns:
        Tuple of (new frame, collided) where collided is True if any pixel
        was flipped from on to off.
    """
    sprite = sprite_mask(x, y, rows)
    collided = jnp.any(frame & sprite)
    return frame ^ sprite, collided
