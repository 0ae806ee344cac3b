"""Pluggable random byte sources for the CXNN instruction.

A source takes the machine's PRNG key and returns ``(new_key, byte)``. It must
be traceable by JAX and hashable, since it is a static argument of the jitted
step function.
"""

from typing import Callable

import jax
import jax.numpy as jnp

RandomByteFn = Callable[[jax.Array], tuple[jax.Array, jnp.ndarray]]


def jax_random_byte(rng: jax.Array) -> tuple[jax.Array, jnp.ndarray]:
    """Draw a uniformly distributed byte from the JAX PRNG."""
    key, subkey = jax.random.split(rng)
    return key, jax.random.randint(subkey, shape=(), minval=0, maxval=256, dtype=jnp.int32).astype(jnp.uint8)


def constant_random_byte(value: int) -> RandomByteFn:
    """Build a source that always yields ``value``; useful for deterministic runs."""
    byte = value & 0xFF

    def random_byte(rng: jax.Array) -> tuple[jax.Array, jnp.ndarray]:
        return rng, jnp.astype(byte, jnp.uint8)

    return random_byte
