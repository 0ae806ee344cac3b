import time

import jax
import numpy as np

from chipvm import create_state, load_program, run_n_instruction, frame_to_text

# Draw the sixteen font glyphs in two rows of eight, then halt.
HEX_DIGITS = [
    0x60, 0x00,  # LD V0, 0x00     digit
    0x61, 0x00,  # LD V1, 0x00     x
    0x62, 0x00,  # LD V2, 0x00     y
    0xF0, 0x29,  # LD F, V0
    0xD1, 0x25,  # DRW V1, V2, 5
    0x70, 0x01,  # ADD V0, 0x01
    0x71, 0x08,  # ADD V1, 0x08
    0x40, 0x08,  # SNE V0, 0x08
    0x62, 0x08,  # LD V2, 0x08
    0x30, 0x10,  # SE V0, 0x10
    0x12, 0x06,  # JP 0x206
    0x00, 0x00,  # HLT
]


if __name__ == "__main__":
    state = load_program(create_state(), HEX_DIGITS)

    # Measure compilation time
    start_compile = time.time()
    compiled = run_n_instruction.lower(state, 200).compile()
    end_compile = time.time()

    print("Compilation time (s):", end_compile - start_compile)

    # Measure execution time
    start_exec = time.time()
    final_state = jax.block_until_ready(compiled(state))
    end_exec = time.time()

    print("Execution time (s):", end_exec - start_exec)
    print("Halted:", bool(final_state.halted), "at pc", hex(int(final_state.pc)))
    print("\n".join(frame_to_text(final_state.display).splitlines()[:16]))

    # Many machines at once: each seed draws a different random byte into V0.
    random_program = [0xC0, 0xFF, 0x00, 0x00]
    seeds = jax.random.split(jax.random.PRNGKey(0), 8)
    states = jax.vmap(lambda rng: load_program(create_state(rng), random_program))(seeds)
    states = jax.vmap(lambda s: run_n_instruction(s, 2))(states)
    print("V0 per machine:", np.asarray(states.V[:, 0]).tolist())
