"""
Minimal pygame shell for the CHIP-8 virtual machine
"""

import argparse

import pygame

from chipvm import Interpreter, MachineStatus, frame_to_rgb, color_palette
from chipvm.logging import MachineLogger

# Modern key mapping
KEY_MAP = {
    pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
    pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
    pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
    pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
}


def draw_overlay_text(surface, text_lines, position, font, bg_color=(0, 0, 0), text_color=(255, 255, 255), alpha=120):
    """Draw text with semi-transparent background overlay"""
    if not text_lines:
        return

    line_height = font.get_height()
    max_width = max(font.size(line)[0] for line in text_lines)
    overlay = pygame.Surface((max_width + 16, len(text_lines) * line_height + 8))
    overlay.set_alpha(alpha)
    overlay.fill(bg_color)
    surface.blit(overlay, position)

    x, y = position
    for i, line in enumerate(text_lines):
        text_surface = font.render(line, True, text_color)
        surface.blit(text_surface, (x + 8, y + 4 + i * line_height))


def run_emulator(rom_filename, scale=8, color_scheme="classic", trace=False):
    """Main loop: one frame of instructions and one timer tick per 60 Hz tick."""
    logger = MachineLogger(log_level="DEBUG" if trace else "INFO")
    vm = Interpreter(logger=logger, trace=trace)
    vm.load_rom(rom_filename)

    pygame.init()
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption(f"chipvm - {rom_filename}")
    clock = pygame.time.Clock()
    palette = color_palette(color_scheme)

    running = True
    paused = False
    show_debug = False

    logger.info("Controls: ESC=Quit, F1=Pause, F2=Reset, F3=Debug")

    while running:
        clock.tick(vm.timer_frequency)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_F1:
                    paused = not paused
                elif event.key == pygame.K_F2:
                    vm.reset()
                    logger.info("Reset")
                elif event.key == pygame.K_F3:
                    show_debug = not show_debug
                elif event.key in KEY_MAP:
                    vm.key_pressed(KEY_MAP[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in KEY_MAP:
                    vm.key_released(KEY_MAP[event.key])

        if not paused and vm.status != MachineStatus.HALTED:
            vm.run_frame()

        rgb = frame_to_rgb(vm.frame, scale=scale, palette=palette)
        pygame.surfarray.blit_array(screen, rgb)

        if show_debug:
            font = pygame.font.Font(None, 18)
            draw_overlay_text(screen, vm.dump_registers().replace("\t", "  ").splitlines(), (4, 4), font)

        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run a CHIP-8 program")
    parser.add_argument("rom", help="Path to the program image")
    parser.add_argument("--scale", type=int, default=8)
    parser.add_argument("--colors", default="classic")
    parser.add_argument("--trace", action="store_true", help="Log every executed instruction")
    args = parser.parse_args()

    run_emulator(args.rom, scale=args.scale, color_scheme=args.colors, trace=args.trace)
