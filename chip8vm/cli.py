"""
pygame host for the chip8vm interpreter
"""

import argparse

from chip8vm.errors import MachineError, error_for_fault
from chip8vm.emulator import run_frames_with_progress
from chip8vm.keypad import key_at
from chip8vm.logging import ConsoleLogger
from chip8vm.machine import Machine
from chip8vm.rendering import display_to_rgb, create_color_scheme


def build_key_map(pygame):
    """Map the physical 4x4 block of a QWERTY keyboard onto the keypad grid."""
    key_rows = (
        (pygame.K_1, pygame.K_2, pygame.K_3, pygame.K_4),
        (pygame.K_q, pygame.K_w, pygame.K_e, pygame.K_r),
        (pygame.K_a, pygame.K_s, pygame.K_d, pygame.K_f),
        (pygame.K_z, pygame.K_x, pygame.K_c, pygame.K_v),
    )
    return {
        key: key_at(row, column)
        for row, keys in enumerate(key_rows)
        for column, key in enumerate(keys)
    }


def run_headless(rom_filename, frames, shift_uses_vy=False, logger=None):
    """Run a ROM without a window and print the final frame as text.

    Returns the MachineError the run stopped on, or None.
    """
    machine = Machine(shift_uses_vy=shift_uses_vy, logger=logger)
    machine.load_rom(rom_filename)
    machine.state = run_frames_with_progress(machine.state, frames)

    for row in machine.display:
        print("".join("#" if pixel else "." for pixel in row))

    error = error_for_fault(machine.state.fault, machine.pc)
    if error is not None:
        machine.logger.error(f"{type(error).__name__}: {error}")
    return error


def run_emulator(rom_filename, scale=8, color_scheme="classic", shift_uses_vy=False):
    """Main emulator loop: one timer tick and a fixed batch of instructions per 60Hz frame."""
    import pygame

    logger = ConsoleLogger(name="chip8vm")
    machine = Machine(shift_uses_vy=shift_uses_vy, logger=logger)
    try:
        machine.load_rom(rom_filename)
    except (OSError, MachineError) as e:
        logger.error(f"Could not load {rom_filename}: {e}")
        return

    key_map = build_key_map(pygame)
    on_color, off_color = create_color_scheme(color_scheme)

    pygame.init()
    screen = pygame.display.set_mode((64 * scale, 32 * scale))
    pygame.display.set_caption("chip8vm")
    clock = pygame.time.Clock()

    logger.info("Controls: ESC=Quit, P=Pause, F5=Reset")

    running = True
    paused = False
    while running:
        clock.tick(60)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_p:
                    paused = not paused
                elif event.key == pygame.K_F5:
                    machine.reset()
                    paused = False
                elif event.key in key_map:
                    machine.press_key(key_map[event.key])
            elif event.type == pygame.KEYUP:
                if event.key in key_map:
                    machine.release_key(key_map[event.key])

        if not paused:
            try:
                machine.run_frame()
            except MachineError:
                # Already logged by the machine; keep the last frame on screen
                paused = True

        frame = display_to_rgb(machine.display, scale=scale, on_color=on_color, off_color=off_color)
        pygame.surfarray.blit_array(screen, frame.transpose(1, 0, 2))
        pygame.display.flip()

    pygame.quit()


def build_parser():
    parser = argparse.ArgumentParser(prog="chip8vm", description="Run a CHIP-8 ROM.")
    parser.add_argument("rom", help="path to the ROM image")
    parser.add_argument("--scale", type=int, default=8, help="pixel upscaling factor")
    parser.add_argument("--colors", default="classic", help="color scheme name")
    parser.add_argument("--shift-uses-vy", action="store_true",
                        help="8XY6/8XYE shift VY into VX (COSMAC VIP behavior)")
    parser.add_argument("--headless", type=int, metavar="FRAMES",
                        help="run FRAMES frames without a window and print the screen")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.headless is not None:
        run_headless(args.rom, args.headless, shift_uses_vy=args.shift_uses_vy)
    else:
        run_emulator(args.rom, scale=args.scale, color_scheme=args.colors, shift_uses_vy=args.shift_uses_vy)


if __name__ == "__main__":
    main()
