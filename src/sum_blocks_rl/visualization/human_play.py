from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional

import pygame

from sum_blocks_rl.game import GameConfig, GameMode, JsonBestScoreStore, SumBlocksGame
from .renderer import Renderer


KEY_TO_MODE: Dict[int, GameMode] = {
    pygame.K_1: GameMode.CLASSIC,
    pygame.K_2: GameMode.TIME,
    pygame.K_KP1: GameMode.CLASSIC,
    pygame.K_KP2: GameMode.TIME,
}


def run(mode: Optional[GameMode] = None, seed: Optional[int] = None, best_score_file: Optional[str] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        store = JsonBestScoreStore(best_score_file or JsonBestScoreStore.default_path())
        game = SumBlocksGame(GameConfig(random_seed=seed), store=store)
        renderer = Renderer()

        screen = pygame.display.set_mode(renderer.window_size(game.config.rows, game.config.cols))
        pygame.display.set_caption("Sum Blocks - Human Play")

        if mode is not None:
            game.start(mode)

        show_help = False
        second_ms = 1000
        last_second = pygame.time.get_ticks()

        running = True
        while running:
            # Input handling
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key in KEY_TO_MODE:
                        game.start(KEY_TO_MODE[event.key])
                        last_second = pygame.time.get_ticks()
                    elif event.key == pygame.K_p:
                        game.toggle_pause()
                        last_second = pygame.time.get_ticks()
                    elif event.key == pygame.K_r and game.mode is not None:
                        game.restart()
                        last_second = pygame.time.get_ticks()
                    elif event.key == pygame.K_BACKSPACE:
                        game.leave()
                    elif event.key == pygame.K_h:
                        show_help = not show_help
                elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    cell = renderer.cell_at(event.pos, game.config.rows, game.config.cols)
                    if cell is not None and game.mode is not None and not show_help:
                        game.click_cell(*cell)

            # One-second countdown for time mode
            now = pygame.time.get_ticks()
            if now - last_second >= second_ms:
                game.advance_clock(1)
                last_second = now

            renderer.draw(screen, game.snapshot(), game.selected_sum, show_help)
            clock.tick(60)
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser()
    p.add_argument("--mode", choices=[m.value for m in GameMode], default=None,
                   help="Start directly in this mode instead of the title screen")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--best_score_file", type=str, default=None)
    p.add_argument("--log_level", type=str, default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run(GameMode(args.mode) if args.mode else None, seed=args.seed, best_score_file=args.best_score_file)


if __name__ == "__main__":  # pragma: no cover
    main()
