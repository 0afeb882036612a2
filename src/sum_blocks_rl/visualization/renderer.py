from __future__ import annotations

from typing import Optional, Tuple

import pygame

from sum_blocks_rl.game import GameMode, GameSnapshot


BACKGROUND = (228, 227, 224)
INK = (20, 20, 20)
ACCENT = (242, 125, 38)
DANGER = (220, 60, 60)
EMPTY = (245, 245, 243)

HELP_LINES = [
    "Pick numbers that add up to the target.",
    "Blocks do not need to be adjacent.",
    "Going over the target clears the selection.",
    "Keep blocks below the red line at the top.",
    "Classic: a row is added after every clear.",
    "Time: a row is added when the countdown ends.",
    "",
    "H: close this help",
]


class Renderer:
    """Draws a `GameSnapshot`: board on the left, HUD panel on the right."""

    def __init__(self, cell_size: int = 56, margin: int = 20, panel_width: int = 220) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_width = panel_width
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    def window_size(self, rows: int, cols: int) -> Tuple[int, int]:
        width = self.margin * 3 + cols * self.cell_size + self.panel_width
        height = self.margin * 2 + rows * self.cell_size
        return width, height

    def cell_at(self, pos: Tuple[int, int], rows: int, cols: int) -> Optional[Tuple[int, int]]:
        """Map a window pixel to (row, col), or None outside the board."""
        mx, my = pos
        col = (mx - self.margin) // self.cell_size
        row = (my - self.margin) // self.cell_size
        if mx < self.margin or my < self.margin or not (0 <= row < rows and 0 <= col < cols):
            return None
        return int(row), int(col)

    def _fonts(self) -> Tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None or self._big_font is None:
            self._font = pygame.font.SysFont(None, 24)
            self._big_font = pygame.font.SysFont(None, int(self.cell_size * 0.8))
        return self._font, self._big_font

    def _grid_surface(self, snap: GameSnapshot) -> pygame.Surface:
        _, big = self._fonts()
        rows, cols = snap.values.shape
        surf = pygame.Surface((cols * self.cell_size, rows * self.cell_size))
        surf.fill((255, 255, 255))
        selected = snap.selected_mask()
        for y in range(rows):
            for x in range(cols):
                rect = pygame.Rect(x * self.cell_size, y * self.cell_size, self.cell_size - 1, self.cell_size - 1)
                v = int(snap.values[y, x])
                if v == 0:
                    pygame.draw.rect(surf, EMPTY, rect)
                    continue
                fill, text_color = (ACCENT, BACKGROUND) if selected[y, x] else ((255, 255, 255), INK)
                pygame.draw.rect(surf, fill, rect)
                pygame.draw.rect(surf, (200, 200, 200), rect, 1)
                label = big.render(str(v), True, text_color)
                surf.blit(label, label.get_rect(center=rect.center))
        # Danger line under the top row
        pygame.draw.line(surf, DANGER, (0, self.cell_size), (cols * self.cell_size, self.cell_size), 2)
        return surf

    def _panel_lines(self, snap: GameSnapshot, selected_sum: int) -> list[str]:
        lines = [
            f"Target: {snap.target}",
            f"Selected: {selected_sum}",
            f"Score: {snap.score}",
            f"Best: {snap.best_score}",
            f"Rows added: {snap.level}",
        ]
        if snap.mode == GameMode.TIME:
            lines.append(f"Next row in: {snap.countdown}s")
        lines += [
            "",
            f"Mode: {snap.mode.value if snap.mode else '-'}",
            "Click: select block",
            "P: pause   R: restart",
            "1: classic   2: time",
            "Backspace: menu   H: help",
        ]
        return lines

    def _draw_help(self, screen: pygame.Surface) -> None:
        font, _ = self._fonts()
        overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        overlay.fill((20, 20, 20, 220))
        screen.blit(overlay, (0, 0))
        top = screen.get_height() // 2 - len(HELP_LINES) * 12
        for i, txt in enumerate(HELP_LINES):
            img = font.render(txt, True, BACKGROUND)
            screen.blit(img, img.get_rect(center=(screen.get_width() // 2, top + i * 24)))

    def draw(self, screen: pygame.Surface, snap: GameSnapshot, selected_sum: int = 0, show_help: bool = False) -> None:
        font, big = self._fonts()
        screen.fill(BACKGROUND)
        if snap.mode is None:
            title = big.render("SUM BLOCKS", True, INK)
            screen.blit(title, title.get_rect(center=(screen.get_width() // 2, screen.get_height() // 3)))
            hint = font.render(f"1: classic   2: time   H: help   Best: {snap.best_score}", True, INK)
            screen.blit(hint, hint.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2)))
            if show_help:
                self._draw_help(screen)
            pygame.display.flip()
            return

        grid_surf = self._grid_surface(snap)
        screen.blit(grid_surf, (self.margin, self.margin))
        x_text = self.margin * 2 + grid_surf.get_width()
        for i, txt in enumerate(self._panel_lines(snap, selected_sum)):
            img = font.render(txt, True, INK)
            screen.blit(img, (x_text, self.margin + i * 24))

        if snap.game_over or snap.paused:
            overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
            overlay.fill((20, 20, 20, 170))
            screen.blit(overlay, (0, 0))
            msg = f"Game Over - {snap.score}  (R to restart)" if snap.game_over else "Paused (P to resume)"
            text = font.render(msg, True, DANGER if snap.game_over else BACKGROUND)
            screen.blit(text, text.get_rect(center=(screen.get_width() // 2, screen.get_height() // 2)))
        if show_help:
            self._draw_help(screen)
        pygame.display.flip()
