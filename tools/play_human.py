"""
Human Play Mode
================

Play Turbo Espresso Dash interactively with keyboard or mouse control.

Controls:
    - Up/Down (horizontal) or Left/Right (vertical): Change lane
    - Mouse click: Jump to the lane under the pointer
    - Space/Enter: Start from the menu
    - R: Play again after a run
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--vertical] [--fps FPS]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from espresso_dash.dash_core.config_loader import GameConfig, load_config
from espresso_dash.dash_core.driver import TickDriver
from espresso_dash.dash_core.entities import REWARD
from espresso_dash.dash_core.game import CoreGame
from espresso_dash.dash_core.orientation import LANE_DOWN, LANE_LEFT, LANE_RIGHT, LANE_UP
from espresso_dash.dash_core.records import JsonFileRecordStore
from espresso_dash.dash_core.session import GAMEOVER, MENU, VICTORY


class DashRenderer:
    """
    Flat renderer for the road, entities, HUD and overlays.
    """

    def __init__(self, config: GameConfig, window_width: int, window_height: int):
        self._config = config
        self._window_width = window_width
        self._window_height = window_height

        # Colors - espresso palette
        self._road = (60, 60, 66)
        self._lane_line = (200, 200, 200)
        self._bean = (111, 78, 55)
        self._bean_highlight = (160, 120, 90)
        self._pothole = (20, 20, 20)
        self._car = (220, 50, 50)
        self._panel = (255, 245, 230)
        self._text_dark = (80, 60, 40)
        self._text_light = (140, 110, 80)
        self._meter_fill = (190, 120, 60)

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 56)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

    def render(self, screen: pygame.Surface, game: CoreGame) -> None:
        """Draw one frame."""
        render_data = game.get_render_data()

        screen.fill(self._road)
        self._draw_lanes(screen, render_data)
        self._draw_entities(screen, render_data)
        self._draw_car(screen, render_data)
        self._draw_hud(screen, render_data)

        state = render_data["state"]
        if state == MENU:
            self._draw_menu(screen, game)
        elif state in (VICTORY, GAMEOVER):
            self._draw_results(screen, game)

    def _draw_lanes(self, screen: pygame.Surface, render_data: dict) -> None:
        horizontal = render_data["mode"] == "horizontal"
        coords = render_data["lane_coordinates"]
        for a, b in zip(coords, coords[1:]):
            mid = int((a + b) / 2)
            if horizontal:
                pygame.draw.line(screen, self._lane_line, (0, mid), (self._window_width, mid), 1)
            else:
                pygame.draw.line(screen, self._lane_line, (mid, 0), (mid, self._window_height), 1)

    def _draw_entities(self, screen: pygame.Surface, render_data: dict) -> None:
        half_travel, half_across = self._config.collision.entity_half_extents
        for entity in render_data["entities"]:
            center = (int(entity["x"]), int(entity["y"]))
            if entity["kind"] == REWARD:
                pygame.draw.ellipse(
                    screen, self._bean,
                    pygame.Rect(0, 0, int(half_travel * 1.5), int(half_across * 2)).move(
                        center[0] - int(half_travel * 0.75), center[1] - int(half_across)
                    )
                )
                pygame.draw.line(
                    screen, self._bean_highlight,
                    (center[0], center[1] - int(half_across * 0.7)),
                    (center[0], center[1] + int(half_across * 0.7)), 2
                )
            else:
                pygame.draw.circle(screen, self._pothole, center, int(half_across))

    def _draw_car(self, screen: pygame.Surface, render_data: dict) -> None:
        half_travel, half_across = self._config.collision.player_half_extents
        x, y = render_data["car"]["x"], render_data["car"]["y"]
        if render_data["mode"] == "horizontal":
            rect = pygame.Rect(int(x - half_travel), int(y - half_across),
                               int(half_travel * 2), int(half_across * 2))
        else:
            rect = pygame.Rect(int(x - half_across), int(y - half_travel),
                               int(half_across * 2), int(half_travel * 2))
        pygame.draw.rect(screen, self._car, rect, border_radius=8)

    def _draw_hud(self, screen: pygame.Surface, render_data: dict) -> None:
        """Score, distance, speed and the caffeine meter."""
        lines = [
            f"Score {render_data['score']:,}",
            f"{render_data['distance']:.0f} m",
            f"{render_data['speed']:.0f} km/h",
        ]
        y = 8
        for line in lines:
            surface = self._font_medium.render(line, True, self._panel)
            screen.blit(surface, (10, y))
            y += 24

        max_caffeine = self._config.economy.max_caffeine
        fraction = min(1.0, render_data["caffeine"] / max_caffeine)
        meter = pygame.Rect(self._window_width - 170, 12, 150, 16)
        pygame.draw.rect(screen, self._panel, meter, 1, border_radius=4)
        fill = meter.inflate(-4, -4)
        fill.width = int(fill.width * fraction)
        pygame.draw.rect(screen, self._meter_fill, fill, border_radius=3)
        label = "DELIVERED" if render_data["delivery_made"] else "CAFFEINE"
        screen.blit(self._font_small.render(label, True, self._panel), (meter.x, meter.bottom + 4))

    def _draw_box(self, screen: pygame.Surface, lines, title: str) -> None:
        overlay = pygame.Surface((self._window_width, self._window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        box_w = min(360, self._window_width - 20)
        box_h = 90 + 26 * len(lines)
        box_x = (self._window_width - box_w) // 2
        box_y = (self._window_height - box_h) // 2
        pygame.draw.rect(screen, self._panel, (box_x, box_y, box_w, box_h), border_radius=16)

        title_surface = self._font_huge.render(title, True, self._text_dark)
        screen.blit(title_surface, (box_x + (box_w - title_surface.get_width()) // 2, box_y + 15))

        y = box_y + 70
        for text, dark in lines:
            surface = self._font_medium.render(text, True, self._text_dark if dark else self._text_light)
            screen.blit(surface, (box_x + (box_w - surface.get_width()) // 2, y))
            y += 26

    def _draw_menu(self, screen: pygame.Surface, game: CoreGame) -> None:
        best = game.best_record()
        self._draw_box(screen, [
            (f"Best score: {best.best_score:,}", True),
            (f"Best distance: {best.best_distance:,} m", True),
            ("Press Space to start", False),
        ], "ESPRESSO DASH")

    def _draw_results(self, screen: pygame.Surface, game: CoreGame) -> None:
        breakdown = game.score_breakdown()
        session = game.session
        title = "DELIVERED!" if session.state == VICTORY else "CRASHED"
        self._draw_box(screen, [
            (f"Distance: {breakdown.distance_points:,}", True),
            (f"Beans x{session.beans_collected}: {breakdown.bean_bonus:,}", True),
            (f"Top speed: {breakdown.speed_bonus:,}", True),
            (f"Overload: {breakdown.overload_bonus:,}", True),
            (f"Score: {session.score:,}", True),
            ("Press R to play again", False),
        ], title)


class HumanPlayer:
    """
    Human-playable game driven by a fixed-step TickDriver.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._target_fps = target_fps
        self._window_width = int(config.layout.width)
        self._window_height = int(config.layout.height)

        self._game = CoreGame(
            config=config,
            seed=seed,
            record_store=JsonFileRecordStore(config.records.path),
            on_collision=self._on_collision,
            on_state_change=self._on_state_change
        )
        self._driver: Optional[TickDriver] = None

        pygame.init()
        self._screen = pygame.display.set_mode((self._window_width, self._window_height))
        pygame.display.set_caption("Turbo Espresso Dash")
        self._clock = pygame.time.Clock()

        self._renderer = DashRenderer(config, self._window_width, self._window_height)
        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns the last score."""
        print("=== Turbo Espresso Dash ===")
        print("Arrow keys or click to change lane")
        print("Space to start, R to play again, ESC to quit")
        print()

        while self._running:
            elapsed = self._clock.tick(self._target_fps) / 1000.0
            self._handle_events()
            if self._driver is not None:
                self._driver.pump(elapsed)
            self._renderer.render(self._screen, self._game)
            pygame.display.flip()

        if self._driver is not None:
            self._driver.cancel()
        pygame.quit()
        return self._game.session.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key in (pygame.K_SPACE, pygame.K_RETURN) and self._game.state == MENU:
                    self._start()
                elif event.key == pygame.K_r and self._game.is_over:
                    self._play_again()
                elif event.key == pygame.K_UP:
                    self._game.steer(LANE_UP)
                elif event.key == pygame.K_DOWN:
                    self._game.steer(LANE_DOWN)
                elif event.key == pygame.K_LEFT:
                    self._game.steer(LANE_LEFT)
                elif event.key == pygame.K_RIGHT:
                    self._game.steer(LANE_RIGHT)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                x, y = event.pos
                self._game.point_at(x, y)

    def _start(self) -> None:
        self._game.start(seed=self._seed)
        self._driver = TickDriver(self._game, step_seconds=1.0 / 60.0)

    def _play_again(self) -> None:
        update = self._game.reset()
        if update.new_best_score:
            print(f"New best score: {update.best_score}")
        if update.new_best_distance:
            print(f"New best distance: {update.best_distance} m")
        self._start()
        print("\n=== New Run ===\n")

    def _on_collision(self, kind: str) -> None:
        session = self._game.session
        if kind == REWARD:
            print(f"  Bean! caffeine={session.caffeine:.0f}% (Score: {session.score})")

    def _on_state_change(self, state: str) -> None:
        session = self._game.session
        if state == VICTORY:
            print(f"\nDELIVERED - Score: {session.score}")
        elif state == GAMEOVER:
            print(f"\nCRASHED - Score: {session.score}, Distance: {session.distance:.0f} m")


def main():
    parser = argparse.ArgumentParser(description="Play Turbo Espresso Dash interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--vertical", action="store_true", help="Use the vertical (portrait) layout")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")

    args = parser.parse_args()

    overrides = None
    if args.vertical:
        overrides = {"layout": {"mode": "vertical", "width": 400.0, "height": 800.0}}

    try:
        config = load_config(overrides=overrides)
        player = HumanPlayer(config=config, seed=args.seed, target_fps=args.fps)
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
