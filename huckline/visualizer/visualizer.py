# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Pygame front end for the field simulation.

Controls
--------
Left click
    Select the player under the cursor, or send the selected player running
    to the clicked point. Hold shift to teleport instead.
Right click
    Throw the disc toward the clicked point.
1 / 2 / 3 / 4
    Toggle the catch, difficulty, marking-difficulty and coverage layers.
N, H, G
    Toggle normalisation, switch all layers off, toggle the grid.
D, O, W, S
    Position the defender, the receiver (best cell), the receiver (weighted
    sample) or the stack.
T
    Record a training sample.
Space, R, Q
    Pause or resume, reset the scenario, quit.
"""
import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

try:
    import pygame
except Exception:
    pygame = None

from huckline.engine.config import ENGINE_CONFIG
from huckline.engine.fields import mark_line
from huckline.engine.heatmap import HeatMapData, HeatMapOptions
from huckline.engine.physics import Field
from huckline.engine.remote import HeatMapDelegate
from huckline.engine.simulation import FieldSimulation
from huckline.engine.snapshot import FieldSnapshot

HEAT_STOPS: Sequence[Tuple[float, Tuple[int, int, int]]] = (
    (0.0, (128, 0, 0)),
    (0.1, (200, 0, 0)),
    (0.2, (255, 80, 0)),
    (0.3, (255, 140, 0)),
    (0.4, (255, 180, 0)),
    (0.5, (255, 220, 0)),
    (0.6, (220, 255, 0)),
    (0.7, (160, 255, 60)),
    (0.8, (80, 255, 80)),
    (0.9, (0, 220, 80)),
    (1.0, (0, 180, 60)),
)
"""Dark red for 0 through yellow to deep green for 1."""

MODE_KEYS_BY_PYGAME_KEY = {"1": "catch", "2": "difficulty", "3": "markingDifficulty", "4": "coverage"}


def heat_color(value: float) -> Tuple[int, int, int]:
    """Map a value in ``[0, 1]`` onto the heat gradient.

    Parameters
    ----------
    value : float
        Cell value; clamped into ``[0, 1]``.

    Returns
    -------
    Tuple[int, int, int]
        RGB colour.
    """
    value = max(0.0, min(1.0, value))
    i = 0
    while i < len(HEAT_STOPS) - 2 and value > HEAT_STOPS[i + 1][0]:
        i += 1
    (v0, c0), (v1, c1) = HEAT_STOPS[i], HEAT_STOPS[i + 1]
    t = (value - v0) / (v1 - v0)
    return tuple(round(a + t * (b - a)) for a, b in zip(c0, c1))


def hex_to_rgb(color: str) -> Tuple[int, int, int]:
    """Parse a ``#rrggbb`` colour.

    Parameters
    ----------
    color : str
        Hex colour string.

    Returns
    -------
    Tuple[int, int, int]
        RGB components.
    """
    color = color.lstrip("#")
    return int(color[0:2], 16), int(color[2:4], 16), int(color[4:6], 16)


@dataclass
class FieldView:
    """Mapping between field yards and screen pixels.

    The drawn area spans the sideline strip at negative ``x`` plus the whole
    field, scaled uniformly to fit inside the padded screen.

    Parameters
    ----------
    field : Field
        Field dimensions.
    screen_size : Tuple[int, int]
        Window size in pixels.
    padding : int, optional
        Margin around the drawn area in pixels.
    """

    field: Field
    screen_size: Tuple[int, int]
    padding: int = 40

    @property
    def scale(self) -> float:
        """Return pixels per yard."""
        w, h = self.screen_size
        span_x = self.field.total_length + self.field.sideline_width
        return max(1e-6, min((w - 2 * self.padding) / span_x, (h - 2 * self.padding) / self.field.field_width))

    def to_screen(self, x: float, y: float) -> Tuple[int, int]:
        """Convert field coordinates to pixels.

        Parameters
        ----------
        x : float
            Length coordinate in yards.
        y : float
            Width coordinate in yards.

        Returns
        -------
        Tuple[int, int]
            Pixel position.
        """
        scale = self.scale
        return (
            int(self.padding + (x + self.field.sideline_width) * scale),
            int(self.padding + y * scale),
        )

    def to_field(self, sx: float, sy: float) -> Tuple[float, float]:
        """Convert pixels to field coordinates.

        Parameters
        ----------
        sx : float
            Horizontal pixel.
        sy : float
            Vertical pixel.

        Returns
        -------
        Tuple[float, float]
            Field coordinates in yards; may lie outside the field.
        """
        scale = self.scale
        return (sx - self.padding) / scale - self.field.sideline_width, (sy - self.padding) / scale


def start_visualizer(
    simulation: FieldSimulation,
    screen_size: Tuple[int, int] = (1100, 560),
    fps: int = 60,
    delegate: Optional[HeatMapDelegate] = None,
) -> None:
    """Run the pygame window until the user quits.

    The simulation is expected to tick on its own thread; this loop only
    draws and forwards input. If ``pygame`` is not installed the function
    returns immediately.

    Parameters
    ----------
    simulation : FieldSimulation
        Simulation to display and control.
    screen_size : Tuple[int, int], optional
        Initial window size in pixels.
    fps : int, optional
        Frame-rate cap.
    delegate : HeatMapDelegate | None, optional
        Off-thread heat-map computation; heat maps are computed inline when
        omitted.
    """
    if pygame is None:
        # pygame not available; skip visualizer
        return

    pygame.init()
    screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
    pygame.display.set_caption("Huckline")
    clock = pygame.time.Clock()

    # Colors
    GRASS = (45, 90, 61)
    LINE = (255, 255, 255)
    END_ZONE_SCORING = (239, 68, 68, 50)
    END_ZONE_OWN = (59, 130, 246, 50)
    SIDELINE = (100, 100, 100)
    GRID = (255, 255, 255, 26)
    BRICK = (251, 191, 36)
    DISC = (245, 245, 245)
    TEXT = (235, 235, 235)

    font = pygame.font.SysFont(None, 18)
    rng = random.Random()
    show_grid = True
    running = True

    heat_map: Optional[HeatMapData] = None
    last_request: Optional[Tuple[FieldSnapshot, HeatMapOptions]] = None

    while running:
        view = FieldView(simulation.field, screen_size)
        mouse_x, mouse_y = view.to_field(*pygame.mouse.get_pos())

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                screen_size = (event.w, event.h)
                screen = pygame.display.set_mode(screen_size, pygame.RESIZABLE)
            elif event.type == pygame.KEYDOWN:
                key = event.unicode.lower()
                if event.key in (pygame.K_q, pygame.K_ESCAPE):
                    running = False
                elif key in MODE_KEYS_BY_PYGAME_KEY:
                    simulation.toggle_heat_map_mode(MODE_KEYS_BY_PYGAME_KEY[key])
                elif key == "n":
                    simulation.set_heat_map_normalize(not simulation.heat_map_normalize)
                elif key == "h":
                    simulation.disable_heat_maps()
                elif key == "g":
                    show_grid = not show_grid
                elif key == "d":
                    simulation.position_defender()
                elif key == "o":
                    simulation.position_offender()
                elif key == "w":
                    simulation.position_offender(rng=rng)
                elif key == "s":
                    simulation.position_stack()
                elif key == "t":
                    simulation.record_training_sample()
                elif key == " ":
                    simulation.toggle_pause()
                elif key == "r":
                    simulation.reset()
            elif event.type == pygame.MOUSEBUTTONDOWN:
                fx, fy = view.to_field(*event.pos)
                if event.button == 1:
                    hit = simulation.get_player_at(fx, fy)
                    selected = simulation.selected_player
                    if hit is not None:
                        simulation.select_player(hit.player_id)
                    elif selected is not None:
                        if pygame.key.get_mods() & pygame.KMOD_SHIFT:
                            simulation.move_player_to(selected.player_id, fx, fy)
                        else:
                            simulation.set_player_target(selected.player_id, fx, fy)
                    else:
                        simulation.clear_selection()
                elif event.button == 3:
                    simulation.throw_disc(fx, fy)

        snapshot = simulation.snapshot()
        field = snapshot.field

        # Heat map, recomputed only when the inputs change
        if simulation.is_any_heat_map_enabled():
            request = (snapshot, simulation.heat_map_options())
            if request != last_request:
                last_request = request
                if delegate is not None:
                    delegate.request(*request)
                else:
                    heat_map = simulation.calculate_heat_map()
            if delegate is not None:
                heat_map = delegate.latest
        else:
            heat_map = None
            last_request = None

        screen.fill((0, 0, 0))
        overlay = pygame.Surface(screen_size, pygame.SRCALPHA)

        # Sideline strip, field, end zones
        sx0, sy0 = view.to_screen(-field.sideline_width, 0)
        fx0, _ = view.to_screen(0, 0)
        fx1, fy1 = view.to_screen(field.total_length, field.field_width)
        pygame.draw.rect(screen, SIDELINE, (sx0, sy0, fx0 - sx0, fy1 - sy0))
        pygame.draw.rect(screen, GRASS, (fx0, sy0, fx1 - fx0, fy1 - sy0))
        goal_x, _ = view.to_screen(field.scoring_line, 0)
        own_x, _ = view.to_screen(field.own_goal_line, 0)
        pygame.draw.rect(overlay, END_ZONE_SCORING, (fx0, sy0, goal_x - fx0, fy1 - sy0))
        pygame.draw.rect(overlay, END_ZONE_OWN, (own_x, sy0, fx1 - own_x, fy1 - sy0))

        # Heat map cells
        if heat_map is not None:
            nx, ny = heat_map.shape
            size = heat_map.grid_size
            for cx in range(nx):
                for cy in range(ny):
                    left, top = view.to_screen(cx * size, cy * size)
                    right, bottom = view.to_screen(
                        min((cx + 1) * size, field.total_length), min((cy + 1) * size, field.field_width)
                    )
                    color = heat_color(float(heat_map.values[cx, cy]))
                    pygame.draw.rect(overlay, (*color, 150), (left, top, right - left, bottom - top))

        # Grid
        if show_grid:
            step = simulation.heat_map_grid_size
            x = 0.0
            while x <= field.total_length:
                pygame.draw.line(overlay, GRID, view.to_screen(x, 0), view.to_screen(x, field.field_width))
                x += step
            y = 0.0
            while y <= field.field_width:
                pygame.draw.line(overlay, GRID, view.to_screen(0, y), view.to_screen(field.total_length, y))
                y += step

        screen.blit(overlay, (0, 0))

        # Lines and brick marks
        pygame.draw.rect(screen, LINE, (fx0, sy0, fx1 - fx0, fy1 - sy0), 2)
        pygame.draw.line(screen, LINE, (goal_x, sy0), (goal_x, fy1), 2)
        pygame.draw.line(screen, LINE, (own_x, sy0), (own_x, fy1), 2)
        brick = ENGINE_CONFIG.dimensions.brick_distance
        for bx_yards in (field.scoring_line + brick, field.own_goal_line - brick):
            bx, by = view.to_screen(bx_yards, field.centre_y)
            pygame.draw.line(screen, BRICK, (bx - 6, by), (bx + 6, by), 2)
            pygame.draw.line(screen, BRICK, (bx, by - 6), (bx, by + 6), 2)

        # Players; the mark is drawn as a line
        for p in snapshot.players:
            if p.is_mark:
                continue
            px, py = view.to_screen(p.x, p.y)
            radius = 9 if p.has_disc else 7
            pygame.draw.circle(screen, hex_to_rgb(p.color), (px, py), radius)
            if p.player_id == simulation.selected_player_id:
                pygame.draw.circle(screen, LINE, (px, py), radius + 5, 2)
            if p.label:
                txt = font.render(p.label, True, TEXT)
                screen.blit(txt, (px - txt.get_width() // 2, py - radius - txt.get_height()))

        line = mark_line(snapshot)
        mark = next((p for p in snapshot.players if p.is_mark), None)
        if line is not None and mark is not None:
            start, end = line
            pygame.draw.line(
                screen, hex_to_rgb(mark.color), view.to_screen(start.x, start.y), view.to_screen(end.x, end.y), 3
            )

        # Disc and trajectory hint
        disc = snapshot.disc
        if disc.holder_id is None:
            dx, dy = view.to_screen(disc.x, disc.y)
            pygame.draw.circle(screen, DISC, (dx, dy), 5)
            if disc.in_flight:
                hint = view.to_screen(disc.x + disc.vx * 2, disc.y + disc.vy * 2)
                pygame.draw.line(screen, BRICK, (dx, dy), hint, 2)

        # HUD
        hud_lines = [
            f"Score {simulation.team_scores[1]} - {simulation.team_scores[2]}   "
            f"Time {simulation.sim_time:.1f}s{'   PAUSED' if simulation.paused else ''}",
            f"Cursor ({mouse_x:.1f}, {mouse_y:.1f}) yd",
        ]
        if heat_map is not None:
            value = heat_map.value_at(mouse_x, mouse_y)
            value_text = f"{value:.3f}" if value is not None else "-"
            hud_lines.append(f"Heat map [{heat_map.mode}] {value_text}")
        if delegate is not None and not delegate.available:
            hud_lines.append("Remote compute unavailable")
        for idx, text in enumerate(hud_lines):
            screen.blit(font.render(text, True, TEXT), (10, 6 + idx * 16))

        # Recent simulation events from the debug log
        if simulation.debugger is not None:
            entries = simulation.debugger.get_recent_events(4, kind="SIM_EVENT")
            for idx, entry in enumerate(reversed(entries)):
                screen.blit(font.render(entry, True, TEXT), (10, screen_size[1] - 18 - idx * 16))

        pygame.display.flip()
        clock.tick(fps)

    simulation.stop()
    pygame.quit()
