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
"""Frame-driven field simulation tying players, disc and heat maps together."""
import random
import threading
import time
from typing import Dict, List, Optional, Sequence

from huckline.engine.config import ENGINE_CONFIG, EngineConfig
from huckline.engine.events import SimulationEvent
from huckline.engine.heatmap import HeatMapData, HeatMapModes, HeatMapOptions, calculate_heat_map
from huckline.engine.kinematics import advance_player
from huckline.engine.physics import DiscState, Field, Vector2D
from huckline.engine.positioning import Placement, find_defender, find_offender
from huckline.engine.positioning import position_defender as search_defender
from huckline.engine.positioning import position_offender as search_offender
from huckline.engine.positioning import position_stack as place_stack
from huckline.engine.snapshot import DiscSnapshot, FieldSnapshot
from huckline.models.player import Player
from huckline.utils.debug import SimulationDebugger
from huckline.utils.scenario import (
    TrainingRecord,
    create_example_players,
    player_from_snapshot,
    snapshot_from_player,
)


class FieldSimulation:
    """Mutable field state advanced one tick per frame.

    Parameters
    ----------
    players : Sequence[Player] | None, optional
        Players in draw order; defaults to the example scenario.
    field : Field | None, optional
        Field dimensions; defaults to configuration.
    debugger : SimulationDebugger | None, optional
        Optional telemetry sink.
    config : EngineConfig | None, optional
        Engine configuration; defaults to :data:`ENGINE_CONFIG`.
    """

    def __init__(
        self,
        players: Optional[Sequence[Player]] = None,
        field: Optional[Field] = None,
        debugger: Optional[SimulationDebugger] = None,
        config: Optional[EngineConfig] = None,
    ) -> None:
        """Set up the field, players and a disc linked to its holder.

        Parameters
        ----------
        players : Sequence[Player] | None, optional
            Players in draw order; defaults to the example scenario.
        field : Field | None, optional
            Field dimensions; defaults to configuration.
        debugger : SimulationDebugger | None, optional
            Optional telemetry sink.
        config : EngineConfig | None, optional
            Engine configuration; defaults to :data:`ENGINE_CONFIG`.
        """
        self.config = config or ENGINE_CONFIG
        self.field = field or Field.from_config(self.config.dimensions)
        self.debugger = debugger
        self.simulation_speed = self.config.simulation.default_speed
        self.is_running = False
        self.paused = False
        self.heat_map_modes = HeatMapModes()
        self.heat_map_grid_size = self.config.heat_map.grid_size
        self.heat_map_normalize = self.config.heat_map.normalize
        self.training_records: List[TrainingRecord] = []
        self._lock = threading.RLock()
        self._load_players(list(players) if players is not None else create_example_players(self.config))

    def _load_players(self, players: List[Player]) -> None:
        """Install a roster and reset disc, clock, scores and events.

        Parameters
        ----------
        players : List[Player]
            Players in draw order.
        """
        self.players = players
        holder = next((p for p in players if p.has_disc), None)
        for player in players:
            player.state.has_disc = player is holder
        if holder is not None:
            self.disc = DiscState(Vector2D(holder.position.x, holder.position.y), holder_id=holder.player_id)
        else:
            self.disc = DiscState(Vector2D(self.field.total_length / 2, self.field.centre_y))
        self.selected_player_id: Optional[str] = None
        self.sim_time = 0.0
        self.events: List[SimulationEvent] = []
        self.team_scores: Dict[int, int] = {1: 0, 2: 0}

    @classmethod
    def from_snapshot(
        cls,
        snapshot: FieldSnapshot,
        debugger: Optional[SimulationDebugger] = None,
        config: Optional[EngineConfig] = None,
    ) -> "FieldSimulation":
        """Resume a simulation from a frozen state.

        Parameters
        ----------
        snapshot : FieldSnapshot
            State to restore, including disc flight.
        debugger : SimulationDebugger | None, optional
            Optional telemetry sink.
        config : EngineConfig | None, optional
            Engine configuration; defaults to :data:`ENGINE_CONFIG`.

        Returns
        -------
        FieldSimulation
            Simulation positioned exactly as ``snapshot``.
        """
        players = [player_from_snapshot(p, config) for p in snapshot.players]
        simulation = cls(players=players, field=snapshot.field, debugger=debugger, config=config)
        disc = snapshot.disc
        holder = simulation._find_player(disc.holder_id) if disc.holder_id is not None else None
        if disc.in_flight:
            for player in simulation.players:
                player.state.has_disc = False
            simulation.disc = DiscState(Vector2D(disc.x, disc.y), velocity=Vector2D(disc.vx, disc.vy))
            simulation.disc.in_flight = True
        elif holder is not None:
            # The holder id outranks stale hasDisc flags.
            for player in simulation.players:
                player.state.has_disc = player is holder
            simulation.disc.attach(holder.player_id, holder.position)
        elif simulation.holder is None:
            simulation.disc.position = Vector2D(disc.x, disc.y)
        simulation.disc.thrown_by = disc.thrown_by
        return simulation

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def _find_player(self, player_id: str) -> Optional[Player]:
        """Return the player with ``player_id`` or ``None``.

        Parameters
        ----------
        player_id : str
            Identifier to look up.

        Returns
        -------
        Player | None
            Matching player.
        """
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def player_by_id(self, player_id: str) -> Player:
        """Return the player with ``player_id``.

        Parameters
        ----------
        player_id : str
            Identifier to look up.

        Returns
        -------
        Player
            Matching player.

        Raises
        ------
        KeyError
            If no player has ``player_id``.
        """
        player = self._find_player(player_id)
        if player is None:
            raise KeyError(player_id)
        return player

    @property
    def holder(self) -> Optional[Player]:
        """Return the player holding the disc, if any."""
        if self.disc.holder_id is None:
            return None
        return self._find_player(self.disc.holder_id)

    @property
    def selected_player(self) -> Optional[Player]:
        """Return the selected player, if any."""
        if self.selected_player_id is None:
            return None
        return self._find_player(self.selected_player_id)

    def snapshot(self) -> FieldSnapshot:
        """Freeze the current state.

        Returns
        -------
        FieldSnapshot
            Immutable copy of players, disc and field.
        """
        with self._lock:
            disc = self.disc
            return FieldSnapshot(
                players=tuple(snapshot_from_player(p) for p in self.players),
                disc=DiscSnapshot(
                    x=disc.position.x,
                    y=disc.position.y,
                    vx=disc.velocity.x,
                    vy=disc.velocity.y,
                    holder_id=disc.holder_id,
                    in_flight=disc.in_flight,
                    thrown_by=disc.thrown_by,
                ),
                field=self.field,
            )

    # ------------------------------------------------------------------
    # Real-time loop
    # ------------------------------------------------------------------
    def start(self, duration: Optional[float] = None) -> None:
        """Run the simulation in real time until :meth:`stop` is called.

        Parameters
        ----------
        duration : float | None, optional
            Stop automatically after this many simulated seconds.
        """
        self.is_running = True
        last_update = time.time()
        sim_cfg = self.config.simulation

        while self.is_running:
            if duration is not None and self.sim_time >= duration:
                break
            current_time = time.time()
            dt = min(current_time - last_update, sim_cfg.max_frame_dt) * self.simulation_speed
            self.update(dt)
            last_update = current_time

            # Small sleep to prevent excessive CPU usage
            time.sleep(sim_cfg.frame_sleep)
        self.is_running = False

    def stop(self) -> None:
        """Stop the real-time loop."""
        self.is_running = False

    def toggle_pause(self) -> bool:
        """Freeze or resume ticking.

        Returns
        -------
        bool
            New paused state.
        """
        self.paused = not self.paused
        return self.paused

    def reset(self) -> None:
        """Restore the example scenario and clear scores and events."""
        with self._lock:
            self._load_players(create_example_players(self.config))
        if self.debugger:
            self.debugger.log_simulation_event(0.0, "reset", "Scenario reset")

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------
    def update(self, dt: float) -> None:
        """Advance players and disc by one tick.

        Players move first, each clamped to the field. A flying disc is then
        integrated and, if still flying, offered to the first eligible player
        within catch range. A held disc snaps onto its holder.

        Parameters
        ----------
        dt : float
            Tick length in seconds; ignored while paused or when not positive.
        """
        if self.paused or dt <= 0:
            return

        with self._lock:
            for player in self.players:
                phase = player.state.phase
                advance_player(player.state, player.profile, dt, self.config.player_movement)
                player.state.position = self.field.constrain_to_bounds(player.state.position)
                if self.debugger and player.state.phase is not phase:
                    self._log_player(player)

            disc = self.disc
            if disc.in_flight:
                landed = disc.update(dt, self.config.disc_physics)
                disc.position = self.field.constrain_to_bounds(disc.position)
                if self.debugger:
                    self.debugger.log_disc_state(
                        self.sim_time,
                        (disc.position.x, disc.position.y),
                        (disc.velocity.x, disc.velocity.y),
                        in_flight=disc.in_flight,
                    )
                if disc.in_flight:
                    catcher = self._find_catcher()
                    if catcher is not None:
                        self._complete_catch(catcher)
                elif landed:
                    self._record_turnover()

            holder = self.holder
            if holder is not None:
                disc.position = Vector2D(holder.position.x, holder.position.y)

            self.sim_time += dt

    def _log_player(self, player: Player) -> None:
        """Write a player's kinematic state to the debugger.

        Parameters
        ----------
        player : Player
            Player to log.
        """
        state = player.state
        target = (state.target.x, state.target.y) if state.target else None
        self.debugger.log_player_state(
            self.sim_time,
            player.player_id,
            player.team,
            (state.position.x, state.position.y),
            state.phase.value,
            state.current_speed,
            target,
        )

    def _find_catcher(self) -> Optional[Player]:
        """Return the first eligible player within catch range of the disc.

        Returns
        -------
        Player | None
            Catching player in list order.
        """
        cfg = self.config.disc_physics
        for player in self.players:
            if not cfg.thrower_can_catch and player.player_id == self.disc.thrown_by:
                continue
            if player.position.distance_to(self.disc.position) < cfg.catch_radius:
                return player
        return None

    def _complete_catch(self, player: Player) -> None:
        """Hand the disc to ``player`` and record the outcome.

        Parameters
        ----------
        player : Player
            Catching player.
        """
        for other in self.players:
            other.state.has_disc = False
        player.state.has_disc = True
        self.disc.attach(player.player_id, player.position)

        x, y = player.position.x, player.position.y
        if player.is_defender:
            self._record_event("block", f"Player {player.player_id} blocks at ({x:.1f}, {y:.1f})", player)
        elif x <= self.field.scoring_line:
            self.team_scores[player.team] = self.team_scores.get(player.team, 0) + 1
            self._record_event(
                "goal",
                f"GOAL! {player.player_id} scores. Score: {self.team_scores[1]}-{self.team_scores[2]}",
                player,
            )
        else:
            self._record_event("catch", f"Player {player.player_id} caught the disc at ({x:.1f}, {y:.1f})", player)

    def _record_turnover(self) -> None:
        """Log a disc that came to rest without being caught."""
        thrower = self._find_player(self.disc.thrown_by) if self.disc.thrown_by else None
        team = None
        if thrower is not None:
            team = 2 if thrower.team == 1 else 1
        position = self.disc.position
        event = SimulationEvent(
            self.sim_time,
            "turnover",
            f"Disc landed uncaught at ({position.x:.1f}, {position.y:.1f})",
            team=team,
        )
        self._append_event(event)

    def _record_event(self, event_type: str, description: str, player: Player) -> None:
        """Append an event credited to ``player``.

        Parameters
        ----------
        event_type : str
            Event category.
        description : str
            Human-readable summary.
        player : Player
            Player involved.
        """
        self._append_event(
            SimulationEvent(self.sim_time, event_type, description, player_id=player.player_id, team=player.team)
        )

    def _append_event(self, event: SimulationEvent) -> None:
        """Store an event and mirror it to the debugger.

        Parameters
        ----------
        event : SimulationEvent
            Event to store.
        """
        self.events.append(event)
        if self.debugger:
            self.debugger.log_simulation_event(event.timestamp, event.event_type, event.description)

    # ------------------------------------------------------------------
    # Disc control
    # ------------------------------------------------------------------
    def catch_disc(self, player_id: str) -> None:
        """Give the disc to a player immediately.

        Parameters
        ----------
        player_id : str
            Player who receives the disc.

        Raises
        ------
        KeyError
            If no player has ``player_id``.
        """
        with self._lock:
            self._complete_catch(self.player_by_id(player_id))

    def throw_disc(self, target_x: float, target_y: float, speed: Optional[float] = None) -> bool:
        """Release the disc from its holder toward a point.

        Parameters
        ----------
        target_x : float
            Target length coordinate.
        target_y : float
            Target width coordinate.
        speed : float | None, optional
            Release speed; defaults to configuration.

        Returns
        -------
        bool
            ``False`` when nobody holds the disc and nothing happened.
        """
        with self._lock:
            thrower = self.holder
            if thrower is None:
                return False
            speed = self.config.simulation.default_throw_speed if speed is None else speed
            thrower.state.has_disc = False
            self.disc.release(Vector2D(target_x, target_y), speed, thrower.player_id)
            self._record_event(
                "throw",
                f"Player {thrower.player_id} throws to ({target_x:.1f}, {target_y:.1f})",
                thrower,
            )
            return True

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------
    def get_player_at(self, x: float, y: float) -> Optional[Player]:
        """Hit-test a field point against players, topmost first.

        Parameters
        ----------
        x : float
            Length coordinate.
        y : float
            Width coordinate.

        Returns
        -------
        Player | None
            Last player in draw order within the click radius.
        """
        radius = self.config.interaction.click_hit_radius
        for player in reversed(self.players):
            dx = x - player.position.x
            dy = y - player.position.y
            if dx * dx + dy * dy <= radius * radius:
                return player
        return None

    def select_player(self, player_id: Optional[str]) -> None:
        """Select a player, or clear the selection with ``None``.

        Parameters
        ----------
        player_id : str | None
            Player to select.

        Raises
        ------
        KeyError
            If no player has ``player_id``.
        """
        if player_id is not None:
            self.player_by_id(player_id)
        self.selected_player_id = player_id

    def clear_selection(self) -> None:
        """Deselect any selected player."""
        self.selected_player_id = None

    def move_player_to(self, player_id: str, x: float, y: float) -> Vector2D:
        """Teleport a player, stopping them and dragging a held disc along.

        Parameters
        ----------
        player_id : str
            Player to move.
        x : float
            Requested length coordinate.
        y : float
            Requested width coordinate.

        Returns
        -------
        Vector2D
            Clamped position the player ended up at.

        Raises
        ------
        KeyError
            If no player has ``player_id``.
        """
        with self._lock:
            player = self.player_by_id(player_id)
            position = self.field.constrain_to_bounds(Vector2D(x, y))
            player.state.position = position
            player.state.halt()
            if player.has_disc and self.disc.holder_id == player.player_id:
                self.disc.position = Vector2D(position.x, position.y)
            return position

    def set_player_target(self, player_id: str, x: Optional[float], y: Optional[float]) -> Optional[Vector2D]:
        """Send a player running toward a point, or clear their target.

        Parameters
        ----------
        player_id : str
            Player to direct.
        x : float | None
            Target length coordinate; ``None`` clears the target.
        y : float | None
            Target width coordinate; ``None`` clears the target.

        Returns
        -------
        Vector2D | None
            Clamped target, or ``None`` when cleared.

        Raises
        ------
        KeyError
            If no player has ``player_id``.
        """
        with self._lock:
            player = self.player_by_id(player_id)
            if x is None or y is None:
                player.state.set_target(None)
                return None
            target = self.field.constrain_to_bounds(Vector2D(x, y))
            player.state.set_target(target)
            return target

    # ------------------------------------------------------------------
    # Heat maps
    # ------------------------------------------------------------------
    def set_heat_map_mode_enabled(self, mode: str, enabled: bool) -> None:
        """Switch one heat-map layer on or off.

        Parameters
        ----------
        mode : str
            Layer key: ``"catch"``, ``"difficulty"``, ``"markingDifficulty"``
            or ``"coverage"``.
        enabled : bool
            New toggle value.

        Raises
        ------
        ValueError
            If ``mode`` is not a known layer.
        """
        self.heat_map_modes = self.heat_map_modes.with_mode(mode, enabled)

    def toggle_heat_map_mode(self, mode: str) -> bool:
        """Flip one heat-map layer.

        Parameters
        ----------
        mode : str
            Layer key.

        Returns
        -------
        bool
            New toggle value.
        """
        enabled = not self.heat_map_modes.to_dict().get(mode, False)
        self.set_heat_map_mode_enabled(mode, enabled)
        return enabled

    def disable_heat_maps(self) -> None:
        """Switch every heat-map layer off."""
        self.heat_map_modes = HeatMapModes()

    def get_heat_map_modes(self) -> Dict[str, bool]:
        """Return the layer toggles keyed by layer name.

        Returns
        -------
        Dict[str, bool]
            Copy of the current toggles.
        """
        return self.heat_map_modes.to_dict()

    def is_any_heat_map_enabled(self) -> bool:
        """Return ``True`` when at least one layer is on.

        Returns
        -------
        bool
            Whether a heat map would be produced.
        """
        return self.heat_map_modes.any_enabled

    def set_heat_map_normalize(self, normalize: bool) -> None:
        """Choose whether combined grids are rescaled into ``[0, 1]``.

        Parameters
        ----------
        normalize : bool
            New setting.
        """
        self.heat_map_normalize = bool(normalize)

    def set_heat_map_grid_size(self, grid_size: float) -> None:
        """Change the heat-map cell size.

        Parameters
        ----------
        grid_size : float
            Cell edge length in yards.

        Raises
        ------
        ValueError
            If ``grid_size`` is not positive.
        """
        if not grid_size > 0:
            raise ValueError("grid_size must be positive")
        self.heat_map_grid_size = float(grid_size)

    def heat_map_options(self) -> HeatMapOptions:
        """Bundle the current heat-map settings.

        Returns
        -------
        HeatMapOptions
            Modes, grid size and normalisation.
        """
        return HeatMapOptions(
            modes=self.heat_map_modes,
            grid_size=self.heat_map_grid_size,
            normalize=self.heat_map_normalize,
        )

    def calculate_heat_map(self) -> Optional[HeatMapData]:
        """Compute the heat map for the current state and settings.

        Returns
        -------
        HeatMapData | None
            The grid, or ``None`` when unavailable.
        """
        started = time.perf_counter()
        heat_map = calculate_heat_map(self.snapshot(), self.heat_map_options(), self.config.heat_map)
        if heat_map is not None and self.debugger:
            self.debugger.log_heat_map(heat_map.mode, heat_map.shape, time.perf_counter() - started)
        return heat_map

    # ------------------------------------------------------------------
    # Positioning
    # ------------------------------------------------------------------
    def _apply_placement(self, placement: Optional[Placement], kind: str) -> Optional[Placement]:
        """Teleport the placed player and log the move.

        Parameters
        ----------
        placement : Placement | None
            Search result.
        kind : str
            Label for the log entry.

        Returns
        -------
        Placement | None
            ``placement`` unchanged.
        """
        if placement is None:
            return None
        self.move_player_to(placement.player_id, placement.x, placement.y)
        if self.debugger:
            self.debugger.log_simulation_event(
                self.sim_time,
                kind,
                f"{placement.player_id} -> ({placement.x:.1f}, {placement.y:.1f})",
            )
        return placement

    def position_defender(self, label: Optional[str] = None) -> Optional[Placement]:
        """Move the downfield defender to its best nearby cell.

        Parameters
        ----------
        label : str | None, optional
            Pair label selecting the defender and receiver.

        Returns
        -------
        Placement | None
            Applied placement, or ``None`` when the search had nothing to do.
        """
        placement = search_defender(self.snapshot(), self.heat_map_grid_size, label, self.config)
        return self._apply_placement(placement, "position_defender")

    def position_offender(self, label: Optional[str] = None, rng: Optional[random.Random] = None) -> Optional[Placement]:
        """Move a receiver to the best cell on the field.

        Parameters
        ----------
        label : str | None, optional
            Label of the receiver to move.
        rng : random.Random | None, optional
            Random source for weighted sampling instead of arg-max.

        Returns
        -------
        Placement | None
            Applied placement, or ``None`` when the search had nothing to do.
        """
        placement = search_offender(self.snapshot(), self.heat_map_grid_size, label, rng, self.config)
        return self._apply_placement(placement, "position_offender")

    def position_stack(self, label: Optional[str] = None) -> Optional[Placement]:
        """Move a receiver into the stack.

        Parameters
        ----------
        label : str | None, optional
            Label of the receiver to move.

        Returns
        -------
        Placement | None
            Applied placement, or ``None`` without a receiver.
        """
        placement = place_stack(self.snapshot(), label, self.config)
        return self._apply_placement(placement, "position_stack")

    # ------------------------------------------------------------------
    # Training data
    # ------------------------------------------------------------------
    def record_training_sample(self) -> Optional[TrainingRecord]:
        """Capture the downfield receiver and defender positions.

        Returns
        -------
        TrainingRecord | None
            Stored record, or ``None`` when either player is missing.
        """
        snapshot = self.snapshot()
        offender = find_offender(snapshot)
        defender = find_defender(snapshot)
        if offender is None or defender is None:
            return None
        record = TrainingRecord(offender.x, offender.y, defender.x, defender.y)
        self.training_records.append(record)
        return record
