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
"""Scenario construction, persistence and training-data exchange.

A scenario is a :class:`~huckline.engine.snapshot.FieldSnapshot` stored as the
same camelCase JSON the compute service accepts. The helpers here also turn
snapshot entries back into live :class:`~huckline.models.player.Player`
objects so a simulation can resume from a saved file.

Training records capture downfield offender and defender positions. Imports
are all-or-nothing: a malformed file raises before any record is returned.
"""
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from huckline.engine.config import ENGINE_CONFIG, EngineConfig
from huckline.engine.kinematics import MotionPhase, MovementProfile, PlayerState
from huckline.engine.physics import Vector2D
from huckline.engine.snapshot import FieldSnapshot, PlayerSnapshot
from huckline.models.player import DEFENSE_COLOR, OFFENSE_COLOR, Player


def create_example_players(config: Optional[EngineConfig] = None) -> List[Player]:
    """Build the default four-player scenario.

    The thrower stands on the offense's side of midfield with the disc, the
    mark guards them, and one receiver is shadowed by one downfield defender.
    Pairs share a label so positioning commands can address them.

    Parameters
    ----------
    config : EngineConfig | None, optional
        Engine configuration used for movement profiles.

    Returns
    -------
    List[Player]
        Players in draw order.
    """
    config = config or ENGINE_CONFIG

    def make(player_id: str, team: int, x: float, y: float, **flags: Any) -> Player:
        has_disc = flags.pop("has_disc", False)
        color = DEFENSE_COLOR if flags.get("is_defender") else OFFENSE_COLOR
        player = Player(
            player_id=player_id,
            team=team,
            state=PlayerState(position=Vector2D(x, y), has_disc=has_disc),
            color=color,
            profile=MovementProfile.from_config(config.player_movement),
            **flags,
        )
        return player

    return [
        make("offense_1", 1, 80.0, 15.0, has_disc=True, label="1"),
        make("mark_1", 2, 81.0, 17.0, is_defender=True, is_mark=True, label="1"),
        make("offense_2", 1, 55.0, 15.0, label="2"),
        make("defender_2", 2, 55.0, 14.0, is_defender=True, label="2"),
    ]


def snapshot_from_player(player: Player) -> PlayerSnapshot:
    """Freeze a live player into a snapshot entry.

    Parameters
    ----------
    player : Player
        Player to copy.

    Returns
    -------
    PlayerSnapshot
        Observable state of ``player``.
    """
    state = player.state
    target = state.target
    previous = state.previous_target
    return PlayerSnapshot(
        player_id=player.player_id,
        team=player.team,
        x=state.position.x,
        y=state.position.y,
        has_disc=state.has_disc,
        is_defender=player.is_defender,
        is_mark=player.is_mark,
        color=player.color,
        label=player.label,
        vx=state.velocity.x,
        vy=state.velocity.y,
        current_speed=state.current_speed,
        phase=state.phase.value,
        target_x=target.x if target is not None else None,
        target_y=target.y if target is not None else None,
        previous_target_x=previous.x if previous is not None else None,
        previous_target_y=previous.y if previous is not None else None,
        top_speed=player.profile.top_speed,
        acceleration=player.profile.acceleration,
        deceleration=player.profile.deceleration,
    )


def _point(x: Optional[float], y: Optional[float]) -> Optional[Vector2D]:
    """Return a vector for a complete coordinate pair, else ``None``.

    Parameters
    ----------
    x : float | None
        Length coordinate.
    y : float | None
        Width coordinate.

    Returns
    -------
    Vector2D | None
        Point or ``None``.
    """
    if x is None or y is None:
        return None
    return Vector2D(x, y)


def player_from_snapshot(snapshot: PlayerSnapshot, config: Optional[EngineConfig] = None) -> Player:
    """Rebuild a live player from a snapshot entry.

    Movement capabilities missing from the snapshot fall back to the
    configured defaults.

    Parameters
    ----------
    snapshot : PlayerSnapshot
        Frozen player state.
    config : EngineConfig | None, optional
        Engine configuration supplying default capabilities.

    Returns
    -------
    Player
        Player with kinematic state and movement profile restored.

    Raises
    ------
    ValueError
        If the phase name or team number is not recognised.
    """
    defaults = MovementProfile.from_config((config or ENGINE_CONFIG).player_movement)
    profile = MovementProfile(
        top_speed=defaults.top_speed if snapshot.top_speed is None else snapshot.top_speed,
        acceleration=defaults.acceleration if snapshot.acceleration is None else snapshot.acceleration,
        deceleration=defaults.deceleration if snapshot.deceleration is None else snapshot.deceleration,
    )
    state = PlayerState(
        position=Vector2D(snapshot.x, snapshot.y),
        velocity=Vector2D(snapshot.vx, snapshot.vy),
        has_disc=snapshot.has_disc,
        current_speed=snapshot.current_speed,
        phase=MotionPhase(snapshot.phase),
        target=_point(snapshot.target_x, snapshot.target_y),
        previous_target=_point(snapshot.previous_target_x, snapshot.previous_target_y),
    )
    return Player(
        player_id=snapshot.player_id,
        team=snapshot.team,
        state=state,
        color=snapshot.color,
        is_defender=snapshot.is_defender,
        is_mark=snapshot.is_mark,
        label=snapshot.label,
        profile=profile,
    )


def load_scenario(path: str) -> FieldSnapshot:
    """Load a scenario saved by :func:`save_scenario`.

    Parameters
    ----------
    path : str
        JSON file to read.

    Returns
    -------
    FieldSnapshot
        Parsed field state.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    ValueError
        Raised when the file is not a valid game state.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Scenario JSON not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Scenario is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError("Scenario must be a JSON object")
    return FieldSnapshot.from_dict(data)


def save_scenario(snapshot: FieldSnapshot, path: str) -> None:
    """Write a scenario as indented JSON.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state to persist.
    path : str
        Destination file; parent directories are created.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as fh:
        json.dump(snapshot.to_dict(), fh, indent=2)


@dataclass(frozen=True)
class TrainingRecord:
    """Receiver and defender positions captured for model training.

    Parameters
    ----------
    offense_x : float
        Receiver length coordinate.
    offense_y : float
        Receiver width coordinate.
    defense_x : float
        Defender length coordinate.
    defense_y : float
        Defender width coordinate.
    """

    offense_x: float
    offense_y: float
    defense_x: float
    defense_y: float

    def to_dict(self) -> Dict[str, float]:
        """Serialise with camelCase keys.

        Returns
        -------
        Dict[str, float]
            Mapping with ``offenseX``, ``offenseY``, ``defenseX`` and ``defenseY``.
        """
        return {
            "offenseX": self.offense_x,
            "offenseY": self.offense_y,
            "defenseX": self.defense_x,
            "defenseY": self.defense_y,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "TrainingRecord":
        """Parse one record, rejecting incomplete or non-numeric entries.

        Parameters
        ----------
        data : Any
            Candidate mapping.

        Returns
        -------
        TrainingRecord
            Parsed record.

        Raises
        ------
        ValueError
            If ``data`` is not a mapping with four numeric coordinates.
        """
        if not isinstance(data, dict):
            raise ValueError("Training record must be an object")
        values = []
        for key in ("offenseX", "offenseY", "defenseX", "defenseY"):
            value = data.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Training record field {key!r} must be a number")
            values.append(float(value))
        return cls(*values)


def export_training_data(records: Sequence[TrainingRecord], path: str) -> None:
    """Write training records as a JSON array.

    Parameters
    ----------
    records : Sequence[TrainingRecord]
        Records to persist.
    path : str
        Destination file; parent directories are created.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as fh:
        json.dump([record.to_dict() for record in records], fh, indent=2)


def import_training_data(path: str) -> List[TrainingRecord]:
    """Read training records written by :func:`export_training_data`.

    Parameters
    ----------
    path : str
        JSON file to read.

    Returns
    -------
    List[TrainingRecord]
        Every record in file order.

    Raises
    ------
    FileNotFoundError
        Raised when ``path`` does not exist.
    ValueError
        Raised when the file is not a JSON array of complete records.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Training data not found: {path}")

    with p.open("r", encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Training data is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ValueError("Training data must be a JSON array")
    return [TrainingRecord.from_dict(item) for item in data]
