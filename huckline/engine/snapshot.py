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
"""Immutable snapshots of the field used by the valuation engine.

Heat maps and positioning searches never touch the live simulation; they read
a :class:`FieldSnapshot` so that candidate positions can be tried without
side effects. Snapshots also define the camelCase wire format shared by the
compute service and scenario files.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Tuple

from .physics import Field


@dataclass(frozen=True)
class PlayerSnapshot:
    """Frozen copy of one player's observable state.

    Parameters
    ----------
    player_id : str
        Unique identifier for the player.
    team : int
        Team number, ``1`` or ``2``.
    x : float
        Length coordinate in yards.
    y : float
        Width coordinate in yards.
    has_disc : bool, optional
        Whether the player holds the disc.
    is_defender : bool, optional
        Whether the player defends.
    is_mark : bool, optional
        Whether the player guards the thrower.
    color : str, optional
        Display colour as a hex string.
    label : str | None, optional
        Positioning tag such as ``"O1"``.
    vx : float, optional
        Velocity along x in yards per second.
    vy : float, optional
        Velocity along y in yards per second.
    current_speed : float, optional
        Scalar running speed.
    phase : str, optional
        Name of the current motion phase.
    target_x : float | None, optional
        Target x coordinate, when running toward a target.
    target_y : float | None, optional
        Target y coordinate, when running toward a target.
    previous_target_x : float | None, optional
        Target x coordinate seen on the previous tick.
    previous_target_y : float | None, optional
        Target y coordinate seen on the previous tick.
    top_speed : float | None, optional
        Top running speed; ``None`` means the configured default.
    acceleration : float | None, optional
        Acceleration; ``None`` means the configured default.
    deceleration : float | None, optional
        Deceleration; ``None`` means the configured default.
    """

    player_id: str
    team: int
    x: float
    y: float
    has_disc: bool = False
    is_defender: bool = False
    is_mark: bool = False
    color: str = "#ef4444"
    label: Optional[str] = None
    vx: float = 0.0
    vy: float = 0.0
    current_speed: float = 0.0
    phase: str = "idle"
    target_x: Optional[float] = None
    target_y: Optional[float] = None
    previous_target_x: Optional[float] = None
    previous_target_y: Optional[float] = None
    top_speed: Optional[float] = None
    acceleration: Optional[float] = None
    deceleration: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the player with camelCase keys.

        Returns
        -------
        Dict[str, Any]
            JSON-compatible mapping.
        """
        return {
            "id": self.player_id,
            "team": self.team,
            "x": self.x,
            "y": self.y,
            "vx": self.vx,
            "vy": self.vy,
            "color": self.color,
            "hasDisc": self.has_disc,
            "isDefender": self.is_defender,
            "isMark": self.is_mark,
            "label": self.label,
            "currentSpeed": self.current_speed,
            "phase": self.phase,
            "target": _point_dict(self.target_x, self.target_y),
            "previousTarget": _point_dict(self.previous_target_x, self.previous_target_y),
            "topSpeed": self.top_speed,
            "acceleration": self.acceleration,
            "deceleration": self.deceleration,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlayerSnapshot":
        """Build a player snapshot from a camelCase mapping.

        A mapping without a ``previousTarget`` key is read as a player whose
        target has not changed since the last tick.

        Parameters
        ----------
        data : Dict[str, Any]
            Mapping with at least ``id``, ``team``, ``x`` and ``y``.

        Returns
        -------
        PlayerSnapshot
            Parsed snapshot.
        """
        target = data.get("target") or {}
        previous = data["previousTarget"] if "previousTarget" in data else target
        previous = previous or {}
        return cls(
            player_id=str(data["id"]),
            team=int(data["team"]),
            x=float(data["x"]),
            y=float(data["y"]),
            has_disc=bool(data.get("hasDisc", False)),
            is_defender=bool(data.get("isDefender", False)),
            is_mark=bool(data.get("isMark", False)),
            color=str(data.get("color", "#ef4444")),
            label=data.get("label"),
            vx=float(data.get("vx", 0.0)),
            vy=float(data.get("vy", 0.0)),
            current_speed=float(data.get("currentSpeed", 0.0)),
            phase=str(data.get("phase", "idle")),
            target_x=float(target["x"]) if "x" in target else None,
            target_y=float(target["y"]) if "y" in target else None,
            previous_target_x=float(previous["x"]) if "x" in previous else None,
            previous_target_y=float(previous["y"]) if "y" in previous else None,
            top_speed=_optional_float(data.get("topSpeed")),
            acceleration=_optional_float(data.get("acceleration")),
            deceleration=_optional_float(data.get("deceleration")),
        )


def _point_dict(x: Optional[float], y: Optional[float]) -> Optional[Dict[str, float]]:
    """Return ``{"x": x, "y": y}`` or ``None`` when either is missing.

    Parameters
    ----------
    x : float | None
        Length coordinate.
    y : float | None
        Width coordinate.

    Returns
    -------
    Dict[str, float] | None
        Point mapping.
    """
    if x is None or y is None:
        return None
    return {"x": x, "y": y}


def _optional_float(value: Any) -> Optional[float]:
    """Convert ``value`` to ``float``, passing ``None`` through.

    Parameters
    ----------
    value : Any
        Raw JSON value.

    Returns
    -------
    float | None
        Converted value.
    """
    return None if value is None else float(value)


@dataclass(frozen=True)
class DiscSnapshot:
    """Frozen copy of the disc state.

    Parameters
    ----------
    x : float
        Length coordinate in yards.
    y : float
        Width coordinate in yards.
    vx : float, optional
        Velocity along x in yards per second.
    vy : float, optional
        Velocity along y in yards per second.
    holder_id : str | None, optional
        Identifier of the holding player.
    in_flight : bool, optional
        Whether the disc is flying.
    thrown_by : str | None, optional
        Identifier of the player who released the current or last throw.
    """

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    holder_id: Optional[str] = None
    in_flight: bool = False
    thrown_by: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the disc with camelCase keys.

        Returns
        -------
        Dict[str, Any]
            JSON-compatible mapping.
        """
        return {
            "x": self.x,
            "y": self.y,
            "vx": self.vx,
            "vy": self.vy,
            "holderId": self.holder_id,
            "inFlight": self.in_flight,
            "thrownBy": self.thrown_by,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscSnapshot":
        """Build a disc snapshot from a camelCase mapping.

        Parameters
        ----------
        data : Dict[str, Any]
            Mapping with at least ``x`` and ``y``.

        Returns
        -------
        DiscSnapshot
            Parsed snapshot.
        """
        holder = data.get("holderId")
        thrown_by = data.get("thrownBy")
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            vx=float(data.get("vx", 0.0)),
            vy=float(data.get("vy", 0.0)),
            holder_id=str(holder) if holder is not None else None,
            in_flight=bool(data.get("inFlight", False)),
            thrown_by=str(thrown_by) if thrown_by is not None else None,
        )


@dataclass(frozen=True)
class FieldSnapshot:
    """Read-only view of every player, the disc and the field.

    Parameters
    ----------
    players : Tuple[PlayerSnapshot, ...]
        Players in their stable list order.
    disc : DiscSnapshot
        Disc state.
    field : Field
        Field dimensions.
    """

    players: Tuple[PlayerSnapshot, ...]
    disc: DiscSnapshot
    field: Field

    @property
    def thrower(self) -> Optional[PlayerSnapshot]:
        """Return the player holding the disc, if any.

        The disc's ``holder_id`` wins; the players' ``has_disc`` flags are
        only consulted when it is missing or unknown.
        """
        if self.disc.holder_id is not None and not self.disc.in_flight:
            holder = self.player_by_id(self.disc.holder_id)
            if holder is not None:
                return holder
        for player in self.players:
            if player.has_disc:
                return player
        return None

    @property
    def offense(self) -> Tuple[PlayerSnapshot, ...]:
        """Return attacking players other than the thrower."""
        thrower = self.thrower
        return tuple(p for p in self.players if not p.is_defender and not p.has_disc and p is not thrower)

    @property
    def defense(self) -> Tuple[PlayerSnapshot, ...]:
        """Return defenders other than the mark."""
        return tuple(p for p in self.players if p.is_defender and not p.is_mark)

    def player_by_id(self, player_id: str) -> Optional[PlayerSnapshot]:
        """Find a player by identifier.

        Parameters
        ----------
        player_id : str
            Identifier to look up.

        Returns
        -------
        PlayerSnapshot | None
            Matching player or ``None``.
        """
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def with_player_position(self, player_id: str, x: float, y: float) -> "FieldSnapshot":
        """Return a copy with one player moved.

        A player holding the disc carries it along.

        Parameters
        ----------
        player_id : str
            Identifier of the player to move.
        x : float
            New length coordinate.
        y : float
            New width coordinate.

        Returns
        -------
        FieldSnapshot
            New snapshot; ``self`` is unchanged.

        Raises
        ------
        KeyError
            If no player has ``player_id``.
        """
        moved = None
        players = []
        for player in self.players:
            if player.player_id == player_id:
                moved = replace(player, x=x, y=y)
                players.append(moved)
            else:
                players.append(player)
        if moved is None:
            raise KeyError(player_id)

        disc = self.disc
        if disc.holder_id == player_id:
            disc = replace(disc, x=x, y=y)
        return FieldSnapshot(players=tuple(players), disc=disc, field=self.field)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the snapshot as a game-state mapping.

        Returns
        -------
        Dict[str, Any]
            Mapping with ``players``, ``disc`` and ``field`` entries.
        """
        return {
            "players": [player.to_dict() for player in self.players],
            "disc": self.disc.to_dict(),
            "field": self.field.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FieldSnapshot":
        """Parse a game-state mapping.

        Parameters
        ----------
        data : Dict[str, Any]
            Mapping produced by :meth:`to_dict`. A missing ``field`` entry
            falls back to configured dimensions.

        Returns
        -------
        FieldSnapshot
            Parsed snapshot.

        Raises
        ------
        ValueError
            If required entries are missing or malformed.
        """
        try:
            players = tuple(PlayerSnapshot.from_dict(item) for item in data["players"])
            disc = DiscSnapshot.from_dict(data["disc"])
            field = Field.from_dict(data.get("field") or {})
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed game state: {exc}") from exc
        return cls(players=players, disc=disc, field=field)
