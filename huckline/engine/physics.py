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
"""Low-level physics primitives used by the field simulation.

The physics layer provides a small vector maths helper, the disc state
container, and a field representation that encodes the dimensions of an
ultimate field. Coordinates are in yards: ``x`` runs along the length of the
field from the scoring end zone (``x = 0``) to the offense's own end zone, and
``y`` runs across the width from one sideline (``y = 0``) to the other.
"""
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .config import ENGINE_CONFIG, DiscPhysicsConfig, FieldConfig


@dataclass
class Vector2D:
    """Two-dimensional vector with convenience operations.

    Parameters
    ----------
    x : float
        Component along the length of the field in yards.
    y : float
        Component across the width of the field in yards.
    """

    x: float
    y: float

    def __add__(self, other: "Vector2D") -> "Vector2D":
        """Return the vector sum of ``self`` and ``other``."""
        return Vector2D(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2D") -> "Vector2D":
        """Return the vector difference ``self - other``."""
        return Vector2D(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2D":
        """Scale the vector by ``scalar`` while preserving direction."""
        return Vector2D(self.x * scalar, self.y * scalar)

    def dot(self, other: "Vector2D") -> float:
        """Return the dot product of ``self`` and ``other``.

        Parameters
        ----------
        other : Vector2D
            Second operand.

        Returns
        -------
        float
            Sum of the component-wise products.
        """
        return self.x * other.x + self.y * other.y

    def magnitude(self) -> float:
        """Return the Euclidean length of the vector.

        Returns
        -------
        float
            Scalar magnitude measured in yards.
        """
        return math.sqrt(self.x * self.x + self.y * self.y)

    def normalize(self) -> "Vector2D":
        """Return a unit vector pointing in the same direction as ``self``.

        Returns
        -------
        Vector2D
            Normalised vector; zero vector when ``self`` has no magnitude.
        """
        mag = self.magnitude()
        if mag == 0:
            return Vector2D(0, 0)
        return Vector2D(self.x / mag, self.y / mag)

    def distance_to(self, other: "Vector2D") -> float:
        """Return the straight-line distance between ``self`` and ``other``.

        Parameters
        ----------
        other : Vector2D
            Vector whose separation from ``self`` should be measured.

        Returns
        -------
        float
            Euclidean distance in yards between the two points.
        """
        return (other - self).magnitude()


@dataclass(frozen=True)
class Field:
    """Immutable description of the playing surface.

    Offense attacks the end zone at low ``x``; the end zone at high ``x`` is
    the offense's own. The optional sideline strip extends the drawn area into
    negative ``x`` but is never part of the legal playing area.

    Parameters
    ----------
    field_length : float, optional
        Length of the playing field proper, excluding the end zones.
    field_width : float, optional
        Sideline-to-sideline width.
    end_zone_depth : float, optional
        Depth of each end zone.
    sideline_width : float, optional
        Width of the off-field strip rendered at negative ``x``.
    """

    field_length: float = 70.0
    field_width: float = 40.0
    end_zone_depth: float = 20.0
    sideline_width: float = 15.0

    @classmethod
    def from_config(cls, cfg: Optional[FieldConfig] = None) -> "Field":
        """Build a field from configuration.

        Parameters
        ----------
        cfg : FieldConfig | None, optional
            Dimension block to read; defaults to the engine configuration.

        Returns
        -------
        Field
            Field carrying the configured dimensions.
        """
        cfg = cfg or ENGINE_CONFIG.dimensions
        return cls(
            field_length=cfg.field_length,
            field_width=cfg.field_width,
            end_zone_depth=cfg.end_zone_depth,
            sideline_width=cfg.sideline_width,
        )

    @property
    def total_length(self) -> float:
        """Return the length including both end zones."""
        return self.field_length + 2 * self.end_zone_depth

    @property
    def scoring_line(self) -> float:
        """Return the ``x`` coordinate of the goal line the offense attacks."""
        return self.end_zone_depth

    @property
    def own_goal_line(self) -> float:
        """Return the ``x`` coordinate of the offense's own goal line."""
        return self.end_zone_depth + self.field_length

    @property
    def centre_y(self) -> float:
        """Return the ``y`` coordinate of the width centreline."""
        return self.field_width / 2

    def is_in_bounds(self, position: Vector2D) -> bool:
        """Check if position is within the playing area.

        Parameters
        ----------
        position : Vector2D
            Location to check for boundary compliance.

        Returns
        -------
        bool
            ``True`` when the position lies inside ``[0, total_length] x [0, field_width]``.
        """
        return 0 <= position.x <= self.total_length and 0 <= position.y <= self.field_width

    def clamp(self, x: float, y: float) -> Tuple[float, float]:
        """Clamp raw coordinates into the playing area.

        Parameters
        ----------
        x : float
            Length coordinate in yards.
        y : float
            Width coordinate in yards.

        Returns
        -------
        Tuple[float, float]
            Coordinates moved onto the nearest legal point.
        """
        return max(0.0, min(self.total_length, x)), max(0.0, min(self.field_width, y))

    def constrain_to_bounds(self, position: Vector2D) -> Vector2D:
        """Constrain position to the playing area.

        Parameters
        ----------
        position : Vector2D
            Location to clamp to the playable area.

        Returns
        -------
        Vector2D
            Adjusted position guaranteed to lie within the field limits.
        """
        x, y = self.clamp(position.x, position.y)
        return Vector2D(x, y)

    def to_dict(self) -> Dict[str, float]:
        """Serialise the dimensions using the wire format's camelCase keys.

        Returns
        -------
        Dict[str, float]
            Mapping with ``fieldLength``, ``fieldWidth``, ``endZoneDepth`` and
            the derived ``totalLength``.
        """
        return {
            "fieldLength": self.field_length,
            "fieldWidth": self.field_width,
            "endZoneDepth": self.end_zone_depth,
            "totalLength": self.total_length,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Field":
        """Build a field from a camelCase mapping.

        Parameters
        ----------
        data : Dict[str, Any]
            Mapping produced by :meth:`to_dict`. ``totalLength`` is derived and
            therefore ignored; missing keys fall back to configuration.

        Returns
        -------
        Field
            Field with the supplied dimensions.
        """
        cfg = ENGINE_CONFIG.dimensions
        return cls(
            field_length=float(data.get("fieldLength", cfg.field_length)),
            field_width=float(data.get("fieldWidth", cfg.field_width)),
            end_zone_depth=float(data.get("endZoneDepth", cfg.end_zone_depth)),
            sideline_width=float(data.get("sidelineWidth", cfg.sideline_width)),
        )


class DiscState:
    """Disc position, velocity and possession.

    A held disc is not simulated; the engine snaps it onto its holder each
    tick. ``in_flight`` and a non-null ``holder_id`` are mutually exclusive and
    every mutator below keeps them so. With no holder and no flight the disc
    lies inert at its last position.

    Parameters
    ----------
    position : Vector2D
        Initial disc coordinates.
    velocity : Vector2D | None, optional
        Initial velocity in yards per second; defaults to rest.
    holder_id : str | None, optional
        Identifier of the player holding the disc.
    """

    def __init__(
        self,
        position: Vector2D,
        velocity: Optional[Vector2D] = None,
        holder_id: Optional[str] = None,
    ) -> None:
        """Create a disc at rest, optionally held.

        Parameters
        ----------
        position : Vector2D
            Initial disc coordinates.
        velocity : Vector2D | None, optional
            Initial velocity in yards per second; defaults to rest.
        holder_id : str | None, optional
            Identifier of the player holding the disc.
        """
        self.position = position
        self.velocity = velocity if velocity is not None else Vector2D(0.0, 0.0)
        self.holder_id = holder_id
        self.in_flight = False
        self.thrown_by: Optional[str] = None

    def update(self, dt: float, cfg: Optional[DiscPhysicsConfig] = None) -> bool:
        """Advance a flying disc by one tick.

        Drag is a fixed per-tick multiplier, so the flight is frame-rate
        dependent; this is a known approximation rather than aerodynamics.

        Parameters
        ----------
        dt : float
            Simulation timestep in seconds since the previous update.
        cfg : DiscPhysicsConfig | None, optional
            Override for drag and stop threshold; defaults to configuration.

        Returns
        -------
        bool
            ``True`` when the disc came to rest during this tick.
        """
        if not self.in_flight:
            return False
        cfg = cfg or ENGINE_CONFIG.disc_physics

        self.position = self.position + self.velocity * dt
        self.velocity = self.velocity * cfg.drag

        if abs(self.velocity.x) < cfg.stop_threshold and abs(self.velocity.y) < cfg.stop_threshold:
            self.land()
            return True
        return False

    def release(self, target: Vector2D, speed: float, thrower_id: str) -> None:
        """Throw the disc from its current position toward ``target``.

        A zero-length throw leaves the velocity at rest; the disc still counts
        as released and lands on the next tick.

        Parameters
        ----------
        target : Vector2D
            Point the throw is aimed at.
        speed : float
            Release speed in yards per second.
        thrower_id : str
            Identifier of the releasing player.
        """
        direction = (target - self.position).normalize()
        self.velocity = direction * speed
        self.in_flight = True
        self.holder_id = None
        self.thrown_by = thrower_id

    def attach(self, holder_id: str, position: Vector2D) -> None:
        """Hand the disc to a player and stop it.

        Parameters
        ----------
        holder_id : str
            Identifier of the new holder.
        position : Vector2D
            Holder position the disc snaps onto.
        """
        self.in_flight = False
        self.velocity = Vector2D(0.0, 0.0)
        self.holder_id = holder_id
        self.position = Vector2D(position.x, position.y)

    def land(self) -> None:
        """Stop the disc where it is without a holder."""
        self.in_flight = False
        self.velocity = Vector2D(0.0, 0.0)
