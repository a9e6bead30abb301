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
"""Domain model for a player on the field."""
from dataclasses import dataclass, field
from typing import Optional

from huckline.engine.kinematics import MovementProfile, PlayerState
from huckline.engine.physics import Vector2D

OFFENSE_COLOR = "#ef4444"
DEFENSE_COLOR = "#3b82f6"


@dataclass
class Player:
    """Player identity, role flags and kinematic state.

    Parameters
    ----------
    player_id : str
        Unique identifier for the player.
    team : int
        Team number, ``1`` or ``2``.
    state : PlayerState
        Mutable kinematic state.
    color : str, optional
        Display colour as a hex string.
    is_defender : bool, optional
        Whether the player defends.
    is_mark : bool, optional
        Whether the player guards the thrower. Only meaningful for defenders.
    label : str | None, optional
        Tag used to address the player from positioning commands, for example
        ``"O1"`` or ``"D2"``.
    profile : MovementProfile, optional
        Movement capabilities; defaults to configuration values.
    """

    player_id: str
    team: int
    state: PlayerState
    color: str = OFFENSE_COLOR
    is_defender: bool = False
    is_mark: bool = False
    label: Optional[str] = None
    profile: MovementProfile = field(default_factory=MovementProfile.from_config)

    def __post_init__(self) -> None:
        """Validate the team number."""
        if self.team not in (1, 2):
            raise ValueError("team must be 1 or 2")

    @property
    def position(self) -> Vector2D:
        """Return the player's current position."""
        return self.state.position

    @property
    def has_disc(self) -> bool:
        """Return ``True`` while the player holds the disc."""
        return self.state.has_disc

    @property
    def is_offense(self) -> bool:
        """Return ``True`` for non-defending players."""
        return not self.is_defender
