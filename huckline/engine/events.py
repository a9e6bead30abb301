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
"""Event domain models for the field simulation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class SimulationEvent:
    """Record of a noteworthy moment during a simulation.

    Parameters
    ----------
    timestamp : float
        Seconds of simulated time when the event occurred.
    event_type : str
        Category of event: ``"throw"``, ``"catch"``, ``"block"``,
        ``"turnover"`` or ``"goal"``.
    description : str
        Human-readable summary of what happened.
    player_id : str | None, optional
        Player chiefly involved, when there is one.
    team : int | None, optional
        Team credited with the event, when there is one.
    """

    timestamp: float
    event_type: str  # throw, catch, block, turnover, goal
    description: str
    player_id: Optional[str] = None
    team: Optional[int] = None

    def to_dict(self) -> dict:
        """Serialise the event for JSON transport.

        Returns
        -------
        dict
            Mapping with camelCase keys.
        """
        return {
            "timestamp": self.timestamp,
            "eventType": self.event_type,
            "description": self.description,
            "playerId": self.player_id,
            "team": self.team,
        }
