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
"""Pydantic models for compute service requests and responses.

Payloads use camelCase keys so browser clients can post their game state
unchanged.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from huckline.engine.heatmap import HeatMapModes, HeatMapOptions
from huckline.engine.snapshot import FieldSnapshot


class CamelModel(BaseModel):
    """Base model accepting camelCase or snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PointModel(CamelModel):
    """A field point."""

    x: float
    y: float


class PlayerModel(CamelModel):
    """A player as posted by clients."""

    id: str
    team: int = Field(ge=1, le=2)
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    color: str = "#ef4444"
    has_disc: bool = False
    is_defender: bool = False
    is_mark: bool = False
    label: Optional[str] = None
    current_speed: float = Field(0.0, ge=0)
    phase: str = "idle"
    target: Optional[PointModel] = None
    previous_target: Optional[PointModel] = None
    top_speed: Optional[float] = Field(None, gt=0)
    acceleration: Optional[float] = Field(None, ge=0)
    deceleration: Optional[float] = Field(None, ge=0)


class DiscModel(CamelModel):
    """The disc as posted by clients."""

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    holder_id: Optional[str] = None
    in_flight: bool = False
    thrown_by: Optional[str] = None


class FieldModel(CamelModel):
    """Field dimensions; ``totalLength`` is accepted but recomputed."""

    field_length: float = Field(70.0, gt=0)
    field_width: float = Field(40.0, gt=0)
    end_zone_depth: float = Field(20.0, ge=0)
    total_length: Optional[float] = None


class GameStateModel(CamelModel):
    """Complete field state."""

    players: list[PlayerModel]
    disc: DiscModel
    field: FieldModel = Field(default_factory=FieldModel)

    def to_snapshot(self) -> FieldSnapshot:
        """Convert into an engine snapshot.

        Returns
        -------
        FieldSnapshot
            Equivalent immutable snapshot.
        """
        # Unset keys keep their engine defaults, e.g. a missing previousTarget.
        return FieldSnapshot.from_dict(self.model_dump(by_alias=True, exclude_unset=True))


class ModesModel(CamelModel):
    """Heat-map layer toggles."""

    catch: bool = False
    difficulty: bool = False
    marking_difficulty: bool = False
    coverage: bool = False


class HeatMapRequest(CamelModel):
    """Request for a heat-map grid."""

    game_state: GameStateModel
    modes: ModesModel = Field(default_factory=ModesModel)
    normalize: bool = True
    grid_size: float = Field(1.0, gt=0)

    def to_options(self) -> HeatMapOptions:
        """Convert the layer and grid settings.

        Returns
        -------
        HeatMapOptions
            Engine compositor options.
        """
        modes = HeatMapModes(
            catch=self.modes.catch,
            difficulty=self.modes.difficulty,
            marking_difficulty=self.modes.marking_difficulty,
            coverage=self.modes.coverage,
        )
        return HeatMapOptions(modes=modes, grid_size=self.grid_size, normalize=self.normalize)


class HeatMapSumRequest(CamelModel):
    """Request for the combined heat-map total."""

    game_state: GameStateModel
    grid_size: float = Field(1.0, gt=0)


class HeatMapSumResponse(BaseModel):
    """Combined total, ``None`` without a thrower."""

    sum: Optional[float]


class PositionRequest(CamelModel):
    """Request for a player placement."""

    game_state: GameStateModel
    grid_size: float = Field(1.0, gt=0)
    label: Optional[str] = None
    seed: Optional[int] = None


class PositionResponse(CamelModel):
    """Suggested placement."""

    player_id: str
    x: float
    y: float
    score: Optional[float] = None


class UpdateRequest(CamelModel):
    """Request to advance a state by one tick."""

    game_state: GameStateModel
    delta_time: float = Field(ge=0)


class ThrowRequest(CamelModel):
    """Request to throw the disc."""

    game_state: GameStateModel
    target_x: float
    target_y: float
    speed: float = Field(30.0, ge=0)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    uptime_s: float
