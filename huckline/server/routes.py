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
"""Stateless compute endpoints.

Every request carries a complete game state; nothing is kept between calls.
"""

import logging
import random
from typing import Any, Optional

from fastapi import APIRouter, HTTPException

from huckline.engine.heatmap import calculate_heat_map, combined_heat_map_sum
from huckline.engine.positioning import Placement, position_defender, position_offender, position_stack
from huckline.engine.simulation import FieldSimulation
from huckline.engine.snapshot import FieldSnapshot

from .models import (
    GameStateModel,
    HeatMapRequest,
    HeatMapSumRequest,
    HeatMapSumResponse,
    PositionRequest,
    PositionResponse,
    ThrowRequest,
    UpdateRequest,
)

logger = logging.getLogger("huckline.server")

router = APIRouter(prefix="/api")


def _snapshot(state: GameStateModel) -> FieldSnapshot:
    """Convert a posted state, mapping engine validation errors to HTTP 422.

    Parameters
    ----------
    state : GameStateModel
        Validated request body section.

    Returns
    -------
    FieldSnapshot
        Engine snapshot.
    """
    try:
        return state.to_snapshot()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _simulation(state: GameStateModel) -> FieldSimulation:
    """Build a throwaway simulation from a posted state.

    Parameters
    ----------
    state : GameStateModel
        Validated request body section.

    Returns
    -------
    FieldSimulation
        Simulation positioned as ``state``.
    """
    try:
        return FieldSimulation.from_snapshot(_snapshot(state))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _placement_response(placement: Optional[Placement]) -> Optional[PositionResponse]:
    """Wrap a placement for the response body.

    Parameters
    ----------
    placement : Placement | None
        Search result.

    Returns
    -------
    PositionResponse | None
        Response model, or ``None`` when nothing was placed.
    """
    if placement is None:
        return None
    return PositionResponse(player_id=placement.player_id, x=placement.x, y=placement.y, score=placement.score)


@router.post("/heatmap")
def heatmap(req: HeatMapRequest) -> Optional[dict[str, Any]]:
    """Compute the combined heat map for the enabled layers.

    Parameters
    ----------
    req : HeatMapRequest
        Game state, layer toggles and grid settings.

    Returns
    -------
    dict[str, Any] | None
        Serialised grid, or ``null`` when no heat map is available.
    """
    data = calculate_heat_map(_snapshot(req.game_state), req.to_options())
    if data is None:
        return None
    return data.to_dict()


@router.post("/heatmap-sum")
def heatmap_sum(req: HeatMapSumRequest) -> HeatMapSumResponse:
    """Sum the unnormalised four-layer product over the grid.

    Parameters
    ----------
    req : HeatMapSumRequest
        Game state and grid size.

    Returns
    -------
    HeatMapSumResponse
        Total, ``null`` without a thrower.
    """
    return HeatMapSumResponse(sum=combined_heat_map_sum(_snapshot(req.game_state), req.grid_size))


@router.post("/position-defender")
def defender_position(req: PositionRequest) -> Optional[PositionResponse]:
    """Best nearby cell for the downfield defender.

    Parameters
    ----------
    req : PositionRequest
        Game state, grid size and optional pair label.

    Returns
    -------
    PositionResponse | None
        Placement, or ``null`` when the search had nothing to do.
    """
    placement = position_defender(_snapshot(req.game_state), req.grid_size, req.label)
    return _placement_response(placement)


@router.post("/position-offender")
def offender_position(req: PositionRequest) -> Optional[PositionResponse]:
    """Best cell for a receiver; sampled when a seed is given.

    Parameters
    ----------
    req : PositionRequest
        Game state, grid size, optional label and optional seed.

    Returns
    -------
    PositionResponse | None
        Placement, or ``null`` without a receiver or thrower.
    """
    rng = random.Random(req.seed) if req.seed is not None else None
    placement = position_offender(_snapshot(req.game_state), req.grid_size, req.label, rng)
    return _placement_response(placement)


@router.post("/position-stack")
def stack_position(req: PositionRequest) -> Optional[PositionResponse]:
    """Stack spot downfield of the disc.

    Parameters
    ----------
    req : PositionRequest
        Game state and optional label.

    Returns
    -------
    PositionResponse | None
        Placement, or ``null`` without a receiver.
    """
    return _placement_response(position_stack(_snapshot(req.game_state), req.label))


@router.post("/update")
def update(req: UpdateRequest) -> dict[str, Any]:
    """Advance the posted state by ``deltaTime`` seconds.

    Parameters
    ----------
    req : UpdateRequest
        Game state and tick length.

    Returns
    -------
    dict[str, Any]
        Updated game state.
    """
    simulation = _simulation(req.game_state)
    simulation.update(req.delta_time)
    return simulation.snapshot().to_dict()


@router.post("/throw")
def throw(req: ThrowRequest) -> dict[str, Any]:
    """Throw the disc toward ``(targetX, targetY)``.

    Parameters
    ----------
    req : ThrowRequest
        Game state, target and release speed.

    Returns
    -------
    dict[str, Any]
        Game state after the release; unchanged when nobody holds the disc.
    """
    simulation = _simulation(req.game_state)
    if not simulation.throw_disc(req.target_x, req.target_y, req.speed):
        logger.info("Throw ignored: nobody holds the disc")
    return simulation.snapshot().to_dict()
