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
"""Grid-search placement of players against the combined heat map.

All searches score configurations with the unnormalised four-layer product;
normalised grids are never compared across configurations.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import ENGINE_CONFIG, EngineConfig
from .heatmap import MODE_KEYS, build_layers, cell_centres, combine_layers, combined_product, coverage_layer
from .snapshot import FieldSnapshot, PlayerSnapshot


@dataclass(frozen=True)
class Placement:
    """Suggested new position for one player.

    Parameters
    ----------
    player_id : str
        Player to move.
    x : float
        New length coordinate.
    y : float
        New width coordinate.
    score : float | None, optional
        Objective value at the chosen position, when one was computed.
    """

    player_id: str
    x: float
    y: float
    score: Optional[float] = None


def find_offender(snapshot: FieldSnapshot, label: Optional[str] = None) -> Optional[PlayerSnapshot]:
    """Return the first receiver, optionally with a given label.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state.
    label : str | None, optional
        Label to match; ``None`` accepts any receiver.

    Returns
    -------
    PlayerSnapshot | None
        First non-defender without the disc matching ``label``.
    """
    for player in snapshot.offense:
        if label is None or player.label == label:
            return player
    return None


def find_defender(snapshot: FieldSnapshot, label: Optional[str] = None) -> Optional[PlayerSnapshot]:
    """Return the first downfield defender, optionally with a given label.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state.
    label : str | None, optional
        Label to match; ``None`` accepts any downfield defender.

    Returns
    -------
    PlayerSnapshot | None
        First defender that is neither the mark nor holding the disc and
        matches ``label``.
    """
    thrower = snapshot.thrower
    for player in snapshot.defense:
        if player.has_disc or player is thrower:
            continue
        if label is None or player.label == label:
            return player
    return None


def position_defender(
    snapshot: FieldSnapshot,
    grid_size: Optional[float] = None,
    label: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> Optional[Placement]:
    """Find the cell near the receiver that minimises the offense's total value.

    Every cell centre within the search radius of the receiver is tried as
    the defender's position and the whole-grid product is summed. Only the
    coverage layer depends on the defender, so the other three layers are
    computed once and every candidate re-evaluates coverage over the full
    grid. The first minimum in x-major cell order wins.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state; not modified.
    grid_size : float | None, optional
        Cell edge length; defaults to configuration.
    label : str | None, optional
        Pair the defender and receiver sharing this label.
    config : EngineConfig | None, optional
        Engine configuration; defaults to :data:`ENGINE_CONFIG`.

    Returns
    -------
    Placement | None
        Best position for the defender, or ``None`` without a receiver,
        defender or thrower. When no cell lies within the radius the
        defender's current position is returned.
    """
    config = config or ENGINE_CONFIG
    cfg = config.heat_map
    grid_size = grid_size or cfg.grid_size

    offender = find_offender(snapshot, label)
    defender = find_defender(snapshot, label)
    if offender is None or defender is None:
        return None

    static_layers = build_layers(snapshot, MODE_KEYS[:3], grid_size, cfg)
    if static_layers is None:
        return None
    static_product = combine_layers(static_layers)

    xs, ys = cell_centres(snapshot.field, grid_size)
    radius = config.positioning.defender_search_radius
    within = (xs - offender.x) ** 2 + (ys - offender.y) ** 2 <= radius * radius

    best_sum = np.inf
    best_x, best_y = defender.x, defender.y
    for cell_x, cell_y in np.argwhere(within):
        cx, cy = snapshot.field.clamp(float(xs[cell_x, cell_y]), float(ys[cell_x, cell_y]))
        trial = snapshot.with_player_position(defender.player_id, cx, cy)
        total = float((static_product * coverage_layer(trial, xs, ys, cfg)).sum())
        if total < best_sum:
            best_sum = total
            best_x, best_y = cx, cy

    score = best_sum if np.isfinite(best_sum) else None
    return Placement(player_id=defender.player_id, x=best_x, y=best_y, score=score)


def position_offender(
    snapshot: FieldSnapshot,
    grid_size: Optional[float] = None,
    label: Optional[str] = None,
    rng: Optional[random.Random] = None,
    config: Optional[EngineConfig] = None,
) -> Optional[Placement]:
    """Find the best cell on the whole field for a receiver.

    Without ``rng`` the cell with the highest product wins, first in x-major
    order on ties. With ``rng`` a cell is sampled with probability
    proportional to its product.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state; not modified.
    grid_size : float | None, optional
        Cell edge length; defaults to configuration.
    label : str | None, optional
        Label of the receiver to move.
    rng : random.Random | None, optional
        Random source for weighted sampling.
    config : EngineConfig | None, optional
        Engine configuration; defaults to :data:`ENGINE_CONFIG`.

    Returns
    -------
    Placement | None
        Chosen cell, or ``None`` without a receiver or thrower, or when
        sampling finds no positive weight.
    """
    config = config or ENGINE_CONFIG
    grid_size = grid_size or config.heat_map.grid_size

    offender = find_offender(snapshot, label)
    if offender is None:
        return None
    product = combined_product(snapshot, grid_size, config.heat_map)
    if product is None:
        return None

    flat = product.ravel()
    if rng is None:
        index = int(np.argmax(flat))
    else:
        total = float(flat.sum())
        if total <= 0:
            return None
        threshold = rng.random() * total
        cumulative = np.cumsum(flat)
        index = min(int(np.searchsorted(cumulative, threshold)), flat.size - 1)

    cell_x, cell_y = np.unravel_index(index, product.shape)
    xs, ys = cell_centres(snapshot.field, grid_size)
    cx, cy = snapshot.field.clamp(float(xs[cell_x, cell_y]), float(ys[cell_x, cell_y]))
    return Placement(player_id=offender.player_id, x=cx, y=cy, score=float(flat[index]))


def position_stack(
    snapshot: FieldSnapshot,
    label: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> Optional[Placement]:
    """Place a receiver in the stack downfield of the disc.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state; not modified.
    label : str | None, optional
        Label of the receiver to move.
    config : EngineConfig | None, optional
        Engine configuration; defaults to :data:`ENGINE_CONFIG`.

    Returns
    -------
    Placement | None
        Centre-width spot ``stack_depth`` yards toward the scoring end zone
        from the disc, or ``None`` without a receiver.
    """
    config = config or ENGINE_CONFIG
    offender = find_offender(snapshot, label)
    if offender is None:
        return None
    x, y = snapshot.field.clamp(
        snapshot.disc.x - config.positioning.stack_depth,
        snapshot.field.field_width / 2,
    )
    return Placement(player_id=offender.player_id, x=x, y=y)
