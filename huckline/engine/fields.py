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
"""Scalar valuation fields evaluated at arbitrary field points.

Every function here accepts either plain floats or equally shaped numpy
arrays for the target coordinates, so the same formula serves single-point
queries and whole-grid evaluation. Scalar inputs yield a ``float``.
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

import numpy as np

from .config import ENGINE_CONFIG, HeatMapConfig
from .physics import Field, Vector2D
from .snapshot import FieldSnapshot, PlayerSnapshot

ArrayLike = Union[float, np.ndarray]


def _as_result(values: np.ndarray) -> ArrayLike:
    """Unwrap zero-dimensional arrays into plain floats.

    Parameters
    ----------
    values : numpy.ndarray
        Computed values.

    Returns
    -------
    float | numpy.ndarray
        ``float`` for scalar input, otherwise the array unchanged.
    """
    if values.ndim == 0:
        return float(values)
    return values


def mark_reference(field: Field, cfg: Optional[HeatMapConfig] = None) -> Tuple[float, float]:
    """Return the fixed point the mark's pressure direction aims at.

    Parameters
    ----------
    field : Field
        Field dimensions.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    Tuple[float, float]
        Reference coordinates, ``(0, field_width)`` unless configured.
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    ref_y = cfg.mark_reference_y if cfg.mark_reference_y is not None else field.field_width
    return cfg.mark_reference_x, ref_y


def catch_value(
    x: ArrayLike,
    y: ArrayLike,
    field: Field,
    disc_x: float,
    cfg: Optional[HeatMapConfig] = None,
) -> ArrayLike:
    """Value to the offense of the disc being caught at ``(x, y)``.

    The value is 1 inside the scoring end zone, 0 at and behind the back
    boundary, and ramps linearly in between. A width term penalises
    positions away from the centreline, steeply so close to the sidelines.

    Parameters
    ----------
    x : float | numpy.ndarray
        Length coordinates.
    y : float | numpy.ndarray
        Width coordinates.
    field : Field
        Field dimensions.
    disc_x : float
        Current disc x, used as the back boundary under the ``"disc"`` policy.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    float | numpy.ndarray
        Values in ``[0, 1]``.
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)

    front = field.scoring_line
    back = field.own_goal_line if cfg.catch_back_boundary == "own_end_zone" else float(disc_x)
    span = back - front
    if span > 0:
        progress = np.clip((back - xs) / span, 0.0, 1.0)
    else:
        progress = np.zeros_like(xs)

    half_width = field.field_width / 2
    norm = np.abs(ys - half_width) / half_width
    centre = 1.0 - cfg.center_linear_penalty * norm - cfg.center_steep_weight * norm**cfg.center_exponent

    value = np.clip(progress * centre, 0.0, 1.0)
    value = np.where(xs >= back, 0.0, value)
    value = np.where(xs <= front, 1.0, value)
    return _as_result(value)


def difficulty_at(
    x: ArrayLike,
    y: ArrayLike,
    disc_x: float,
    disc_y: float,
    cfg: Optional[HeatMapConfig] = None,
) -> ArrayLike:
    """Raw throw difficulty, linear in distance from the disc.

    Parameters
    ----------
    x : float | numpy.ndarray
        Length coordinates.
    y : float | numpy.ndarray
        Width coordinates.
    disc_x : float
        Disc length coordinate.
    disc_y : float
        Disc width coordinate.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    float | numpy.ndarray
        ``distance / difficulty_distance_scale``; ranges over
        ``[0, diagonal / scale]`` on the field (about 1.4 for defaults).
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    return _as_result(np.hypot(xs - disc_x, ys - disc_y) / cfg.difficulty_distance_scale)


def ease_at(
    thrower_x: float,
    thrower_y: float,
    x: ArrayLike,
    y: ArrayLike,
    field: Field,
    cfg: Optional[HeatMapConfig] = None,
) -> ArrayLike:
    """How far a throw to ``(x, y)`` points away from the mark's pressure.

    Parameters
    ----------
    thrower_x : float
        Thrower length coordinate.
    thrower_y : float
        Thrower width coordinate.
    x : float | numpy.ndarray
        Target length coordinates.
    y : float | numpy.ndarray
        Target width coordinates.
    field : Field
        Field dimensions, used for the mark reference point.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    float | numpy.ndarray
        0 for a throw straight along the mark direction, rising linearly to 1
        at the cutoff angle. 1 everywhere when the thrower sits on the
        reference point; 0 for a target on the thrower.
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)

    ref_x, ref_y = mark_reference(field, cfg)
    mark_dx = ref_x - thrower_x
    mark_dy = ref_y - thrower_y
    mark_len = float(np.hypot(mark_dx, mark_dy))
    if mark_len < cfg.degenerate_length:
        return _as_result(np.ones(np.broadcast(xs, ys).shape))
    mark_dx /= mark_len
    mark_dy /= mark_len

    throw_dx = xs - thrower_x
    throw_dy = ys - thrower_y
    throw_len = np.hypot(throw_dx, throw_dy)
    degenerate = throw_len < cfg.degenerate_length
    safe_len = np.where(degenerate, 1.0, throw_len)
    throw_dx = throw_dx / safe_len
    throw_dy = throw_dy / safe_len

    dot = mark_dx * throw_dx + mark_dy * throw_dy
    cross = mark_dx * throw_dy - mark_dy * throw_dx
    angle = np.abs(np.arctan2(cross, dot))

    ease = np.minimum(angle / cfg.ease_cutoff_angle, 1.0)
    return _as_result(np.where(degenerate, 0.0, ease))


def marking_difficulty_at(
    thrower_x: float,
    thrower_y: float,
    x: ArrayLike,
    y: ArrayLike,
    disc_x: float,
    disc_y: float,
    field: Field,
    cfg: Optional[HeatMapConfig] = None,
) -> ArrayLike:
    """Marking ease blended out with distance from the disc.

    Mark pressure only matters for short throws; the value tends to 1 as the
    target moves away from the disc.

    Parameters
    ----------
    thrower_x : float
        Thrower length coordinate.
    thrower_y : float
        Thrower width coordinate.
    x : float | numpy.ndarray
        Target length coordinates.
    y : float | numpy.ndarray
        Target width coordinates.
    disc_x : float
        Disc length coordinate.
    disc_y : float
        Disc width coordinate.
    field : Field
        Field dimensions.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    float | numpy.ndarray
        Values in ``[0, 1]``.
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)

    ease = np.asarray(ease_at(thrower_x, thrower_y, xs, ys, field, cfg))
    distance = np.hypot(xs - disc_x, ys - disc_y)
    factor = np.maximum(0.0, 1.0 - (distance / cfg.marking_distance_scale) / cfg.marking_distance_strength)
    return _as_result(1.0 - (1.0 - ease) * factor)


def _nearest_distance(xs: np.ndarray, ys: np.ndarray, players: Tuple[PlayerSnapshot, ...]) -> np.ndarray:
    """Distance from each point to the nearest of ``players``.

    Parameters
    ----------
    xs : numpy.ndarray
        Length coordinates.
    ys : numpy.ndarray
        Width coordinates.
    players : Tuple[PlayerSnapshot, ...]
        Candidate players.

    Returns
    -------
    numpy.ndarray
        Minimum distances, infinite where ``players`` is empty.
    """
    shape = np.broadcast(xs, ys).shape
    if not players:
        return np.full(shape, np.inf)
    px = np.array([p.x for p in players])
    py = np.array([p.y for p in players])
    distances = np.hypot(xs[..., np.newaxis] - px, ys[..., np.newaxis] - py)
    return distances.min(axis=-1)


def coverage_at(
    x: ArrayLike,
    y: ArrayLike,
    snapshot: FieldSnapshot,
    cfg: Optional[HeatMapConfig] = None,
) -> ArrayLike:
    """Defensive coverage of a point.

    A point is covered (0) when some downfield defender is at least as close
    as every receiver, half covered (0.5) when a defender is within half the
    throw distance, and open (1) otherwise. The thrower and the mark are left
    out. With no downfield defenders every point is open, even when there
    are no receivers either: two infinite distances never count as a tie.

    Parameters
    ----------
    x : float | numpy.ndarray
        Length coordinates.
    y : float | numpy.ndarray
        Width coordinates.
    snapshot : FieldSnapshot
        Player and disc positions.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    float | numpy.ndarray
        Values in ``{0, 0.5, 1}``.
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)

    min_offense = _nearest_distance(xs, ys, snapshot.offense)
    min_defense = _nearest_distance(xs, ys, snapshot.defense) + cfg.coverage_defender_handicap
    disc_distance = np.hypot(xs - snapshot.disc.x, ys - snapshot.disc.y)

    defended = np.isfinite(min_defense)
    from_closer = np.where(defended & (min_defense <= min_offense), 0.0, 1.0)
    from_half_disc = np.where(min_defense < disc_distance / 2, 0.5, 1.0)
    return _as_result(np.minimum(from_closer, from_half_disc))


def mark_line(
    snapshot: FieldSnapshot,
    length: float = 3.0,
    cfg: Optional[HeatMapConfig] = None,
) -> Optional[Tuple[Vector2D, Vector2D]]:
    """Segment through the mark perpendicular to the thrower's mark direction.

    The mark is drawn as this short line rather than as a player.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state; the thrower is the first disc holder.
    length : float, optional
        Total length of the segment in yards.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    Tuple[Vector2D, Vector2D] | None
        End points, or ``None`` without a thrower or mark, or with a
        degenerate mark direction.
    """
    thrower = snapshot.thrower
    mark = next((p for p in snapshot.players if p.is_mark), None)
    if thrower is None or mark is None:
        return None
    cfg = cfg or ENGINE_CONFIG.heat_map
    ref_x, ref_y = mark_reference(snapshot.field, cfg)
    direction = Vector2D(ref_x - thrower.x, ref_y - thrower.y)
    if direction.magnitude() < cfg.degenerate_length:
        return None
    unit = direction.normalize()
    perpendicular = Vector2D(-unit.y, unit.x) * (length / 2)
    centre = Vector2D(mark.x, mark.y)
    return centre - perpendicular, centre + perpendicular
