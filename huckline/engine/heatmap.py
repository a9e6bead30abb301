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
"""Heat-map compositor: grid evaluation and layer combination.

The field is divided into square cells of ``grid_size`` yards. Each enabled
layer is evaluated at every cell centre, the layers are multiplied together
(with difficulty inverted so easy throws score high), and the product is
optionally min-max normalised into ``[0, 1]``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .config import ENGINE_CONFIG, HeatMapConfig
from .fields import catch_value, coverage_at, difficulty_at, marking_difficulty_at
from .physics import Field
from .snapshot import FieldSnapshot

MODE_KEYS: Tuple[str, ...] = ("catch", "difficulty", "markingDifficulty", "coverage")
"""Layer keys in evaluation order, as used on the wire."""

COMBINED_MODE = "combined"

_ATTRIBUTES = {
    "catch": "catch",
    "difficulty": "difficulty",
    "markingDifficulty": "marking_difficulty",
    "coverage": "coverage",
}


@dataclass(frozen=True)
class HeatMapModes:
    """Independent toggles for the four valuation layers.

    Parameters
    ----------
    catch : bool, optional
        Enable the catch-value layer.
    difficulty : bool, optional
        Enable the throw-difficulty layer.
    marking_difficulty : bool, optional
        Enable the marking-difficulty layer.
    coverage : bool, optional
        Enable the coverage layer.
    """

    catch: bool = False
    difficulty: bool = False
    marking_difficulty: bool = False
    coverage: bool = False

    @classmethod
    def all_enabled(cls) -> "HeatMapModes":
        """Return modes with every layer switched on.

        Returns
        -------
        HeatMapModes
            All four toggles set.
        """
        return cls(catch=True, difficulty=True, marking_difficulty=True, coverage=True)

    def enabled_keys(self) -> Tuple[str, ...]:
        """Return the wire keys of enabled layers in evaluation order.

        Returns
        -------
        Tuple[str, ...]
            Subset of :data:`MODE_KEYS`.
        """
        return tuple(key for key in MODE_KEYS if getattr(self, _ATTRIBUTES[key]))

    @property
    def any_enabled(self) -> bool:
        """Return ``True`` when at least one layer is enabled."""
        return bool(self.enabled_keys())

    def with_mode(self, mode: str, enabled: bool) -> "HeatMapModes":
        """Return a copy with one layer toggled.

        Parameters
        ----------
        mode : str
            Wire key of the layer.
        enabled : bool
            New toggle value.

        Returns
        -------
        HeatMapModes
            Updated modes.

        Raises
        ------
        ValueError
            If ``mode`` is not one of :data:`MODE_KEYS`.
        """
        if mode not in _ATTRIBUTES:
            raise ValueError(f"Unknown heat map mode: {mode!r}")
        return replace(self, **{_ATTRIBUTES[mode]: bool(enabled)})

    def to_dict(self) -> Dict[str, bool]:
        """Serialise the toggles with wire keys.

        Returns
        -------
        Dict[str, bool]
            Mapping from each key in :data:`MODE_KEYS` to its toggle.
        """
        return {key: getattr(self, _ATTRIBUTES[key]) for key in MODE_KEYS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeatMapModes":
        """Parse toggles keyed by wire keys.

        Parameters
        ----------
        data : Dict[str, Any]
            Mapping with any subset of :data:`MODE_KEYS`; unknown keys raise.

        Returns
        -------
        HeatMapModes
            Parsed modes; missing keys are off.

        Raises
        ------
        ValueError
            If ``data`` contains an unknown key.
        """
        modes = cls()
        for key, enabled in data.items():
            modes = modes.with_mode(key, bool(enabled))
        return modes


@dataclass(frozen=True)
class HeatMapOptions:
    """Inputs that control a compositor run besides the field state.

    Parameters
    ----------
    modes : HeatMapModes, optional
        Layers to combine.
    grid_size : float, optional
        Cell edge length in yards.
    normalize : bool, optional
        Rescale the combined grid into ``[0, 1]``.
    """

    modes: HeatMapModes = field(default_factory=HeatMapModes)
    grid_size: float = 1.0
    normalize: bool = True

    def __post_init__(self) -> None:
        """Reject non-positive grid sizes."""
        if not self.grid_size > 0:
            raise ValueError("grid_size must be positive")


@dataclass
class HeatMapData:
    """Result of one compositor run.

    Parameters
    ----------
    grid_size : float
        Cell edge length in yards.
    values : numpy.ndarray
        Grid indexed ``[cell_x, cell_y]``.
    thrower_x : float
        Length coordinate used as the marking reference.
    thrower_y : float
        Width coordinate used as the marking reference.
    mode : str
        Single enabled layer key, or ``"combined"``.
    """

    grid_size: float
    values: np.ndarray
    thrower_x: float
    thrower_y: float
    mode: str

    @property
    def shape(self) -> Tuple[int, int]:
        """Return the number of cells along x and y."""
        return int(self.values.shape[0]), int(self.values.shape[1])

    def value_at(self, x: float, y: float) -> Optional[float]:
        """Return the value of the cell containing ``(x, y)``.

        Parameters
        ----------
        x : float
            Length coordinate.
        y : float
            Width coordinate.

        Returns
        -------
        float | None
            Cell value, or ``None`` outside the grid.
        """
        cell_x = math.floor(x / self.grid_size)
        cell_y = math.floor(y / self.grid_size)
        nx, ny = self.shape
        if not (0 <= cell_x < nx and 0 <= cell_y < ny):
            return None
        return float(self.values[cell_x, cell_y])

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the grid with camelCase keys.

        Returns
        -------
        Dict[str, Any]
            JSON-compatible mapping; ``values`` is a nested list.
        """
        return {
            "gridSize": self.grid_size,
            "values": self.values.tolist(),
            "throwerX": self.thrower_x,
            "throwerY": self.thrower_y,
            "mode": self.mode,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HeatMapData":
        """Parse a grid produced by :meth:`to_dict`.

        Parameters
        ----------
        data : Dict[str, Any]
            Serialised heat map.

        Returns
        -------
        HeatMapData
            Parsed heat map.

        Raises
        ------
        ValueError
            If entries are missing or ``values`` is not a 2D grid.
        """
        try:
            values = np.asarray(data["values"], dtype=float)
            result = cls(
                grid_size=float(data["gridSize"]),
                values=values,
                thrower_x=float(data["throwerX"]),
                thrower_y=float(data["throwerY"]),
                mode=str(data["mode"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed heat map: {exc}") from exc
        if values.ndim != 2:
            raise ValueError("Heat map values must be a 2D grid")
        return result


def grid_shape(field: Field, grid_size: float) -> Tuple[int, int]:
    """Return the number of cells covering the field.

    Parameters
    ----------
    field : Field
        Field dimensions.
    grid_size : float
        Cell edge length in yards.

    Returns
    -------
    Tuple[int, int]
        ``(ceil(total_length / grid_size), ceil(field_width / grid_size))``.
    """
    return math.ceil(field.total_length / grid_size), math.ceil(field.field_width / grid_size)


def cell_centres(field: Field, grid_size: float) -> Tuple[np.ndarray, np.ndarray]:
    """Return the coordinates of every cell centre.

    Parameters
    ----------
    field : Field
        Field dimensions.
    grid_size : float
        Cell edge length in yards.

    Returns
    -------
    Tuple[numpy.ndarray, numpy.ndarray]
        ``xs`` and ``ys`` arrays of shape :func:`grid_shape`, indexed
        ``[cell_x, cell_y]``.
    """
    nx, ny = grid_shape(field, grid_size)
    x_axis = np.arange(nx) * grid_size + grid_size / 2
    y_axis = np.arange(ny) * grid_size + grid_size / 2
    xs, ys = np.meshgrid(x_axis, y_axis, indexing="ij")
    return xs, ys


def catch_layer(snapshot: FieldSnapshot, xs: np.ndarray, ys: np.ndarray, cfg: HeatMapConfig) -> np.ndarray:
    """Catch value at each cell centre.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state.
    xs : numpy.ndarray
        Cell centre length coordinates.
    ys : numpy.ndarray
        Cell centre width coordinates.
    cfg : HeatMapConfig
        Heat-map tuning.

    Returns
    -------
    numpy.ndarray
        Layer values.
    """
    return catch_value(xs, ys, snapshot.field, snapshot.disc.x, cfg)


def difficulty_layer(snapshot: FieldSnapshot, xs: np.ndarray, ys: np.ndarray, cfg: HeatMapConfig) -> np.ndarray:
    """Throw difficulty scaled by its own grid maximum.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state.
    xs : numpy.ndarray
        Cell centre length coordinates.
    ys : numpy.ndarray
        Cell centre width coordinates.
    cfg : HeatMapConfig
        Heat-map tuning; ``difficulty_floor`` and ``difficulty_divisor`` are
        applied after scaling.

    Returns
    -------
    numpy.ndarray
        Layer values, within ``[0, 1]`` for default tuning.
    """
    raw = difficulty_at(xs, ys, snapshot.disc.x, snapshot.disc.y, cfg)
    peak = float(raw.max()) if raw.size else 0.0
    scaled = raw / peak if peak > 0 else np.zeros_like(raw)
    if cfg.difficulty_floor > 0:
        scaled = np.maximum(scaled, cfg.difficulty_floor)
    return scaled / cfg.difficulty_divisor


def marking_difficulty_layer(
    snapshot: FieldSnapshot, xs: np.ndarray, ys: np.ndarray, cfg: HeatMapConfig
) -> Optional[np.ndarray]:
    """Marking difficulty at each cell centre.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state.
    xs : numpy.ndarray
        Cell centre length coordinates.
    ys : numpy.ndarray
        Cell centre width coordinates.
    cfg : HeatMapConfig
        Heat-map tuning.

    Returns
    -------
    numpy.ndarray | None
        Layer values, or ``None`` when nobody holds the disc.
    """
    thrower = snapshot.thrower
    if thrower is None:
        return None
    disc = snapshot.disc
    return marking_difficulty_at(thrower.x, thrower.y, xs, ys, disc.x, disc.y, snapshot.field, cfg)


def coverage_layer(snapshot: FieldSnapshot, xs: np.ndarray, ys: np.ndarray, cfg: HeatMapConfig) -> np.ndarray:
    """Coverage at each cell centre.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state.
    xs : numpy.ndarray
        Cell centre length coordinates.
    ys : numpy.ndarray
        Cell centre width coordinates.
    cfg : HeatMapConfig
        Heat-map tuning.

    Returns
    -------
    numpy.ndarray
        Layer values in ``{0, 0.5, 1}``.
    """
    return coverage_at(xs, ys, snapshot, cfg)


LayerBuilder = Callable[[FieldSnapshot, np.ndarray, np.ndarray, HeatMapConfig], Optional[np.ndarray]]

LAYER_BUILDERS: Dict[str, LayerBuilder] = {
    "catch": catch_layer,
    "difficulty": difficulty_layer,
    "markingDifficulty": marking_difficulty_layer,
    "coverage": coverage_layer,
}


def combine_layers(layers: Sequence[Tuple[str, np.ndarray]]) -> np.ndarray:
    """Multiply layers cell by cell, inverting difficulty.

    Parameters
    ----------
    layers : Sequence[Tuple[str, numpy.ndarray]]
        ``(key, values)`` pairs in evaluation order; must not be empty.

    Returns
    -------
    numpy.ndarray
        Unnormalised product.
    """
    result = np.ones_like(layers[0][1], dtype=float)
    for key, values in layers:
        result = result * (1.0 - values if key == "difficulty" else values)
    return result


def normalize_grid(values: np.ndarray) -> np.ndarray:
    """Min-max rescale a grid into ``[0, 1]``.

    Parameters
    ----------
    values : numpy.ndarray
        Grid to rescale.

    Returns
    -------
    numpy.ndarray
        Rescaled copy; a flat grid is returned unchanged.
    """
    low = float(values.min())
    high = float(values.max())
    if high == low:
        return values.copy()
    return (values - low) / (high - low)


def build_layers(
    snapshot: FieldSnapshot, keys: Sequence[str], grid_size: float, cfg: HeatMapConfig
) -> Optional[List[Tuple[str, np.ndarray]]]:
    """Evaluate the requested layers over the grid.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state.
    keys : Sequence[str]
        Layer keys in evaluation order.
    grid_size : float
        Cell edge length in yards.
    cfg : HeatMapConfig
        Heat-map tuning.

    Returns
    -------
    List[Tuple[str, numpy.ndarray]] | None
        Evaluated layers, or ``None`` if any layer is unavailable.
    """
    xs, ys = cell_centres(snapshot.field, grid_size)
    layers = []
    for key in keys:
        values = LAYER_BUILDERS[key](snapshot, xs, ys, cfg)
        if values is None:
            return None
        layers.append((key, values))
    return layers


def calculate_heat_map(
    snapshot: FieldSnapshot,
    options: HeatMapOptions,
    cfg: Optional[HeatMapConfig] = None,
) -> Optional[HeatMapData]:
    """Compute the heat map for the enabled layers.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state to evaluate.
    options : HeatMapOptions
        Enabled layers, grid size and normalisation.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    HeatMapData | None
        The grid, or ``None`` when no layer is enabled or the marking layer
        is enabled without a thrower.
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    keys = options.modes.enabled_keys()
    if not keys:
        return None

    layers = build_layers(snapshot, keys, options.grid_size, cfg)
    if layers is None:
        return None

    values = combine_layers(layers)
    if options.normalize:
        values = normalize_grid(values)

    thrower = snapshot.thrower
    if options.modes.marking_difficulty and thrower is not None:
        thrower_x, thrower_y = thrower.x, thrower.y
    else:
        thrower_x, thrower_y = snapshot.disc.x, snapshot.disc.y

    mode = keys[0] if len(keys) == 1 else COMBINED_MODE
    return HeatMapData(
        grid_size=options.grid_size,
        values=values,
        thrower_x=thrower_x,
        thrower_y=thrower_y,
        mode=mode,
    )


def combined_product(
    snapshot: FieldSnapshot,
    grid_size: float,
    cfg: Optional[HeatMapConfig] = None,
) -> Optional[np.ndarray]:
    """Unnormalised product of all four layers.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state to evaluate.
    grid_size : float
        Cell edge length in yards.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    numpy.ndarray | None
        Product grid, or ``None`` without a thrower.
    """
    cfg = cfg or ENGINE_CONFIG.heat_map
    layers = build_layers(snapshot, MODE_KEYS, grid_size, cfg)
    if layers is None:
        return None
    return combine_layers(layers)


def combined_heat_map_sum(
    snapshot: FieldSnapshot,
    grid_size: float,
    cfg: Optional[HeatMapConfig] = None,
) -> Optional[float]:
    """Total of the unnormalised four-layer product over the grid.

    Lower totals mean a better configuration for the defense.

    Parameters
    ----------
    snapshot : FieldSnapshot
        Field state to evaluate.
    grid_size : float
        Cell edge length in yards.
    cfg : HeatMapConfig | None, optional
        Heat-map tuning; defaults to the engine configuration.

    Returns
    -------
    float | None
        Sum over all cells, or ``None`` without a thrower.
    """
    product = combined_product(snapshot, grid_size, cfg)
    if product is None:
        return None
    return float(product.sum())
