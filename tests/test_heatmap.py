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
"""Tests for the heat-map compositor."""

import numpy as np
import pytest

from huckline.engine.config import HeatMapConfig
from huckline.engine.fields import catch_value
from huckline.engine.heatmap import (
    COMBINED_MODE,
    MODE_KEYS,
    HeatMapData,
    HeatMapModes,
    HeatMapOptions,
    calculate_heat_map,
    cell_centres,
    combine_layers,
    combined_heat_map_sum,
    combined_product,
    difficulty_layer,
    grid_shape,
    normalize_grid,
)
from huckline.engine.physics import Field
from huckline.engine.snapshot import DiscSnapshot, FieldSnapshot, PlayerSnapshot

FIELD = Field()


def _snapshot(holder: bool = True) -> FieldSnapshot:
    """Example scenario; without a holder the disc lies loose at the thrower's spot."""
    players = (
        PlayerSnapshot("offense_1", 1, 80.0, 15.0, has_disc=holder, label="1"),
        PlayerSnapshot("mark_1", 2, 81.0, 17.0, is_defender=True, is_mark=True, label="1"),
        PlayerSnapshot("offense_2", 1, 55.0, 15.0, label="2"),
        PlayerSnapshot("defender_2", 2, 55.0, 14.0, is_defender=True, label="2"),
    )
    disc = DiscSnapshot(80.0, 15.0, holder_id="offense_1" if holder else None)
    return FieldSnapshot(players=players, disc=disc, field=FIELD)


def _options(*keys: str, normalize: bool = True, grid_size: float = 1.0) -> HeatMapOptions:
    """Options with the given layers switched on."""
    modes = HeatMapModes()
    for key in keys:
        modes = modes.with_mode(key, True)
    return HeatMapOptions(modes=modes, grid_size=grid_size, normalize=normalize)


class TestModes:
    """Tests for the layer toggles."""

    def test_enabled_keys_follow_evaluation_order(self) -> None:
        """Keys come back in the fixed layer order."""
        modes = HeatMapModes(coverage=True, catch=True)
        assert modes.enabled_keys() == ("catch", "coverage")
        assert HeatMapModes.all_enabled().enabled_keys() == MODE_KEYS

    def test_unknown_mode_rejected(self) -> None:
        """Toggling an unknown layer raises."""
        with pytest.raises(ValueError):
            HeatMapModes().with_mode("wind", True)

    def test_dict_uses_wire_keys(self) -> None:
        """Serialised modes use the camelCase layer keys."""
        data = HeatMapModes(marking_difficulty=True).to_dict()
        assert data == {"catch": False, "difficulty": False, "markingDifficulty": True, "coverage": False}
        assert HeatMapModes.from_dict(data) == HeatMapModes(marking_difficulty=True)

    def test_non_positive_grid_size_rejected(self) -> None:
        """Grid cells must have a positive size."""
        with pytest.raises(ValueError):
            HeatMapOptions(grid_size=0.0)


class TestGrid:
    """Tests for grid geometry."""

    def test_shape_rounds_up(self) -> None:
        """Partial cells at the far edges still count."""
        assert grid_shape(FIELD, 1.0) == (110, 40)
        assert grid_shape(FIELD, 3.0) == (37, 14)

    def test_cell_centres(self) -> None:
        """Cells are indexed x-major from the origin."""
        xs, ys = cell_centres(FIELD, 2.0)
        assert xs.shape == (55, 20)
        assert xs[0, 0] == 1.0 and ys[0, 0] == 1.0
        assert xs[1, 0] == 3.0 and ys[0, 1] == 3.0


class TestCombination:
    """Tests for layer multiplication and normalisation."""

    def test_difficulty_is_inverted(self) -> None:
        """Difficulty contributes as one minus its value."""
        a = np.array([[0.5, 1.0]])
        b = np.array([[0.2, 0.5]])
        assert np.allclose(combine_layers([("catch", a), ("difficulty", b)]), [[0.4, 0.5]])

    def test_normalize_range(self) -> None:
        """Normalised grids span exactly zero to one."""
        result = normalize_grid(np.array([[2.0, 4.0], [3.0, 6.0]]))
        assert result.min() == 0.0 and result.max() == 1.0

    def test_normalize_flat_grid(self) -> None:
        """A flat grid comes back unchanged as a copy."""
        values = np.full((2, 2), 0.3)
        result = normalize_grid(values)
        assert np.array_equal(result, values)
        assert result is not values

    def test_difficulty_layer_scaled_by_its_maximum(self) -> None:
        """The hardest cell on the grid has difficulty 1."""
        xs, ys = cell_centres(FIELD, 1.0)
        layer = difficulty_layer(_snapshot(), xs, ys, HeatMapConfig())
        assert layer.max() == pytest.approx(1.0)
        assert layer.min() >= 0.0

    def test_difficulty_floor(self) -> None:
        """A floor lifts easy cells."""
        xs, ys = cell_centres(FIELD, 1.0)
        layer = difficulty_layer(_snapshot(), xs, ys, HeatMapConfig(difficulty_floor=0.2))
        assert layer.min() == pytest.approx(0.2)


class TestCalculateHeatMap:
    """Tests for the full compositor."""

    def test_no_modes_returns_none(self) -> None:
        """Nothing enabled means no heat map."""
        assert calculate_heat_map(_snapshot(), _options()) is None

    def test_single_layer_matches_field(self) -> None:
        """A lone unnormalised layer is the field evaluated at cell centres."""
        data = calculate_heat_map(_snapshot(), _options("catch", normalize=False))
        assert data.mode == "catch"
        assert data.shape == (110, 40)
        assert data.values[10, 20] == 1.0
        assert data.values[60, 20] == pytest.approx(catch_value(60.5, 20.5, FIELD, 80.0))

    def test_combined_mode_name(self) -> None:
        """Several layers report the combined mode."""
        data = calculate_heat_map(_snapshot(), _options("catch", "coverage"))
        assert data.mode == COMBINED_MODE

    def test_normalized_values_in_unit_range(self) -> None:
        """Normalised grids stay in [0, 1]."""
        data = calculate_heat_map(_snapshot(), _options(*MODE_KEYS))
        assert data.values.min() == 0.0
        assert data.values.max() == 1.0

    def test_idempotent(self) -> None:
        """Unchanged state yields bit-identical grids."""
        first = calculate_heat_map(_snapshot(), _options(*MODE_KEYS))
        second = calculate_heat_map(_snapshot(), _options(*MODE_KEYS))
        assert np.array_equal(first.values, second.values)

    def test_marking_without_thrower_returns_none(self) -> None:
        """Marking difficulty needs a thrower."""
        assert calculate_heat_map(_snapshot(holder=False), _options("catch", "markingDifficulty")) is None

    def test_reference_point(self) -> None:
        """The reported origin is the thrower for marking maps, else the disc."""
        snapshot = _snapshot()
        snapshot = snapshot.with_player_position("offense_1", 70.0, 10.0)
        marking = calculate_heat_map(snapshot, _options("markingDifficulty"))
        assert (marking.thrower_x, marking.thrower_y) == (70.0, 10.0)

        loose = FieldSnapshot(snapshot.players, DiscSnapshot(30.0, 5.0), FIELD)
        catch = calculate_heat_map(loose, _options("catch"))
        assert (catch.thrower_x, catch.thrower_y) == (30.0, 5.0)

    def test_coarse_grid(self) -> None:
        """Cell size is carried through to the result."""
        data = calculate_heat_map(_snapshot(), _options("catch", grid_size=5.0))
        assert data.grid_size == 5.0
        assert data.shape == (22, 8)


class TestHeatMapData:
    """Tests for the heat-map result container."""

    def test_value_at(self) -> None:
        """Lookups floor into cells and reject points off the grid."""
        data = HeatMapData(2.0, np.arange(6, dtype=float).reshape(3, 2), 0.0, 0.0, "catch")
        assert data.value_at(2.5, 3.9) == 3.0
        assert data.value_at(6.0, 0.0) is None
        assert data.value_at(-0.1, 0.0) is None

    def test_from_dict_round_trip(self) -> None:
        """Serialised grids parse back to equal values."""
        data = calculate_heat_map(_snapshot(), _options("coverage", grid_size=10.0))
        parsed = HeatMapData.from_dict(data.to_dict())
        assert parsed.mode == "coverage"
        assert np.array_equal(parsed.values, data.values)

    def test_from_dict_rejects_flat_values(self) -> None:
        """Values must form a two-dimensional grid."""
        with pytest.raises(ValueError):
            HeatMapData.from_dict({"gridSize": 1, "values": [1, 2], "throwerX": 0, "throwerY": 0, "mode": "x"})
        with pytest.raises(ValueError):
            HeatMapData.from_dict({"values": [[1.0]]})


class TestCombinedSum:
    """Tests for the pre-normalisation total."""

    def test_sum_matches_product(self) -> None:
        """The total is the sum of the four-layer product."""
        total = combined_heat_map_sum(_snapshot(), 2.0)
        assert total == pytest.approx(float(combined_product(_snapshot(), 2.0).sum()))
        assert total > 0

    def test_sum_without_thrower(self) -> None:
        """No thrower, no total."""
        assert combined_heat_map_sum(_snapshot(holder=False), 2.0) is None
