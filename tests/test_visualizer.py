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
"""Tests for the visualiser's drawing helpers."""

import pytest

from huckline.engine.physics import Field
from huckline.visualizer.visualizer import FieldView, heat_color, hex_to_rgb


class TestHeatColor:
    """Tests for the heat gradient."""

    def test_endpoints(self) -> None:
        """Zero is dark red and one is deep green."""
        assert heat_color(0.0) == (128, 0, 0)
        assert heat_color(1.0) == (0, 180, 60)

    def test_midpoint_is_yellow(self) -> None:
        """A half sits on the yellow stop."""
        assert heat_color(0.5) == (255, 220, 0)

    def test_interpolates_between_stops(self) -> None:
        """Values between stops blend linearly."""
        assert heat_color(0.05) == (164, 0, 0)

    def test_clamped(self) -> None:
        """Out-of-range values use the end colours."""
        assert heat_color(-1.0) == heat_color(0.0)
        assert heat_color(2.0) == heat_color(1.0)


class TestFieldView:
    """Tests for the yard/pixel mapping."""

    def test_origin_sits_after_sideline(self) -> None:
        """The field origin is offset by the sideline strip."""
        view = FieldView(Field(), (1330, 480), padding=40)
        assert view.scale == pytest.approx(10.0)
        assert view.to_screen(0.0, 0.0) == (190, 40)

    def test_round_trip(self) -> None:
        """Converting to pixels and back recovers the point."""
        view = FieldView(Field(), (1330, 480), padding=40)
        sx, sy = view.to_screen(55.0, 20.0)
        assert view.to_field(sx, sy) == pytest.approx((55.0, 20.0))

    def test_sideline_is_negative_x(self) -> None:
        """Clicks on the sideline strip map to negative x."""
        view = FieldView(Field(), (1330, 480), padding=40)
        x, _ = view.to_field(100, 100)
        assert x < 0


def test_hex_to_rgb() -> None:
    """Hex colours parse into components."""
    assert hex_to_rgb("#3b82f6") == (59, 130, 246)
