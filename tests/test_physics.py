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
"""Tests for physics module."""

import pytest

from huckline.engine.config import DiscPhysicsConfig
from huckline.engine.physics import DiscState, Field, Vector2D


class TestVector2D:
    """Unit tests for the Vector2D helper."""

    def test_vector_addition(self) -> None:
        """Add two vectors and confirm component-wise sums."""
        v3 = Vector2D(1.0, 2.0) + Vector2D(3.0, 4.0)
        assert v3.x == 4.0 and v3.y == 6.0

    def test_vector_subtraction(self) -> None:
        """Subtract vectors and check resulting offset."""
        v3 = Vector2D(5.0, 6.0) - Vector2D(3.0, 4.0)
        assert v3.x == 2.0 and v3.y == 2.0

    def test_vector_scalar_multiplication(self) -> None:
        """Scale a vector by a scalar factor."""
        v2 = Vector2D(2.0, 3.0) * 2
        assert v2.x == 4.0 and v2.y == 6.0

    def test_dot_product(self) -> None:
        """Perpendicular vectors have a zero dot product."""
        assert Vector2D(1.0, 0.0).dot(Vector2D(0.0, 5.0)) == 0.0
        assert Vector2D(2.0, 3.0).dot(Vector2D(4.0, 5.0)) == 23.0

    def test_magnitude(self) -> None:
        """Compute the magnitude of a non-zero vector."""
        assert abs(Vector2D(3.0, 4.0).magnitude() - 5.0) < 1e-6

    def test_normalize(self) -> None:
        """Normalise a vector and confirm unit length."""
        n = Vector2D(3.0, 4.0).normalize()
        assert abs(n.magnitude() - 1.0) < 1e-6

    def test_normalize_zero_vector(self) -> None:
        """Ensure normalising a zero vector yields zero components."""
        n = Vector2D(0.0, 0.0).normalize()
        assert n.x == 0.0 and n.y == 0.0

    def test_distance_to(self) -> None:
        """Measure distance between two distinct vectors."""
        assert abs(Vector2D(0.0, 0.0).distance_to(Vector2D(3.0, 4.0)) - 5.0) < 1e-6


class TestField:
    """Tests for field dimension helpers."""

    def test_default_dimensions(self) -> None:
        """A default field is 110 yards long including both end zones."""
        field = Field()
        assert field.total_length == 110.0
        assert field.scoring_line == 20.0
        assert field.own_goal_line == 90.0
        assert field.centre_y == 20.0

    def test_is_in_bounds(self) -> None:
        """Return True only when a vector lies within the playing area."""
        field = Field()
        assert field.is_in_bounds(Vector2D(55.0, 20.0)) is True
        assert field.is_in_bounds(Vector2D(0.0, 40.0)) is True
        assert field.is_in_bounds(Vector2D(110.1, 20.0)) is False
        assert field.is_in_bounds(Vector2D(-1.0, 20.0)) is False

    def test_sideline_strip_is_out_of_bounds(self) -> None:
        """The drawn sideline strip at negative x is never legal."""
        field = Field()
        assert field.constrain_to_bounds(Vector2D(-10.0, 5.0)) == Vector2D(0.0, 5.0)

    def test_clamp(self) -> None:
        """Clamp coordinates on every side."""
        field = Field()
        assert field.clamp(120.0, -3.0) == (110.0, 0.0)
        assert field.clamp(50.0, 45.0) == (50.0, 40.0)
        assert field.clamp(50.0, 10.0) == (50.0, 10.0)

    def test_dict_round_trip_ignores_total_length(self) -> None:
        """The derived total length is emitted but never read back."""
        data = Field(field_length=60.0, field_width=37.0, end_zone_depth=18.0).to_dict()
        assert data["totalLength"] == 96.0
        data["totalLength"] = 1.0
        field = Field.from_dict(data)
        assert field.total_length == 96.0
        assert field.field_width == 37.0

    def test_from_dict_defaults(self) -> None:
        """Missing keys fall back to the configured dimensions."""
        assert Field.from_dict({}) == Field.from_config()


class TestDiscState:
    """Unit tests for disc flight."""

    def test_new_disc_is_at_rest(self) -> None:
        """A fresh disc neither flies nor moves."""
        disc = DiscState(Vector2D(10.0, 10.0))
        assert disc.in_flight is False
        assert disc.velocity == Vector2D(0.0, 0.0)
        assert disc.update(1.0) is False
        assert disc.position == Vector2D(10.0, 10.0)

    def test_release_sets_velocity_toward_target(self) -> None:
        """Release aims the disc at the target with the given speed."""
        disc = DiscState(Vector2D(0.0, 0.0), holder_id="a")
        disc.release(Vector2D(3.0, 4.0), 10.0, "a")
        assert disc.in_flight is True
        assert disc.holder_id is None
        assert disc.thrown_by == "a"
        assert disc.velocity.x == pytest.approx(6.0)
        assert disc.velocity.y == pytest.approx(8.0)

    def test_release_at_own_position_has_zero_velocity(self) -> None:
        """A zero-length throw flies with no velocity and lands next tick."""
        disc = DiscState(Vector2D(5.0, 5.0), holder_id="a")
        disc.release(Vector2D(5.0, 5.0), 30.0, "a")
        assert disc.velocity == Vector2D(0.0, 0.0)
        assert disc.update(0.1) is True
        assert disc.in_flight is False

    def test_update_applies_drag_per_tick(self) -> None:
        """Velocity decays by the drag factor regardless of dt."""
        cfg = DiscPhysicsConfig(drag=0.5)
        disc = DiscState(Vector2D(0.0, 0.0), velocity=Vector2D(10.0, 0.0))
        disc.in_flight = True
        disc.update(0.1, cfg)
        assert disc.position.x == pytest.approx(1.0)
        assert disc.velocity.x == pytest.approx(5.0)

    def test_disc_lands_when_both_axes_slow(self) -> None:
        """Flight ends once each velocity component is under the threshold."""
        disc = DiscState(Vector2D(0.0, 0.0), velocity=Vector2D(0.05, 0.5))
        disc.in_flight = True
        assert disc.update(0.1) is False
        disc.velocity = Vector2D(0.05, 0.05)
        assert disc.update(0.1) is True
        assert disc.velocity == Vector2D(0.0, 0.0)
        assert disc.holder_id is None

    def test_attach_stops_disc(self) -> None:
        """Attaching clears flight and snaps onto the holder."""
        disc = DiscState(Vector2D(0.0, 0.0), velocity=Vector2D(10.0, 0.0))
        disc.in_flight = True
        disc.attach("b", Vector2D(4.0, 4.0))
        assert disc.in_flight is False
        assert disc.holder_id == "b"
        assert disc.position == Vector2D(4.0, 4.0)
        assert disc.velocity == Vector2D(0.0, 0.0)
