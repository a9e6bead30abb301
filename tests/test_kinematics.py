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
"""Tests for the player motion state machine."""

import math

import pytest

from huckline.engine.config import PlayerMovementConfig
from huckline.engine.kinematics import (
    TRANSITIONS,
    MotionEvent,
    MotionPhase,
    MovementProfile,
    PlayerState,
    advance_player,
    classify,
    next_phase,
)
from huckline.engine.physics import Vector2D

PROFILE = MovementProfile(top_speed=8.0, acceleration=6.0, deceleration=10.0)
CFG = PlayerMovementConfig()


def _running(x: float, y: float, speed: float, target: Vector2D) -> PlayerState:
    """Build a player already cruising along +x toward ``target``."""
    return PlayerState(
        position=Vector2D(x, y),
        velocity=Vector2D(speed, 0.0),
        current_speed=speed,
        phase=MotionPhase.CRUISING,
        target=target,
        previous_target=target,
    )


class TestTransitionTable:
    """Checks for the explicit phase transition table."""

    def test_moving_phases_accept_every_event_but_turn_slowed(self) -> None:
        """Every non-turning phase has an entry for all regular events."""
        for phase in (MotionPhase.IDLE, MotionPhase.ACCELERATING, MotionPhase.CRUISING, MotionPhase.BRAKING_TO_STOP):
            for event in MotionEvent:
                if event is MotionEvent.TURN_SLOWED:
                    assert (phase, event) not in TRANSITIONS
                else:
                    assert (phase, event) in TRANSITIONS

    def test_turn_slowed_resumes_acceleration(self) -> None:
        """Finishing a turn hands back to acceleration."""
        assert next_phase(MotionPhase.BRAKING_TO_TURN, MotionEvent.TURN_SLOWED) is MotionPhase.ACCELERATING

    def test_illegal_transition_raises(self) -> None:
        """A pair missing from the table is rejected."""
        with pytest.raises(ValueError):
            next_phase(MotionPhase.BRAKING_TO_TURN, MotionEvent.AT_TOP_SPEED)


class TestMovementProfile:
    """Tests for per-player capabilities."""

    def test_braking_distance(self) -> None:
        """Stopping distance follows v^2 / 2a."""
        assert PROFILE.braking_distance(10.0) == pytest.approx(5.0)

    def test_braking_distance_without_deceleration(self) -> None:
        """A player who cannot decelerate never stops."""
        assert math.isinf(MovementProfile(8.0, 6.0, 0.0).braking_distance(1.0))

    def test_from_config(self) -> None:
        """Profiles default to the configured capabilities."""
        profile = MovementProfile.from_config(PlayerMovementConfig(top_speed=5.0))
        assert profile.top_speed == 5.0
        assert profile.acceleration == CFG.acceleration


class TestClassify:
    """Tests for situation classification."""

    def test_idle_without_target(self) -> None:
        """A stationary player with no target is stopped."""
        state = PlayerState(position=Vector2D(0.0, 0.0))
        assert classify(state, PROFILE, CFG) is MotionEvent.STOPPED

    def test_brake_inside_braking_distance(self) -> None:
        """A fast player close to the target must brake."""
        state = _running(0.0, 0.0, 8.0, Vector2D(2.0, 0.0))
        assert classify(state, PROFILE, CFG) is MotionEvent.BRAKE

    def test_sharp_turn_on_new_target_behind(self) -> None:
        """Redirecting a fast runner backwards forces a turn."""
        state = _running(50.0, 20.0, 8.0, Vector2D(100.0, 20.0))
        state.set_target(Vector2D(0.0, 20.0))
        assert classify(state, PROFILE, CFG) is MotionEvent.SHARP_TURN

    def test_gentle_retarget_is_not_a_turn(self) -> None:
        """A small change of heading keeps the runner going."""
        state = _running(50.0, 20.0, 8.0, Vector2D(100.0, 20.0))
        state.set_target(Vector2D(100.0, 25.0))
        assert classify(state, PROFILE, CFG) is MotionEvent.AT_TOP_SPEED


class TestAdvancePlayer:
    """Integration checks for a single player over several ticks."""

    def test_first_tick_accelerates(self) -> None:
        """A player starting from rest gains speed at the acceleration rate."""
        state = PlayerState(position=Vector2D(0.0, 0.0), target=Vector2D(20.0, 0.0))
        event = advance_player(state, PROFILE, 0.1, CFG)
        assert event is MotionEvent.BELOW_TOP_SPEED
        assert state.phase is MotionPhase.ACCELERATING
        assert state.current_speed == pytest.approx(0.6)
        assert state.position.x == pytest.approx(0.06)

    def test_reaches_cruising(self) -> None:
        """After accelerating fully the player cruises at top speed."""
        state = PlayerState(position=Vector2D(0.0, 0.0), target=Vector2D(100.0, 0.0))
        for _ in range(20):
            advance_player(state, PROFILE, 0.1, CFG)
        assert state.phase is MotionPhase.CRUISING
        assert state.current_speed == 8.0

    def test_arrives_exactly_and_stops(self) -> None:
        """A runner never overshoots and snaps onto the target."""
        state = PlayerState(position=Vector2D(0.0, 0.0), target=Vector2D(10.0, 0.0))
        for _ in range(200):
            advance_player(state, PROFILE, 0.05, CFG)
            assert state.position.x <= 10.0 + 1e-9
            if state.target is None:
                break
        assert state.position == Vector2D(10.0, 0.0)
        assert state.phase is MotionPhase.IDLE
        assert state.current_speed == 0.0
        assert state.velocity == Vector2D(0.0, 0.0)

    def test_sharp_turn_brakes_along_old_heading(self) -> None:
        """A reversed runner slows down before heading the new way."""
        state = _running(50.0, 20.0, 8.0, Vector2D(100.0, 20.0))
        state.set_target(Vector2D(0.0, 20.0))

        advance_player(state, PROFILE, 0.1, CFG)
        assert state.phase is MotionPhase.BRAKING_TO_TURN
        assert state.current_speed == pytest.approx(7.0)
        assert state.velocity.x > 0

        for _ in range(20):
            advance_player(state, PROFILE, 0.1, CFG)
            if state.phase is MotionPhase.ACCELERATING:
                break
        assert state.phase is MotionPhase.ACCELERATING
        assert state.velocity.x < 0

    def test_cleared_target_brakes_to_idle(self) -> None:
        """Losing the target brakes the player to a halt."""
        state = _running(50.0, 20.0, 8.0, Vector2D(100.0, 20.0))
        state.set_target(None)
        advance_player(state, PROFILE, 0.1, CFG)
        assert state.phase is MotionPhase.BRAKING_TO_STOP
        for _ in range(10):
            advance_player(state, PROFILE, 0.1, CFG)
        assert state.phase is MotionPhase.IDLE
        assert state.current_speed == 0.0

    def test_non_positive_dt_is_ignored(self) -> None:
        """Zero-length ticks leave the state untouched."""
        state = PlayerState(position=Vector2D(1.0, 1.0), target=Vector2D(20.0, 0.0))
        assert advance_player(state, PROFILE, 0.0, CFG) is None
        assert state.position == Vector2D(1.0, 1.0)
        assert state.phase is MotionPhase.IDLE

    def test_halt_forgets_target(self) -> None:
        """Halting clears speed, phase and targets."""
        state = _running(50.0, 20.0, 8.0, Vector2D(100.0, 20.0))
        state.halt()
        assert state.target is None and state.previous_target is None
        assert state.phase is MotionPhase.IDLE
        assert not state.is_moving
