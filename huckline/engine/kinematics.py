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
"""Player motion model driven by an explicit phase state machine.

Each player is in exactly one :class:`MotionPhase`. Every tick the current
kinematic situation is classified into a :class:`MotionEvent`, the phase is
advanced through :data:`TRANSITIONS`, and the speed and position are then
integrated according to the resulting phase. Any ``(phase, event)`` pair
missing from the table is an illegal transition.
"""
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .config import ENGINE_CONFIG, PlayerMovementConfig
from .physics import Vector2D


class MotionPhase(Enum):
    """Movement phase of a single player."""

    IDLE = "idle"
    ACCELERATING = "accelerating"
    CRUISING = "cruising"
    BRAKING_TO_STOP = "braking_to_stop"
    BRAKING_TO_TURN = "braking_to_turn"


class MotionEvent(Enum):
    """Classified kinematic situation that can move a player between phases."""

    NO_TARGET = "no_target"
    STOPPED = "stopped"
    SHARP_TURN = "sharp_turn"
    TURN_SLOWED = "turn_slowed"
    TARGET_REACHED = "target_reached"
    BRAKE = "brake"
    BELOW_TOP_SPEED = "below_top_speed"
    AT_TOP_SPEED = "at_top_speed"


_MOVING_TRANSITIONS: Dict[MotionEvent, MotionPhase] = {
    MotionEvent.NO_TARGET: MotionPhase.BRAKING_TO_STOP,
    MotionEvent.STOPPED: MotionPhase.IDLE,
    MotionEvent.SHARP_TURN: MotionPhase.BRAKING_TO_TURN,
    MotionEvent.TARGET_REACHED: MotionPhase.IDLE,
    MotionEvent.BRAKE: MotionPhase.BRAKING_TO_STOP,
    MotionEvent.BELOW_TOP_SPEED: MotionPhase.ACCELERATING,
    MotionEvent.AT_TOP_SPEED: MotionPhase.CRUISING,
}

TRANSITIONS: Dict[Tuple[MotionPhase, MotionEvent], MotionPhase] = {
    **{(MotionPhase.IDLE, event): phase for event, phase in _MOVING_TRANSITIONS.items()},
    **{(MotionPhase.ACCELERATING, event): phase for event, phase in _MOVING_TRANSITIONS.items()},
    **{(MotionPhase.CRUISING, event): phase for event, phase in _MOVING_TRANSITIONS.items()},
    **{(MotionPhase.BRAKING_TO_STOP, event): phase for event, phase in _MOVING_TRANSITIONS.items()},
    (MotionPhase.BRAKING_TO_TURN, MotionEvent.SHARP_TURN): MotionPhase.BRAKING_TO_TURN,
    (MotionPhase.BRAKING_TO_TURN, MotionEvent.TURN_SLOWED): MotionPhase.ACCELERATING,
    (MotionPhase.BRAKING_TO_TURN, MotionEvent.NO_TARGET): MotionPhase.BRAKING_TO_STOP,
    (MotionPhase.BRAKING_TO_TURN, MotionEvent.STOPPED): MotionPhase.IDLE,
}
"""Legal phase transitions keyed by ``(current phase, event)``."""


def next_phase(phase: MotionPhase, event: MotionEvent) -> MotionPhase:
    """Look up the phase that follows ``phase`` when ``event`` occurs.

    Parameters
    ----------
    phase : MotionPhase
        Current movement phase.
    event : MotionEvent
        Classified situation for this tick.

    Returns
    -------
    MotionPhase
        Phase to adopt.

    Raises
    ------
    ValueError
        If the transition is not in :data:`TRANSITIONS`.
    """
    try:
        return TRANSITIONS[(phase, event)]
    except KeyError:
        raise ValueError(f"Illegal motion transition: {phase.value} on {event.value}") from None


@dataclass
class MovementProfile:
    """Per-player movement capabilities.

    Parameters
    ----------
    top_speed : float
        Maximum running speed in yards per second.
    acceleration : float
        Rate of speed gain in yards per second squared.
    deceleration : float
        Rate of speed loss in yards per second squared.
    """

    top_speed: float
    acceleration: float
    deceleration: float

    @classmethod
    def from_config(cls, cfg: Optional[PlayerMovementConfig] = None) -> "MovementProfile":
        """Build the default profile from configuration.

        Parameters
        ----------
        cfg : PlayerMovementConfig | None, optional
            Movement block to read; defaults to the engine configuration.

        Returns
        -------
        MovementProfile
            Profile carrying the configured capabilities.
        """
        cfg = cfg or ENGINE_CONFIG.player_movement
        return cls(top_speed=cfg.top_speed, acceleration=cfg.acceleration, deceleration=cfg.deceleration)

    def braking_distance(self, speed: float) -> float:
        """Return the distance needed to stop from ``speed``.

        Parameters
        ----------
        speed : float
            Current speed in yards per second.

        Returns
        -------
        float
            ``speed**2 / (2 * deceleration)``, or infinity without deceleration.
        """
        if self.deceleration <= 0:
            return math.inf
        return speed * speed / (2 * self.deceleration)


@dataclass
class PlayerState:
    """Dynamic kinematic state of a player.

    Parameters
    ----------
    position : Vector2D
        Current location on the field.
    velocity : Vector2D, optional
        Current velocity; always ``heading * current_speed``.
    has_disc : bool, optional
        Whether the player holds the disc.
    current_speed : float, optional
        Scalar speed along the current heading.
    phase : MotionPhase, optional
        Current movement phase.
    target : Vector2D | None, optional
        Destination the player is running toward.
    previous_target : Vector2D | None, optional
        Target seen on the previous tick, used to detect target changes.
    """

    position: Vector2D
    velocity: Vector2D = field(default_factory=lambda: Vector2D(0.0, 0.0))
    has_disc: bool = False
    current_speed: float = 0.0
    phase: MotionPhase = MotionPhase.IDLE
    target: Optional[Vector2D] = None
    previous_target: Optional[Vector2D] = None

    @property
    def is_moving(self) -> bool:
        """Return ``True`` when the player has a non-zero speed."""
        return self.current_speed > 0

    def set_target(self, target: Optional[Vector2D]) -> None:
        """Point the player at a new destination, or clear it with ``None``.

        Parameters
        ----------
        target : Vector2D | None
            New destination.
        """
        self.target = target

    def halt(self) -> None:
        """Stop dead and forget any destination."""
        self.velocity = Vector2D(0.0, 0.0)
        self.current_speed = 0.0
        self.phase = MotionPhase.IDLE
        self.target = None
        self.previous_target = None


def classify(state: PlayerState, profile: MovementProfile, cfg: PlayerMovementConfig) -> Optional[MotionEvent]:
    """Classify the player's situation for this tick.

    Parameters
    ----------
    state : PlayerState
        Player state before integration.
    profile : MovementProfile
        Player capabilities.
    cfg : PlayerMovementConfig
        Movement thresholds.

    Returns
    -------
    MotionEvent | None
        Event to feed the transition table, or ``None`` to hold the phase.
    """
    if state.target is None:
        if state.current_speed > cfg.idle_speed_threshold:
            return MotionEvent.NO_TARGET
        return MotionEvent.STOPPED

    offset = state.target - state.position
    target_changed = state.previous_target is None or state.previous_target != state.target
    if target_changed and state.current_speed > cfg.turn_check_speed:
        alignment = state.velocity.normalize().dot(offset.normalize())
        if alignment < cfg.turn_alignment_threshold:
            return MotionEvent.SHARP_TURN

    if state.phase is MotionPhase.BRAKING_TO_TURN:
        if state.current_speed < cfg.turn_release_speed:
            return MotionEvent.TURN_SLOWED
        return None

    distance = offset.magnitude()
    if distance < cfg.arrive_radius:
        return MotionEvent.TARGET_REACHED
    # Once committed to stopping at a target, keep braking until arrival.
    if state.phase is MotionPhase.BRAKING_TO_STOP and not target_changed:
        return MotionEvent.BRAKE
    if distance < profile.braking_distance(state.current_speed):
        return MotionEvent.BRAKE
    if state.current_speed >= profile.top_speed:
        return MotionEvent.AT_TOP_SPEED
    return MotionEvent.BELOW_TOP_SPEED


def _slow_along_heading(state: PlayerState, deceleration: float, dt: float) -> None:
    """Reduce speed while keeping the current heading.

    Parameters
    ----------
    state : PlayerState
        Player state to modify in place.
    deceleration : float
        Rate of speed loss in yards per second squared.
    dt : float
        Tick length in seconds.
    """
    heading = state.velocity.normalize()
    state.current_speed = max(0.0, state.current_speed - deceleration * dt)
    state.velocity = heading * state.current_speed


def _approach_target(state: PlayerState, profile: MovementProfile, dt: float) -> None:
    """Steer straight at the target and adjust speed for the current phase.

    Parameters
    ----------
    state : PlayerState
        Player state to modify in place; must have a target.
    profile : MovementProfile
        Player capabilities.
    dt : float
        Tick length in seconds.
    """
    offset = state.target - state.position
    distance = offset.magnitude()
    direction = offset.normalize()

    if state.phase is MotionPhase.BRAKING_TO_STOP:
        # Largest speed from which the player can still stop at the target.
        desired = math.sqrt(2 * profile.deceleration * distance)
    else:
        desired = profile.top_speed
    desired = min(desired, profile.top_speed)

    if state.current_speed < desired:
        state.current_speed = min(desired, state.current_speed + profile.acceleration * dt)
    else:
        state.current_speed = max(desired, state.current_speed - profile.deceleration * dt)

    # Don't overshoot target in a single step
    state.current_speed = min(state.current_speed, distance / dt)
    state.velocity = direction * state.current_speed


def advance_player(
    state: PlayerState,
    profile: MovementProfile,
    dt: float,
    cfg: Optional[PlayerMovementConfig] = None,
) -> Optional[MotionEvent]:
    """Advance one player by one tick.

    The position is not clamped here; the caller constrains it to the field.

    Parameters
    ----------
    state : PlayerState
        Player state to modify in place.
    profile : MovementProfile
        Player capabilities.
    dt : float
        Tick length in seconds. Non-positive values leave the state untouched.
    cfg : PlayerMovementConfig | None, optional
        Movement thresholds; defaults to the engine configuration.

    Returns
    -------
    MotionEvent | None
        Event classified for this tick, or ``None`` when the phase was held.
    """
    if dt <= 0:
        return None
    cfg = cfg or ENGINE_CONFIG.player_movement

    event = classify(state, profile, cfg)
    if event is not None:
        state.phase = next_phase(state.phase, event)
    state.previous_target = state.target

    if event is MotionEvent.TARGET_REACHED:
        state.position = Vector2D(state.target.x, state.target.y)
        state.halt()
        return event

    if state.phase is MotionPhase.BRAKING_TO_TURN:
        _slow_along_heading(state, profile.deceleration, dt)
    elif state.target is None:
        _slow_along_heading(state, profile.deceleration, dt)
        if state.current_speed <= cfg.idle_speed_threshold:
            state.halt()
    else:
        _approach_target(state, profile, dt)

    state.position = state.position + state.velocity * dt
    return event
