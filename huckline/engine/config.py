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
"""Central configuration for simulation and heat-map tuning parameters."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Optional


@dataclass(slots=True)
class FieldConfig:
    """Physical dimensions of an ultimate field measured in yards.

    Parameters
    ----------
    field_length : float, default=70.0
        Length of the playing field proper, excluding both end zones.
    field_width : float, default=40.0
        Sideline-to-sideline width of the field.
    end_zone_depth : float, default=20.0
        Depth of each end zone.
    sideline_width : float, default=15.0
        Width of the off-field strip drawn to the left of the scoring end zone.
    brick_distance : float, default=20.0
        Distance of the brick marks from each goal line.
    """

    field_length: float = 70.0
    field_width: float = 40.0
    end_zone_depth: float = 20.0
    sideline_width: float = 15.0
    brick_distance: float = 20.0


@dataclass(slots=True)
class SimulationConfig:
    """Timing controls for the real-time simulation loop.

    Parameters
    ----------
    frame_sleep : float, default=0.016
        Delay between frames when running in real time.
    default_speed : float, default=1.0
        Default playback speed multiplier.
    max_frame_dt : float, default=0.1
        Upper bound applied to the wall-clock timestep of a single frame.
    default_throw_speed : float, default=30.0
        Release speed in yards per second used when a throw omits one.
    """

    frame_sleep: float = 0.016  # 60fps target
    default_speed: float = 1.0
    max_frame_dt: float = 0.1
    default_throw_speed: float = 30.0


@dataclass(slots=True)
class DiscPhysicsConfig:
    """Coefficients that govern disc flight and catching.

    Parameters
    ----------
    drag : float, default=0.98
        Per-tick multiplier applied to the disc velocity while in flight.
    stop_threshold : float, default=0.1
        Per-axis speed below which a flying disc is considered landed.
    catch_radius : float, default=2.0
        Distance from the disc within which a player catches it.
    thrower_can_catch : bool, default=False
        Whether the releasing player may catch their own throw.
    """

    drag: float = 0.98
    stop_threshold: float = 0.1
    catch_radius: float = 2.0
    thrower_can_catch: bool = False


@dataclass(slots=True)
class PlayerMovementConfig:
    """Default locomotion capabilities and speed-profile thresholds.

    Parameters
    ----------
    top_speed : float, default=8.0
        Default top running speed in yards per second.
    acceleration : float, default=6.0
        Default acceleration in yards per second squared.
    deceleration : float, default=10.0
        Default deceleration in yards per second squared.
    arrive_radius : float, default=0.5
        Distance to the target at which a player snaps onto it and stops.
    idle_speed_threshold : float, default=0.1
        Speed below which a player without a target is snapped to rest.
    turn_check_speed : float, default=1.0
        Minimum speed at which a target change can force braking for a turn.
    turn_alignment_threshold : float, default=0.7
        Heading/target alignment (cosine) below which a turn forces braking.
    turn_release_speed : float, default=2.0
        Speed below which forced turn braking hands back to the normal approach.
    """

    top_speed: float = 8.0
    acceleration: float = 6.0
    deceleration: float = 10.0
    arrive_radius: float = 0.5
    idle_speed_threshold: float = 0.1
    turn_check_speed: float = 1.0
    turn_alignment_threshold: float = 0.7  # roughly 45 degrees
    turn_release_speed: float = 2.0


@dataclass(slots=True)
class InteractionConfig:
    """Pointer interaction settings.

    Parameters
    ----------
    click_hit_radius : float, default=2.0
        Radius in yards within which a click selects a player.
    """

    click_hit_radius: float = 2.0


@dataclass(slots=True)
class HeatMapConfig:
    """Shape parameters for the heat-map layers and their combination.

    Parameters
    ----------
    grid_size : float, default=1.0
        Edge length of a heat-map cell in yards.
    normalize : bool, default=True
        Whether combined grids are min-max rescaled into ``[0, 1]``.
    catch_back_boundary : {"own_end_zone", "disc"}, default="own_end_zone"
        Reference line at which catch value reaches zero: the offense's own
        goal line, or the disc's current ``x`` position.
    center_linear_penalty : float, default=0.5
        Linear share of the width penalty at the sideline.
    center_steep_weight : float, default=1.0
        Weight of the steep polynomial share of the width penalty.
    center_exponent : float, default=4.0
        Exponent of the steep polynomial width penalty.
    difficulty_distance_scale : float, default=80.0
        Throw distance in yards that maps to a raw difficulty of ``1.0``.
    difficulty_floor : float, default=0.0
        Lower bound applied to the normalised difficulty layer; ``0`` disables it.
    difficulty_divisor : float, default=1.0
        Divisor applied to the normalised difficulty layer after flooring.
    mark_reference_x : float, default=0.0
        ``x`` coordinate of the point the mark forces throws toward.
    mark_reference_y : float | None, default=None
        ``y`` coordinate of the mark reference; ``None`` means the field width.
    ease_cutoff_angle : float, default=pi/2
        Angle from the mark direction at which a throw becomes fully easy.
    marking_distance_scale : float, default=60.0
        Distance scale of the marking pressure falloff.
    marking_distance_strength : float, default=3.0
        Multiplier stretching the marking falloff radius.
    degenerate_length : float, default=0.001
        Vector length below which a direction is treated as undefined.
    coverage_defender_handicap : float, default=0.0
        Yards added to every defender distance before the coverage tests.
    """

    grid_size: float = 1.0
    normalize: bool = True
    catch_back_boundary: Literal["own_end_zone", "disc"] = "own_end_zone"
    center_linear_penalty: float = 0.5
    center_steep_weight: float = 1.0
    center_exponent: float = 4.0
    difficulty_distance_scale: float = 80.0
    difficulty_floor: float = 0.0
    difficulty_divisor: float = 1.0
    mark_reference_x: float = 0.0
    mark_reference_y: Optional[float] = None
    ease_cutoff_angle: float = math.pi / 2
    marking_distance_scale: float = 60.0
    marking_distance_strength: float = 3.0
    degenerate_length: float = 0.001
    coverage_defender_handicap: float = 0.0


@dataclass(slots=True)
class PositioningConfig:
    """Search parameters for automatic player placement.

    Parameters
    ----------
    defender_search_radius : float, default=5.0
        Radius around the offender searched when placing its defender.
    stack_depth : float, default=20.0
        Distance downfield of the disc at which the stack is set.
    """

    defender_search_radius: float = 5.0
    stack_depth: float = 20.0


@dataclass(slots=True)
class RemoteComputeConfig:
    """Settings for delegating heat-map computation to the HTTP service.

    Parameters
    ----------
    base_url : str, default="http://localhost:3000"
        Root URL of the compute service used by the HTTP transport.
    debounce : float, default=0.05
        Quiet period in seconds that coalesces bursts of state changes.
    timeout : float, default=5.0
        Request timeout in seconds.
    host : str, default="0.0.0.0"
        Interface the service binds to.
    port : int, default=3000
        Port the service listens on.
    """

    base_url: str = "http://localhost:3000"
    debounce: float = 0.05
    timeout: float = 5.0
    host: str = "0.0.0.0"
    port: int = 3000


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all configuration blocks.

    Parameters
    ----------
    dimensions : FieldConfig, default=FieldConfig()
        Field dimension configuration.
    simulation : SimulationConfig, default=SimulationConfig()
        Simulation timing parameters.
    disc_physics : DiscPhysicsConfig, default=DiscPhysicsConfig()
        Disc flight and catch tuning.
    player_movement : PlayerMovementConfig, default=PlayerMovementConfig()
        Movement and speed-profile settings.
    interaction : InteractionConfig, default=InteractionConfig()
        Pointer interaction settings.
    heat_map : HeatMapConfig, default=HeatMapConfig()
        Heat-map layer parameters.
    positioning : PositioningConfig, default=PositioningConfig()
        Placement search parameters.
    remote : RemoteComputeConfig, default=RemoteComputeConfig()
        Remote heat-map computation settings.
    """

    dimensions: FieldConfig = field(default_factory=FieldConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    disc_physics: DiscPhysicsConfig = field(default_factory=DiscPhysicsConfig)
    player_movement: PlayerMovementConfig = field(default_factory=PlayerMovementConfig)
    interaction: InteractionConfig = field(default_factory=InteractionConfig)
    heat_map: HeatMapConfig = field(default_factory=HeatMapConfig)
    positioning: PositioningConfig = field(default_factory=PositioningConfig)
    remote: RemoteComputeConfig = field(default_factory=RemoteComputeConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the engine configuration."""
