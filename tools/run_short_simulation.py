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
"""Run a short headless simulation of the example scenario."""
from huckline.engine.simulation import FieldSimulation
from huckline.utils.debug import SimulationDebugger


def run_short_simulation(duration_seconds: float = 20.0, timestep: float = 0.05) -> None:
    """Throw to the downfield receiver and step the field with a fixed timestep.

    Parameters
    ----------
    duration_seconds : float
        How long to simulate in field time (default 20 seconds).
    timestep : float
        Physics timestep in seconds (default 0.05 = 50ms).
    """
    with SimulationDebugger() as debugger:
        simulation = FieldSimulation(debugger=debugger)

        # Send the receiver deep and hit them in stride
        simulation.set_player_target("offense_2", 30.0, 20.0)
        simulation.set_player_target("defender_2", 30.0, 19.0)

        num_steps = int(duration_seconds / timestep)
        for step in range(num_steps):
            if step == int(1.0 / timestep):
                simulation.throw_disc(40.0, 18.0)
            simulation.update(timestep)

    for event in simulation.events:
        print(f"{event.timestamp:6.2f}s {event.event_type:<9} {event.description}")
    print(f"Done running {duration_seconds}s simulation ({num_steps} steps); log at {debugger.log_path}")


if __name__ == "__main__":
    run_short_simulation(10.0)
