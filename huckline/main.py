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
"""Entry point for interactive field simulations and the optional visualiser."""
import argparse
import threading
import time
from typing import Optional

from huckline.engine.config import ENGINE_CONFIG
from huckline.engine.remote import HeatMapDelegate, HttpTransport, LocalTransport
from huckline.engine.simulation import FieldSimulation
from huckline.utils.debug import SimulationDebugger


def print_simulation_status(simulation: FieldSimulation) -> None:
    """Print ongoing simulation status in a separate thread.

    Parameters
    ----------
    simulation : FieldSimulation
        Running simulation whose events should be echoed.
    """
    last_event_count = 0
    last_scores = dict(simulation.team_scores)

    while simulation.is_running:
        # The event list is replaced on reset
        if len(simulation.events) < last_event_count:
            last_event_count = 0

        new_events = simulation.events[last_event_count:]
        for event in new_events:
            if event.event_type in ["goal", "block", "turnover"]:
                print(f"{event.timestamp:6.1f}s: {event.description}")
        last_event_count += len(new_events)

        if simulation.team_scores != last_scores:
            print(f"Score: Offense {simulation.team_scores[1]} - {simulation.team_scores[2]} Defense")
            last_scores = dict(simulation.team_scores)

        time.sleep(0.5)


def main(argv: Optional[list] = None) -> None:
    """Spin up the example scenario, wiring the simulation to the visualiser.

    Parameters
    ----------
    argv : list | None, optional
        Command-line arguments; defaults to ``sys.argv``.
    """
    parser = argparse.ArgumentParser(description="Interactive ultimate field simulation")
    parser.add_argument(
        "--remote",
        nargs="?",
        const=ENGINE_CONFIG.remote.base_url,
        default=None,
        help="Compute heat maps on a running huckline server (default URL from config)",
    )
    parser.add_argument("--speed", type=float, default=ENGINE_CONFIG.simulation.default_speed)
    args = parser.parse_args(argv)

    debugger = SimulationDebugger()
    simulation = FieldSimulation(debugger=debugger)
    simulation.simulation_speed = args.speed

    if args.remote:
        transport = HttpTransport(base_url=args.remote)
        print(f"Heat maps delegated to {args.remote}")
    else:
        transport = LocalTransport(simulation.config)
    delegate = HeatMapDelegate(transport, debugger=debugger)

    # Non-daemon threads so we can join them for a clean shutdown
    engine_thread = threading.Thread(target=simulation.start)
    engine_thread.start()
    status_thread = threading.Thread(target=print_simulation_status, args=(simulation,))
    status_thread.start()

    try:
        from huckline.visualizer.visualizer import pygame, start_visualizer

        if pygame is None:
            print("pygame not installed; running headless. Press Ctrl+C to stop.")
            while engine_thread.is_alive():
                engine_thread.join(timeout=0.5)
        else:
            start_visualizer(simulation, delegate=delegate)
    except KeyboardInterrupt:
        print("\nSimulation interrupted.")
    finally:
        simulation.stop()
        engine_thread.join()
        status_thread.join(timeout=3.0)
        delegate.close()
        if isinstance(transport, HttpTransport):
            transport.close()
        debugger.close()

    print(
        f"\nFinal Score: Offense {simulation.team_scores[1]} - {simulation.team_scores[2]} Defense"
        f" after {simulation.sim_time:.1f}s"
    )
    throws = sum(1 for e in simulation.events if e.event_type == "throw")
    catches = sum(1 for e in simulation.events if e.event_type == "catch")
    turnovers = sum(1 for e in simulation.events if e.event_type in ("turnover", "block"))
    print(f"Throws: {throws}  Catches: {catches}  Turnovers: {turnovers}")
    print(f"Log written to {debugger.log_path}")


if __name__ == "__main__":
    main()
