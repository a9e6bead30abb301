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
"""Structured logging utilities used to trace field simulations."""
import itertools
import time
from collections import deque
from pathlib import Path
from threading import Lock
from typing import Deque, Iterator, List, Optional, TextIO, Tuple


class SimulationDebugger:
    """Helper object that streams simulation telemetry to disk.

    Every entry is written as one ``[HH:MM:SS] KIND: details`` line and also
    kept in a bounded in-memory history for live displays.

    Parameters
    ----------
    output_dir : str, default="debug_logs"
        Directory where new session logs are created; created automatically when missing.
    history : int, default=200
        Number of entries kept in memory for :meth:`get_recent_events`.
    """

    def __init__(self, output_dir: str = "debug_logs", history: int = 200) -> None:
        """Create the output directory and open the first session log.

        Parameters
        ----------
        output_dir : str
            Filesystem directory where log files are created.
        history : int
            Capacity of the in-memory entry history.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file: Optional[TextIO] = None
        self.session_start = ""
        self._lock = Lock()
        self._sequence: Iterator[int] = itertools.count(1)
        self._history: Deque[Tuple[int, str, str]] = deque(maxlen=history)
        self.start_new_session()

    def __enter__(self) -> "SimulationDebugger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def log_path(self) -> Path:
        """Return the path of the current session log."""
        return self.output_dir / f"field_debug_{self.session_start}.txt"

    def start_new_session(self) -> None:
        """Close any open log and start a fresh file with a new header."""
        with self._lock:
            if self.log_file:
                self.log_file.close()
            self.session_start = time.strftime("%Y%m%d_%H%M%S")
            self.log_file = self.log_path.open("w", encoding="utf-8")
            self.log_file.write(f"=== Field Debug Session: {time.strftime('%Y-%m-%d %H:%M:%S')} ===\n\n")

    def log_disc_state(
        self,
        sim_time: float,
        position: tuple[float, float],
        velocity: tuple[float, float],
        holder_id: str | None = None,
        in_flight: bool = False,
    ) -> None:
        """Log the current state of the disc.

        Parameters
        ----------
        sim_time : float
            Elapsed simulation time in seconds.
        position : tuple[float, float]
            Disc coordinates on the field (x, y).
        velocity : tuple[float, float]
            Current velocity in yards per second along x and y axes.
        holder_id : str | None
            Identifier of the holding player, when held.
        in_flight : bool
            Whether the disc is currently flying.
        """
        holder_str = f" | Holder: {holder_id}" if holder_id else ""
        self._write_log(
            "DISC_STATE",
            f"Time: {sim_time:.2f}s | "
            f"Pos: ({position[0]:.1f}, {position[1]:.1f}) | "
            f"Vel: ({velocity[0]:.1f}, {velocity[1]:.1f}) | "
            f"In Flight: {in_flight}"
            f"{holder_str}",
        )

    def log_player_state(
        self,
        sim_time: float,
        player_id: str,
        team: int,
        position: tuple[float, float],
        phase: str,
        speed: float,
        target: tuple[float, float] | None = None,
    ) -> None:
        """Log the current state of a player.

        Parameters
        ----------
        sim_time : float
            Elapsed simulation time in seconds.
        player_id : str
            Identifier of the tracked player.
        team : int
            Team number of the player.
        position : tuple[float, float]
            Player coordinates (x, y) in yards.
        phase : str
            Name of the current motion phase.
        speed : float
            Scalar speed in yards per second.
        target : tuple[float, float] | None
            Optional target position the player is running toward.
        """
        target_str = f" | Target: ({target[0]:.1f}, {target[1]:.1f})" if target else ""
        self._write_log(
            "PLAYER_STATE",
            f"Time: {sim_time:.2f}s | "
            f"Player {player_id} (Team {team}) | "
            f"Pos: ({position[0]:.1f}, {position[1]:.1f}) | "
            f"Phase: {phase} | "
            f"Speed: {speed:.2f} yd/s"
            f"{target_str}",
        )

    def log_simulation_event(self, sim_time: float, event_type: str, description: str) -> None:
        """Log a simulation event (throw, catch, goal, etc.).

        Parameters
        ----------
        sim_time : float
            Elapsed simulation time in seconds.
        event_type : str
            Short label identifying the event category.
        description : str
            Human-readable summary of the event.
        """
        self._write_log("SIM_EVENT", f"Time: {sim_time:.2f}s | Event: {event_type} | Details: {description}")

    def log_heat_map(self, mode: str, grid_shape: tuple[int, int], elapsed: float) -> None:
        """Log a completed heat-map computation.

        Parameters
        ----------
        mode : str
            Mode tag of the resulting grid.
        grid_shape : tuple[int, int]
            Number of cells along x and y.
        elapsed : float
            Wall-clock seconds spent computing the grid.
        """
        self._write_log(
            "HEAT_MAP",
            f"Mode: {mode} | Cells: {grid_shape[0]}x{grid_shape[1]} | Took: {elapsed * 1000:.1f}ms",
        )

    def log_error(self, error_type: str, description: str) -> None:
        """Log an error or warning.

        Parameters
        ----------
        error_type : str
            Label describing the error classification.
        description : str
            Human-readable explanation of the issue.
        """
        self._write_log("ERROR", f"Type: {error_type} | Details: {description}")

    def _write_log(self, kind: str, details: str) -> None:
        """Append one entry to the history and the session file.

        Parameters
        ----------
        kind : str
            Category label for the entry, e.g. ``SIM_EVENT``.
        details : str
            Formatted message body.
        """
        entry = f"[{time.strftime('%H:%M:%S')}] {kind}: {details}"
        with self._lock:
            self._history.append((next(self._sequence), kind, entry))
            if self.log_file is None:
                return
            print(entry, file=self.log_file, flush=True)

    def get_recent_events(self, limit: int = 20, kind: Optional[str] = None) -> List[str]:
        """Return the latest entries, prefixed with their sequence numbers.

        Parameters
        ----------
        limit : int
            Maximum number of entries to return.
        kind : str | None
            Only return entries of this category when given.

        Returns
        -------
        List[str]
            Up to ``limit`` entries, oldest first.
        """
        with self._lock:
            matching = [(seq, entry) for seq, entry_kind, entry in self._history if kind in (None, entry_kind)]
        return [f"{seq:05d} {entry}" for seq, entry in matching[-limit:]]

    def close(self) -> None:
        """Close the session file; later entries are kept in memory only."""
        with self._lock:
            if self.log_file:
                self.log_file.close()
                self.log_file = None
