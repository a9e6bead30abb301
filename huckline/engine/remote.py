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
"""Debounced, versioned delegation of heat-map computation.

The delegate coalesces bursts of state changes into one computation after a
short quiet period and keeps only results that answer the latest request.
A failed computation leaves the previous result in place and marks the
delegate unavailable; there are no retries.
"""
import threading
from typing import Optional, Protocol, Tuple

import requests

from huckline.utils.debug import SimulationDebugger

from .config import ENGINE_CONFIG, EngineConfig
from .heatmap import HeatMapData, HeatMapOptions, calculate_heat_map
from .snapshot import FieldSnapshot


class RemoteComputeError(RuntimeError):
    """Raised by transports when a computation cannot be completed."""


class HeatMapTransport(Protocol):
    """Anything that can turn a snapshot into a heat map."""

    def compute(self, snapshot: FieldSnapshot, options: HeatMapOptions) -> Optional[HeatMapData]:
        """Compute a heat map.

        Parameters
        ----------
        snapshot : FieldSnapshot
            Field state.
        options : HeatMapOptions
            Layer and grid settings.

        Returns
        -------
        HeatMapData | None
            Result, or ``None`` when no heat map is available.
        """
        ...


class LocalTransport:
    """In-process transport calling the compositor directly.

    Parameters
    ----------
    config : EngineConfig | None, optional
        Engine configuration; defaults to :data:`ENGINE_CONFIG`.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        """Remember the configuration used for computations.

        Parameters
        ----------
        config : EngineConfig | None, optional
            Engine configuration; defaults to :data:`ENGINE_CONFIG`.
        """
        self.config = config or ENGINE_CONFIG

    def compute(self, snapshot: FieldSnapshot, options: HeatMapOptions) -> Optional[HeatMapData]:
        """Compute a heat map in the calling thread.

        Parameters
        ----------
        snapshot : FieldSnapshot
            Field state.
        options : HeatMapOptions
            Layer and grid settings.

        Returns
        -------
        HeatMapData | None
            Compositor result.
        """
        return calculate_heat_map(snapshot, options, self.config.heat_map)


class HttpTransport:
    """Transport posting snapshots to the compute service.

    Parameters
    ----------
    base_url : str | None, optional
        Service root, for example ``"http://localhost:3000"``.
    timeout : float | None, optional
        Request timeout in seconds.
    session : requests.Session | None, optional
        Session to reuse; one is created when omitted.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Prepare the HTTP session.

        Parameters
        ----------
        base_url : str | None, optional
            Service root; defaults to configuration.
        timeout : float | None, optional
            Request timeout in seconds; defaults to configuration.
        session : requests.Session | None, optional
            Session to reuse; one is created when omitted.
        """
        remote = ENGINE_CONFIG.remote
        self.base_url = (base_url or remote.base_url).rstrip("/")
        self.timeout = remote.timeout if timeout is None else timeout
        self.session = session or requests.Session()

    def compute(self, snapshot: FieldSnapshot, options: HeatMapOptions) -> Optional[HeatMapData]:
        """Request a heat map from the service.

        Parameters
        ----------
        snapshot : FieldSnapshot
            Field state.
        options : HeatMapOptions
            Layer and grid settings.

        Returns
        -------
        HeatMapData | None
            Parsed result, or ``None`` when the service reports no heat map.

        Raises
        ------
        RemoteComputeError
            On transport failure, an error status or an unparseable body.
        """
        payload = {
            "gameState": snapshot.to_dict(),
            "gridSize": options.grid_size,
            "normalize": options.normalize,
            "modes": options.modes.to_dict(),
        }
        try:
            response = self.session.post(f"{self.base_url}/api/heatmap", json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RemoteComputeError(f"Heat map request failed: {exc}") from exc

        if data is None:
            return None
        try:
            return HeatMapData.from_dict(data)
        except ValueError as exc:
            raise RemoteComputeError(str(exc)) from exc

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()


class HeatMapDelegate:
    """Coalesce heat-map requests and keep the latest good result.

    Every :meth:`request` bumps a version counter and restarts a debounce
    timer. When the timer fires the newest pending request is computed; the
    result is stored only if no newer request arrived meanwhile.

    Parameters
    ----------
    transport : HeatMapTransport
        Computation backend.
    debounce : float | None, optional
        Quiet period in seconds before dispatching.
    debugger : SimulationDebugger | None, optional
        Optional telemetry sink for failures.
    """

    def __init__(
        self,
        transport: HeatMapTransport,
        debounce: Optional[float] = None,
        debugger: Optional[SimulationDebugger] = None,
    ) -> None:
        """Create an idle delegate.

        Parameters
        ----------
        transport : HeatMapTransport
            Computation backend.
        debounce : float | None, optional
            Quiet period in seconds; defaults to configuration.
        debugger : SimulationDebugger | None, optional
            Optional telemetry sink for failures.
        """
        self.transport = transport
        self.debounce = ENGINE_CONFIG.remote.debounce if debounce is None else debounce
        self.debugger = debugger
        self.available = True
        self._version = 0
        self._latest: Optional[HeatMapData] = None
        self._pending: Optional[Tuple[int, FieldSnapshot, HeatMapOptions]] = None
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def version(self) -> int:
        """Return the number of requests made so far."""
        return self._version

    @property
    def latest(self) -> Optional[HeatMapData]:
        """Return the most recent accepted result."""
        return self._latest

    def request(self, snapshot: FieldSnapshot, options: HeatMapOptions) -> int:
        """Schedule a computation for the given state.

        Parameters
        ----------
        snapshot : FieldSnapshot
            Field state.
        options : HeatMapOptions
            Layer and grid settings.

        Returns
        -------
        int
            Version assigned to this request.
        """
        with self._lock:
            self._version += 1
            version = self._version
            self._pending = (version, snapshot, options)
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce, self._dispatch)
            self._timer.daemon = True
            self._timer.start()
        return version

    def _dispatch(self) -> None:
        """Compute the pending request and store the result if still current."""
        with self._lock:
            pending = self._pending
            self._pending = None
        if pending is None:
            return

        version, snapshot, options = pending
        try:
            result = self.transport.compute(snapshot, options)
        except RemoteComputeError as exc:
            if self.debugger:
                self.debugger.log_error("REMOTE_COMPUTE", str(exc))
            with self._lock:
                if version == self._version:
                    self.available = False
            return

        with self._lock:
            if version != self._version:
                # A newer request superseded this one.
                return
            self.available = True
            self._latest = result

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until the most recently scheduled dispatch has finished.

        Parameters
        ----------
        timeout : float | None, optional
            Maximum seconds to wait.
        """
        timer = self._timer
        if timer is not None:
            timer.join(timeout)

    def close(self) -> None:
        """Cancel any pending dispatch."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = None
