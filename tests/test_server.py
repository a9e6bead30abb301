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
"""Tests for the heat-map compute service."""

import pytest
from fastapi.testclient import TestClient

from huckline.engine.simulation import FieldSimulation
from huckline.server import create_app


@pytest.fixture
def client() -> TestClient:
    """Client for a fresh application."""
    return TestClient(create_app())


@pytest.fixture
def game_state() -> dict:
    """The example scenario as posted by clients."""
    return FieldSimulation().snapshot().to_dict()


class TestHealth:
    """Tests for the health endpoint."""

    def test_health(self, client: TestClient) -> None:
        """The service reports itself healthy."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestHeatMapRoutes:
    """Tests for heat-map endpoints."""

    def test_heatmap(self, client: TestClient, game_state: dict) -> None:
        """A single layer comes back as a full grid."""
        response = client.post(
            "/api/heatmap",
            json={"gameState": game_state, "modes": {"catch": True}, "gridSize": 2.0, "normalize": False},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["mode"] == "catch"
        assert data["gridSize"] == 2.0
        assert len(data["values"]) == 55 and len(data["values"][0]) == 20
        assert (data["throwerX"], data["throwerY"]) == (80.0, 15.0)

    def test_heatmap_without_modes(self, client: TestClient, game_state: dict) -> None:
        """No enabled layers yields null."""
        response = client.post("/api/heatmap", json={"gameState": game_state})
        assert response.status_code == 200
        assert response.json() is None

    def test_heatmap_sum(self, client: TestClient, game_state: dict) -> None:
        """The pre-normalisation total is positive for the example."""
        response = client.post("/api/heatmap-sum", json={"gameState": game_state, "gridSize": 5.0})
        assert response.status_code == 200
        assert response.json()["sum"] > 0

    def test_invalid_team_rejected(self, client: TestClient, game_state: dict) -> None:
        """Teams other than 1 and 2 fail validation."""
        game_state["players"][0]["team"] = 3
        response = client.post("/api/heatmap", json={"gameState": game_state, "modes": {"catch": True}})
        assert response.status_code == 422

    def test_unknown_phase_rejected(self, client: TestClient, game_state: dict) -> None:
        """States the engine cannot restore are rejected."""
        game_state["players"][0]["phase"] = "sprinting"
        response = client.post("/api/update", json={"gameState": game_state, "deltaTime": 0.1})
        assert response.status_code == 422


class TestPositionRoutes:
    """Tests for placement endpoints."""

    def test_position_defender(self, client: TestClient, game_state: dict) -> None:
        """The downfield defender is placed near its receiver."""
        response = client.post("/api/position-defender", json={"gameState": game_state, "gridSize": 5.0})
        assert response.status_code == 200
        data = response.json()
        assert data["playerId"] == "defender_2"
        assert abs(data["x"] - 55.0) <= 5.0 and abs(data["y"] - 15.0) <= 5.0

    def test_position_offender_seeded(self, client: TestClient, game_state: dict) -> None:
        """Seeded sampling is reproducible."""
        body = {"gameState": game_state, "gridSize": 5.0, "seed": 11}
        first = client.post("/api/position-offender", json=body).json()
        second = client.post("/api/position-offender", json=body).json()
        assert first == second
        assert first["playerId"] == "offense_2"

    def test_position_stack(self, client: TestClient, game_state: dict) -> None:
        """The stack spot sits twenty yards ahead of the disc."""
        data = client.post("/api/position-stack", json={"gameState": game_state}).json()
        assert (data["x"], data["y"]) == (60.0, 20.0)

    def test_unknown_label(self, client: TestClient, game_state: dict) -> None:
        """Nobody to place yields null."""
        response = client.post("/api/position-stack", json={"gameState": game_state, "label": "9"})
        assert response.json() is None


class TestSimulationRoutes:
    """Tests for stateless simulation steps."""

    def test_throw_then_update(self, client: TestClient, game_state: dict) -> None:
        """A posted throw releases the disc and later ticks move it."""
        thrown = client.post("/api/throw", json={"gameState": game_state, "targetX": 20.0, "targetY": 20.0}).json()
        assert thrown["disc"]["inFlight"] is True
        assert thrown["disc"]["holderId"] is None
        assert thrown["disc"]["thrownBy"] == "offense_1"

        moved = client.post("/api/update", json={"gameState": thrown, "deltaTime": 0.1}).json()
        assert moved["disc"]["x"] < thrown["disc"]["x"]

    def test_holder_id_alone_names_the_thrower(self, client: TestClient, game_state: dict) -> None:
        """A state that only sets holderId keeps the disc with that player."""
        for player in game_state["players"]:
            player["hasDisc"] = False
        game_state["disc"] = {"x": 80.0, "y": 15.0, "holderId": "offense_1"}

        moved = client.post("/api/update", json={"gameState": game_state, "deltaTime": 0.1}).json()
        assert moved["disc"]["holderId"] == "offense_1"
        assert (moved["disc"]["x"], moved["disc"]["y"]) == (80.0, 15.0)

        thrown = client.post("/api/throw", json={"gameState": game_state, "targetX": 20.0, "targetY": 20.0}).json()
        assert thrown["disc"]["thrownBy"] == "offense_1"

    def test_update_uses_posted_movement_profile(self, client: TestClient, game_state: dict) -> None:
        """A slow player stays slow after a round trip through the service."""
        receiver = next(p for p in game_state["players"] if p["id"] == "offense_2")
        receiver.update(
            topSpeed=2.0,
            currentSpeed=2.0,
            phase="cruising",
            vx=-2.0,
            target={"x": 20.0, "y": 15.0},
            previousTarget={"x": 20.0, "y": 15.0},
        )

        moved = client.post("/api/update", json={"gameState": game_state, "deltaTime": 0.5}).json()
        receiver = next(p for p in moved["players"] if p["id"] == "offense_2")
        assert receiver["topSpeed"] == 2.0
        assert receiver["currentSpeed"] == pytest.approx(2.0)
        assert receiver["x"] == pytest.approx(54.0)
        assert receiver["previousTarget"] == {"x": 20.0, "y": 15.0}

    def test_negative_delta_rejected(self, client: TestClient, game_state: dict) -> None:
        """Time only runs forward."""
        response = client.post("/api/update", json={"gameState": game_state, "deltaTime": -1.0})
        assert response.status_code == 422
