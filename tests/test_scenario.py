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
"""Tests for scenario files and training-data exchange."""

import json
from dataclasses import replace

import pytest

from huckline.engine.kinematics import MotionPhase
from huckline.engine.simulation import FieldSimulation
from huckline.utils.scenario import (
    TrainingRecord,
    create_example_players,
    export_training_data,
    import_training_data,
    load_scenario,
    player_from_snapshot,
    save_scenario,
    snapshot_from_player,
)


class TestExamplePlayers:
    """Tests for the default scenario."""

    def test_roles(self) -> None:
        """The example has a thrower, a mark and one receiver/defender pair."""
        players = {p.player_id: p for p in create_example_players()}
        assert players["offense_1"].has_disc
        assert players["mark_1"].is_mark and players["mark_1"].is_defender
        assert players["offense_2"].is_offense
        assert players["defender_2"].label == players["offense_2"].label == "2"

    def test_mark_outside_catch_radius(self) -> None:
        """The mark cannot pick off a throw at release."""
        players = {p.player_id: p for p in create_example_players()}
        assert players["mark_1"].position.distance_to(players["offense_1"].position) > 2.0


class TestPlayerSnapshots:
    """Tests for freezing and thawing players."""

    def test_round_trip_keeps_motion(self) -> None:
        """A running player thaws with the same phase, speed and target."""
        simulation = FieldSimulation()
        simulation.set_player_target("offense_2", 30.0, 15.0)
        simulation.update(0.1)
        frozen = snapshot_from_player(simulation.player_by_id("offense_2"))
        assert frozen.phase == "accelerating"
        assert (frozen.target_x, frozen.target_y) == (30.0, 15.0)

        thawed = player_from_snapshot(frozen)
        assert thawed.state.phase is MotionPhase.ACCELERATING
        assert thawed.state.current_speed == frozen.current_speed
        assert snapshot_from_player(thawed) == frozen

    def test_unknown_phase_rejected(self) -> None:
        """Phase names must be known."""
        frozen = snapshot_from_player(create_example_players()[0])
        with pytest.raises(ValueError):
            player_from_snapshot(replace(frozen, phase="sprinting"))


class TestScenarioFiles:
    """Tests for saving and loading scenarios."""

    def test_save_and_load(self, tmp_path) -> None:
        """A saved scenario loads back identically."""
        snapshot = FieldSimulation().snapshot()
        path = tmp_path / "scenes" / "example.json"
        save_scenario(snapshot, str(path))
        assert json.loads(path.read_text(encoding="utf-8"))["disc"]["holderId"] == "offense_1"
        assert load_scenario(str(path)) == snapshot

    def test_missing_file(self, tmp_path) -> None:
        """Loading a missing scenario raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_scenario(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path) -> None:
        """Broken or non-object JSON raises ValueError."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_scenario(str(path))
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError):
            load_scenario(str(path))


class TestTrainingData:
    """Tests for training-record exchange."""

    def test_export_and_import(self, tmp_path) -> None:
        """Records survive a file round trip in order."""
        records = [TrainingRecord(55.0, 15.0, 55.0, 14.0), TrainingRecord(40.0, 30.0, 41.5, 29.0)]
        path = tmp_path / "training.json"
        export_training_data(records, str(path))
        assert json.loads(path.read_text(encoding="utf-8"))[0] == {
            "offenseX": 55.0,
            "offenseY": 15.0,
            "defenseX": 55.0,
            "defenseY": 14.0,
        }
        assert import_training_data(str(path)) == records

    def test_non_numeric_field_rejects_whole_file(self, tmp_path) -> None:
        """One bad record fails the import."""
        path = tmp_path / "training.json"
        good = {"offenseX": 1, "offenseY": 2, "defenseX": 3, "defenseY": 4}
        bad = {"offenseX": "1", "offenseY": 2, "defenseX": 3, "defenseY": 4}
        path.write_text(json.dumps([good, bad]), encoding="utf-8")
        with pytest.raises(ValueError):
            import_training_data(str(path))

    def test_booleans_are_not_coordinates(self) -> None:
        """JSON booleans are rejected even though Python treats them as ints."""
        with pytest.raises(ValueError):
            TrainingRecord.from_dict({"offenseX": True, "offenseY": 2, "defenseX": 3, "defenseY": 4})

    def test_top_level_must_be_list(self, tmp_path) -> None:
        """A JSON object is not a record list."""
        path = tmp_path / "training.json"
        path.write_text(json.dumps({"offenseX": 1}), encoding="utf-8")
        with pytest.raises(ValueError):
            import_training_data(str(path))

    def test_missing_file(self, tmp_path) -> None:
        """Importing a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            import_training_data(str(tmp_path / "missing.json"))
