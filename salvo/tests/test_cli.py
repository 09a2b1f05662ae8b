"""
Tests for the command-line interface.
"""

import json

import pytest

from ..cli import main


class TestCLI:
    """Tests for play and replay commands."""

    def test_play_and_replay(self, tmp_path, capsys):
        match_file = tmp_path / "match.json"
        code = main([
            "play", "--turns", "8",
            "--seed-a", "1", "--seed-b", "2",
            "--peer-seed", "3", "--local-seed", "4",
            "--export", str(match_file),
        ])
        assert code == 0

        data = json.loads(match_file.read_text())
        assert data["sides"]["a"]["seed"] == 1
        assert len(data["sides"]["a"]["moves"]) == len(data["sides"]["b"]["moves"])

        played = capsys.readouterr().out
        assert main(["replay", str(match_file)]) == 0
        replayed = capsys.readouterr().out
        assert played.splitlines()[-2] == replayed.splitlines()[-1]

    def test_replay_missing_file(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["replay", str(tmp_path / "nope.json")])

    def test_replay_detects_tampered_winner(self, tmp_path):
        match_file = tmp_path / "match.json"
        main(["play", "--turns", "2", "--seed-a", "1", "--seed-b", "2",
              "--peer-seed", "3", "--local-seed", "4", "--export", str(match_file)])
        data = json.loads(match_file.read_text())
        data["winner"] = "b" if data["winner"] != "b" else "a"
        match_file.write_text(json.dumps(data))

        with pytest.raises(SystemExit) as exc:
            main(["replay", str(match_file)])
        assert exc.value.code == 2

    @pytest.mark.parametrize(
        "edit",
        [
            lambda data: data["config"].update(width="wide"),
            lambda data: data["config"].update(height=0),
            lambda data: data["sides"]["a"]["moves"][0]["payload"].update(x=float("inf"), dx=float("inf")),
        ],
    )
    def test_replay_rejects_hand_edited_file(self, tmp_path, edit):
        match_file = tmp_path / "match.json"
        main(["play", "--turns", "2", "--seed-a", "1", "--seed-b", "2",
              "--peer-seed", "3", "--local-seed", "4", "--export", str(match_file)])
        data = json.loads(match_file.read_text())
        edit(data)
        match_file.write_text(json.dumps(data))

        with pytest.raises(SystemExit) as exc:
            main(["replay", str(match_file)])
        assert exc.value.code == 1
