"""Tests for the command-line interface."""

import pytest

from apparat.interface.cli import build_parser, main
from apparat.state import JsonWorldStore


@pytest.fixture
def run(tmp_path):
    """Run the CLI against a temporary saves directory."""
    def _run(*argv):
        return main(["--worlds-dir", str(tmp_path), *argv])
    return _run


@pytest.fixture
def store(tmp_path):
    return JsonWorldStore(tmp_path)


class TestParser:
    """Argument parsing."""

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_act_arguments(self):
        args = build_parser().parse_args(["act", "ministry", "conduct_inspection", "--target", "finance"])
        assert args.domain == "ministry"
        assert args.action == "conduct_inspection"
        assert args.target == "finance"
        assert args.world == "1"

    def test_unknown_domain(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["act", "agriculture", "plant"])


class TestCommands:
    """Each subcommand against real saves."""

    def test_new_saves_world(self, run, store, capsys):
        assert run("new", "Spring Plenum", "--seed", "7") == 0
        worlds = store.list_all()
        assert [w["name"] for w in worlds] == ["Spring Plenum"]
        assert "Spring Plenum" in capsys.readouterr().out

    def test_list(self, run):
        run("new", "Listed")
        assert run("list") == 0

    def test_status(self, run):
        run("new", "Status")
        assert run("status") == 0

    def test_status_without_world(self, run, capsys):
        assert run("status", "--world", "zzzz") == 1
        assert "No world matching" in capsys.readouterr().out

    def test_actions(self, run):
        run("new", "Actions")
        assert run("actions", "--domain", "diplomacy") == 0

    def test_act_scheduled_is_saved(self, run, store):
        run("new", "Act", "--seed", "3")
        assert run("act", "security", "conduct_surveillance", "--target", "belov") == 0
        world = store.load(store.list_all()[0]["id"])
        assert len(world.security.pending) == 1

    def test_act_rejected(self, run, store):
        run("new", "Act")
        assert run("act", "security", "order_shuanggui", "--target", "volkov") == 2
        world = store.load(store.list_all()[0]["id"])
        assert world.security.pending == []

    def test_act_unknown_action(self, run):
        run("new", "Act")
        assert run("act", "security", "summon_dragon") == 1

    def test_advance(self, run, store):
        run("new", "Advance", "--seed", "5")
        assert run("advance", "--turns", "3") == 0
        world = store.load(store.list_all()[0]["id"])
        assert world.turn == 4
        assert world.last_advanced_turn == 4

    def test_simulate_leaves_no_saves(self, run, store):
        assert run("simulate", "--turns", "3", "--seed", "1") == 0
        assert store.list_all() == []
