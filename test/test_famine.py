"""
Weekly hunger: starvation, wipeout, production, famine notices and the cycle itself.
"""

import random

import pytest

from nomic.api.memory import InMemoryRepository
from nomic.engine import events as ev
from nomic.engine.famine import FEEDING_MESSAGE, MESSAGES, process_hunger, process_player_hunger
from nomic.engine.farming import roll_production
from nomic.engine.repository import RepositoryError
from nomic.engine.state import PlayerData

from conftest import FlakyRepository, make_player, make_village


def run_player(repository, player_file, rng=None):
    """Process the first player of a player file; returns (player_data, player, events)."""
    repository.player_file = player_file
    player_data = repository.get_player_data()
    player = player_data.active_players[0]
    events = process_player_hunger(player_data, player, repository, rng)
    return player_data, player, events


def test_no_village_is_a_no_op(repository):
    _, player, events = run_player(repository, {"activePlayers": [make_player("carol", points=4)]})
    assert events == []
    assert player.points == 4
    assert repository.commits == []


def test_no_population_is_a_no_op(repository):
    village = make_village(farms=3, hunger=2)
    _, player, events = run_player(repository, {"activePlayers": [make_player("carol", village=village)]})
    assert events == []
    assert player.village.hunger == 2
    assert repository.commits == []


def test_starvation_wipes_out_village(repository, rng):
    village = make_village(name="Dustmere", farms=4, hunger=5, population={"general": 3})
    _, player, events = run_player(repository, {"activePlayers": [make_player("bob", points=10, village=village)]}, rng)

    assert player.village is None
    assert player.points == 0
    assert [e.type for e in events] == [ev.STARVATION, ev.VILLAGE_WIPED_OUT]
    assert events[0].payload["death_count"] == 3
    assert events[0].payload["unremoved"] == 0
    assert repository.commits == [
        MESSAGES["starvation"].format(login="bob", village_name="Dustmere", death_count=3),
        MESSAGES["wipe_out"].format(login="bob"),
    ]
    assert repository.notices == []


def test_legacy_population_is_wiped_out_too(repository):
    village = make_village(hunger=5, population=3)
    _, player, events = run_player(repository, {"activePlayers": [make_player("bob", points=2, village=village)]})
    assert player.village is None
    assert events[-1].type == ev.VILLAGE_WIPED_OUT


def test_empty_pool_is_wiped_out_without_starvation(repository):
    village = make_village(population={})
    _, player, events = run_player(repository, {"activePlayers": [make_player("bob", points=2, village=village)]})
    assert [e.type for e in events] == [ev.VILLAGE_WIPED_OUT]
    assert player.village is None


def test_fed_village_has_surplus_and_no_notice(repository):
    village = make_village(farms=2, hunger=0, population={"farming": 4})
    expected_production = roll_production(2, random.Random(5))

    _, player, events = run_player(
        repository, {"activePlayers": [make_player("alice", village=village)]}, random.Random(5)
    )

    assert player.village.hunger == 4 - expected_production
    assert player.village.hunger <= 0
    assert [e.type for e in events] == [ev.FARM_PRODUCTION]
    assert events[0].payload == {"login": "alice", "active_farms": 2, "production": expected_production}
    assert repository.notices == []


def test_hungry_village_gets_a_famine_notice(repository):
    village = make_village(name="Greenhollow", farms=2, hunger=0, population={"general": 60, "farming": 4})
    expected_production = roll_production(2, random.Random(5))

    _, player, events = run_player(
        repository, {"activePlayers": [make_player("alice", village=village)]}, random.Random(5)
    )

    hunger = 64 - expected_production
    assert player.village.hunger == hunger
    assert [e.type for e in events] == [ev.FARM_PRODUCTION, ev.FAMINE]
    assert events[1].payload["notice_created"] is True

    assert len(repository.notices) == 1
    notice = repository.notices[0]
    assert notice.assignee == "alice"
    title, body = repository.notice_bodies[notice.number]
    assert title == "@alice feed your population!"
    assert "Greenhollow" in body
    assert f"feed {expected_production} people" in body
    assert f"An additional {hunger} people need food." in body


def test_starvation_happens_before_the_harvest(repository, rng):
    village = make_village(name="Ashford", farms=0, hunger=3, population={"general": 10})
    _, player, events = run_player(repository, {"activePlayers": [make_player("dan", village=village)]}, rng)

    assert [e.type for e in events] == [ev.STARVATION, ev.FARM_PRODUCTION, ev.FAMINE]
    assert player.village.population == {"general": 7}
    # Hunger was reset by starvation, then the 7 survivors need feeding
    assert player.village.hunger == 7
    _, body = repository.notice_bodies[repository.notices[0].number]
    assert "An additional 7 people need food." in body


def test_fed_village_resolves_its_open_notices(repository, rng):
    old = repository.create_famine_notice("alice", "@alice feed your population!", "...")
    other = repository.create_famine_notice("bob", "@bob feed your population!", "...")
    village = make_village(farms=5, hunger=0, population={"farming": 10})

    _, player, events = run_player(repository, {"activePlayers": [make_player("alice", village=village)]}, rng)

    assert player.village.hunger <= 0
    assert [e.type for e in events] == [ev.FARM_PRODUCTION, ev.FAMINE_RESOLVED]
    assert events[1].payload == {"login": "alice", "issue_number": old.number}
    assert repository.comments == [(old.comments_url, MESSAGES["resolved"].format(login="alice"))]
    assert repository.closed == [(old.url, None)]
    assert repository.notices == [other]


def test_failed_comment_leaves_notice_open(rng):
    repository = FlakyRepository(fail={"post_comment"})
    notice = repository.create_famine_notice("alice", "t", "b")
    village = make_village(farms=5, hunger=0, population={"farming": 10})

    _, _, events = run_player(repository, {"activePlayers": [make_player("alice", village=village)]}, rng)

    assert [e.type for e in events] == [ev.FARM_PRODUCTION]
    assert repository.notices == [notice]
    assert repository.closed == []


def test_notice_failure_does_not_stop_the_cycle(rng):
    repository = FlakyRepository(
        {"activePlayers": [
            make_player("alice", village=make_village(hunger=0, population={"general": 10})),
            make_player("bob", village=make_village(hunger=0, population={"general": 20})),
        ]},
        fail={"create_famine_notice"},
    )

    events = process_hunger(repository, rng=rng)

    famines = [e for e in events if e.type == ev.FAMINE]
    assert [e.payload["login"] for e in famines] == ["alice", "bob"]
    assert all(e.payload["notice_created"] is False for e in famines)
    assert repository.commits == [FEEDING_MESSAGE]
    hungers = [p["village"]["hunger"] for p in repository.player_file["activePlayers"]]
    assert hungers == [10, 20]


def test_cycle_persists_once_and_reports_next_run(rng):
    repository = InMemoryRepository({"activePlayers": [
        make_player("alice", points=3, village=make_village(farms=1, population={"general": 5, "farming": 2})),
        make_player("bob", points=9, village=make_village(hunger=4, population={"general": 2})),
        make_player("carol", points=1),
    ]})
    reported = []

    events = process_hunger(repository, rng=rng, next_run=lambda: reported.append("asked") or "soon")

    assert reported == ["asked"]
    assert repository.commits[-1] == FEEDING_MESSAGE
    players = PlayerData.from_dict(repository.player_file).active_players
    assert [p.name for p in players] == ["alice", "bob", "carol"]
    assert players[1].village is None
    assert players[1].points == 0
    assert players[0].village.hunger == 7 - events[0].payload["production"]
    # Events follow snapshot order
    assert [e.payload["login"] for e in events] == ["alice", "bob", "bob"]


def test_failed_final_write_still_reports_next_run(rng):
    repository = FlakyRepository(
        {"activePlayers": [make_player("alice", village=make_village(population={"general": 5}))]},
        fail={"update_player_file"},
    )
    reported = []

    events = process_hunger(repository, rng=rng, next_run=lambda: reported.append("asked") or "soon")

    assert reported == ["asked"]
    assert [e.type for e in events] == [ev.FARM_PRODUCTION, ev.FAMINE]
    assert repository.calls.count("update_player_file") == 1


def test_failed_load_propagates():
    repository = FlakyRepository(fail={"get_player_data"})
    with pytest.raises(RepositoryError):
        process_hunger(repository)


def test_no_active_players_changes_nothing():
    repository = InMemoryRepository({"activePlayers": [], "inactivePlayers": [{"name": "dave"}]})
    assert process_hunger(repository) == []
    assert repository.commits == []
    assert repository.player_file == {"activePlayers": [], "inactivePlayers": [{"name": "dave"}]}
