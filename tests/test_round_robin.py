"""Tests for round-robin schedule generation."""
import logging
import random
from collections import Counter
from itertools import combinations

import pytest

from matchday.core.errors import InfeasibleRoster, InvalidScheduleMode
from matchday.core.round_robin import candidate_pairings, generate_schedule, round_plan
from matchday.core.types import ScheduleMode, Team

from conftest import make_teams

# small budgets keep the many-seed property runs quick
FAST = {"max_attempts": 3, "max_steps": 2000}


def _owners(teams):
    return {t.name: t.owner_name for t in teams}


def _assert_no_repeat_in_round(rounds):
    for r in rounds:
        names = r.team_names()
        assert len(names) == len(set(names)), f"{r.name} repeats a team"


def _assert_single_coverage(teams, rounds):
    owners = _owners(teams)
    seen = Counter(frozenset((m.home, m.away)) for r in rounds for m in r.matches)
    for a, b in combinations(teams, 2):
        expected = 0 if a.owner_name == b.owner_name else 1
        assert seen[frozenset((a.name, b.name))] == expected
    for pair in seen:
        x, y = tuple(pair)
        assert owners[x] != owners[y]


def _assert_double_coverage(teams, rounds):
    seen = Counter((m.home, m.away) for r in rounds for m in r.matches)
    for a, b in combinations(teams, 2):
        expected = 0 if a.owner_name == b.owner_name else 1
        assert seen[(a.name, b.name)] == expected
        assert seen[(b.name, a.name)] == expected
    assert sum(seen.values()) == 2 * len(candidate_pairings(teams, "SINGLE"))


# ── Properties ───────────────────────────────────────────────────────────────

class TestSingle:
    @pytest.mark.parametrize("n", [4, 6, 8, 12, 20])
    def test_clean_even_roster_packs_tight(self, n, rng):
        rounds = generate_schedule(make_teams(n), ScheduleMode.SINGLE, rng=rng)
        assert len(rounds) == n - 1
        assert all(len(r.matches) == n // 2 for r in rounds)
        _assert_no_repeat_in_round(rounds)
        _assert_single_coverage(make_teams(n), rounds)

    @pytest.mark.parametrize("n", [3, 5, 7, 9])
    def test_odd_roster(self, n, rng):
        teams = make_teams(n)
        rounds = generate_schedule(teams, "single", rng=rng)
        _, max_rounds = round_plan(n, n * (n - 1) // 2)
        assert len(rounds) <= max_rounds
        assert all(len(r.matches) <= n // 2 for r in rounds)
        _assert_no_repeat_in_round(rounds)
        _assert_single_coverage(teams, rounds)

    @pytest.mark.parametrize("seed", range(5))
    @pytest.mark.parametrize("n", [3, 4, 7, 10, 16, 25, 32])
    def test_shared_owners_never_meet(self, n, seed):
        teams = make_teams(n, owners=[f"o{i}" for i in range(max(2, n // 2))])
        rounds = generate_schedule(teams, ScheduleMode.SINGLE, rng=random.Random(seed), **FAST)
        _assert_no_repeat_in_round(rounds)
        _assert_single_coverage(teams, rounds)

    @pytest.mark.parametrize("seed", range(3))
    def test_two_owner_roster_packs_tight(self, seed, caplog):
        teams = make_teams(32, owners=["red", "blue"])
        with caplog.at_level(logging.WARNING, logger="matchday.core.round_robin"):
            rounds = generate_schedule(teams, ScheduleMode.SINGLE, rng=random.Random(seed))
        assert "falling back to greedy" not in caplog.text
        assert len(rounds) == 16
        assert all(len(r.matches) == 16 for r in rounds)
        _assert_no_repeat_in_round(rounds)
        _assert_single_coverage(teams, rounds)

    def test_owner_blocks_pack_tight(self, rng):
        teams = make_teams(8, owners=["a", "a", "b", "b", "c", "c", "d", "d"])
        # make_teams cycles owners, so regroup them into pairs
        teams = [Team(name=t.name, owner_name=f"o{(t.id - 1) // 2}", id=t.id) for t in teams]
        rounds = generate_schedule(teams, ScheduleMode.SINGLE, rng=rng)
        assert len(rounds) == 6
        _assert_no_repeat_in_round(rounds)
        _assert_single_coverage(teams, rounds)


class TestDouble:
    @pytest.mark.parametrize("n", [4, 5, 8])
    def test_every_pair_home_and_away(self, n, rng):
        teams = make_teams(n)
        rounds = generate_schedule(teams, ScheduleMode.DOUBLE, rng=rng)
        _assert_no_repeat_in_round(rounds)
        _assert_double_coverage(teams, rounds)

    def test_clean_even_roster_packs_tight(self, rng):
        rounds = generate_schedule(make_teams(6), "DOUBLE", rng=rng)
        assert len(rounds) == 10

    @pytest.mark.parametrize("seed", range(5))
    @pytest.mark.parametrize("n", [6, 11, 18])
    def test_shared_owners(self, n, seed):
        teams = make_teams(n, owners=["a", "b", "c"])
        rounds = generate_schedule(teams, ScheduleMode.DOUBLE, rng=random.Random(seed), **FAST)
        _assert_no_repeat_in_round(rounds)
        _assert_double_coverage(teams, rounds)


# ── Fallback ─────────────────────────────────────────────────────────────────

class TestGreedyFallback:
    @pytest.mark.parametrize("seed", range(10))
    @pytest.mark.parametrize("n", [3, 8, 17, 32])
    def test_fallback_always_produces_a_valid_schedule(self, n, seed, caplog):
        teams = make_teams(n, owners=[f"o{i}" for i in range(max(2, n // 3))])
        with caplog.at_level(logging.WARNING, logger="matchday.core.round_robin"):
            rounds = generate_schedule(teams, "SINGLE", rng=random.Random(seed), max_attempts=0)
        assert "falling back to greedy" in caplog.text
        _assert_no_repeat_in_round(rounds)
        _assert_single_coverage(teams, rounds)

    def test_exhausted_step_budget_falls_back(self, caplog):
        teams = make_teams(10, owners=["a", "a", "b", "b", "c", "c", "d", "d", "e", "e"])
        with caplog.at_level(logging.WARNING):
            rounds = generate_schedule(teams, "SINGLE", rng=random.Random(0), max_attempts=2, max_steps=1)
        assert "falling back to greedy" in caplog.text
        _assert_single_coverage(teams, rounds)


# ── Output shape ─────────────────────────────────────────────────────────────

class TestOutput:
    def test_ids_stages_and_labels(self, rng):
        rounds = generate_schedule(make_teams(4), "SINGLE", rng=rng)
        first = rounds[0]
        assert first.number == 1
        assert first.name == "ROUND 1"
        assert [m.id for m in first.matches] == ["league_R1_M0", "league_R1_M1"]
        assert first.matches[1].match_label == "Game 2"
        assert all(m.stage == "ROUND 1" for m in first.matches)

    def test_group_prefix(self, rng):
        rounds = generate_schedule(make_teams(3), "SINGLE", rng=rng, id_prefix="group_A", group="A")
        assert all(m.id.startswith("group_A_R") for r in rounds for m in r.matches)
        assert all(m.group == "A" for r in rounds for m in r.matches)

    def test_matches_carry_owner_and_logo(self, rng):
        teams = make_teams(2)
        match = generate_schedule(teams, "SINGLE", rng=rng)[0].matches[0]
        by_name = {t.name: t for t in teams}
        assert match.home_owner == by_name[match.home].owner_name
        assert match.away_logo == by_name[match.away].logo

    def test_same_seed_same_schedule(self):
        teams = make_teams(9, owners=["a", "b", "c", "d"])
        one = generate_schedule(teams, "SINGLE", rng=random.Random(7))
        two = generate_schedule(teams, "SINGLE", rng=random.Random(7))
        assert [[(m.home, m.away) for m in r.matches] for r in one] == \
            [[(m.home, m.away) for m in r.matches] for r in two]


# ── Preconditions ────────────────────────────────────────────────────────────

class TestPreconditions:
    def test_empty_roster(self):
        with pytest.raises(InfeasibleRoster):
            generate_schedule([], "SINGLE")

    def test_single_team(self):
        with pytest.raises(InfeasibleRoster):
            generate_schedule(make_teams(1), "SINGLE")

    def test_single_owner(self):
        with pytest.raises(InfeasibleRoster):
            generate_schedule(make_teams(4, owners=["solo"]), "SINGLE")

    def test_duplicate_names(self):
        teams = [Team("A", "x"), Team("A", "y")]
        with pytest.raises(InfeasibleRoster):
            generate_schedule(teams, "SINGLE")

    @pytest.mark.parametrize("name", ["TBD", "BYE"])
    def test_reserved_names(self, name):
        with pytest.raises(InfeasibleRoster):
            generate_schedule([Team(name, "x"), Team("A", "y")], "SINGLE")

    @pytest.mark.parametrize("mode", ["TRIPLE", "", None])
    def test_bad_mode(self, mode):
        with pytest.raises(InvalidScheduleMode):
            generate_schedule(make_teams(4), mode)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            generate_schedule([], "SINGLE")

    def test_blank_owners_do_not_constrain(self, rng):
        teams = [Team(f"T{i}", "") for i in range(4)]
        rounds = generate_schedule(teams, "SINGLE", rng=rng)
        assert sum(len(r.matches) for r in rounds) == 6
