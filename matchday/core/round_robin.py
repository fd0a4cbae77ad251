"""Round-robin schedule generation.

Every pair of teams with different owners meets once (SINGLE) or twice with
home and away swapped (DOUBLE). Teams sharing an owner never meet.

Matches are packed into rounds of ``n // 2`` with a bounded, randomized
backtracking search. Each attempt orders the candidates from a circle-method
rotation of a freshly shuffled roster, so a clean roster usually packs on the
first try. A rotation filtered for owner conflicts is full of holes, so rosters
with shared owners alternate it with rounds built as maximal matchings over
the remaining pairings. If every attempt runs out, a greedy pass opens extra
rounds instead of failing.
"""
import logging
import math
import random
from itertools import combinations

from matchday.core.errors import InfeasibleRoster, InvalidScheduleMode
from matchday.core.types import BYE, TBD, Match, Round, ScheduleMode

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 50
MAX_STEPS = 5000
ODD_ROSTER_SLACK = 2


# ── Preconditions ────────────────────────────────────────────────────────────

def schedule_mode(mode):
    if isinstance(mode, ScheduleMode):
        return mode
    try:
        return ScheduleMode(str(mode).upper())
    except ValueError:
        raise InvalidScheduleMode(f"Unknown schedule mode: {mode!r}") from None


def same_owner(a, b):
    return bool(a.owner_name) and a.owner_name == b.owner_name


def validate_roster(teams):
    """Reject rosters that cannot produce a single match."""
    if not teams:
        raise InfeasibleRoster("Roster is empty")
    if len(teams) < 2:
        raise InfeasibleRoster("At least 2 teams are required")

    names = [t.name for t in teams]
    if len(set(names)) != len(names):
        raise InfeasibleRoster("Team names must be unique")
    if {TBD, BYE} & set(names):
        raise InfeasibleRoster(f"{TBD} and {BYE} are reserved names")

    if not any(not same_owner(a, b) for a, b in combinations(teams, 2)):
        raise InfeasibleRoster("All teams belong to the same owner")


# ── Candidates ───────────────────────────────────────────────────────────────

def candidate_pairings(teams, mode):
    """All (home, away) pairings the schedule has to contain."""
    mode = schedule_mode(mode)
    pairings = []
    for home, away in combinations(teams, 2):
        if same_owner(home, away):
            continue
        pairings.append((home, away))
        if mode is ScheduleMode.DOUBLE:
            pairings.append((away, home))
    return pairings


def round_plan(team_count, match_count):
    """Return (round_size, max_rounds) for a schedule."""
    round_size = team_count // 2
    min_rounds = math.ceil(match_count / round_size)
    slack = ODD_ROSTER_SLACK if team_count % 2 else 0
    return round_size, min_rounds + slack


def _circle_rounds(teams):
    roster = list(teams)
    if len(roster) % 2:
        roster.append(None)
    n = len(roster)
    rotating = roster[1:]

    rounds = []
    for r in range(n - 1):
        fixed = (roster[0], rotating[0]) if r % 2 == 0 else (rotating[0], roster[0])
        pairs = [fixed]
        for i in range(1, n // 2):
            pairs.append((rotating[i], rotating[n - 1 - i]))
        rounds.append([p for p in pairs if None not in p])
        rotating = [rotating[-1]] + rotating[:-1]
    return rounds


def _circle_order(teams, mode, rng):
    roster = list(teams)
    rng.shuffle(roster)
    rounds = _circle_rounds(roster)
    rng.shuffle(rounds)
    if mode is ScheduleMode.DOUBLE:
        rounds = rounds + [[(away, home) for home, away in r] for r in rounds]

    return [
        (home, away)
        for r in rounds
        for home, away in r
        if not same_owner(home, away)
    ]


def _other(edge, name):
    home, away = edge
    return away.name if home.name == name else home.name


def _pair(mate, edges, idx):
    home, away = edges[idx]
    mate[home.name] = idx
    mate[away.name] = idx


def _augment(name, mate, edges, adj, seen):
    """Grow the matching by one along an alternating path starting at ``name``."""
    seen.add(name)
    for idx in adj[name]:
        other = _other(edges[idx], name)
        if other not in seen and other not in mate:
            _pair(mate, edges, idx)
            return True

    for idx in adj[name]:
        other = _other(edges[idx], name)
        if other in seen:
            continue
        seen.add(other)
        held = mate[other]
        partner = _other(edges[held], other)
        if partner in seen:
            continue
        del mate[partner]
        mate[name] = mate[other] = idx
        if _augment(partner, mate, edges, adj, seen):
            return True
        mate[other] = mate[partner] = held
        del mate[name]
    return False


def _matching_rounds(pairings, rng):
    """Rounds built as maximal matchings over the pairings still to play.

    Busiest teams are matched first and unmatched teams are repaired with
    augmenting paths, so owner conflicts never leave holes the way they do
    in a filtered circle rotation.
    """
    edges = list(pairings)
    adj = {}
    for idx, (home, away) in enumerate(edges):
        adj.setdefault(home.name, set()).add(idx)
        adj.setdefault(away.name, set()).add(idx)

    rounds = []
    remaining = len(edges)
    while remaining:
        degree = {name: len(ids) for name, ids in adj.items()}
        names = sorted(adj)
        rng.shuffle(names)
        names.sort(key=lambda n: degree[n], reverse=True)

        mate = {}
        for name in names:
            if name in mate:
                continue
            options = sorted(i for i in adj[name] if _other(edges[i], name) not in mate)
            if options:
                rng.shuffle(options)
                _pair(mate, edges, max(options, key=lambda i: degree[_other(edges[i], name)]))
        for name in names:
            if name not in mate and adj[name]:
                _augment(name, mate, edges, adj, set())

        chosen = sorted(set(mate.values()))
        rounds.append([edges[i] for i in chosen])
        for idx in chosen:
            home, away = edges[idx]
            adj[home.name].discard(idx)
            adj[away.name].discard(idx)
        remaining -= len(chosen)
    return rounds


def _candidate_order(teams, mode, rng, pairings, attempt):
    """Candidate order for one search attempt.

    Rosters with shared owners alternate between matching-built rounds and
    the circle rotation; clean rosters always use the rotation.
    """
    conflicted = any(same_owner(a, b) for a, b in combinations(teams, 2))
    if conflicted and attempt % 2 == 0:
        return [pair for r in _matching_rounds(pairings, rng) for pair in r]
    return _circle_order(teams, mode, rng)


# ── Backtracking ─────────────────────────────────────────────────────────────

class _Search:
    """One backtracking attempt over a fixed candidate order.

    Matches are added to the open round in increasing candidate position so
    the same round is never built twice in a different order. When nothing
    fits, the round is closed and a new one opened, up to ``max_rounds``.
    """

    def __init__(self, order, round_size, max_rounds, max_steps):
        self.order = order
        self.round_size = round_size
        self.max_rounds = max_rounds
        self.max_steps = max_steps
        self.used = [False] * len(order)
        self.by_pair = {}
        for pos, (home, away) in enumerate(order):
            self.by_pair.setdefault(frozenset((home.name, away.name)), []).append(pos)

    def _next_fit(self, start, busy, free):
        total = len(self.order)
        pair_checks = len(free) * (len(free) - 1) // 2
        if pair_checks < total - start:
            best = None
            for a, b in combinations(free, 2):
                for pos in self.by_pair.get(frozenset((a, b)), ()):
                    if pos >= start and not self.used[pos] and (best is None or pos < best):
                        best = pos
            return best

        for pos in range(start, total):
            if self.used[pos]:
                continue
            home, away = self.order[pos]
            if home.name not in busy and away.name not in busy:
                return pos
        return None

    def run(self, team_names):
        total = len(self.order)
        rounds = [[]]
        busy = [set()]
        stack = []
        placed = 0
        start = 0
        steps = 0

        while placed < total:
            steps += 1
            if steps > self.max_steps:
                return None

            pick = None
            if len(rounds[-1]) < self.round_size:
                free = [n for n in team_names if n not in busy[-1]]
                pick = self._next_fit(start, busy[-1], free)

            if pick is not None:
                home, away = self.order[pick]
                self.used[pick] = True
                rounds[-1].append(pick)
                busy[-1].update((home.name, away.name))
                stack.append(pick)
                placed += 1
                start = pick + 1
                continue

            if rounds[-1] and len(rounds) < self.max_rounds:
                rounds.append([])
                busy.append(set())
                stack.append(None)
                start = 0
                continue

            # dead end: undo back to the most recent pick and move past it
            while stack:
                pos = stack.pop()
                if pos is None:
                    rounds.pop()
                    busy.pop()
                    continue
                home, away = self.order[pos]
                self.used[pos] = False
                rounds[-1].pop()
                busy[-1].difference_update((home.name, away.name))
                placed -= 1
                start = pos + 1
                break
            else:
                return None

        return [[self.order[pos] for pos in r] for r in rounds if r]


def _greedy(pairings, round_size, rng):
    remaining = list(pairings)
    rng.shuffle(remaining)
    rounds = []
    while remaining:
        current, busy, deferred = [], set(), []
        for home, away in remaining:
            if len(current) < round_size and home.name not in busy and away.name not in busy:
                current.append((home, away))
                busy.update((home.name, away.name))
            else:
                deferred.append((home, away))
        rounds.append(current)
        remaining = deferred
    return rounds


# ── Public entry point ───────────────────────────────────────────────────────

def generate_schedule(
    teams,
    mode=ScheduleMode.SINGLE,
    rng=None,
    max_attempts=MAX_ATTEMPTS,
    max_steps=MAX_STEPS,
    id_prefix="league",
    stage_prefix="ROUND",
    group=None,
):
    """Build a full round-robin schedule as an ordered list of Rounds.

    Raises InfeasibleRoster / InvalidScheduleMode before any work is done.
    The output is randomized; pass a seeded ``random.Random`` for
    reproducible schedules.
    """
    mode = schedule_mode(mode)
    validate_roster(teams)
    rng = rng or random.Random()

    pairings = candidate_pairings(teams, mode)
    round_size, max_rounds = round_plan(len(teams), len(pairings))
    names = [t.name for t in teams]

    packed = None
    for attempt in range(max_attempts):
        order = _candidate_order(teams, mode, rng, pairings, attempt)
        packed = _Search(order, round_size, max_rounds, max_steps).run(names)
        if packed is not None:
            logger.debug("Round-robin packed on attempt %d", attempt + 1)
            break

    if packed is None:
        logger.warning(
            "Backtracking found no %d-round schedule for %d teams after %d attempts; "
            "falling back to greedy packing",
            max_rounds, len(teams), max_attempts,
        )
        packed = _greedy(pairings, round_size, rng)

    return _to_rounds(packed, id_prefix, stage_prefix, group)


def _to_rounds(packed, id_prefix, stage_prefix, group):
    rounds = []
    for r_idx, pairs in enumerate(packed, 1):
        name = f"{stage_prefix} {r_idx}"
        matches = []
        for m_idx, (home, away) in enumerate(pairs):
            matches.append(Match(
                id=f"{id_prefix}_R{r_idx}_M{m_idx}",
                home=home.name,
                away=away.name,
                home_logo=home.logo,
                away_logo=away.logo,
                home_owner=home.owner_name,
                away_owner=away.owner_name,
                stage=name,
                match_label=f"Game {m_idx + 1}",
                group=group,
            ))
        rounds.append(Round(number=r_idx, name=name, matches=matches))
    return rounds
