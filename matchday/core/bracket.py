"""Single-elimination bracket layout.

Knockout match ids look like ``ko_4_1``: prefix, number of matches in the
stage, position in the stage. The final is ``ko_final_0`` and legs of a
two-legged tie add ``_leg1`` / ``_leg2``. Position ``i`` of an ``N``-match
stage feeds position ``i // 2`` of the ``N // 2`` stage, on the home side
when ``i`` is even and the away side when it is odd.
"""
import random
from dataclasses import dataclass
from typing import Optional

from matchday.core.errors import MalformedMatchId, UnsupportedBracketSize
from matchday.core.types import TBD, Match, MatchStatus, Side, TeamRef, bye_team

SUPPORTED_BRACKET_SIZES = (4, 8, 16)
KNOCKOUT_PREFIX = "ko"
FINAL_TOKEN = "final"
THIRD_PLACE_STAGE = "THIRD_PLACE"

# Group qualifier seeding: bracket size -> entrant slot order as
# (group, finishing position). Slots 2k and 2k+1 meet in the first round.
SEEDING_TABLE_VERSION = 1
KNOCKOUT_SEEDING = {
    4: (("A", 1), ("B", 2), ("B", 1), ("A", 2)),
    8: (
        ("A", 1), ("B", 2), ("C", 1), ("D", 2),
        ("B", 1), ("A", 2), ("D", 1), ("C", 2),
    ),
    16: (
        ("A", 1), ("B", 2), ("C", 1), ("D", 2),
        ("E", 1), ("F", 2), ("G", 1), ("H", 2),
        ("B", 1), ("A", 2), ("D", 1), ("C", 2),
        ("F", 1), ("E", 2), ("H", 1), ("G", 2),
    ),
}


@dataclass(frozen=True)
class MatchRef:
    """Structured form of a knockout match id."""
    prefix: str
    count: int
    index: int
    leg: Optional[int] = None

    def encode(self):
        count = FINAL_TOKEN if self.count == 1 else str(self.count)
        base = f"{self.prefix}_{count}_{self.index}"
        return f"{base}_leg{self.leg}" if self.leg else base

    @property
    def tie(self):
        return MatchRef(self.prefix, self.count, self.index)

    @classmethod
    def decode(cls, match_id):
        parts = str(match_id).split("_")
        leg = None
        if parts and parts[-1].startswith("leg"):
            try:
                leg = int(parts.pop()[3:])
            except ValueError:
                raise MalformedMatchId(f"Bad leg suffix in {match_id!r}") from None
        if len(parts) < 3 or not all(parts):
            raise MalformedMatchId(f"Not a bracket match id: {match_id!r}")

        prefix = "_".join(parts[:-2])
        count_token, index_token = parts[-2], parts[-1]
        try:
            count = 1 if count_token == FINAL_TOKEN else int(count_token)
            index = int(index_token)
        except ValueError:
            raise MalformedMatchId(f"Not a bracket match id: {match_id!r}") from None

        if count < 1 or not 0 <= index < count or leg not in (None, 1, 2):
            raise MalformedMatchId(f"Position out of range in {match_id!r}")
        return cls(prefix, count, index, leg)


@dataclass(frozen=True)
class Slot:
    next_match_id: str
    side: Side


def _is_power_of_two(n):
    return n > 0 and n & (n - 1) == 0


def check_stage_size(count):
    if not _is_power_of_two(count) or count * 2 > max(SUPPORTED_BRACKET_SIZES):
        raise UnsupportedBracketSize(f"Stages of {count} matches are not supported")


def side_for(index):
    return Side.HOME if index % 2 == 0 else Side.AWAY


def next_slot(ref):
    """Where the winner of ``ref`` goes; None for the final."""
    if isinstance(ref, str):
        ref = MatchRef.decode(ref)
    check_stage_size(ref.count)
    if ref.count == 1:
        return None
    target = MatchRef(ref.prefix, ref.count // 2, ref.index // 2)
    return Slot(target.encode(), side_for(ref.index))


def flat_next_slot(index, bracket_size):
    """Same routing for a bracket flattened into one list of matches.

    Matches are numbered first round first; an ``N``-match first round feeds
    position ``N + i // 2``. Returns (next_index, side) or None for the final.
    """
    if bracket_size not in SUPPORTED_BRACKET_SIZES:
        raise UnsupportedBracketSize(f"Bracket size {bracket_size} is not supported")
    total = bracket_size - 1
    if not 0 <= index < total:
        raise IndexError(f"Match index {index} outside a {bracket_size}-team bracket")

    start, level = 0, bracket_size // 2
    while index >= start + level:
        start += level
        level //= 2
    if level == 1:
        return None
    offset = index - start
    return start + level + offset // 2, side_for(offset)


def bracket_size_for(entrant_count):
    """Smallest supported bracket that seats every entrant."""
    for size in SUPPORTED_BRACKET_SIZES:
        if entrant_count <= size:
            return size
    raise UnsupportedBracketSize(
        f"{entrant_count} entrants exceed the largest bracket ({max(SUPPORTED_BRACKET_SIZES)})"
    )


def stage_name(count):
    if count == 1:
        return "FINAL"
    if count == 2:
        return "SEMI_FINAL"
    return f"ROUND_OF_{count * 2}"


def match_label(count, index):
    if count == 1:
        return "Final"
    if count == 2:
        prefix = "Semi-Final"
    elif count == 4:
        prefix = "Quarter-Final"
    else:
        prefix = f"Ro{count * 2}"
    return f"{prefix} {index + 1}"


# ── Seeding ──────────────────────────────────────────────────────────────────

def _bit_reversal(n):
    bits = n.bit_length() - 1
    order = []
    for i in range(n):
        reversed_i, value = 0, i
        for _ in range(bits):
            reversed_i = (reversed_i << 1) | (value & 1)
            value >>= 1
        order.append(reversed_i)
    return order


def distribute_by_owner(teams, size, rng=None):
    """Seat teams so that one owner's teams are spread across the bracket.

    Owners with the most teams are placed first, walking the slots in
    bit-reversed order so consecutive placements land in opposite halves.
    Unfilled slots are None.
    """
    if size not in SUPPORTED_BRACKET_SIZES:
        raise UnsupportedBracketSize(f"Bracket size {size} is not supported")
    if len(teams) > size:
        raise UnsupportedBracketSize(f"{len(teams)} teams do not fit a {size}-team bracket")

    by_owner = {}
    for team in teams:
        by_owner.setdefault(team.owner_name, []).append(team)
    owners = list(by_owner)
    if rng is not None:
        rng.shuffle(owners)
    owners.sort(key=lambda o: len(by_owner[o]), reverse=True)

    slots = [None] * size
    order = _bit_reversal(size)
    cursor = 0
    for owner in owners:
        for team in by_owner[owner]:
            while slots[order[cursor]] is not None:
                cursor = (cursor + 1) % size
            slots[order[cursor]] = team
    return slots


def seed_from_groups(qualifiers, size):
    """Seat group qualifiers using the seeding table.

    ``qualifiers`` maps (group, finishing position) to a Team. Positions the
    table asks for but nobody qualified into stay None.
    """
    if size not in KNOCKOUT_SEEDING:
        raise UnsupportedBracketSize(f"No seeding table for a {size}-team bracket")
    return [qualifiers.get(key) for key in KNOCKOUT_SEEDING[size]]


def fill_byes(slots):
    """Replace empty entrant slots with synthetic BYE teams."""
    return [team if team is not None else bye_team(i) for i, team in enumerate(slots)]


# ── Layout ───────────────────────────────────────────────────────────────────

def build_bracket(entrants, prefix=KNOCKOUT_PREFIX, two_legged=False, third_place=False):
    """Lay out every match of a bracket, first round first.

    ``entrants`` is one Team per slot (use ``fill_byes`` first); slots 2k and
    2k+1 meet in the first round. Later rounds are TBD placeholders wired up
    with next-match pointers. With ``two_legged`` every tie except the final
    is played home and away.
    """
    size = len(entrants)
    if size not in SUPPORTED_BRACKET_SIZES:
        raise UnsupportedBracketSize(f"Bracket size {size} is not supported")
    if any(team is None for team in entrants):
        raise ValueError("Empty entrant slot; call fill_byes first")

    third_id = f"{prefix}_third_0" if third_place else None
    matches = []
    count = size // 2
    while count >= 1:
        for index in range(count):
            ref = MatchRef(prefix, count, index)
            slot = next_slot(ref)
            home, away = TeamRef(TBD), TeamRef(TBD)
            if count == size // 2:
                home = TeamRef.from_team(entrants[2 * index])
                away = TeamRef.from_team(entrants[2 * index + 1])

            legs = (1, 2) if two_legged and count > 1 else (None,)
            for leg in legs:
                m = Match(
                    id=MatchRef(prefix, count, index, leg).encode(),
                    stage=stage_name(count),
                    match_label=match_label(count, index) + (f" (Leg {leg})" if leg else ""),
                    leg=leg,
                    next_match_id=slot.next_match_id if slot else None,
                    next_match_side=slot.side if slot else None,
                    loser_match_id=third_id if count == 2 else None,
                    status=MatchStatus.UPCOMING,
                )
                m.put(Side.HOME, away if leg == 2 else home)
                m.put(Side.AWAY, home if leg == 2 else away)
                matches.append(m)
        count //= 2

    if third_place:
        matches.append(Match(
            id=third_id,
            stage=THIRD_PLACE_STAGE,
            match_label="3rd Place",
        ))
    return matches


def owner_seeded_entrants(teams, rng=None):
    """Bracket entrants for a roster: owner-aware seating plus BYEs."""
    size = bracket_size_for(max(len(teams), min(SUPPORTED_BRACKET_SIZES)))
    rng = rng or random.Random()
    return fill_byes(distribute_by_owner(teams, size, rng))
