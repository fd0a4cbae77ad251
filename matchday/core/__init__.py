"""Scheduling and bracket engine.

Pure functions over plain dataclasses; nothing here imports Flask or the
database layer.
"""
from matchday.core.aggregate import aggregate, resolve_tie
from matchday.core.bracket import (
    KNOCKOUT_SEEDING,
    MatchRef,
    Slot,
    build_bracket,
    fill_byes,
    next_slot,
    owner_seeded_entrants,
    seed_from_groups,
)
from matchday.core.errors import (
    InfeasibleRoster,
    InvalidScheduleMode,
    MalformedMatchId,
    MatchdayError,
    MatchNotFound,
    UnsupportedBracketSize,
)
from matchday.core.propagation import BracketTree, RecordOutcome, create_bracket, record_result, resolve_byes
from matchday.core.round_robin import generate_schedule
from matchday.core.standings import group_tables, league_table, qualifiers
from matchday.core.types import BYE, TBD, Match, MatchStatus, Resolution, Round, ScheduleMode, Side, Team, TeamRef
from matchday.core.winner import resolve_winner

__all__ = [
    "BYE",
    "TBD",
    "KNOCKOUT_SEEDING",
    "BracketTree",
    "InfeasibleRoster",
    "InvalidScheduleMode",
    "MalformedMatchId",
    "Match",
    "MatchNotFound",
    "MatchRef",
    "MatchStatus",
    "MatchdayError",
    "RecordOutcome",
    "Resolution",
    "Round",
    "ScheduleMode",
    "Side",
    "Slot",
    "Team",
    "TeamRef",
    "UnsupportedBracketSize",
    "aggregate",
    "build_bracket",
    "create_bracket",
    "fill_byes",
    "generate_schedule",
    "group_tables",
    "league_table",
    "next_slot",
    "owner_seeded_entrants",
    "qualifiers",
    "record_result",
    "resolve_byes",
    "resolve_tie",
    "resolve_winner",
    "seed_from_groups",
]
