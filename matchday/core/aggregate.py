"""Two-legged ties.

A tie is decided on the sum of both legs. Leg 1's home team is shown as the
home side of the aggregate; leg 2 is matched up by team name because its
home and away are normally swapped. There is no away-goals rule and no
penalty shoot-out: a level aggregate needs a manual winner, the same as a
drawn single match.
"""
from dataclasses import replace

from matchday.core.types import MatchStatus, Side
from matchday.core.winner import goals, resolve_winner


def _played(leg):
    return leg is not None and leg.status is MatchStatus.COMPLETED


def aggregate(leg1, leg2=None):
    """Combine two legs into one synthetic match.

    The synthetic match is COMPLETED only when both legs are; until then it
    carries the goals scored so far and resolves to no winner.
    """
    home_total = goals(leg1.home_score) if _played(leg1) else 0
    away_total = goals(leg1.away_score) if _played(leg1) else 0
    aligned = True

    if _played(leg2):
        home_side = leg2.side_of(leg1.home)
        away_side = leg2.side_of(leg1.away)
        if home_side is None or away_side is None or home_side is away_side:
            aligned = False
        else:
            home_total += goals(_score(leg2, home_side))
            away_total += goals(_score(leg2, away_side))

    complete = _played(leg1) and _played(leg2) and aligned
    return replace(
        leg1,
        id=tie_id(leg1.id),
        leg=None,
        home_score=str(home_total) if complete or _played(leg1) else "",
        away_score=str(away_total) if complete or _played(leg1) else "",
        status=MatchStatus.COMPLETED if complete else MatchStatus.UPCOMING,
        home_scorers=[],
        away_scorers=[],
        home_assists=[],
        away_assists=[],
    )


def resolve_tie(leg1, leg2=None, manual_override=None):
    """Winner of a two-legged tie, sides expressed in leg 1's orientation."""
    synthetic = aggregate(leg1, leg2)
    if synthetic.status is not MatchStatus.COMPLETED and manual_override is not None:
        # an override only settles a finished tie
        manual_override = None
    return synthetic, resolve_winner(synthetic, manual_override)


def tie_id(match_id):
    for suffix in ("_leg1", "_leg2"):
        if match_id.endswith(suffix):
            return match_id[: -len(suffix)]
    return match_id


def _score(match, side):
    return match.home_score if side is Side.HOME else match.away_score
