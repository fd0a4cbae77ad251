import logging

from matchday.core.errors import MatchdayError
from matchday.core.propagation import RECORD_FIELDS, record_result
from matchday.core.types import BYE, TBD, MatchStatus
from matchday.events import (
    event_bus,
    BRACKET_UPDATED,
    RESULT_RECORDED,
    TIE_UNDECIDED,
)
from matchday.extensions import db
from matchday.models.match import Match
from matchday.models.round import RoundKind
from matchday.models.season import SeasonStatus, SeasonType
from matchday.services.bracket_service import load_tree, write_back
from matchday.services.mapping import apply_core_match
from matchday.services.season_service import season_complete

logger = logging.getLogger(__name__)


def _result_payload(match):
    return {
        "season_id": match.season_id,
        "match_id": match.id,
        "code": match.code,
        "home": match.home,
        "away": match.away,
        "home_score": match.home_score,
        "away_score": match.away_score,
    }


def record_match_result(match_id, home_score, away_score, records=None, manual_winner=None):
    """Store a result. Knockout results also move the winner on.

    Returns ({"match", "updated", "needs_manual_winner", "awaiting_leg",
    "winner"}, None)
    or (None, error).
    """
    match = db.session.get(Match, match_id)
    if not match:
        return None, "Match not found"

    if TBD in (match.home, match.away):
        return None, "Both teams must be known before a result is recorded"

    if match.round.kind == RoundKind.KNOCKOUT:
        return _record_knockout(match, home_score, away_score, records, manual_winner)

    if manual_winner is not None:
        return None, "A manual winner only applies to knockout matches"

    match.home_score = str(home_score)
    match.away_score = str(away_score)
    match.status = MatchStatus.COMPLETED
    for name in RECORD_FIELDS:
        if records and records.get(name) is not None:
            setattr(match, name, list(records[name]))

    season = match.season
    if season.type == SeasonType.LEAGUE and season_complete(season):
        season.status = SeasonStatus.COMPLETED
    db.session.commit()

    event_bus.publish(RESULT_RECORDED, _result_payload(match))
    return {
        "match": match,
        "updated": [],
        "needs_manual_winner": False,
        "awaiting_leg": False,
        "winner": None,
    }, None


def _record_knockout(match, home_score, away_score, records, manual_winner):
    if BYE in (match.home, match.away):
        return None, "Bye matches are settled automatically"

    tree = load_tree(match.season_id)
    try:
        outcome = record_result(
            tree,
            match.code,
            home_score,
            away_score,
            manual_override=manual_winner,
            records=records,
        )
    except (MatchdayError, ValueError) as e:
        return None, str(e)

    apply_core_match(match, outcome.match)
    updated = write_back(match.season_id, outcome.downstream)

    season = match.season
    champion = outcome.tree.champion()
    if champion is not None:
        season.status = SeasonStatus.COMPLETED
    elif season.status == SeasonStatus.COMPLETED:
        # a re-scored earlier round reopened the final
        season.status = SeasonStatus.ACTIVE
    db.session.commit()

    payload = _result_payload(match)
    event_bus.publish(RESULT_RECORDED, payload)
    if outcome.undecided:
        event_bus.publish(TIE_UNDECIDED, payload)
    if updated:
        event_bus.publish(BRACKET_UPDATED, {
            "season_id": match.season_id,
            "match_id": match.id,
            "updated": [m.code for m in updated],
            "champion": champion.name if champion else None,
        })

    return {
        "match": match,
        "updated": updated,
        "needs_manual_winner": outcome.undecided,
        "awaiting_leg": outcome.awaiting_leg,
        "winner": outcome.resolution.winner.name if outcome.decisive else None,
    }, None
