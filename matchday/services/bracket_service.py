import logging
import random

from matchday.core.bracket import owner_seeded_entrants
from matchday.core.errors import MatchdayError
from matchday.core.propagation import BracketTree, create_bracket
from matchday.core.types import Round as CoreRound
from matchday.events import event_bus, BRACKET_CREATED, BRACKET_RESET
from matchday.extensions import db
from matchday.models.match import Match
from matchday.models.round import Round, RoundKind
from matchday.models.season import CupPhase, Season, SeasonStatus, SeasonType
from matchday.services.mapping import apply_core_match, to_core_match
from matchday.services.season_service import persist_rounds, season_teams

logger = logging.getLogger(__name__)


# ── Loading and saving ───────────────────────────────────────────────────────

def knockout_rows(season_id):
    return (
        Match.query.join(Round)
        .filter(Match.season_id == season_id, Round.kind == RoundKind.KNOCKOUT)
        .order_by(Round.number, Match.position)
        .all()
    )


def load_tree(season_id):
    return BracketTree(to_core_match(row) for row in knockout_rows(season_id))


def write_back(season_id, matches):
    """Copy patched engine matches onto their rows; the caller commits."""
    if not matches:
        return []
    codes = [m.id for m in matches]
    rows = {
        row.code: row
        for row in Match.query.filter(Match.season_id == season_id, Match.code.in_(codes))
    }
    updated = []
    for match in matches:
        row = rows.get(match.id)
        if row is None:
            logger.warning("Season %s has no stored match %s", season_id, match.id)
            continue
        updated.append(apply_core_match(row, match))
    return updated


def _stage_rounds(tree):
    """Split a bracket into rounds: one per stage, and per leg of a stage."""
    rounds = []
    by_key = {}
    for match in tree:
        key = (match.stage, match.leg)
        if key not in by_key:
            name = f"{match.stage} LEG {match.leg}" if match.leg else match.stage
            by_key[key] = CoreRound(number=len(rounds) + 1, name=name)
            rounds.append(by_key[key])
        by_key[key].matches.append(match)
    return rounds


def persist_bracket(season, tree):
    """Store a freshly built bracket after any existing rounds."""
    last = season.rounds.order_by(Round.number.desc()).first()
    first_number = last.number + 1 if last else 1
    return persist_rounds(season, _stage_rounds(tree), RoundKind.KNOCKOUT, first_number)


# ── Tournament bracket ───────────────────────────────────────────────────────

def create_tournament_bracket(season_id, third_place=False, rng=None):
    """Seat the roster into a knockout bracket, spreading each owner's teams."""
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    if season.type != SeasonType.TOURNAMENT:
        return None, "Knockout brackets from a roster are only for tournament seasons"

    if knockout_rows(season.id):
        return None, "Bracket already exists for this season"

    teams = season_teams(season)
    if len(teams) < 2:
        return None, "At least 2 teams are required"

    try:
        entrants = owner_seeded_entrants(teams, rng or random.Random())
        tree = create_bracket(entrants, third_place=third_place)
    except MatchdayError as e:
        return None, str(e)

    persist_bracket(season, tree)
    season.status = SeasonStatus.ACTIVE
    db.session.commit()

    logger.info(
        "Season %s: %d-team bracket for %d teams", season.id, len(entrants), len(teams)
    )
    event_bus.publish(BRACKET_CREATED, {
        "season_id": season.id,
        "size": len(entrants),
        "third_place": third_place,
    })
    return knockout_rows(season.id), None


# ── Queries ──────────────────────────────────────────────────────────────────

def get_bracket(season_id):
    """Return the knockout rounds of a season and its champion, if decided."""
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    rounds = (
        season.rounds.filter_by(kind=RoundKind.KNOCKOUT)
        .order_by(Round.number)
        .all()
    )
    if not rounds:
        return None, "No bracket found for this season"

    champion = load_tree(season.id).champion()
    return {"rounds": rounds, "champion": champion.name if champion else None}, None


def reset_bracket(season_id):
    """Delete every knockout match of a season."""
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    rounds = season.rounds.filter_by(kind=RoundKind.KNOCKOUT).all()
    if not rounds:
        return None, "No bracket found for this season"

    removed = sum(len(r.matches) for r in rounds)
    for round_row in rounds:
        db.session.delete(round_row)

    if season.type == SeasonType.CUP:
        season.cup_phase = CupPhase.GROUPS
        season.status = SeasonStatus.ACTIVE
    else:
        season.status = SeasonStatus.DRAFT
    db.session.commit()

    logger.info("Season %s: bracket reset, %d matches removed", season.id, removed)
    event_bus.publish(BRACKET_RESET, {"season_id": season.id, "removed": removed})
    return removed, None
