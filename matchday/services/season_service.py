import logging
import random

from flask import current_app

from matchday.core.errors import MatchdayError
from matchday.core.round_robin import generate_schedule, schedule_mode
from matchday.core.types import BYE, TBD, DEFAULT_LOGO, MatchStatus
from matchday.events import event_bus, SCHEDULE_GENERATED
from matchday.extensions import db
from matchday.models.match import Match
from matchday.models.round import Round, RoundKind
from matchday.models.season import Season, SeasonStatus, SeasonType
from matchday.models.team import Team
from matchday.services.mapping import new_match_row, to_core_team

logger = logging.getLogger(__name__)

RESERVED_NAMES = {TBD, BYE}


def create_season(data):
    season = Season(
        name=data["name"],
        type=SeasonType(data.get("type", "LEAGUE")),
        league_mode=schedule_mode(data.get("league_mode", "SINGLE")),
        status=SeasonStatus.DRAFT,
    )
    db.session.add(season)
    db.session.commit()
    return season


def add_team(season_id, data):
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    if season.rounds.count() > 0:
        return None, "Teams cannot be added once matches have been generated"

    name = data["name"].strip()
    owner = data["owner_name"].strip()
    if name in RESERVED_NAMES:
        return None, f"'{name}' is a reserved team name"
    if not owner:
        return None, "Owner name is required"
    if season.teams.filter_by(name=name).first():
        return None, f"Team '{name}' already exists in this season"

    team = Team(
        season_id=season.id,
        name=name,
        owner_name=owner,
        logo_url=data.get("logo_url") or DEFAULT_LOGO,
        region=data.get("region") or "",
        tier=data.get("tier") or "",
    )
    db.session.add(team)
    db.session.commit()
    return team, None


def season_teams(season):
    return [to_core_team(t) for t in season.teams.order_by(Team.id).all()]


def scheduler_options():
    return {
        "max_attempts": current_app.config["SCHEDULER_MAX_ATTEMPTS"],
        "max_steps": current_app.config["SCHEDULER_MAX_STEPS"],
    }


def persist_rounds(season, core_rounds, kind, first_number=1):
    """Write engine rounds for a season; the caller commits."""
    rows = []
    for offset, core_round in enumerate(core_rounds):
        round_row = Round(
            season_id=season.id,
            number=first_number + offset,
            name=core_round.name,
            kind=kind,
        )
        db.session.add(round_row)
        for position, match in enumerate(core_round.matches):
            db.session.add(new_match_row(season.id, round_row, match, position))
        rows.append(round_row)
    return rows


def generate_league_schedule(season_id, mode=None, rng=None):
    """Generate and store the round-robin schedule of a league season."""
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    if season.type != SeasonType.LEAGUE:
        return None, "Round-robin schedules are only for league seasons"

    if season.rounds.count() > 0:
        return None, "Schedule already generated for this season"

    try:
        mode = schedule_mode(mode) if mode is not None else season.league_mode
        core_rounds = generate_schedule(
            season_teams(season),
            mode,
            rng=rng or random.Random(),
            **scheduler_options(),
        )
    except MatchdayError as e:
        return None, str(e)

    season.league_mode = mode
    rows = persist_rounds(season, core_rounds, RoundKind.LEAGUE)
    season.status = SeasonStatus.ACTIVE
    db.session.commit()

    match_count = sum(len(r.matches) for r in core_rounds)
    logger.info(
        "Season %s: %s schedule with %d rounds and %d matches",
        season.id, mode.value, len(core_rounds), match_count,
    )
    event_bus.publish(SCHEDULE_GENERATED, {
        "season_id": season.id,
        "mode": mode.value,
        "rounds": len(core_rounds),
        "matches": match_count,
    })
    return rows, None


def list_rounds(season_id, kind=None):
    query = Round.query.filter_by(season_id=season_id)
    if kind is not None:
        query = query.filter_by(kind=kind)
    return query.order_by(Round.number).all()


def season_complete(season):
    """True once every match of the season has a result."""
    return season.matches.filter(Match.status != MatchStatus.COMPLETED).count() == 0
