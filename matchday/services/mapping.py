"""Conversions between database rows and engine dataclasses."""
from matchday.core import types as core
from matchday.models.match import Match

ENGINE_FIELDS = (
    "home", "away", "home_logo", "away_logo", "home_owner", "away_owner",
    "home_score", "away_score", "status", "stage", "match_label", "leg",
    "next_match_side", "home_scorers", "away_scorers", "home_assists", "away_assists",
)


def to_core_team(row):
    return core.Team(
        name=row.name,
        owner_name=row.owner_name,
        id=row.id,
        logo=row.logo_url,
        region=row.region,
        tier=row.tier,
    )


def to_core_match(row):
    values = {name: getattr(row, name) for name in ENGINE_FIELDS}
    for name in ("home_scorers", "away_scorers", "home_assists", "away_assists"):
        values[name] = list(values[name] or [])
    return core.Match(
        id=row.code,
        group=row.group_name,
        next_match_id=row.next_match_code,
        loser_match_id=row.loser_match_code,
        **values,
    )


def apply_core_match(row, match):
    """Copy an engine match onto its row."""
    for name in ENGINE_FIELDS:
        value = getattr(match, name)
        if isinstance(value, list):
            value = list(value)
        setattr(row, name, value)
    row.group_name = match.group
    row.next_match_code = match.next_match_id
    row.loser_match_code = match.loser_match_id
    return row


def new_match_row(season_id, round_row, match, position):
    row = Match(season_id=season_id, round=round_row, code=match.id, position=position)
    return apply_core_match(row, match)
