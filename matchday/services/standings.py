from matchday.core.standings import group_tables, league_table
from matchday.extensions import db
from matchday.models.match import Match
from matchday.models.round import Round, RoundKind
from matchday.models.season import Season, SeasonType
from matchday.models.team import Team
from matchday.services.mapping import to_core_match, to_core_team


def _matches(season_id, kind):
    rows = (
        Match.query.join(Round)
        .filter(Match.season_id == season_id, Round.kind == kind)
        .all()
    )
    return [to_core_match(row) for row in rows]


def cup_group_tables(season):
    """Group label -> sorted table rows, built from the stored group matches."""
    matches = _matches(season.id, RoundKind.GROUP)
    teams = {t.name: to_core_team(t) for t in season.teams.order_by(Team.id)}

    groups = {}
    for m in matches:
        members = groups.setdefault(m.group, {})
        for name in (m.home, m.away):
            if name in teams:
                members[name] = teams[name]
    return group_tables({label: list(members.values()) for label, members in groups.items()}, matches)


def season_standings(season_id):
    """Standings for a league season, or per group for a cup.

    Tournament seasons have no table.
    """
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    if season.type == SeasonType.LEAGUE:
        teams = [to_core_team(t) for t in season.teams.order_by(Team.id)]
        table = league_table(teams, _matches(season.id, RoundKind.LEAGUE))
        return {"table": [row.as_dict() for row in table]}, None

    if season.type == SeasonType.CUP:
        tables = cup_group_tables(season)
        return {
            "groups": {
                label: [row.as_dict() for row in table]
                for label, table in tables.items()
            }
        }, None

    return None, "Tournament seasons have no standings table"
