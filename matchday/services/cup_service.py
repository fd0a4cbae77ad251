import logging
import random
import string

from matchday.core.bracket import (
    KNOCKOUT_SEEDING,
    SEEDING_TABLE_VERSION,
    bracket_size_for,
    fill_byes,
    seed_from_groups,
)
from matchday.core.errors import MatchdayError
from matchday.core.propagation import create_bracket
from matchday.core.round_robin import generate_schedule, same_owner
from matchday.core.standings import qualifiers
from matchday.core.types import MatchStatus, Round as CoreRound, ScheduleMode
from matchday.events import event_bus, BRACKET_CREATED, SCHEDULE_GENERATED
from matchday.extensions import db
from matchday.models.match import Match
from matchday.models.round import Round, RoundKind
from matchday.models.season import CupPhase, Season, SeasonStatus, SeasonType
from matchday.models.team import Team
from matchday.services.bracket_service import knockout_rows, persist_bracket
from matchday.services.mapping import to_core_team
from matchday.services.season_service import persist_rounds, scheduler_options
from matchday.services.standings import cup_group_tables

logger = logging.getLogger(__name__)

QUALIFIERS_PER_GROUP = 2
MAX_GROUPS = max(KNOCKOUT_SEEDING) // QUALIFIERS_PER_GROUP


def _check_groups(season, groups):
    """Resolve group team ids to rows; returns (label -> [Team], error)."""
    if not groups:
        return None, "At least one group is required"
    if len(groups) > MAX_GROUPS:
        return None, f"At most {MAX_GROUPS} groups are supported"

    seen = set()
    resolved = {}
    for label, team_ids in groups.items():
        label = str(label).strip().upper()
        if not label or label in resolved:
            return None, "Group labels must be unique and non-empty"
        if len(team_ids) < 2:
            return None, f"Group {label} needs at least 2 teams"

        rows = []
        for team_id in team_ids:
            team = db.session.get(Team, team_id)
            if not team or team.season_id != season.id:
                return None, f"Team {team_id} is not part of this season"
            if team_id in seen:
                return None, f"Team {team.name} is in more than one group"
            seen.add(team_id)
            rows.append(team)

        core_teams = [to_core_team(t) for t in rows]
        for i, a in enumerate(core_teams):
            for b in core_teams[i + 1:]:
                if same_owner(a, b):
                    return None, (
                        f"{a.name} and {b.name} share owner {a.owner_name} "
                        f"and cannot be drawn in group {label}"
                    )
        resolved[label] = core_teams
    return resolved, None


def _merge_matchdays(per_group):
    """Interleave the groups' rounds into shared matchdays."""
    longest = max(len(rounds) for rounds in per_group.values())
    merged = []
    for i in range(longest):
        matches = []
        for label in sorted(per_group):
            rounds = per_group[label]
            if i < len(rounds):
                matches.extend(rounds[i].matches)
        merged.append(CoreRound(number=i + 1, name=f"MATCHDAY {i + 1}", matches=matches))
    return merged


def create_group_stage(season_id, groups, rng=None):
    """Draw the group stage of a cup: a single round-robin inside each group."""
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    if season.type != SeasonType.CUP:
        return None, "Group stages are only for cup seasons"

    if season.rounds.count() > 0:
        return None, "Group stage already generated for this season"

    resolved, error = _check_groups(season, groups)
    if error:
        return None, error

    rng = rng or random.Random()
    per_group = {}
    try:
        for label, teams in resolved.items():
            per_group[label] = generate_schedule(
                teams,
                ScheduleMode.SINGLE,
                rng=rng,
                id_prefix=f"group_{label}",
                stage_prefix=f"GROUP {label} ROUND",
                group=label,
                **scheduler_options(),
            )
    except MatchdayError as e:
        return None, f"Group {label}: {e}"

    rows = persist_rounds(season, _merge_matchdays(per_group), RoundKind.GROUP)
    season.cup_phase = CupPhase.GROUPS
    season.status = SeasonStatus.ACTIVE
    db.session.commit()

    match_count = sum(len(r.matches) for r in rows)
    logger.info(
        "Season %s: %d groups, %d matchdays, %d matches",
        season.id, len(resolved), len(rows), match_count,
    )
    event_bus.publish(SCHEDULE_GENERATED, {
        "season_id": season.id,
        "groups": sorted(resolved),
        "rounds": len(rows),
        "matches": match_count,
    })
    return rows, None


def create_knockout_from_groups(season_id, two_legged=False, third_place=False):
    """Seed the top two of every group into the knockout bracket."""
    season = db.session.get(Season, season_id)
    if not season:
        return None, "Season not found"

    if season.type != SeasonType.CUP:
        return None, "Knockout from groups is only for cup seasons"

    if season.cup_phase != CupPhase.GROUPS:
        return None, "Group stage has not been generated"

    if knockout_rows(season.id):
        return None, "Knockout stage already exists for this season"

    pending = (
        Match.query.join(Round)
        .filter(
            Match.season_id == season.id,
            Round.kind == RoundKind.GROUP,
            Match.status != MatchStatus.COMPLETED,
        )
        .count()
    )
    if pending:
        return None, f"Group stage is not finished ({pending} matches left)"

    tables = cup_group_tables(season)
    # the seeding table is written for groups A, B, C...
    letters = dict(zip(sorted(tables), string.ascii_uppercase))
    chosen = qualifiers(tables, QUALIFIERS_PER_GROUP, labels=letters)

    try:
        size = bracket_size_for(max(len(chosen), min(KNOCKOUT_SEEDING)))
        entrants = fill_byes(seed_from_groups(chosen, size))
        tree = create_bracket(entrants, two_legged=two_legged, third_place=third_place)
    except MatchdayError as e:
        return None, str(e)

    persist_bracket(season, tree)
    season.cup_phase = CupPhase.KNOCKOUT
    db.session.commit()

    logger.info(
        "Season %s: knockout stage with %d qualifiers (%s, seeding table v%d)",
        season.id, len(chosen), "two legs" if two_legged else "single leg",
        SEEDING_TABLE_VERSION,
    )
    event_bus.publish(BRACKET_CREATED, {
        "season_id": season.id,
        "size": size,
        "two_legged": two_legged,
        "seeding_version": SEEDING_TABLE_VERSION,
        "qualifiers": [team.name for team in chosen.values()],
    })
    return knockout_rows(season.id), None
