"""League and group tables computed from completed matches."""
from dataclasses import dataclass
from itertools import groupby
from typing import Optional

from matchday.core.types import BYE, TBD, MatchStatus
from matchday.core.winner import goals

WIN_POINTS = 3
DRAW_POINTS = 1


@dataclass
class TableRow:
    team: object
    group: Optional[str] = None
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    goals_for: int = 0
    goals_against: int = 0

    @property
    def name(self):
        return self.team.name

    @property
    def goal_difference(self):
        return self.goals_for - self.goals_against

    @property
    def points(self):
        return self.won * WIN_POINTS + self.drawn * DRAW_POINTS

    def record(self, scored, conceded):
        self.played += 1
        self.goals_for += scored
        self.goals_against += conceded
        if scored > conceded:
            self.won += 1
        elif scored < conceded:
            self.lost += 1
        else:
            self.drawn += 1

    def as_dict(self):
        return {
            "team": self.team.name,
            "owner_name": self.team.owner_name,
            "logo": self.team.logo,
            "group": self.group,
            "played": self.played,
            "won": self.won,
            "drawn": self.drawn,
            "lost": self.lost,
            "goals_for": self.goals_for,
            "goals_against": self.goals_against,
            "goal_difference": self.goal_difference,
            "points": self.points,
        }


def _counted(match, names):
    return (
        match.status is MatchStatus.COMPLETED
        and match.home in names
        and match.away in names
        and not {match.home, match.away} & {TBD, BYE}
    )


def _head_to_head(tied, matches):
    names = {row.name for row in tied}
    h2h = {name: {"pts": 0, "gd": 0} for name in names}
    for m in matches:
        if m.home not in names or m.away not in names:
            continue
        home, away = goals(m.home_score), goals(m.away_score)
        if home > away:
            h2h[m.home]["pts"] += WIN_POINTS
        elif home < away:
            h2h[m.away]["pts"] += WIN_POINTS
        else:
            h2h[m.home]["pts"] += DRAW_POINTS
            h2h[m.away]["pts"] += DRAW_POINTS
        h2h[m.home]["gd"] += home - away
        h2h[m.away]["gd"] += away - home
    return h2h


def sort_table(rows, matches):
    """Order rows by points, then head-to-head points and goal difference
    among the tied teams, then overall goal difference and goals for.
    Remaining ties fall back to team name so the order is stable.
    """
    by_points = sorted(rows, key=lambda r: r.points, reverse=True)

    result = []
    for _pts, group in groupby(by_points, key=lambda r: r.points):
        tied = list(group)
        if len(tied) == 1:
            result.append(tied[0])
            continue

        h2h = _head_to_head(tied, matches)
        tied.sort(key=lambda r: r.name)
        tied.sort(
            key=lambda r: (
                h2h[r.name]["pts"],
                h2h[r.name]["gd"],
                r.goal_difference,
                r.goals_for,
            ),
            reverse=True,
        )
        result.extend(tied)
    return result


def league_table(teams, matches, group=None):
    """Table for ``teams`` from the completed matches among them."""
    rows = {t.name: TableRow(team=t, group=group) for t in teams}
    played = [m for m in matches if _counted(m, rows)]
    for m in played:
        home, away = goals(m.home_score), goals(m.away_score)
        rows[m.home].record(home, away)
        rows[m.away].record(away, home)
    return sort_table(list(rows.values()), played)


def group_tables(groups, matches):
    """``groups`` maps a group label to its teams; returns label -> table."""
    tables = {}
    for label in sorted(groups):
        in_group = [m for m in matches if m.group == label]
        tables[label] = league_table(groups[label], in_group, group=label)
    return tables


def qualifiers(tables, per_group=2, labels=None):
    """Top finishers keyed by (group, position) for the knockout seeding.

    ``labels`` renames the groups, e.g. to the A/B/C... letters the seeding
    table is written in.
    """
    labels = labels or {}
    chosen = {}
    for group, table in tables.items():
        for position, row in enumerate(table[:per_group], 1):
            chosen[(labels.get(group, group), position)] = row.team
    return chosen
