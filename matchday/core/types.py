"""Plain value types shared by the scheduling and bracket engine.

Nothing in here touches the database; the service layer maps these to and
from the SQLAlchemy models.
"""
import enum
from dataclasses import dataclass, field
from typing import List, Optional

TBD = "TBD"
BYE = "BYE"
DEFAULT_LOGO = "https://via.placeholder.com/64?text=FC"


class MatchStatus(enum.Enum):
    UPCOMING = "UPCOMING"
    COMPLETED = "COMPLETED"


class Side(enum.Enum):
    HOME = "HOME"
    AWAY = "AWAY"

    @property
    def other(self):
        return Side.AWAY if self is Side.HOME else Side.HOME


class ScheduleMode(enum.Enum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"


@dataclass(frozen=True)
class Team:
    name: str
    owner_name: str
    id: Optional[int] = None
    logo: str = DEFAULT_LOGO
    region: str = ""
    tier: str = ""

    @property
    def is_bye(self):
        return self.name == BYE


@dataclass(frozen=True)
class TeamRef:
    """The part of a team that travels with a match slot."""
    name: str
    logo: str = DEFAULT_LOGO
    owner: str = TBD

    @classmethod
    def from_team(cls, team):
        return cls(name=team.name, logo=team.logo, owner=team.owner_name)


TBD_REF = TeamRef(name=TBD)


def bye_team(slot=0):
    """Synthetic opponent for an empty bracket slot."""
    return Team(name=BYE, owner_name="SYSTEM", id=-(slot + 1))


@dataclass
class Match:
    id: str
    home: str = TBD
    away: str = TBD
    home_logo: str = DEFAULT_LOGO
    away_logo: str = DEFAULT_LOGO
    home_owner: str = TBD
    away_owner: str = TBD
    home_score: str = ""
    away_score: str = ""
    status: MatchStatus = MatchStatus.UPCOMING
    stage: str = ""
    match_label: str = ""
    group: Optional[str] = None
    leg: Optional[int] = None
    next_match_id: Optional[str] = None
    next_match_side: Optional[Side] = None
    loser_match_id: Optional[str] = None
    home_scorers: List[str] = field(default_factory=list)
    away_scorers: List[str] = field(default_factory=list)
    home_assists: List[str] = field(default_factory=list)
    away_assists: List[str] = field(default_factory=list)

    def team_on(self, side):
        if side is Side.HOME:
            return TeamRef(self.home, self.home_logo, self.home_owner)
        return TeamRef(self.away, self.away_logo, self.away_owner)

    def put(self, side, ref):
        if side is Side.HOME:
            self.home, self.home_logo, self.home_owner = ref.name, ref.logo, ref.owner
        else:
            self.away, self.away_logo, self.away_owner = ref.name, ref.logo, ref.owner

    def side_of(self, team_name):
        if self.home == team_name:
            return Side.HOME
        if self.away == team_name:
            return Side.AWAY
        return None

    def clear_result(self):
        self.home_score = ""
        self.away_score = ""
        self.status = MatchStatus.UPCOMING
        self.home_scorers, self.away_scorers = [], []
        self.home_assists, self.away_assists = [], []

    @property
    def has_bye(self):
        return BYE in (self.home, self.away)

    @property
    def is_played(self):
        return self.status is MatchStatus.COMPLETED


@dataclass
class Round:
    number: int
    name: str
    matches: List[Match] = field(default_factory=list)

    def team_names(self):
        names = []
        for m in self.matches:
            names.extend([m.home, m.away])
        return names


@dataclass(frozen=True)
class Resolution:
    """Outcome of asking who won a match.

    ``decisive`` is False while the match is unplayed or level without a
    manual winner; ``winner`` and ``side`` are None in that case.
    """
    decisive: bool
    winner: Optional[TeamRef] = None
    side: Optional[Side] = None
    loser: Optional[TeamRef] = None

    @classmethod
    def undecided(cls):
        return cls(decisive=False)
