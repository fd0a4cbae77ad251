from matchday.models.season import Season, SeasonType, SeasonStatus, CupPhase
from matchday.models.team import Team
from matchday.models.round import Round, RoundKind
from matchday.models.match import Match

__all__ = [
    "Season",
    "SeasonType",
    "SeasonStatus",
    "CupPhase",
    "Team",
    "Round",
    "RoundKind",
    "Match",
]
