from matchday.schemas.season import (
    SeasonSchema,
    CreateSeasonSchema,
    GenerateScheduleSchema,
    CreateBracketSchema,
    CreateGroupsSchema,
    CreateKnockoutSchema,
)
from matchday.schemas.team import TeamSchema, CreateTeamSchema
from matchday.schemas.match import MatchSchema, RoundSchema, RecordResultSchema

__all__ = [
    "SeasonSchema",
    "CreateSeasonSchema",
    "GenerateScheduleSchema",
    "CreateBracketSchema",
    "CreateGroupsSchema",
    "CreateKnockoutSchema",
    "TeamSchema",
    "CreateTeamSchema",
    "MatchSchema",
    "RoundSchema",
    "RecordResultSchema",
]
