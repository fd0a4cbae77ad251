class MatchdayError(Exception):
    """Base class for engine errors."""


class InfeasibleRoster(MatchdayError, ValueError):
    """Roster cannot produce a schedule (too few teams or owners)."""


class InvalidScheduleMode(MatchdayError, ValueError):
    pass


class UnsupportedBracketSize(MatchdayError, ValueError):
    pass


class MalformedMatchId(MatchdayError, ValueError):
    pass


class MatchNotFound(MatchdayError, LookupError):
    pass
