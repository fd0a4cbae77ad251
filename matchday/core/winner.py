from matchday.core.types import BYE, TBD, MatchStatus, Resolution, Side


def goals(score):
    """Numeric value of a stored score string. Blank counts as zero."""
    if score is None:
        return 0
    text = str(score).strip()
    return int(text) if text else 0


def as_side(value):
    """Accept a Side, "HOME"/"AWAY" (any case) or None."""
    if value is None or isinstance(value, Side):
        return value
    return Side(str(value).upper())


def _decided(match, side):
    return Resolution(
        decisive=True,
        winner=match.team_on(side),
        side=side,
        loser=match.team_on(side.other),
    )


def resolve_winner(match, manual_override=None):
    """Decide the winner of a single match.

    Order of precedence: a bye, then a manual override, then the score of
    a completed match. A level score without an override is not decisive
    and the caller has to ask for a manual winner.
    """
    override = as_side(manual_override)

    if match.away == BYE and match.home != TBD:
        return _decided(match, Side.HOME)
    if match.home == BYE and match.away != TBD:
        return _decided(match, Side.AWAY)

    if override is not None:
        if match.team_on(override).name == TBD:
            return Resolution.undecided()
        return _decided(match, override)

    if match.status is not MatchStatus.COMPLETED:
        return Resolution.undecided()
    if TBD in (match.home, match.away):
        return Resolution.undecided()

    home, away = goals(match.home_score), goals(match.away_score)
    if home > away:
        return _decided(match, Side.HOME)
    if away > home:
        return _decided(match, Side.AWAY)
    return Resolution.undecided()
