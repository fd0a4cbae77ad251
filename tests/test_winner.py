"""Tests for single-match winner resolution."""
import pytest

from matchday.core.types import BYE, TBD, Match, MatchStatus, Side
from matchday.core.winner import goals, resolve_winner


def _match(home="Lions", away="Tigers", home_score="", away_score="", status=MatchStatus.UPCOMING):
    return Match(
        id="ko_2_0",
        home=home,
        away=away,
        home_owner="ann",
        away_owner="ben",
        home_score=home_score,
        away_score=away_score,
        status=status,
    )


class TestScores:
    def test_higher_score_wins(self):
        res = resolve_winner(_match(home_score="3", away_score="1", status=MatchStatus.COMPLETED))
        assert res.decisive
        assert res.side is Side.HOME
        assert res.winner.name == "Lions"
        assert res.loser.name == "Tigers"

    def test_away_win(self):
        res = resolve_winner(_match(home_score="0", away_score="2", status=MatchStatus.COMPLETED))
        assert res.side is Side.AWAY
        assert res.winner.owner == "ben"

    def test_scores_compare_numerically(self):
        res = resolve_winner(_match(home_score="10", away_score="9", status=MatchStatus.COMPLETED))
        assert res.winner.name == "Lions"

    def test_draw_is_not_decisive(self):
        res = resolve_winner(_match(home_score="2", away_score="2", status=MatchStatus.COMPLETED))
        assert not res.decisive
        assert res.winner is None

    def test_upcoming_match_has_no_winner(self):
        res = resolve_winner(_match(home_score="4", away_score="0"))
        assert not res.decisive

    def test_tbd_side_has_no_winner(self):
        res = resolve_winner(_match(away=TBD, home_score="1", away_score="0", status=MatchStatus.COMPLETED))
        assert not res.decisive

    def test_blank_score_counts_as_zero(self):
        assert goals("") == 0
        assert goals(None) == 0
        assert goals(" 3 ") == 3


class TestByes:
    @pytest.mark.parametrize("home_score,away_score", [("", ""), ("0", "5"), ("2", "2")])
    def test_bye_away_always_loses(self, home_score, away_score):
        res = resolve_winner(_match(away=BYE, home_score=home_score, away_score=away_score))
        assert res.decisive
        assert res.winner.name == "Lions"

    def test_bye_home_always_loses(self):
        res = resolve_winner(_match(home=BYE, status=MatchStatus.COMPLETED, home_score="9", away_score="0"))
        assert res.decisive
        assert res.side is Side.AWAY

    def test_bye_against_tbd_waits(self):
        assert not resolve_winner(_match(home=TBD, away=BYE)).decisive

    def test_bye_beats_override(self):
        res = resolve_winner(_match(away=BYE), manual_override="AWAY")
        assert res.winner.name == "Lions"


class TestOverride:
    def test_override_settles_draw(self):
        m = _match(home_score="1", away_score="1", status=MatchStatus.COMPLETED)
        res = resolve_winner(m, manual_override=Side.AWAY)
        assert res.decisive
        assert res.winner.name == "Tigers"

    def test_override_accepts_lowercase_string(self):
        m = _match(home_score="1", away_score="1", status=MatchStatus.COMPLETED)
        assert resolve_winner(m, manual_override="home").winner.name == "Lions"

    def test_override_beats_score(self):
        m = _match(home_score="3", away_score="0", status=MatchStatus.COMPLETED)
        assert resolve_winner(m, manual_override="AWAY").side is Side.AWAY

    def test_override_for_tbd_side_is_ignored(self):
        assert not resolve_winner(_match(away=TBD), manual_override="AWAY").decisive

    def test_unknown_override_raises(self):
        with pytest.raises(ValueError):
            resolve_winner(_match(), manual_override="DRAW")
