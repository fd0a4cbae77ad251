from matchday.core.types import DEFAULT_LOGO, TBD, MatchStatus, Side
from matchday.extensions import db
from datetime import datetime, timezone


class Match(db.Model):
    """Stored form of an engine match. ``code`` is the engine's match id."""

    __tablename__ = "matches"
    __table_args__ = (db.UniqueConstraint("season_id", "code", name="uq_match_season_code"),)

    id = db.Column(db.Integer, primary_key=True)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False)
    round_id = db.Column(db.Integer, db.ForeignKey("rounds.id"), nullable=False)
    code = db.Column(db.String(40), nullable=False)
    position = db.Column(db.Integer, nullable=False, default=0)

    home = db.Column(db.String(200), nullable=False, default=TBD)
    away = db.Column(db.String(200), nullable=False, default=TBD)
    home_logo = db.Column(db.String(500), nullable=False, default=DEFAULT_LOGO)
    away_logo = db.Column(db.String(500), nullable=False, default=DEFAULT_LOGO)
    home_owner = db.Column(db.String(100), nullable=False, default=TBD)
    away_owner = db.Column(db.String(100), nullable=False, default=TBD)
    home_score = db.Column(db.String(10), nullable=False, default="")
    away_score = db.Column(db.String(10), nullable=False, default="")
    status = db.Column(
        db.Enum(MatchStatus), nullable=False, default=MatchStatus.UPCOMING
    )

    stage = db.Column(db.String(30), nullable=False, default="")
    match_label = db.Column(db.String(50), nullable=False, default="")
    group_name = db.Column(db.String(10), nullable=True)
    leg = db.Column(db.Integer, nullable=True)
    next_match_code = db.Column(db.String(40), nullable=True)
    next_match_side = db.Column(db.Enum(Side), nullable=True)
    loser_match_code = db.Column(db.String(40), nullable=True)

    home_scorers = db.Column(db.JSON, nullable=False, default=list)
    away_scorers = db.Column(db.JSON, nullable=False, default=list)
    home_assists = db.Column(db.JSON, nullable=False, default=list)
    away_assists = db.Column(db.JSON, nullable=False, default=list)

    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<Match {self.code} {self.home} vs {self.away}>"
