from matchday.core.types import DEFAULT_LOGO
from matchday.extensions import db
from datetime import datetime, timezone


class Team(db.Model):
    __tablename__ = "teams"
    __table_args__ = (db.UniqueConstraint("season_id", "name", name="uq_team_season_name"),)

    id = db.Column(db.Integer, primary_key=True)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False)
    name = db.Column(db.String(200), nullable=False)
    owner_name = db.Column(db.String(100), nullable=False)
    logo_url = db.Column(db.String(500), nullable=False, default=DEFAULT_LOGO)
    region = db.Column(db.String(100), nullable=False, default="")
    tier = db.Column(db.String(20), nullable=False, default="")
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self):
        return f"<Team {self.name}>"
