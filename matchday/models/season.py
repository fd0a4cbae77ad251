from matchday.core.types import ScheduleMode
from matchday.extensions import db
from datetime import datetime, timezone
import enum


class SeasonType(enum.Enum):
    LEAGUE = "LEAGUE"
    TOURNAMENT = "TOURNAMENT"
    CUP = "CUP"


class SeasonStatus(enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class CupPhase(enum.Enum):
    GROUPS = "GROUPS"
    KNOCKOUT = "KNOCKOUT"


class Season(db.Model):
    __tablename__ = "seasons"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    type = db.Column(db.Enum(SeasonType), nullable=False, default=SeasonType.LEAGUE)
    league_mode = db.Column(
        db.Enum(ScheduleMode), nullable=False, default=ScheduleMode.SINGLE
    )
    status = db.Column(
        db.Enum(SeasonStatus), nullable=False, default=SeasonStatus.DRAFT
    )
    cup_phase = db.Column(db.Enum(CupPhase), nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    teams = db.relationship("Team", backref="season", lazy="dynamic")
    rounds = db.relationship("Round", backref="season", lazy="dynamic")
    matches = db.relationship("Match", backref="season", lazy="dynamic")

    def __repr__(self):
        return f"<Season {self.name}>"
