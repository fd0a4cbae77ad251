from matchday.extensions import db
import enum


class RoundKind(enum.Enum):
    LEAGUE = "LEAGUE"
    GROUP = "GROUP"
    KNOCKOUT = "KNOCKOUT"


class Round(db.Model):
    __tablename__ = "rounds"

    id = db.Column(db.Integer, primary_key=True)
    season_id = db.Column(db.Integer, db.ForeignKey("seasons.id"), nullable=False)
    number = db.Column(db.Integer, nullable=False)
    name = db.Column(db.String(50), nullable=False)
    kind = db.Column(db.Enum(RoundKind), nullable=False)

    matches = db.relationship(
        "Match",
        backref="round",
        order_by="Match.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<Round {self.number} {self.name}>"
