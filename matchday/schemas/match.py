from matchday.extensions import ma
from matchday.models.match import Match
from matchday.models.round import Round
from marshmallow import Schema, fields, validate


class MatchSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Match
        load_instance = True
        include_fk = True

    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    next_match_side = fields.Function(
        lambda obj: obj.next_match_side.value if obj.next_match_side else None
    )


class RoundSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Round
        load_instance = True
        include_fk = True

    kind = fields.Function(lambda obj: obj.kind.value if obj.kind else None)
    matches = ma.Nested(MatchSchema, many=True, dump_only=True)


class RecordResultSchema(Schema):
    home_score = fields.Integer(required=True, validate=validate.Range(min=0))
    away_score = fields.Integer(required=True, validate=validate.Range(min=0))
    manual_winner = fields.String(
        load_default=None, allow_none=True, validate=validate.OneOf(["HOME", "AWAY"])
    )
    home_scorers = fields.List(fields.String(), load_default=None)
    away_scorers = fields.List(fields.String(), load_default=None)
    home_assists = fields.List(fields.String(), load_default=None)
    away_assists = fields.List(fields.String(), load_default=None)
