from matchday.extensions import ma
from matchday.models.season import Season
from marshmallow import Schema, fields, validate


class SeasonSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Season
        load_instance = True
        include_fk = True

    type = fields.Function(lambda obj: obj.type.value if obj.type else None)
    league_mode = fields.Function(lambda obj: obj.league_mode.value if obj.league_mode else None)
    status = fields.Function(lambda obj: obj.status.value if obj.status else None)
    cup_phase = fields.Function(lambda obj: obj.cup_phase.value if obj.cup_phase else None)
    team_count = fields.Function(lambda obj: obj.teams.count(), dump_only=True)


class CreateSeasonSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    type = fields.String(
        load_default="LEAGUE", validate=validate.OneOf(["LEAGUE", "TOURNAMENT", "CUP"])
    )
    league_mode = fields.String(
        load_default="SINGLE", validate=validate.OneOf(["SINGLE", "DOUBLE"])
    )


class GenerateScheduleSchema(Schema):
    mode = fields.String(load_default=None, validate=validate.OneOf(["SINGLE", "DOUBLE"]))


class CreateBracketSchema(Schema):
    third_place = fields.Boolean(load_default=False)


class CreateGroupsSchema(Schema):
    groups = fields.Dict(
        keys=fields.String(validate=validate.Length(min=1, max=10)),
        values=fields.List(fields.Integer()),
        required=True,
    )


class CreateKnockoutSchema(Schema):
    two_legged = fields.Boolean(load_default=False)
    third_place = fields.Boolean(load_default=False)
