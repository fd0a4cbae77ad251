from matchday.extensions import ma
from matchday.models.team import Team
from marshmallow import Schema, fields, validate


class TeamSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Team
        load_instance = True
        include_fk = True


class CreateTeamSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    owner_name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    logo_url = fields.String(validate=validate.Length(max=500), load_default=None, allow_none=True)
    region = fields.String(validate=validate.Length(max=100), load_default="")
    tier = fields.String(validate=validate.Length(max=20), load_default="")
