from marshmallow import EXCLUDE, Schema, fields


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    password = fields.String(required=True, load_only=True)
