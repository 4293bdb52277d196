from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from kvnotes.notes.models import Note, NoteMeta


class NoteIn(Schema):
    class Meta:
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    content = fields.String(required=True, validate=validate.Length(min=1))


class NoteMetaSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.String(required=True)
    title = fields.String(required=True)
    created_at = fields.Integer(required=True)
    updated_at = fields.Integer(required=True)

    @post_load
    def make_object(self, data, **kwargs):
        return NoteMeta(**data)


class NoteRecordSchema(NoteMetaSchema):
    content = fields.String(required=True)
    rendered_body = fields.String(required=True)

    @post_load
    def make_object(self, data, **kwargs):
        return Note(**data)
