from marshmallow import Schema, fields, validate, validates, ValidationError

from models.tag import normalize_tag_name


class QuestionCreateSchema(Schema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    slug = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(required=True, validate=validate.Length(min=1))
    tags = fields.List(fields.String(), required=True)

    @validates("tags")
    def _validate_tags(self, value, **kwargs):
        names = [normalize_tag_name(v) for v in value]
        if not any(names):
            raise ValidationError("Please add tags also")
        if any(len(n) > 64 for n in names):
            raise ValidationError("Tag names must be at most 64 characters.")


class TagOutSchema(Schema):
    id = fields.String()
    name = fields.String()


class QuestionOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    slug = fields.String(allow_none=True)
    description = fields.String()
    published_by = fields.Method("get_publisher")
    tags = fields.List(fields.Nested(TagOutSchema))
    vote_count = fields.Integer()
    view_count = fields.Integer()
    created_at = fields.DateTime()

    def get_publisher(self, obj):
        publisher = obj.publisher
        if publisher is None:
            return None
        return {"id": publisher.id, "enrollment_number": publisher.enrollment_number}
