from marshmallow import Schema, fields, pre_load, validate

from models.user import normalize_email


class _EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data = dict(data, email=normalize_email(data["email"]))
        return data


class UserCreateSchema(_EmailNormalizingSchema):
    full_name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    enrollment_number = fields.String(required=True, validate=validate.Length(min=1, max=64))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class UserLoginSchema(_EmailNormalizingSchema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


class UserUpdateSchema(_EmailNormalizingSchema):
    full_name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(required=True)


class PasswordChangeSchema(Schema):
    old_password = fields.String(required=True, load_only=True)
    new_password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class UserOutSchema(Schema):
    # password_hash and refresh_token are never dumped
    id = fields.String()
    full_name = fields.String(allow_none=True)
    enrollment_number = fields.String(allow_none=True)
    email = fields.String()
    created_at = fields.DateTime()
