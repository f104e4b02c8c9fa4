from marshmallow import Schema, fields, validate

from models.schemas.common import InputSchema


class RegisterSchema(InputSchema):
    name = fields.String(allow_none=True, validate=validate.Length(max=255))
    email = fields.Email(required=True, validate=validate.Length(max=255))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class LoginSchema(InputSchema):
    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class RefreshTokenSchema(InputSchema):
    refresh_token = fields.String(required=True, data_key="refreshToken", validate=validate.Length(min=1))


class ForgotPasswordSchema(InputSchema):
    email = fields.String(required=True, validate=validate.Length(min=1))


class ResetPasswordSchema(InputSchema):
    reset_token = fields.String(required=True, data_key="resetToken", validate=validate.Length(min=1))
    new_password = fields.String(
        required=True, load_only=True, data_key="newPassword", validate=validate.Length(min=1)
    )


class ProfileOutSchema(Schema):
    id = fields.String()
    name = fields.String(allow_none=True)
    email = fields.String()
    role = fields.String()
    email_verified = fields.Boolean()
