from marshmallow import Schema, fields, validate, pre_load

from models.schemas.common import InputSchema


class CategoryCreateSchema(InputSchema):
    name = fields.String(required=True, validate=validate.Length(min=1, max=64))

    @pre_load
    def strip_name(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get("name"), str):
            data = {**data, "name": data["name"].strip()}
        return data


class CategoryOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    name = fields.String()
    created_at = fields.DateTime()
