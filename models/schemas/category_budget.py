from marshmallow import Schema, fields, validate

from models.schemas.common import InputSchema


class CategoryBudgetCreateSchema(InputSchema):
    budget_id = fields.String(required=True)
    category_id = fields.String(required=True)
    amount = fields.Decimal(required=True, places=2, validate=validate.Range(min=0, error="Amount must be positive"))
    description = fields.String(allow_none=True, validate=validate.Length(max=255))


class CategoryBudgetUpdateSchema(InputSchema):
    # all optional; an empty body leaves the row untouched
    amount = fields.Decimal(places=2, validate=validate.Range(min=0, error="Amount must be positive"))
    remaining_amount = fields.Decimal(
        places=2, validate=validate.Range(min=0, error="Remaining amount must be positive")
    )
    description = fields.String(allow_none=True, validate=validate.Length(max=255))


class CategoryBudgetOutSchema(Schema):
    id = fields.String()
    budget_id = fields.String()
    category_id = fields.String()
    category_name = fields.String(allow_none=True)
    amount = fields.Decimal(as_string=True, places=2)
    remaining_amount = fields.Decimal(as_string=True, places=2)
    description = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
