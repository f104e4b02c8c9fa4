from marshmallow import Schema, fields, validate

from models.schemas.common import InputSchema


class BudgetCreateSchema(InputSchema):
    month = fields.Integer(required=True, validate=validate.Range(min=1, max=12, error="Month must be between 1 and 12"))
    year = fields.Integer(required=True, validate=validate.Range(min=2000, error="Year must be 2000 or later"))
    total_budget = fields.Decimal(
        required=True, places=2, validate=validate.Range(min=0, error="Total budget must be positive")
    )


class BudgetUpdateSchema(InputSchema):
    total_budget = fields.Decimal(
        required=True, places=2, validate=validate.Range(min=0, error="Total budget must be positive")
    )


class BudgetOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    month = fields.Integer()
    year = fields.Integer()
    total_budget = fields.Decimal(as_string=True, places=2)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class BudgetAllocationOutSchema(Schema):
    budget_id = fields.String()
    total_budget = fields.Decimal(as_string=True, places=2)
    allocated = fields.Decimal(as_string=True, places=2)
    unallocated = fields.Decimal(as_string=True, places=2)
