from __future__ import annotations

from flask import Blueprint, request, jsonify, abort, g

from models import storage
from models.budget import Budget
from models.category import Category
from models.category_budget import CategoryBudget
from models.schemas.category_budget import (
    CategoryBudgetCreateSchema,
    CategoryBudgetUpdateSchema,
    CategoryBudgetOutSchema,
)
from utils.decorators import jwt_required

bp = Blueprint("category_budgets", __name__)

create_schema = CategoryBudgetCreateSchema()
update_schema = CategoryBudgetUpdateSchema()
out_schema = CategoryBudgetOutSchema()
out_list_schema = CategoryBudgetOutSchema(many=True)


def get_owned(session, cls, obj_id: str, label: str):
    obj = session.get(cls, obj_id)
    if not obj or obj.user_id != g.user_id:
        abort(404, description=f"{label} not found")
    return obj


def get_owned_category_budget(session, category_budget_id: str) -> CategoryBudget:
    # ownership goes through the parent budget
    cb = session.get(CategoryBudget, category_budget_id)
    if not cb or cb.budget.user_id != g.user_id:
        abort(404, description="Category budget not found")
    return cb


@bp.post("/category-budgets")
@jwt_required()
def create_category_budget():
    """
    Allocate part of a budget to a category
    ---
    tags: [Category budgets]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [budget_id, category_id, amount]
          properties:
            budget_id: { type: string }
            category_id: { type: string }
            amount: { type: number, minimum: 0 }
            description: { type: string, maxLength: 255 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      404: { description: Budget or category not found }
      409: { description: Category already added to this budget }
    """
    session = storage.get_session()
    data = create_schema.load(request.get_json(silent=True) or {})
    budget = get_owned(session, Budget, data["budget_id"], "Budget")
    category = get_owned(session, Category, data["category_id"], "Category")

    existing = (
        session.query(CategoryBudget)
        .filter(CategoryBudget.budget_id == budget.id, CategoryBudget.category_id == category.id)
        .first()
    )
    if existing:
        abort(409, description="Category already added to this budget")

    cb = CategoryBudget(
        budget_id=budget.id,
        category_id=category.id,
        amount=data["amount"],
        remaining_amount=data["amount"],
        description=data.get("description"),
    )
    storage.new(cb)
    storage.save()
    return jsonify({"data": out_schema.dump(cb)}), 201


@bp.get("/category-budgets/budget/<budget_id>")
@jwt_required()
def list_by_budget(budget_id: str):
    """
    List a budget's category allocations, by category name
    ---
    tags: [Category budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: budget_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Budget not found }
    """
    session = storage.get_session()
    budget = get_owned(session, Budget, budget_id, "Budget")
    rows = (
        session.query(CategoryBudget)
        .join(Category, CategoryBudget.category_id == Category.id)
        .filter(CategoryBudget.budget_id == budget.id)
        .order_by(Category.name.asc())
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows)})


@bp.put("/category-budgets/<category_budget_id>")
@jwt_required()
def update_category_budget(category_budget_id: str):
    """
    Update amount, remaining amount or description
    ---
    tags: [Category budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: category_budget_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            amount: { type: number, minimum: 0 }
            remaining_amount: { type: number, minimum: 0 }
            description: { type: string, maxLength: 255 }
    responses:
      200: { description: OK }
      400: { description: Validation error }
      404: { description: Not found }
    """
    session = storage.get_session()
    cb = get_owned_category_budget(session, category_budget_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    if data:
        for key, value in data.items():
            setattr(cb, key, value)
        cb.save()
    return jsonify({"data": out_schema.dump(cb)})


@bp.delete("/category-budgets/<category_budget_id>")
@jwt_required()
def delete_category_budget(category_budget_id: str):
    """
    Delete a category allocation
    ---
    tags: [Category budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: category_budget_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Not found }
    """
    session = storage.get_session()
    cb = get_owned_category_budget(session, category_budget_id)
    cb.delete()
    return jsonify({"status": 1, "message": "Category budget deleted successfully"})
