from __future__ import annotations

from decimal import Decimal

from flask import Blueprint, request, jsonify, abort, g
from sqlalchemy import func

from models import storage
from models.budget import Budget
from models.category_budget import CategoryBudget
from models.schemas.budget import (
    BudgetCreateSchema,
    BudgetUpdateSchema,
    BudgetOutSchema,
    BudgetAllocationOutSchema,
)
from utils.decorators import jwt_required

bp = Blueprint("budgets", __name__)

create_schema = BudgetCreateSchema()
update_schema = BudgetUpdateSchema()
out_schema = BudgetOutSchema()
out_list_schema = BudgetOutSchema(many=True)
allocation_schema = BudgetAllocationOutSchema()


def get_owned_budget(session, budget_id: str) -> Budget:
    """Fetch a budget of the current user; someone else's budget is a 404."""
    budget = session.get(Budget, budget_id)
    if not budget or budget.user_id != g.user_id:
        abort(404, description="Budget not found")
    return budget


def find_by_month(session, user_id: str, month: int, year: int) -> Budget | None:
    return (
        session.query(Budget)
        .filter(Budget.user_id == user_id, Budget.month == month, Budget.year == year)
        .first()
    )


@bp.post("/budgets")
@jwt_required()
def create_budget():
    """
    Create a monthly budget
    ---
    tags: [Budgets]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [month, year, total_budget]
          properties:
            month: { type: integer, minimum: 1, maximum: 12 }
            year: { type: integer, minimum: 2000 }
            total_budget: { type: number, minimum: 0 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      409: { description: Budget already exists for that month }
    """
    session = storage.get_session()
    data = create_schema.load(request.get_json(silent=True) or {})
    if find_by_month(session, g.user_id, data["month"], data["year"]):
        abort(409, description=f"Budget already exists for {data['month']}/{data['year']}")
    budget = Budget(user_id=g.user_id, **data)
    storage.new(budget)
    storage.save()
    return jsonify({"data": out_schema.dump(budget)}), 201


@bp.get("/budgets")
@jwt_required()
def list_budgets():
    """
    List the current user's budgets, newest first
    ---
    tags: [Budgets]
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    session = storage.get_session()
    rows = (
        session.query(Budget)
        .filter(Budget.user_id == g.user_id)
        .order_by(Budget.year.desc(), Budget.month.desc())
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"total": len(rows)}})


@bp.get("/budgets/<budget_id>")
@jwt_required()
def get_budget(budget_id: str):
    """
    Get a budget by id
    ---
    tags: [Budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: budget_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    session = storage.get_session()
    return jsonify({"data": out_schema.dump(get_owned_budget(session, budget_id))})


@bp.get("/budgets/<int:year>/<int:month>")
@jwt_required()
def get_budget_by_month(year: int, month: int):
    """
    Get the budget for a given month
    ---
    tags: [Budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: year
        type: integer
        required: true
      - in: path
        name: month
        type: integer
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    session = storage.get_session()
    budget = find_by_month(session, g.user_id, month, year)
    if not budget:
        abort(404, description="Budget not found")
    return jsonify({"data": out_schema.dump(budget)})


@bp.get("/budgets/<budget_id>/allocation")
@jwt_required()
def get_allocation(budget_id: str):
    """
    How much of a budget is allocated to categories
    ---
    tags: [Budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: budget_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    session = storage.get_session()
    budget = get_owned_budget(session, budget_id)
    allocated = (
        session.query(func.coalesce(func.sum(CategoryBudget.amount), 0))
        .filter(CategoryBudget.budget_id == budget.id)
        .scalar()
    )
    allocated = Decimal(str(allocated))
    total = Decimal(str(budget.total_budget))
    return jsonify(
        {
            "data": allocation_schema.dump(
                {
                    "budget_id": budget.id,
                    "total_budget": total,
                    "allocated": allocated,
                    "unallocated": total - allocated,
                }
            )
        }
    )


@bp.put("/budgets/<budget_id>")
@jwt_required()
def update_budget(budget_id: str):
    """
    Update a budget's total
    ---
    tags: [Budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: budget_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [total_budget]
          properties:
            total_budget: { type: number, minimum: 0 }
    responses:
      200: { description: OK }
      400: { description: Validation error }
      404: { description: Not found }
    """
    session = storage.get_session()
    budget = get_owned_budget(session, budget_id)
    data = update_schema.load(request.get_json(silent=True) or {})
    budget.total_budget = data["total_budget"]
    budget.save()
    return jsonify({"data": out_schema.dump(budget)})


@bp.delete("/budgets/<budget_id>")
@jwt_required()
def delete_budget(budget_id: str):
    """
    Delete a budget and its category budgets
    ---
    tags: [Budgets]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: budget_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Not found }
    """
    session = storage.get_session()
    budget = get_owned_budget(session, budget_id)
    budget.delete()
    return jsonify({"status": 1, "message": "Budget deleted successfully"})
