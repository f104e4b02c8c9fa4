from __future__ import annotations

from flask import Blueprint, request, jsonify, abort, g

from models import storage
from models.category import Category
from models.category_budget import CategoryBudget
from models.schemas.category import CategoryCreateSchema, CategoryOutSchema
from utils.decorators import jwt_required

bp = Blueprint("categories", __name__)

create_schema = CategoryCreateSchema()
out_schema = CategoryOutSchema()
out_list_schema = CategoryOutSchema(many=True)

SEARCH_LIMIT = 10


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def exists_name(session, user_id: str, name: str) -> bool:
    q = session.query(Category).filter(Category.user_id == user_id, Category.name == name)
    return session.query(q.exists()).scalar()


@bp.post("/categories")
@jwt_required()
def create_category():
    """
    Create a category
    ---
    tags: [Categories]
    security:
      - Bearer: []
    consumes: [application/json]
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [name]
          properties:
            name: { type: string, maxLength: 64 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      409: { description: Category already exists }
    """
    session = storage.get_session()
    data = create_schema.load(request.get_json(silent=True) or {})
    if exists_name(session, g.user_id, data["name"]):
        abort(409, description="Category already exists")
    c = Category(user_id=g.user_id, name=data["name"])
    storage.new(c)
    storage.save()
    return jsonify({"data": out_schema.dump(c)}), 201


@bp.get("/categories")
@jwt_required()
def list_categories():
    """
    List the current user's categories by name
    ---
    tags: [Categories]
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    session = storage.get_session()
    rows = (
        session.query(Category)
        .filter(Category.user_id == g.user_id)
        .order_by(Category.name.asc())
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows), "meta": {"total": len(rows)}})


@bp.get("/categories/search")
@jwt_required()
def search_categories():
    """
    Autocomplete: categories whose name starts with q
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - in: query
        name: q
        type: string
        required: true
    responses:
      200: { description: OK }
      400: { description: Search term is required }
    """
    term = (request.args.get("q") or "").strip()
    if not term:
        abort(400, description="Search term is required")
    session = storage.get_session()
    rows = (
        session.query(Category)
        .filter(
            Category.user_id == g.user_id,
            Category.name.like(f"{escape_like(term)}%", escape="\\"),
        )
        .order_by(Category.name.asc())
        .limit(SEARCH_LIMIT)
        .all()
    )
    return jsonify({"data": out_list_schema.dump(rows)})


@bp.delete("/categories/<category_id>")
@jwt_required()
def delete_category(category_id: str):
    """
    Delete a category that no category budget uses
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: category_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      404: { description: Not found }
      409: { description: Category is used by a budget }
    """
    session = storage.get_session()
    c = session.get(Category, category_id)
    if not c or c.user_id != g.user_id:
        abort(404, description="Category not found")
    in_use = session.query(
        session.query(CategoryBudget).filter(CategoryBudget.category_id == c.id).exists()
    ).scalar()
    if in_use:
        abort(409, description="Cannot delete category because it is being used in budgets")
    c.delete()
    return jsonify({"status": 1, "message": "Category deleted successfully"})
