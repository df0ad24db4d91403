from __future__ import annotations

from typing import Tuple

from flask import Blueprint, request, jsonify, abort
from sqlalchemy.orm import selectinload

from models import storage
from models.question import Question
from models.tag import Tag, normalize_tag_name
from models.schemas.question import QuestionCreateSchema, QuestionOutSchema
from utils.decorators import jwt_required

bp = Blueprint("questions", __name__)

create_schema = QuestionCreateSchema()
out_schema = QuestionOutSchema()
out_list_schema = QuestionOutSchema(many=True)

MAX_LIMIT = 100


def parse_pagination() -> Tuple[int, int]:
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", "20"))
        page = max(page, 1)
        limit = max(1, min(limit, MAX_LIMIT))
        return page, limit
    except ValueError:
        abort(400, description="page and limit must be integers")


def resolve_tags(session, raw_names) -> list:
    """Return Tag rows for the given names, creating the missing ones."""
    names = []
    for raw in raw_names:
        name = normalize_tag_name(raw)
        if name and name not in names:
            names.append(name)

    existing = {t.name: t for t in session.query(Tag).filter(Tag.name.in_(names)).all()}
    tags = []
    for name in names:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name)
            storage.new(tag)
        tags.append(tag)
    return tags


@bp.post("/questions")
@jwt_required()
def ask_question(identity_id: str):
    """
    Ask a question; tags are matched by name or created
    ---
    tags: [Questions]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string }
            slug: { type: string }
            description: { type: string }
            tags: { type: array, items: { type: string } }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      401: { description: Unauthorized }
    """
    session = storage.get_session()
    data = create_schema.load(request.get_json(silent=True) or {})

    question = Question(
        title=data["title"],
        slug=data["slug"],
        description=data["description"],
        published_by=identity_id,
        tags=resolve_tags(session, data["tags"]),
    )
    question.save()
    return jsonify({"data": out_schema.dump(question), "message": "Question added successfully"}), 201


@bp.get("/questions")
def list_questions():
    """
    List questions, newest first
    ---
    tags: [Questions]
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
      - in: query
        name: tag
        type: string
        description: only questions carrying this tag
    responses:
      200: { description: OK }
    """
    session = storage.get_session()
    page, limit = parse_pagination()

    query = session.query(Question).options(selectinload(Question.tags), selectinload(Question.publisher))
    tag = request.args.get("tag")
    if tag:
        query = query.filter(Question.tags.any(Tag.name == normalize_tag_name(tag)))

    total = query.count()
    rows = (
        query.order_by(Question.created_at.desc(), Question.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return jsonify(
        {
            "data": out_list_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
            "message": "Questions fetched successfully",
        }
    )
