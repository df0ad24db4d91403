from sqlalchemy.orm import relationship
from sqlalchemy import Column, String, Index

from models.base_model import BaseModel, Base
from models.question import question_tags


def normalize_tag_name(value):
    return value.strip().lower() if isinstance(value, str) else value


class Tag(BaseModel, Base):
    __tablename__ = "tags"

    # stored trimmed and lower-cased; see normalize_tag_name
    name = Column(String(64), nullable=False, unique=True)

    questions = relationship("Question", secondary=question_tags, back_populates="tags")

    __table_args__ = (
        Index("ix_tags_name", "name"),
    )
