from sqlalchemy import (
    Column,
    String,
    Integer,
    ForeignKey,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base

# Association table with CASCADE so join rows clean up when either side is deleted
question_tags = Table(
    "question_tags",
    Base.metadata,
    Column("question_id", String(36), ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Question(BaseModel, Base):
    __tablename__ = "questions"

    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    published_by = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    vote_count = Column(Integer, nullable=False, default=0)
    view_count = Column(Integer, nullable=False, default=0)

    publisher = relationship("User", back_populates="questions")
    tags = relationship("Tag", secondary=question_tags, back_populates="questions")

