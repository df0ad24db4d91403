from models.base_model import Base, BaseModel
from sqlalchemy import Column, String, Text
from sqlalchemy.orm import relationship

from services.errors import ValidationFailed
from utils.security import hash_password, verify_password


def normalize_email(value):
    return value.strip().lower() if isinstance(value, str) else value


class User(BaseModel, Base):
    """Identity record: credentials plus the single active refresh token."""
    __tablename__ = "users"

    full_name = Column(String(255), nullable=True)
    enrollment_number = Column(String(64), nullable=True, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    # at most one refresh token per user; NULL means no active session
    refresh_token = Column(Text, nullable=True)

    questions = relationship("Question", back_populates="publisher", passive_deletes=True)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @password.setter
    def password(self, value: str):
        self.password_hash = hash_password(value)

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def validate(self):
        """Field checks run by UserStore.save unless validation is skipped."""
        missing = [name for name in ("email", "password_hash") if not getattr(self, name, None)]
        if missing:
            raise ValidationFailed(f"Missing required fields: {', '.join(missing)}")
        self.email = normalize_email(self.email)
        if "@" not in self.email:
            raise ValidationFailed("Invalid email address")
