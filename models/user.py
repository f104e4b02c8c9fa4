from sqlalchemy import Column, String, Integer, Boolean, DateTime, CheckConstraint
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class User(BaseModel, Base):
    __tablename__ = "users"

    name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default="user")
    # Bumped by logout-all; refresh tokens carrying an older value are dead
    token_version = Column(Integer, nullable=False, default=0)
    reset_token = Column(String(512), nullable=True, index=True)
    reset_token_expiry = Column(DateTime(timezone=True), nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)

    refresh_tokens = relationship("RefreshToken", back_populates="user", passive_deletes=True)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="ck_users_role"),
        CheckConstraint("token_version >= 0", name="ck_users_token_version_nonnegative"),
    )

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")
