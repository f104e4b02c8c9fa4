"""
RefreshToken model: one row per issued refresh token. Rows are never deleted;
rotation links a row to its successor through replaced_by_token.
Fields:
- user_id (String(36)) - FK to users.id
- token (signed string, unique)
- revoked (bool)
- replaced_by_token (successor token string, null unless rotated)
- expires_at
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base


class RefreshToken(BaseModel, Base):
    __tablename__ = "refresh_tokens"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(512), nullable=False, unique=True, index=True)
    revoked = Column(Boolean, default=False, nullable=False)
    replaced_by_token = Column(String(512), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    user = relationship("User", back_populates="refresh_tokens")

    def __repr__(self):
        return f"<RefreshToken user_id={self.user_id} revoked={self.revoked}>"
