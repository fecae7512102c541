"""Per-user assistant settings model"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.base import Base


class UserSettings(Base):
    """Assistant preferences stored per user"""

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(24), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    default_ai_provider = Column(String(50), nullable=True)
    voice_output = Column(Boolean, default=False, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="settings")

    def __repr__(self):
        return f"<UserSettings(user_id={self.user_id}, provider={self.default_ai_provider})>"
