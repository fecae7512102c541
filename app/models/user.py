"""User model"""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.base import Base, generate_id


class User(Base):
    """Registered user of the companion app"""

    __tablename__ = "users"

    id = Column(String(24), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)
    # Only ever incremented, by conversation creation
    conversation_count = Column(Integer, default=0, nullable=False)

    # Relationships
    settings = relationship(
        "UserSettings",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="joined"
    )
    conversations = relationship("Conversation", back_populates="user", cascade="all, delete-orphan")

    @staticmethod
    def normalize_email(email: str) -> str:
        return email.strip().lower()

    @property
    def default_ai_provider(self):
        return self.settings.default_ai_provider if self.settings else None

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"
