"""Message model"""

from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database.base import Base, generate_id


class Message(Base):
    """Single chat message; never edited once stored"""

    __tablename__ = "messages"

    id = Column(String(24), primary_key=True, default=generate_id)
    conversation_id = Column(
        String(24),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position = Column(Integer, nullable=False)
    role = Column(String(20), nullable=False)  # 'user' or 'assistant'
    content = Column(Text, nullable=False)
    tone = Column(String(50), nullable=True)
    language = Column(String(50), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        # A racing writer that picked the same slot fails instead of interleaving
        UniqueConstraint('conversation_id', 'position', name='uq_conversation_position'),
    )

    def __repr__(self):
        return f"<Message(id={self.id}, role={self.role}, position={self.position})>"
