from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, func
from carlot.core.db import Base
from carlot.models._columns import new_id, utcnow

class Message(Base):
    __tablename__ = "messages"
    id = Column(String(36), primary_key=True, default=new_id)
    sender_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    receiver_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
