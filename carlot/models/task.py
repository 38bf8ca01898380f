from sqlalchemy import Column, String, Text, DateTime, ForeignKey, func
from carlot.core.db import Base
from carlot.models._columns import new_id, utcnow

class Task(Base):
    __tablename__ = "tasks"
    id = Column(String(36), primary_key=True, default=new_id)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=True, index=True)
    task_name = Column(String, nullable=False)
    due_date = Column(String, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    assigned_to = Column(String(36), ForeignKey("profiles.id"), nullable=True, index=True)
    assigned_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    category = Column(String, nullable=True)
    status = Column(String, nullable=False, default="pending")  # pending | completed | cancelled
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
