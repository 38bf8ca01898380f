from sqlalchemy import Column, String, Boolean, DateTime, UniqueConstraint, func
from carlot.core.db import Base
from carlot.models._columns import new_id, utcnow

class DropdownSetting(Base):
    __tablename__ = "dropdown_settings"
    __table_args__ = (UniqueConstraint("category", "label", name="uq_dropdown_category_label"),)
    id = Column(String(36), primary_key=True, default=new_id)
    category = Column(String, nullable=False, index=True)
    label = Column(String, nullable=False)
    value = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
