from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, func
from carlot.core.db import Base
from carlot.models._columns import new_id, utcnow

class Vehicle(Base):
    __tablename__ = "vehicles"
    id = Column(String(36), primary_key=True, default=new_id)
    make = Column(String, nullable=False)
    model = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    vin = Column(String(17), nullable=False, default="", index=True)
    purchase_date = Column(String, nullable=False)
    status = Column(String, nullable=False, default="pending")  # pending | sold | withdrew | complete | arb | in_progress
    pickup_location = Column(String, nullable=False)
    odometer = Column(Float, nullable=True)
    bought_price = Column(Float, nullable=True)
    title_status = Column(String, nullable=False, default="absent")
    arb_status = Column(String, nullable=False, default="absent")  # absent | present | in_transit | failed
    trim = Column(String, nullable=True)
    exterior_color = Column(String, nullable=True)
    interior_color = Column(String, nullable=True)
    vehicle_location = Column(String, nullable=True)
    seller_name = Column(String, nullable=True)
    buyer_dealership = Column(String, nullable=True)
    sale_date = Column(String, nullable=True)
    sale_invoice = Column(Float, nullable=True)
    created_by = Column(String(36), ForeignKey("profiles.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)
