import uuid
from datetime import datetime
from typing import Optional, Any
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy import String, Text, Float, Integer, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from .status import status_badge

SHIPMENT_STATUSES = ("processing", "in-transit", "delivered", "delayed")
TRANSPORT_TYPES = ("truck", "rail", "ship", "air", "multi-modal")
ROLES = ("manager", "driver", "customer")

def _uuid() -> str:
    return str(uuid.uuid4())

class Base(DeclarativeBase):
    pass

class User(Base):
    """Login credentials. Profile and role live in their own tables."""
    __tablename__ = "users"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    profile: Mapped[Optional["Profile"]] = relationship("Profile", uselist=False, cascade="all, delete-orphan")
    role_row: Mapped[Optional["UserRole"]] = relationship("UserRole", uselist=False, cascade="all, delete-orphan")

    @property
    def role(self) -> Optional[str]:
        return self.role_row.role if self.role_row else None

class Profile(Base):
    __tablename__ = "profiles"
    id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(200))
    company: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    avatar_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class UserRole(Base):
    __tablename__ = "user_roles"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, index=True)
    role: Mapped[str] = mapped_column(String(20), default="customer")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

class Shipment(Base):
    __tablename__ = "shipments"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tracking_id: Mapped[str] = mapped_column(String(20), unique=True, index=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    origin: Mapped[str] = mapped_column(String(255))
    destination: Mapped[str] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), default="processing", index=True)
    transport_type: Mapped[str] = mapped_column(String(20))
    product_type: Mapped[str] = mapped_column(String(100))
    quantity: Mapped[int] = mapped_column(Integer)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    carbon_footprint: Mapped[float] = mapped_column(Float, default=0.0)
    # Distance the footprint was estimated over; null means the configured default
    distance_km: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    # Plain user ids, same as the hosted schema: profiles may be removed independently
    customer_id: Mapped[str] = mapped_column(String(36), index=True)
    assigned_driver_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    planned_departure_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    estimated_arrival_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    actual_arrival_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    blockchain_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    sensor_readings: Mapped[list["SensorReading"]] = relationship(
        "SensorReading", back_populates="shipment", cascade="all, delete-orphan"
    )
    reviews: Mapped[list["Review"]] = relationship("Review", back_populates="shipment", cascade="all, delete-orphan")
    events: Mapped[list["ShipmentEvent"]] = relationship(
        "ShipmentEvent", back_populates="shipment", cascade="all, delete-orphan"
    )
    documents: Mapped[list["ShipmentDocument"]] = relationship(
        "ShipmentDocument", back_populates="shipment", cascade="all, delete-orphan"
    )

    @property
    def badge(self) -> dict:
        return status_badge(self.status)

class SensorReading(Base):
    __tablename__ = "sensor_data"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    shipment_id: Mapped[str] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), index=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    temperature: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    humidity: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    shock_detected: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    battery_level: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    blockchain_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    shipment: Mapped[Shipment] = relationship("Shipment", back_populates="sensor_readings")

class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("shipment_id", "user_id", name="uq_reviews_shipment_user"),)
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    shipment_id: Mapped[str] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), index=True)
    user_id: Mapped[str] = mapped_column(String(36), index=True)
    rating: Mapped[int] = mapped_column(Integer)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    approved: Mapped[bool] = mapped_column(Boolean, default=False)
    blockchain_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    shipment: Mapped[Shipment] = relationship("Shipment", back_populates="reviews")

class AISuggestion(Base):
    __tablename__ = "ai_suggestions"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    carbon_savings: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    cost_savings: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    implemented: Mapped[bool] = mapped_column(Boolean, default=False)
    # Fleet-wide suggestions are not tied to a shipment
    shipment_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("shipments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)

class ShipmentEvent(Base):
    __tablename__ = "shipment_events"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    shipment_id: Mapped[str] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), index=True)
    event_type: Mapped[str] = mapped_column(String(50), index=True)
    data: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict)
    blockchain_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    shipment: Mapped[Shipment] = relationship("Shipment", back_populates="events")

class ShipmentDocument(Base):
    __tablename__ = "shipment_documents"
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    shipment_id: Mapped[str] = mapped_column(ForeignKey("shipments.id", ondelete="CASCADE"), index=True)
    document_type: Mapped[str] = mapped_column(String(100), index=True)
    document_hash: Mapped[str] = mapped_column(String(255))
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    blockchain_tx_hash: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    shipment: Mapped[Shipment] = relationship("Shipment", back_populates="documents")
