from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

ShipmentStatus = Literal["processing", "in-transit", "delivered", "delayed"]
TransportType = Literal["truck", "rail", "ship", "air", "multi-modal"]
Role = Literal["manager", "driver", "customer"]

def _not_null(value):
    if value is None:
        raise ValueError("may be omitted but not null")
    return value

# --- auth & users ---

class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=1, max_length=200)
    company: Optional[str] = Field(None, max_length=200)

class UserCreate(SignupRequest):
    role: Role = "customer"

class LoginRequest(BaseModel):
    email: str
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    role: Optional[str] = None

class ProfileRead(BaseModel):
    id: str
    full_name: str
    company: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=1, max_length=200)
    company: Optional[str] = Field(None, max_length=200)
    avatar_url: Optional[str] = Field(None, max_length=500)

    @field_validator("full_name")
    @classmethod
    def full_name_not_null(cls, value):
        return _not_null(value)

class UserRead(BaseModel):
    id: str
    email: str
    role: Optional[str] = None
    profile: Optional[ProfileRead] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

class RoleUpdate(BaseModel):
    role: Role

# --- shipments ---

class StatusBadge(BaseModel):
    status: Optional[str] = None
    label: str
    color: str

class ShipmentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    origin: str = Field(..., min_length=1, max_length=255)
    destination: str = Field(..., min_length=1, max_length=255)
    transport_type: TransportType = "truck"
    product_type: str = Field(..., min_length=1, max_length=100)
    quantity: int = Field(..., ge=1)
    weight: Optional[float] = Field(None, ge=0, description="Weight in kg")
    customer_id: str
    assigned_driver_id: Optional[str] = None
    planned_departure_date: Optional[datetime] = None
    estimated_arrival_date: Optional[datetime] = None
    # Overrides the configured default distance for the footprint estimate
    distance_km: Optional[float] = Field(None, gt=0)

class ShipmentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    status: Optional[ShipmentStatus] = None
    transport_type: Optional[TransportType] = None
    product_type: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    weight: Optional[float] = Field(None, ge=0)
    distance_km: Optional[float] = Field(None, gt=0)
    assigned_driver_id: Optional[str] = None
    planned_departure_date: Optional[datetime] = None
    estimated_arrival_date: Optional[datetime] = None
    actual_arrival_date: Optional[datetime] = None

    # Columns that are NOT NULL in the database
    @field_validator(
        "title", "origin", "destination", "status", "transport_type", "product_type", "quantity",
    )
    @classmethod
    def required_not_null(cls, value):
        return _not_null(value)

class StatusUpdate(BaseModel):
    status: ShipmentStatus

class ShipmentRead(BaseModel):
    id: str
    tracking_id: str
    title: str
    description: Optional[str] = None
    origin: str
    destination: str
    status: str
    badge: StatusBadge
    transport_type: str
    product_type: str
    quantity: int
    weight: Optional[float] = None
    carbon_footprint: float
    distance_km: Optional[float] = None
    customer_id: str
    assigned_driver_id: Optional[str] = None
    planned_departure_date: Optional[datetime] = None
    estimated_arrival_date: Optional[datetime] = None
    actual_arrival_date: Optional[datetime] = None
    blockchain_tx_hash: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)

# --- sensors ---

class SensorReadingCreate(BaseModel):
    timestamp: Optional[datetime] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = Field(None, ge=0, le=100)
    shock_detected: bool = False
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    battery_level: Optional[float] = Field(None, ge=0, le=100)

class SensorReadingRead(BaseModel):
    id: str
    shipment_id: str
    timestamp: datetime
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    shock_detected: Optional[bool] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    battery_level: Optional[float] = None
    blockchain_tx_hash: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)

# --- reviews ---

class ReviewCreate(BaseModel):
    shipment_id: str
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)

class ReviewRead(BaseModel):
    id: str
    shipment_id: str
    user_id: str
    rating: int
    comment: Optional[str] = None
    approved: bool
    blockchain_tx_hash: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

# --- suggestions ---

class SuggestionRead(BaseModel):
    id: str
    title: str
    description: str
    carbon_savings: Optional[float] = None
    cost_savings: Optional[float] = None
    implemented: bool
    shipment_id: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

class GenerateSuggestionsRequest(BaseModel):
    # Without a shipment the whole recent fleet is analysed
    shipment_id: Optional[str] = None

class SustainabilityAnalysis(BaseModel):
    shipment_id: str
    carbon_footprint: float
    sustainability_score: int
    score_label: str
    carbon_saved: float
    fuel_saved: float
    time_saved: int
    recommendations: List[SuggestionRead]

# --- ledger & supply chain ---

class BlockchainRequest(BaseModel):
    operation: str
    hash: Optional[str] = None
    shipment_data: Optional[Dict[str, Any]] = Field(None, alias="shipmentData")
    shipment_id: Optional[str] = Field(None, alias="shipmentId")
    status: Optional[str] = None
    metadata: Optional[Any] = None
    model_config = ConfigDict(populate_by_name=True)

class CarbonCreditRequest(BaseModel):
    # Computed from the shipment when omitted
    sustainability_score: Optional[int] = Field(None, ge=0, le=100)

class TransactionRead(BaseModel):
    hash: str
    block_number: int
    from_address: str
    to_address: str
    data: str
    status: str
    timestamp: str
    model_config = ConfigDict(from_attributes=True)

class EventCreate(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=50)
    data: Dict[str, Any] = Field(default_factory=dict)

class EventRead(BaseModel):
    id: str
    shipment_id: str
    event_type: str
    data: Dict[str, Any]
    blockchain_tx_hash: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

class OwnershipTransfer(BaseModel):
    from_participant: str
    to_participant: str

class DocumentCreate(BaseModel):
    document_type: str = Field(..., min_length=1, max_length=100)
    document_hash: str = Field(..., min_length=1, max_length=255)

class DocumentRead(BaseModel):
    id: str
    shipment_id: str
    document_type: str
    document_hash: str
    is_verified: bool
    blockchain_tx_hash: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)

class SupplyChainQuery(BaseModel):
    type: str
    participant_id: Optional[str] = None
    product_id: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
