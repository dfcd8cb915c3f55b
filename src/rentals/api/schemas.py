"""Pydantic API schemas for the rentals domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain commands.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class LineItemRequest(BaseModel):
    product_id: str
    product_name: str | None = None
    quantity: int = Field(ge=1)


class CreateOrderRequest(BaseModel):
    items: list[LineItemRequest]
    start_date: date
    end_date: date
    destination_location: str
    origin_location: str | None = None


class SignatureRequest(BaseModel):
    name: str | None = None
    location: str | None = None
    image_ref: str | None = None
    signed_at: datetime | None = None


class ItemCheckRequest(BaseModel):
    verified: bool = False
    notes: str = ""


class StageEvidenceRequest(BaseModel):
    """Evidence for a stage. Omitted fields keep their stored values."""

    model_config = ConfigDict(extra="forbid")

    signature: SignatureRequest | None = None
    received_by: SignatureRequest | None = None
    item_checks: dict[str, ItemCheckRequest] | None = None
    photos: list[str] | None = None
    files: list[str] | None = None
    general_notes: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str


class RescheduleOrderRequest(BaseModel):
    start_date: date
    end_date: date


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class StatusResponse(BaseModel):
    status: str


class StageCompletionResponse(BaseModel):
    status: str
    order_status: str
