"""Persisted record layout of an Order.

Converts an Order to and from the transport-agnostic record shape used for
storage and for the HTTP API:

    {id, items[], userIdentity, status, approved, startDate, endDate,
     createdAt, updatedAt, originLocation, destinationLocation,
     cancellationReason, workflow: {<stage key>: StageData record}}

The conversion is lossless in both directions.
"""

import json
from datetime import date, datetime

from rentals.order.order import LineItem, Order, Signature, StageData
from rentals.order.stages import StageStatus, ordered_keys


def _iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_datetime(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _parse_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


# ---------------------------------------------------------------------------
# Order → record
# ---------------------------------------------------------------------------
def signature_to_record(signature: Signature | None) -> dict | None:
    if signature is None:
        return None
    return {
        "name": signature.name,
        "location": signature.location,
        "imageRef": signature.image_ref,
        "timestamp": _iso(signature.signed_at),
    }


def stage_to_record(stage: StageData) -> dict:
    return {
        "status": stage.status,
        "timestamp": _iso(stage.timestamp),
        "signature": signature_to_record(stage.signature),
        "receivedBy": signature_to_record(stage.received_by),
        "itemChecks": json.loads(stage.item_checks) if stage.item_checks else {},
        "photos": stage.photo_refs(),
        "files": stage.file_refs(),
        "generalNotes": stage.general_notes,
        "editingBy": stage.editing_by,
    }


def to_record(order: Order) -> dict:
    return {
        "id": str(order.id),
        "items": [
            {
                "id": str(item.id),
                "productId": str(item.product_id),
                "productName": item.product_name,
                "quantity": item.quantity,
            }
            for item in order.items or []
        ],
        "userIdentity": order.user_identity,
        "status": order.status,
        "approved": bool(order.approved),
        "startDate": _iso(order.start_date),
        "endDate": _iso(order.end_date),
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
        "originLocation": order.origin_location,
        "destinationLocation": order.destination_location,
        "cancellationReason": order.cancellation_reason,
        "workflow": {key.value: stage_to_record(order.stage(key)) for key in ordered_keys()},
    }


# ---------------------------------------------------------------------------
# record → Order
# ---------------------------------------------------------------------------
def signature_from_record(record: dict | None) -> Signature | None:
    if record is None:
        return None
    return Signature(
        name=record.get("name"),
        location=record.get("location"),
        image_ref=record.get("imageRef"),
        signed_at=_parse_datetime(record.get("timestamp")),
    )


def stage_from_record(key: str, record: dict) -> StageData:
    photos = record.get("photos") or []
    files = record.get("files") or []
    checks = record.get("itemChecks") or {}
    return StageData(
        key=key,
        status=record.get("status") or StageStatus.PENDING.value,
        timestamp=_parse_datetime(record.get("timestamp")),
        signature=signature_from_record(record.get("signature")),
        received_by=signature_from_record(record.get("receivedBy")),
        item_checks=json.dumps(checks) if checks else None,
        photos=json.dumps(photos) if photos else None,
        files=json.dumps(files) if files else None,
        general_notes=record.get("generalNotes"),
        editing_by=record.get("editingBy"),
    )


def from_record(record: dict) -> Order:
    """Rebuild an Order from its persisted record without raising events."""
    order = Order(
        id=record["id"],
        user_identity=record["userIdentity"],
        status=record["status"],
        approved=bool(record.get("approved", False)),
        start_date=_parse_date(record["startDate"]),
        end_date=_parse_date(record["endDate"]),
        origin_location=record.get("originLocation"),
        destination_location=record["destinationLocation"],
        cancellation_reason=record.get("cancellationReason"),
        created_at=_parse_datetime(record.get("createdAt")),
        updated_at=_parse_datetime(record.get("updatedAt")),
    )
    for item in record.get("items", []):
        order.add_items(
            LineItem(
                id=item["id"],
                product_id=item["productId"],
                product_name=item.get("productName"),
                quantity=item["quantity"],
            )
        )
    workflow = record.get("workflow", {})
    for key in ordered_keys():
        order.add_stages(stage_from_record(key.value, workflow.get(key.value, {})))
    return order
