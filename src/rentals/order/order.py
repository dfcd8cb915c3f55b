"""Order aggregate (CQRS) — a rental order and its five-stage handoff workflow.

The Order owns a snapshot of the rented line items and one StageData per
handoff stage. Stages close strictly in catalog order, each one only once
its required signatures are present. The order status is derived from the
stages and is never written directly by a stage call.

State Machine (derived):
    Pending → InProcess → Delivered → Finalized
    {Pending, InProcess, Delivered} → Cancelled

Per stage:
    Pending → Completed   (no way back; later calls only correct evidence)
"""

import json
from datetime import UTC, date, datetime

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    Date,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from rentals.domain import rentals
from rentals.order.errors import MissingEvidence
from rentals.order.events import (
    OrderApproved,
    OrderCancelled,
    OrderCreated,
    OrderRescheduled,
    StageCompleted,
    StageDraftSaved,
    StageEvidenceCorrected,
)
from rentals.order.stages import (
    StageKey,
    StageStatus,
    ordered_keys,
    stage_definition,
)
from rentals.order.status import TERMINAL_STATUSES, OrderStatus, derive_status

_EVIDENCE_FIELDS = ("signature", "received_by", "item_checks", "photos", "files", "general_notes")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@rentals.value_object(part_of="Order")
class Signature:
    """A responsible party's signature captured at a handoff.

    A signature counts as evidence only when name, location and the captured
    image are all present.
    """

    name = String(max_length=200)
    location = String(max_length=255)
    image_ref = Text()
    signed_at = DateTime()

    def is_complete(self) -> bool:
        return all(value and value.strip() for value in (self.name, self.location, self.image_ref))


@rentals.value_object(part_of="Order")
class ItemCheck:
    """Verification of a single line item during a stage."""

    verified = Boolean(default=False)
    notes = String(max_length=1000, default="")


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@rentals.entity(part_of="Order")
class LineItem:
    """A rented product and quantity, frozen when the order is placed."""

    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)


@rentals.entity(part_of="Order")
class StageData:
    """Evidence and status of one handoff stage."""

    key = String(required=True, max_length=30, choices=StageKey)
    status = String(
        max_length=20,
        choices=StageStatus,
        default=StageStatus.PENDING.value,
    )
    timestamp = DateTime()
    signature = ValueObject(Signature)
    received_by = ValueObject(Signature)
    item_checks = Text()  # JSON object: line item id -> {"verified", "notes"}
    photos = Text()  # JSON list of evidence references
    files = Text()  # JSON list of file references
    general_notes = Text()
    editing_by = String(max_length=255)

    @property
    def is_completed(self) -> bool:
        return StageStatus(self.status) == StageStatus.COMPLETED

    def checks(self) -> dict[str, ItemCheck]:
        raw = json.loads(self.item_checks) if self.item_checks else {}
        return {item_id: ItemCheck(**check) for item_id, check in raw.items()}

    def photo_refs(self) -> list[str]:
        return json.loads(self.photos) if self.photos else []

    def file_refs(self) -> list[str]:
        return json.loads(self.files) if self.files else []


# ---------------------------------------------------------------------------
# Evidence parsing
# ---------------------------------------------------------------------------
def _as_datetime(value) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _as_date(value) -> date | None:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


def signature_from_dict(data: dict, field: str) -> Signature:
    if not isinstance(data, dict):
        raise ValidationError({field: ["Signature must be an object"]})
    return Signature(
        name=data.get("name"),
        location=data.get("location"),
        image_ref=data.get("image_ref"),
        signed_at=_as_datetime(data.get("signed_at")) or datetime.now(UTC),
    )


def _string_list(value, field: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(ref, str) for ref in value):
        raise ValidationError({field: ["Must be a list of references"]})
    return list(value)


def _parse_evidence(evidence: dict | None, line_item_ids: set[str]) -> dict:
    """Check the shape of an evidence payload and convert it to field values.

    Only keys present (and not None) are returned, so a payload can carry a
    partial update on top of what the stage already holds.
    """
    evidence = evidence or {}
    unknown = set(evidence) - set(_EVIDENCE_FIELDS)
    if unknown:
        raise ValidationError({"evidence": [f"Unknown evidence fields: {', '.join(sorted(unknown))}"]})

    changes: dict = {}
    for field in ("signature", "received_by"):
        if evidence.get(field) is not None:
            changes[field] = signature_from_dict(evidence[field], field)

    if evidence.get("item_checks") is not None:
        raw_checks = evidence["item_checks"]
        if not isinstance(raw_checks, dict):
            raise ValidationError({"item_checks": ["Must be an object keyed by line item id"]})
        checks = {}
        for item_id, check in raw_checks.items():
            if item_id not in line_item_ids:
                raise ValidationError({"item_checks": [f"Unknown line item: {item_id}"]})
            if not isinstance(check, dict):
                raise ValidationError({"item_checks": [f"Check for {item_id} must be an object"]})
            checks[item_id] = {
                "verified": bool(check.get("verified", False)),
                "notes": check.get("notes") or "",
            }
        changes["item_checks"] = checks

    for field in ("photos", "files"):
        if evidence.get(field) is not None:
            changes[field] = _string_list(evidence[field], field)

    if evidence.get("general_notes") is not None:
        changes["general_notes"] = str(evidence["general_notes"])

    return changes


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@rentals.aggregate
class Order:
    id = Identifier(identifier=True)
    user_identity = String(required=True, max_length=255)
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PENDING.value,
    )
    approved = Boolean(default=False)
    start_date = Date(required=True)
    end_date = Date(required=True)
    origin_location = String(max_length=255)
    destination_location = String(required=True, max_length=255)
    items = HasMany(LineItem)
    stages = HasMany(StageData)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_id: str,
        user_identity: str,
        items_data: list[dict],
        start_date,
        end_date,
        destination_location: str,
        origin_location: str | None = None,
    ):
        """Place a new rental order with every stage pending and empty."""
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one line item"]})

        start, end = _as_date(start_date), _as_date(end_date)
        _assert_valid_dates(start, end)

        now = datetime.now(UTC)
        order = cls(
            id=order_id,
            user_identity=user_identity,
            status=OrderStatus.PENDING.value,
            approved=False,
            start_date=start,
            end_date=end,
            origin_location=origin_location,
            destination_location=destination_location,
            created_at=now,
            updated_at=now,
        )
        for item_data in items_data:
            order.add_items(LineItem(**item_data))
        for key in ordered_keys():
            order.add_stages(StageData(key=key.value, status=StageStatus.PENDING.value))

        order.raise_(
            OrderCreated(
                order_id=order_id,
                user_identity=user_identity,
                items=json.dumps(items_data),
                item_count=len(items_data),
                start_date=start,
                end_date=end,
                origin_location=origin_location or "",
                destination_location=destination_location,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Stage access
    # -------------------------------------------------------------------
    def stage(self, key: StageKey) -> StageData:
        return next(s for s in self.stages if s.key == key.value)

    def stage_status(self, key: StageKey) -> StageStatus:
        return StageStatus(self.stage(key).status)

    def stage_statuses(self) -> dict[StageKey, StageStatus]:
        return {StageKey(s.key): StageStatus(s.status) for s in self.stages}

    def line_item_ids(self) -> set[str]:
        return {str(item.id) for item in self.items or []}

    def draft_editors(self) -> set[str]:
        """Identities holding an open draft on a stage that is still pending."""
        return {s.editing_by for s in self.stages if s.editing_by and not s.is_completed}

    def _refresh_status(self) -> None:
        self.status = derive_status(
            OrderStatus(self.status),
            bool(self.approved),
            self.stage_statuses(),
        ).value

    @staticmethod
    def _apply_evidence(stage: StageData, changes: dict) -> None:
        if "signature" in changes:
            stage.signature = changes["signature"]
        if "received_by" in changes:
            stage.received_by = changes["received_by"]
        if "item_checks" in changes:
            merged = json.loads(stage.item_checks) if stage.item_checks else {}
            merged.update(changes["item_checks"])
            stage.item_checks = json.dumps(merged)
        if "photos" in changes:
            stage.photos = json.dumps(changes["photos"])
        if "files" in changes:
            stage.files = json.dumps(changes["files"])
        if "general_notes" in changes:
            stage.general_notes = changes["general_notes"]

    # -------------------------------------------------------------------
    # Stage transitions
    # -------------------------------------------------------------------
    def save_stage_draft(self, stage_key: StageKey, evidence: dict | None, saved_by: str) -> None:
        """Store in-progress evidence on a stage without changing its status."""
        stage = self.stage(stage_key)
        changes = _parse_evidence(evidence, self.line_item_ids())

        now = datetime.now(UTC)
        self._apply_evidence(stage, changes)
        if not stage.is_completed:
            stage.editing_by = saved_by
        self.updated_at = now
        self.raise_(
            StageDraftSaved(
                order_id=str(self.id),
                stage_key=stage_key.value,
                saved_by=saved_by,
                saved_at=now,
            )
        )

    def complete_stage(self, stage_key: StageKey, evidence: dict | None, completed_by: str) -> bool:
        """Close a stage, or correct the evidence of an already closed one.

        Returns True only when this call moved the stage from Pending to
        Completed. Nothing is modified when a required signature is missing.
        """
        stage = self.stage(stage_key)
        definition = stage_definition(stage_key)
        changes = _parse_evidence(evidence, self.line_item_ids())

        signature = changes.get("signature", stage.signature)
        if signature is None or not signature.is_complete():
            raise MissingEvidence("signature")
        if definition.requires_receiver:
            received_by = changes.get("received_by", stage.received_by)
            if received_by is None or not received_by.is_complete():
                raise MissingEvidence("receivedBy")

        now = datetime.now(UTC)
        self._apply_evidence(stage, changes)
        self.updated_at = now

        if stage.is_completed:
            self.raise_(
                StageEvidenceCorrected(
                    order_id=str(self.id),
                    stage_key=stage_key.value,
                    corrected_by=completed_by,
                    corrected_at=now,
                )
            )
            return False

        stage.status = StageStatus.COMPLETED.value
        stage.timestamp = now
        stage.editing_by = None
        self._refresh_status()
        self.raise_(
            StageCompleted(
                order_id=str(self.id),
                stage_key=stage_key.value,
                stage_label=definition.label,
                destination_identity=self.user_identity,
                order_status=self.status,
                completed_by=completed_by,
                completed_at=now,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def approve(self, approved_by: str) -> None:
        """Approve a pending order so that work on it may begin."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise ValidationError({"status": [f"Cannot approve an order in {self.status} state"]})

        now = datetime.now(UTC)
        self.approved = True
        self._refresh_status()
        self.updated_at = now
        self.raise_(
            OrderApproved(
                order_id=str(self.id),
                approved_by=approved_by,
                approved_at=now,
            )
        )

    def cancel(self, reason: str, cancelled_by: str) -> None:
        """Cancel the order. Irreversible, and stock is not given back."""
        current = OrderStatus(self.status)
        if current in TERMINAL_STATUSES:
            raise ValidationError({"status": [f"Cannot cancel an order in {current.value} state"]})

        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.updated_at = now
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_by=cancelled_by,
                previous_status=current.value,
                cancelled_at=now,
            )
        )

    def reschedule(self, start_date, end_date) -> None:
        """Move the dispatch and return dates of an open order."""
        current = OrderStatus(self.status)
        if current in TERMINAL_STATUSES:
            raise ValidationError({"status": [f"Cannot reschedule an order in {current.value} state"]})

        start, end = _as_date(start_date), _as_date(end_date)
        _assert_valid_dates(start, end)

        now = datetime.now(UTC)
        self.start_date = start
        self.end_date = end
        self.updated_at = now
        self.raise_(
            OrderRescheduled(
                order_id=str(self.id),
                start_date=start,
                end_date=end,
                rescheduled_at=now,
            )
        )


def _assert_valid_dates(start: date | None, end: date | None) -> None:
    if start is None or end is None:
        raise ValidationError({"dates": ["Both start and end dates are required"]})
    if end < start:
        raise ValidationError({"end_date": ["Return date cannot be before dispatch date"]})
