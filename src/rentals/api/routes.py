"""FastAPI routes for the rentals domain.

The acting identity and role come from the X-Actor-Identity and X-Actor-Role
headers, set by whatever authenticates the caller upstream.
"""

import json

from fastapi import APIRouter, Depends, Header, HTTPException

from rentals.api.schemas import (
    CancelOrderRequest,
    CreateOrderRequest,
    OrderIdResponse,
    RescheduleOrderRequest,
    StageCompletionResponse,
    StageEvidenceRequest,
    StatusResponse,
)
from rentals.order.approval import ApproveOrder
from rentals.order.authorization import Actor, Role
from rentals.order.cancellation import CancelOrder
from rentals.order.creation import CreateOrder
from rentals.order.deletion import DeleteOrder
from rentals.order.locking import process_for_order, process_new_order
from rentals.order.queries import get_order, list_visible_orders, stage_view
from rentals.order.scheduling import RescheduleOrder
from rentals.order.serialization import to_record
from rentals.order.workflow import CompleteStage, SaveStageDraft
from rentals.utils.logging import bind_actor


def current_actor(
    x_actor_identity: str = Header(...),
    x_actor_role: str = Header(...),
) -> Actor:
    """Read the caller's identity/role claim from the request headers."""
    try:
        actor = Actor.of(x_actor_identity, x_actor_role)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown role: {x_actor_role}") from None
    bind_actor(actor.identity, actor.role.value)
    return actor


def _evidence_json(body: StageEvidenceRequest) -> str:
    return json.dumps(body.model_dump(exclude_none=True, mode="json"))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateOrderRequest, actor: Actor = Depends(current_actor)) -> OrderIdResponse:
    """Place a rental order for the calling user."""
    command = CreateOrder(
        user_identity=actor.identity,
        items=json.dumps([item.model_dump() for item in body.items]),
        start_date=body.start_date,
        end_date=body.end_date,
        destination_location=body.destination_location,
        origin_location=body.origin_location,
    )
    order_id = process_new_order(command)
    return OrderIdResponse(order_id=order_id)


@order_router.get("")
async def list_orders(actor: Actor = Depends(current_actor)) -> list[dict]:
    """Orders visible to the caller, newest first."""
    return [to_record(order) for order in list_visible_orders(actor)]


@order_router.get("/{order_id}")
async def read_order(order_id: str, actor: Actor = Depends(current_actor)) -> dict:
    order = get_order(order_id)
    if actor.role == Role.USER and not actor.owns(order):
        raise HTTPException(status_code=404, detail=f"order {order_id} not found")
    return to_record(order)


@order_router.get("/{order_id}/stages/{stage_key}")
async def read_stage(order_id: str, stage_key: str, actor: Actor = Depends(current_actor)) -> dict:
    """A stage's evidence, with whether the caller may edit it."""
    return stage_view(order_id, stage_key, actor)


@order_router.put("/{order_id}/stages/{stage_key}/draft", response_model=StatusResponse)
async def save_stage_draft(
    order_id: str,
    stage_key: str,
    body: StageEvidenceRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = SaveStageDraft(
        order_id=order_id,
        stage_key=stage_key,
        actor_identity=actor.identity,
        actor_role=actor.role.value,
        evidence=_evidence_json(body),
    )
    process_for_order(order_id, command)
    return StatusResponse(status="draft_saved")


@order_router.put("/{order_id}/stages/{stage_key}/complete", response_model=StageCompletionResponse)
async def complete_stage(
    order_id: str,
    stage_key: str,
    body: StageEvidenceRequest,
    actor: Actor = Depends(current_actor),
) -> StageCompletionResponse:
    command = CompleteStage(
        order_id=order_id,
        stage_key=stage_key,
        actor_identity=actor.identity,
        actor_role=actor.role.value,
        evidence=_evidence_json(body),
    )
    order_status = process_for_order(order_id, command)
    return StageCompletionResponse(status="stage_completed", order_status=order_status)


@order_router.put("/{order_id}/approve", response_model=StatusResponse)
async def approve_order(order_id: str, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = ApproveOrder(
        order_id=order_id,
        actor_identity=actor.identity,
        actor_role=actor.role.value,
    )
    process_for_order(order_id, command)
    return StatusResponse(status="approved")


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = CancelOrder(
        order_id=order_id,
        reason=body.reason,
        actor_identity=actor.identity,
        actor_role=actor.role.value,
    )
    process_for_order(order_id, command)
    return StatusResponse(status="cancelled")


@order_router.put("/{order_id}/schedule", response_model=StatusResponse)
async def reschedule_order(
    order_id: str,
    body: RescheduleOrderRequest,
    actor: Actor = Depends(current_actor),
) -> StatusResponse:
    command = RescheduleOrder(
        order_id=order_id,
        start_date=body.start_date,
        end_date=body.end_date,
        actor_identity=actor.identity,
        actor_role=actor.role.value,
    )
    process_for_order(order_id, command)
    return StatusResponse(status="rescheduled")


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str, force: bool = False, actor: Actor = Depends(current_actor)) -> StatusResponse:
    command = DeleteOrder(
        order_id=order_id,
        actor_identity=actor.identity,
        actor_role=actor.role.value,
        force=force,
    )
    process_for_order(order_id, command)
    return StatusResponse(status="deleted")
