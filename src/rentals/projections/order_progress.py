"""Order progress — one row per order for staff boards and customer tracking."""

from protean.core.projector import on
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from rentals.domain import rentals
from rentals.order.events import (
    OrderApproved,
    OrderCancelled,
    OrderCreated,
    OrderRescheduled,
    StageCompleted,
)
from rentals.order.order import Order
from rentals.order.stages import STAGES
from rentals.order.status import OrderStatus


def _next_stage_after(completed_stages: int) -> str:
    if completed_stages >= len(STAGES):
        return ""
    return STAGES[completed_stages].key.value


@rentals.projection
class OrderProgressView:
    order_id = Identifier(identifier=True, required=True)
    user_identity = String(required=True)
    destination_location = String()
    status = String(required=True)
    completed_stages = Integer(default=0)
    next_stage = String()
    start_date = String()
    end_date = String()
    created_at = DateTime()
    updated_at = DateTime()


@rentals.projector(projector_for=OrderProgressView, aggregates=[Order])
class OrderProgressProjector:
    @on(OrderCreated)
    def on_order_created(self, event):
        current_domain.repository_for(OrderProgressView).add(
            OrderProgressView(
                order_id=event.order_id,
                user_identity=event.user_identity,
                destination_location=event.destination_location,
                status=OrderStatus.PENDING.value,
                completed_stages=0,
                next_stage=_next_stage_after(0),
                start_date=str(event.start_date),
                end_date=str(event.end_date),
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(OrderApproved)
    def on_order_approved(self, event):
        repo = current_domain.repository_for(OrderProgressView)
        view = repo.get(event.order_id)
        if view.status == OrderStatus.PENDING.value:
            view.status = OrderStatus.IN_PROCESS.value
        view.updated_at = event.approved_at
        repo.add(view)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        repo = current_domain.repository_for(OrderProgressView)
        view = repo.get(event.order_id)
        view.status = OrderStatus.CANCELLED.value
        view.next_stage = ""
        view.updated_at = event.cancelled_at
        repo.add(view)

    @on(OrderRescheduled)
    def on_order_rescheduled(self, event):
        repo = current_domain.repository_for(OrderProgressView)
        view = repo.get(event.order_id)
        view.start_date = str(event.start_date)
        view.end_date = str(event.end_date)
        view.updated_at = event.rescheduled_at
        repo.add(view)

    @on(StageCompleted)
    def on_stage_completed(self, event):
        repo = current_domain.repository_for(OrderProgressView)
        view = repo.get(event.order_id)
        view.completed_stages = (view.completed_stages or 0) + 1
        view.next_stage = _next_stage_after(view.completed_stages)
        view.status = event.order_status
        view.updated_at = event.completed_at
        repo.add(view)
