"""Application tests for approve, cancel, reschedule and delete commands."""

import json
from datetime import date

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from rentals.order.approval import ApproveOrder
from rentals.order.cancellation import CancelOrder
from rentals.order.creation import CreateOrder
from rentals.order.deletion import DeleteOrder
from rentals.order.errors import AuthorizationDenied, OrderBusy, OrderNotFound
from rentals.order.locking import process_for_order, process_new_order
from rentals.order.order import Order
from rentals.order.scheduling import RescheduleOrder
from rentals.order.status import OrderStatus
from rentals.order.workflow import SaveStageDraft


def _create_order(user_identity="user-1"):
    return process_new_order(
        CreateOrder(
            user_identity=user_identity,
            items=json.dumps([{"product_id": "table-02", "product_name": "Table", "quantity": 3}]),
            start_date=date(2026, 4, 10),
            end_date=date(2026, 4, 12),
            destination_location="Salón Dorado",
        )
    )


def _load(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestApproveOrder:
    def test_admin_approves(self):
        order_id = _create_order()
        process_for_order(order_id, ApproveOrder(order_id=order_id, actor_identity="admin-1", actor_role="Admin"))
        order = _load(order_id)
        assert order.approved is True
        assert order.status == OrderStatus.IN_PROCESS.value

    @pytest.mark.parametrize("role", ["Logistics", "Coordinator", "User"])
    def test_non_admin_cannot_approve(self, role):
        order_id = _create_order()
        with pytest.raises(AuthorizationDenied):
            process_for_order(order_id, ApproveOrder(order_id=order_id, actor_identity="x", actor_role=role))
        assert _load(order_id).approved is False

    def test_approve_twice_fails(self):
        order_id = _create_order()
        cmd = ApproveOrder(order_id=order_id, actor_identity="admin-1", actor_role="Admin")
        process_for_order(order_id, cmd)
        with pytest.raises(ValidationError):
            process_for_order(order_id, cmd)

    def test_approve_unknown_order(self):
        with pytest.raises(OrderNotFound):
            process_for_order(
                "ORD-9999",
                ApproveOrder(order_id="ORD-9999", actor_identity="admin-1", actor_role="Admin"),
            )


class TestCancelOrder:
    def test_owner_cancels(self):
        order_id = _create_order(user_identity="user-1")
        process_for_order(
            order_id,
            CancelOrder(order_id=order_id, reason="rain", actor_identity="user-1", actor_role="User"),
        )
        order = _load(order_id)
        assert order.status == OrderStatus.CANCELLED.value
        assert order.cancellation_reason == "rain"

    def test_admin_cancels_any_order(self):
        order_id = _create_order(user_identity="user-1")
        process_for_order(
            order_id,
            CancelOrder(order_id=order_id, reason="duplicate", actor_identity="admin-1", actor_role="Admin"),
        )
        assert _load(order_id).status == OrderStatus.CANCELLED.value

    def test_other_user_cannot_cancel(self):
        order_id = _create_order(user_identity="user-1")
        with pytest.raises(AuthorizationDenied):
            process_for_order(
                order_id,
                CancelOrder(order_id=order_id, reason="mine now", actor_identity="user-2", actor_role="User"),
            )

    def test_staff_cannot_cancel(self):
        order_id = _create_order()
        with pytest.raises(AuthorizationDenied):
            process_for_order(
                order_id,
                CancelOrder(order_id=order_id, reason="busy", actor_identity="log-1", actor_role="Logistics"),
            )

    def test_reason_required(self):
        with pytest.raises(ValidationError):
            CancelOrder(order_id="ORD-0001", actor_identity="admin-1", actor_role="Admin")


class TestRescheduleOrder:
    def test_admin_reschedules(self):
        order_id = _create_order()
        process_for_order(
            order_id,
            RescheduleOrder(
                order_id=order_id,
                start_date=date(2026, 5, 1),
                end_date=date(2026, 5, 2),
                actor_identity="admin-1",
                actor_role="Admin",
            ),
        )
        order = _load(order_id)
        assert order.start_date == date(2026, 5, 1)
        assert order.end_date == date(2026, 5, 2)

    def test_user_cannot_reschedule(self):
        order_id = _create_order()
        with pytest.raises(AuthorizationDenied):
            process_for_order(
                order_id,
                RescheduleOrder(
                    order_id=order_id,
                    start_date=date(2026, 5, 1),
                    end_date=date(2026, 5, 2),
                    actor_identity="user-1",
                    actor_role="User",
                ),
            )


class TestDeleteOrder:
    def test_admin_deletes(self):
        order_id = _create_order()
        process_for_order(order_id, DeleteOrder(order_id=order_id, actor_identity="admin-1", actor_role="Admin"))
        with pytest.raises(ObjectNotFoundError):
            _load(order_id)

    def test_non_admin_cannot_delete(self):
        order_id = _create_order()
        with pytest.raises(AuthorizationDenied):
            process_for_order(order_id, DeleteOrder(order_id=order_id, actor_identity="user-1", actor_role="User"))

    def test_refused_while_another_actor_holds_a_draft(self):
        order_id = _create_order()
        process_for_order(
            order_id,
            SaveStageDraft(
                order_id=order_id,
                stage_key="bodega_check",
                actor_identity="log-1",
                actor_role="Logistics",
                evidence=json.dumps({"general_notes": "counting"}),
            ),
        )
        with pytest.raises(OrderBusy) as exc:
            process_for_order(order_id, DeleteOrder(order_id=order_id, actor_identity="admin-1", actor_role="Admin"))
        assert exc.value.editor == "log-1"
        assert _load(order_id) is not None

    def test_forced_delete_ignores_drafts(self):
        order_id = _create_order()
        process_for_order(
            order_id,
            SaveStageDraft(
                order_id=order_id,
                stage_key="bodega_check",
                actor_identity="log-1",
                actor_role="Logistics",
                evidence=json.dumps({"general_notes": "counting"}),
            ),
        )
        process_for_order(
            order_id,
            DeleteOrder(order_id=order_id, actor_identity="admin-1", actor_role="Admin", force=True),
        )
        with pytest.raises(ObjectNotFoundError):
            _load(order_id)

    def test_deleted_id_is_not_reused(self):
        order_id = _create_order()
        process_for_order(order_id, DeleteOrder(order_id=order_id, actor_identity="admin-1", actor_role="Admin"))
        assert _create_order() == "ORD-0002"

    def test_delete_unknown_order(self):
        with pytest.raises(OrderNotFound):
            process_for_order(
                "ORD-9999",
                DeleteOrder(order_id="ORD-9999", actor_identity="admin-1", actor_role="Admin"),
            )
