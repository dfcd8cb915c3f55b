"""Tests for the stage authorization resolver."""

from datetime import date

import pytest
from rentals.order.authorization import (
    Actor,
    AuthorizationResult,
    Role,
    require_admin,
    require_stage_access,
    resolve_stage_access,
)
from rentals.order.errors import AuthorizationDenied, InvalidSequencing
from rentals.order.order import Order
from rentals.order.stages import StageKey, ordered_keys

SIGNATURE = {"name": "Ana", "location": "Warehouse 1", "image_ref": "sig://ana"}
RECEIVER = {"name": "Luis", "location": "Event hall", "image_ref": "sig://luis"}

LOGISTICS = Actor.of("log-1", "Logistics")
COORDINATOR = Actor.of("coord-1", "Coordinator")
CUSTOMER = Actor.of("user-1", "User")


def _order(user_identity="user-1"):
    return Order.create(
        order_id="ORD-0001",
        user_identity=user_identity,
        items_data=[{"product_id": "chair-01", "product_name": "Chair", "quantity": 4}],
        start_date=date(2026, 3, 1),
        end_date=date(2026, 3, 3),
        destination_location="Event hall",
    )


def _complete_through(order, count):
    for key in ordered_keys()[:count]:
        order.complete_stage(key, {"signature": SIGNATURE, "received_by": RECEIVER}, "staff")
    return order


class TestRoleMapping:
    def test_logistics_may_work_first_stage(self):
        assert resolve_stage_access(_order(), StageKey.BODEGA_CHECK, LOGISTICS).permitted

    def test_coordinator_may_not_work_first_stage(self):
        result = resolve_stage_access(_order(), StageKey.BODEGA_CHECK, COORDINATOR)
        assert not result.permitted
        assert result.reason == "owned by Logistics"

    def test_coordinator_owns_middle_stages(self):
        order = _complete_through(_order(), 1)
        assert resolve_stage_access(order, StageKey.BODEGA_TO_COORD, COORDINATOR).permitted

    def test_logistics_may_not_work_coordinator_stage(self):
        order = _complete_through(_order(), 1)
        result = resolve_stage_access(order, StageKey.BODEGA_TO_COORD, LOGISTICS)
        assert not result.permitted
        assert result.reason == "owned by Coordinator"

    def test_logistics_owns_last_stage(self):
        order = _complete_through(_order(), 4)
        assert resolve_stage_access(order, StageKey.COORD_TO_BODEGA, LOGISTICS).permitted

    def test_plain_user_is_never_permitted(self):
        result = resolve_stage_access(_order(), StageKey.BODEGA_CHECK, CUSTOMER)
        assert not result.permitted
        assert result.code == "role"


class TestAdminOwnership:
    def test_admin_may_work_any_stage_of_own_order(self):
        order = _order(user_identity="admin-1")
        admin = Actor.of("admin-1", Role.ADMIN)
        assert resolve_stage_access(order, StageKey.BODEGA_CHECK, admin).permitted
        _complete_through(order, 1)
        assert resolve_stage_access(order, StageKey.BODEGA_TO_COORD, admin).permitted

    def test_admin_denied_on_someone_elses_order(self):
        admin = Actor.of("admin-1", "Admin")
        result = resolve_stage_access(_order(), StageKey.BODEGA_CHECK, admin)
        assert not result.permitted
        assert result.reason == "owned by Logistics"


class TestSequencing:
    def test_predecessor_incomplete_denies_even_the_owner(self):
        result = resolve_stage_access(_order(), StageKey.BODEGA_TO_COORD, COORDINATOR)
        assert not result.permitted
        assert result.reason == "predecessor stage incomplete"
        assert result.code == "sequencing"

    def test_sequencing_checked_before_role(self):
        result = resolve_stage_access(_order(), StageKey.COORD_TO_CLIENT, CUSTOMER)
        assert result.code == "sequencing"

    def test_require_stage_access_raises_invalid_sequencing(self):
        with pytest.raises(InvalidSequencing):
            require_stage_access(_order(), StageKey.BODEGA_TO_COORD, COORDINATOR)

    def test_invalid_sequencing_is_an_authorization_denial(self):
        with pytest.raises(AuthorizationDenied):
            require_stage_access(_order(), StageKey.BODEGA_TO_COORD, COORDINATOR)


class TestCancelledOrders:
    def test_cancelled_order_denies_everyone(self):
        order = _order()
        order.cancel("client changed plans", "admin-1")
        result = resolve_stage_access(order, StageKey.BODEGA_CHECK, LOGISTICS)
        assert not result.permitted
        assert result.reason == "order cancelled"


class TestApprovalGate:
    def test_gate_off_by_default(self):
        assert resolve_stage_access(_order(), StageKey.BODEGA_CHECK, LOGISTICS).permitted

    def test_gate_blocks_unapproved_order(self):
        result = resolve_stage_access(_order(), StageKey.BODEGA_CHECK, LOGISTICS, require_approval=True)
        assert not result.permitted
        assert result.reason == "order awaiting approval"

    def test_gate_lets_approved_order_through(self):
        order = _order()
        order.approve("admin-1")
        assert resolve_stage_access(order, StageKey.BODEGA_CHECK, LOGISTICS, require_approval=True).permitted

    def test_gate_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("RENTALS_REQUIRE_APPROVAL", "true")
        assert not resolve_stage_access(_order(), StageKey.BODEGA_CHECK, LOGISTICS).permitted


class TestAuthorizationResult:
    def test_permitted_result_does_not_raise(self):
        AuthorizationResult(permitted=True).raise_if_denied()

    def test_denied_result_raises_with_reason(self):
        with pytest.raises(AuthorizationDenied) as exc:
            AuthorizationResult(False, "owned by Logistics", "role").raise_if_denied()
        assert exc.value.reason == "owned by Logistics"


class TestRequireAdmin:
    def test_admin_passes(self):
        require_admin(Actor.of("admin-1", "Admin"), "Approving an order")

    @pytest.mark.parametrize("role", ["Logistics", "Coordinator", "User"])
    def test_non_admin_denied(self, role):
        with pytest.raises(AuthorizationDenied) as exc:
            require_admin(Actor.of("someone", role), "Approving an order")
        assert exc.value.reason == "Approving an order requires Admin"


class TestActor:
    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            Actor.of("x", "Janitor")

    def test_owns_compares_identity(self):
        order = _order(user_identity="user-1")
        assert CUSTOMER.owns(order)
        assert not COORDINATOR.owns(order)
