"""BDD tests for the rental hand-off pipeline."""

import json
from datetime import date

from pytest_bdd import given, parsers, scenarios, when
from rentals.order.cancellation import CancelOrder
from rentals.order.creation import CreateOrder
from rentals.order.errors import WorkflowError
from rentals.order.locking import process_for_order, process_new_order
from rentals.order.stages import StageKey, ordered_keys, stage_definition
from rentals.order.workflow import CompleteStage

scenarios("features/handoff_pipeline.feature")

SIGNATURE = {"name": "Ana Ruiz", "location": "Warehouse 1", "image_ref": "sig://ana"}
RECEIVER = {"name": "Luis Mora", "location": "Salón Dorado", "image_ref": "sig://luis"}

_OWNER_ACTORS = {"Logistics": "log-1", "Coordinator": "coord-1"}


def _place_order(user_identity, product_id="chair-01", quantity=1):
    return process_new_order(
        CreateOrder(
            user_identity=user_identity,
            items=json.dumps([{"product_id": product_id, "product_name": product_id, "quantity": quantity}]),
            start_date=date(2026, 4, 10),
            end_date=date(2026, 4, 12),
            destination_location="Salón Dorado",
        )
    )


def _complete_stage(order_id, stage_key, identity, role, evidence):
    return process_for_order(
        order_id,
        CompleteStage(
            order_id=order_id,
            stage_key=stage_key,
            actor_identity=identity,
            actor_role=role,
            evidence=json.dumps(evidence),
        ),
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('product "{product_id}" has {quantity:d} units in stock'))
def product_in_stock(stock, product_id, quantity):
    stock.set_level(product_id, quantity)


@given(parsers.cfparse('a placed order for user "{user_identity}"'), target_fixture="order_id")
def placed_order(user_identity):
    return _place_order(user_identity)


@given(parsers.cfparse('stages are completed up to "{stage_key}"'))
def stages_completed_up_to(order_id, stage_key):
    target = StageKey(stage_key)
    for key in ordered_keys():
        role = stage_definition(key).owner.value
        _complete_stage(
            order_id,
            key.value,
            _OWNER_ACTORS[role],
            role,
            {"signature": SIGNATURE, "received_by": RECEIVER},
        )
        if key == target:
            break


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.cfparse('user "{user_identity}" orders {quantity:d} units of "{product_id}"'),
    target_fixture="order_id",
)
def user_orders(user_identity, quantity, product_id):
    return _place_order(user_identity, product_id=product_id, quantity=quantity)


@when(parsers.cfparse('the order is cancelled by "{identity}" as "{role}"'))
def cancel_order(order_id, identity, role):
    process_for_order(
        order_id,
        CancelOrder(order_id=order_id, reason="plans changed", actor_identity=identity, actor_role=role),
    )


@when(parsers.cfparse('"{identity}" as "{role}" completes "{stage_key}" with both signatures'))
def complete_with_both_signatures(order_id, identity, role, stage_key, error):
    try:
        _complete_stage(order_id, stage_key, identity, role, {"signature": SIGNATURE, "received_by": RECEIVER})
    except WorkflowError as exc:
        error["exc"] = exc


@when(parsers.cfparse('"{identity}" as "{role}" completes "{stage_key}" with only the primary signature'))
def complete_with_primary_signature(order_id, identity, role, stage_key, error):
    try:
        _complete_stage(order_id, stage_key, identity, role, {"signature": SIGNATURE})
    except WorkflowError as exc:
        error["exc"] = exc
