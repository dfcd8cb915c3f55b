"""Shared BDD fixtures and step definitions for the rentals domain."""

import pytest
from protean import current_domain
from pytest_bdd import parsers, then
from rentals.order.errors import AuthorizationDenied, MissingEvidence
from rentals.order.order import Order
from rentals.order.stages import StageKey


@pytest.fixture()
def error():
    """Container for the workflow error raised by the last action."""
    return {"exc": None}


def _load(order_id):
    return current_domain.repository_for(Order).get(order_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert _load(order_id).status == status


@then(parsers.cfparse('product "{product_id}" has {quantity:d} units in stock'))
def product_has_stock(stock, product_id, quantity):
    assert stock.available(product_id) == quantity


@then(parsers.cfparse('stage "{stage_key}" is "{status}"'))
def stage_status_is(order_id, stage_key, status):
    assert _load(order_id).stage(StageKey(stage_key)).status == status


@then(parsers.cfparse("the client was notified {count:d} times"))
def client_notified(sink, order_id, count):
    assert len(sink.for_order(order_id)) == count


@then(parsers.cfparse('the action is denied because "{reason}"'))
def action_denied(error, reason):
    assert isinstance(error["exc"], AuthorizationDenied), f"Expected a denial, got {error['exc']!r}"
    assert error["exc"].reason == reason


@then(parsers.cfparse('evidence "{field}" is reported missing'))
def evidence_missing(error, field):
    assert isinstance(error["exc"], MissingEvidence), f"Expected missing evidence, got {error['exc']!r}"
    assert error["exc"].field == field
