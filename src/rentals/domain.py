"""Rentals bounded context — rental orders and their physical handoff workflow.

Tracks each rental order through the five handoff stages between the
warehouse, the field coordinator and the client. Uses CQRS: the Order
aggregate owns its workflow and emits stage-completion events consumed by
the notification sink and the read-side projections.
"""

from protean.domain import Domain

rentals = Domain(name="rentals")
