"""Workflow errors.

Every error is recoverable by the caller: fix the input and resubmit. None of
them leaves partial state behind, because handlers raise before the unit of
work commits.
"""


class WorkflowError(Exception):
    """Base class for rental workflow errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthorizationDenied(WorkflowError):
    """The acting role may not mutate this stage (or order) right now."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class InvalidSequencing(AuthorizationDenied):
    """The stage's predecessor is still pending."""

    def __init__(self, reason: str = "predecessor stage incomplete"):
        super().__init__(reason)


class MissingEvidence(WorkflowError):
    """Completion was attempted without a required signature."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"missing evidence: {field}")


class InsufficientStock(WorkflowError):
    def __init__(self, product_id: str, requested: int = 0, available: int = 0):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(f"insufficient stock for {product_id}")


class OrderNotFound(WorkflowError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"order {order_id} not found")


class StageKeyInvalid(WorkflowError):
    def __init__(self, stage_key: str):
        self.stage_key = stage_key
        super().__init__(f"unknown stage key {stage_key!r}")


class OrderBusy(WorkflowError):
    """Another caller holds an open draft on the order."""

    def __init__(self, order_id: str, editor: str):
        self.order_id = order_id
        self.editor = editor
        super().__init__(f"order {order_id} is being edited by {editor}")
