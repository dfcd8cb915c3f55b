"""Stage catalog — the five fixed handoff stages of a rental order.

Equipment leaves the warehouse, passes to the field coordinator, reaches the
client at the event, comes back to the coordinator at pickup and finally
returns to the warehouse:

    bodega_check → bodega_to_coord → coord_to_client → client_to_coord → coord_to_bodega

Order of the catalog is the order in which stages must be closed.
"""

from dataclasses import dataclass
from enum import Enum

from rentals.order.errors import StageKeyInvalid


class StageKey(Enum):
    BODEGA_CHECK = "bodega_check"
    BODEGA_TO_COORD = "bodega_to_coord"
    COORD_TO_CLIENT = "coord_to_client"
    CLIENT_TO_COORD = "client_to_coord"
    COORD_TO_BODEGA = "coord_to_bodega"


class StageStatus(Enum):
    PENDING = "Pending"
    COMPLETED = "Completed"


class Department(Enum):
    LOGISTICS = "Logistics"
    COORDINATOR = "Coordinator"


@dataclass(frozen=True)
class StageDefinition:
    """Static description of one handoff stage."""

    key: StageKey
    position: int
    label: str
    description: str
    owner: Department
    requires_receiver: bool


STAGES: tuple[StageDefinition, ...] = (
    StageDefinition(
        key=StageKey.BODEGA_CHECK,
        position=1,
        label="Warehouse Check",
        description="Initial verification before dispatch",
        owner=Department.LOGISTICS,
        requires_receiver=False,
    ),
    StageDefinition(
        key=StageKey.BODEGA_TO_COORD,
        position=2,
        label="Warehouse to Coordinator",
        description="Handoff from the warehouse to the field coordinator",
        owner=Department.COORDINATOR,
        requires_receiver=False,
    ),
    StageDefinition(
        key=StageKey.COORD_TO_CLIENT,
        position=3,
        label="Coordinator to Client",
        description="On-site delivery to the client",
        owner=Department.COORDINATOR,
        requires_receiver=True,
    ),
    StageDefinition(
        key=StageKey.CLIENT_TO_COORD,
        position=4,
        label="Client to Coordinator",
        description="Pickup from the event",
        owner=Department.COORDINATOR,
        requires_receiver=True,
    ),
    StageDefinition(
        key=StageKey.COORD_TO_BODEGA,
        position=5,
        label="Coordinator to Warehouse",
        description="Return to the central warehouse",
        owner=Department.LOGISTICS,
        requires_receiver=True,
    ),
)

_BY_KEY = {stage.key: stage for stage in STAGES}

FIRST_STAGE = STAGES[0].key
DELIVERY_STAGE = StageKey.COORD_TO_CLIENT
LAST_STAGE = STAGES[-1].key


def ordered_keys() -> list[StageKey]:
    return [stage.key for stage in STAGES]


def stage_definition(key: StageKey) -> StageDefinition:
    return _BY_KEY[key]


def predecessor_of(key: StageKey) -> StageKey | None:
    """Return the stage that must be closed before ``key`` can be worked on."""
    position = _BY_KEY[key].position
    if position == 1:
        return None
    return STAGES[position - 2].key


def parse_stage_key(value: str | StageKey) -> StageKey:
    """Turn a raw stage key into a StageKey, rejecting unknown keys."""
    if isinstance(value, StageKey):
        return value
    try:
        return StageKey(value)
    except ValueError:
        raise StageKeyInvalid(value) from None
