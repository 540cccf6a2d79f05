"""Domain enumerations and state-transition rules."""

import enum


class VehicleStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    OCCUPIED = "OCCUPIED"
    MAINTENANCE = "MAINTENANCE"


class RideStatus(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


# State machine: maps current status -> set of valid next statuses
RIDE_TRANSITIONS: dict[RideStatus, set[RideStatus]] = {
    RideStatus.IN_PROGRESS: {RideStatus.COMPLETED},
    RideStatus.COMPLETED: set(),
}


def can_transition(current: RideStatus, new: RideStatus) -> bool:
    return new in RIDE_TRANSITIONS.get(RideStatus(current), set())


class Counter(str, enum.Enum):
    """Names of the store-owned id sequences."""

    VEHICLE = "vehicle"
    RIDE = "ride"
