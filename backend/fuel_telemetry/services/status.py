import enum


class FuelStatus(str, enum.Enum):
    CRITICAL = "critical"
    LOW = "low"
    NORMAL = "normal"
    FULL = "full"


FULL_THRESHOLD = 95.0
CRITICAL_THRESHOLD = 10.0
LOW_THRESHOLD = 25.0


def classify_fuel_level(percentage: float) -> FuelStatus:
    """Map a fuel percentage to a status. Out-of-range values use the same thresholds."""
    if percentage >= FULL_THRESHOLD:
        return FuelStatus.FULL
    if percentage < CRITICAL_THRESHOLD:
        return FuelStatus.CRITICAL
    if percentage < LOW_THRESHOLD:
        return FuelStatus.LOW
    return FuelStatus.NORMAL
