class FuelTelemetryError(Exception):
    """Base class for errors raised by the fuel telemetry core."""


class NotFoundError(FuelTelemetryError):
    """A tank or reading that was asked for does not exist."""


class PersistenceError(FuelTelemetryError):
    """Reading from or writing to the database failed."""


class SimulationInvariantViolation(FuelTelemetryError):
    """A derived reading fell outside its physical bounds."""
