"""Exceptions raised by the ingestion and alert services.

Routers translate these into HTTP status codes; nothing in the services
layer knows about HTTP.
"""


class EngineError(Exception):
    """Base class for ingestion/alert engine failures."""


class InvalidInput(EngineError):
    """A measurement was missing a field or carried a malformed value."""


class NotFound(EngineError):
    """A referenced record does not exist."""


class SensorNotFound(NotFound):
    def __init__(self, sensor_id: int):
        super().__init__(f"Sensor {sensor_id} not found")
        self.sensor_id = sensor_id


class AlertNotFound(NotFound):
    def __init__(self, alert_id: int):
        super().__init__(f"Alert {alert_id} not found")
        self.alert_id = alert_id


class StorageFailure(EngineError):
    """A database error aborted the unit of work; nothing was persisted."""
