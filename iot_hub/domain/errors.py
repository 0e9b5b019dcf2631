class HubError(Exception):
    """Base class for errors surfaced to hub callers."""


class SensorNotFoundError(HubError, LookupError):
    def __init__(self, sensor_type: str) -> None:
        super().__init__(f"Sensor type not found: {sensor_type}")
        self.sensor_type = sensor_type


class CalibrationNotSupportedError(HubError):
    def __init__(self, sensor_type: str) -> None:
        super().__init__(f"Sensor does not support calibration: {sensor_type}")
        self.sensor_type = sensor_type


class UnknownActionError(HubError, ValueError):
    def __init__(self, action: str) -> None:
        super().__init__(f"Unknown action: {action}")
        self.action = action
