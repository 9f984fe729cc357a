"""
Health parameter thresholds and alert configuration.

Each threshold describes the normal range of one vital sign reported by the
in-cab sensors, how many out-of-range readings per day it takes to raise an
alert, and whether that alert is pushed to the notification feed.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import Callable, Dict, List, Optional, Tuple, Union

Reading = Union[float, int, bool]


def format_reading(value: Reading) -> str:
    """Render a reading the way operators type it (120, not 120.0)"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class AlertThreshold:
    parameter: str
    condition: str  # below | above | outside | detected
    flag_instances: int
    send_notification: bool
    critical_alert: bool
    message_template: str
    unit: str
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    def alert_message(self, value: Reading, driver_name: str) -> str:
        return self.message_template.format(driver=driver_name, value=format_reading(value))


HEALTH_THRESHOLDS: Dict[str, AlertThreshold] = {
    "heartRate": AlertThreshold(
        parameter="Heart Rate",
        condition="outside",
        min_value=60,
        max_value=100,
        flag_instances=1,
        send_notification=True,
        critical_alert=True,
        message_template="{driver}'s heart rate ({value} bpm) is outside normal range",
        unit="bpm",
    ),
    "breathingRate": AlertThreshold(
        parameter="Breathing Rate",
        condition="outside",
        min_value=12,
        max_value=20,
        flag_instances=1,
        send_notification=True,
        critical_alert=True,
        message_template="{driver}'s breathing rate ({value} bpm) is outside normal range",
        unit="bpm",
    ),
    "hrvSDNN": AlertThreshold(
        parameter="HRV SDNN",
        condition="below",
        min_value=20,
        flag_instances=1,
        send_notification=True,
        critical_alert=True,
        message_template="{driver} is experiencing high stress (HRV SDNN: {value} ms)",
        unit="ms",
    ),
    "oxygenSaturation": AlertThreshold(
        parameter="Oxygen Saturation",
        condition="below",
        min_value=90,
        flag_instances=1,
        send_notification=True,
        critical_alert=True,
        message_template="{driver}'s oxygen saturation ({value}%) is critically low",
        unit="%",
    ),
    "meanRRI": AlertThreshold(
        parameter="Mean RRI",
        condition="outside",
        min_value=600,
        max_value=1200,
        flag_instances=2,
        send_notification=True,
        critical_alert=True,
        message_template="{driver} is experiencing high stress (Mean RRI: {value} ms)",
        unit="ms",
    ),
    "parasympathetic": AlertThreshold(
        parameter="Parasympathetic NS",
        condition="below",
        min_value=50,
        flag_instances=2,
        send_notification=True,
        critical_alert=True,
        message_template="{driver} is experiencing high stress (Parasympathetic HRV: {value} ms)",
        unit="ms HRV",
    ),
    "snsIndex": AlertThreshold(
        parameter="SNS Index",
        condition="above",
        max_value=5,
        flag_instances=2,
        send_notification=True,
        critical_alert=True,
        message_template="{driver} is experiencing high stress (SNS Index: {value})",
        unit="",
    ),
    "alcoholDetection": AlertThreshold(
        parameter="Alcohol Detection",
        condition="detected",
        flag_instances=1,
        send_notification=True,
        critical_alert=True,
        message_template="Alcohol detected for driver {driver}",
        unit="",
    ),
    "drowsinessDetection": AlertThreshold(
        parameter="Drowsiness Detection",
        condition="detected",
        flag_instances=1,
        send_notification=False,
        critical_alert=True,
        message_template="Drowsiness detected for driver {driver}",
        unit="",
    ),
}

# Sensor payload keys that differ from their threshold key
METRIC_ALIASES: Dict[str, str] = {
    "alcoholDetected": "alcoholDetection",
    "drowsinessDetected": "drowsinessDetection",
}


def _is_number(value: Reading) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def check_threshold(parameter: str, value: Reading) -> Tuple[bool, bool]:
    """
    Returns:
        (is_alert, is_critical). Unknown parameters never alert.
    """
    threshold = HEALTH_THRESHOLDS.get(parameter)
    if threshold is None:
        return False, False

    is_alert = False
    if threshold.condition == "below":
        is_alert = _is_number(value) and threshold.min_value is not None and value < threshold.min_value
    elif threshold.condition == "above":
        is_alert = _is_number(value) and threshold.max_value is not None and value > threshold.max_value
    elif threshold.condition == "outside":
        is_alert = _is_number(value) and (
            (threshold.min_value is not None and value < threshold.min_value)
            or (threshold.max_value is not None and value > threshold.max_value)
        )
    elif threshold.condition == "detected":
        is_alert = value is True

    return is_alert, is_alert and threshold.critical_alert


@dataclass
class ParameterInstanceTracker:
    """Out-of-range readings per (driver, parameter); only today's count"""

    _instances: Dict[Tuple[str, str], List[datetime]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def record(self, driver_id: str, parameter: str, now: Optional[datetime] = None) -> int:
        """Record one instance and return today's count including it"""
        now = now or datetime.now()
        today: date = now.date()
        key = (driver_id, parameter)
        with self._lock:
            # Drop every key with no readings from today
            for tracked in list(self._instances):
                kept = [ts for ts in self._instances[tracked] if ts.date() == today]
                if kept:
                    self._instances[tracked] = kept
                else:
                    del self._instances[tracked]
            todays = self._instances.setdefault(key, [])
            todays.append(now)
            return len(todays)

    def count(self, driver_id: str, parameter: str, now: Optional[datetime] = None) -> int:
        today = (now or datetime.now()).date()
        with self._lock:
            return sum(1 for ts in self._instances.get((driver_id, parameter), []) if ts.date() == today)

    def __len__(self) -> int:
        """Number of (driver, parameter) keys currently tracked"""
        with self._lock:
            return len(self._instances)

    def reset(self) -> None:
        with self._lock:
            self._instances.clear()


# Singleton instance
instance_tracker = ParameterInstanceTracker()
