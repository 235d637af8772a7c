"""Sync schedule value object.

Interval schedules are expressed in milliseconds. Cron schedules use
five- or six-field expressions evaluated with croniter in the schedule's
timezone (UTC when unset).
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from croniter import croniter
from dateutil import tz

from integration_hub.core.domain.base import ValueObject
from integration_hub.core.errors import ValidationError
from integration_hub.modules.integration.domain.enums import ScheduleType

MIN_INTERVAL_MS = 60_000


class SyncSchedule(ValueObject):
    """When a sync job runs."""

    def __init__(
        self,
        schedule_type: ScheduleType | str = ScheduleType.MANUAL,
        interval_ms: int | None = None,
        cron_expression: str | None = None,
        timezone: str | None = None,
        enabled: bool = True,
    ):
        """Initialize schedule.

        Raises:
            ValidationError: If the interval is shorter than one minute, the
                cron expression is malformed or the timezone is unknown
        """
        super().__init__()
        if not isinstance(schedule_type, ScheduleType):
            try:
                schedule_type = ScheduleType(schedule_type)
            except ValueError as e:
                raise ValidationError(
                    f"Invalid schedule type: {schedule_type}", field="schedule_type"
                ) from e

        if schedule_type == ScheduleType.INTERVAL:
            if interval_ms is None or interval_ms < MIN_INTERVAL_MS:
                raise ValidationError(
                    "Interval must be at least 60000 ms (1 minute)", field="interval"
                )

        if schedule_type == ScheduleType.CRON:
            cron_expression = (cron_expression or "").strip()
            parts = cron_expression.split()
            if len(parts) < 5 or len(parts) > 6:
                raise ValidationError(
                    "Cron expression must have 5 or 6 fields", field="cron_expression"
                )
            if not croniter.is_valid(cron_expression):
                raise ValidationError(
                    f"Invalid cron expression: {cron_expression}",
                    field="cron_expression",
                )

        if timezone and tz.gettz(timezone) is None:
            raise ValidationError(f"Unknown timezone: {timezone}", field="timezone")

        self.schedule_type = schedule_type
        self.interval_ms = interval_ms if schedule_type == ScheduleType.INTERVAL else None
        self.cron_expression = (
            cron_expression if schedule_type == ScheduleType.CRON else None
        )
        self.timezone = timezone
        self.enabled = bool(enabled)
        self._freeze()

    @classmethod
    def manual(cls) -> "SyncSchedule":
        return cls(ScheduleType.MANUAL)

    @classmethod
    def every(cls, interval_ms: int) -> "SyncSchedule":
        return cls(ScheduleType.INTERVAL, interval_ms=interval_ms)

    @classmethod
    def cron(cls, expression: str, timezone: str | None = None) -> "SyncSchedule":
        return cls(ScheduleType.CRON, cron_expression=expression, timezone=timezone)

    @property
    def is_recurring(self) -> bool:
        return self.schedule_type != ScheduleType.MANUAL

    def with_enabled(self, enabled: bool) -> "SyncSchedule":
        return SyncSchedule(
            self.schedule_type,
            self.interval_ms,
            self.cron_expression,
            self.timezone,
            enabled,
        )

    def next_run_after(self, moment: datetime) -> datetime | None:
        """Next scheduled fire time strictly after ``moment``."""
        if not self.enabled or self.schedule_type == ScheduleType.MANUAL:
            return None
        if self.schedule_type == ScheduleType.INTERVAL:
            return moment + timedelta(milliseconds=self.interval_ms)

        zone = tz.gettz(self.timezone) if self.timezone else UTC
        local = moment.astimezone(zone)
        return croniter(self.cron_expression, local).get_next(datetime).astimezone(UTC)

    def expected_interval(self, moment: datetime | None = None) -> timedelta | None:
        """Gap between consecutive runs around ``moment``."""
        if self.schedule_type == ScheduleType.INTERVAL:
            return timedelta(milliseconds=self.interval_ms)
        if self.schedule_type == ScheduleType.CRON:
            zone = tz.gettz(self.timezone) if self.timezone else UTC
            iterator = croniter(
                self.cron_expression, (moment or datetime.now(UTC)).astimezone(zone)
            )
            first = iterator.get_next(datetime)
            second = iterator.get_next(datetime)
            return second - first
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.schedule_type.value,
            "interval": self.interval_ms,
            "cronExpression": self.cron_expression,
            "timezone": self.timezone,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncSchedule":
        return cls(
            schedule_type=data.get("type", ScheduleType.MANUAL.value),
            interval_ms=data.get("interval"),
            cron_expression=data.get("cronExpression", data.get("cron_expression")),
            timezone=data.get("timezone"),
            enabled=data.get("enabled", True),
        )

    def __str__(self) -> str:
        if self.schedule_type == ScheduleType.INTERVAL:
            return f"every {self.interval_ms} ms"
        if self.schedule_type == ScheduleType.CRON:
            return f"cron '{self.cron_expression}'"
        return "manual"
