from __future__ import annotations
from datetime import timedelta
from enum import Enum


class FieldType(str, Enum):
    STRING = "String"
    NUMBER = "Number"
    BOOLEAN = "Boolean"
    DATE = "Date"
    EMAIL = "Email"


class DBType(str, Enum):
    DATABRICKS = "databricks"
    POSTGRESQL = "postgresql"


class FrequencyUnit(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def duration(self) -> timedelta:
        return FREQUENCY_UNIT_DURATIONS[self]


FREQUENCY_UNIT_DURATIONS: dict[FrequencyUnit, timedelta] = {
    FrequencyUnit.HOUR: timedelta(hours=1),
    FrequencyUnit.DAY: timedelta(days=1),
    FrequencyUnit.WEEK: timedelta(days=7),
    FrequencyUnit.MONTH: timedelta(days=30),
    FrequencyUnit.YEAR: timedelta(days=365),
}


class EventProvider(str, Enum):
    MAILGUN = "mailgun"
    SENDGRID = "sendgrid"
