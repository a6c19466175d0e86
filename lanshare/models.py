import math
from enum import Enum
from typing import Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator

# --- Record ---

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

Gender = Literal["Male", "Female", "Other"]


class Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    email: str = Field(pattern=EMAIL_PATTERN)
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)
    gender: Gender
    age: Union[StrictInt, StrictFloat]

    @field_validator("age")
    @classmethod
    def _age_non_negative(cls, v):
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("age must be a finite number")
        if v < 0:
            raise ValueError("age must be >= 0")
        return v


# Ordered, append-only mirror of the backing file
Database = Tuple[Record, ...]

# --- Outcomes ---


class ConnectivityState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"

    @classmethod
    def from_bool(cls, online: bool) -> "ConnectivityState":
        return cls.ONLINE if online else cls.OFFLINE


class RelayOutcome(str, Enum):
    SKIPPED_OFFLINE = "skipped-offline"
    RELAYED = "relayed"
    FAILED = "relay-failed"


class SubmissionState(str, Enum):
    VALIDATED = "validated"
    LOCALLY_COMMITTED = "locally-committed"
    RELAY_SKIPPED = "relay-skipped"
    RELAY_SUCCEEDED = "relay-succeeded"
    RELAY_FAILED = "relay-failed"

    @classmethod
    def after_relay(cls, outcome: RelayOutcome) -> "SubmissionState":
        return {
            RelayOutcome.SKIPPED_OFFLINE: cls.RELAY_SKIPPED,
            RelayOutcome.RELAYED: cls.RELAY_SUCCEEDED,
            RelayOutcome.FAILED: cls.RELAY_FAILED,
        }[outcome]
