"""
Wire formats for checkpoints and record output.

Integers that outgrow 64 bits (n, step sizes) travel as decimal strings.
"""

import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .records import RecordSetter, WalkState


def _check_decimal(value: str) -> str:
    if not value.isdigit():
        raise ValueError(f"Expected a non-negative decimal integer, got {value!r}")
    return value


class Checkpoint(BaseModel):
    """Resumable record walk state, written after each record."""
    n: str = Field(..., description="Position of the last evaluated record-setter")
    step_basis: int = Field(
        ..., ge=0, description="Number of leading primes in the v step size"
    )
    record: float = Field(..., description="Current z record")
    record_v: Optional[float] = Field(
        None, description="Current v record; rebuilt on resume when missing"
    )

    @field_validator("n")
    @classmethod
    def validate_n(cls, v: str) -> str:
        return _check_decimal(v)

    @classmethod
    def from_state(cls, state: WalkState) -> "Checkpoint":
        return cls(n=str(state.n), step_basis=state.v_step_pk,
                   record=state.record_z, record_v=state.record_v)

    def to_state(self) -> WalkState:
        return WalkState(n=int(self.n), v_step_pk=self.step_basis,
                         record_z=self.record, record_v=self.record_v)


class RecordSetterLine(BaseModel):
    """One record-setter, as written to the records file (one JSON object per line)."""
    model_config = ConfigDict(populate_by_name=True)

    n: str
    z: float
    tau: int
    v: Optional[float] = Field(None, description="None where v is undefined (n = 1)")
    record_type: Literal["z", "v", "both"] = Field(..., alias="type")
    step: str = "1"
    step_from_v: str = "1"
    primes: List[int] = Field(default_factory=list)
    primorials: List[int] = Field(default_factory=list)

    @field_validator("n", "step", "step_from_v")
    @classmethod
    def validate_decimal(cls, v: str) -> str:
        return _check_decimal(v)

    @classmethod
    def from_record(cls, record: RecordSetter) -> "RecordSetterLine":
        return cls(
            n=str(record.n), z=record.z, tau=record.tau,
            v=None if math.isnan(record.v) else record.v,
            record_type=record.record_type,
            step=str(record.step), step_from_v=str(record.step_from_v),
            primes=list(record.primes), primorials=list(record.primorials),
        )

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
