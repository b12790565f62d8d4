from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from models.schemas import ErrorKind, TargetKind, TargetValidationError


class TargetsRequest(BaseModel):
    targets: str = Field(..., description="Raw target text: newline, ',', ';' or space separated.")


class TargetsValidationResponse(BaseModel):
    valid: bool = Field(..., description="True when no target failed validation.")
    errors: List[TargetValidationError] = Field(default_factory=list)
    message: str = Field("", description="Human-readable summary of the errors, empty when valid.")


class ClassifiedTargetResponse(BaseModel):
    line: int
    target: str
    kind: TargetKind
    host: Optional[str] = None
    port: Optional[int] = None
    zone: Optional[str] = None
    prefix_length: Optional[int] = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None
    suggestion: Optional[str] = None


class TaskCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, description="Human-friendly task name.")
    targets: str = Field(..., description="Raw target text to scan.")


class TaskCreateResponse(BaseModel):
    name: str
    targets: List[str] = Field(..., description="Accepted targets in submission order.")
    total_targets: int
