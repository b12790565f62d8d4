"""
Shared Pydantic schemas used across the target validation pipeline.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class TargetKind(str, Enum):
    BLANK = "blank"
    COMMENT = "comment"
    IPV4 = "ipv4"
    IPV6 = "ipv6"
    CIDR = "cidr"
    IP_RANGE = "ip_range"
    DOMAIN = "domain"
    INVALID = "invalid"


class ErrorKind(str, Enum):
    MALFORMED_CIDR = "malformed_cidr"
    MALFORMED_RANGE = "malformed_range"
    MALFORMED_IPV6 = "malformed_ipv6"
    MALFORMED_IPV4 = "malformed_ipv4"
    MALFORMED_DOMAIN = "malformed_domain"
    UNCLASSIFIED = "unclassified"


class TargetIssue(BaseModel):
    kind: ErrorKind = Field(..., description="Stable machine-readable error category")
    message: str = Field(..., description="Human-readable error message")
    suggestion: Optional[str] = Field(
        None, description="Corrected literal when the input is merely truncated"
    )


class TargetClassification(BaseModel):
    target: str = Field(..., description="Trimmed target token")
    kind: TargetKind = Field(..., description="Detected grammar of the token")
    host: Optional[str] = Field(None, description="Host part with port/brackets removed")
    port: Optional[int] = Field(None, description="Port suffix when present")
    zone: Optional[str] = Field(None, description="IPv6 zone identifier when present")
    prefix_length: Optional[int] = Field(None, description="CIDR prefix length when present")
    error: Optional[TargetIssue] = Field(None, description="If invalid, structured error")

    @property
    def valid(self) -> bool:
        return self.error is None


class IngestedTarget(BaseModel):
    source: str = Field(..., description="Name of the input this target came from")
    target: str = Field(..., description="Single trimmed target token")
    line_number: int = Field(..., ge=1, description="1-based line number inside the input")
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional ingestion metadata (raw line, separator, etc.)",
    )


class TargetValidationError(BaseModel):
    line: int = Field(..., ge=1, description="1-based line number of the offending target")
    target: str = Field(..., description="Offending target, trimmed")
    message: str = Field(..., description="Human-readable description of the failure")
    kind: ErrorKind = Field(default=ErrorKind.UNCLASSIFIED, description="Error category")
    suggestion: Optional[str] = Field(None, description="Optional corrected literal")
    source: Optional[str] = Field(None, description="Input the target came from")


class OutputFormat(str, Enum):
    TEXT = "text"
    JSON = "json"


class InputSource(BaseModel):
    name: str = Field(..., description="Human-friendly name of the input")
    type: Literal["file", "inline"] = Field("file", description="'file' (path or '-' for stdin) or 'inline'")
    location: Optional[str] = Field(None, description="File path for type=file")
    content: Optional[str] = Field(None, description="Raw target text for type=inline")


class ValidatorSettings(BaseModel):
    log_level: str = Field("INFO", description="Logging level for all validator loggers")
    fail_on_errors: bool = Field(True, description="Exit non-zero when any target is invalid")
    output_format: OutputFormat = Field(OutputFormat.TEXT, description="Report rendering")
    sources: List[InputSource] = Field(default_factory=list, description="Inputs to validate")
