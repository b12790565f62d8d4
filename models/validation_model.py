#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Target Validation Models & Service

Responsibilities:
- Classify a target token: ipv4, ipv6, cidr, ip_range, domain (or blank/comment)
- Validate each grammar strictly (octets, IPv6 groups, ports, masks, labels)
- Report structured errors (kind, message, suggestion)
- NO DNS resolution, NO range/CIDR expansion, NO deduplication.

The grammar functions are pure and keep no state; only `TargetValidator`
logs.
"""

from __future__ import annotations

import string
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple

from models.schemas import (
    ErrorKind,
    IngestedTarget,
    TargetClassification,
    TargetIssue,
    TargetKind,
    TargetValidationError,
)
from utils.logger import get_logger, log_metric, log_stage


UNCLASSIFIED_MESSAGE = "invalid target format, expected an IP, CIDR, IP range or domain name"

_DIGITS = frozenset(string.digits)
_HEX_DIGITS = frozenset(string.hexdigits)
_IPV6_CHARS = _HEX_DIGITS | {":"}
_LABEL_CHARS = frozenset(string.ascii_letters + string.digits + "-")
_LETTERS = frozenset(string.ascii_letters)

_MAX_IPV6_LENGTH = 45
_MAX_LABEL_LENGTH = 63

ValidationResult = Tuple[Dict[str, Any], Optional[TargetIssue]]


# ----------------------------------------------------------------------
# Primitives
# ----------------------------------------------------------------------
def _is_decimal(text: str, max_digits: int) -> bool:
    return 0 < len(text) <= max_digits and all(ch in _DIGITS for ch in text)


def is_valid_octet(text: str) -> bool:
    """An octet is 0-255 written exactly as str(int): no signs, spaces or leading zeros."""
    if not _is_decimal(text, 3):
        return False
    value = int(text)
    return value <= 255 and text == str(value)


def is_valid_ipv4(text: str) -> bool:
    parts = text.split(".")
    return len(parts) == 4 and all(is_valid_octet(p) for p in parts)


def is_valid_port(text: str) -> bool:
    return _is_decimal(text, 5) and 1 <= int(text) <= 65535


def is_valid_ipv6_group(text: str) -> bool:
    return 1 <= len(text) <= 4 and all(ch in _HEX_DIGITS for ch in text)


def _ipv6_groups(half: str) -> List[str]:
    return half.split(":") if half else []


def is_valid_ipv6(address: str) -> bool:
    """
    Check the textual IPv6 grammar (no zone, no brackets, no prefix).

    With a single '::' each side may be empty, otherwise it must be made of
    1-4 digit hex groups and at most 7 groups may be written in total. Without
    '::' exactly 8 groups are required. Embedded IPv4 tails are not accepted.
    """
    if not address or len(address) > _MAX_IPV6_LENGTH:
        return False
    if any(ch not in _IPV6_CHARS for ch in address):
        return False

    compressed = address.count("::")
    if compressed > 1:
        return False

    if compressed == 1:
        left, right = address.split("::")
        groups = _ipv6_groups(left) + _ipv6_groups(right)
        return len(groups) <= 7 and all(is_valid_ipv6_group(g) for g in groups)

    groups = address.split(":")
    return len(groups) == 8 and all(is_valid_ipv6_group(g) for g in groups)


def _ipv4_key(text: str) -> Tuple[int, ...]:
    return tuple(int(octet) for octet in text.split("."))


def _issue(kind: ErrorKind, message: str, suggestion: Optional[str] = None) -> TargetIssue:
    return TargetIssue(kind=kind, message=message, suggestion=suggestion)


# ----------------------------------------------------------------------
# Grammar validators
# ----------------------------------------------------------------------
def suggest_cidr_fix(ip_part: str, mask_part: str) -> str:
    """Right-pad a truncated address with zero octets, e.g. 10.0 + 24 -> 10.0.0.0/24."""
    octets = ip_part.split(".")
    octets.extend(["0"] * (4 - len(octets)))
    return ".".join(octets) + "/" + mask_part


def _validate_cidr(host: str) -> ValidationResult:
    parts = host.split("/")
    if len(parts) != 2:
        return {}, _issue(ErrorKind.MALFORMED_CIDR, "invalid CIDR format")

    ip_part, mask_part = parts
    if not (_is_decimal(mask_part, 3) and int(mask_part) <= 32):
        return {}, _issue(ErrorKind.MALFORMED_CIDR, f"invalid subnet mask: {mask_part}")
    if not ip_part:
        return {}, _issue(ErrorKind.MALFORMED_CIDR, "missing IP address before '/'")

    octets = ip_part.split(".")
    if len(octets) < 4:
        missing = 4 - len(octets)
        suggestion = suggest_cidr_fix(ip_part, mask_part)
        noun = "octet" if missing == 1 else "octets"
        return {}, _issue(
            ErrorKind.MALFORMED_CIDR,
            f"incomplete IP address, missing {missing} {noun}; expected format: {suggestion}",
            suggestion,
        )
    if len(octets) > 4:
        return {}, _issue(
            ErrorKind.MALFORMED_CIDR, f"too many octets: expected 4, got {len(octets)}"
        )

    for position, octet in enumerate(octets, start=1):
        if not is_valid_octet(octet):
            return {}, _issue(
                ErrorKind.MALFORMED_CIDR,
                f"octet {position} '{octet}' is invalid, expected a number between 0 and 255",
            )

    return {"host": ip_part, "prefix_length": int(mask_part)}, None


def _looks_like_ip_range(host: str) -> bool:
    parts = host.split("-")
    return len(parts) == 2 and is_valid_ipv4(parts[0].strip())


def _validate_ip_range(host: str) -> ValidationResult:
    parts = host.split("-")
    if len(parts) != 2:
        return {}, _issue(ErrorKind.MALFORMED_RANGE, "invalid IP range format")

    start, end = parts[0].strip(), parts[1].strip()
    if not is_valid_ipv4(start):
        return {}, _issue(ErrorKind.MALFORMED_RANGE, f"start IP '{start}' is invalid")
    if not is_valid_ipv4(end):
        return {}, _issue(ErrorKind.MALFORMED_RANGE, f"end IP '{end}' is invalid")
    if _ipv4_key(start) > _ipv4_key(end):
        return {}, _issue(ErrorKind.MALFORMED_RANGE, "start IP must not be greater than end IP")

    return {"host": f"{start}-{end}"}, None


def _looks_like_ipv6(target: str) -> bool:
    return target.startswith("[") or "%" in target or target.count(":") >= 2


def _validate_ipv6(target: str) -> ValidationResult:
    meta: Dict[str, Any] = {}
    address = target

    # [addr]:port
    if target.startswith("["):
        close = target.find("]")
        if close == -1:
            return meta, _issue(
                ErrorKind.MALFORMED_IPV6, "invalid IPv6 format, missing closing bracket ']'"
            )
        address = target[1:close]
        remaining = target[close + 1:]
        if remaining:
            if not remaining.startswith(":"):
                return meta, _issue(ErrorKind.MALFORMED_IPV6, "invalid IPv6 format")
            port_text = remaining[1:]
            if not is_valid_port(port_text):
                return meta, _issue(ErrorKind.MALFORMED_IPV6, f"invalid port: {port_text}")
            meta["port"] = int(port_text)

    # Zone IDs are dropped unchecked.
    address, marker, zone = address.partition("%")
    if marker:
        meta["zone"] = zone

    if "/" in address:
        parts = address.split("/")
        if len(parts) != 2:
            return meta, _issue(ErrorKind.MALFORMED_IPV6, "invalid IPv6 CIDR format")
        address, mask_part = parts
        if not (_is_decimal(mask_part, 3) and int(mask_part) <= 128):
            return meta, _issue(
                ErrorKind.MALFORMED_IPV6, f"invalid IPv6 prefix length: {mask_part}"
            )
        meta["prefix_length"] = int(mask_part)

    if not is_valid_ipv6(address):
        return meta, _issue(ErrorKind.MALFORMED_IPV6, "invalid IPv6 address format")

    meta["host"] = address
    return meta, None


def _domain_problem(host: str) -> Optional[str]:
    if host.startswith((".", "-")) or host.endswith((".", "-")):
        return "must not start or end with '.' or '-'"
    if ".." in host:
        return "must not contain consecutive dots"

    labels = host.split(".")
    if len(labels) < 2:
        return "at least two labels are required"

    for index, label in enumerate(labels, start=1):
        if not label or len(label) > _MAX_LABEL_LENGTH:
            return f"label {index} '{label}' must be 1-{_MAX_LABEL_LENGTH} characters long"
        if any(ch not in _LABEL_CHARS for ch in label):
            return f"label {index} '{label}' may only contain letters, digits and '-'"
        if label.startswith("-") or label.endswith("-"):
            return f"label {index} '{label}' must not start or end with '-'"

    tld = labels[-1]
    if len(tld) < 2 or any(ch not in _LETTERS for ch in tld):
        return f"top-level domain '{tld}' must be at least 2 letters"
    return None


def is_valid_domain(host: str) -> bool:
    return _domain_problem(host) is None


def _validate_domain(host: str) -> ValidationResult:
    problem = _domain_problem(host)
    if problem is None:
        return {"host": host}, None

    if "." not in host:
        return {}, _issue(ErrorKind.UNCLASSIFIED, UNCLASSIFIED_MESSAGE)
    if all(ch in _DIGITS or ch == "." for ch in host):
        return {}, _issue(
            ErrorKind.MALFORMED_IPV4,
            f"invalid IPv4 address '{host}', expected 4 octets between 0 and 255",
        )
    return {}, _issue(ErrorKind.MALFORMED_DOMAIN, f"invalid domain name: {problem}")


# ----------------------------------------------------------------------
# Classifier
# ----------------------------------------------------------------------
class _Recognizer(NamedTuple):
    kind: TargetKind
    claims: Callable[[str], bool]
    validate: Callable[[str], ValidationResult]


def _accept_ipv4(host: str) -> ValidationResult:
    return {"host": host}, None


# Order matters: the first recognizer claiming the host decides its grammar.
_HOST_RECOGNIZERS: Tuple[_Recognizer, ...] = (
    _Recognizer(TargetKind.CIDR, lambda host: "/" in host, _validate_cidr),
    _Recognizer(TargetKind.IP_RANGE, _looks_like_ip_range, _validate_ip_range),
    _Recognizer(TargetKind.IPV4, is_valid_ipv4, _accept_ipv4),
)


def _strip_port(target: str) -> Tuple[str, Optional[int]]:
    host, sep, port_text = target.rpartition(":")
    if sep and is_valid_port(port_text):
        return host, int(port_text)
    return target, None


def _classified(target: str, kind: TargetKind, meta: Dict[str, Any], issue: Optional[TargetIssue]) -> TargetClassification:
    return TargetClassification(
        target=target,
        kind=TargetKind.INVALID if issue else kind,
        error=issue,
        **meta,
    )


def classify_target(token: str) -> TargetClassification:
    """
    Decide which grammar a token belongs to and validate it against that grammar.

    IPv6-shaped tokens are decided first since their colons would otherwise be
    read as a port suffix.
    """
    target = token.strip()
    if not target:
        return TargetClassification(target=target, kind=TargetKind.BLANK)
    if target.startswith("#"):
        return TargetClassification(target=target, kind=TargetKind.COMMENT)

    if _looks_like_ipv6(target):
        meta, issue = _validate_ipv6(target)
        return _classified(target, TargetKind.IPV6, meta, issue)

    host, port = _strip_port(target)
    kind, validate = TargetKind.DOMAIN, _validate_domain
    for recognizer in _HOST_RECOGNIZERS:
        if recognizer.claims(host):
            kind, validate = recognizer.kind, recognizer.validate
            break

    meta, issue = validate(host)
    if port is not None:
        meta["port"] = port
    return _classified(target, kind, meta, issue)


def validate_single_target(token: str) -> Optional[str]:
    """Return None when the token is valid (or blank/comment), else a diagnostic message."""
    classification = classify_target(token)
    if classification.error is None:
        return None
    return classification.error.message


def build_validation_error(
    line: int,
    classification: TargetClassification,
    source: Optional[str] = None,
) -> TargetValidationError:
    issue = classification.error
    return TargetValidationError(
        line=line,
        target=classification.target,
        message=issue.message,
        kind=issue.kind,
        suggestion=issue.suggestion,
        source=source,
    )


# ----------------------------------------------------------------------
# Validator Service
# ----------------------------------------------------------------------
class TargetValidator:
    def __init__(self, log_level: str = "INFO"):
        self.logger = get_logger("validator", log_level, "validator.log")

    def classify_entries(self, ingested: List[IngestedTarget]) -> List[TargetClassification]:
        with log_stage(self.logger, "classify_batch"):
            results = [self.classify_entry(e) for e in ingested]

            counts: Dict[str, int] = {}
            for r in results:
                counts[r.kind.value] = counts.get(r.kind.value, 0) + 1
            invalid = counts.get(TargetKind.INVALID.value, 0)

            self.logger.info(
                "Classification complete: %d total (%d valid, %d invalid), breakdown=%s",
                len(results), len(results) - invalid, invalid, counts
            )
            log_metric(self.logger, "targets_total", len(results), stage="validate")
            log_metric(self.logger, "targets_invalid", invalid, stage="validate")
            return results

    def classify_entry(self, ingested: IngestedTarget) -> TargetClassification:
        self.logger.debug(
            "Classifying target: %s (source=%s line=%d)",
            ingested.target, ingested.source, ingested.line_number
        )
        result = classify_target(ingested.target)
        if result.error is not None:
            self.logger.warning(
                "Invalid target detected | source=%s | line=%d | target=%s | kind=%s | message=%s",
                ingested.source, ingested.line_number, result.target,
                result.error.kind.value, result.error.message
            )
        return result

    def validate_entries(
        self,
        ingested: List[IngestedTarget],
        classifications: Optional[List[TargetClassification]] = None,
    ) -> List[TargetValidationError]:
        if classifications is None:
            classifications = self.classify_entries(ingested)
        return [
            build_validation_error(entry.line_number, result, entry.source)
            for entry, result in zip(ingested, classifications)
            if result.error is not None
        ]
