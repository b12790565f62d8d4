#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Ingestion service for the target validation pipeline.

Responsibilities:
- Split raw multi-line text into individual targets with 1-based line numbers
- Skip blank lines and '#' comment lines
- Apply the fixed separator precedence per line (',' then ';' then spaces)
- Emit metrics detailing how many lines were processed/skipped
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Tuple

from models.schemas import IngestedTarget
from utils.logger import get_logger, log_metric


def _normalize_line(value: str) -> str:
    """Trim surrounding whitespace and strip UTF-8 BOM if present."""
    normalized = value.strip()
    if normalized.startswith("\ufeff"):
        normalized = normalized.lstrip("\ufeff").strip()
    return normalized


def _separator_for(line: str) -> Optional[str]:
    if "," in line:
        return ","
    if ";" in line:
        return ";"
    # host:port and IPv6 targets keep their spaces unsplit
    if " " in line and ":" not in line:
        return " "
    return None


def split_targets(line: str) -> List[str]:
    """
    Split one line into targets. The first matching separator wins:
    ',' then ';' then runs of whitespace (only when the line has no ':').
    Otherwise the whole line is a single target.
    """
    separator = _separator_for(line)
    if separator is None:
        pieces = [line]
    elif separator == " ":
        pieces = line.split()
    else:
        pieces = line.split(separator)
    return [p.strip() for p in pieces if p.strip()]


def iter_targets(text: str) -> Iterator[Tuple[int, str]]:
    """Yield (line_number, target) for every target in `text`, skipping blank and comment lines."""
    for line_number, raw_line in enumerate(text.split("\n"), start=1):
        line = _normalize_line(raw_line)
        if not line or line.startswith("#"):
            continue
        for target in split_targets(line):
            yield line_number, target


class TargetIngestionService:
    """
    Service that turns raw operator text into structured `IngestedTarget` models.
    """

    def __init__(self, log_level: str = "INFO") -> None:
        self.logger = get_logger("ingestion.service", log_level, "ingestion.log")

    def ingest(self, source: str, text: str) -> List[IngestedTarget]:
        results: List[IngestedTarget] = []
        total_lines = 0
        skipped_blank = 0
        skipped_comment = 0

        for line_number, raw_line in enumerate(text.split("\n"), start=1):
            total_lines += 1
            line = _normalize_line(raw_line)
            if not line:
                skipped_blank += 1
                continue
            if line.startswith("#"):
                skipped_comment += 1
                continue

            metadata: Dict[str, Any] = {"raw": raw_line, "separator": _separator_for(line)}
            for target in split_targets(line):
                results.append(
                    IngestedTarget(
                        source=source,
                        target=target,
                        line_number=line_number,
                        metadata=dict(metadata),
                    )
                )

        self.logger.info(
            "Ingestion complete | source=%s lines=%s targets=%s skipped_blank=%s skipped_comment=%s",
            source, total_lines, len(results), skipped_blank, skipped_comment
        )
        log_metric(self.logger, "targets_ingested_total", len(results), stage="ingest", source=source)
        log_metric(self.logger, "lines_skipped_comment", skipped_comment, stage="ingest", source=source)
        return results
