# engine.py
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, TextIO

from models.ingestion_model import TargetIngestionService, iter_targets
from models.schemas import (
    IngestedTarget,
    InputSource,
    TargetClassification,
    TargetValidationError,
    ValidatorSettings,
)
from models.validation_model import TargetValidator, build_validation_error, classify_target
from utils.config_loader import load_config
from utils.logger import get_logger, log_metric, log_stage


# ----------------------------------------------------------------------
# Core batch API
# ----------------------------------------------------------------------
def validate_targets(text: str) -> List[TargetValidationError]:
    """
    Validate every target in a multi-line block of text.

    Blank and '#' lines are skipped. Errors keep their 1-based line number and
    come back in the order the targets were encountered; one bad line never
    stops the rest from being checked.
    """
    errors: List[TargetValidationError] = []
    for line_number, target in iter_targets(text):
        classification = classify_target(target)
        if classification.error is not None:
            errors.append(build_validation_error(line_number, classification))
    return errors


def _format_error(error: TargetValidationError) -> str:
    return f"line {error.line} '{error.target}': {error.message}"


def format_validation_errors(errors: Sequence[TargetValidationError]) -> str:
    if not errors:
        return ""
    if len(errors) == 1:
        return _format_error(errors[0])
    messages = "\n".join(_format_error(e) for e in errors)
    return f"found {len(errors)} invalid targets:\n{messages}"


# ----------------------------------------------------------------------
# Structured execution payload
# ----------------------------------------------------------------------
@dataclass
class SourceResult:
    name: str
    ingested: List[IngestedTarget]
    classifications: List[TargetClassification]
    errors: List[TargetValidationError] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class ValidationReport:
    sources: List[SourceResult] = field(default_factory=list)

    @property
    def errors(self) -> List[TargetValidationError]:
        return [e for s in self.sources for e in s.errors]

    @property
    def valid(self) -> bool:
        return all(s.valid for s in self.sources)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources": [
                {
                    "name": s.name,
                    "total_targets": len(s.ingested),
                    "invalid_targets": len(s.errors),
                    "breakdown": _breakdown(s.classifications),
                }
                for s in self.sources
            ],
            "errors": [e.model_dump(mode="json") for e in self.errors],
            "total_errors": len(self.errors),
        }

    def render_text(self) -> str:
        if len(self.sources) == 1:
            return format_validation_errors(self.sources[0].errors)
        blocks = []
        for s in self.sources:
            if s.errors:
                blocks.append(f"[{s.name}]\n{format_validation_errors(s.errors)}")
        return "\n\n".join(blocks)


def _breakdown(classifications: Sequence[TargetClassification]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for c in classifications:
        counts[c.kind.value] = counts.get(c.kind.value, 0) + 1
    return counts


# ----------------------------------------------------------------------
# Config Manager
# ----------------------------------------------------------------------
class EngineConfig:
    @staticmethod
    def _settings_from_mapping(data: Dict[str, Any]) -> ValidatorSettings:
        settings = data.get("settings", {}) or {}
        if not isinstance(settings, dict):
            raise ValueError("'settings' must be a mapping")
        payload = dict(settings)
        if "sources" in data:
            payload["sources"] = data["sources"] or []
        return ValidatorSettings(**payload)

    @staticmethod
    def load_settings(path: str, logger) -> ValidatorSettings:
        cfg = load_config(path, logger)
        settings = EngineConfig._settings_from_mapping(cfg)
        logger.info("Loaded validator settings from %s (%d sources)", path, len(settings.sources))
        return settings


# ----------------------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------------------
class Orchestrator:
    """
    Orchestrates a validation run:
      read -> ingest -> classify/validate -> report
    """

    def __init__(self, sources: Sequence[InputSource], log_level: str = "INFO", stdin: Optional[TextIO] = None):
        self.logger = get_logger("engine.orchestrator", log_level, "engine.log")
        self.sources = list(sources)
        self.ingestor = TargetIngestionService(log_level=log_level)
        self.validator = TargetValidator(log_level=log_level)
        self.stdin = stdin

    def _read_source(self, source: InputSource) -> str:
        if source.type == "inline":
            return source.content or ""
        if not source.location:
            raise ValueError(f"Source '{source.name}' of type 'file' requires a location")
        if source.location == "-":
            return (self.stdin or sys.stdin).read()
        path = Path(source.location)
        self.logger.debug("Reading targets from %s", path)
        return path.read_text(encoding="utf-8")

    def run_source(self, source: InputSource) -> SourceResult:
        with log_stage(self.logger, f"validate[{source.name}]"):
            text = self._read_source(source)
            ingested = self.ingestor.ingest(source.name, text)
            classifications = self.validator.classify_entries(ingested)
            errors = self.validator.validate_entries(ingested, classifications)
            return SourceResult(
                name=source.name,
                ingested=ingested,
                classifications=classifications,
                errors=errors,
            )

    def run(self) -> ValidationReport:
        self.logger.info("Starting validation run over %d sources", len(self.sources))
        report = ValidationReport()
        with log_stage(self.logger, "validation_total"):
            for source in self.sources:
                report.sources.append(self.run_source(source))

        log_metric(self.logger, "validation_errors_total", len(report.errors), stage="report")
        if report.valid:
            self.logger.info("All targets valid")
        else:
            self.logger.warning("Validation finished with %d invalid targets", len(report.errors))
        return report


def write_report(report: ValidationReport, output: str, logger=None) -> Path:
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(report.to_dict(), f, indent=2, ensure_ascii=False)
    if logger is not None:
        logger.info("Report written to %s", output_path)
    return output_path


def run_validation(
    sources: Sequence[InputSource],
    output: Optional[str] = None,
    log_level: str = "INFO",
    stdin: Optional[TextIO] = None,
) -> ValidationReport:
    orchestrator = Orchestrator(sources=sources, log_level=log_level, stdin=stdin)
    report = orchestrator.run()
    if output:
        write_report(report, output, orchestrator.logger)
    return report
