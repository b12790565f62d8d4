from __future__ import annotations

from typing import Dict, List

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware

from models.ingestion_model import TargetIngestionService
from models.validation_model import TargetValidator
from pipeline.engine import format_validation_errors
from utils.logger import get_logger

from .schemas import (
    ClassifiedTargetResponse,
    TargetsRequest,
    TargetsValidationResponse,
    TaskCreateRequest,
    TaskCreateResponse,
)


app = FastAPI(
    title="Scan Target Validation API",
    version="1.0.0",
    description=(
        "Classify and validate free-form scan targets (IPs, CIDR blocks, IP ranges, "
        "IPv6 addresses and domains) before they are handed to a scanning engine."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

api_logger = get_logger("api.app", "INFO", "api.log")
ingestor = TargetIngestionService()
validator = TargetValidator()

API_SOURCE = "api"


@app.get("/health", tags=["system"])
def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/targets/validate", response_model=TargetsValidationResponse, tags=["targets"])
def validate_targets_endpoint(payload: TargetsRequest) -> TargetsValidationResponse:
    entries = ingestor.ingest(API_SOURCE, payload.targets)
    errors = validator.validate_entries(entries)
    api_logger.info("Validated %d targets via API (%d invalid)", len(entries), len(errors))
    return TargetsValidationResponse(
        valid=not errors,
        errors=errors,
        message=format_validation_errors(errors),
    )


@app.post("/targets/classify", response_model=List[ClassifiedTargetResponse], tags=["targets"])
def classify_targets_endpoint(payload: TargetsRequest) -> List[ClassifiedTargetResponse]:
    entries = ingestor.ingest(API_SOURCE, payload.targets)
    results = validator.classify_entries(entries)
    response: List[ClassifiedTargetResponse] = []
    for entry, result in zip(entries, results):
        response.append(
            ClassifiedTargetResponse(
                line=entry.line_number,
                target=result.target,
                kind=result.kind,
                host=result.host,
                port=result.port,
                zone=result.zone,
                prefix_length=result.prefix_length,
                error_kind=result.error.kind if result.error else None,
                message=result.error.message if result.error else None,
                suggestion=result.error.suggestion if result.error else None,
            )
        )
    return response


@app.post(
    "/tasks",
    response_model=TaskCreateResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["tasks"],
)
def create_task_endpoint(payload: TaskCreateRequest) -> TaskCreateResponse:
    entries = ingestor.ingest(API_SOURCE, payload.targets)
    if not entries:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No targets supplied.")

    errors = validator.validate_entries(entries)
    if errors:
        api_logger.warning("Rejected task '%s': %d invalid targets", payload.name, len(errors))
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=format_validation_errors(errors),
        )

    api_logger.info("Accepted task '%s' with %d targets", payload.name, len(entries))
    return TaskCreateResponse(
        name=payload.name,
        targets=[e.target for e in entries],
        total_targets=len(entries),
    )
