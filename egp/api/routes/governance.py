"""Governance lifecycle endpoints.

POST /sense, /propose and /adopt create records and answer 201 with a
Location header. GET /{kind}/{id} reads a record back with its effective
status.

Errors are RFC 7807 problem details:
- 400 invalid input or duration
- 404 unresolvable reference
- 410 expired reference
- 207 record stored but an edge write failed (Location points at the record)
- 503 content store unavailable (Retry-After)
- 504 request deadline exceeded
"""

from __future__ import annotations

import json
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from egp.api.dependencies.governance import get_governance_config, get_lifecycle_service
from egp.api.models.governance import AdoptionResponse, ProposalResponse, SenseResponse
from egp.application.dtos import AdoptInput, ProposeInput, SenseInput
from egp.application.services.cancellation import CancellationToken
from egp.application.services.governance_lifecycle_service import GovernanceLifecycleService
from egp.application.services.input_validation import validate_input
from egp.config.governance_config import GovernanceConfig
from egp.domain.errors import (
    FieldIssue,
    InputValidationError,
    InvalidDurationError,
    OperationCancelledError,
    PartialLinkFailureError,
    ReferenceExpiredError,
    ReferenceNotFoundError,
    StorageUnavailableError,
)
from egp.domain.exceptions import GovernanceError
from egp.domain.models import ObjectType, object_uri
from egp.domain.models.governance_object import PROTOCOL_KINDS
from egp.domain.models.instant import format_instant

router = APIRouter(tags=["governance"])

ERROR_TYPE_BASE = "urn:egp:error"


def _problem(
    request: Request,
    status: int,
    error_type: str,
    title: str,
    detail: str,
    **extensions: Any,
) -> dict[str, Any]:
    return {
        "type": f"{ERROR_TYPE_BASE}:{error_type}",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": str(request.url),
        **extensions,
    }


def _cancellation(config: GovernanceConfig) -> CancellationToken | None:
    if config.request_timeout_seconds > 0:
        return CancellationToken.with_timeout(config.request_timeout_seconds)
    return None


async def _read_input(request: Request, kind: ObjectType) -> Any:
    """Parse and validate the JSON body for one lifecycle operation.

    Raises:
        InputValidationError: If the body is not JSON or fails validation.
    """
    try:
        raw = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InputValidationError(
            kind.value, [FieldIssue("", "request body must be valid JSON")]
        ) from None
    return validate_input(raw, kind)


def _request_metadata(request: Request) -> dict[str, Any]:
    content_length = request.headers.get("content-length")
    return {
        "user_agent": request.headers.get("user-agent"),
        "origin": request.headers.get("origin"),
        "content_length": int(content_length) if content_length else None,
    }


def _raise_problem(request: Request, error: GovernanceError) -> NoReturn:
    """Translate a lifecycle error into an HTTPException."""
    if isinstance(error, InputValidationError):
        raise HTTPException(
            status_code=400,
            detail=_problem(
                request,
                400,
                "invalid-input",
                "Invalid Input",
                str(error),
                errors=[issue.to_dict() for issue in error.issues],
            ),
        ) from None

    if isinstance(error, InvalidDurationError):
        raise HTTPException(
            status_code=400,
            detail=_problem(
                request,
                400,
                "invalid-duration",
                "Invalid Duration",
                str(error),
                field=error.field,
                value=error.value,
            ),
        ) from None

    if isinstance(error, ReferenceNotFoundError):
        raise HTTPException(
            status_code=404,
            detail=_problem(
                request,
                404,
                "reference-not-found",
                "Reference Not Found",
                str(error),
                reference=error.uri,
            ),
        ) from None

    if isinstance(error, ReferenceExpiredError):
        raise HTTPException(
            status_code=410,
            detail=_problem(
                request,
                410,
                "reference-expired",
                "Reference Expired",
                str(error),
                reference=error.uri,
                expired_at=format_instant(error.expired_at),
            ),
        ) from None

    if isinstance(error, StorageUnavailableError):
        raise HTTPException(
            status_code=503,
            detail=_problem(
                request,
                503,
                "storage-unavailable",
                "Storage Unavailable",
                str(error),
                retry_after=error.retry_after_seconds,
            ),
            headers={"Retry-After": str(error.retry_after_seconds)},
        ) from None

    if isinstance(error, OperationCancelledError):
        raise HTTPException(
            status_code=504,
            detail=_problem(
                request,
                504,
                "operation-cancelled",
                "Operation Cancelled",
                str(error),
                stage=error.stage,
                reason=error.reason,
                object_id=error.object_id,
            ),
        ) from None

    raise HTTPException(
        status_code=500,
        detail=_problem(request, 500, "internal", "Internal Server Error", str(error)),
    ) from None


def _partial_link_response(request: Request, error: PartialLinkFailureError) -> JSONResponse:
    """The record exists but an edge is missing: 207 pointing at the record."""
    location = f"/{error.object_kind}/{error.object_id}"
    return JSONResponse(
        status_code=207,
        content=_problem(
            request,
            207,
            "partial-link-failure",
            "Partial Link Failure",
            str(error),
            id=error.object_id,
            relationship_type=error.relationship_type,
            relationship_ids=error.completed_relationships,
        ),
        headers={"Location": location},
    )


@router.post(
    "/sense",
    response_model=SenseResponse,
    status_code=201,
    summary="Report a systemic signal",
)
async def create_sense(
    request: Request,
    response: Response,
    service: GovernanceLifecycleService = Depends(get_lifecycle_service),
    config: GovernanceConfig = Depends(get_governance_config),
) -> SenseResponse:
    """Record a sense and return related signals and suggested actions."""
    try:
        sense_input: SenseInput = await _read_input(request, ObjectType.SENSE)
        result = await service.sense(
            sense_input,
            request_metadata=_request_metadata(request),
            cancellation=_cancellation(config),
        )
    except GovernanceError as e:
        _raise_problem(request, e)

    response.headers["Location"] = result.uri
    return SenseResponse.from_result(result)


@router.post(
    "/propose",
    response_model=ProposalResponse,
    status_code=201,
    summary="Propose a solution to a sense",
    responses={207: {"description": "Proposal stored, responds_to edge missing"}},
)
async def create_proposal(
    request: Request,
    response: Response,
    service: GovernanceLifecycleService = Depends(get_lifecycle_service),
    config: GovernanceConfig = Depends(get_governance_config),
) -> ProposalResponse | JSONResponse:
    """Record a proposal and its responds_to edge."""
    try:
        proposal_input: ProposeInput = await _read_input(request, ObjectType.PROPOSE)
        result = await service.propose(proposal_input, cancellation=_cancellation(config))
    except PartialLinkFailureError as e:
        return _partial_link_response(request, e)
    except GovernanceError as e:
        _raise_problem(request, e)

    response.headers["Location"] = result.uri
    return ProposalResponse.from_result(result)


@router.post(
    "/adopt",
    response_model=AdoptionResponse,
    status_code=201,
    summary="Adopt a proposal for a trial period",
    responses={207: {"description": "Adoption stored, an edge is missing"}},
)
async def create_adoption(
    request: Request,
    response: Response,
    service: GovernanceLifecycleService = Depends(get_lifecycle_service),
    config: GovernanceConfig = Depends(get_governance_config),
) -> AdoptionResponse | JSONResponse:
    """Record an adoption, its edges, review schedule and revocation conditions."""
    try:
        adoption_input: AdoptInput = await _read_input(request, ObjectType.ADOPT)
        result = await service.adopt(adoption_input, cancellation=_cancellation(config))
    except PartialLinkFailureError as e:
        return _partial_link_response(request, e)
    except GovernanceError as e:
        _raise_problem(request, e)

    response.headers["Location"] = result.uri
    return AdoptionResponse.from_result(result)


@router.get(
    "/{kind}/{object_id}",
    summary="Read a sense, proposal or adoption",
)
async def get_object(
    kind: str,
    object_id: str,
    request: Request,
    service: GovernanceLifecycleService = Depends(get_lifecycle_service),
    config: GovernanceConfig = Depends(get_governance_config),
) -> dict[str, Any]:
    """Return the stored record with its effective status."""
    if kind not in {k.value for k in PROTOCOL_KINDS}:
        raise HTTPException(
            status_code=404,
            detail=_problem(
                request, 404, "unknown-kind", "Unknown Object Kind", f"no objects of kind {kind!r}"
            ),
        )
    try:
        resolved = await service.resolve(kind, object_id, cancellation=_cancellation(config))
    except GovernanceError as e:
        _raise_problem(request, e)

    body = resolved.to_dict()
    body["uri"] = object_uri(resolved.kind, resolved.id)
    return body
