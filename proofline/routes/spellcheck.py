"""
API routes for spell/grammar checking, provider feedback and ignore rules.
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from proofline.config import settings
from proofline.database import get_db
from proofline.middleware.jwt import get_current_user
from proofline.schemas.auth import CurrentUser
from proofline.schemas.correction import FeedbackResponse, SpellcheckRequest, SpellcheckResponse
from proofline.schemas.ignore_rule import (
    IgnoreRuleCreate,
    IgnoreRuleCreatedResponse,
    IgnoreRuleDeleteResponse,
    IgnoreRuleListResponse,
    IgnoreRuleResponse,
)
from proofline.services.correction_service import CorrectionService, make_session_id
from proofline.services.database import db_service
from proofline.services.fingerprint import strip_markup
from proofline.utils.logger import get_logger

logger = get_logger("spellcheck_routes")
router = APIRouter()


def get_correction_service(request: Request) -> CorrectionService:
    """
    Dependency to get the correction service from app state.

    Raises:
        HTTPException: If service not available
    """
    service = getattr(request.app.state, "correction_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Correction service not available"
        )
    return service


@router.post(
    "/spellcheck",
    response_model=SpellcheckResponse,
    summary="Check text",
    description="Check editor content for spelling and grammar issues. "
                "Offsets in the result refer to the markup-stripped text."
)
async def spellcheck(
    request: SpellcheckRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[CorrectionService, Depends(get_correction_service)]
):
    """
    Check content for issues.

    Content whose plain text is shorter than the minimum length is answered
    with an empty result without touching the provider.
    """
    plain_text = strip_markup(request.text)

    logger.info(
        "Processing spellcheck request",
        user_id=str(current_user.id),
        content_length=len(request.text),
        plain_length=len(plain_text)
    )

    if len(plain_text) < settings.CORRECTION_MIN_CONTENT_LENGTH:
        logger.info("Content too short for spellcheck", length=len(plain_text))
        return SpellcheckResponse(errors=[])

    issues = await service.check(plain_text, make_session_id(current_user.id, per_request=True))
    return SpellcheckResponse(errors=issues)


@router.post(
    "/spellcheck/accept/{edit_id}",
    response_model=FeedbackResponse,
    summary="Accept a suggestion",
    responses={400: {"description": "Provider did not take the feedback"}}
)
async def accept_spellcheck_edit(
    edit_id: str,
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[CorrectionService, Depends(get_correction_service)]
):
    """Forward accept feedback for a provider edit."""
    success = await service.accept_edit(edit_id, make_session_id(current_user.id))
    if not success:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return FeedbackResponse(success=success)


@router.post(
    "/spellcheck/reject/{edit_id}",
    response_model=FeedbackResponse,
    summary="Reject a suggestion",
    responses={400: {"description": "Provider did not take the feedback"}}
)
async def reject_spellcheck_edit(
    edit_id: str,
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[CorrectionService, Depends(get_correction_service)]
):
    """Forward reject feedback for a provider edit."""
    success = await service.reject_edit(edit_id, make_session_id(current_user.id))
    if not success:
        response.status_code = status.HTTP_400_BAD_REQUEST
    return FeedbackResponse(success=success)


# Ignore Rule Endpoints

@router.get(
    "/spellcheck/ignored",
    response_model=IgnoreRuleListResponse,
    summary="List ignore rules"
)
async def list_ignore_rules(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List the caller's ignore rules."""
    rules = await db_service.get_ignore_rules(db, current_user.id)
    return IgnoreRuleListResponse(
        ignore_rules=[IgnoreRuleResponse.model_validate(rule) for rule in rules],
        total=len(rules)
    )


@router.post(
    "/spellcheck/ignored",
    response_model=IgnoreRuleCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add an ignore rule"
)
async def add_ignore_rule(
    rule_data: IgnoreRuleCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Suppress every future issue matching (token, type) for the caller."""
    rule = await db_service.create_ignore_rule(db, current_user.id, rule_data)
    await db.commit()
    return IgnoreRuleCreatedResponse(ignore_rule=IgnoreRuleResponse.model_validate(rule))


@router.delete(
    "/spellcheck/ignored/{rule_id}",
    response_model=IgnoreRuleDeleteResponse,
    summary="Remove an ignore rule",
    responses={404: {"description": "Ignore rule not found"}}
)
async def remove_ignore_rule(
    rule_id: UUID,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove one of the caller's ignore rules."""
    deleted = await db_service.delete_ignore_rule(db, rule_id, current_user.id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Ignore rule {rule_id} not found"
        )
    await db.commit()
    return IgnoreRuleDeleteResponse(deleted=1)


@router.delete(
    "/spellcheck/ignored",
    response_model=IgnoreRuleDeleteResponse,
    summary="Clear all ignore rules"
)
async def clear_ignore_rules(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove every ignore rule of the caller."""
    deleted = await db_service.clear_ignore_rules(db, current_user.id)
    await db.commit()
    return IgnoreRuleDeleteResponse(deleted=deleted)
