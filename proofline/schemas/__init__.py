"""
Pydantic schemas for API request/response models.
"""
from proofline.schemas.correction import (
    Issue,
    SaplingEdit,
    ErrorsPayload,
    EditsPayload,
    ProviderPayload,
    SpellcheckRequest,
    SpellcheckResponse,
    FeedbackResponse,
)
from proofline.schemas.ignore_rule import (
    IgnoreRuleCreate,
    IgnoreRuleResponse,
    IgnoreRuleCreatedResponse,
    IgnoreRuleListResponse,
    IgnoreRuleDeleteResponse,
)

__all__ = [
    "Issue",
    "SaplingEdit",
    "ErrorsPayload",
    "EditsPayload",
    "ProviderPayload",
    "SpellcheckRequest",
    "SpellcheckResponse",
    "FeedbackResponse",
    "IgnoreRuleCreate",
    "IgnoreRuleResponse",
    "IgnoreRuleCreatedResponse",
    "IgnoreRuleListResponse",
    "IgnoreRuleDeleteResponse",
]
