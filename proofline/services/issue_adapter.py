"""
Normalization adapter between provider payloads and Issue lists.

Accepts both response shapes the pipeline can receive:

* ``{"errors": [...]}`` - issues already in our wire format
* ``{"edits": [...]}`` - Sapling-native edits that still need conversion

Malformed entries are dropped one by one so a single bad item never
discards the rest of the response.
"""
from typing import Any, List, Optional

from pydantic import TypeAdapter, ValidationError

from proofline.schemas.correction import (
    EditsPayload,
    ErrorsPayload,
    Issue,
    ProviderPayload,
    SaplingEdit,
)
from proofline.utils.logger import get_logger

logger = get_logger("services.issue_adapter")

_payload_adapter = TypeAdapter(ProviderPayload)


def parse_payload(payload: Any, text: Optional[str] = None) -> List[Issue]:
    """
    Convert a provider or server response body into validated issues.

    Args:
        payload: Decoded JSON body
        text: Plain text that was checked; used to extract edit tokens

    Returns:
        List of valid issues in response order

    Raises:
        ValueError: If the body matches neither known response shape
    """
    try:
        parsed = _payload_adapter.validate_python(payload)
    except ValidationError as e:
        raise ValueError(f"Unrecognized correction payload: {e.error_count()} validation errors") from e

    if isinstance(parsed, EditsPayload):
        return issues_from_edits(parsed.edits, text)
    return validate_issues(parsed.errors)


def validate_issues(items: List[Any]) -> List[Issue]:
    """
    Keep only items with a non-empty token and a numeric offset.

    Args:
        items: Raw issue dicts

    Returns:
        Validated Issue objects
    """
    valid: List[Issue] = []
    for item in items:
        try:
            valid.append(Issue.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Dropping invalid issue",
                item=repr(item)[:200],
                error_count=e.error_count()
            )
    return valid


def issue_from_edit(edit: SaplingEdit, text: Optional[str] = None) -> Issue:
    """
    Convert one Sapling edit into an Issue.

    The absolute offset is ``sentence_start + start``. The token is taken from
    the checked text at that offset so it matches what the writer sees; the
    sentence slice is used when the text is unavailable or too short.
    """
    offset = edit.sentence_start + edit.start
    length = edit.end - edit.start

    token = ""
    if text is not None and offset + length <= len(text):
        token = text[offset:offset + length]
    if not token:
        token = edit.sentence[edit.start:edit.end]

    return Issue(
        offset=offset,
        token=token,
        type=(edit.general_error_type or edit.error_type or "spelling").lower(),
        suggestions=[edit.replacement],
        edit_id=edit.id,
    )


def issues_from_edits(edits: List[Any], text: Optional[str] = None) -> List[Issue]:
    """Convert a list of raw Sapling edits, dropping the ones that don't validate."""
    issues: List[Issue] = []
    for raw in edits:
        try:
            issues.append(issue_from_edit(SaplingEdit.model_validate(raw), text))
        except ValidationError as e:
            logger.warning(
                "Dropping invalid provider edit",
                item=repr(raw)[:200],
                error_count=e.error_count()
            )
    return issues
