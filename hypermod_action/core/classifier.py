"""Operation classification for deployment entries."""

from typing import Any

from pydantic import ValidationError

from hypermod_action.models.deployment import (
    ActionOperation,
    EntryType,
    Operation,
    TransformOperation,
    UnsupportedOperation,
    parse_entry,
    raw_entry_type,
)


def _first_error(error: ValidationError) -> str:
    detail = error.errors()[0]
    location = ".".join(str(part) for part in detail["loc"])
    if location:
        return f"invalid entry: {location}: {detail['msg']}"
    return f"invalid entry: {detail['msg']}"


def classify_entry(raw: Any) -> Operation:
    """Classify a deployment entry, raw or already validated.

    Pure and total: malformed entries (invalid shape, unknown tag, missing
    payload, or a payload that does not match the tag) become
    ``UnsupportedOperation``.
    """
    try:
        entry = parse_entry(raw)
    except ValidationError as e:
        return UnsupportedOperation(entry_type=raw_entry_type(raw), reason=_first_error(e))

    if entry.type == EntryType.TRANSFORM.value:
        if entry.transform is not None:
            return TransformOperation(transform=entry.transform)
        return UnsupportedOperation(
            entry_type=entry.type, reason="transform payload is missing"
        )

    if entry.type == EntryType.ACTION.value:
        if entry.action is not None:
            return ActionOperation(
                action=entry.action, arguments=tuple(entry.arguments)
            )
        return UnsupportedOperation(
            entry_type=entry.type, reason="action payload is missing"
        )

    return UnsupportedOperation(entry_type=entry.type, reason="unknown entry type")
