"""Datastar protocol data models.

Event-type tokens and the typed option sets accepted by each command.
Defaults are resolved once, when an options model is built.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_SETTLE_DURATION = 300


class EventType(str, Enum):
    """Datastar event types."""

    MERGE_FRAGMENTS = "datastar-merge-fragments"
    REMOVE_FRAGMENTS = "datastar-remove-fragments"
    MERGE_SIGNALS = "datastar-merge-signals"
    REMOVE_SIGNALS = "datastar-remove-signals"
    EXECUTE_SCRIPT = "datastar-execute-script"


class MergeMode(str, Enum):
    """How the client applies a merged fragment."""

    MORPH = "morph"
    INNER = "inner"
    OUTER = "outer"
    PREPEND = "prepend"
    APPEND = "append"
    BEFORE = "before"
    AFTER = "after"
    UPSERT_ATTRIBUTES = "upsertAttributes"


def wire_value(value: Any) -> str:
    """Render an option value the way it appears after its data-line keyword."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


class SendOptions(BaseModel):
    """Per-send options forwarded to the event encoder."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    event_id: int | None = Field(None, ge=0, alias="eventId")
    retry_duration: int | None = Field(None, ge=0, alias="retryDuration")


class MergeFragmentsOptions(SendOptions):
    """Options for merge_fragments."""

    selector: str | None = None
    merge_mode: MergeMode | str | None = Field(MergeMode.MORPH, alias="mergeMode")
    settle_duration: int | None = Field(DEFAULT_SETTLE_DURATION, ge=0, alias="settleDuration")
    use_view_transition: bool | None = Field(None, alias="useViewTransition")


class RemoveFragmentsOptions(SendOptions):
    """Options for remove_fragments."""

    settle_duration: int | None = Field(None, ge=0, alias="settleDuration")
    use_view_transition: bool | None = Field(None, alias="useViewTransition")


class MergeSignalsOptions(SendOptions):
    """Options for merge_signals."""

    only_if_missing: bool = Field(False, alias="onlyIfMissing")


class ExecuteScriptOptions(SendOptions):
    """Options for execute_script."""

    auto_remove: bool | None = Field(None, alias="autoRemove")
