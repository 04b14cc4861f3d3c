"""Validate and normalize user input before it reaches the task store.

The store accepts whatever it is given; rejecting blank text and turning a
comma-separated tag string into clean tag values happens here.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from .model import Category, Priority
from .utils import _parse_date


class DraftError(ValueError):
    """Raised when a draft fails validation; ``errors`` holds one line per problem."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))


def parse_tags(raw: Optional[str]) -> list[str]:
    """Split ``"a, b,,c "`` into ``["a", "b", "c"]``."""
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("text must not be blank")
    return value


class TaskDraft(BaseModel):
    text: str
    category: Category = Category.WORK
    due_date: Optional[date] = None
    priority: Priority = Priority.MEDIUM
    tags: list[str] = Field(default_factory=list)

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        return _require_text(value)

    @field_validator("due_date", mode="before")
    @classmethod
    def _coerce_due_date(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        parsed = _parse_date(value)
        if parsed is None:
            raise ValueError(f"not a calendar date: {value!r}")
        return parsed

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return parse_tags(value)
        return [str(tag).strip() for tag in value if str(tag).strip()]


class SubtaskDraft(BaseModel):
    text: str

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        return _require_text(value)


def _error_lines(exc: ValidationError) -> list[str]:
    lines: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        lines.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return lines


def parse_task_draft(**fields: Any) -> TaskDraft:
    """Build a :class:`TaskDraft` from form values; raises :class:`DraftError`."""
    try:
        return TaskDraft(**fields)
    except ValidationError as exc:
        raise DraftError(_error_lines(exc)) from exc


def parse_subtask_draft(text: Any) -> SubtaskDraft:
    try:
        return SubtaskDraft(text=text)
    except ValidationError as exc:
        raise DraftError(_error_lines(exc)) from exc
