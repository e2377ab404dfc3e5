"""
Declarative request validation.

A rule set is an ordered list of ``FieldRules``; each field carries its own
ordered rules and each rule declares the stable ``ErrorCode`` it reports.
Running a rule set over a JSON body never raises on bad input: it returns
every failure as a ``FieldError`` so the client sees all problems at once.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Sequence

from core.errors import ValidationFailed
from utils.schemas import ErrorCode, FieldError, TaskStatus

logger = logging.getLogger(__name__)


class Rule:
    """A single check on a present, non-null value."""

    code: ErrorCode = ErrorCode.INVALID_VALUE
    # Stop evaluating the field's remaining rules when this one fails.
    bail: bool = False

    def __init__(self, message: str) -> None:
        self.message = message

    def passes(self, value: Any) -> bool:
        raise NotImplementedError


class IsString(Rule):
    code = ErrorCode.INVALID_VALUE
    bail = True

    def passes(self, value: Any) -> bool:
        return isinstance(value, str)


class Length(Rule):
    code = ErrorCode.INVALID_LENGTH

    def __init__(self, message: str, min_length: int = 0, max_length: int | None = None) -> None:
        super().__init__(message)
        self.min_length = min_length
        self.max_length = max_length

    def passes(self, value: Any) -> bool:
        if len(value) < self.min_length:
            return False
        return self.max_length is None or len(value) <= self.max_length


class Matches(Rule):
    code = ErrorCode.INVALID_FORMAT

    def __init__(self, message: str, pattern: str) -> None:
        super().__init__(message)
        self.pattern = re.compile(pattern)

    def passes(self, value: Any) -> bool:
        return self.pattern.fullmatch(value) is not None


class OneOf(Rule):
    code = ErrorCode.INVALID_VALUE

    def __init__(self, message: str, choices: Iterable[str]) -> None:
        super().__init__(message)
        self.choices = frozenset(choices)

    def passes(self, value: Any) -> bool:
        return isinstance(value, str) and value in self.choices


@dataclass(frozen=True)
class FieldRules:
    """
    Rules for one body field.

    A required field that is absent, ``null`` or ``""`` yields a single
    ``REQUIRED`` error.  An optional field that is absent or ``null`` is
    skipped entirely.
    """

    name: str
    rules: Sequence[Rule] = field(default_factory=tuple)
    required: bool = True
    required_message: str = ""


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


def check_field(field_rules: FieldRules, payload: Dict[str, Any]) -> List[FieldError]:
    value = payload.get(field_rules.name)
    if field_rules.required and _is_blank(value):
        return [
            FieldError(
                field=field_rules.name,
                code=ErrorCode.REQUIRED,
                message=field_rules.required_message or f"{field_rules.name} is required",
            )
        ]
    if value is None:
        return []

    errors: List[FieldError] = []
    for rule in field_rules.rules:
        if rule.passes(value):
            continue
        errors.append(FieldError(field=field_rules.name, code=rule.code, message=rule.message))
        if rule.bail:
            break
    return errors


def validate(payload: Dict[str, Any], rule_set: Sequence[FieldRules]) -> List[FieldError]:
    """Return every failure in ``payload``, ordered by field then rule."""
    errors: List[FieldError] = []
    for field_rules in rule_set:
        errors.extend(check_field(field_rules, payload))
    return errors


def ensure_valid(payload: Dict[str, Any], rule_set: Sequence[FieldRules]) -> None:
    """Raise ``ValidationFailed`` carrying the full report if anything fails."""
    errors = validate(payload, rule_set)
    if errors:
        logger.debug(
            "Validation failed: %s",
            ", ".join(f"{e.field}={e.code.value}" for e in errors),
        )
        raise ValidationFailed(errors)


# ── Rule sets ──────────────────────────────────────────────────────────


LOGIN_PATTERN = r"[A-Za-z0-9_]+"

REGISTER_RULES: List[FieldRules] = [
    FieldRules(
        "login",
        rules=(
            IsString("Login must be a string"),
            Length("Login must be between 3 and 50 characters", min_length=3, max_length=50),
            Matches("Login may only contain letters, digits and underscores", LOGIN_PATTERN),
        ),
        required_message="Login is required",
    ),
    FieldRules(
        "password",
        rules=(
            IsString("Password must be a string"),
            Length("Password must be at least 6 characters", min_length=6),
        ),
        required_message="Password is required",
    ),
]

LOGIN_RULES: List[FieldRules] = [
    FieldRules(
        "login",
        rules=(IsString("Login must be a string"),),
        required_message="Login is required",
    ),
    FieldRules(
        "password",
        rules=(IsString("Password must be a string"),),
        required_message="Password is required",
    ),
]

TASK_RULES: List[FieldRules] = [
    FieldRules(
        "title",
        rules=(
            IsString("Title must be a string"),
            Length("Title may be at most 255 characters", min_length=1, max_length=255),
        ),
        required_message="Title is required",
    ),
    FieldRules(
        "description",
        rules=(
            IsString("Description must be a string"),
            Length("Description may be at most 1000 characters", max_length=1000),
        ),
        required=False,
    ),
    FieldRules(
        "status",
        rules=(
            OneOf(
                "Status must be one of PENDING, IN_PROGRESS, COMPLETED",
                [s.value for s in TaskStatus],
            ),
        ),
        required=False,
    ),
]
