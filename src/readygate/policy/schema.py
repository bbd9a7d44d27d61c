"""Pydantic schema for policy documents.

The schema mirrors the on-disk camelCase keys. Pydantic collects every field
error of a document in one pass, which is what lets the loader report a broken
policy completely instead of stopping at the first problem.
"""

from __future__ import annotations

import re
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


def check_glob(value: str) -> str:
    """Reject glob entries that could escape the repository root."""
    if "\x00" in value:
        raise ValueError("must not contain NUL bytes")
    normalized = value.replace("\\", "/")
    if normalized.startswith("/") or re.match(r"^[A-Za-z]:/", normalized):
        raise ValueError(f"must be relative to the repository root: {value!r}")
    if ".." in normalized.split("/"):
        raise ValueError(f"must not contain '..' segments: {value!r}")
    return normalized


def _check_globs(values: list[str]) -> list[str]:
    checked: list[str] = []
    problems: list[str] = []
    for value in values:
        try:
            checked.append(check_glob(value))
        except ValueError as e:
            problems.append(str(e))
    if problems:
        raise ValueError("; ".join(problems))
    return checked


class PatternRuleDocument(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: NonEmptyStr
    pattern: NonEmptyStr
    message: NonEmptyStr
    severity: Literal["error", "warning"]

    @field_validator("pattern")
    @classmethod
    def _pattern_compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"regex does not compile: {e}") from e
        return value


class PolicyDocument(BaseModel):
    """Top-level policy document."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    version: NonEmptyStr
    name: NonEmptyStr | None = None
    scan_paths: list[NonEmptyStr] = Field(default_factory=list, alias="scanPaths")
    exclusions: list[NonEmptyStr] = Field(default_factory=list)
    forbidden_patterns: list[PatternRuleDocument] = Field(
        default_factory=list, alias="forbiddenPatterns"
    )
    allowed_exceptions: dict[NonEmptyStr, list[NonEmptyStr]] = Field(
        default_factory=dict, alias="allowedExceptions"
    )
    inherit: list[NonEmptyStr] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_string(cls, value: object) -> object:
        # YAML reads `version: 1.0` as a float
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("inherit", mode="before")
    @classmethod
    def _inherit_as_list(cls, value: object) -> object:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("scan_paths", "exclusions")
    @classmethod
    def _globs_are_safe(cls, value: list[str]) -> list[str]:
        return _check_globs(value)

    @field_validator("allowed_exceptions")
    @classmethod
    def _exception_globs_are_safe(
        cls, value: dict[str, list[str]]
    ) -> dict[str, list[str]]:
        return {key: _check_globs(globs) for key, globs in value.items()}
