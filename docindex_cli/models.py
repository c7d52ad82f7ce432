"""Core data models shared by validation, resolution, and indexing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class Severity(str, Enum):
    WARNING = "warning"
    ERROR = "error"


class FindingKind(str, Enum):
    TOO_MANY_DOCLETS = "too_many_doclets"
    NOT_A_MODULE = "not_a_module"
    MODULE_NAME_MISMATCH = "module_name_mismatch"
    DUPLICATE_MEMBER = "duplicate_member"
    INVALID_SEE = "invalid_see"
    INVALID_REFERENCE = "invalid_reference"
    INVALID_LINK = "invalid_link"
    PARSE_ERROR = "parse_error"
    LIBRARY_MANIFEST = "library_manifest"


@dataclass
class Finding:
    """A recoverable validation or resolution problem."""

    kind: FindingKind
    message: str
    location: str = ""
    severity: Severity = Severity.WARNING
    details: List[str] = field(default_factory=list)

    def render(self) -> str:
        lines = [self.message]
        lines.extend(f"    {line}" for line in self.details)
        return "\n".join(lines)


@dataclass(frozen=True)
class ReferenceCitation:
    """One ``@extends``/``@mixes`` occurrence pointing at a target."""

    kind: str
    name: str
    context: Optional[Dict[str, Any]] = None


@dataclass
class SearchDocument:
    id: str
    title: str
    description: str = ""
    members: str = ""
    memberDescriptions: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "members": self.members,
            "memberDescriptions": self.memberDescriptions,
        }


@dataclass
class LibraryDescription:
    package_name: str
    version: str = ""
    dependencies: Dict[str, str] = field(default_factory=dict)
    description: str = ""
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "packageName": self.package_name,
            "version": self.version,
            "dependencies": self.dependencies,
        }
        payload.update(self.extra)
        payload["description"] = self.description
        return payload
