"""Terminology domain models: pure Python, no DB or HTTP dependencies."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class OwnerKind(str, Enum):
    ORG = "org"
    USER = "user"


@dataclass(frozen=True)
class OwnerScope:
    """Organization or user that owns a source or collection."""
    kind: OwnerKind
    id: str

    @classmethod
    def org(cls, org_id: str) -> "OwnerScope":
        return cls(OwnerKind.ORG, org_id)

    @classmethod
    def user(cls, username: str) -> "OwnerScope":
        return cls(OwnerKind.USER, username)

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["OwnerScope"]:
        """Parse ``org:<id>`` / ``user:<id>``. Anything else yields None."""
        if not value:
            return None
        prefix, sep, owner_id = value.strip().partition(":")
        if not sep or not owner_id:
            return None
        try:
            kind = OwnerKind(prefix.lower())
        except ValueError:
            return None
        return cls(kind, owner_id)

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"


@dataclass
class LocalizedText:
    name: str
    locale: Optional[str] = None
    locale_preferred: bool = False
    type: Optional[str] = None  # e.g. "definition", "FULLY_SPECIFIED"


@dataclass
class Concept:
    id: int
    mnemonic: str
    concept_class: Optional[str] = None
    datatype: Optional[str] = None
    is_active: bool = True
    names: List[LocalizedText] = field(default_factory=list)
    descriptions: List[LocalizedText] = field(default_factory=list)


@dataclass
class ConceptsSource:
    """Association row between a source version and one concept history row."""
    source_id: int
    concept: Concept


@dataclass
class Source:
    id: int
    mnemonic: str
    owner: OwnerScope
    version: str
    canonical_url: Optional[str] = None
    name: Optional[str] = None
    full_name: Optional[str] = None
    description: Optional[str] = None
    default_locale: Optional[str] = "en"
    is_active: bool = True
    retired: bool = False
    released: bool = False
    created_at: str = ""
    uri: Optional[str] = None
    publisher: Optional[str] = None
    purpose: Optional[str] = None
    copyright: Optional[str] = None
    contact: List[dict] = field(default_factory=list)
    jurisdiction: List[dict] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Collection:
    id: int
    mnemonic: str
    owner: OwnerScope
    version: str
    canonical_url: Optional[str] = None
    name: Optional[str] = None
    full_name: Optional[str] = None
    description: Optional[str] = None
    default_locale: Optional[str] = "en"
    is_active: bool = True
    retired: bool = False
    released: bool = False
    created_at: str = ""
    uri: Optional[str] = None
    publisher: Optional[str] = None
    purpose: Optional[str] = None
    copyright: Optional[str] = None
    contact: List[dict] = field(default_factory=list)
    jurisdiction: List[dict] = field(default_factory=list)
    extras: Dict[str, Any] = field(default_factory=dict)
    references: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class CollectionReference:
    owner: OwnerScope
    source_mnemonic: str
    version: Optional[str]
    code: str
    concept_id: str


@dataclass(frozen=True)
class Coding:
    system: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


# ------------------------------------------------------------------
# Operation results
# ------------------------------------------------------------------
@dataclass(frozen=True)
class Designation:
    language: Optional[str]
    use: Optional[str]
    value: Optional[str]


@dataclass
class LookupResult:
    name: Optional[str]
    version: str
    display: Optional[str]
    designations: List[Designation] = field(default_factory=list)


@dataclass
class ValidateCodeResult:
    ok: bool
    message: Optional[str] = None


@dataclass(frozen=True)
class ExpansionEntry:
    system: Optional[str]
    version: str
    code: str
    display: Optional[str]


@dataclass
class ExpansionResult:
    total: int
    offset: int
    entries: List[ExpansionEntry] = field(default_factory=list)


# ------------------------------------------------------------------
# Read views
# ------------------------------------------------------------------
@dataclass(frozen=True)
class Identifier:
    value: str
    system: Optional[str] = None
    type: Optional[str] = None  # e.g. "ACSN" for the resource uri


@dataclass
class Filter:
    """A code system filter on concept_class or datatype."""
    code: str
    description: Optional[str] = None
    operators: List[str] = field(default_factory=list)
    value: Optional[str] = None


@dataclass(frozen=True)
class PropertyDeclaration:
    code: str
    uri: str
    description: str
    type: str


@dataclass
class ConceptDefinition:
    code: str
    display: Optional[str]
    definition: Optional[str]
    concept_class: Optional[str]
    datatype: Optional[str]
    inactive: bool
    designations: List[Designation] = field(default_factory=list)


@dataclass
class CodeSystemView:
    source: Source
    status: str
    count: int
    concepts: List[ConceptDefinition] = field(default_factory=list)
    identifiers: List[Identifier] = field(default_factory=list)
    filters: List[Filter] = field(default_factory=list)
    properties: List[PropertyDeclaration] = field(default_factory=list)


@dataclass
class ValueSetInclude:
    system: Optional[str]
    version: str
    concepts: List[ExpansionEntry] = field(default_factory=list)


@dataclass
class ValueSetView:
    collection: Collection
    status: str
    includes: List[ValueSetInclude] = field(default_factory=list)
    identifiers: List[Identifier] = field(default_factory=list)


@dataclass
class SearchPage(Generic[T]):
    total: int
    page: int
    items: List[T] = field(default_factory=list)
