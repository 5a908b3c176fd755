"""
Collection reference expressions.

A reference names one member concept of a collection:

    /orgs/<org>/sources/<source>/[<version>/]concepts/<code>/<concept-id>/
    /users/<user>/sources/<source>/[<version>/]concepts/<code>/<concept-id>/

Parsing never raises. Expressions that do not fit the grammar come back as
None so that one bad reference cannot break resolution of the others.
"""
from __future__ import annotations
from typing import Iterable, List, Optional

from termserve.domain.terminology.models import CollectionReference, OwnerKind, OwnerScope

OWNER_SEGMENTS = {
    "orgs": OwnerKind.ORG,
    "users": OwnerKind.USER,
}
SOURCES = "sources"
CONCEPTS = "concepts"

_UNVERSIONED_LENGTH = 7
_VERSIONED_LENGTH = 8


def parse_reference(expression: Optional[str]) -> Optional[CollectionReference]:
    if not expression:
        return None
    segments = expression.strip().strip("/").split("/")

    if len(segments) == _UNVERSIONED_LENGTH:
        owner_kind, owner_id, sources, mnemonic, concepts, code, concept_id = segments
        version = None
    elif len(segments) == _VERSIONED_LENGTH:
        owner_kind, owner_id, sources, mnemonic, version, concepts, code, concept_id = segments
        if not version:
            return None
    else:
        return None

    kind = OWNER_SEGMENTS.get(owner_kind)
    if kind is None or sources != SOURCES or concepts != CONCEPTS:
        return None
    if not (owner_id and mnemonic and code and concept_id):
        return None

    return CollectionReference(
        owner=OwnerScope(kind, owner_id),
        source_mnemonic=mnemonic,
        version=version,
        code=code,
        concept_id=concept_id,
    )


def parse_references(expressions: Iterable[Optional[str]]) -> List[CollectionReference]:
    """Parse in order, dropping malformed expressions."""
    parsed = (parse_reference(e) for e in expressions)
    return [ref for ref in parsed if ref is not None]
