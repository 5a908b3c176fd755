"""Helpers shared by the CodeSystem and ValueSet routers."""
from __future__ import annotations
from typing import Callable, Optional, TypeVar, Union

from fastapi import HTTPException, status

from termserve.core.logging import get_logger
from termserve.domain.common.result import Result
from termserve.domain.terminology.metadata import resource_copyright, resource_purpose
from termserve.domain.terminology.models import (
    Collection,
    Designation,
    ExpansionEntry,
    Identifier,
    OwnerScope,
    SearchPage,
    Source,
    ValidateCodeResult,
)
from termserve.domain.terminology.references import OWNER_SEGMENTS
from termserve.domain.terminology.rules import publication_status

logger = get_logger(__name__)

T = TypeVar("T")


# ------------------------------------------------------------------
# Result → HTTP
# ------------------------------------------------------------------
def unwrap(result: Result[T], operation: str) -> T:
    if result.is_success:
        return result.value
    if result.is_not_found:
        logger.info("%s: not found: %s", operation, result.error)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=result.error)
    logger.info("%s: bad request: %s", operation, result.error)
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)


# ------------------------------------------------------------------
# Owner scope
# ------------------------------------------------------------------
def path_owner(owner_kind: str, owner_id: str) -> OwnerScope:
    """Dependency for ``/{orgs|users}/{owner_id}/...`` routes."""
    kind = OWNER_SEGMENTS.get(owner_kind)
    if kind is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown owner type '{owner_kind}'")
    return OwnerScope(kind, owner_id)


def query_owner(owner: Optional[str] = None) -> Optional[OwnerScope]:
    """``owner=org:<id>`` / ``owner=user:<id>`` on unscoped routes."""
    if not owner:
        return None
    scope = OwnerScope.parse(owner)
    if scope is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid owner '{owner}'. Expected 'org:<id>' or 'user:<id>'.",
        )
    return scope


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def serialize_designation(d: Designation) -> dict:
    return {"language": d.language, "use": d.use, "value": d.value}


def serialize_entry(e: ExpansionEntry) -> dict:
    return {"system": e.system, "version": e.version, "code": e.code, "display": e.display}


def serialize_identifier(i: Identifier) -> dict:
    return {"system": i.system, "value": i.value, "type": i.type}


def serialize_validation(r: ValidateCodeResult) -> dict:
    body = {"result": r.ok}
    if r.message:
        body["message"] = r.message
    return body


def serialize_resource(r: Union[Source, Collection]) -> dict:
    return {
        "id": r.mnemonic,
        "owner": str(r.owner),
        "url": r.canonical_url,
        "version": r.version,
        "name": r.name,
        "title": r.full_name,
        "description": r.description,
        "language": r.default_locale,
        "status": publication_status(r),
        "publisher": r.publisher,
        "contact": r.contact,
        "jurisdiction": r.jurisdiction,
        "purpose": resource_purpose(r),
        "copyright": resource_copyright(r),
    }


def serialize_page(page: SearchPage, item: Callable[[object], dict]) -> dict:
    return {
        "total": page.total,
        "page": page.page,
        "entries": [item(i) for i in page.items],
    }
