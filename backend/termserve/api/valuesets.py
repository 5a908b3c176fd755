"""ValueSet search, read, $validate-code and $expand endpoints."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from termserve.api.common import (
    path_owner,
    query_owner,
    serialize_entry,
    serialize_identifier,
    serialize_page,
    serialize_resource,
    serialize_validation,
    unwrap,
)
from termserve.application.terminology_app_service import TerminologyAppService
from termserve.container import get_terminology_app_service
from termserve.domain.terminology.models import (
    Coding,
    ExpansionResult,
    OwnerScope,
    ValueSetView,
)
from termserve.domain.terminology.versions import ALL_VERSIONS

router = APIRouter(tags=["ValueSet"])

SCOPED = "/{owner_kind}/{owner_id}/ValueSet"


# ------------------------------------------------------------------
# Pydantic schemas
# ------------------------------------------------------------------
class CodingBody(BaseModel):
    system: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


class ValidateCodeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    value_set_version: Optional[str] = Field(None, alias="valueSetVersion")
    code: Optional[str] = None
    system: Optional[str] = None
    system_version: Optional[str] = Field(None, alias="systemVersion")
    display: Optional[str] = None
    display_language: Optional[str] = Field(None, alias="displayLanguage")
    coding: Optional[CodingBody] = None


class ExpandBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    value_set_version: Optional[str] = Field(None, alias="valueSetVersion")
    offset: Optional[int] = None
    count: Optional[int] = None
    system_version: Optional[str] = Field(None, alias="system-version")


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def _serialize_expansion(r: ExpansionResult) -> dict:
    return {
        "total": r.total,
        "offset": r.offset,
        "contains": [serialize_entry(e) for e in r.entries],
    }


def _serialize_value_set(view: ValueSetView) -> dict:
    body = serialize_resource(view.collection)
    body["status"] = view.status
    body["identifier"] = [serialize_identifier(i) for i in view.identifiers]
    body["compose"] = {
        "include": [
            {
                "system": inc.system,
                "version": inc.version,
                "concept": [{"code": e.code, "display": e.display} for e in inc.concepts],
            }
            for inc in view.includes
        ]
    }
    return body


def _coding(body: Optional[CodingBody]) -> Optional[Coding]:
    if body is None:
        return None
    return Coding(system=body.system, code=body.code, display=body.display)


def _validate(svc: TerminologyAppService, body: ValidateCodeBody, owner: Optional[OwnerScope]) -> dict:
    result = svc.validate_value_set_code(
        body.url, body.system, code=body.code, coding=_coding(body.coding),
        version=body.value_set_version, system_version=body.system_version,
        display=body.display, display_language=body.display_language, owner=owner,
    )
    return serialize_validation(unwrap(result, "ValueSet $validate-code"))


# ------------------------------------------------------------------
# Unscoped endpoints
# ------------------------------------------------------------------
@router.get("/ValueSet")
def search_value_sets(
    url: Optional[str] = None,
    version: Optional[str] = None,
    page: Optional[int] = None,
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.search_value_sets(owner=owner, url=url, version=version, page=page)
    return serialize_page(unwrap(result, "ValueSet search"), serialize_resource)


@router.get("/ValueSet/$validate-code")
def validate_code(
    url: Optional[str] = None,
    value_set_version: Optional[str] = Query(None, alias="valueSetVersion"),
    code: Optional[str] = None,
    system: Optional[str] = None,
    system_version: Optional[str] = Query(None, alias="systemVersion"),
    display: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    body = ValidateCodeBody(
        url=url, value_set_version=value_set_version, code=code, system=system,
        system_version=system_version, display=display, display_language=display_language,
    )
    return _validate(svc, body, owner)


@router.post("/ValueSet/$validate-code")
def validate_code_post(
    body: ValidateCodeBody,
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    return _validate(svc, body, owner)


@router.get("/ValueSet/$expand")
def expand(
    url: Optional[str] = None,
    value_set_version: Optional[str] = Query(None, alias="valueSetVersion"),
    offset: Optional[int] = None,
    count: Optional[int] = None,
    system_version: Optional[str] = Query(None, alias="system-version"),
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.expand_value_set(
        url=url, version=value_set_version, system_version=system_version,
        offset=offset, count=count, owner=owner,
    )
    return _serialize_expansion(unwrap(result, "$expand"))


@router.post("/ValueSet/$expand")
def expand_post(
    body: ExpandBody,
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.expand_value_set(
        url=body.url, version=body.value_set_version, system_version=body.system_version,
        offset=body.offset, count=body.count, owner=owner,
    )
    return _serialize_expansion(unwrap(result, "$expand"))


# ------------------------------------------------------------------
# Owner-scoped endpoints: /orgs/{org}/ValueSet, /users/{user}/ValueSet
# ------------------------------------------------------------------
@router.get(SCOPED)
def search_owner_value_sets(
    url: Optional[str] = None,
    version: Optional[str] = None,
    page: Optional[int] = None,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.search_value_sets(owner=owner, url=url, version=version, page=page)
    return serialize_page(unwrap(result, "ValueSet search"), serialize_resource)


@router.get(SCOPED + "/$validate-code")
def validate_code_owner(
    url: Optional[str] = None,
    value_set_version: Optional[str] = Query(None, alias="valueSetVersion"),
    code: Optional[str] = None,
    system: Optional[str] = None,
    system_version: Optional[str] = Query(None, alias="systemVersion"),
    display: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    body = ValidateCodeBody(
        url=url, value_set_version=value_set_version, code=code, system=system,
        system_version=system_version, display=display, display_language=display_language,
    )
    return _validate(svc, body, owner)


@router.post(SCOPED + "/$validate-code")
def validate_code_owner_post(
    body: ValidateCodeBody,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    return _validate(svc, body, owner)


@router.get(SCOPED + "/$expand")
def expand_owner(
    url: Optional[str] = None,
    value_set_version: Optional[str] = Query(None, alias="valueSetVersion"),
    offset: Optional[int] = None,
    count: Optional[int] = None,
    system_version: Optional[str] = Query(None, alias="system-version"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.expand_value_set(
        url=url, version=value_set_version, system_version=system_version,
        offset=offset, count=count, owner=owner,
    )
    return _serialize_expansion(unwrap(result, "$expand"))


@router.get(SCOPED + "/{value_set_id}")
def get_value_set(
    value_set_id: str,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    views = unwrap(svc.get_value_sets(owner=owner, value_set_id=value_set_id), "ValueSet read")
    return _serialize_value_set(views[0])


@router.get(SCOPED + "/{value_set_id}/version")
def get_value_set_versions(
    value_set_id: str,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    views = unwrap(
        svc.get_value_sets(owner=owner, value_set_id=value_set_id, version=ALL_VERSIONS), "ValueSet read",
    )
    return {"total": len(views), "entries": [_serialize_value_set(v) for v in views]}


@router.get(SCOPED + "/{value_set_id}/version/{version}")
def get_value_set_version(
    value_set_id: str,
    version: str,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    views = unwrap(svc.get_value_sets(owner=owner, value_set_id=value_set_id, version=version), "ValueSet read")
    return _serialize_value_set(views[0])


@router.get(SCOPED + "/{value_set_id}/$expand")
def expand_by_id(
    value_set_id: str,
    offset: Optional[int] = None,
    count: Optional[int] = None,
    system_version: Optional[str] = Query(None, alias="system-version"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.expand_value_set(
        value_set_id=value_set_id, system_version=system_version, offset=offset, count=count, owner=owner,
    )
    return _serialize_expansion(unwrap(result, "$expand"))


@router.get(SCOPED + "/{value_set_id}/version/{version}/$expand")
def expand_by_id_version(
    value_set_id: str,
    version: str,
    offset: Optional[int] = None,
    count: Optional[int] = None,
    system_version: Optional[str] = Query(None, alias="system-version"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.expand_value_set(
        value_set_id=value_set_id, version=version, system_version=system_version,
        offset=offset, count=count, owner=owner,
    )
    return _serialize_expansion(unwrap(result, "$expand"))
