"""CodeSystem search, read, $lookup and $validate-code endpoints."""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from termserve.api.common import (
    path_owner,
    query_owner,
    serialize_designation,
    serialize_identifier,
    serialize_page,
    serialize_resource,
    serialize_validation,
    unwrap,
)
from termserve.application.terminology_app_service import TerminologyAppService
from termserve.container import get_terminology_app_service
from termserve.domain.terminology.models import (
    CodeSystemView,
    ConceptDefinition,
    LookupResult,
    OwnerScope,
)
from termserve.domain.terminology.versions import ALL_VERSIONS

router = APIRouter(tags=["CodeSystem"])

SCOPED = "/{owner_kind}/{owner_id}/CodeSystem"


# ------------------------------------------------------------------
# Pydantic schemas
# ------------------------------------------------------------------
class LookupBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: Optional[str] = None
    system: Optional[str] = None
    version: Optional[str] = None
    display_language: Optional[str] = Field(None, alias="displayLanguage")


class ValidateCodeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: Optional[str] = None
    url: Optional[str] = None
    version: Optional[str] = None
    display: Optional[str] = None
    display_language: Optional[str] = Field(None, alias="displayLanguage")


# ------------------------------------------------------------------
# Serializers
# ------------------------------------------------------------------
def _serialize_lookup(r: LookupResult) -> dict:
    return {
        "name": r.name,
        "version": r.version,
        "display": r.display,
        "designation": [serialize_designation(d) for d in r.designations],
    }


def _serialize_concept(c: ConceptDefinition) -> dict:
    return {
        "code": c.code,
        "display": c.display,
        "definition": c.definition,
        "designation": [serialize_designation(d) for d in c.designations],
        "property": {
            "concept_class": c.concept_class,
            "datatype": c.datatype,
            "inactive": c.inactive,
        },
    }


def _serialize_code_system(view: CodeSystemView) -> dict:
    body = serialize_resource(view.source)
    body["status"] = view.status
    body["count"] = view.count
    body["identifier"] = [serialize_identifier(i) for i in view.identifiers]
    body["property"] = [
        {"code": p.code, "uri": p.uri, "description": p.description, "type": p.type} for p in view.properties
    ]
    body["filter"] = [
        {"code": f.code, "description": f.description, "operator": f.operators, "value": f.value}
        for f in view.filters
    ]
    body["concept"] = [_serialize_concept(c) for c in view.concepts]
    return body


# ------------------------------------------------------------------
# Unscoped endpoints
# ------------------------------------------------------------------
@router.get("/CodeSystem")
def search_code_systems(
    url: Optional[str] = None,
    version: Optional[str] = None,
    page: Optional[int] = None,
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.search_code_systems(owner=owner, url=url, version=version, page=page)
    return serialize_page(unwrap(result, "CodeSystem search"), serialize_resource)


@router.get("/CodeSystem/$lookup")
def lookup(
    code: Optional[str] = None,
    system: Optional[str] = None,
    version: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.lookup_code(code, system=system, version=version, display_language=display_language, owner=owner)
    return _serialize_lookup(unwrap(result, "$lookup"))


@router.post("/CodeSystem/$lookup")
def lookup_post(
    body: LookupBody,
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.lookup_code(
        body.code, system=body.system, version=body.version,
        display_language=body.display_language, owner=owner,
    )
    return _serialize_lookup(unwrap(result, "$lookup"))


@router.get("/CodeSystem/$validate-code")
def validate_code(
    code: Optional[str] = None,
    url: Optional[str] = None,
    version: Optional[str] = None,
    display: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.validate_code_system_code(
        code, url=url, version=version, display=display, display_language=display_language, owner=owner,
    )
    return serialize_validation(unwrap(result, "CodeSystem $validate-code"))


@router.post("/CodeSystem/$validate-code")
def validate_code_post(
    body: ValidateCodeBody,
    owner: Optional[OwnerScope] = Depends(query_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.validate_code_system_code(
        body.code, url=body.url, version=body.version, display=body.display,
        display_language=body.display_language, owner=owner,
    )
    return serialize_validation(unwrap(result, "CodeSystem $validate-code"))


# ------------------------------------------------------------------
# Owner-scoped endpoints: /orgs/{org}/CodeSystem, /users/{user}/CodeSystem
# ------------------------------------------------------------------
@router.get(SCOPED)
def search_owner_code_systems(
    url: Optional[str] = None,
    version: Optional[str] = None,
    page: Optional[int] = None,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.search_code_systems(owner=owner, url=url, version=version, page=page)
    return serialize_page(unwrap(result, "CodeSystem search"), serialize_resource)


@router.get(SCOPED + "/$lookup")
def lookup_owner(
    code: Optional[str] = None,
    system: Optional[str] = None,
    version: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.lookup_code(code, system=system, version=version, display_language=display_language, owner=owner)
    return _serialize_lookup(unwrap(result, "$lookup"))


@router.post(SCOPED + "/$lookup")
def lookup_owner_post(
    body: LookupBody,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.lookup_code(
        body.code, system=body.system, version=body.version,
        display_language=body.display_language, owner=owner,
    )
    return _serialize_lookup(unwrap(result, "$lookup"))


@router.get(SCOPED + "/$validate-code")
def validate_code_owner(
    code: Optional[str] = None,
    url: Optional[str] = None,
    version: Optional[str] = None,
    display: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.validate_code_system_code(
        code, url=url, version=version, display=display, display_language=display_language, owner=owner,
    )
    return serialize_validation(unwrap(result, "CodeSystem $validate-code"))


@router.post(SCOPED + "/$validate-code")
def validate_code_owner_post(
    body: ValidateCodeBody,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.validate_code_system_code(
        body.code, url=body.url, version=body.version, display=body.display,
        display_language=body.display_language, owner=owner,
    )
    return serialize_validation(unwrap(result, "CodeSystem $validate-code"))


@router.get(SCOPED + "/{code_system_id}")
def get_code_system(
    code_system_id: str,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    views = unwrap(svc.get_code_systems(owner=owner, source_id=code_system_id), "CodeSystem read")
    return _serialize_code_system(views[0])


@router.get(SCOPED + "/{code_system_id}/version")
def get_code_system_versions(
    code_system_id: str,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    views = unwrap(
        svc.get_code_systems(owner=owner, source_id=code_system_id, version=ALL_VERSIONS), "CodeSystem read",
    )
    return {"total": len(views), "entries": [_serialize_code_system(v) for v in views]}


@router.get(SCOPED + "/{code_system_id}/version/{version}")
def get_code_system_version(
    code_system_id: str,
    version: str,
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    views = unwrap(svc.get_code_systems(owner=owner, source_id=code_system_id, version=version), "CodeSystem read")
    return _serialize_code_system(views[0])


@router.get(SCOPED + "/{code_system_id}/$lookup")
def lookup_by_id(
    code_system_id: str,
    code: Optional[str] = None,
    version: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.lookup_code(
        code, source_id=code_system_id, version=version, display_language=display_language, owner=owner,
    )
    return _serialize_lookup(unwrap(result, "$lookup"))


@router.get(SCOPED + "/{code_system_id}/version/{version}/$lookup")
def lookup_by_id_version(
    code_system_id: str,
    version: str,
    code: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.lookup_code(
        code, source_id=code_system_id, version=version, display_language=display_language, owner=owner,
    )
    return _serialize_lookup(unwrap(result, "$lookup"))


@router.get(SCOPED + "/{code_system_id}/$validate-code")
def validate_code_by_id(
    code_system_id: str,
    code: Optional[str] = None,
    version: Optional[str] = None,
    display: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.validate_code_system_code(
        code, source_id=code_system_id, version=version, display=display,
        display_language=display_language, owner=owner,
    )
    return serialize_validation(unwrap(result, "CodeSystem $validate-code"))


@router.get(SCOPED + "/{code_system_id}/version/{version}/$validate-code")
def validate_code_by_id_version(
    code_system_id: str,
    version: str,
    code: Optional[str] = None,
    display: Optional[str] = None,
    display_language: Optional[str] = Query(None, alias="displayLanguage"),
    owner: OwnerScope = Depends(path_owner),
    svc: TerminologyAppService = Depends(get_terminology_app_service),
):
    result = svc.validate_code_system_code(
        code, source_id=code_system_id, version=version, display=display,
        display_language=display_language, owner=owner,
    )
    return serialize_validation(unwrap(result, "CodeSystem $validate-code"))
