"""
Descriptive metadata of sources and collections.

Sources keep part of their metadata in a free-form ``extras`` object:

    {"identifiers": [...], "filters": [...], "purpose": "...", "copyright": "..."}

Malformed entries in ``extras`` are skipped, never raised.
"""
from __future__ import annotations
from typing import Any, List, Optional, Union

from termserve.domain.terminology.models import Collection, Filter, Identifier, PropertyDeclaration, Source

ACCESSION = "ACSN"

CONCEPT_CLASS = "concept_class"
DATATYPE = "datatype"
INACTIVE = "inactive"

FILTER_CODES = (CONCEPT_CLASS, DATATYPE)
FILTER_OPERATORS = frozenset([
    "=", "is-a", "descendent-of", "is-not-a", "regex", "in", "not-in", "generalizes", "exists",
])

PROPERTIES = [
    PropertyDeclaration(
        code=CONCEPT_CLASS,
        uri="https://api.openconceptlab.org/orgs/OCL/sources/Classes/concepts",
        description="Standard list of concept classes.",
        type="string",
    ),
    PropertyDeclaration(
        code=DATATYPE,
        uri="https://api.openconceptlab.org/orgs/OCL/sources/Datatypes/concepts",
        description="Standard list of concept datatypes.",
        type="string",
    ),
    PropertyDeclaration(
        code=INACTIVE,
        uri="http://hl7.org/fhir/concept-properties",
        description="True if the concept is not considered active.",
        type="Coding",
    ),
]

Resource = Union[Source, Collection]


def _text(value: Any) -> Optional[str]:
    if isinstance(value, (str, int, float)) and str(value).strip():
        return str(value)
    return None


def _identifier_type(value: Any) -> Optional[str]:
    # {"coding": [{"code": "ACSN", ...}]} or a bare code
    if isinstance(value, dict):
        codings = value.get("coding")
        if isinstance(codings, list) and codings and isinstance(codings[0], dict):
            return _text(codings[0].get("code"))
        return None
    return _text(value)


def resource_identifiers(resource: Resource) -> List[Identifier]:
    """The resource uri as an accession identifier, then the identifiers listed in extras."""
    identifiers = []
    if _text(resource.uri):
        identifiers.append(Identifier(value=resource.uri, type=ACCESSION))
    listed = resource.extras.get("identifiers")
    if isinstance(listed, list):
        for item in listed:
            if not isinstance(item, dict) or not _text(item.get("value")):
                continue
            identifiers.append(Identifier(
                value=_text(item.get("value")),
                system=_text(item.get("system")),
                type=_identifier_type(item.get("type")),
            ))
    return identifiers


def resource_purpose(resource: Resource) -> Optional[str]:
    return _text(resource.purpose) or _text(resource.extras.get("purpose"))


def resource_copyright(resource: Resource) -> Optional[str]:
    return _text(resource.copyright) or _text(resource.extras.get("copyright"))


def code_system_filters(source: Source) -> List[Filter]:
    """concept_class / datatype filters from extras; unknown operators are dropped."""
    filters = []
    listed = source.extras.get("filters")
    if not isinstance(listed, list):
        return filters
    for item in listed:
        if not isinstance(item, dict) or item.get("code") not in FILTER_CODES:
            continue
        operator = _text(item.get("operator"))
        filters.append(Filter(
            code=item["code"],
            description=_text(item.get("description")),
            operators=[operator] if operator in FILTER_OPERATORS else [],
            value=_text(item.get("value")),
        ))
    return filters
