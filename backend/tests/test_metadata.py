"""Identifiers, filters and descriptive text pulled from resource metadata."""
from factories import collection, source
from termserve.domain.terminology.metadata import (
    code_system_filters,
    resource_copyright,
    resource_identifiers,
    resource_purpose,
)


def test_identifiers_start_with_uri():
    src = source(uri="/orgs/OCL/sources/CL/", extras={"identifiers": [
        {"system": "http://example.org/ids", "value": "cl-1", "type": {"coding": [{"code": "MR"}]}},
        {"value": "cl-2", "type": "SB"},
        {"system": "http://example.org/ids"},
        "cl-3",
    ]})
    assert [(i.system, i.value, i.type) for i in resource_identifiers(src)] == [
        (None, "/orgs/OCL/sources/CL/", "ACSN"),
        ("http://example.org/ids", "cl-1", "MR"),
        (None, "cl-2", "SB"),
    ]


def test_identifiers_without_uri_or_extras():
    assert resource_identifiers(collection()) == []
    assert resource_identifiers(source(extras={"identifiers": "cl-1"})) == []


def test_filters_keep_known_codes_and_operators():
    src = source(extras={"filters": [
        {"code": "concept_class", "description": "Class", "operator": "=", "value": "Misc"},
        {"code": "datatype", "operator": "matches"},
        {"code": "mapping", "operator": "="},
        ["datatype"],
    ]})
    assert [(f.code, f.description, f.operators, f.value) for f in code_system_filters(src)] == [
        ("concept_class", "Class", ["="], "Misc"),
        ("datatype", None, [], None),
    ]
    assert code_system_filters(source()) == []


def test_purpose_and_copyright_prefer_columns():
    col = collection(purpose="Column purpose", extras={"purpose": "Extras purpose", "copyright": "Extras copyright"})
    assert resource_purpose(col) == "Column purpose"
    assert resource_copyright(col) == "Extras copyright"
    blank = collection(purpose="  ", extras={"purpose": ""})
    assert resource_purpose(blank) is None
    assert resource_copyright(blank) is None
