import pytest

from factories import collection, source
from termserve.domain.terminology.models import Coding
from termserve.domain.terminology.rules import (
    publication_status,
    split_system_version,
    validate_page,
    validate_paging,
    validate_value_set_code_params,
)


# ------------------------------------------------------------------
# Status
# ------------------------------------------------------------------
def test_status_retired_wins():
    assert publication_status(source(retired=True, released=True)) == "retired"


def test_status_active_needs_release():
    assert publication_status(source(released=True)) == "active"
    assert publication_status(source(released=False)) == "draft"
    assert publication_status(collection(released=True, is_active=False)) == "draft"


# ------------------------------------------------------------------
# Paging
# ------------------------------------------------------------------
def test_paging_defaults_offset():
    assert validate_paging(None, None).value == (0, None)
    assert validate_paging(5, 0).value == (5, 0)


@pytest.mark.parametrize("offset,count", [(0, -1), (-1, 10)])
def test_paging_rejects_negatives(offset, count):
    assert not validate_paging(offset, count).is_success


def test_page_is_one_based():
    assert validate_page(None).value == 1
    assert not validate_page(0).is_success


# ------------------------------------------------------------------
# system|version
# ------------------------------------------------------------------
def test_split_system_version():
    assert split_system_version("http://x/cs|v1").value == ("http://x/cs", "v1")


@pytest.mark.parametrize("value", ["http://x/cs", "|v1", "http://x/cs|", "http://x/cs|*"])
def test_split_system_version_rejects(value):
    result = split_system_version(value)
    assert not result.is_success
    assert not result.is_not_found


# ------------------------------------------------------------------
# ValueSet $validate-code gate
# ------------------------------------------------------------------
def test_gate_returns_code_or_coding_code():
    assert validate_value_set_code_params("u", "s", "A", None).value == "A"
    assert validate_value_set_code_params("u", "s", None, Coding(code="B")).value == "B"


@pytest.mark.parametrize("url,system,code,coding,fragment", [
    (None, "s", "A", None, "url"),
    ("u", None, "A", None, "system"),
    ("u", "s", "A", Coding(code="A"), "not both"),
    ("u", "s", None, None, "required"),
    ("u", "s", None, Coding(system="s"), "coding"),
])
def test_gate_rejects(url, system, code, coding, fragment):
    result = validate_value_set_code_params(url, system, code, coding)
    assert not result.is_success
    assert fragment in result.error
