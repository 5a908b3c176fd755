"""Parameter rules for the terminology operations."""
from __future__ import annotations
from typing import Optional, Tuple, Union

from termserve.domain.common.result import Result
from termserve.domain.terminology.models import Coding, Collection, Source
from termserve.domain.terminology.versions import ALL_VERSIONS

ACTIVE = "active"
RETIRED = "retired"
DRAFT = "draft"

SYSTEM_VERSION_SEPARATOR = "|"


def is_valid(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def publication_status(resource: Union[Source, Collection]) -> str:
    """retired > active (must also be released) > draft."""
    if resource.retired:
        return RETIRED
    if resource.is_active and resource.released:
        return ACTIVE
    return DRAFT


def validate_paging(offset: Optional[int], count: Optional[int]) -> Result[Tuple[int, Optional[int]]]:
    if count is not None and count < 0:
        return Result.bad_request(f"Count must be zero or positive, got {count}.")
    if offset is not None and offset < 0:
        return Result.bad_request(f"Offset must be zero or positive, got {offset}.")
    return Result.ok((offset or 0, count))


def validate_page(page: Optional[int]) -> Result[int]:
    if page is None:
        return Result.ok(1)
    if page < 1:
        return Result.bad_request(f"Page must be 1 or greater, got {page}.")
    return Result.ok(page)


def split_system_version(value: str) -> Result[Tuple[str, str]]:
    """``<canonical url>|<version>`` → (url, version). Both halves are required, ``*`` is not a version here."""
    url, sep, version = value.partition(SYSTEM_VERSION_SEPARATOR)
    if not sep or not is_valid(url) or not is_valid(version) or version.strip() == ALL_VERSIONS:
        return Result.bad_request(
            f"Invalid system-version '{value}'. Expected '<canonical url>|<version>'."
        )
    return Result.ok((url.strip(), version.strip()))


def validate_value_set_code_params(
    url: Optional[str],
    system: Optional[str],
    code: Optional[str],
    coding: Optional[Coding],
) -> Result[str]:
    """
    Gate for ValueSet $validate-code, checked before anything is resolved.
    Returns the code to validate: ``code`` itself or the code of ``coding``.
    """
    if not is_valid(url):
        return Result.bad_request("Parameter 'url' is required.")
    if not is_valid(system):
        return Result.bad_request("Parameter 'system' is required.")
    has_code = is_valid(code)
    has_coding = coding is not None
    if has_code and has_coding:
        return Result.bad_request("Either 'code' or 'coding' may be provided, not both.")
    if not has_code and not has_coding:
        return Result.bad_request("One of 'code' or 'coding' is required.")
    if has_coding and not is_valid(coding.code):
        return Result.bad_request("Parameter 'coding' must carry a code.")
    return Result.ok(code if has_code else coding.code)
