"""Display resolution for localized concept names."""
from __future__ import annotations
from typing import Iterable, List, Optional

from termserve.domain.terminology.models import Designation, LocalizedText

DEFINITION = "definition"


def _usable(names: Iterable[Optional[LocalizedText]]) -> List[LocalizedText]:
    return [n for n in names if n is not None]


def preferred_first(names: Iterable[Optional[LocalizedText]]) -> List[LocalizedText]:
    """Locale-preferred names first, then the rest. Both buckets keep their original order."""
    names = _usable(names)
    return [n for n in names if n.locale_preferred] + [n for n in names if not n.locale_preferred]


def _first_in_locale(names: List[LocalizedText], locale: Optional[str]) -> Optional[str]:
    if not locale:
        return None
    for name in names:
        if name.locale == locale:
            return name.name
    return None


def resolve_display(
    names: Iterable[Optional[LocalizedText]],
    requested_language: Optional[str],
    default_locale: Optional[str],
) -> Optional[str]:
    """
    Pick the display text for a concept.

    Requested language wins over the default locale, which wins over any
    name at all. Within each step locale-preferred names come first.
    """
    ordered = preferred_first(names)
    display = _first_in_locale(ordered, requested_language)
    if display is not None:
        return display
    display = _first_in_locale(ordered, default_locale)
    if display is not None:
        return display
    return ordered[0].name if ordered else None


def resolve_designations(
    names: Iterable[Optional[LocalizedText]],
    requested_language: Optional[str],
) -> List[Designation]:
    return [
        Designation(language=n.locale or None, use=n.type or None, value=n.name or None)
        for n in _usable(names)
        if not requested_language or n.locale == requested_language
    ]


def match_display(
    names: Iterable[Optional[LocalizedText]],
    display: str,
    requested_language: Optional[str],
) -> bool:
    return any(
        n.name == display and (not requested_language or n.locale == requested_language)
        for n in _usable(names)
    )


def resolve_definition(
    descriptions: Iterable[Optional[LocalizedText]],
    default_locale: Optional[str],
) -> Optional[str]:
    definitions = [
        d for d in _usable(descriptions)
        if d.type and d.type.lower() == DEFINITION
    ]
    return resolve_display(definitions, None, default_locale)
