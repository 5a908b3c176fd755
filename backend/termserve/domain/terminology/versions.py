"""Version constants and the concept history selector."""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from termserve.domain.terminology.models import Concept, ConceptsSource

# Mutable working copy of a source or collection
HEAD = "HEAD"
# Every persisted version except HEAD
ALL_VERSIONS = "*"


def select_current(rows: Iterable[ConceptsSource]) -> Optional[ConceptsSource]:
    """Return the row holding the numerically greatest concept id, or None for no rows."""
    return max(rows, key=lambda row: row.concept.id, default=None)


def current_concepts(rows: Iterable[ConceptsSource]) -> List[Concept]:
    """One current concept per mnemonic, mnemonics kept in first-seen order."""
    latest: Dict[str, Concept] = {}
    for row in rows:
        held = latest.get(row.concept.mnemonic)
        if held is None or row.concept.id > held.id:
            latest[row.concept.mnemonic] = row.concept
    return list(latest.values())


def count_concepts(rows: Iterable[ConceptsSource]) -> int:
    return len({row.concept.mnemonic for row in rows})
