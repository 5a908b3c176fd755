"""Abstract read-only repository for sources, collections and concept rows."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from termserve.domain.terminology.models import Collection, ConceptsSource, OwnerScope, Source


class TerminologyRepository(ABC):
    """
    Every finder filters by the arguments that are not None and returns rows
    in no particular order. Ranking is left to the caller.
    """

    @abstractmethod
    def find_sources(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
        released: Optional[bool] = None,
    ) -> List[Source]:
        """Return source versions matching the filters."""
        ...

    @abstractmethod
    def find_collections(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
        released: Optional[bool] = None,
    ) -> List[Collection]:
        """Return collection versions matching the filters, references populated."""
        ...

    @abstractmethod
    def find_concept_rows(
        self,
        source_id: int,
        codes: Optional[Iterable[str]] = None,
    ) -> List[ConceptsSource]:
        """
        Return association rows of a source version: every historical concept
        row, names and descriptions populated. ``codes`` limits the result to
        those mnemonics; None means the whole source.
        """
        ...
