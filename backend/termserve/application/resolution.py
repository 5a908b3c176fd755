"""Owner and version resolution for sources and collections."""
from __future__ import annotations
from typing import Callable, List, Optional, TypeVar, Union

from termserve.domain.terminology.models import Collection, OwnerScope, Source
from termserve.domain.terminology.rules import is_valid
from termserve.domain.terminology.versions import ALL_VERSIONS, HEAD
from termserve.persistence.interfaces.terminology_repository import TerminologyRepository

R = TypeVar("R", Source, Collection)
Finder = Callable[..., List[R]]


def _created(row: Union[Source, Collection]) -> str:
    return row.created_at or ""


class VersionResolver:
    """
    Picks source/collection versions in this order:

    1. an explicit version → that version only
    2. ``*`` → every version except HEAD, oldest first
    3. no version → the most recently created released version

    HEAD is a working copy and is only returned when asked for by name.
    An explicit version that does not exist resolves to nothing; it never
    falls back to the latest release.
    """

    def __init__(self, repo: TerminologyRepository):
        self._repo = repo

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------
    def resolve_sources(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> List[Source]:
        return self._resolve(self._repo.find_sources, owner, mnemonic, url, version)

    def resolve_source(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Optional[Source]:
        return self._first(self.resolve_sources(owner, mnemonic, url, version), version)

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------
    def resolve_collections(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> List[Collection]:
        return self._resolve(self._repo.find_collections, owner, mnemonic, url, version)

    def resolve_collection(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Optional[Collection]:
        return self._first(self.resolve_collections(owner, mnemonic, url, version), version)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------
    @staticmethod
    def _first(rows: List[R], version: Optional[str]) -> Optional[R]:
        # "*" is a listing request; a single-row caller gets the newest non-HEAD version
        if version == ALL_VERSIONS:
            return rows[-1] if rows else None
        return rows[0] if rows else None

    @staticmethod
    def _resolve(
        finder: Finder,
        owner: Optional[OwnerScope],
        mnemonic: Optional[str],
        url: Optional[str],
        version: Optional[str],
    ) -> List[R]:
        if not is_valid(mnemonic) and not is_valid(url):
            return []

        if version == ALL_VERSIONS:
            rows = finder(owner=owner, mnemonic=mnemonic, url=url)
            return sorted((r for r in rows if r.version != HEAD), key=_created)

        if is_valid(version):
            rows = finder(owner=owner, mnemonic=mnemonic, url=url, version=version)[:1]
        else:
            rows = finder(owner=owner, mnemonic=mnemonic, url=url, released=True)
            rows = sorted(rows, key=_created, reverse=True)[:1]

        if version != HEAD:
            rows = [r for r in rows if r.version != HEAD]
        return rows
