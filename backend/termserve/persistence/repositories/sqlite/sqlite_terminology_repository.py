"""SQLite implementation of TerminologyRepository."""
from __future__ import annotations
import json
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from termserve.core import config
from termserve.core.logging import get_logger
from termserve.domain.terminology.models import (
    Collection,
    Concept,
    ConceptsSource,
    LocalizedText,
    OwnerKind,
    OwnerScope,
    Source,
)
from termserve.persistence.db import get_connection
from termserve.persistence.interfaces.terminology_repository import TerminologyRepository

logger = get_logger(__name__)


def _row_to_owner(row) -> OwnerScope:
    return OwnerScope(OwnerKind(row["owner_type"]), row["owner_id"])


def _metadata(row) -> dict:
    return dict(
        uri=row["uri"],
        publisher=row["publisher"],
        purpose=row["purpose"],
        copyright=row["copyright"],
        contact=json.loads(row["contact"] or "[]"),
        jurisdiction=json.loads(row["jurisdiction"] or "[]"),
        extras=json.loads(row["extras"] or "{}"),
    )


def _row_to_source(row) -> Source:
    return Source(
        id=row["id"],
        mnemonic=row["mnemonic"],
        owner=_row_to_owner(row),
        version=row["version"],
        canonical_url=row["canonical_url"],
        name=row["name"],
        full_name=row["full_name"],
        description=row["description"],
        default_locale=row["default_locale"],
        is_active=bool(row["is_active"]),
        retired=bool(row["retired"]),
        released=bool(row["released"]),
        created_at=row["created_at"],
        **_metadata(row),
    )


def _row_to_collection(row, references: List[str]) -> Collection:
    return Collection(
        id=row["id"],
        mnemonic=row["mnemonic"],
        owner=_row_to_owner(row),
        version=row["version"],
        canonical_url=row["canonical_url"],
        name=row["name"],
        full_name=row["full_name"],
        description=row["description"],
        default_locale=row["default_locale"],
        is_active=bool(row["is_active"]),
        retired=bool(row["retired"]),
        released=bool(row["released"]),
        created_at=row["created_at"],
        references=references,
        **_metadata(row),
    )


def _row_to_text(row) -> LocalizedText:
    return LocalizedText(
        name=row["name"],
        locale=row["locale"],
        locale_preferred=bool(row["locale_preferred"]),
        type=row["type"],
    )


def _placeholders(values: Sequence) -> str:
    return ", ".join("?" for _ in values)


class SqliteTerminologyRepository(TerminologyRepository):

    def __init__(self, database_path: Optional[str] = None, public_access: Optional[Iterable[str]] = None):
        self._database_path = database_path
        self._public_access = tuple(public_access) if public_access is not None else config.PUBLIC_ACCESS

    def _where(
        self,
        owner: Optional[OwnerScope],
        mnemonic: Optional[str],
        url: Optional[str],
        version: Optional[str],
        released: Optional[bool],
    ) -> Tuple[str, list]:
        clauses = [f"public_access IN ({_placeholders(self._public_access)})"]
        params: list = list(self._public_access)
        if owner is not None:
            clauses.append("owner_type = ? AND owner_id = ?")
            params.extend([owner.kind.value, owner.id])
        if mnemonic is not None:
            clauses.append("mnemonic = ?")
            params.append(mnemonic)
        if url is not None:
            clauses.append("canonical_url = ?")
            params.append(url)
        if version is not None:
            clauses.append("version = ?")
            params.append(version)
        if released is not None:
            clauses.append("released = ?")
            params.append(1 if released else 0)
        return " AND ".join(clauses), params

    def find_sources(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
        released: Optional[bool] = None,
    ) -> List[Source]:
        where, params = self._where(owner, mnemonic, url, version, released)
        sql = f"SELECT * FROM sources WHERE {where} ORDER BY id"
        logger.debug("find_sources: %s %s", where, params)
        conn = get_connection(self._database_path)
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [_row_to_source(r) for r in rows]

    def find_collections(
        self,
        owner: Optional[OwnerScope] = None,
        mnemonic: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
        released: Optional[bool] = None,
    ) -> List[Collection]:
        where, params = self._where(owner, mnemonic, url, version, released)
        sql = f"SELECT * FROM collections WHERE {where} ORDER BY id"
        logger.debug("find_collections: %s %s", where, params)
        conn = get_connection(self._database_path)
        try:
            rows = conn.execute(sql, params).fetchall()
            references: Dict[int, List[str]] = defaultdict(list)
            ids = [r["id"] for r in rows]
            if ids:
                ref_rows = conn.execute(
                    f"""
                    SELECT collection_id, expression FROM collections_references
                    WHERE collection_id IN ({_placeholders(ids)})
                    ORDER BY id
                    """,
                    ids,
                ).fetchall()
                for ref in ref_rows:
                    references[ref["collection_id"]].append(ref["expression"])
        finally:
            conn.close()
        return [_row_to_collection(r, references[r["id"]]) for r in rows]

    def find_concept_rows(
        self,
        source_id: int,
        codes: Optional[Iterable[str]] = None,
    ) -> List[ConceptsSource]:
        sql = """
            SELECT c.* FROM concepts_sources cs
            JOIN concepts c ON c.id = cs.concept_id
            WHERE cs.source_id = ?
        """
        params: list = [source_id]
        if codes is not None:
            codes = list(codes)
            if not codes:
                return []
            sql += f" AND c.mnemonic IN ({_placeholders(codes)})"
            params.extend(codes)
        sql += " ORDER BY c.id DESC"
        logger.debug("find_concept_rows: source=%s codes=%s", source_id, codes)

        conn = get_connection(self._database_path)
        try:
            concept_rows = conn.execute(sql, params).fetchall()
            concept_ids = [r["id"] for r in concept_rows]
            names = self._texts(conn, "concepts_names", concept_ids)
            descriptions = self._texts(conn, "concepts_descriptions", concept_ids)
        finally:
            conn.close()

        return [
            ConceptsSource(
                source_id=source_id,
                concept=Concept(
                    id=r["id"],
                    mnemonic=r["mnemonic"],
                    concept_class=r["concept_class"],
                    datatype=r["datatype"],
                    is_active=bool(r["is_active"]),
                    names=names[r["id"]],
                    descriptions=descriptions[r["id"]],
                ),
            )
            for r in concept_rows
        ]

    @staticmethod
    def _texts(conn, link_table: str, concept_ids: List[int]) -> Dict[int, List[LocalizedText]]:
        texts: Dict[int, List[LocalizedText]] = defaultdict(list)
        if not concept_ids:
            return texts
        rows = conn.execute(
            f"""
            SELECT l.concept_id, t.* FROM {link_table} l
            JOIN localized_texts t ON t.id = l.localized_text_id
            WHERE l.concept_id IN ({_placeholders(concept_ids)})
            ORDER BY l.id
            """,
            concept_ids,
        ).fetchall()
        for row in rows:
            texts[row["concept_id"]].append(_row_to_text(row))
        return texts
