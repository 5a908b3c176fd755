"""Application service: validate parameters → resolve versions → read rows → build results."""
from __future__ import annotations
from typing import Callable, Dict, List, Optional, Tuple, Union

from termserve.application.resolution import VersionResolver
from termserve.core import config
from termserve.domain.common.result import Result
from termserve.domain.terminology.display import (
    match_display,
    resolve_definition,
    resolve_designations,
    resolve_display,
)
from termserve.domain.terminology.metadata import PROPERTIES, code_system_filters, resource_identifiers
from termserve.domain.terminology.models import (
    CodeSystemView,
    Coding,
    Collection,
    CollectionReference,
    Concept,
    ConceptDefinition,
    ExpansionEntry,
    ExpansionResult,
    LookupResult,
    OwnerScope,
    SearchPage,
    Source,
    ValidateCodeResult,
    ValueSetInclude,
    ValueSetView,
)
from termserve.domain.terminology.references import parse_references
from termserve.domain.terminology.rules import (
    is_valid,
    publication_status,
    split_system_version,
    validate_page,
    validate_paging,
    validate_value_set_code_params,
)
from termserve.domain.terminology.versions import ALL_VERSIONS, HEAD, count_concepts, current_concepts, select_current
from termserve.persistence.interfaces.terminology_repository import TerminologyRepository

INVALID_DISPLAY = "Invalid display."

Resolved = Tuple[Source, Concept]
GroupKey = Tuple[str, str]


def _clean(value: Optional[str]) -> Optional[str]:
    return value.strip() if is_valid(value) else None


def _describe(kind: str, identifier: Optional[str], version: Optional[str]) -> str:
    if version:
        return f"{kind} '{identifier}' version '{version}' not found."
    return f"{kind} '{identifier}' not found."


class TerminologyAppService:
    def __init__(
        self,
        repo: TerminologyRepository,
        expand_default_count: Optional[int] = None,
        search_page_size: Optional[int] = None,
    ):
        self._repo = repo
        self._resolver = VersionResolver(repo)
        self._expand_default_count = (
            config.EXPAND_DEFAULT_COUNT if expand_default_count is None else expand_default_count
        )
        self._search_page_size = config.SEARCH_PAGE_SIZE if search_page_size is None else search_page_size

    # ------------------------------------------------------------------
    # LOOKUP
    # ------------------------------------------------------------------
    def lookup(self, source: Source, code: str, display_language: Optional[str] = None) -> Result[LookupResult]:
        concept = self._current_concept(source, code)
        if concept is None:
            return Result.not_found(
                f"Concept '{code}' not found in code system '{source.mnemonic}' version '{source.version}'."
            )
        display_language = _clean(display_language)
        return Result.ok(LookupResult(
            name=source.name,
            version=source.version,
            display=resolve_display(concept.names, display_language, source.default_locale),
            designations=resolve_designations(concept.names, display_language),
        ))

    def lookup_code(
        self,
        code: Optional[str],
        system: Optional[str] = None,
        source_id: Optional[str] = None,
        version: Optional[str] = None,
        display_language: Optional[str] = None,
        owner: Optional[OwnerScope] = None,
    ) -> Result[LookupResult]:
        if not is_valid(code):
            return Result.bad_request("Parameter 'code' is required.")
        system, source_id, version = _clean(system), _clean(source_id), _clean(version)
        if system is None and source_id is None:
            return Result.bad_request("Either 'system' or a code system id is required.")

        source = self._resolver.resolve_source(owner, mnemonic=source_id, url=system, version=version)
        if source is None:
            return Result.not_found(_describe("Code system", system or source_id, version))
        return self.lookup(source, code, display_language)

    # ------------------------------------------------------------------
    # VALIDATE CODE
    # ------------------------------------------------------------------
    def validate_code(
        self,
        source: Source,
        code: Optional[str],
        display: Optional[str] = None,
        display_language: Optional[str] = None,
    ) -> Result[ValidateCodeResult]:
        if not is_valid(code):
            return Result.bad_request("Parameter 'code' is required.")
        concept = self._current_concept(source, code)
        if concept is None:
            return Result.ok(ValidateCodeResult(ok=False))
        if is_valid(display):
            if match_display(concept.names, display, _clean(display_language)):
                return Result.ok(ValidateCodeResult(ok=True))
            return Result.ok(ValidateCodeResult(ok=False, message=INVALID_DISPLAY))
        return Result.ok(ValidateCodeResult(ok=True))

    def validate_code_system_code(
        self,
        code: Optional[str],
        url: Optional[str] = None,
        source_id: Optional[str] = None,
        version: Optional[str] = None,
        display: Optional[str] = None,
        display_language: Optional[str] = None,
        owner: Optional[OwnerScope] = None,
    ) -> Result[ValidateCodeResult]:
        if not is_valid(code):
            return Result.bad_request("Parameter 'code' is required.")
        url, source_id, version = _clean(url), _clean(source_id), _clean(version)
        if url is None and source_id is None:
            return Result.bad_request("Either 'url' or a code system id is required.")

        source = self._resolver.resolve_source(owner, mnemonic=source_id, url=url, version=version)
        if source is None:
            return Result.not_found(_describe("Code system", url or source_id, version))
        return self.validate_code(source, code, display, display_language)

    def validate_value_set_code(
        self,
        url: Optional[str],
        system: Optional[str],
        code: Optional[str] = None,
        coding: Optional[Coding] = None,
        version: Optional[str] = None,
        system_version: Optional[str] = None,
        display: Optional[str] = None,
        display_language: Optional[str] = None,
        owner: Optional[OwnerScope] = None,
    ) -> Result[ValidateCodeResult]:
        gate = validate_value_set_code_params(url, system, code, coding)
        if not gate.is_success:
            return Result.fail(gate.error, gate.reason)
        code = gate.value
        if not is_valid(display) and coding is not None:
            display = coding.display
        url, system = _clean(url), _clean(system)
        version, system_version = _clean(version), _clean(system_version)

        collection = self._resolver.resolve_collection(owner, url=url, version=version)
        if collection is None:
            return Result.not_found(_describe("Value set", url, version))
        source = self._resolver.resolve_source(owner, url=system, version=system_version)
        if source is None:
            return Result.not_found(_describe("Code system", system, system_version))

        if not self._is_member(collection, source, code, system_version):
            return Result.ok(ValidateCodeResult(ok=False))
        return self.validate_code(source, code, display, display_language)

    @staticmethod
    def _is_member(collection: Collection, source: Source, code: str, system_version: Optional[str]) -> bool:
        for ref in parse_references(collection.references):
            if ref.owner != source.owner or ref.source_mnemonic != source.mnemonic or ref.code != code:
                continue
            if system_version is not None:
                if ref.version == system_version:
                    return True
            elif ref.version is None or ref.version == source.version:
                return True
        return False

    # ------------------------------------------------------------------
    # EXPAND
    # ------------------------------------------------------------------
    def expand(
        self,
        collection: Collection,
        system_version: Optional[str] = None,
        offset: Optional[int] = None,
        count: Optional[int] = None,
    ) -> Result[ExpansionResult]:
        paging = validate_paging(offset, count)
        if not paging.is_success:
            return Result.fail(paging.error, paging.reason)
        offset, count = paging.value
        if count is None:
            count = self._expand_default_count

        references = parse_references(collection.references)
        if is_valid(system_version):
            split = split_system_version(system_version)
            if not split.is_success:
                return Result.fail(split.error, split.reason)
            url, version = split.value
            source = self._resolver.resolve_source(url=url, version=version)
            if source is None:
                return Result.not_found(_describe("Code system", url, version))
            resolved = self._resolve_against(source, references)
        else:
            resolved = self._resolve_all(references)

        ordered: List[ExpansionEntry] = []
        for _, entries in self._group(resolved).values():
            ordered.extend(sorted(entries, key=lambda e: e.code))

        return Result.ok(ExpansionResult(
            total=len(ordered),
            offset=offset,
            entries=ordered[offset:offset + count],
        ))

    def expand_value_set(
        self,
        url: Optional[str] = None,
        value_set_id: Optional[str] = None,
        version: Optional[str] = None,
        system_version: Optional[str] = None,
        offset: Optional[int] = None,
        count: Optional[int] = None,
        owner: Optional[OwnerScope] = None,
    ) -> Result[ExpansionResult]:
        url, value_set_id, version = _clean(url), _clean(value_set_id), _clean(version)
        if url is None and value_set_id is None:
            return Result.bad_request("Parameter 'url' is required.")
        paging = validate_paging(offset, count)
        if not paging.is_success:
            return Result.fail(paging.error, paging.reason)

        collection = self._resolver.resolve_collection(owner, mnemonic=value_set_id, url=url, version=version)
        if collection is None:
            return Result.not_found(_describe("Value set", url or value_set_id, version))
        return self.expand(collection, system_version, offset, count)

    # ------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------
    def search_code_systems(
        self,
        owner: Optional[OwnerScope] = None,
        url: Optional[str] = None,
        source_id: Optional[str] = None,
        version: Optional[str] = None,
        page: Optional[int] = None,
    ) -> Result[SearchPage[Source]]:
        return self._search(
            self._repo.find_sources, self._resolver.resolve_sources, owner, source_id, url, version, page
        )

    def search_value_sets(
        self,
        owner: Optional[OwnerScope] = None,
        url: Optional[str] = None,
        value_set_id: Optional[str] = None,
        version: Optional[str] = None,
        page: Optional[int] = None,
    ) -> Result[SearchPage[Collection]]:
        return self._search(
            self._repo.find_collections, self._resolver.resolve_collections, owner, value_set_id, url, version, page
        )

    def _search(self, finder: Callable, resolve_many: Callable, owner, mnemonic, url, version, page) -> Result:
        paged = validate_page(page)
        if not paged.is_success:
            return Result.fail(paged.error, paged.reason)
        page = paged.value
        mnemonic, url, version = _clean(mnemonic), _clean(url), _clean(version)

        if version is not None and (mnemonic is not None or url is not None):
            rows = resolve_many(owner, mnemonic=mnemonic, url=url, version=version)
        elif version is not None and version != ALL_VERSIONS:
            rows = sorted(
                (r for r in finder(owner=owner, version=version) if r.version != HEAD or version == HEAD),
                key=lambda r: (str(r.owner), r.mnemonic),
            )
        else:
            rows = self._latest_released(finder(owner=owner, mnemonic=mnemonic, url=url, released=True))

        start = (page - 1) * self._search_page_size
        return Result.ok(SearchPage(
            total=len(rows),
            page=page,
            items=rows[start:start + self._search_page_size],
        ))

    @staticmethod
    def _latest_released(rows: List[Union[Source, Collection]]) -> List[Union[Source, Collection]]:
        latest: Dict[Tuple[str, str], Union[Source, Collection]] = {}
        for row in rows:
            if row.version == HEAD or not row.released:
                continue
            key = (str(row.owner), row.mnemonic)
            held = latest.get(key)
            if held is None or (row.created_at or "") > (held.created_at or ""):
                latest[key] = row
        return [latest[key] for key in sorted(latest)]

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    def get_code_systems(
        self,
        owner: Optional[OwnerScope] = None,
        source_id: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Result[List[CodeSystemView]]:
        source_id, url, version = _clean(source_id), _clean(url), _clean(version)
        sources = self._resolver.resolve_sources(owner, mnemonic=source_id, url=url, version=version)
        if not sources:
            return Result.not_found(_describe("Code system", source_id or url, version))
        return Result.ok([self._code_system_view(s) for s in sources])

    def _code_system_view(self, source: Source) -> CodeSystemView:
        rows = self._repo.find_concept_rows(source.id)
        concepts = sorted(current_concepts(rows), key=lambda c: c.mnemonic)
        return CodeSystemView(
            source=source,
            status=publication_status(source),
            count=count_concepts(rows),
            concepts=[self._definition(source, c) for c in concepts],
            identifiers=resource_identifiers(source),
            filters=code_system_filters(source),
            properties=list(PROPERTIES),
        )

    @staticmethod
    def _definition(source: Source, concept: Concept) -> ConceptDefinition:
        return ConceptDefinition(
            code=concept.mnemonic,
            display=resolve_display(concept.names, None, source.default_locale),
            definition=resolve_definition(concept.descriptions, source.default_locale),
            concept_class=concept.concept_class,
            datatype=concept.datatype,
            inactive=not concept.is_active,
            designations=resolve_designations(concept.names, None),
        )

    def get_value_sets(
        self,
        owner: Optional[OwnerScope] = None,
        value_set_id: Optional[str] = None,
        url: Optional[str] = None,
        version: Optional[str] = None,
    ) -> Result[List[ValueSetView]]:
        value_set_id, url, version = _clean(value_set_id), _clean(url), _clean(version)
        collections = self._resolver.resolve_collections(owner, mnemonic=value_set_id, url=url, version=version)
        if not collections:
            return Result.not_found(_describe("Value set", value_set_id or url, version))
        return Result.ok([self._value_set_view(c) for c in collections])

    def _value_set_view(self, collection: Collection) -> ValueSetView:
        groups = self._group(self._resolve_all(parse_references(collection.references)))
        return ValueSetView(
            collection=collection,
            status=publication_status(collection),
            identifiers=resource_identifiers(collection),
            includes=[
                ValueSetInclude(system=source.canonical_url, version=source.version, concepts=entries)
                for source, entries in groups.values()
            ],
        )

    # ------------------------------------------------------------------
    # Reference resolution
    # ------------------------------------------------------------------
    def _current_concept(self, source: Source, code: str) -> Optional[Concept]:
        rows = self._repo.find_concept_rows(source.id, [code])
        current = select_current(r for r in rows if r.concept.mnemonic == code)
        return current.concept if current else None

    def _resolve_reference(self, ref: CollectionReference) -> Optional[Resolved]:
        if ref.version is not None:
            source = self._resolver.resolve_source(ref.owner, mnemonic=ref.source_mnemonic, version=ref.version)
        else:
            source = (
                self._resolver.resolve_source(ref.owner, mnemonic=ref.source_mnemonic, version=HEAD)
                or self._resolver.resolve_source(ref.owner, mnemonic=ref.source_mnemonic)
            )
        if source is None:
            return None
        concept = self._current_concept(source, ref.code)
        return (source, concept) if concept else None

    def _resolve_all(self, references: List[CollectionReference]) -> List[Resolved]:
        resolved = (self._resolve_reference(ref) for ref in references)
        return [r for r in resolved if r is not None]

    def _resolve_against(self, source: Source, references: List[CollectionReference]) -> List[Resolved]:
        """Only unversioned references naming this source under its owner take part."""
        resolved = []
        for ref in references:
            if ref.version is not None or ref.owner != source.owner or ref.source_mnemonic != source.mnemonic:
                continue
            concept = self._current_concept(source, ref.code)
            if concept is not None:
                resolved.append((source, concept))
        return resolved

    @staticmethod
    def _group(resolved: List[Resolved]) -> Dict[GroupKey, Tuple[Source, List[ExpansionEntry]]]:
        """Group by (source mnemonic, version) in first-encountered order, entries in reference order."""
        groups: Dict[GroupKey, Tuple[Source, List[ExpansionEntry]]] = {}
        for source, concept in resolved:
            key = (source.mnemonic, source.version)
            if key not in groups:
                groups[key] = (source, [])
            groups[key][1].append(ExpansionEntry(
                system=source.canonical_url,
                version=source.version,
                code=concept.mnemonic,
                display=resolve_display(concept.names, None, source.default_locale),
            ))
        return groups
