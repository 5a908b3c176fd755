"""Row builders and an in-memory TerminologyRepository for tests."""
from __future__ import annotations
import itertools
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from termserve.domain.terminology.models import (
    Collection,
    Concept,
    ConceptsSource,
    LocalizedText,
    OwnerScope,
    Source,
)
from termserve.persistence.interfaces.terminology_repository import TerminologyRepository

OCL = OwnerScope.org("OCL")
CL_URL = "http://ocl.org/fhir/CodeSystem/CL"
LAB_URL = "http://ocl.org/fhir/CodeSystem/LAB"
VS_URL = "http://ocl.org/fhir/ValueSet/VS"

_ids = itertools.count(1000)


# ------------------------------------------------------------------
# Builders
# ------------------------------------------------------------------
def text(name: str, locale: Optional[str] = "en", preferred: bool = False, type: Optional[str] = None) -> LocalizedText:
    return LocalizedText(name=name, locale=locale, locale_preferred=preferred, type=type)


def concept(mnemonic: str, id: Optional[int] = None, names=None, descriptions=None, **kwargs) -> Concept:
    return Concept(
        id=id if id is not None else next(_ids),
        mnemonic=mnemonic,
        names=list(names or []),
        descriptions=list(descriptions or []),
        **kwargs,
    )


def source(mnemonic: str = "CL", version: str = "HEAD", owner: OwnerScope = OCL, **kwargs) -> Source:
    kwargs.setdefault("canonical_url", CL_URL)
    kwargs.setdefault("name", mnemonic)
    return Source(id=next(_ids), mnemonic=mnemonic, owner=owner, version=version, **kwargs)


def collection(
    mnemonic: str = "VS",
    version: str = "HEAD",
    references: Iterable[str] = (),
    owner: OwnerScope = OCL,
    **kwargs,
) -> Collection:
    kwargs.setdefault("canonical_url", VS_URL)
    kwargs.setdefault("name", mnemonic)
    return Collection(
        id=next(_ids), mnemonic=mnemonic, owner=owner, version=version, references=list(references), **kwargs,
    )


def ref(code: str, concept_id: int, source_mnemonic: str = "CL", version: Optional[str] = None,
        owner: str = "/orgs/OCL") -> str:
    if version:
        return f"{owner}/sources/{source_mnemonic}/{version}/concepts/{code}/{concept_id}/"
    return f"{owner}/sources/{source_mnemonic}/concepts/{code}/{concept_id}/"


# ------------------------------------------------------------------
# In-memory repository
# ------------------------------------------------------------------
def _matches(row, owner, mnemonic, url, version, released) -> bool:
    if owner is not None and row.owner != owner:
        return False
    if mnemonic is not None and row.mnemonic != mnemonic:
        return False
    if url is not None and row.canonical_url != url:
        return False
    if version is not None and row.version != version:
        return False
    if released is not None and row.released != released:
        return False
    return True


class InMemoryTerminologyRepository(TerminologyRepository):
    def __init__(self):
        self.sources: List[Source] = []
        self.collections: List[Collection] = []
        self.rows: Dict[int, List[ConceptsSource]] = defaultdict(list)

    def add_source(self, src: Source, *concepts: Concept) -> Source:
        self.sources.append(src)
        for c in concepts:
            self.rows[src.id].append(ConceptsSource(source_id=src.id, concept=c))
        return src

    def add_collection(self, col: Collection) -> Collection:
        self.collections.append(col)
        return col

    def find_sources(self, owner=None, mnemonic=None, url=None, version=None, released=None) -> List[Source]:
        return [s for s in self.sources if _matches(s, owner, mnemonic, url, version, released)]

    def find_collections(self, owner=None, mnemonic=None, url=None, version=None, released=None) -> List[Collection]:
        return [c for c in self.collections if _matches(c, owner, mnemonic, url, version, released)]

    def find_concept_rows(self, source_id, codes=None) -> List[ConceptsSource]:
        rows = self.rows.get(source_id, [])
        if codes is None:
            return list(rows)
        codes = set(codes)
        return [r for r in rows if r.concept.mnemonic in codes]


# ------------------------------------------------------------------
# Catalog shared by the service and API tests
# ------------------------------------------------------------------
def build_catalog() -> InMemoryTerminologyRepository:
    """
    CL: HEAD, v1, v2 (released, latest) and v3 (unreleased).
    Concept A has two history rows (1, 10); row 10 is current.
    LAB: HEAD and 1.0 (released).
    VS: HEAD and v1 (released) mixing versioned, unversioned,
    unresolvable and malformed references.
    """
    repo = InMemoryTerminologyRepository()

    a_old = concept("A", id=1, names=[text("Alpha v1")])
    a = concept(
        "A", id=10,
        names=[text("Alpha synonym"), text("Alpha", preferred=True), text("Alfa", "es", preferred=True)],
        descriptions=[text("First letter", type="Definition")],
        concept_class="Misc", datatype="N/A",
    )
    b = concept("B", id=2, names=[text("Beta")])
    c = concept("C", id=3, names=[text("Gamma")], is_active=False)
    d = concept("D", id=4, names=[text("Delta")])
    e = concept("E", id=5, names=[text("Epsilon")])

    cl = dict(
        name="Classes", full_name="Concept Classes", canonical_url=CL_URL, uri="/orgs/OCL/sources/CL/",
        extras={
            "identifiers": [{"system": "http://example.org/ids", "value": "cl-1", "type": {"coding": [{"code": "MR"}]}}],
            "filters": [
                {"code": "concept_class", "description": "Class filter", "operator": "=", "value": "Misc"},
                {"code": "datatype", "operator": "bogus"},
                {"code": "mapping"},
            ],
            "purpose": "Testing",
            "copyright": "CL copyright",
        },
    )
    repo.add_source(source("CL", "HEAD", created_at="2021-01-01", **cl), a, b, c, d, e)
    repo.add_source(source("CL", "v1", released=True, created_at="2021-02-01", **cl), a_old, b)
    repo.add_source(source("CL", "v2", released=True, created_at="2021-03-01", **cl), a_old, a, b, c)
    repo.add_source(source("CL", "v3", created_at="2021-04-01", **cl), a, d)

    x = concept("X", id=20, names=[text("Ex")])
    y = concept("Y", id=21, names=[text("Why")])
    z = concept("Z", id=22, names=[text("Zeta")])
    lab = dict(name="Labs", canonical_url=LAB_URL)
    repo.add_source(source("LAB", "HEAD", created_at="2021-01-10", **lab), x, y)
    repo.add_source(source("LAB", "1.0", released=True, created_at="2021-02-15", **lab), x, y, z)

    repo.add_collection(collection("VS", "HEAD", [ref("A", 10)], created_at="2021-04-15"))
    repo.add_collection(collection(
        "VS", "v1",
        [
            ref("C", 3),
            ref("A", 10),
            ref("B", 2, version="v1"),
            ref("Z", 22, "LAB", version="1.0"),
            "not/a/reference",
            ref("MISSING", 99),
            ref("X", 20, "LAB"),
        ],
        released=True,
        uri="/orgs/OCL/collections/VS/",
        publisher="OCL",
        contact=[{"name": "Jon Doe", "telecom": [{"system": "email", "value": "jondoe@example.org"}]}],
        jurisdiction=[{"coding": [{"code": "USA"}]}],
        purpose="Testing",
        copyright="VS copyright",
        created_at="2021-05-01",
    ))
    return repo
