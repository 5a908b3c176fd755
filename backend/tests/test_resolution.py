from factories import CL_URL, OCL, InMemoryTerminologyRepository, source
from termserve.application.resolution import VersionResolver
from termserve.domain.terminology.models import OwnerScope


def test_no_version_picks_most_recent_released(repo):
    resolved = VersionResolver(repo).resolve_source(OCL, mnemonic="CL")
    assert resolved.version == "v2"


def test_url_resolution_without_owner(repo):
    assert VersionResolver(repo).resolve_source(url=CL_URL).version == "v2"


def test_explicit_version_is_exact(repo):
    resolver = VersionResolver(repo)
    assert resolver.resolve_source(OCL, mnemonic="CL", version="v1").version == "v1"
    # unreleased versions are reachable by name
    assert resolver.resolve_source(OCL, mnemonic="CL", version="v3").version == "v3"


def test_unknown_version_does_not_fall_back(repo):
    assert VersionResolver(repo).resolve_source(OCL, mnemonic="CL", version="v9") is None


def test_head_only_when_asked_for(repo):
    resolver = VersionResolver(repo)
    assert resolver.resolve_source(OCL, mnemonic="CL", version="HEAD").version == "HEAD"
    assert all(s.version != "HEAD" for s in resolver.resolve_sources(OCL, mnemonic="CL", version="*"))


def test_all_versions_oldest_first(repo):
    resolver = VersionResolver(repo)
    versions = [s.version for s in resolver.resolve_sources(OCL, mnemonic="CL", version="*")]
    assert versions == ["v1", "v2", "v3"]
    assert resolver.resolve_source(OCL, mnemonic="CL", version="*").version == "v3"


def test_other_owner_does_not_resolve(repo):
    assert VersionResolver(repo).resolve_source(OwnerScope.user("jdoe"), mnemonic="CL") is None


def test_nothing_to_resolve_by():
    assert VersionResolver(InMemoryTerminologyRepository()).resolve_sources(OCL) == []


def test_nothing_released():
    repo = InMemoryTerminologyRepository()
    repo.add_source(source("CL", "HEAD", created_at="2021-01-01"))
    repo.add_source(source("CL", "draft", created_at="2021-02-01"))
    assert VersionResolver(repo).resolve_source(OCL, mnemonic="CL") is None


def test_released_head_row_is_dropped():
    repo = InMemoryTerminologyRepository()
    repo.add_source(source("CL", "v1", released=True, created_at="2021-01-01"))
    repo.add_source(source("CL", "HEAD", released=True, created_at="2021-06-01"))
    assert VersionResolver(repo).resolve_source(OCL, mnemonic="CL") is None


def test_collections_resolve_the_same_way(repo):
    resolver = VersionResolver(repo)
    assert resolver.resolve_collection(OCL, mnemonic="VS").version == "v1"
    assert resolver.resolve_collection(OCL, mnemonic="VS", version="HEAD").version == "HEAD"
    assert [c.version for c in resolver.resolve_collections(OCL, mnemonic="VS", version="*")] == ["v1"]
