import pytest
from fastapi.testclient import TestClient

from factories import build_catalog
from termserve.application.terminology_app_service import TerminologyAppService


@pytest.fixture
def repo():
    return build_catalog()


@pytest.fixture
def service(repo):
    return TerminologyAppService(repo, expand_default_count=100, search_page_size=10)


@pytest.fixture
def client(service):
    """TestClient bound to the in-memory catalog. Startup (DB init) is not run."""
    from termserve.container import get_terminology_app_service
    from termserve.main import app

    app.dependency_overrides[get_terminology_app_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
