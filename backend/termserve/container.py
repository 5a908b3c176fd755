"""Dependency injection container: wires implementations to interfaces."""
from __future__ import annotations
from functools import lru_cache

from termserve.persistence.repositories.sqlite.sqlite_terminology_repository import SqliteTerminologyRepository
from termserve.application.terminology_app_service import TerminologyAppService


@lru_cache(maxsize=1)
def get_terminology_repo() -> SqliteTerminologyRepository:
    return SqliteTerminologyRepository()


@lru_cache(maxsize=1)
def get_terminology_app_service() -> TerminologyAppService:
    return TerminologyAppService(repo=get_terminology_repo())
