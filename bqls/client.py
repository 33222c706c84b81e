"""Warehouse client interface, its resource records and table-list post-processing."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

_LOAD_TEMP_PREFIX = "LOAD_TEMP_"
_NUMERIC_SUFFIX = re.compile(r"\d*\Z")
_MAX_INT64 = 2**63 - 1


@dataclass(frozen=True)
class Project:
    """A project the current user can access."""

    project_id: str
    name: str = ""


@dataclass(frozen=True)
class Dataset:
    """A dataset inside a project."""

    project_id: str
    dataset_id: str


@dataclass(frozen=True)
class Table:
    """A table inside a dataset."""

    project_id: str
    dataset_id: str
    table_id: str


@dataclass(frozen=True)
class FieldSchema:
    """One column of a table schema; record columns carry nested fields."""

    name: str
    type: str = ""
    description: str = ""
    schema: list[FieldSchema] = field(default_factory=list)


@dataclass(frozen=True)
class TableMetadata:
    """Descriptive information about a table."""

    schema: list[FieldSchema] = field(default_factory=list)
    description: str = ""


class Client(ABC):
    """Access to projects, datasets, tables and jobs of the warehouse."""

    @abstractmethod
    def close(self) -> None:
        """Release the resources held by the client."""

    @abstractmethod
    def get_default_project(self) -> str:
        """The default project of the current user."""

    @abstractmethod
    def list_projects(self) -> list[Project]:
        """All projects the current user has access to."""

    @abstractmethod
    def list_datasets(self, project_id: str) -> list[Dataset]:
        """All datasets of a project."""

    @abstractmethod
    def list_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        """The tables of a dataset, as filtered by filter_listed_tables."""

    @abstractmethod
    def get_table_metadata(
        self, project_id: str, dataset_id: str, table_id: str
    ) -> Optional[TableMetadata]:
        """The metadata of a table."""

    @abstractmethod
    def get_table_record(self, project_id: str, dataset_id: str, table_id: str) -> Iterator[Any]:
        """An iterator over the rows of a table."""

    @abstractmethod
    def run(self, query: str, dryrun: bool) -> Any:
        """Run a standard-SQL query, or only validate it when dryrun is true."""

    @abstractmethod
    def job_from_project(self, project_id: str, job_id: str) -> Any:
        """The job with the given id in a project."""

    @abstractmethod
    def jobs(self) -> Iterator[Any]:
        """An iterator over all jobs."""


def _numeric_suffix(table_id: str) -> tuple[str, Optional[int]]:
    match = _NUMERIC_SUFFIX.search(table_id)
    assert match is not None
    digits = match.group()
    stem = table_id[: match.start()]
    if not digits or not digits.isascii():
        return stem, None
    value = int(digits)
    if value > _MAX_INT64:
        return stem, None
    return stem, value


def extract_latest_suffix_tables(tables: Iterable[Table]) -> list[Table]:
    """Keep only the table with the highest numeric suffix of each name, sorted by id.

    Tables without a usable numeric suffix are kept under their own id.
    """
    latest: dict[str, tuple[int, Table]] = {}
    for table in tables:
        stem, suffix = _numeric_suffix(table.table_id)
        if suffix is None:
            latest[table.table_id] = (0, table)
            continue
        current = latest.get(stem)
        if current is None or current[0] < suffix:
            latest[stem] = (suffix, table)
    return sorted((table for _, table in latest.values()), key=lambda t: t.table_id)


def filter_listed_tables(tables: Iterable[Table]) -> list[Table]:
    """Drop temporary load tables and keep the latest of each suffixed table."""
    return extract_latest_suffix_tables(
        table for table in tables if not table.table_id.startswith(_LOAD_TEMP_PREFIX)
    )