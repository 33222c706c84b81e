"""A client that answers listings from the on-disk cache and refreshes it in the background."""

from __future__ import annotations

import sys
import threading
from collections.abc import Callable, Hashable, Iterator, Mapping
from typing import Any, Optional

from bqls.cachedb import CacheDatabase, CacheError, open_default_database
from bqls.client import Client, Dataset, Project, Table, TableMetadata


def _warn(message: str) -> None:
    print(message, file=sys.stderr)


class CachedClient(Client):
    """Wraps a client, caching listings on disk and table metadata in memory.

    A listing served from the cache starts, once per key, a background call that
    refreshes the cached rows.
    """

    def __init__(
        self,
        client: Client,
        database: Optional[CacheDatabase] = None,
        *,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._client = client
        self._db = database if database is not None else open_default_database(env)
        try:
            self._db.migrate()
        except CacheError as exc:
            raise CacheError(f"Migrate: {exc}") from exc

        self._metadata_lock = threading.Lock()
        self._metadata: dict[str, TableMetadata] = {}

        self._refresh_lock = threading.Lock()
        self._refreshed: set[Hashable] = set()
        self._threads: list[threading.Thread] = []

    def _refresh_once(self, key: Hashable, label: str, call: Callable[[], object]) -> None:
        def run() -> None:
            try:
                call()
            except Exception as exc:  # noqa: BLE001 - background refresh must not die loudly
                _warn(f"failed to recache {label}: {exc}")

        with self._refresh_lock:
            if key in self._refreshed:
                return
            self._refreshed.add(key)
            thread = threading.Thread(target=run, daemon=True)
            self._threads.append(thread)
        thread.start()

    def wait_for_refresh(self) -> None:
        """Block until every background refresh started so far has finished."""
        while True:
            with self._refresh_lock:
                if not self._threads:
                    return
                pending, self._threads = self._threads, []
            for thread in pending:
                thread.join()

    def close(self) -> None:
        """Close the cache database and the wrapped client."""
        self.wait_for_refresh()
        errors: list[Exception] = []
        for closer in (self._db.close, self._client.close):
            try:
                closer()
            except Exception as exc:  # noqa: BLE001 - both must be closed
                errors.append(exc)
        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise CacheError("; ".join(str(e) for e in errors)) from errors[0]

    def get_default_project(self) -> str:
        return self._client.get_default_project()

    def list_projects(self) -> list[Project]:
        try:
            results = self._db.select_projects()
        except CacheError as exc:
            _warn(f"failed to select projects: {exc}")
        else:
            if results:
                self._refresh_once(("projects",), "projects", self._call_list_projects)
                return results
        return self._call_list_projects()

    def _call_list_projects(self) -> list[Project]:
        result = self._client.list_projects()
        if result:
            try:
                self._db.insert_projects(result)
            except CacheError as exc:
                _warn(f"failed to insert projects: {exc}")
        return result

    def list_datasets(self, project_id: str) -> list[Dataset]:
        try:
            results = self._db.select_datasets(project_id)
        except CacheError as exc:
            _warn(f"failed to select datasets: {exc}")
        else:
            if results:
                self._refresh_once(
                    ("datasets", project_id),
                    "datasets",
                    lambda: self._call_list_datasets(project_id),
                )
                return results
        return self._call_list_datasets(project_id)

    def _call_list_datasets(self, project_id: str) -> list[Dataset]:
        result = self._client.list_datasets(project_id)
        if result:
            try:
                self._db.replace_datasets(project_id, result)
            except CacheError as exc:
                _warn(f"failed to insert datasets: {exc}")
        return result

    def list_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        try:
            results = self._db.select_tables(project_id, dataset_id)
        except CacheError as exc:
            _warn(f"failed to select tables: {exc}")
        else:
            if results:
                self._refresh_once(
                    ("tables", f"{project_id}.{dataset_id}"),
                    "tables",
                    lambda: self._call_list_tables(project_id, dataset_id),
                )
                return results
        return self._call_list_tables(project_id, dataset_id)

    def _call_list_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        result = self._client.list_tables(project_id, dataset_id)
        if result:
            try:
                self._db.replace_tables(project_id, dataset_id, result)
            except CacheError as exc:
                _warn(f"failed to insert tables: {exc}")
        return result

    def get_table_metadata(
        self, project_id: str, dataset_id: str, table_id: str
    ) -> Optional[TableMetadata]:
        key = f"{project_id}:{dataset_id}:{table_id}"
        with self._metadata_lock:
            cached = self._metadata.get(key)
            if cached is not None:
                return cached
            result = self._client.get_table_metadata(project_id, dataset_id, table_id)
            if result is not None:
                self._metadata[key] = result
            return result

    def get_table_record(self, project_id: str, dataset_id: str, table_id: str) -> Iterator[Any]:
        return self._client.get_table_record(project_id, dataset_id, table_id)

    def run(self, query: str, dryrun: bool) -> Any:
        return self._client.run(query, dryrun)

    def job_from_project(self, project_id: str, job_id: str) -> Any:
        return self._client.job_from_project(project_id, job_id)

    def jobs(self) -> Iterator[Any]:
        return self._client.jobs()