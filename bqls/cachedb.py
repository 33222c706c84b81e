"""On-disk SQLite cache of projects, datasets and tables."""

from __future__ import annotations

import os
import sqlite3
import threading
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Optional, Union

from bqls.client import Dataset, Project, Table

_DATABASE_FILE = "cache.sqlite3"


class CacheError(Exception):
    """Raised when the cache directory or database cannot be used."""


def cache_root(env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
    """The user's cache directory, or None when it cannot be determined."""
    env = os.environ if env is None else env
    xdg = env.get("XDG_CACHE_HOME")
    if xdg:
        return Path(xdg)
    home = env.get("HOME")
    if home:
        return Path(home) / ".cache"
    return None


def bq_cache_path(env: Optional[Mapping[str, str]] = None) -> Path:
    """The cache directory of this server, created if missing."""
    root = cache_root(env)
    if root is None:
        raise CacheError("cache path not found")

    path = root / "bqls"
    try:
        is_dir = path.is_dir()
        exists = is_dir or path.exists()
    except OSError as exc:
        raise CacheError(f"failed to stat path({path}), {exc}") from exc

    if exists:
        if not is_dir:
            raise CacheError(f"cache path({path}) is not a directory")
        return path

    try:
        path.mkdir()
    except OSError as exc:
        raise CacheError(f"failed to create directory({path}), {exc}") from exc
    return path


class CacheDatabase:
    """A SQLite database holding listed projects, datasets and tables."""

    def __init__(self, path: Union[str, Path]) -> None:
        try:
            self._conn = sqlite3.connect(str(path), check_same_thread=False)
        except sqlite3.Error as exc:
            raise CacheError(f"sql.Open: {exc}") from exc
        self._lock = threading.RLock()

    def __enter__(self) -> CacheDatabase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _execute(self, message: str, sql: str, params: Sequence[object] = ()) -> list[tuple]:
        with self._lock:
            try:
                return self._conn.execute(sql, params).fetchall()
            except sqlite3.Error as exc:
                raise CacheError(f"{message}: {exc}") from exc

    def migrate(self) -> None:
        """Create the cache tables if they do not exist."""
        statements = (
            (
                "failed to create projects table",
                "CREATE TABLE IF NOT EXISTS projects (project_id TEXT PRIMARY KEY, name TEXT)",
            ),
            (
                "failed to create datasets table",
                "CREATE TABLE IF NOT EXISTS datasets (project_id TEXT, dataset_id TEXT, "
                "PRIMARY KEY (project_id, dataset_id))",
            ),
            (
                "failed to create tables table",
                "CREATE TABLE IF NOT EXISTS tables (project_id TEXT, dataset_id TEXT, table_id TEXT, "
                "PRIMARY KEY (project_id, dataset_id, table_id))",
            ),
        )
        for message, sql in statements:
            self._execute(message, sql)
        with self._lock:
            self._conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            try:
                self._conn.close()
            except sqlite3.Error as exc:
                raise CacheError(f"failed to close database: {exc}") from exc

    def select_projects(self) -> list[Project]:
        rows = self._execute("failed to select projects", "SELECT project_id, name FROM projects")
        return [Project(project_id=pid, name=name) for pid, name in rows]

    def insert_projects(self, projects: Sequence[Project]) -> None:
        """Store projects, keeping rows that already exist."""
        if not projects:
            raise CacheError("failed to insert projects: no projects given")
        with self._lock:
            try:
                with self._conn:
                    self._conn.executemany(
                        "INSERT OR IGNORE INTO projects(project_id, name) VALUES (?, ?)",
                        [(p.project_id, p.name) for p in projects],
                    )
            except sqlite3.Error as exc:
                raise CacheError(f"failed to insert projects: {exc}") from exc

    def select_datasets(self, project_id: str) -> list[Dataset]:
        rows = self._execute(
            "failed to select datasets",
            "SELECT project_id, dataset_id FROM datasets WHERE project_id = ?",
            (project_id,),
        )
        return [Dataset(project_id=pid, dataset_id=did) for pid, did in rows]

    def replace_datasets(self, project_id: str, datasets: Sequence[Dataset]) -> None:
        """Replace every cached dataset of a project in one transaction."""
        if not datasets:
            raise CacheError("failed to insert datasets: no datasets given")
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute("DELETE FROM datasets WHERE project_id = ?", (project_id,))
                    self._conn.executemany(
                        "INSERT OR IGNORE INTO datasets(project_id, dataset_id) VALUES (?, ?)",
                        [(d.project_id, d.dataset_id) for d in datasets],
                    )
            except sqlite3.Error as exc:
                raise CacheError(f"failed to replace datasets: {exc}") from exc

    def select_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        rows = self._execute(
            "failed to select tables",
            "SELECT project_id, dataset_id, table_id FROM tables WHERE project_id = ? AND dataset_id = ?",
            (project_id, dataset_id),
        )
        return [Table(project_id=pid, dataset_id=did, table_id=tid) for pid, did, tid in rows]

    def replace_tables(self, project_id: str, dataset_id: str, tables: Sequence[Table]) -> None:
        """Replace every cached table of a dataset in one transaction."""
        if not tables:
            raise CacheError("failed to insert tables: no tables given")
        with self._lock:
            try:
                with self._conn:
                    self._conn.execute(
                        "DELETE FROM tables WHERE project_id = ? AND dataset_id = ?",
                        (project_id, dataset_id),
                    )
                    self._conn.executemany(
                        "INSERT OR IGNORE INTO tables(project_id, dataset_id, table_id) VALUES (?, ?, ?)",
                        [(t.project_id, t.dataset_id, t.table_id) for t in tables],
                    )
            except sqlite3.Error as exc:
                raise CacheError(f"failed to replace tables: {exc}") from exc


def open_default_database(env: Optional[Mapping[str, str]] = None) -> CacheDatabase:
    """Open the cache database in the user's cache directory."""
    try:
        directory = bq_cache_path(env)
    except CacheError as exc:
        raise CacheError(f"bqCachePath: {exc}") from exc
    return CacheDatabase(directory / _DATABASE_FILE)