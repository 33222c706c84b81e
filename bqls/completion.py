"""Completion candidates and completion of project, dataset and table paths."""

from __future__ import annotations

from dataclasses import dataclass, field

from bqls.client import Client
from bqls.messages import (
    CompletionItem,
    CompletionItemKind,
    InsertTextFormat,
    MarkupContent,
    MarkupKind,
)
from bqls.protocol import Position, Range, TextEdit


class TablePathCompletionError(Exception):
    """Raised when the listing behind a table-path completion fails."""


@dataclass(frozen=True)
class CompletionCandidate:
    """A completion proposal together with the prefix the user has already typed."""

    kind: CompletionItemKind
    new_text: str
    documentation: MarkupContent = field(default_factory=MarkupContent)
    typed_prefix: str = ""

    def to_lsp_completion_item(self, position: Position, support_snippet: bool) -> CompletionItem:
        """Build the protocol item; with snippet support it replaces the typed prefix."""
        if not support_snippet:
            return CompletionItem(
                label=self.new_text,
                kind=self.kind,
                documentation=self.documentation,
                insert_text_format=InsertTextFormat.PLAIN_TEXT,
            )

        prefix_length = len(self.typed_prefix.encode("utf-8"))
        start = Position(position.line, position.character - prefix_length)
        return CompletionItem(
            label=self.new_text,
            kind=self.kind,
            documentation=self.documentation,
            insert_text_format=InsertTextFormat.SNIPPET,
            text_edit=TextEdit(range=Range(start, position), new_text=self.new_text),
        )


def _plain(value: str) -> MarkupContent:
    return MarkupContent(kind=MarkupKind.PLAIN_TEXT, value=value)


class TablePathCompleter:
    """Completes the parts of a ``project.dataset.table`` path from a client's listings."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def complete(self, table_path: str) -> list[CompletionCandidate]:
        """Complete the last part of a partly typed table path."""
        parts = table_path.split(".")
        if len(parts) == 1:
            return self.complete_projects(parts[0])
        if len(parts) == 2:
            return self.complete_datasets(parts[0], parts[1])
        if len(parts) == 3:
            return self.complete_tables(parts[0], parts[1], parts[2])
        return []

    def complete_projects(self, project_prefix: str) -> list[CompletionCandidate]:
        try:
            projects = self._client.list_projects()
        except Exception as exc:
            raise TablePathCompletionError(f"failed to ListProjects: {exc}") from exc

        return [
            CompletionCandidate(
                kind=CompletionItemKind.MODULE,
                new_text=p.project_id,
                documentation=_plain(p.name),
                typed_prefix=project_prefix,
            )
            for p in projects
            if p.project_id.startswith(project_prefix)
        ]

    def complete_datasets(self, project_id: str, dataset_prefix: str) -> list[CompletionCandidate]:
        try:
            datasets = self._client.list_datasets(project_id)
        except Exception as exc:
            raise TablePathCompletionError(f"failed to ListDatasets: {exc}") from exc

        return [
            CompletionCandidate(
                kind=CompletionItemKind.MODULE,
                new_text=d.dataset_id,
                documentation=_plain(f"{d.project_id}.{d.dataset_id}"),
                typed_prefix=dataset_prefix,
            )
            for d in datasets
            if d.dataset_id.startswith(dataset_prefix)
        ]

    def complete_tables(
        self, project_id: str, dataset_id: str, table_prefix: str
    ) -> list[CompletionCandidate]:
        try:
            tables = self._client.list_tables(project_id, dataset_id)
        except Exception as exc:
            raise TablePathCompletionError(f"failed to bqClient.ListTables: {exc}") from exc

        return [
            CompletionCandidate(
                kind=CompletionItemKind.MODULE,
                new_text=t.table_id,
                documentation=_plain(f"{t.project_id}.{t.dataset_id}.{t.table_id}"),
                typed_prefix=table_prefix,
            )
            for t in tables
            if t.table_id.startswith(table_prefix)
        ]