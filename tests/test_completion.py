from typing import Any, Iterator, Optional

import pytest

from bqls.client import Client, Dataset, Project, Table, TableMetadata
from bqls.completion import CompletionCandidate, TablePathCompleter, TablePathCompletionError
from bqls.messages import CompletionItemKind, InsertTextFormat, MarkupContent, MarkupKind
from bqls.protocol import Position, Range


class FakeClient(Client):
    def __init__(self, projects=None, datasets=None, tables=None, error=None):
        self.projects = projects or []
        self.datasets = datasets or {}
        self.tables = tables or {}
        self.error = error
        self.calls = []

    def close(self) -> None:
        pass

    def get_default_project(self) -> str:
        return ""

    def list_projects(self) -> list[Project]:
        self.calls.append(("projects",))
        if self.error:
            raise self.error
        return self.projects

    def list_datasets(self, project_id: str) -> list[Dataset]:
        self.calls.append(("datasets", project_id))
        if self.error:
            raise self.error
        return self.datasets.get(project_id, [])

    def list_tables(self, project_id: str, dataset_id: str) -> list[Table]:
        self.calls.append(("tables", project_id, dataset_id))
        if self.error:
            raise self.error
        return self.tables.get((project_id, dataset_id), [])

    def get_table_metadata(self, project_id, dataset_id, table_id) -> Optional[TableMetadata]:
        raise LookupError("not found")

    def get_table_record(self, project_id, dataset_id, table_id) -> Iterator[Any]:
        return iter(())

    def run(self, query, dryrun):
        return None

    def job_from_project(self, project_id, job_id):
        return None

    def jobs(self):
        return iter(())


def plain(value):
    return MarkupContent(kind=MarkupKind.PLAIN_TEXT, value=value)


def test_list_table():
    client = FakeClient(
        tables={
            ("project", "dataset"): [
                Table("project", "dataset", "1table"),
                Table("project", "dataset", "2table"),
            ]
        }
    )
    got = TablePathCompleter(client).complete("project.dataset.")
    assert got == [
        CompletionCandidate(CompletionItemKind.MODULE, "1table", plain("project.dataset.1table")),
        CompletionCandidate(CompletionItemKind.MODULE, "2table", plain("project.dataset.2table")),
    ]
    assert client.calls == [("tables", "project", "dataset")]


def test_select_latest_suffix_table():
    client = FakeClient(tables={("project", "dataset"): [Table("project", "dataset", "table20230622")]})
    got = TablePathCompleter(client).complete("project.dataset.")
    assert got == [
        CompletionCandidate(
            CompletionItemKind.MODULE,
            "table20230622",
            plain("project.dataset.table20230622"),
        )
    ]


def test_complete_dataset_id():
    client = FakeClient(
        datasets={"project": [Dataset("project", "dataset1"), Dataset("project", "dataset2")]}
    )
    got = TablePathCompleter(client).complete("project.")
    assert got == [
        CompletionCandidate(CompletionItemKind.MODULE, "dataset1", plain("project.dataset1")),
        CompletionCandidate(CompletionItemKind.MODULE, "dataset2", plain("project.dataset2")),
    ]
    assert client.calls == [("datasets", "project")]


def test_complete_project_id():
    client = FakeClient(
        projects=[Project("project1", "project name"), Project("project2", "project name")]
    )
    got = TablePathCompleter(client).complete("p")
    assert got == [
        CompletionCandidate(CompletionItemKind.MODULE, "project1", plain("project name"), "p"),
        CompletionCandidate(CompletionItemKind.MODULE, "project2", plain("project name"), "p"),
    ]


def test_prefix_filters_candidates():
    client = FakeClient(
        tables={
            ("project", "dataset"): [
                Table("project", "dataset", "1table"),
                Table("project", "dataset", "2table"),
            ]
        }
    )
    got = TablePathCompleter(client).complete("project.dataset.2")
    assert [c.new_text for c in got] == ["2table"]
    assert got[0].typed_prefix == "2"


def test_too_many_parts_yields_nothing():
    client = FakeClient()
    assert TablePathCompleter(client).complete("a.b.c.d") == []
    assert client.calls == []


def test_listing_error_is_wrapped():
    client = FakeClient(error=RuntimeError("boom"))
    with pytest.raises(TablePathCompletionError, match="failed to bqClient.ListTables: boom"):
        TablePathCompleter(client).complete("project.dataset.")
    with pytest.raises(TablePathCompletionError, match="failed to ListProjects"):
        TablePathCompleter(client).complete("p")


def test_to_lsp_item_without_snippets():
    candidate = CompletionCandidate(CompletionItemKind.FIELD, "id", plain("INTEGER"), "i")
    item = candidate.to_lsp_completion_item(Position(0, 8), False)
    assert item.label == "id"
    assert item.kind == CompletionItemKind.FIELD
    assert item.insert_text_format == InsertTextFormat.PLAIN_TEXT
    assert item.text_edit is None
    assert item.documentation == plain("INTEGER")


def test_to_lsp_item_with_snippets_replaces_prefix():
    candidate = CompletionCandidate(CompletionItemKind.MODULE, "project1", plain("x"), "p")
    position = Position(0, 16)
    item = candidate.to_lsp_completion_item(position, True)
    assert item.insert_text_format == InsertTextFormat.SNIPPET
    assert item.text_edit.new_text == "project1"
    assert item.text_edit.range == Range(Position(0, 15), position)