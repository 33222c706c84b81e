"""Language-server protocol structures: positions, ranges, edits, progress and command results."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

DocumentURI = str
ProgressToken = str

_MAX_UINT64 = 2**64 - 1


def _as_mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _int_field(data: Mapping[str, Any], key: str, what: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what}.{key} must be an integer, got {value!r}")
    return value


def _str_field(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what}.{key} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class Position:
    """A zero-based line and character offset in a document."""

    line: int = 0
    character: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.character}"

    def to_json(self) -> dict[str, int]:
        return {"line": self.line, "character": self.character}


@dataclass(frozen=True)
class Range:
    """A span between two positions."""

    start: Position = field(default_factory=Position)
    end: Position = field(default_factory=Position)

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"

    def to_json(self) -> dict[str, Any]:
        return {"start": self.start.to_json(), "end": self.end.to_json()}


@dataclass(frozen=True)
class Location:
    """A range inside a particular document."""

    uri: DocumentURI
    range: Range

    def to_json(self) -> dict[str, Any]:
        return {"uri": self.uri, "range": self.range.to_json()}


class DiagnosticSeverity(IntEnum):
    ERROR = 1
    WARNING = 2
    INFORMATION = 3
    HINT = 4


@dataclass(frozen=True)
class Diagnostic:
    """A problem reported for a range of a document."""

    range: Range
    message: str
    severity: DiagnosticSeverity | None = None
    code: str = ""
    source: str = ""

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {"range": self.range.to_json()}
        if self.severity:
            result["severity"] = int(self.severity)
        if self.code:
            result["code"] = self.code
        if self.source:
            result["source"] = self.source
        result["message"] = self.message
        return result


@dataclass(frozen=True)
class Command:
    """A command the client may ask the server to execute."""

    title: str
    command: str
    arguments: list[Any] | None = None

    def to_json(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "command": self.command,
            "arguments": None if self.arguments is None else list(self.arguments),
        }


@dataclass(frozen=True)
class TextEdit:
    """Replacement of a range of text; an empty new_text deletes it."""

    range: Range
    new_text: str = ""

    def to_json(self) -> dict[str, Any]:
        return {"range": self.range.to_json(), "newText": self.new_text}


@dataclass(frozen=True)
class TextDocumentIdentifier:
    uri: DocumentURI = ""

    def to_json(self) -> dict[str, str]:
        return {"uri": self.uri}


@dataclass(frozen=True)
class TextDocumentItem:
    uri: DocumentURI = ""
    language_id: str = ""
    version: int = 0
    text: str = ""


@dataclass(frozen=True)
class VersionedTextDocumentIdentifier:
    uri: DocumentURI = ""
    version: int = 0


@dataclass(frozen=True)
class TextDocumentPositionParams:
    text_document: TextDocumentIdentifier = field(default_factory=TextDocumentIdentifier)
    position: Position = field(default_factory=Position)


def _progress_json(
    kind: str,
    *,
    title: str = "",
    cancellable: bool = False,
    message: str = "",
    percentage: float = 0,
) -> dict[str, Any]:
    result: dict[str, Any] = {"kind": kind}
    if title:
        result["title"] = title
    if cancellable:
        result["cancellable"] = cancellable
    if message:
        result["message"] = message
    if percentage:
        result["percentage"] = percentage
    return result


@dataclass(frozen=True)
class WorkDoneProgressBegin:
    title: str = ""
    cancellable: bool = False
    message: str = ""
    percentage: float = 0

    def to_json(self) -> dict[str, Any]:
        return _progress_json(
            "begin",
            title=self.title,
            cancellable=self.cancellable,
            message=self.message,
            percentage=self.percentage,
        )


@dataclass(frozen=True)
class WorkDoneProgressReport:
    cancellable: bool = False
    message: str = ""
    percentage: float = 0

    def to_json(self) -> dict[str, Any]:
        return _progress_json(
            "report",
            cancellable=self.cancellable,
            message=self.message,
            percentage=self.percentage,
        )


@dataclass(frozen=True)
class WorkDoneProgressEnd:
    message: str = ""

    def to_json(self) -> dict[str, Any]:
        return _progress_json("end", message=self.message)


WorkDoneProgress = Union[WorkDoneProgressBegin, WorkDoneProgressReport, WorkDoneProgressEnd]


@dataclass(frozen=True)
class ProgressParams:
    """Payload of a "$/progress" notification."""

    token: ProgressToken
    value: WorkDoneProgress | None = None

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {"token": self.token}
        if self.value is not None:
            result["value"] = self.value.to_json()
        return result


@dataclass(frozen=True)
class RequestID:
    """A JSON-RPC request id: an unsigned integer or a string."""

    value: int | str = 0

    def __post_init__(self) -> None:
        if isinstance(self.value, str):
            return
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError(f"request id must be an integer or a string, got {self.value!r}")
        if not 0 <= self.value <= _MAX_UINT64:
            raise ValueError(f"request id out of range: {self.value}")

    @property
    def is_string(self) -> bool:
        return isinstance(self.value, str)

    def __str__(self) -> str:
        if isinstance(self.value, str):
            return json.dumps(self.value, ensure_ascii=False)
        return str(self.value)

    def to_json(self) -> int | str:
        return self.value


def parse_position(data: Any) -> Position:
    """Build a Position from decoded JSON."""
    obj = _as_mapping(data, "position")
    return Position(
        line=_int_field(obj, "line", "position"),
        character=_int_field(obj, "character", "position"),
    )


def parse_range(data: Any) -> Range:
    """Build a Range from decoded JSON."""
    obj = _as_mapping(data, "range")
    return Range(start=parse_position(obj.get("start")), end=parse_position(obj.get("end")))


def _parse_text_document_identifier(data: Any) -> TextDocumentIdentifier:
    obj = _as_mapping(data, "textDocument")
    return TextDocumentIdentifier(uri=_str_field(obj, "uri", "textDocument"))


def parse_text_document_position_params(data: Any) -> TextDocumentPositionParams:
    """Build TextDocumentPositionParams from decoded JSON."""
    obj = _as_mapping(data, "params")
    return TextDocumentPositionParams(
        text_document=_parse_text_document_identifier(obj.get("textDocument")),
        position=parse_position(obj.get("position")),
    )


def parse_request_id(data: Any) -> RequestID:
    """Build a RequestID from a decoded JSON number or string."""
    if isinstance(data, str):
        return RequestID(data)
    if isinstance(data, int) and not isinstance(data, bool):
        return RequestID(data)
    raise ValueError(f"request id must be an unsigned integer or a string, got {data!r}")


@dataclass(frozen=True)
class JobHistory:
    """One entry of a job listing; summary is the query text for query jobs."""

    text_document: TextDocumentIdentifier
    job_id: str
    owner: str
    summary: str

    def to_json(self) -> dict[str, Any]:
        return {
            "textDocument": self.text_document.to_json(),
            "id": self.job_id,
            "owner": self.owner,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class QueryResult:
    columns: list[str] | None = None
    data: list[list[Any]] | None = None


def _query_result_json(result: QueryResult) -> dict[str, Any]:
    return {
        "columns": None if result.columns is None else list(result.columns),
        "data": None if result.data is None else [list(row) for row in result.data],
    }


@dataclass(frozen=True)
class ExecuteQueryResult:
    text_document: TextDocumentIdentifier
    result: QueryResult = field(default_factory=QueryResult)

    def to_json(self) -> dict[str, Any]:
        return {
            "textDocument": self.text_document.to_json(),
            "result": _query_result_json(self.result),
        }


@dataclass(frozen=True)
class ListDatasetsResult:
    datasets: list[str] | None = None

    def to_json(self) -> dict[str, Any]:
        return {"datasets": None if self.datasets is None else list(self.datasets)}


@dataclass(frozen=True)
class ListTablesResult:
    tables: list[str] | None = None

    def to_json(self) -> dict[str, Any]:
        return {"tables": None if self.tables is None else list(self.tables)}


@dataclass(frozen=True)
class ListJobHistoryResult:
    jobs: list[JobHistory] | None = None

    def to_json(self) -> dict[str, Any]:
        return {"jobs": None if self.jobs is None else [job.to_json() for job in self.jobs]}


def new_job_virtual_text_document_uri(project_id: str, job_id: str) -> DocumentURI:
    """URI of the virtual document that shows a job."""
    return f"bqls://project/{project_id}/job/{job_id}"


def new_table_virtual_text_document_uri(project_id: str, dataset_id: str, table_id: str) -> DocumentURI:
    """URI of the virtual document that shows a table."""
    return f"bqls://project/{project_id}/dataset/{dataset_id}/table/{table_id}"