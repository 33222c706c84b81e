"""Language-server protocol messages: completion, hover, notifications and request parameters."""

from __future__ import annotations

import base64
import binascii
import struct
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional, Union

from bqls.protocol import (
    Diagnostic,
    DiagnosticSeverity,
    DocumentURI,
    Range,
    TextDocumentIdentifier,
    TextEdit,
    VersionedTextDocumentIdentifier,
    parse_range,
)

_TOKEN_FORMAT = ">IHH"
_TOKEN_SIZE = struct.calcsize(_TOKEN_FORMAT)


def _obj(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a JSON object, got {type(data).__name__}")
    return data


def _int(data: Mapping[str, Any], key: str, what: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{what}.{key} must be an integer, got {value!r}")
    return value


def _str(data: Mapping[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{what}.{key} must be a string, got {value!r}")
    return value


def _bool(data: Mapping[str, Any], key: str, what: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{what}.{key} must be a boolean, got {value!r}")
    return value


def _list(data: Mapping[str, Any], key: str, what: str) -> Optional[list[Any]]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"{what}.{key} must be a JSON array, got {value!r}")
    return value


def _text_document(data: Any) -> TextDocumentIdentifier:
    obj = _obj(data, "textDocument")
    return TextDocumentIdentifier(uri=_str(obj, "uri", "textDocument"))


class CompletionItemKind(IntEnum):
    TEXT = 1
    METHOD = 2
    FUNCTION = 3
    CONSTRUCTOR = 4
    FIELD = 5
    VARIABLE = 6
    CLASS = 7
    INTERFACE = 8
    MODULE = 9
    PROPERTY = 10
    UNIT = 11
    VALUE = 12
    ENUM = 13
    KEYWORD = 14
    SNIPPET = 15
    COLOR = 16
    FILE = 17
    REFERENCE = 18
    FOLDER = 19
    ENUM_MEMBER = 20
    CONSTANT = 21
    STRUCT = 22
    EVENT = 23
    OPERATOR = 24
    TYPE_PARAMETER = 25

    def __str__(self) -> str:
        head, *rest = self.name.lower().split("_")
        return head + "".join(part.capitalize() for part in rest)


class MarkupKind(str, Enum):
    PLAIN_TEXT = "plaintext"
    MARKDOWN = "markdown"


@dataclass(frozen=True)
class MarkupContent:
    """Documentation text together with its markup kind."""

    kind: Union[MarkupKind, str] = ""
    value: str = ""

    def to_json(self) -> dict[str, str]:
        kind = self.kind.value if isinstance(self.kind, MarkupKind) else self.kind
        return {"kind": kind, "value": self.value}


class InsertTextFormat(IntEnum):
    PLAIN_TEXT = 1
    SNIPPET = 2


@dataclass(frozen=True)
class CompletionItem:
    """One entry of a completion list."""

    label: str
    kind: Optional[CompletionItemKind] = None
    detail: str = ""
    documentation: MarkupContent = field(default_factory=MarkupContent)
    sort_text: str = ""
    filter_text: str = ""
    insert_text: str = ""
    insert_text_format: Optional[InsertTextFormat] = None
    text_edit: Optional[TextEdit] = None
    additional_text_edits: Optional[list[TextEdit]] = None
    data: Any = None

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {"label": self.label}
        if self.kind:
            result["kind"] = int(self.kind)
        if self.detail:
            result["detail"] = self.detail
        result["documentation"] = self.documentation.to_json()
        if self.sort_text:
            result["sortText"] = self.sort_text
        if self.filter_text:
            result["filterText"] = self.filter_text
        if self.insert_text:
            result["insertText"] = self.insert_text
        if self.insert_text_format:
            result["insertTextFormat"] = int(self.insert_text_format)
        if self.text_edit is not None:
            result["textEdit"] = self.text_edit.to_json()
        if self.additional_text_edits:
            result["additionalTextEdits"] = [edit.to_json() for edit in self.additional_text_edits]
        if self.data is not None:
            result["data"] = self.data
        return result


class CodeActionKind(str, Enum):
    EMPTY = ""
    QUICK_FIX = "quickfix"
    REFACTOR = "refactor"
    REFACTOR_EXTRACT = "refactor.extract"
    REFACTOR_INLINE = "refactor.inline"
    REFACTOR_REWRITE = "refactor.rewrite"
    SOURCE = "source"
    SOURCE_ORGANIZE_IMPORTS = "source.organizeImports"


@dataclass(frozen=True)
class MarkedString:
    """Hover text: either a raw string or a value tagged with a language."""

    value: str = ""
    language: str = ""
    is_raw: bool = False

    @classmethod
    def raw(cls, value: str) -> MarkedString:
        return cls(value=value, is_raw=True)

    def to_json(self) -> Union[str, dict[str, str]]:
        if self.is_raw:
            return self.value
        return {"language": self.language, "value": self.value}


def parse_marked_string(data: Any) -> MarkedString:
    """Build a MarkedString from a decoded JSON string or object."""
    if isinstance(data, str):
        return MarkedString.raw(data)
    if isinstance(data, Mapping):
        return MarkedString(
            value=_str(data, "value", "markedString"),
            language=_str(data, "language", "markedString"),
        )
    raise ValueError(f"marked string must be a string or an object, got {data!r}")


@dataclass(frozen=True)
class Hover:
    contents: Optional[list[MarkedString]] = None
    range: Optional[Range] = None

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {"contents": [item.to_json() for item in self.contents or []]}
        if self.range is not None:
            result["range"] = self.range.to_json()
        return result


class SymbolKind(IntEnum):
    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26

    def __str__(self) -> str:
        return "".join(part.capitalize() for part in self.name.split("_"))


class MessageType(IntEnum):
    ERROR = 1
    WARNING = 2
    INFO = 3
    LOG = 4


@dataclass(frozen=True)
class ShowMessageParams:
    type: MessageType
    message: str

    def to_json(self) -> dict[str, Any]:
        return {"type": int(self.type), "message": self.message}


@dataclass(frozen=True)
class PublishDiagnosticsParams:
    uri: DocumentURI
    diagnostics: Optional[list[Diagnostic]] = None

    def to_json(self) -> dict[str, Any]:
        diagnostics = None if self.diagnostics is None else [d.to_json() for d in self.diagnostics]
        return {"uri": self.uri, "diagnostics": diagnostics}


@dataclass(frozen=True)
class ExecuteCommandParams:
    command: str
    arguments: Optional[list[Any]] = None


def parse_execute_command_params(data: Any) -> ExecuteCommandParams:
    """Build ExecuteCommandParams from decoded JSON."""
    obj = _obj(data, "params")
    arguments = _list(obj, "arguments", "params")
    return ExecuteCommandParams(
        command=_str(obj, "command", "params"),
        arguments=None if arguments is None else list(arguments),
    )


def _parse_diagnostic(data: Any) -> Diagnostic:
    obj = _obj(data, "diagnostic")
    severity_value = _int(obj, "severity", "diagnostic")
    severity = DiagnosticSeverity(severity_value) if severity_value else None
    return Diagnostic(
        range=parse_range(obj.get("range")),
        message=_str(obj, "message", "diagnostic"),
        severity=severity,
        code=_str(obj, "code", "diagnostic"),
        source=_str(obj, "source", "diagnostic"),
    )


@dataclass(frozen=True)
class CodeActionParams:
    text_document: TextDocumentIdentifier
    range: Range
    diagnostics: list[Diagnostic] = field(default_factory=list)


def parse_code_action_params(data: Any) -> CodeActionParams:
    """Build CodeActionParams from decoded JSON."""
    obj = _obj(data, "params")
    context = _obj(obj.get("context"), "context")
    return CodeActionParams(
        text_document=_text_document(obj.get("textDocument")),
        range=parse_range(obj.get("range")),
        diagnostics=[_parse_diagnostic(d) for d in _list(context, "diagnostics", "context") or []],
    )


@dataclass(frozen=True)
class DocumentFormattingParams:
    text_document: TextDocumentIdentifier
    tab_size: int = 0
    insert_spaces: bool = False


def parse_document_formatting_params(data: Any) -> DocumentFormattingParams:
    """Build DocumentFormattingParams from decoded JSON."""
    obj = _obj(data, "params")
    options = _obj(obj.get("options"), "options")
    return DocumentFormattingParams(
        text_document=_text_document(obj.get("textDocument")),
        tab_size=_int(options, "tabSize", "options"),
        insert_spaces=_bool(options, "insertSpaces", "options"),
    )


@dataclass(frozen=True)
class TextDocumentContentChangeEvent:
    """A change to a document; without a range the text replaces the whole document."""

    text: str
    range: Optional[Range] = None
    range_length: int = 0


@dataclass(frozen=True)
class DidChangeTextDocumentParams:
    text_document: VersionedTextDocumentIdentifier
    content_changes: list[TextDocumentContentChangeEvent] = field(default_factory=list)


def _parse_change(data: Any) -> TextDocumentContentChangeEvent:
    obj = _obj(data, "contentChange")
    raw_range = obj.get("range")
    length = _int(obj, "rangeLength", "contentChange")
    if length < 0:
        raise ValueError(f"contentChange.rangeLength must not be negative, got {length}")
    return TextDocumentContentChangeEvent(
        text=_str(obj, "text", "contentChange"),
        range=None if raw_range is None else parse_range(raw_range),
        range_length=length,
    )


def parse_did_change_text_document_params(data: Any) -> DidChangeTextDocumentParams:
    """Build DidChangeTextDocumentParams from decoded JSON."""
    obj = _obj(data, "params")
    document = _obj(obj.get("textDocument"), "textDocument")
    return DidChangeTextDocumentParams(
        text_document=VersionedTextDocumentIdentifier(
            uri=_str(document, "uri", "textDocument"),
            version=_int(document, "version", "textDocument"),
        ),
        content_changes=[_parse_change(c) for c in _list(obj, "contentChanges", "params") or []],
    )


@dataclass(frozen=True)
class SemanticHighlightingToken:
    """A highlighted run: start character, length and scope index."""

    character: int
    length: int
    scope: int

    def __post_init__(self) -> None:
        for name, value, limit in (
            ("character", self.character, 2**32),
            ("length", self.length, 2**16),
            ("scope", self.scope, 2**16),
        ):
            if not 0 <= value < limit:
                raise ValueError(f"token {name} out of range: {value}")


def serialize_semantic_tokens(tokens: Sequence[SemanticHighlightingToken]) -> str:
    """Encode tokens as base64 of 8-byte big-endian records."""
    raw = b"".join(struct.pack(_TOKEN_FORMAT, t.character, t.length, t.scope) for t in tokens)
    return base64.b64encode(raw).decode("ascii")


def deserialize_semantic_tokens(data: Union[str, bytes]) -> list[SemanticHighlightingToken]:
    """Decode base64 token records; a trailing partial record is ignored."""
    try:
        raw = base64.b64decode(data, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid semantic tokens: {exc}") from exc
    usable = len(raw) - len(raw) % _TOKEN_SIZE
    return [
        SemanticHighlightingToken(*values)
        for values in struct.iter_unpack(_TOKEN_FORMAT, raw[:usable])
    ]


@dataclass(frozen=True)
class SemanticHighlightingInformation:
    line: int
    tokens: list[SemanticHighlightingToken] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {"line": self.line, "tokens": serialize_semantic_tokens(self.tokens)}


def parse_semantic_highlighting_information(data: Any) -> SemanticHighlightingInformation:
    """Build SemanticHighlightingInformation from decoded JSON."""
    obj = _obj(data, "semanticHighlightingInformation")
    raw_tokens = obj.get("tokens")
    if raw_tokens is not None and not isinstance(raw_tokens, str):
        raise ValueError(f"tokens must be a string, got {raw_tokens!r}")
    return SemanticHighlightingInformation(
        line=_int(obj, "line", "semanticHighlightingInformation"),
        tokens=[] if raw_tokens is None else deserialize_semantic_tokens(raw_tokens),
    )