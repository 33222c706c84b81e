"""Capability negotiation: initialize parameters, server capabilities and text synchronisation."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Union

from bqls.protocol import DocumentURI

_FILE_SCHEME = "file://"


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


def _str_list(data: Mapping[str, Any], key: str, what: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{what}.{key} must be an array of strings, got {value!r}")
    return list(value)


class TextDocumentSyncKind(IntEnum):
    """How document changes are sent to the server."""

    NONE = 0
    FULL = 1
    INCREMENTAL = 2


SyncKind = Union[TextDocumentSyncKind, int]


def _sync_kind(value: int) -> SyncKind:
    try:
        return TextDocumentSyncKind(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class TextDocumentSyncOptions:
    """Detailed text synchronisation settings."""

    open_close: bool = False
    change: SyncKind = TextDocumentSyncKind.NONE
    will_save: bool = False
    will_save_wait_until: bool = False
    save_include_text: Optional[bool] = None

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.open_close:
            result["openClose"] = True
        result["change"] = int(self.change)
        if self.will_save:
            result["willSave"] = True
        if self.will_save_wait_until:
            result["willSaveWaitUntil"] = True
        if self.save_include_text is not None:
            result["save"] = {"includeText": self.save_include_text}
        return result


@dataclass(frozen=True)
class TextDocumentSyncOptionsOrKind:
    """Either a bare sync kind or full sync options; the kind wins when both are set."""

    kind: Optional[SyncKind] = None
    options: Optional[TextDocumentSyncOptions] = None

    def to_json(self) -> Union[int, dict[str, Any], None]:
        if self.kind is not None:
            return int(self.kind)
        if self.options is None:
            return None
        return self.options.to_json()


def _parse_sync_options(data: Mapping[str, Any]) -> TextDocumentSyncOptions:
    what = "textDocumentSync"
    save = data.get("save")
    save_include_text: Optional[bool] = None
    if save is not None:
        save_include_text = _bool(_obj(save, f"{what}.save"), "includeText", f"{what}.save")
    return TextDocumentSyncOptions(
        open_close=_bool(data, "openClose", what),
        change=_sync_kind(_int(data, "change", what)),
        will_save=_bool(data, "willSave", what),
        will_save_wait_until=_bool(data, "willSaveWaitUntil", what),
        save_include_text=save_include_text,
    )


def parse_text_document_sync(data: Any) -> TextDocumentSyncOptionsOrKind:
    """Build the sync setting from a decoded JSON null, number or object.

    A bare kind also yields equivalent options that open and close documents.
    """
    if data is None:
        return TextDocumentSyncOptionsOrKind()
    if isinstance(data, int) and not isinstance(data, bool):
        kind = _sync_kind(data)
        return TextDocumentSyncOptionsOrKind(
            kind=kind,
            options=TextDocumentSyncOptions(open_close=True, change=kind),
        )
    if isinstance(data, Mapping):
        return TextDocumentSyncOptionsOrKind(options=_parse_sync_options(data))
    raise ValueError(f"textDocumentSync must be a number or an object, got {data!r}")


@dataclass(frozen=True)
class CompletionOptions:
    resolve_provider: bool = False
    trigger_characters: list[str] = field(default_factory=list)


def _completion_options_json(options: CompletionOptions) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if options.resolve_provider:
        result["resolveProvider"] = True
    if options.trigger_characters:
        result["triggerCharacters"] = list(options.trigger_characters)
    return result


@dataclass(frozen=True)
class ExecuteCommandOptions:
    commands: Optional[list[str]] = None


@dataclass(frozen=True)
class ServerCapabilities:
    """What the server offers to the client."""

    text_document_sync: Optional[TextDocumentSyncOptionsOrKind] = None
    hover_provider: bool = False
    completion_provider: Optional[CompletionOptions] = None
    definition_provider: bool = False
    type_definition_provider: bool = False
    references_provider: bool = False
    document_highlight_provider: bool = False
    document_symbol_provider: bool = False
    workspace_symbol_provider: bool = False
    implementation_provider: bool = False
    code_action_provider: bool = False
    document_formatting_provider: bool = False
    document_range_formatting_provider: bool = False
    execute_command_provider: Optional[ExecuteCommandOptions] = None
    experimental: Any = None

    def to_json(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.text_document_sync is not None:
            result["textDocumentSync"] = self.text_document_sync.to_json()
        flags = (
            ("hoverProvider", self.hover_provider),
            ("definitionProvider", self.definition_provider),
            ("typeDefinitionProvider", self.type_definition_provider),
            ("referencesProvider", self.references_provider),
            ("documentHighlightProvider", self.document_highlight_provider),
            ("documentSymbolProvider", self.document_symbol_provider),
            ("workspaceSymbolProvider", self.workspace_symbol_provider),
            ("implementationProvider", self.implementation_provider),
            ("codeActionProvider", self.code_action_provider),
            ("documentFormattingProvider", self.document_formatting_provider),
            ("documentRangeFormattingProvider", self.document_range_formatting_provider),
        )
        for name, enabled in flags:
            if enabled:
                result[name] = True
        if self.completion_provider is not None:
            result["completionProvider"] = _completion_options_json(self.completion_provider)
        if self.execute_command_provider is not None:
            commands = self.execute_command_provider.commands
            result["executeCommandProvider"] = {
                "commands": None if commands is None else list(commands)
            }
        if self.experimental is not None:
            result["experimental"] = self.experimental
        return result


@dataclass(frozen=True)
class InitializeResult:
    capabilities: ServerCapabilities = field(default_factory=ServerCapabilities)

    def to_json(self) -> dict[str, Any]:
        return {"capabilities": self.capabilities.to_json()}


@dataclass(frozen=True)
class ClientInfo:
    name: str = ""
    version: str = ""


@dataclass(frozen=True)
class ClientCapabilities:
    """The client capabilities the server looks at."""

    snippet_support: bool = False
    documentation_format: list[str] = field(default_factory=list)
    hover_content_format: list[str] = field(default_factory=list)
    work_done_progress: bool = False
    apply_edit: bool = False
    workspace_folders: bool = False
    configuration: bool = False
    x_files_provider: bool = False
    x_content_provider: bool = False
    x_cache_provider: bool = False
    experimental: Any = None


def _parse_client_capabilities(data: Any) -> ClientCapabilities:
    obj = _obj(data, "capabilities")
    workspace = _obj(obj.get("workspace"), "capabilities.workspace")
    text_document = _obj(obj.get("textDocument"), "capabilities.textDocument")
    window = _obj(obj.get("window"), "capabilities.window")
    completion = _obj(text_document.get("completion"), "textDocument.completion")
    completion_item = _obj(completion.get("completionItem"), "completion.completionItem")
    hover = _obj(text_document.get("hover"), "textDocument.hover")
    return ClientCapabilities(
        snippet_support=_bool(completion_item, "snippetSupport", "completionItem"),
        documentation_format=_str_list(completion_item, "documentationFormat", "completionItem"),
        hover_content_format=_str_list(hover, "contentFormat", "hover"),
        work_done_progress=_bool(window, "workDoneProgress", "window"),
        apply_edit=_bool(workspace, "applyEdit", "workspace"),
        workspace_folders=_bool(workspace, "workspaceFolders", "workspace"),
        configuration=_bool(workspace, "configuration", "workspace"),
        x_files_provider=_bool(obj, "xfilesProvider", "capabilities"),
        x_content_provider=_bool(obj, "xcontentProvider", "capabilities"),
        x_cache_provider=_bool(obj, "xcacheProvider", "capabilities"),
        experimental=obj.get("experimental"),
    )


@dataclass(frozen=True)
class InitializeParams:
    """Parameters of the "initialize" request."""

    process_id: int = 0
    root_path: str = ""
    root_uri: DocumentURI = ""
    client_info: ClientInfo = field(default_factory=ClientInfo)
    trace: str = ""
    initialization_options: Any = None
    capabilities: ClientCapabilities = field(default_factory=ClientCapabilities)
    work_done_token: str = ""

    def root(self) -> DocumentURI:
        """The root URI, or the root path made into a file URI."""
        if self.root_uri:
            return self.root_uri
        if self.root_path.startswith(_FILE_SCHEME):
            return self.root_path
        return _FILE_SCHEME + self.root_path


def parse_initialize_params(data: Any) -> InitializeParams:
    """Build InitializeParams from decoded JSON."""
    obj = _obj(data, "params")
    info = _obj(obj.get("clientInfo"), "clientInfo")
    return InitializeParams(
        process_id=_int(obj, "processId", "params"),
        root_path=_str(obj, "rootPath", "params"),
        root_uri=_str(obj, "rootUri", "params"),
        client_info=ClientInfo(
            name=_str(info, "name", "clientInfo"),
            version=_str(info, "version", "clientInfo"),
        ),
        trace=_str(obj, "trace", "params"),
        initialization_options=obj.get("initializationOptions"),
        capabilities=_parse_client_capabilities(obj.get("capabilities")),
        work_done_token=_str(obj, "workDoneToken", "params"),
    )