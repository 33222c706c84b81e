"""Commands offered to the client, their arguments and the server's capabilities."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any, Optional

from bqls.capabilities import (
    CompletionOptions,
    ExecuteCommandOptions,
    ServerCapabilities,
    TextDocumentSyncKind,
    TextDocumentSyncOptionsOrKind,
)
from bqls.protocol import Command, DocumentURI

_ALL_USER_FLAG = "all-user"
_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


class CommandError(ValueError):
    """Raised when a command is unknown or its arguments are unusable."""


class CommandName(str, Enum):
    EXECUTE_QUERY = "executeQuery"
    LIST_DATASETS = "listDatasets"
    LIST_TABLES = "listTables"
    LIST_JOB_HISTORIES = "listJobHistories"


def code_actions(uri: DocumentURI) -> list[Command]:
    """The code actions offered for a document."""
    return [
        Command(
            title="Execute Query",
            command=CommandName.EXECUTE_QUERY.value,
            arguments=[uri],
        ),
        Command(
            title="List Personal Job Histories",
            command=CommandName.LIST_JOB_HISTORIES.value,
        ),
        Command(
            title="List Project Job Histories",
            command=CommandName.LIST_JOB_HISTORIES.value,
            arguments=["--all-user"],
        ),
    ]


def server_capabilities() -> ServerCapabilities:
    """The capabilities announced in answer to "initialize"."""
    return ServerCapabilities(
        text_document_sync=TextDocumentSyncOptionsOrKind(kind=TextDocumentSyncKind.FULL),
        document_formatting_provider=True,
        hover_provider=True,
        code_action_provider=True,
        completion_provider=CompletionOptions(
            resolve_provider=False, trigger_characters=["*", "."]
        ),
        execute_command_provider=ExecuteCommandOptions(
            commands=[name.value for name in CommandName]
        ),
    )


def _string_argument(value: Any) -> str:
    if not isinstance(value, str):
        raise CommandError(f"arguments should be string, but got {type(value).__name__}")
    return value


def execute_query_uri(arguments: Optional[Sequence[Any]]) -> str:
    """The document URI given to the execute-query command."""
    arguments = arguments or []
    if len(arguments) != 1:
        raise CommandError("file uri arguments is not provided")
    return _string_argument(arguments[0])


def list_datasets_project(arguments: Optional[Sequence[Any]], default_project_id: str) -> str:
    """The project whose datasets are listed."""
    arguments = arguments or []
    if arguments:
        return _string_argument(arguments[0])
    return default_project_id


def list_tables_target(
    arguments: Optional[Sequence[Any]], default_project_id: str
) -> tuple[str, str]:
    """The (project, dataset) pair whose tables are listed."""
    arguments = arguments or []
    project_id, dataset_id = default_project_id, ""
    if not arguments:
        raise CommandError("datasetID arguments is not provided")
    if len(arguments) == 1:
        dataset_id = _string_argument(arguments[0])
    elif len(arguments) == 2:
        project_id = _string_argument(arguments[0])
        dataset_id = _string_argument(arguments[1])
    return project_id, dataset_id


def _argument_text(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def list_job_histories_all_user(arguments: Optional[Sequence[Any]]) -> bool:
    """Whether the job listing covers every user, read from ``-all-user`` style flags."""
    all_user = False
    for arg in (_argument_text(a) for a in arguments or []):
        if len(arg) < 2 or not arg.startswith("-"):
            break
        if arg == "--":
            break
        name = arg[2:] if arg.startswith("--") else arg[1:]
        if not name or name[0] in "-=":
            raise CommandError(f"bad flag syntax: {arg}")

        name, has_value, value = name.partition("=")
        if name != _ALL_USER_FLAG:
            if name in ("help", "h"):
                raise CommandError("flag: help requested")
            raise CommandError(f"flag provided but not defined: -{name}")

        if not has_value:
            all_user = True
        elif value in _TRUE_VALUES:
            all_user = True
        elif value in _FALSE_VALUES:
            all_user = False
        else:
            raise CommandError(f'invalid boolean value "{value}" for -{name}: parse error')
    return all_user