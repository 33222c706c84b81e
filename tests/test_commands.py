import pytest

from bqls.commands import (
    CommandError,
    CommandName,
    code_actions,
    execute_query_uri,
    list_datasets_project,
    list_job_histories_all_user,
    list_tables_target,
    server_capabilities,
)


def test_advertised_command_names():
    data = server_capabilities().to_json()
    assert data["executeCommandProvider"]["commands"] == [
        "executeQuery",
        "listDatasets",
        "listTables",
        "listJobHistories",
    ]


def test_code_actions():
    actions = code_actions("file:///q.sql")
    assert [a.title for a in actions] == [
        "Execute Query",
        "List Personal Job Histories",
        "List Project Job Histories",
    ]
    assert actions[0].command == "executeQuery"
    assert actions[0].arguments == ["file:///q.sql"]
    assert actions[1].arguments is None
    assert actions[1].to_json()["arguments"] is None
    assert actions[2].arguments == ["--all-user"]


def test_server_capabilities_json():
    data = server_capabilities().to_json()
    assert data["textDocumentSync"] == 1
    assert data["hoverProvider"] is True
    assert data["documentFormattingProvider"] is True
    assert data["codeActionProvider"] is True
    assert data["completionProvider"] == {"triggerCharacters": ["*", "."]}
    assert data["executeCommandProvider"]["commands"] == [c.value for c in CommandName]


def test_execute_query_uri():
    assert execute_query_uri(["file:///q.sql"]) == "file:///q.sql"
    with pytest.raises(CommandError, match="file uri arguments is not provided"):
        execute_query_uri([])
    with pytest.raises(CommandError, match="file uri arguments is not provided"):
        execute_query_uri(None)
    with pytest.raises(CommandError, match="arguments should be string"):
        execute_query_uri([3])


def test_list_datasets_project():
    assert list_datasets_project([], "default") == "default"
    assert list_datasets_project(["other"], "default") == "other"
    with pytest.raises(CommandError):
        list_datasets_project([1.5], "default")


def test_list_tables_target():
    assert list_tables_target(["ds"], "default") == ("default", "ds")
    assert list_tables_target(["proj", "ds"], "default") == ("proj", "ds")
    with pytest.raises(CommandError, match="datasetID arguments is not provided"):
        list_tables_target([], "default")
    with pytest.raises(CommandError):
        list_tables_target(["proj", 2], "default")


@pytest.mark.parametrize(
    "arguments, expected",
    [
        ([], False),
        (None, False),
        (["--all-user"], True),
        (["-all-user"], True),
        (["-all-user=false"], False),
        (["--all-user=true"], True),
        (["positional", "--all-user"], False),
        (["--", "--all-user"], False),
    ],
)
def test_list_job_histories_all_user(arguments, expected):
    assert list_job_histories_all_user(arguments) is expected


@pytest.mark.parametrize("arguments", [["-unknown"], ["-all-user=maybe"], ["---all-user"], ["-h"]])
def test_list_job_histories_bad_flags(arguments):
    with pytest.raises(CommandError):
        list_job_histories_all_user(arguments)