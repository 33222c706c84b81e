import base64

import pytest

from bqls.messages import (
    CompletionItem,
    CompletionItemKind,
    Hover,
    InsertTextFormat,
    MarkedString,
    MarkupContent,
    MarkupKind,
    MessageType,
    PublishDiagnosticsParams,
    SemanticHighlightingInformation,
    SemanticHighlightingToken,
    ShowMessageParams,
    deserialize_semantic_tokens,
    parse_code_action_params,
    parse_did_change_text_document_params,
    parse_document_formatting_params,
    parse_execute_command_params,
    parse_marked_string,
    parse_semantic_highlighting_information,
    serialize_semantic_tokens,
)
from bqls.protocol import Diagnostic, DiagnosticSeverity, Position, Range, TextEdit


@pytest.mark.parametrize(
    "kind, number, name",
    [
        (CompletionItemKind.TEXT, 1, "text"),
        (CompletionItemKind.FUNCTION, 3, "function"),
        (CompletionItemKind.FIELD, 5, "field"),
        (CompletionItemKind.MODULE, 9, "module"),
        (CompletionItemKind.ENUM_MEMBER, 20, "enumMember"),
        (CompletionItemKind.TYPE_PARAMETER, 25, "typeParameter"),
    ],
)
def test_completion_item_kind_on_the_wire(kind, number, name):
    assert CompletionItem(label="x", kind=kind).to_json()["kind"] == number
    assert str(kind) == name


def test_markup_content_json():
    content = MarkupContent(MarkupKind.MARKDOWN, "text")
    assert content.to_json() == {"kind": "markdown", "value": "text"}


def test_completion_item_minimal_json_keeps_documentation():
    assert CompletionItem(label="id").to_json() == {
        "label": "id",
        "documentation": {"kind": "", "value": ""},
    }


def test_completion_item_full_json():
    edit = TextEdit(Range(Position(0, 7), Position(0, 8)), "id")
    item = CompletionItem(
        label="id",
        kind=CompletionItemKind.FIELD,
        documentation=MarkupContent(MarkupKind.PLAIN_TEXT, "INTEGER"),
        insert_text_format=InsertTextFormat.SNIPPET,
        text_edit=edit,
    )
    result = item.to_json()
    assert result["kind"] == int(CompletionItemKind.FIELD)
    assert result["insertTextFormat"] == 2
    assert result["textEdit"] == edit.to_json()
    assert result["documentation"] == {"kind": "plaintext", "value": "INTEGER"}
    assert "detail" not in result


def test_marked_string_raw_round_trip():
    marked = MarkedString.raw("hello")
    assert marked.to_json() == "hello"
    assert parse_marked_string(marked.to_json()) == marked


def test_marked_string_language_round_trip():
    marked = MarkedString(value="SELECT 1", language="sql")
    assert marked.to_json() == {"language": "sql", "value": "SELECT 1"}
    assert parse_marked_string(marked.to_json()) == marked


def test_parse_marked_string_rejects_number():
    with pytest.raises(ValueError):
        parse_marked_string(3)


def test_hover_without_contents():
    assert Hover().to_json() == {"contents": []}


def test_hover_with_range():
    span = Range(Position(1, 2), Position(1, 5))
    hover = Hover([MarkedString.raw("doc")], span)
    assert hover.to_json() == {"contents": ["doc"], "range": span.to_json()}


def test_show_message_params_json():
    params = ShowMessageParams(MessageType.INFO, "This query will process 0 bytes when run.")
    assert params.to_json() == {
        "type": 3,
        "message": "This query will process 0 bytes when run.",
    }


def test_publish_diagnostics_json():
    diag = Diagnostic(Range(), "boom", DiagnosticSeverity.ERROR)
    params = PublishDiagnosticsParams("file:///a.sql", [diag])
    assert params.to_json() == {"uri": "file:///a.sql", "diagnostics": [diag.to_json()]}
    assert PublishDiagnosticsParams("file:///a.sql").to_json()["diagnostics"] is None


def test_parse_execute_command_params():
    params = parse_execute_command_params({"command": "listTables", "arguments": ["p", "d"]})
    assert params.command == "listTables"
    assert params.arguments == ["p", "d"]
    assert parse_execute_command_params({"command": "x"}).arguments is None


def test_parse_execute_command_params_rejects_bad_arguments():
    with pytest.raises(ValueError):
        parse_execute_command_params({"command": "x", "arguments": "p"})


def test_parse_code_action_params():
    diag = Diagnostic(Range(Position(0, 1), Position(0, 3)), "bad", DiagnosticSeverity.WARNING)
    data = {
        "textDocument": {"uri": "file:///a.sql"},
        "range": Range(Position(0, 0), Position(1, 0)).to_json(),
        "context": {"diagnostics": [diag.to_json()]},
    }
    params = parse_code_action_params(data)
    assert params.text_document.uri == "file:///a.sql"
    assert params.range == Range(Position(0, 0), Position(1, 0))
    assert params.diagnostics == [diag]


def test_parse_code_action_params_rejects_unknown_severity():
    data = {"context": {"diagnostics": [{"message": "x", "severity": 9}]}}
    with pytest.raises(ValueError):
        parse_code_action_params(data)


def test_parse_document_formatting_params():
    params = parse_document_formatting_params(
        {"textDocument": {"uri": "file:///a.sql"}, "options": {"tabSize": 4, "insertSpaces": True}}
    )
    assert params.text_document.uri == "file:///a.sql"
    assert params.tab_size == 4
    assert params.insert_spaces is True


def test_parse_did_change_text_document_params():
    span = Range(Position(0, 0), Position(0, 3))
    params = parse_did_change_text_document_params(
        {
            "textDocument": {"uri": "file:///a.sql", "version": 2},
            "contentChanges": [
                {"text": "SELECT 1"},
                {"text": "abc", "range": span.to_json(), "rangeLength": 3},
            ],
        }
    )
    assert params.text_document.uri == "file:///a.sql"
    assert params.text_document.version == 2
    full, partial = params.content_changes
    assert full.range is None and full.text == "SELECT 1"
    assert partial.range == span and partial.range_length == 3


def test_semantic_tokens_wire_bytes():
    encoded = serialize_semantic_tokens([SemanticHighlightingToken(1, 2, 3)])
    assert base64.b64decode(encoded) == bytes([0, 0, 0, 1, 0, 2, 0, 3])


def test_semantic_tokens_round_trip():
    tokens = [SemanticHighlightingToken(0, 5, 1), SemanticHighlightingToken(2**32 - 1, 65535, 7)]
    assert deserialize_semantic_tokens(serialize_semantic_tokens(tokens)) == tokens


def test_semantic_tokens_empty():
    assert serialize_semantic_tokens([]) == ""
    assert deserialize_semantic_tokens("") == []


def test_semantic_tokens_trailing_partial_ignored():
    raw = bytes([0, 0, 0, 4, 0, 1, 0, 2]) + bytes([9, 9, 9])
    assert deserialize_semantic_tokens(base64.b64encode(raw)) == [SemanticHighlightingToken(4, 1, 2)]


def test_semantic_tokens_invalid_base64():
    with pytest.raises(ValueError):
        deserialize_semantic_tokens("not base64!")


def test_semantic_token_out_of_range():
    with pytest.raises(ValueError):
        SemanticHighlightingToken(0, 2**16, 0)


def test_semantic_highlighting_information_round_trip():
    info = SemanticHighlightingInformation(3, [SemanticHighlightingToken(1, 2, 3)])
    data = info.to_json()
    assert data["line"] == 3
    assert parse_semantic_highlighting_information(data) == info


def test_semantic_highlighting_information_without_tokens():
    info = parse_semantic_highlighting_information({"line": 5, "tokens": None})
    assert info == SemanticHighlightingInformation(5, [])
    assert info.to_json() == {"line": 5, "tokens": ""}