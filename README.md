# bqls

Building blocks for a language server for BigQuery Standard SQL. The
package uses only the Python standard library and needs Python 3.10 or
later.

## What is in the package

- **`bqls.protocol`**: Language Server Protocol structures such as
  `Position`, `Range`, `Diagnostic`, `TextEdit`, `Command`, the
  work-done progress values (`WorkDoneProgressBegin`, `WorkDoneProgressReport`,
  `WorkDoneProgressEnd`, `ProgressParams`), `RequestID`, and the command
  results `ExecuteQueryResult`, `ListDatasetsResult`, `ListTablesResult`
  and `ListJobHistoryResult`. Each has a `to_json()` method that returns
  the JSON-ready value. `parse_position`, `parse_range`,
  `parse_text_document_position_params` and `parse_request_id` build them
  from decoded JSON and raise `ValueError` on malformed input.
  `new_job_virtual_text_document_uri` and
  `new_table_virtual_text_document_uri` build `bqls://` URIs.
- **`bqls.messages`**: completion items, markup content, hover contents
  (`MarkedString`, `Hover`), `ShowMessageParams`,
  `PublishDiagnosticsParams`, and parsers for execute-command, code-action,
  formatting and did-change parameters. Semantic highlighting tokens are
  encoded and decoded with `serialize_semantic_tokens` and
  `deserialize_semantic_tokens` (base64 of 8-byte big-endian records).
- **`bqls.capabilities`**: `ServerCapabilities`, `InitializeResult`,
  text synchronisation settings (`parse_text_document_sync`) and
  `parse_initialize_params`; `InitializeParams.root()` returns the root
  URI, or the root path turned into a `file://` URI.
- **`bqls.diff`**: a Myers line diff (`operations`, `split_lines`) and
  `compute_edits`, which turns one text into another as whole-line
  `TextEdit`s.
- **`bqls.client`**: the abstract `Client` a warehouse backend implements,
  the records `Project`, `Dataset`, `Table`, `FieldSchema` and
  `TableMetadata`, and `filter_listed_tables` /
  `extract_latest_suffix_tables`, which drop `LOAD_TEMP_` tables and keep
  only the highest numeric suffix of each table name, sorted by id.
- **`bqls.cachedb`**: `CacheDatabase`, an SQLite store of projects,
  datasets and tables. `open_default_database` places it at
  `cache.sqlite3` inside `$XDG_CACHE_HOME/bqls`, or `$HOME/.cache/bqls`,
  creating the `bqls` directory if needed. Failures raise `CacheError`.
- **`bqls.cached_client`**: `CachedClient` wraps a `Client`. Listings are
  answered from the cache when it has rows, and a background thread then
  refreshes those rows once per key; `wait_for_refresh()` waits for these
  threads. Table metadata is kept in memory.
- **`bqls.completion`**: `TablePathCompleter` completes the parts of a
  `project.dataset.table` path from a client's listings, and
  `CompletionCandidate.to_lsp_completion_item` turns a candidate into a
  protocol item, with a text edit over the typed prefix when the client
  supports snippets.
- **`bqls.diagnostics`**: `bytes_convert`, `dryrun_message` and
  `publish_diagnostics_params` (diagnostics without a severity become
  errors).
- **`bqls.commands`**: `CommandName` (`executeQuery`, `listDatasets`,
  `listTables`, `listJobHistories`), the `code_actions` offered for a
  document, the `server_capabilities` announced at initialize, and the
  argument readers `execute_query_uri`, `list_datasets_project`,
  `list_tables_target` and `list_job_histories_all_user`, which raise
  `CommandError` on bad arguments.

## Examples

Edits between a document and its reformatted text:

```python
from bqls.diff import compute_edits

before = "SELECT a\nFROM t\n"
after = "SELECT\n  a\nFROM t\n"
edits = [edit.to_json() for edit in compute_edits(before, after)]
```

Byte counts as shown after a dry run:

```python
from bqls.diagnostics import bytes_convert, dryrun_message

bytes_convert(0)     # "0 bytes"
bytes_convert(1024)  # "1 KiB"
dryrun_message(1024) # "This query will process 1 KiB when run."
```

Virtual document URIs:

```python
from bqls.protocol import (
    new_job_virtual_text_document_uri,
    new_table_virtual_text_document_uri,
)

new_job_virtual_text_document_uri("my-project", "job_123")
# "bqls://project/my-project/job/job_123"
new_table_virtual_text_document_uri("my-project", "sales", "orders")
# "bqls://project/my-project/dataset/sales/table/orders"
```

Reading command arguments:

```python
from bqls.commands import list_tables_target, list_job_histories_all_user

list_tables_target(["sales"], "my-project")          # ("my-project", "sales")
list_job_histories_all_user(["--all-user"])          # True
```

## What the package does not do

- It is not a running language server: there is no JSON-RPC transport,
  no request dispatch and no command to start.
- It has no SQL parser or analyzer, so it offers no column, function or
  variable completion, no hover documentation, no error diagnostics of its
  own and no SQL formatter; `compute_edits` only diffs two texts you give it.
- It ships no BigQuery backend. `Client` is an interface; to list
  projects, datasets and tables or to run queries you supply an
  implementation.