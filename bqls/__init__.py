"""Building blocks for a BigQuery SQL language server: protocol types, line diffs, table-path completion and a local metadata cache."""

__version__ = "0.1.0"