"""Diagnostic notifications and the human-readable size of a dry run."""

from __future__ import annotations

import math
from collections.abc import Iterable

from bqls.messages import PublishDiagnosticsParams
from bqls.protocol import Diagnostic, DiagnosticSeverity, DocumentURI

_UNITS = ("bytes", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB", "ZiB")


def bytes_convert(num_bytes: int) -> str:
    """Format a byte count with binary units and at most two decimals."""
    if num_bytes == 0:
        return "0 bytes"
    if num_bytes < 0:
        raise ValueError(f"byte count must not be negative, got {num_bytes}")

    base = math.floor(math.log(num_bytes) / math.log(1024))
    if base >= len(_UNITS):
        raise ValueError(f"byte count too large: {num_bytes}")

    value = f"{num_bytes / math.pow(1024, base):.2f}"
    value = value.removesuffix(".00")
    return f"{value} {_UNITS[base]}"


def dryrun_message(total_bytes_processed: int) -> str:
    """The message shown to the user after a successful dry run."""
    return f"This query will process {bytes_convert(total_bytes_processed)} when run."


def publish_diagnostics_params(
    uri: DocumentURI, diagnostics: Iterable[Diagnostic]
) -> PublishDiagnosticsParams:
    """Build the publish notification; diagnostics without severity become errors."""
    return PublishDiagnosticsParams(
        uri=uri,
        diagnostics=[
            d
            if d.severity
            else Diagnostic(
                range=d.range,
                message=d.message,
                severity=DiagnosticSeverity.ERROR,
                code=d.code,
                source=d.source,
            )
            for d in diagnostics
        ],
    )