# MIT License
# Copyright (c) 2025 Hashborn

"""
Genesis Export

Exports application state into a new genesis document.
"""

from .locator import locate_genesis
from .merger import encode_genesis, load_genesis, merge_genesis
from .orchestrator import (
    AppExporter,
    CallableExporter,
    ExportOrchestrator,
    ExportResult,
    select_export_path,
)
from .sink import OutputSink, WriteSummary

__all__ = [
    "AppExporter",
    "CallableExporter",
    "ExportOrchestrator",
    "ExportResult",
    "OutputSink",
    "WriteSummary",
    "encode_genesis",
    "load_genesis",
    "locate_genesis",
    "merge_genesis",
    "select_export_path",
]
