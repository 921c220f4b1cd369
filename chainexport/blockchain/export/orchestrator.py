# MIT License
# Copyright (c) 2025 Hashborn

"""
Export Orchestrator

Runs one export: locate genesis, resolve backend, open the application DB,
then either stream the genesis file verbatim (no exporter wired in) or ask
the exporter for state and write a merged genesis.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Optional, Protocol, Tuple

from pydantic import ValidationError

from ..config.app_options import AppOptions, ExportConfig
from ..observability.metrics import record_export
from ..storage.backends import resolve_backend
from ..storage.db import DriverRegistry, StoreHandle, open_db
from .locator import locate_genesis
from .merger import encode_genesis, load_genesis, merge_genesis
from .sink import OutputSink
from ...protocol.config.params import CURRENT_BUILD, BuildInfo
from ...protocol.types.common import ExportError, ExportFailedError, ExportPath, GenesisReadError
from ...protocol.types.genesis import ExportedState

logger = logging.getLogger(__name__)


class AppExporter(Protocol):
    """
    Application-supplied state export.

    for_zero_height, jail_allowed_addrs and modules_to_export are application
    policy: an empty modules_to_export means every registered module.
    """

    def export(
        self,
        store: StoreHandle,
        height: int,
        for_zero_height: bool,
        jail_allowed_addrs: Tuple[str, ...],
        modules_to_export: Tuple[str, ...],
        app_options: AppOptions,
    ) -> ExportedState: ...


class CallableExporter:
    """Adapts a plain function with the AppExporter.export signature."""

    def __init__(self, fn: Callable[..., Any]):
        self.fn = fn

    def export(self, store, height, for_zero_height, jail_allowed_addrs, modules_to_export, app_options):
        return self.fn(store, height, for_zero_height, jail_allowed_addrs, modules_to_export, app_options)


@dataclass(frozen=True)
class ExportResult:
    path: ExportPath
    output: str
    bytes_written: int
    sha256: str
    height: Optional[int] = None


def select_export_path(exporter: Optional[AppExporter]) -> ExportPath:
    if exporter is None:
        return ExportPath.VERBATIM_COPY
    return ExportPath.DELEGATED_EXPORT


class ExportOrchestrator:
    def __init__(
        self,
        exporter: Optional[AppExporter] = None,
        drivers: Optional[DriverRegistry] = None,
        build: Optional[BuildInfo] = None,
        stdout: Optional[BinaryIO] = None,
    ):
        """
        Args:
            exporter: State exporter, None to fall back to copying genesis
            drivers: Storage drivers (default: built-in registry)
            build: Identity stamped into exported genesis (default: this build)
            stdout: Binary stream used when no output document is set
        """
        self.exporter = exporter
        self.drivers = drivers
        self.build = build or CURRENT_BUILD
        self.stdout = stdout

    def run(self, config: ExportConfig) -> ExportResult:
        path = select_export_path(self.exporter)
        started = time.monotonic()
        try:
            result = self._run(config, path)
        except ExportError as e:
            record_export(path.value, type(e).__name__, time.monotonic() - started)
            raise
        record_export(path.value, "success", time.monotonic() - started, result.bytes_written)
        return result

    def _run(self, config: ExportConfig, path: ExportPath) -> ExportResult:
        genesis_file = locate_genesis(config.root_dir)
        backend = resolve_backend(config.app_db_backend, config.db_backend)
        store = open_db(config.root_dir, backend, self.drivers)
        try:
            if path is ExportPath.VERBATIM_COPY:
                return self._copy_genesis(genesis_file, config)
            return self._export(store, genesis_file, config)
        finally:
            store.close()

    def _sink(self, config: ExportConfig) -> OutputSink:
        return OutputSink.for_target(config.output_document, self.stdout)

    def _copy_genesis(self, genesis_file: Path, config: ExportConfig) -> ExportResult:
        logger.warning("App exporter not defined. Returning genesis file.")

        # Genesis can be large: stream it instead of reading it whole
        try:
            src = open(genesis_file, "rb")
        except OSError as e:
            raise GenesisReadError(f"failed to read genesis from {genesis_file}: {e}") from e
        with src:
            summary = self._sink(config).copy_from(src)

        return ExportResult(
            path=ExportPath.VERBATIM_COPY,
            output=summary.output,
            bytes_written=summary.bytes_written,
            sha256=summary.sha256,
        )

    def _export(self, store: StoreHandle, genesis_file: Path, config: ExportConfig) -> ExportResult:
        height_desc = "latest height" if config.height < 0 else f"height {config.height}"
        logger.info(
            f"Exporting state at {height_desc} "
            f"(for_zero_height={config.for_zero_height}, "
            f"modules={','.join(config.modules_to_export) or 'all'})"
        )

        try:
            exported = self.exporter.export(
                store,
                config.height,
                config.for_zero_height,
                config.jail_allowed_addrs,
                config.modules_to_export,
                AppOptions(config.app_options),
            )
            if not isinstance(exported, ExportedState):
                exported = ExportedState.model_validate(exported)
        except ValidationError as e:
            raise ExportFailedError(f"error exporting state: invalid exporter result: {e}") from e
        except Exception as e:
            raise ExportFailedError(f"error exporting state: {e}") from e

        source = load_genesis(genesis_file)
        merged = merge_genesis(source, exported, self.build)
        out = encode_genesis(merged)
        summary = self._sink(config).write_bytes(out)

        logger.info(
            f"Exported genesis for chain {merged.chain_id} at height {exported.height}: "
            f"{len(merged.consensus.validators)} validators, sha256={summary.sha256}"
        )
        return ExportResult(
            path=ExportPath.DELEGATED_EXPORT,
            output=summary.output,
            bytes_written=summary.bytes_written,
            sha256=summary.sha256,
            height=exported.height,
        )
