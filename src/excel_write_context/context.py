"""The write context: the main anchorage point of a workbook writer.

A ``WriteContext`` owns the workbook holder, the current sheet and table
holders and whichever of them is the active configuration selector. Entering
a sheet or table either resumes a scope that was initialized earlier or
creates it, running the registered handlers around every creation.

Usage:
    context = WriteContext.create(WorkbookDescriptor(output="out.xlsx"))
    context.enter_sheet(SheetDescriptor(sheet_no=0, head=[["Name"], ["Age"]]))
    context.finish()
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any
from uuid import uuid4

from excel_write_context.backend import DocumentBackend, OpenpyxlBackend
from excel_write_context.config import Settings, settings
from excel_write_context.metadata.descriptors import (
    SheetDescriptor,
    TableDescriptor,
    WorkbookDescriptor,
)
from excel_write_context.metadata.head import HeadProperty
from excel_write_context.metadata.holders import (
    ConfigurationSelector,
    SheetHolder,
    TableHolder,
    WorkbookHolder,
)
from excel_write_context.utils.exceptions import (
    DocumentCreationError,
    FinalizationError,
    InvalidArgumentError,
    InvalidStateError,
    SheetNotFoundError,
)
from excel_write_context.utils.logging import (
    LogContext,
    PerformanceMetrics,
    configure_logging_from_settings,
    get_logger,
    timed_operation,
)
from excel_write_context.write.dispatch import HookDispatcher
from excel_write_context.write.handler import HookKind
from excel_write_context.write.head_writer import HeadWriter
from excel_write_context.write.rows import ActiveScope, RowEmitter

logger = get_logger(__name__)


class ContextState(str, Enum):
    """Lifecycle states of a write context."""

    UNINITIALIZED = "uninitialized"
    WORKBOOK_ACTIVE = "workbook_active"
    SHEET_ACTIVE = "sheet_active"
    TABLE_ACTIVE = "table_active"
    CLOSED = "closed"


# Active sheet, table, selector and state, restored when a scope creation fails.
_ScopeSnapshot = tuple[
    SheetHolder | None, TableHolder | None, ConfigurationSelector | None, ContextState
]


class WriteContext:
    """Stages a workbook through nested workbook, sheet and table scopes.

    Single-threaded: one context exclusively owns one backing document from
    ``open`` until ``finish``.
    """

    def __init__(
        self,
        backend: DocumentBackend | None = None,
        config: Settings | None = None,
    ) -> None:
        self._backend: DocumentBackend = backend or OpenpyxlBackend()
        self._config = config
        configure_logging_from_settings(config or settings)
        self._dispatcher = HookDispatcher()
        self._state = ContextState.UNINITIALIZED
        self.write_id = uuid4().hex[:12]
        self.metrics = PerformanceMetrics(operation="write")
        self._emitter = RowEmitter(self._backend, self._dispatcher, self.metrics)
        self._head_writer = HeadWriter(self._backend, self._emitter, self.metrics)

        self._current_workbook_holder: WorkbookHolder | None = None
        self._current_sheet_holder: SheetHolder | None = None
        self._current_table_holder: TableHolder | None = None
        self._current_configuration_selector: ConfigurationSelector | None = None

    @classmethod
    def create(
        cls,
        workbook: WorkbookDescriptor | None,
        backend: DocumentBackend | None = None,
        config: Settings | None = None,
    ) -> WriteContext:
        """Construct a context and open ``workbook`` in one step."""
        context = cls(backend=backend, config=config)
        context.open(workbook)
        return context

    # ------------------------------------------------------------------ #
    # Workbook scope
    # ------------------------------------------------------------------ #

    def open(self, workbook: WorkbookDescriptor | None) -> None:
        """Create the workbook holder and materialize the backing document.

        Raises:
            InvalidArgumentError: If ``workbook`` or its output is missing.
            InvalidStateError: If the context was already opened.
            DocumentCreationError: If the backend cannot open or create it.
        """
        if self._state is not ContextState.UNINITIALIZED:
            raise InvalidStateError(
                "Write context has already been opened",
                state=self._state.value,
                operation="open",
            )
        if workbook is None:
            raise InvalidArgumentError(
                "Workbook argument cannot be null", argument="workbook"
            )
        if workbook.output is None:
            raise InvalidArgumentError(
                "Workbook output cannot be null", argument="workbook.output"
            )

        with LogContext(write_id=self.write_id):
            logger.debug("Begin to initialize write context")
            self._init_current_workbook_holder(workbook)
            holder = self.current_workbook_holder()
            handlers = holder.handlers(HookKind.WORKBOOK)
            try:
                self._dispatcher.before_workbook_create(handlers)
                try:
                    holder.workbook = self._backend.create_or_open(workbook)
                except Exception as exc:
                    raise DocumentCreationError(
                        f"Create workbook failure: {exc}",
                        template=_describe(workbook.template),
                    ) from exc
                self._dispatcher.after_workbook_create(handlers, holder)
            except Exception:
                self._state = ContextState.CLOSED
                self._release_streams(holder, [])
                raise
            self._state = ContextState.WORKBOOK_ACTIVE
            logger.debug("Write context initialized")

    def _init_current_workbook_holder(self, workbook: WorkbookDescriptor) -> None:
        self._current_workbook_holder = WorkbookHolder(workbook, self._config)
        self._current_configuration_selector = self._current_workbook_holder
        logger.debug("Configuration selector is workbook holder")

    # ------------------------------------------------------------------ #
    # Sheet scope
    # ------------------------------------------------------------------ #

    def enter_sheet(self, sheet: SheetDescriptor | None) -> SheetHolder:
        """Make ``sheet`` the active scope, creating it on first use.

        A sheet index seen before resumes the cached holder: no handlers run
        and no header is written again.

        Raises:
            InvalidArgumentError: If ``sheet`` is None.
            InvalidStateError: If the context is not open.
        """
        self._require_open("enter_sheet")
        if sheet is None:
            raise InvalidArgumentError("Sheet argument cannot be null", argument="sheet")

        sheet_no = _normalize_index(sheet.sheet_no)
        workbook_holder = self.current_workbook_holder()

        with LogContext(write_id=self.write_id, sheet_no=sheet_no):
            cached = workbook_holder.has_been_initialized_sheet.get(sheet_no)
            if cached is not None:
                logger.debug("Sheet already exists, resuming")
                cached.new_initialization = False
                self._current_sheet_holder = cached
                self._current_table_holder = None
                self._current_configuration_selector = cached
                self._state = ContextState.SHEET_ACTIVE
                logger.debug("Configuration selector is sheet holder")
                return cached

            previous = self._snapshot()
            holder = self._init_current_sheet_holder(sheet, sheet_no)
            self._state = ContextState.SHEET_ACTIVE
            try:
                sheet_handlers = holder.handlers(HookKind.SHEET)
                self._dispatcher.before_sheet_create(
                    sheet_handlers, workbook_holder, holder
                )
                self._init_sheet(holder)
                self._dispatcher.after_sheet_create(
                    sheet_handlers, workbook_holder, holder
                )
                self._dispatcher.notify_sheet(
                    workbook_holder.write_handler, holder.sheet_no, holder.sheet
                )
            except Exception:
                del workbook_holder.has_been_initialized_sheet[sheet_no]
                self._restore(previous)
                logger.debug("Sheet creation failed, previous scope restored")
                raise
            return holder

    def _init_current_sheet_holder(
        self, sheet: SheetDescriptor, sheet_no: int
    ) -> SheetHolder:
        workbook_holder = self.current_workbook_holder()
        holder = SheetHolder(sheet, sheet_no, workbook_holder)
        workbook_holder.has_been_initialized_sheet[sheet_no] = holder
        self._current_sheet_holder = holder
        self._current_table_holder = None
        self._current_configuration_selector = holder
        logger.debug("Configuration selector is sheet holder")
        return holder

    def _init_sheet(self, holder: SheetHolder) -> None:
        document = self.current_workbook_holder().workbook
        try:
            holder.sheet = self._backend.sheet_at(document, holder.sheet_no)
        except SheetNotFoundError:
            logger.debug("Can not find sheet, creating it")
            holder.sheet = self._backend.create_sheet(
                document, holder.descriptor, holder.sheet_no
            )
            self.metrics.sheets_created += 1
        holder.head_property = HeadProperty.from_head(holder.head)
        self._head_writer.write_head(self._active_scope(), holder.head_property)

    # ------------------------------------------------------------------ #
    # Table scope
    # ------------------------------------------------------------------ #

    def enter_table(self, table: TableDescriptor | None) -> TableHolder | None:
        """Make ``table`` the active scope within the current sheet.

        ``None`` is a no-op and returns the current table holder. Table
        creation writes the table's header but runs no sheet handlers.

        Raises:
            InvalidStateError: If no sheet is active or the context is closed.
        """
        self._require_open("enter_table")
        if table is None:
            return self._current_table_holder
        sheet_holder = self._current_sheet_holder
        if sheet_holder is None:
            raise InvalidStateError(
                "A sheet must be entered before a table",
                state=self._state.value,
                operation="enter_table",
            )

        table_no = _normalize_index(table.table_no)
        with LogContext(
            write_id=self.write_id, sheet_no=sheet_holder.sheet_no, table_no=table_no
        ):
            cached = sheet_holder.has_been_initialized_table.get(table_no)
            if cached is not None:
                logger.debug("Table already exists, resuming")
                cached.new_initialization = False
                self._current_table_holder = cached
                self._current_configuration_selector = cached
                self._state = ContextState.TABLE_ACTIVE
                logger.debug("Configuration selector is table holder")
                return cached

            previous = self._snapshot()
            holder = TableHolder(table, table_no, sheet_holder)
            sheet_holder.has_been_initialized_table[table_no] = holder
            self._current_table_holder = holder
            self._current_configuration_selector = holder
            self._state = ContextState.TABLE_ACTIVE
            logger.debug("Configuration selector is table holder")

            try:
                holder.head_property = HeadProperty.from_head(holder.head)
                self._head_writer.write_head(
                    self._active_scope(), holder.head_property
                )
            except Exception:
                del sheet_holder.has_been_initialized_table[table_no]
                self._restore(previous)
                logger.debug("Table creation failed, previous scope restored")
                raise
            self.metrics.tables_created += 1
            return holder

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def backend(self) -> DocumentBackend:
        return self._backend

    @property
    def emitter(self) -> RowEmitter:
        return self._emitter

    def current_configuration_selector(self) -> ConfigurationSelector:
        if self._current_configuration_selector is None:
            raise InvalidStateError(
                "Write context has not been opened",
                state=self._state.value,
                operation="current_configuration_selector",
            )
        return self._current_configuration_selector

    def current_workbook_holder(self) -> WorkbookHolder:
        if self._current_workbook_holder is None:
            raise InvalidStateError(
                "Write context has not been opened",
                state=self._state.value,
                operation="current_workbook_holder",
            )
        return self._current_workbook_holder

    def current_sheet_holder(self) -> SheetHolder | None:
        return self._current_sheet_holder

    def current_table_holder(self) -> TableHolder | None:
        return self._current_table_holder

    def active_scope(self) -> ActiveScope:
        """Snapshot of the active sheet or table scope, for writing rows."""
        self._require_open("active_scope")
        return self._active_scope()

    def _active_scope(self) -> ActiveScope:
        if self._current_sheet_holder is None:
            raise InvalidStateError(
                "No sheet is active",
                state=self._state.value,
                operation="active_scope",
            )
        return ActiveScope(
            selector=self.current_configuration_selector(),
            workbook_holder=self.current_workbook_holder(),
            sheet_holder=self._current_sheet_holder,
            table_holder=self._current_table_holder,
        )

    # ------------------------------------------------------------------ #
    # Finalization
    # ------------------------------------------------------------------ #

    def finish(self) -> None:
        """Write the document to its output and release everything owned.

        Every step is attempted even when an earlier one fails; the first
        failure is raised once all steps have run.

        Raises:
            InvalidStateError: If the context is not open (including a
                second call to ``finish``).
            FinalizationError: If any flush or close step failed.
        """
        self._require_open("finish")
        holder = self.current_workbook_holder()
        self._state = ContextState.CLOSED

        with LogContext(write_id=self.write_id):
            with timed_operation(logger, "write", self.metrics):
                failures: list[tuple[str, Exception]] = []
                self._run_step(
                    "write",
                    lambda: self._backend.write(holder.workbook, holder.output),
                    failures,
                )
                self._run_step(
                    "close_workbook",
                    lambda: self._backend.close(holder.workbook),
                    failures,
                )
                self._release_streams(holder, failures)

            if failures:
                step, first = failures[0]
                raise FinalizationError(
                    f"Can not close IO: {first}",
                    step=step,
                    failed_steps=[name for name, _ in failures],
                ) from first
            logger.debug("Finished write")

    def _release_streams(
        self, holder: WorkbookHolder, failures: list[tuple[str, Exception]]
    ) -> None:
        if not holder.auto_close_stream:
            return
        for step, stream in (
            ("close_output", holder.output),
            ("close_template", holder.template),
        ):
            close = getattr(stream, "close", None)
            if close is not None:
                self._run_step(step, close, failures)

    def _run_step(
        self,
        step: str,
        action: Callable[[], Any],
        failures: list[tuple[str, Exception]],
    ) -> None:
        try:
            action()
        except Exception as exc:
            logger.error("Finalization step failed", step=step, error=str(exc))
            failures.append((step, exc))

    def _snapshot(self) -> _ScopeSnapshot:
        return (
            self._current_sheet_holder,
            self._current_table_holder,
            self._current_configuration_selector,
            self._state,
        )

    def _restore(self, snapshot: _ScopeSnapshot) -> None:
        (
            self._current_sheet_holder,
            self._current_table_holder,
            self._current_configuration_selector,
            self._state,
        ) = snapshot

    def _require_open(self, operation: str) -> None:
        if self._state in (ContextState.UNINITIALIZED, ContextState.CLOSED):
            raise InvalidStateError(
                f"Cannot {operation} while write context is {self._state.value}",
                state=self._state.value,
                operation=operation,
            )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> WriteContext:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if self._state in (ContextState.UNINITIALIZED, ContextState.CLOSED):
            return
        if exc_type is None:
            self.finish()
            return
        try:
            self.finish()
        except FinalizationError:
            logger.exception("Finalization failed while handling another error")


def _normalize_index(index: int | None) -> int:
    if index is None or index <= 0:
        return 0
    return index


def _describe(source: Any) -> str | None:
    if source is None:
        return None
    return str(getattr(source, "name", source))
