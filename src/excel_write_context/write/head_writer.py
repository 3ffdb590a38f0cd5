"""Header block layout: merged regions, header rows and header cells."""

from __future__ import annotations

from excel_write_context.backend import DocumentBackend
from excel_write_context.metadata.head import HeadProperty
from excel_write_context.utils.logging import PerformanceMetrics, get_logger
from excel_write_context.write.rows import ActiveScope, RowEmitter

logger = get_logger(__name__)


class HeadWriter:
    """Emit the header block of a sheet or table scope.

    The block starts ``relative_head_row_index`` rows below the last written
    row. Merged regions are declared relative to the block and are moved to
    its starting row before the rows are created.
    """

    def __init__(
        self,
        backend: DocumentBackend,
        emitter: RowEmitter,
        metrics: PerformanceMetrics,
    ) -> None:
        self._backend = backend
        self._emitter = emitter
        self._metrics = metrics

    def write_head(self, scope: ActiveScope, head_property: HeadProperty) -> int:
        """Write the header block if the scope requires one.

        Returns:
            The number of header rows written.
        """
        if not scope.selector.need_head() or not head_property.has_head():
            return 0

        sheet = scope.sheet
        start_row = (
            self._backend.last_row_index(sheet)
            + 1
            + scope.selector.relative_head_row_index()
        )
        logger.debug(
            "Writing head",
            start_row=start_row,
            rows=head_property.head_row_number,
            columns=len(head_property.head_list),
        )

        for cell_range in head_property.cell_ranges():
            self._backend.add_merged_region(sheet, cell_range.translate(start_row))
            self._metrics.merged_regions += 1

        heads = head_property.head_list
        for relative_row_index in range(head_property.head_row_number):
            self._emitter.emit_row(
                scope,
                row_index=start_row + relative_row_index,
                relative_row_index=relative_row_index,
                values=head_property.head_by_row(relative_row_index),
                heads=heads,
                is_head=True,
            )
        return head_property.head_row_number
