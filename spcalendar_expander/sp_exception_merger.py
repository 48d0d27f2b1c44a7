"""Exception reconciliation for expanded SharePoint recurrences.

This module applies deleted and modified occurrence records to the candidate
instances generated for a series. Records are joined to the series by
series_id and to a candidate by the candidate's exact original start.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from .sp_models import Appointment, DeletedInstance, ModifiedInstance, RecurrenceInstance

logger = logging.getLogger(__name__)


class ExceptionMerger:
    """Handles suppression and splicing of exception records for one series."""

    def merge(
        self,
        base: Appointment,
        candidates: list[RecurrenceInstance],
        exceptions: Iterable[Appointment],
    ) -> list[RecurrenceInstance]:
        """Reconcile candidates against the series' exception records.

        This method:
        1. Collects deleted and modified records that reference base.id
        2. Removes every candidate whose start equals a recorded original date
        3. Splices in each matched modified occurrence with its own start/end
        4. Re-sorts by start, since a modified occurrence may have moved

        Records that reference another series, or whose original date matches no
        candidate, are ignored.

        Args:
            base: Series master the candidates were generated from
            candidates: Generated instances in ascending start order
            exceptions: Exception appointments (deleted or modified markers)

        Returns:
            Final instances in ascending start order
        """
        deleted, modified = self._collect_exceptions(base.id, exceptions)
        if not deleted and not modified:
            return list(candidates)

        overridden = deleted | set(modified)
        filtered = [c for c in candidates if c.start not in overridden]
        matched = {c.start for c in candidates if c.start in overridden}

        spliced = [
            RecurrenceInstance(id=base.id, start=occurrence.start, end=occurrence.end)
            for original_date, occurrence in modified.items()
            if original_date in matched
        ]

        unmatched = len(overridden - matched)
        if unmatched:
            logger.debug(
                "Series %d: ignored %d exception(s) with no matching occurrence",
                base.id,
                unmatched,
            )
        logger.debug(
            "Series %d: suppressed %d occurrence(s), spliced %d modified",
            base.id,
            len(matched),
            len(spliced),
        )

        return sorted(filtered + spliced, key=lambda instance: instance.start)

    def _collect_exceptions(
        self, series_id: int, exceptions: Iterable[Appointment]
    ) -> tuple[set[datetime], dict[datetime, Appointment]]:
        """Split the series' exception records into deleted dates and modified items.

        Returns:
            Tuple of (deleted original dates, original date -> modified appointment)
        """
        deleted: set[datetime] = set()
        modified: dict[datetime, Appointment] = {}

        for exception in exceptions:
            marker = exception.recurrence
            if not isinstance(marker, (DeletedInstance, ModifiedInstance)):
                continue
            if marker.series_id != series_id:
                continue
            if isinstance(marker, DeletedInstance):
                deleted.add(marker.occurrence_date)
            else:
                modified[marker.occurrence_date] = exception

        return deleted, modified
