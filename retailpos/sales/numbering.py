"""
retailpos/sales/numbering.py
----------------------------
Concurrency-safe document numbers for sales and quotations.

Format:  <prefix>-YYYY-NNNN
Example: V-2026-0001 (sale), P-2026-0001 (quotation)

1. Lock the DocumentSequence row for (kind, year) with SELECT … FOR UPDATE.
   Concurrent commits block until the holder commits or rolls back.
2. If the row does not exist yet, insert it with last_seq = 0 and lock it.
3. Increment last_seq and return the formatted number.

The counter only advances when the surrounding commit succeeds, so a
rolled-back sale leaves no gap in the series.
"""
from datetime import datetime

from retailpos.sales.models import DocumentSequence, format_document_number


def _locked_sequence(db_session, kind: str, year: int):
    return (
        db_session.query(DocumentSequence)
        .filter(DocumentSequence.kind == kind, DocumentSequence.year == year)
        .with_for_update()
        .first()
    )


def next_document_number(db_session, kind: str) -> str:
    """
    Reserve the next number of ``kind`` for the current year.

    MUST be called inside the caller's open transaction; the row lock is
    held until that transaction ends.
    """
    year = datetime.now().year

    seq_row = _locked_sequence(db_session, kind, year)
    if seq_row is None:
        db_session.add(DocumentSequence(kind=kind, year=year, last_seq=0))
        db_session.flush()
        seq_row = _locked_sequence(db_session, kind, year)

    seq_row.last_seq += 1
    db_session.flush()

    return format_document_number(kind, year, seq_row.last_seq)
