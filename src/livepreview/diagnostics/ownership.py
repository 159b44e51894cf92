"""Decide which listeners belong to the current process."""

from __future__ import annotations

from collections.abc import Iterable

from livepreview.models import ClassifiedListener, ListenerRecord


def classify(records: Iterable[ListenerRecord], self_pid: int) -> tuple[ClassifiedListener, ...]:
    """Label each record with whether its PID is ``self_pid``.

    Records with an unknown PID are never treated as our own. PID equality is
    sound at a single instant only: a PID freed and reused between the OS query
    and this comparison would be misattributed. That window is accepted.
    """
    return tuple(
        ClassifiedListener(record=record, is_self=record.pid is not None and record.pid == self_pid)
        for record in records
    )
