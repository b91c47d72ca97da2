"""
Classify a remote directory snapshot against the local inventory.

Reconciliation is one-directional: the directory is authoritative for which
numbers exist, so inventory rows missing from the directory are not reported.
"""

from collections.abc import Iterable

from src.workflows.schemas import (
    DiffResult,
    FieldDelta,
    PhoneNumberRecord,
    TrackedField,
    UpdateEntry,
)

TRACKED_FIELDS: tuple[TrackedField, ...] = (
    TrackedField.DISPLAY_NAME,
    TrackedField.USER_PRINCIPAL_NAME,
    TrackedField.POLICY,
)


def _value(record: PhoneNumberRecord, field: TrackedField) -> str | None:
    # Blank and missing are the same value
    return getattr(record, field.value) or None


def field_deltas(
    local: PhoneNumberRecord, remote: PhoneNumberRecord
) -> list[FieldDelta]:
    """Return one delta per tracked field that differs, in tracked order."""
    deltas = []
    for field in TRACKED_FIELDS:
        local_value = _value(local, field)
        remote_value = _value(remote, field)
        if local_value != remote_value:
            deltas.append(
                FieldDelta(field=field, local=local_value, remote=remote_value)
            )
    return deltas


def classify(
    remote: Iterable[PhoneNumberRecord], local: Iterable[PhoneNumberRecord]
) -> DiffResult:
    """
    Partition remote records into to_add, to_update and unchanged.

    Args:
        remote: Directory snapshot, in the order it should be presented
        local: Inventory snapshot; on duplicate line URIs the last row wins

    Returns:
        DiffResult: Classification with derived summary counts
    """
    local_by_uri: dict[str, PhoneNumberRecord] = {}
    local_total = 0
    for record in local:
        local_by_uri[record.line_uri] = record
        local_total += 1

    result = DiffResult(local_total=local_total)
    for record in remote:
        existing = local_by_uri.get(record.line_uri)
        if existing is None:
            result.to_add.append(record)
            continue

        deltas = field_deltas(existing, record)
        if deltas:
            result.to_update.append(
                UpdateEntry(
                    line_uri=record.line_uri,
                    local_id=existing.local_id,
                    remote=record,
                    deltas=deltas,
                )
            )
        else:
            result.unchanged.append(record)

    return result
