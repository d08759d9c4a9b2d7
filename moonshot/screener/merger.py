"""Join per-source partial records into one UnifiedRecord per identifier."""

from __future__ import annotations

from typing import Iterable, Sequence

from moonshot.screener.models import AuxiliaryRecord, Identifier, PriceRecord, UnifiedRecord


def _index(records: Iterable[AuxiliaryRecord]) -> dict[Identifier, AuxiliaryRecord]:
    lookup: dict[Identifier, AuxiliaryRecord] = {}
    for record in records:
        lookup.setdefault(record.id, record)
    return lookup


def merge_records(
    prices: Sequence[PriceRecord],
    *auxiliary: Sequence[AuxiliaryRecord],
) -> list[UnifiedRecord]:
    """Merge auxiliary source results into the price universe.

    The price list is authoritative: only its identifiers produce output, and
    auxiliary entries for any other id are dropped. A field that is already
    set (by the price source or an earlier auxiliary source) is never
    overwritten. A failed auxiliary source is passed as an empty sequence.
    """
    lookups = [_index(records) for records in auxiliary]

    merged: list[UnifiedRecord] = []
    seen: set[Identifier] = set()
    for price in prices:
        if price.id in seen:
            continue
        seen.add(price.id)

        fields = price.model_dump()
        for lookup in lookups:
            extra = lookup.get(price.id)
            if extra is None:
                continue
            for name, value in extra:
                if name == "id" or value is None:
                    continue
                if fields.get(name) in (None, ()):
                    fields[name] = value

        merged.append(UnifiedRecord(**fields))

    return merged
