"""Non-null merge of a freshly fetched row into the latest known row.

Upstream responses are patchy: one call returns currents but not
chlorophyll, the next the reverse. A partial response must never erase a
value we already know, so data fields only move forward when the new value is
present. Bookkeeping fields always take the new value, so the row records that
an attempt happened even when it brought nothing new.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

BOOKKEEPING_FIELDS: frozenset[str] = frozenset({"last_attempt_at", "sources"})


def reconcile(
    prior: Mapping[str, Any] | None,
    new: Mapping[str, Any],
    bookkeeping: frozenset[str] = BOOKKEEPING_FIELDS,
) -> dict[str, Any]:
    """
    Merge ``new`` into ``prior``.

    Args:
        prior: Current persisted row, or None if the key is new.
        new: Freshly computed fields (may be partial, may contain None).
        bookkeeping: Fields that are always overwritten.

    Returns:
        The row to persist. With no prior row this is ``new`` verbatim.
        Idempotent: reconciling the same ``new`` twice gives the same row.
    """
    if prior is None:
        return dict(new)

    merged = dict(prior)
    for name, value in new.items():
        if name in bookkeeping or value is not None:
            merged[name] = value
    return merged
