"""
core.domain.transactions — Helpers for safe per-row writes.

Status changes and message appends on the same complaint must not
interleave.  Writers open ``transaction.atomic()`` and re-fetch the row
through ``lock_for_update`` before touching it, so concurrent writers
on one complaint are serialised by the database while writers on
different complaints proceed in parallel.

Usage::

    from django.db import transaction
    from core.domain.transactions import lock_for_update

    with transaction.atomic():
        locked = lock_for_update(Complaint, complaint.pk)
        locked.status = new_status
        locked.save(update_fields=["status", "updated_at"])
"""

from __future__ import annotations

from typing import Any, TypeVar

from django.db import models

from core.domain.exceptions import NotFoundError

M = TypeVar("M", bound=models.Model)


def lock_for_update(model_class: type[M], pk: Any) -> M:
    """
    Acquire a row-level lock on the given model instance.

    Convenience wrapper around ``select_for_update().get(pk=pk)``
    that must be called inside an ``atomic()`` block.

    Args:
        model_class: The Django model class.
        pk:          Primary key value.

    Returns:
        The locked model instance.

    Raises:
        NotFoundError: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFoundError(f"{model_class.__name__} with pk={pk} does not exist.")
