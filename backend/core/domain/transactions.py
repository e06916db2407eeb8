"""
core.domain.transactions — Helpers for safe state transitions.

Provides utilities that wrap ``transaction.atomic`` and
``select_for_update`` into reusable patterns so that every app's
service layer follows the same concurrency-safe approach.

Design goals
------------
* Eliminate boilerplate around ``with transaction.atomic(): ...``
  inside service methods.
* Ensure that state-transition reads always lock the row first
  (``select_for_update``) to prevent interleaved writes leaving an
  inconsistent flag behind.
* Keep the helpers **generic** — they accept any Django ``Model``
  instance and the name of a boolean-returning capability method.

Usage::

    from core.domain.transactions import atomic_capability

    casa_case, succeeded = atomic_capability(
        instance=casa_case,
        capability="deactivate",
    )
"""

from __future__ import annotations

from typing import Any, TypeVar

from django.db import models, transaction

from core.domain.exceptions import NotFound

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
        NotFound: If no row with that PK exists.
    """
    try:
        return model_class.objects.select_for_update().get(pk=pk)
    except model_class.DoesNotExist:
        raise NotFound(f"{model_class.__name__} with pk={pk} does not exist.")


def atomic_capability(*, instance: M, capability: str) -> tuple[M, bool]:
    """
    Atomically invoke a boolean capability method on a locked row.

    Steps performed inside ``transaction.atomic()``:
        1. Re-fetch the instance with ``select_for_update()``.
        2. Call ``locked.<capability>()``.
        3. If it returns a falsy value, mark the transaction for
           rollback so no partial write survives.

    The caller's instance is refreshed from the database afterwards,
    whatever the outcome.

    Args:
        instance:   The model instance to transition.
        capability: Name of a zero-argument method returning ``bool``
                    (e.g. ``"deactivate"``).

    Returns:
        ``(instance, succeeded)``.

    Raises:
        NotFound: If the instance no longer exists in the DB.
    """
    model_class = type(instance)

    with transaction.atomic():
        locked = lock_for_update(model_class, instance.pk)
        succeeded = bool(getattr(locked, capability)())
        if not succeeded:
            transaction.set_rollback(True)

    instance.refresh_from_db()
    return instance, succeeded
