"""Celery tasks for the entity lifecycle."""

from __future__ import annotations

from celery import shared_task

from .scheduler import build_purge_scheduler


@shared_task(name="lifecycle.run_purge_sweep")
def run_purge_sweep() -> dict | None:
    """
    Hard-delete listings and posts whose retention window has elapsed.
    Returns the sweep summary, or None when another sweep was still running.
    """
    result = build_purge_scheduler().trigger()
    if result is None:
        return None
    return result.as_dict()
