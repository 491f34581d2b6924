"""Scheduler: every interval, reconcile a repository with the remote."""

import logging
import threading
import time

from prwatch.repository import RepositorySync

LOG = logging.getLogger("prwatch.scheduler")


def run_poll_loop(sync: RepositorySync, interval_seconds: int = 300) -> None:
    """Loop: reconcile, then sleep interval_seconds. A failing tick does not stop the loop."""
    while True:
        try:
            sync.reconcile()
        except Exception as e:
            LOG.exception("Scheduler tick error for %s: %s", sync.name, e)
        time.sleep(interval_seconds)


def start_poll_thread(sync: RepositorySync, interval_seconds: int = 300) -> threading.Thread:
    """Start the poll loop of one repository in a daemon thread."""
    thread = threading.Thread(
        target=run_poll_loop,
        args=(sync,),
        kwargs={"interval_seconds": interval_seconds},
        name=f"poll-{sync.name}",
        daemon=True,
    )
    thread.start()
    return thread
