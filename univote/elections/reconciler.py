# univote/elections/reconciler.py

import logging
import threading

from univote.clock import SystemClock
from univote.elections.status import reconcile_statuses
from univote.extensions import db

logger = logging.getLogger(__name__)


class StatusReconciler:
    """
    Background sweep that keeps each election's stored status in line with the
    clock. Owned by the application: ``start()`` runs one sweep immediately and
    then one every ``interval`` seconds on a daemon thread until ``stop()``.
    """

    def __init__(self, app, clock=None, interval=300):
        self.app = app
        self.clock = clock or SystemClock()
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread = None

    @property
    def running(self):
        return self._thread is not None and self._thread.is_alive()

    def run_once(self):
        with self.app.app_context():
            try:
                return reconcile_statuses(self.clock.now())
            except Exception:
                # The loop must outlive a failed sweep; the next one retries
                db.session.rollback()
                logger.exception("Error syncing election statuses")
                return None

    def start(self):
        if self.running:
            return
        self._stop_event.clear()
        self.run_once()
        self._thread = threading.Thread(target=self._loop, name="election-status-sync", daemon=True)
        self._thread.start()
        logger.info("Election status scheduler started (runs every %s seconds)", self.interval)

    def stop(self, timeout=5):
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _loop(self):
        while not self._stop_event.wait(self.interval):
            self.run_once()
