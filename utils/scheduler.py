"""
One-shot, cancellable timers with the after/after_cancel shape of Tk.

Callbacks run on daemon timer threads; callers guard their own state.
"""

import itertools
import logging
import threading

logger = logging.getLogger(__name__)


class TimerScheduler:

    def __init__(self):
        self._jobs = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def after(self, delay_ms, callback):
        job_id = next(self._ids)
        timer = threading.Timer(delay_ms / 1000.0, self._run, args=(job_id, callback))
        timer.daemon = True
        with self._lock:
            self._jobs[job_id] = timer
        timer.start()
        return job_id

    def after_cancel(self, job_id):
        with self._lock:
            timer = self._jobs.pop(job_id, None)
        if timer is not None:
            timer.cancel()

    def cancel_all(self):
        with self._lock:
            timers = list(self._jobs.values())
            self._jobs.clear()
        for timer in timers:
            timer.cancel()

    def _run(self, job_id, callback):
        with self._lock:
            if self._jobs.pop(job_id, None) is None:
                return  # cancelled
        try:
            callback()
        except Exception:
            logger.exception("[ERROR] Timer callback %s failed", job_id)
