"""
utils/collection_feed.py
-----------------
Push-style updates of a query on one collection. Drives the attendance
watcher and keeps the kiosk student cache in step with `students`.

A MongoDB change stream on the collection triggers a re-query; servers that
cannot open change streams (standalone mongod) are polled instead.
on_update always receives the complete, freshly queried list, and only when
it differs from the previous one.
"""

import logging
import threading

from pymongo.errors import OperationFailure, PyMongoError

logger = logging.getLogger(__name__)


class CollectionFeed:

    def __init__(self, collection_fn, poll_seconds=2.0, await_ms=1000):
        self.collection_fn = collection_fn
        self.poll_seconds = poll_seconds
        self.await_ms = await_ms

    def subscribe(self, query_fn, on_update):
        """Start delivering updates in a background thread. Returns an unsubscribe function."""
        stop = threading.Event()
        thread = threading.Thread(
            target=self._run, args=(query_fn, on_update, stop), name="collection-feed", daemon=True
        )
        thread.start()

        def unsubscribe():
            stop.set()
            thread.join(timeout=self.poll_seconds + self.await_ms / 1000.0 + 1)

        return unsubscribe

    @staticmethod
    def poll_once(query_fn, on_update, last=None):
        records = query_fn()
        snapshot = [r.to_json() for r in records]
        if snapshot != last:
            on_update(records)
        return snapshot

    def _run(self, query_fn, on_update, stop):
        try:
            last = self.poll_once(query_fn, on_update)
            try:
                self._watch(query_fn, on_update, stop, last)
            except OperationFailure as e:
                logger.info("[FEED] Change streams unavailable (%s); polling every %ss", e, self.poll_seconds)
                self._poll(query_fn, on_update, stop, last)
        except PyMongoError as e:
            logger.error("[ERROR] Subscription stopped: %s", e)

    def _watch(self, query_fn, on_update, stop, last):
        with self.collection_fn().watch(max_await_time_ms=self.await_ms) as stream:
            while not stop.is_set() and stream.alive:
                if stream.try_next() is not None:
                    last = self.poll_once(query_fn, on_update, last)

    def _poll(self, query_fn, on_update, stop, last):
        while not stop.wait(self.poll_seconds):
            last = self.poll_once(query_fn, on_update, last)
