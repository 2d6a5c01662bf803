# =============================================================================
# L3 World Model - Shared World Base
# =============================================================================
# Common functionality of the three world layers: the pose lock, the
# collection lock and synchronous listener notification.
# =============================================================================

import threading
from typing import Callable, List

from loguru import logger

MapListener = Callable[[], None]


class SharedWorld:
    """
    Base class for lock-protected world stores.

    Scalar pose fields are guarded by ``_pose_lock`` and only touched through
    getters and setters. Accumulating collections are guarded by
    ``collection_lock``; it is held only around structural mutation, so an
    external reader must acquire it before iterating a collection.

    Listeners are called on the mutating thread after every lock has been
    released. They must be fast and non-blocking.
    """

    def __init__(self, width: float, height: float):
        self.width = width
        self.height = height
        self._pose_lock = threading.Lock()
        self._collection_lock = threading.Lock()
        self._listeners: List[MapListener] = []

    @property
    def collection_lock(self) -> threading.Lock:
        """Lock an observer must hold while iterating this world's lists."""
        return self._collection_lock

    # =========================================================================
    # Listener methods
    # =========================================================================

    def add_listener(self, listener: MapListener):
        """Register a callback alerted after every change. Duplicates are ignored."""
        if listener in self._listeners:
            return
        self._listeners.append(listener)

    def remove_listener(self, listener: MapListener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _alert_listeners(self):
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception(f"{type(self).__name__} listener {listener!r} failed")
                raise
