"""Registry of scanner stations served by this process."""
import threading
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from checkpoint.core.logging_config import get_logger
from checkpoint.services.dispatcher import ScanDispatcher

logger = get_logger(__name__)


class StationRegistry:
    """
    One ScanDispatcher per station id, created on first use.

    Dispatchers hold no participant data between scans, only the station's
    mode, selected session and last unacknowledged result.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory
        self._stations: Dict[str, ScanDispatcher] = {}
        self._lock = threading.Lock()

    def get(self, station_id: str) -> ScanDispatcher:
        with self._lock:
            dispatcher = self._stations.get(station_id)
            if dispatcher is None:
                dispatcher = ScanDispatcher(self._session_factory, station_id=station_id)
                self._stations[station_id] = dispatcher
                logger.info("station_registered", station_id=station_id)
            return dispatcher

    def statuses(self) -> List[Dict[str, Any]]:
        with self._lock:
            dispatchers = sorted(self._stations.values(), key=lambda d: d.station_id)
        return [dispatcher.status() for dispatcher in dispatchers]

    def __len__(self) -> int:
        return len(self._stations)
