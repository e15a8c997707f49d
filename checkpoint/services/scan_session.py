"""Camera capture and decode-stream gating for a scanner station."""
from __future__ import annotations

import threading
import unicodedata
from contextlib import suppress
from typing import Any, Callable, Iterable, Optional

from checkpoint.core.config import settings
from checkpoint.core.constants import MSG_CAMERA_DEPENDENCIES, MSG_CAMERA_UNAVAILABLE
from checkpoint.core.logging_config import get_logger

logger = get_logger(__name__)

Decoder = Callable[[Any], Iterable[Any]]


class CameraUnavailable(RuntimeError):
    """The capture device could not be acquired."""


def _decode_symbol_data(raw: bytes | str) -> str:
    if not raw:
        return ""

    if isinstance(raw, str):
        decoded = raw
    else:
        try:
            decoded = raw.decode("utf-8")
        except UnicodeDecodeError:
            decoded = raw.decode("utf-8", errors="ignore")

    normalized = unicodedata.normalize("NFC", decoded)
    return normalized.strip()


def _zxing_decoder(zxing_module) -> Decoder:
    def decode(frame) -> list[str]:
        results = zxing_module.read_barcodes(
            frame,
            formats=zxing_module.BarcodeFormat.QRCode,
            try_rotate=True,
            try_downscale=True,
        )
        texts = []
        for obj in results:
            if hasattr(obj, "valid") and not obj.valid:
                continue
            text = getattr(obj, "text", "") or getattr(obj, "bytes", b"")
            if text:
                texts.append(text)
        return texts

    return decode


class ScanSession:
    """Own the camera while scanning is active and gate decoded reads.

    The camera yields the same badge many times per second while it is held
    in frame. Each accepted read is handed to ``on_payload`` on a worker
    thread; until that call returns, every further read is dropped. There is
    no time-based debounce.

    ``capture_factory`` and ``decoder`` default to OpenCV and zxing-cpp and
    can be replaced, e.g. by a keyboard-wedge reader or in tests.
    """

    def __init__(
        self,
        on_payload: Callable[[str], Any],
        *,
        camera_index: Optional[int] = None,
        on_error: Optional[Callable[[str], None]] = None,
        capture_factory: Optional[Callable[[int], Any]] = None,
        decoder: Optional[Decoder] = None,
        scan_interval: Optional[float] = None,
    ) -> None:
        self._on_payload = on_payload
        self._on_error = on_error
        self._camera_index = settings.CAMERA_INDEX if camera_index is None else camera_index
        self._capture_factory = capture_factory
        self._decoder = decoder
        self._scan_interval = settings.SCAN_INTERVAL_SECONDS if scan_interval is None else scan_interval

        self._lock = threading.Lock()
        self._running = False
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

        self._flight_lock = threading.Lock()
        self._in_flight = False
        self._worker: threading.Thread | None = None
        self._suppressed = 0

        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> bool:
        """Acquire the camera and start the capture loop.

        Returns False, after reporting one coarse error, if the device or the
        decoding libraries are unavailable.
        """
        with self._lock:
            if self._running:
                return True

            decoder = self._decoder or self._load_default_decoder()
            if decoder is None:
                return False

            capture = self._open_capture()
            if capture is None:
                return False

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run_loop, args=(capture, decoder), daemon=True
            )
            self._running = True
            self._thread.start()

        logger.info("camera_started", camera_index=self._camera_index)
        return True

    def stop(self) -> None:
        with self._lock:
            if not self._running:
                return
            self._stop_event.set()
            thread = self._thread

        if thread and thread.is_alive():
            thread.join(timeout=2.0)
        self._thread = None

    @property
    def is_running(self) -> bool:
        return self._running

    def __enter__(self) -> "ScanSession":
        if not self.start():
            raise CameraUnavailable(self.last_error or MSG_CAMERA_UNAVAILABLE)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.stop()
        return False

    # ------------------------------------------------------------------
    # Read gating
    # ------------------------------------------------------------------
    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def suppressed_reads(self) -> int:
        return self._suppressed

    def feed(self, raw: bytes | str) -> bool:
        """Offer one decoded read. Returns True if it was dispatched."""
        payload = _decode_symbol_data(raw)
        if not payload:
            return False

        with self._flight_lock:
            if self._in_flight:
                self._suppressed += 1
                return False
            self._in_flight = True
            self._worker = threading.Thread(target=self._dispatch, args=(payload,), daemon=True)
            worker = self._worker

        worker.start()
        return True

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until the current dispatch finishes. Returns True if idle."""
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
        return not self._in_flight

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _dispatch(self, payload: str) -> None:
        try:
            self._on_payload(payload)
        except Exception:
            logger.exception("scan_callback_failed")
        finally:
            with self._flight_lock:
                self._in_flight = False

    def _run_loop(self, capture, decoder: Decoder) -> None:
        try:
            while not self._stop_event.is_set():
                ok, frame = capture.read()
                if not ok:
                    self._stop_event.wait(self._scan_interval)
                    continue

                try:
                    decoded = decoder(frame) or []
                except Exception as e:
                    logger.debug("frame_decode_failed", error=str(e))
                    decoded = []

                for raw in decoded:
                    self.feed(raw)

                self._stop_event.wait(self._scan_interval)
        finally:
            with suppress(Exception):
                capture.release()
            self._stop_event.clear()
            with self._lock:
                self._running = False
            logger.info("camera_released", camera_index=self._camera_index)

    def _report_error(self, message: str) -> None:
        self.last_error = message
        logger.warning("camera_unavailable", camera_index=self._camera_index, reason=message)
        if self._on_error:
            self._on_error(message)

    def _load_default_decoder(self) -> Optional[Decoder]:
        try:
            import zxingcpp  # type: ignore[import-not-found]
        except ImportError:
            self._report_error(MSG_CAMERA_DEPENDENCIES)
            return None
        return _zxing_decoder(zxingcpp)

    def _open_capture(self):
        if self._capture_factory is not None:
            try:
                capture = self._capture_factory(self._camera_index)
            except Exception as e:
                logger.debug("capture_factory_failed", error=str(e))
                capture = None
        else:
            try:
                import cv2  # type: ignore[import-not-found]
            except ImportError:
                self._report_error(MSG_CAMERA_DEPENDENCIES)
                return None
            capture = cv2.VideoCapture(self._camera_index)

        if capture is None or not capture.isOpened():
            if capture is not None:
                with suppress(Exception):
                    capture.release()
            self._report_error(MSG_CAMERA_UNAVAILABLE)
            return None

        return capture
