"""Run a camera scanner station from a terminal.

Usage:
    checkpoint-station --station gate-a --mode attendance --staff-id vol-17
    checkpoint-station --station canteen --mode food --session LUNCH_DAY1

Each scan result is printed and stays on screen until Enter is pressed,
which acknowledges it and re-arms the station.
"""
import argparse
import queue
import sys
from typing import List, Optional

from checkpoint.core.config import settings
from checkpoint.core.logging_config import get_logger, setup_logging
from checkpoint.core.sanitization import normalize_staff_id, sanitize_session_key
from checkpoint.db import SessionLocal
from checkpoint.services.dispatcher import ScanDispatcher, ScanMode, ScanResult
from checkpoint.services.scan_session import CameraUnavailable, ScanSession

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="checkpoint-station", description=__doc__.splitlines()[0])
    parser.add_argument("--station", default="default", help="Station identifier used in logs")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ScanMode],
        default=ScanMode.ATTENDANCE.value,
    )
    parser.add_argument(
        "--session", dest="session_key", type=sanitize_session_key, help="Meal session key for food mode"
    )
    parser.add_argument("--staff-id", help="Staff id stamped on every scan")
    parser.add_argument("--camera", type=int, default=settings.CAMERA_INDEX, help="Camera device index")
    return parser


def format_result(result: ScanResult) -> str:
    lines = ["SUCCESS" if result.success else "DENIED", result.message]
    if result.participant:
        lines.append(result.participant.name)
        if result.participant.team_name:
            lines.append(f"Team: {result.participant.team_name}")
        if result.mode is ScanMode.FOOD and result.participant.dietary_restrictions:
            lines.append(f"Dietary: {result.participant.dietary_restrictions}")
    return "\n".join(lines)


def run(args: argparse.Namespace) -> int:
    staff_id = normalize_staff_id(args.staff_id)
    session_key = args.session_key
    mode = ScanMode(args.mode)

    if mode is ScanMode.FOOD and not session_key:
        print("Food mode needs --session", file=sys.stderr)
        return 2

    dispatcher = ScanDispatcher(SessionLocal, station_id=args.station, mode=mode, session_key=session_key)
    results: "queue.Queue[ScanResult]" = queue.Queue()

    def on_payload(payload: str) -> None:
        result = dispatcher.process(payload, staff_id=staff_id)
        if result is not None:
            results.put(result)

    scanner = ScanSession(on_payload, camera_index=args.camera)

    try:
        with scanner:
            print(f"Scanning at station '{args.station}' ({mode.value}). Ctrl+C to stop.")
            while True:
                result = results.get()
                print()
                print(format_result(result))
                input("Press Enter to scan next...")
                dispatcher.reset()
    except CameraUnavailable as e:
        print(str(e), file=sys.stderr)
        return 1
    except (KeyboardInterrupt, EOFError):
        logger.info("station_stopped", station_id=args.station)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    setup_logging(level=settings.LOG_LEVEL, json=settings.LOG_JSON)
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
