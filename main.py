"""
Chronomancer: Entry Point.

`python main.py` runs the timer daemon until interrupted. Optional flags arm
timers or take the stay-awake lease at startup:

    python main.py --suspend 30m
    python main.py --remind "Tea is ready" --in 4m
    python main.py --stay-awake
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from chronomancer.config import settings
from chronomancer.data.models import TimerKind
from chronomancer.utils.time import parse_duration

logger = logging.getLogger("chronomancer")

_POWER_FLAGS = {
    "suspend": TimerKind.SUSPEND,
    "logout": TimerKind.LOGOUT,
    "shutdown": TimerKind.SHUTDOWN,
    "reboot": TimerKind.REBOOT,
}


def _duration(text: str) -> int:
    try:
        return parse_duration(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chronomancer",
        description="Timed suspend, logout, shutdown and reboot, plus reminders.",
    )
    for flag, kind in _POWER_FLAGS.items():
        parser.add_argument(
            f"--{flag}", type=_duration, metavar="DURATION",
            help=f"{kind.value} after DURATION (e.g. 90s, 15m, 2h, 1d)",
        )
    parser.add_argument("--remind", metavar="TEXT", help="reminder text")
    parser.add_argument("--in", dest="remind_in", type=_duration, metavar="DURATION",
                        help="when the reminder fires")
    parser.add_argument("--stay-awake", action="store_true",
                        help="keep the system awake while running")
    return parser


async def run(args: argparse.Namespace) -> None:
    from chronomancer.app import ChronomancerApp

    app = ChronomancerApp()
    await app.start()

    for flag, kind in _POWER_FLAGS.items():
        seconds = getattr(args, flag)
        if seconds:
            app.set_power_timer(kind, seconds)
    if args.remind:
        app.add_reminder(args.remind, args.remind_in)
    if args.stay_awake:
        app.toggle_stay_awake()

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await stop.wait()
    await app.stop()


def main() -> None:
    """Entry point: parse flags, configure logging, run until interrupted."""
    parser = build_parser()
    args = parser.parse_args()
    if args.remind is not None:
        if not args.remind.strip():
            parser.error("--remind text must not be empty")
        if not args.remind_in:
            parser.error("--remind requires --in DURATION")
    elif args.remind_in is not None:
        parser.error("--in requires --remind TEXT")

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Chronomancer...")
    asyncio.run(run(args))


if __name__ == "__main__":
    main()
