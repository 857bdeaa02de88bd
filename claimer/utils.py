import asyncio
import datetime
import signal


def stop_on_signals() -> asyncio.Event:
    """
    Returns an event set on SIGINT or SIGTERM. Runs check it before dispatching
    the next entry, so the call in flight completes and the partial report is kept.
    Must be called from inside the running event loop
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def request_stop() -> None:
        if not stop.is_set():
            print("🛑 Stopping after the calls in flight, send again to force")
            stop.set()
        else:
            raise KeyboardInterrupt

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, request_stop)
    return stop


def run_name(prefix: str) -> str:
    """Unique directory name for a run's reports, eg: `claims-20231001T120000`"""
    now = datetime.datetime.now(datetime.timezone.utc)
    return f"{prefix}-{now.strftime('%Y%m%dT%H%M%S')}"
