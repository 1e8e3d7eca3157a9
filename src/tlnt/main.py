"""Main entry point for the tlnt server."""

import asyncio
import signal

import structlog

from tlnt.config import get_settings
from tlnt.logging_config import configure_logging
from tlnt.network import ResourceRegistry, TelnetServer

logger = structlog.get_logger(__name__)


async def main() -> None:
    """
    Main async entry point.

    Starts the Telnet server and runs until SIGINT/SIGTERM.
    """
    settings = get_settings()
    registry = ResourceRegistry()
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()

    def signal_handler(sig: int) -> None:
        """Handle shutdown signals."""
        logger.info(
            "shutdown_signal_received",
            signal=signal.Signals(sig).name,
        )
        shutdown.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, signal_handler, sig)
        except (NotImplementedError, ValueError):
            # Some signals may not be available on all platforms
            logger.debug("signal_handler_unavailable", signal=signal.Signals(sig).name)

    try:
        async with TelnetServer(registry, settings) as server:
            logger.info(
                "tlnt_running",
                host=settings.host,
                port=server.port,
                message="Telnet server is running. Press Ctrl+C to stop.",
            )
            await shutdown.wait()
    except Exception as e:
        logger.error(
            "main_loop_error",
            error=str(e),
            exc_info=True,
        )
        raise


def run() -> None:
    """
    Synchronous entry point that runs the async main function.

    This is the function that should be called from the command line.
    """
    configure_logging()
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("server_stopped_by_user")


if __name__ == "__main__":
    run()
