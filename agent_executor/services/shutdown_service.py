"""Signal-driven stop for the executor loop."""

import logging
import signal

logger = logging.getLogger(__name__)

HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownService:
    """
    Turns SIGINT/SIGTERM into a cooperative stop of the cycle controller.

    A stop never interrupts an agent mid-trade: the agent being processed finishes
    (including any submitted transaction's confirmation), the remaining agents of the
    cycle are left for the next run, and no new cycle starts.
    """

    def __init__(self, cycle_controller):
        self.cycle_controller = cycle_controller
        self.requested = False

    def shutdown(self) -> None:
        """Request a stop. Repeated requests are logged and otherwise ignored."""
        if self.requested:
            logger.info("Shutdown already in progress, waiting for the current agent to finish")
            return

        self.requested = True
        logger.info("=" * 60)
        logger.info("SHUTDOWN REQUESTED: finishing the current agent, no further agents or cycles")
        logger.info("=" * 60)
        self.cycle_controller.stop()

    def register_signal_handlers(self) -> None:
        def handle(signum, frame):
            logger.info(f"Received {signal.Signals(signum).name}")
            self.shutdown()

        for signum in HANDLED_SIGNALS:
            signal.signal(signum, handle)

        logger.info(f"Signal handlers registered ({', '.join(s.name for s in HANDLED_SIGNALS)})")
