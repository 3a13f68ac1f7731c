"""Main entry point for the grid Q-learning window."""

import logging
import os
import signal
import sys

from PySide6.QtWidgets import QApplication
from PySide6.QtCore import Qt

from .utils.log import configure_logging

logger = logging.getLogger(__name__)


def main():
    """Main entry point for the Q-learning demo application."""
    configure_logging(os.environ.get("GRIDQ_LOG_LEVEL", "INFO"))

    os.environ.setdefault('QT_AUTO_SCREEN_SCALE_FACTOR', '0')
    os.environ.setdefault('QT_LOGGING_RULES', 'qt.qpa.backingstore=false')
    QApplication.setHighDpiScaleFactorRoundingPolicy(Qt.HighDpiScaleFactorRoundingPolicy.Floor)

    app = QApplication(sys.argv)
    app.setApplicationName("Grid Q-Learning")
    app.setApplicationVersion("1.0.0")

    # Import UI components (after QApplication is created)
    from .ui.main_window import MainWindow
    from .app.controller import GridQController

    controller = GridQController()
    window = MainWindow(controller)

    def signal_handler(sig, frame):
        """Handle system signals for graceful shutdown."""
        logger.info("Received signal %s, shutting down", sig)
        controller.cleanup()
        window.close()
        app.quit()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        window.show()
        return app.exec()
    finally:
        controller.cleanup()


if __name__ == "__main__":
    sys.exit(main())
