"""
Main Entry Point for Rotation Scheduler

Wires the worker registry, scheduler, exporter and GUI together and provides
application-wide logging and error handling.
"""

import sys
import logging
import traceback
from pathlib import Path
from datetime import datetime
from tkinter import messagebox

from rotation_scheduler.data_manager import WorkerRegistry
from rotation_scheduler.scheduler_logic import ShiftScheduler, SCHEDULE_DAYS
from rotation_scheduler.reporting import ExportManager

REQUIRED_MODULES = [
    'customtkinter',
    'pandas',
    'openpyxl',
    'reportlab',
    'PIL'  # Pillow
]


def setup_logging(log_dir: Path = Path("logs")):
    """Setup application logging"""
    log_dir.mkdir(exist_ok=True)

    log_file = log_dir / f"rotation_scheduler_{datetime.now().strftime('%Y%m%d')}.log"

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )

    return logging.getLogger(__name__)


def check_dependencies():
    """Check if all required dependencies are available"""
    missing_modules = []

    for module in REQUIRED_MODULES:
        try:
            __import__(module)
        except ImportError:
            missing_modules.append(module)

    if missing_modules:
        error_msg = f"Missing required dependencies: {', '.join(missing_modules)}\n"
        error_msg += "Please install them using: pip install -e ."
        raise ImportError(error_msg)


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger = logging.getLogger(__name__)
    logger.error(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback)
    )

    # Show error dialog if GUI is available
    try:
        error_msg = f"An unexpected error occurred:\n\n{exc_type.__name__}: {exc_value}"
        messagebox.showerror("Application Error", error_msg)
    except Exception as dialog_error:
        logger.error(f"Could not show error dialog: {dialog_error}")


class RotationSchedulerApp:
    """Main application class"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.registry = None
        self.scheduler = None
        self.export_manager = None
        self.main_window = None
        self.init_error = None

    def initialize(self) -> bool:
        """Initialize application components"""
        try:
            self.logger.info("Initializing Rotation Scheduler Application")

            check_dependencies()
            self.logger.info("All dependencies available")

            self.registry = WorkerRegistry(schedule_days=SCHEDULE_DAYS)
            self.logger.info(f"Worker registry initialized, start date {self.registry.start_date}")

            self.scheduler = ShiftScheduler(self.registry)
            self.export_manager = ExportManager(self.registry)
            self.logger.info("Scheduler and export manager initialized")

            return True

        except Exception as e:
            self.init_error = e
            self.logger.error(f"Failed to initialize application: {e}")
            self.logger.error(traceback.format_exc())
            return False

    def run(self) -> bool:
        """Run the main application"""
        try:
            if not self.initialize():
                self.show_initialization_error()
                return False

            self.logger.info("Starting GUI application")

            # Imported here so a missing customtkinter is reported by initialize()
            from rotation_scheduler.ui import MainWindow

            self.main_window = MainWindow(
                registry=self.registry,
                scheduler=self.scheduler,
                export_manager=self.export_manager
            )
            self.main_window.mainloop()

            self.logger.info("Application closed normally")
            return True

        except Exception as e:
            self.logger.error(f"Application error: {e}")
            self.logger.error(traceback.format_exc())
            self.show_runtime_error(e)
            return False

    def show_initialization_error(self):
        """Report why startup failed before any window exists"""
        reason = str(self.init_error) if self.init_error else "Unknown error"
        self._show_error(
            "Initialization Error",
            f"Rotation Scheduler could not start.\n\n{reason}\n\n"
            f"Details were written to the logs directory."
        )

    def show_runtime_error(self, error):
        """Report a fatal error raised while the window was open"""
        message = f"{type(error).__name__}: {error}"
        if self.registry is not None and self.registry.get_workers():
            # Nothing is saved between sessions
            message += (f"\n\nThe {len(self.registry.get_workers())} registered worker(s) "
                        f"and any generated schedule have been lost.")
        self._show_error("Runtime Error", message)

    def _show_error(self, title: str, message: str):
        try:
            root = None
            if self.main_window is None:
                import tkinter as tk
                root = tk.Tk()
                root.withdraw()
            messagebox.showerror(title, message)
            if root is not None:
                root.destroy()
        except Exception as e:
            self.logger.error(f"Could not show '{title}' dialog: {e}")


def main():
    """Main entry point"""
    sys.excepthook = handle_exception

    logger = setup_logging()
    logger.info("=" * 50)
    logger.info("Starting Rotation Scheduler Application")
    logger.info("=" * 50)

    app = RotationSchedulerApp()
    success = app.run()

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
