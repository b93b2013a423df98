"""Application entry point for QuizKiosk."""

from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from quiz_kiosk.constants.about import APP_NAME, APP_VERSION
from quiz_kiosk.core.kiosk_manager import KioskManager
from quiz_kiosk.core.question_catalog import load_catalog_from_file
from quiz_kiosk.core.services.local_storage import LocalStorage
from quiz_kiosk.core.services.question_allocator import QuestionAllocator
from quiz_kiosk.core.services.state_store import AdminStateStore
from quiz_kiosk.core.services.usage_ledger import UsageLedger
from quiz_kiosk.server.admin_api import start_admin_server
from quiz_kiosk.ui.kiosk_main_window import KioskMainWindow
from quiz_kiosk.utils.logging_config import configure_logging
from quiz_kiosk.utils.settings import KioskSettings


def main() -> None:
    """Load settings, wire the services, start the admin API, and launch the Qt UI."""
    settings = KioskSettings.from_env()
    logger = configure_logging(settings.log_level)
    logger.info("Starting %s %s with data in %s", APP_NAME, APP_VERSION, settings.data_dir)

    catalog = load_catalog_from_file(settings.catalog_path)
    logger.info("Loaded %d questions from %s", len(catalog), settings.catalog_path)

    storage = LocalStorage(settings.data_dir)
    store = AdminStateStore(storage, catalog)
    allocator = QuestionAllocator(catalog, UsageLedger(storage))
    kiosk_manager = KioskManager(store, catalog, allocator)

    if settings.admin_api_enabled:
        start_admin_server(store, catalog, host=settings.admin_host, port=settings.admin_port)

    app = QApplication(sys.argv)
    window = KioskMainWindow(kiosk_manager=kiosk_manager)
    window.showMaximized()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
