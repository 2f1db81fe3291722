"""Application entry point for the QuizGenius desktop client."""

from __future__ import annotations

import os
import sys

from PySide6.QtWidgets import QApplication

from quizgenius.constants.network_constants import API_BASE_URL, DEFAULT_HOST, DEFAULT_PORT
from quizgenius.constants.ui_constants import DEFAULT_USER_ID
from quizgenius.core.quiz_service import QuizService
from quizgenius.core.quiz_session import SessionController
from quizgenius.core.services.api_client import QuizApiClient
from quizgenius.server.api_server import start_api_server
from quizgenius.ui.qt_scheduler import make_qt_scheduler
from quizgenius.ui.quiz_window import QuizMainWindow
from quizgenius.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging, start the API server, and launch the Qt UI."""
    logger = configure_logging()
    logger.info("Starting QuizGenius...")

    quiz_service = QuizService.with_sample_data()
    start_api_server(quiz_service=quiz_service, host=DEFAULT_HOST, port=DEFAULT_PORT)
    logger.info("Client talking to %s", API_BASE_URL)

    app = QApplication(sys.argv)
    api_client = QuizApiClient.from_base_url(API_BASE_URL)
    user_id = os.environ.get("QUIZGENIUS_USER_ID") or DEFAULT_USER_ID
    session = SessionController(api_client, user_id, scheduler=make_qt_scheduler(app))
    window = QuizMainWindow(api_client=api_client, session=session)
    window.show()
    exit_code = app.exec()
    api_client.close()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
