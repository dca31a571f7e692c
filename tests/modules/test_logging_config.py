import logging
from logging.handlers import RotatingFileHandler

from schooldesk.backend.logging.logging_config import setup_logging


def test_logs_go_to_stdout_and_a_rotating_file(tmp_path):
    root = logging.getLogger()
    previous = list(root.handlers)
    try:
        setup_logging(str(tmp_path / "logs"))

        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(root.handlers) == 2
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 5 * 1024 * 1024
        assert (tmp_path / "logs" / "app.log").exists()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = previous
