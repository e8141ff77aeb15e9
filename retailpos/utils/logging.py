"""
retailpos/utils/logging.py
──────────────────────────
Configures structured logging: rotating file + stdout.
"""
import os
import logging
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request


class RequestFormatter(logging.Formatter):
    """Injects the request URL and client address when a request is active."""
    def format(self, record):
        if has_request_context():
            record.url = request.url
            record.remote_addr = request.remote_addr
        else:
            record.url = None
            record.remote_addr = None
        return super().format(record)


def setup_logging(app):
    """
    Rotating file log at LOG_DIR/app.log (5MB × 5) plus stdout.
    Engine modules log through their own module loggers; those propagate to
    the root logger, which gets the same stdout handler.
    """
    log_dir = app.config.get('LOG_DIR')
    if log_dir:
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=5 * 1024 * 1024,
                backupCount=5
            )
            file_handler.setFormatter(RequestFormatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(remote_addr)s | %(url)s | %(message)s'
            ))
            file_handler.setLevel(logging.INFO)
            app.logger.addHandler(file_handler)
        except OSError as exc:
            # Read-only filesystem: stdout only
            app.logger.warning(f"File logging disabled: {exc}")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
    ))
    stream_handler.setLevel(logging.INFO)
    app.logger.addHandler(stream_handler)
    app.logger.setLevel(logging.INFO)

    engine_logger = logging.getLogger('retailpos.pricing')
    if not engine_logger.handlers:
        engine_logger.addHandler(stream_handler)
        engine_logger.setLevel(logging.INFO)

    app.logger.info("retailpos startup")
