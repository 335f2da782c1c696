import logging
import os

HEALTH_PATHS = ("/health", "/_stcore/health")
ACCESS_LOGGERS = ["uvicorn.access", "tornado.access", "streamlit.web.server"]
NOISY_LOGGERS = ["urllib3", "botocore", "boto3", "s3transfer", "google", "grpc"]


class HealthCheckFilter(logging.Filter):
    """Drops access-log lines for health checks of either process."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = record.getMessage()
        return not any(path in msg for path in HEALTH_PATHS)


def setup_logging(level: str | None = None):
    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    for logger_name in ACCESS_LOGGERS:
        logger = logging.getLogger(logger_name)
        # Streamlit calls this on every rerun.
        if not any(isinstance(f, HealthCheckFilter) for f in logger.filters):
            logger.addFilter(HealthCheckFilter())
    # SDK request chatter drowns out the app's own lines at INFO.
    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
