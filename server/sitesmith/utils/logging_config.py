import logging
import sys


class ContextFormatter(logging.Formatter):
    """Formatter that tolerates records without a project_id."""
    def format(self, record):
        if not hasattr(record, "project_id"):
            record.project_id = "-"
        return super().format(record)


def configure_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [project_id=%(project_id)s] - %(message)s"
    ))
    logging.basicConfig(
        level=level,
        handlers=[handler],
    )
