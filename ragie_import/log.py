import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

def resolve_level(level: str) -> str:
    """Returns the upper-cased level name, or INFO when it is not a known level."""
    name = (level or "").strip().upper()
    if isinstance(logging.getLevelName(name), int):
        return name
    return "INFO"

def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for a CLI run.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR); unknown names fall back to INFO
    """
    logging.basicConfig(
        level=resolve_level(level),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # requests/urllib3 are noisy at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
