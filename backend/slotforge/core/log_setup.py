import logging

from slotforge.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the ``slotforge`` logger.

    Library code only creates module loggers; callers embedding the engine in a
    service normally configure logging themselves and never call this.
    """
    resolved = (level or get_settings().log_level).upper()
    root = logging.getLogger("slotforge")
    root.setLevel(resolved)
    if not any(getattr(handler, "_slotforge", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._slotforge = True
        root.addHandler(handler)
