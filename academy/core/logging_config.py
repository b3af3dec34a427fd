import logging

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Attach a single stream handler to the root logger. Safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(getattr(h, "_academy_handler", False) for h in root.handlers):
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._academy_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)
