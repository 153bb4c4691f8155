import logging

QUIET_LOGGERS = ("sqlalchemy.engine", "luigi-interface")


def set_log_level(test=False, verbose=False):
    """Log at INFO, or DEBUG when testing. Third party loggers
    are held at WARNING unless verbose."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if (test or verbose) else logging.INFO)
    for name in QUIET_LOGGERS:
        level = logging.DEBUG if verbose else logging.WARNING
        logging.getLogger(name).setLevel(level)
