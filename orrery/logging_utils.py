import logging

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(debug=False, stream=None):
    """
    Installs a single stream handler on the package logger.

    Debug mode shows every message; otherwise only warnings and errors get through,
    so a failed star catalogue or a rejected date is always reported.

    Args:
        debug (bool): Enable DEBUG level output.
        stream: Optional stream for the handler (defaults to stderr).

    Returns:
        logging.Logger: The configured 'orrery' logger.
    """
    logger = logging.getLogger("orrery")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False
    return logger
