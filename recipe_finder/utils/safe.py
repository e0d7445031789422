"""Error handling helpers for optional operations that should degrade gracefully.

Used where a failure is expected and has a sensible default, e.g. lenient JSON
parsing of model output. Required operations raise normally.
"""

from recipe_finder.utils.logger import logger


def _log_error(operation_name: str, exception: Exception, log_level: str = "warning") -> None:
    """Log error with the requested level ("debug", "warning" or "error")."""
    msg = f"{operation_name}: {exception}"
    if log_level == "debug":
        logger.debug(msg)
    elif log_level == "error":
        logger.error(msg)
    else:
        logger.warning(msg)


def safe_execute_sync(
    func,
    operation_name: str,
    log_level: str = "warning",
    default_return=None,
):
    """Call ``func``, logging and returning ``default_return`` on failure.

    Args:
        func: Callable taking no arguments.
        operation_name: Description for logging.
        log_level: Logging level ("debug", "warning", "error"). Default: "warning".
        default_return: Value to return on exception. Default: None.

    Returns:
        Result of ``func``, or ``default_return`` if it raised.
    """
    try:
        return func()
    except Exception as e:
        _log_error(operation_name, e, log_level)
        return default_return
