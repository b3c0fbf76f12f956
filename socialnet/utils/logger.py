import logging
import contextvars
from typing import Optional

# Context variables carried across async operations and threadpool hops
request_id_context = contextvars.ContextVar('request_id', default=None)
user_id_context = contextvars.ContextVar('user_id', default=None)


class RequestAwareLogger:
    """
    A logger wrapper that automatically includes request context.

    The request ID and, once authentication has run, the acting user ID are
    attached to every record so that friend operations from one call can be
    correlated without passing the request object around.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)
        self.name = name

    def _log_with_context(self, level: int, msg: str, *args, **kwargs):
        """Internal method to log with request context."""
        request_id = kwargs.pop('request_id', None) or request_id_context.get()
        user_id = kwargs.pop('user_id', None) or user_id_context.get()

        extra = kwargs.get('extra', {})
        if request_id:
            extra['request_id'] = request_id
        if user_id:
            extra['user_id'] = user_id
        if extra:
            kwargs['extra'] = extra

        self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self._log_with_context(logging.ERROR, msg, *args, **kwargs, exc_info=True)


def get_logger(name: str) -> RequestAwareLogger:
    """
    Get a request-aware logger for the specified name.

    Args:
        name: Logger name (usually __name__)

    Returns:
        RequestAwareLogger: A logger that automatically includes request context
    """
    return RequestAwareLogger(name)


def set_request_context(request_id: str):
    """Set the request ID in the current context."""
    request_id_context.set(request_id)


def set_user_context(user_id: Optional[str]):
    """Record the authenticated user for the rest of the request."""
    user_id_context.set(user_id)


def clear_request_context():
    """Clear the current request and user context."""
    request_id_context.set(None)
    user_id_context.set(None)
