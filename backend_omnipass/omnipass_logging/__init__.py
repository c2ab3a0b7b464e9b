"""
Structured logging for Backend OmniPass.

JSON logs with timestamp, level, event_type and keyword context.
Use get_logger() in every module.
"""

from backend_omnipass.omnipass_logging.logger import bind_address, get_logger

__all__ = ["get_logger", "bind_address"]
