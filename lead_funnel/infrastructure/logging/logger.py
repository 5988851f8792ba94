"""Structured logger for observability."""

import logging
from typing import Any, Optional

# Configure root logger with JSON-like structured format
_logger = logging.getLogger("lead_funnel")
_logger.setLevel(logging.INFO)

# Create console handler if not exists
if not _logger.handlers:
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO)
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)
    _logger.addHandler(handler)


def mask_phone(phone: Optional[str]) -> Optional[str]:
    """
    Mask a phone number for logging, keeping the last four digits.

    Args:
        phone: Phone number or None

    Returns:
        Masked phone, or None if no phone was given
    """
    if not phone:
        return None
    if len(phone) > 4:
        return f"***{phone[-4:]}"
    return "***"


def log_turn(
    session_id: str,
    turn_id: str,
    component: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Log structured event for a chat turn or request.

    Args:
        session_id: Session identifier (visitor session, lead id or task id)
        turn_id: Turn identifier (UUID string)
        component: Component name (e.g., 'http', 'capture', 'composer')
        level: Log level (default: INFO)
        **kwargs: Additional structured fields to log
    """
    # Build structured log message
    fields = {
        "session_id": session_id,
        "turn_id": turn_id,
        "component": component,
    }
    fields.update(kwargs)

    # Format as key=value pairs for readability
    log_parts = [f"{k}={v!r}" for k, v in fields.items()]
    log_message = " | ".join(log_parts)

    _logger.log(level, log_message)


def log_capture_stage(
    session_id: str,
    turn_id: str,
    stage_before: Optional[str] = None,
    stage_after: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """
    Log a capture stage transition.

    Args:
        session_id: Visitor session identifier
        turn_id: Turn identifier
        stage_before: Previous capture stage
        stage_after: New capture stage
        **kwargs: Additional fields
    """
    fields = {}
    if stage_before is not None:
        fields["capture_stage_before"] = stage_before
    if stage_after is not None:
        fields["capture_stage_after"] = stage_after
    fields.update(kwargs)

    log_turn(
        session_id=session_id,
        turn_id=turn_id,
        component="capture",
        **fields,
    )


def log_lead_resolution(
    task_id: str,
    turn_id: str,
    lead_id: Optional[str],
    was_updated: bool,
    phone: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """
    Log the outcome of a create-or-merge lead request.

    Args:
        task_id: Task identifier
        turn_id: Request identifier
        lead_id: Resolved lead identifier
        was_updated: Whether an existing lead was merged
        phone: Submitted phone (masked before logging)
        **kwargs: Additional fields
    """
    log_turn(
        session_id=task_id,
        turn_id=turn_id,
        component="lead_resolver",
        lead_id=lead_id,
        was_updated=was_updated,
        phone=mask_phone(phone),
        **kwargs,
    )


def log_notification(
    lead_id: str,
    turn_id: str,
    status: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """
    Log a notification composer event.

    Args:
        lead_id: Lead identifier
        turn_id: Request identifier
        status: Dispatch status (e.g., 'sent', 'already_notified', 'failed')
        level: Log level
        **kwargs: Additional fields
    """
    log_turn(
        session_id=lead_id,
        turn_id=turn_id,
        component="composer",
        level=level,
        notification_status=status,
        **kwargs,
    )


def log_arbiter_trigger(
    session_id: str,
    trigger: str,
    fired: bool,
    **kwargs: Any,
) -> None:
    """
    Log an arbiter trigger evaluation.

    Args:
        session_id: Visitor session identifier
        trigger: Trigger name (completion, inactivity, hidden, unload)
        fired: Whether the trigger claimed the guard and dispatched
        **kwargs: Additional fields
    """
    log_turn(
        session_id=session_id,
        turn_id="arbiter",
        component="arbiter",
        trigger=trigger,
        fired=fired,
        **kwargs,
    )


# Export logger instance for direct use
logger = _logger
