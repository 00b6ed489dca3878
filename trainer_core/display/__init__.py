from trainer_core.display.messages import (
    format_currency,
    location_text,
    presence_description,
    presence_status_text,
    request_summary,
    response_confirmation,
    schedule_line,
    time_ago,
)

__all__ = [
    "format_currency", "location_text", "presence_description",
    "presence_status_text", "request_summary", "response_confirmation",
    "schedule_line", "time_ago",
]
