# --- storefront/utils/api.py ---
from datetime import datetime, timedelta, timezone
from flask import current_app, has_app_context


def _api_time_human():
    offset = current_app.config.get("API_TZ_OFFSET_HOURS", 7) if has_app_context() else 7
    now = datetime.now(timezone.utc) + timedelta(hours=offset)
    return now.strftime("%Y-%m-%d %H:%M:%S")

def api_ok(message, data=None):
    return {
        "status": True,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time_human(),
        }
    }

def api_error(message, data=None):
    return {
        "status": False,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time_human(),
        }
    }
