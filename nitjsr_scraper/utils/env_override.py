import logging
import os

module_logger = logging.getLogger(__name__)


def get_setting(settings, key, default=None, cast=str):
    """
    Load a setting from Scrapy settings,
    then override with ENV variable if available.

    Args:
        settings: Scrapy settings (or any mapping with .get)
        key: Setting name (also ENV var name)
        default: Default value if not found
        cast: Function to cast the value (str, bool, int, float, list)

    Returns:
        The final value (cast to correct type)
    """
    value = settings.get(key, default) if settings is not None else default

    env_value = os.getenv(key)
    if env_value is not None:
        value = env_value

    try:
        if cast is bool:
            value = str(value).lower() in ("1", "true", "yes", "on")
        elif cast is list:
            if isinstance(value, str):
                value = [part.strip() for part in value.split(",") if part.strip()]
            else:
                value = list(value or [])
        else:
            value = cast(value)
    except (TypeError, ValueError):
        module_logger.warning(
            "Could not cast setting, using default",
            extra={"event_type": "setting_cast_failed", "key": key, "raw_value": str(value)},
        )
        value = default

    return value
