from apps.accounts.models import User
from apps.timetracking.models import TimeTrackingSettings

from .exceptions import InvalidSettingsError

# field -> (minimum, maximum); None means unbounded
SETTING_BOUNDS = {
    'default_hourly_rate': (0, None),
    'max_retroactive_days': (0, 365),
    'daily_hour_warning': (60, 1440),
    'idle_timeout_minutes': (0, 120),
    'round_to_minutes': (0, 60),
    'minimum_entry_minutes': (1, 30),
}

BOOLEAN_SETTINGS = (
    'allow_overlapping',
    'client_visible_logs',
    'require_description',
    'auto_stop_at_midnight',
)


def get_settings(user: User) -> TimeTrackingSettings:
    settings, _ = TimeTrackingSettings.objects.get_or_create(user=user)
    return settings


def update_settings(*, user: User, **changes) -> TimeTrackingSettings:
    """
    Raises:
        InvalidSettingsError: If a numeric value is outside its bounds
    """
    settings = get_settings(user)

    for field, value in changes.items():
        if field in SETTING_BOUNDS:
            low, high = SETTING_BOUNDS[field]
            if value is not None and (value < low or (high is not None and value > high)):
                bounds = f"between {low} and {high}" if high is not None else f"at least {low}"
                raise InvalidSettingsError(f"{field} must be {bounds}")
        elif field not in BOOLEAN_SETTINGS:
            raise InvalidSettingsError(f"Unknown setting: {field}")
        setattr(settings, field, value)

    settings.save()
    return settings
