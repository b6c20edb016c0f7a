"""Reading statistics helpers."""

DURATION_UNITS = {
    "tr": {"seconds": "saniye", "minutes": "dakika", "hours": "saat", "short_minutes": "dk"},
    "en": {"seconds": "seconds", "minutes": "minutes", "hours": "hours", "short_minutes": "min"},
}


def format_duration(seconds: int, language: str = "tr") -> str:
    """Human-readable reading time, e.g. ``"1 saat 5 dk"``."""
    units = DURATION_UNITS.get(language, DURATION_UNITS["tr"])
    seconds = max(0, int(seconds or 0))
    if seconds < 60:
        return f"{seconds} {units['seconds']}"
    if seconds < 3600:
        return f"{seconds // 60} {units['minutes']}"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if minutes:
        return f"{hours} {units['hours']} {minutes} {units['short_minutes']}"
    return f"{hours} {units['hours']}"
