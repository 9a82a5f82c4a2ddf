"""Fixed lookup tables shared across the pipeline."""

# ISO ordering, Monday=1 .. Sunday=7. Never derived from the locale.
WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Non-primary playback (previews, recaps) that must not count as watch time
EXCLUDED_SUPPLEMENTAL_TYPES = frozenset({
    "HOOK",
    "TRAILER",
    "BONUS_VIDEO",
    "TEASER_TRAILER",
    "TUTORIAL",
    "RECAP",
})

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Titles with at least this many colons are treated as "Show: Season: Episode"
TV_SHOW_MIN_COLONS = 2

# Shapiro-Wilk is only run below this sample size
SHAPIRO_MAX_N = 5000

# Marker recorded when the numerical normality check is not run
SKIPPED_SAMPLE_TOO_LARGE = "skipped: sample too large"
SKIPPED_SAMPLE_TOO_SMALL = "skipped: sample too small"
