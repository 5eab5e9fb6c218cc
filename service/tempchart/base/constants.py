"""File for widely used constants."""

# Filename for the sqlite3 database (relative to the base dir).
SQLITE_DB_FILENAME = "temperatures.sqlite"

# Default subdirectory of the base dir for rendered charts.
OUTPUT_SUBDIR = "imgs"

# Bar placement modes, see chart.geometry.
BAR_PLACEMENT_LEGACY = "legacy"
BAR_PLACEMENT_BASELINE = "baseline"
BAR_PLACEMENTS = (BAR_PLACEMENT_LEGACY, BAR_PLACEMENT_BASELINE)
