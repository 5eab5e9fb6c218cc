"""Contains database table and column constants."""

# Table holding the long-run extremes per city.
CITY_NAMES_TABLE = "city_names"
CITY_NAME = "name_of_city"
CITY_MIN_TEMP = "min_temp"
CITY_MAX_TEMP = "max_temp"

# Column names of the observation tables.
YEAR = "tyear"
TEMP_MAX = "tmax"
TEMP_MIN = "tmin"

# Bucket index columns, by granularity.
WEEK_INDEX = "tweek"
FORTNIGHT_INDEX = "tfort"
MONTH_INDEX = "tmonth"
