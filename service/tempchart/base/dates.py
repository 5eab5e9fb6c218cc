MONTH_NAMES = {
    1: "January",
    2: "February",
    3: "March",
    4: "April",
    5: "May",
    6: "June",
    7: "July",
    8: "August",
    9: "September",
    10: "October",
    11: "November",
    12: "December",
}

# Three-letter abbreviations used as x-axis labels of monthly charts.
MONTH_ABBRS = {m: name[:3] for m, name in MONTH_NAMES.items()}


def month_abbr(month: int) -> str:
    """Returns the three-letter abbreviation of a 1-based month number.

    Example: "Sep" for 9.
    """
    if month not in MONTH_ABBRS:
        raise ValueError(f"Invalid month: {month}")
    return MONTH_ABBRS[month]
