"""Contains functions to query and manipulate the database."""

import logging
import math
from typing import Iterable
import pandas as pd
import sqlalchemy as sa

from service.tempchart import models
from service.tempchart.base.errors import CityNotFoundError, NoDataError
from service.tempchart.chart import periods

from . import constants as dc
from . import schema as ds


logger = logging.getLogger("db")


def _none_if_nan(v) -> float | None:
    if v is None:
        return None
    v = float(v)
    return None if math.isnan(v) else v


class Importer:
    """Loads cities and observations into the database."""

    def __init__(self, engine: sa.Engine):
        self.engine = engine
        self._imported_files_count = 0
        self._imported_rows_count = 0

    def imported_files_count(self):
        return self._imported_files_count

    def imported_rows_count(self):
        return self._imported_rows_count

    def upsert_city(self, city: str, min_temp: float | None, max_temp: float | None) -> None:
        """Inserts or replaces the extremes row of a city."""
        t = ds.sa_table_city_names
        with self.engine.begin() as conn:
            conn.execute(
                sa.delete(t).where(sa.func.lower(t.c[dc.CITY_NAME]) == city.lower())
            )
            conn.execute(
                sa.insert(t),
                {
                    dc.CITY_NAME: city,
                    dc.CITY_MIN_TEMP: min_temp,
                    dc.CITY_MAX_TEMP: max_temp,
                },
            )

    def insert_observations(
        self,
        df: pd.DataFrame,
        city: str,
        granularity: models.Granularity,
    ) -> int:
        """Inserts observations from df, replacing existing rows of the same years.

        df must contain the columns tyear, tmax, tmin and the index column of
        the granularity (tweek, tfort or tmonth). Additional columns are ignored.

        Returns:
            The number of inserted rows.

        Raises:
            ValueError if columns are missing or a bucket index is out of range.
        """
        spec = periods.period_spec(granularity)
        table_spec = ds.observation_table(spec.granularity)
        data_columns = [dc.YEAR, table_spec.index_column, dc.TEMP_MAX, dc.TEMP_MIN]

        missing = [c for c in data_columns if c not in df.columns]
        if missing:
            raise ValueError(f"Data is missing required columns: {missing}")

        df = df[data_columns]
        index = df[table_spec.index_column]
        out_of_range = df[(index < 1) | (index > spec.buckets)]
        if not out_of_range.empty:
            raise ValueError(
                f"{table_spec.index_column} out of range 1..{spec.buckets}: "
                f"{sorted(out_of_range[table_spec.index_column].unique().tolist())}"
            )

        df = df.assign(**{dc.CITY_NAME: city})
        # NaN -> None, so missing values become NULL.
        records = df.astype(object).where(df.notna(), None).to_dict(orient="records")
        years = sorted(int(y) for y in df[dc.YEAR].unique())

        t = table_spec.sa_table
        with self.engine.begin() as conn:
            if years:
                conn.execute(
                    sa.delete(t).where(
                        sa.func.lower(t.c[dc.CITY_NAME]) == city.lower(),
                        t.c[dc.YEAR].in_(years),
                    )
                )
            if records:
                conn.execute(sa.insert(t), records)

        self._imported_rows_count += len(records)
        logger.info(
            "Inserted %d %s rows for %s (years: %s)",
            len(records),
            spec.granularity.value,
            city,
            ",".join(str(y) for y in years),
        )
        return len(records)

    def insert_csv_observations(
        self,
        csv_path: str,
        city: str,
        granularity: models.Granularity,
    ) -> int:
        """Loads a CSV file and inserts its rows as observations of city.

        See insert_observations for the expected columns.
        """
        logger.info("Reading observations from %s", csv_path)
        df = pd.read_csv(csv_path)
        # Tolerate column names with different case or surrounding whitespace.
        df.columns = [c.strip().lower() for c in df.columns]
        n = self.insert_observations(df, city, granularity)
        self._imported_files_count += 1
        return n


def read_city_extremes(conn: sa.Connection, city: str) -> models.CityExtremes:
    """Returns the long-run low and high temperature of a city.

    The city name is matched case-insensitively.

    Raises:
        CityNotFoundError if the city doesn't exist.
        NoDataError if the city has no min or max temperature.
    """
    t = ds.sa_table_city_names
    sql = sa.select(
        t.c[dc.CITY_NAME], t.c[dc.CITY_MIN_TEMP], t.c[dc.CITY_MAX_TEMP]
    ).where(sa.func.lower(t.c[dc.CITY_NAME]) == city.lower())

    row = conn.execute(sql).mappings().first()
    if row is None:
        raise CityNotFoundError(f"No city found with name={city}")
    if row[dc.CITY_MIN_TEMP] is None or row[dc.CITY_MAX_TEMP] is None:
        raise NoDataError(f"No min/max temperature for {city}")

    return models.CityExtremes(
        city=row[dc.CITY_NAME],
        known_low=row[dc.CITY_MIN_TEMP],
        known_high=row[dc.CITY_MAX_TEMP],
    )


def read_cities(conn: sa.Connection) -> list[models.CityExtremes]:
    """Returns all cities that have known extremes, ordered by name."""
    t = ds.sa_table_city_names
    sql = (
        sa.select(t.c[dc.CITY_NAME], t.c[dc.CITY_MIN_TEMP], t.c[dc.CITY_MAX_TEMP])
        .where(t.c[dc.CITY_MIN_TEMP].is_not(None), t.c[dc.CITY_MAX_TEMP].is_not(None))
        .order_by(t.c[dc.CITY_NAME])
    )
    return [
        models.CityExtremes(
            city=row[dc.CITY_NAME],
            known_low=row[dc.CITY_MIN_TEMP],
            known_high=row[dc.CITY_MAX_TEMP],
        )
        for row in conn.execute(sql).mappings().all()
    ]


def read_observations(
    conn: sa.Connection,
    city: str,
    year: int,
    granularity: models.Granularity,
) -> pd.DataFrame:
    """Reads the observations of a city and year.

    Returns:
        A pd.DataFrame with columns tyear, <index column>, tmax, tmin,
        ordered by the index column.
    """
    table_spec = ds.observation_table(periods.parse_granularity(granularity))
    t = table_spec.sa_table
    index_col = t.c[table_spec.index_column]
    sql = (
        sa.select(t.c[dc.YEAR], index_col, t.c[dc.TEMP_MAX], t.c[dc.TEMP_MIN])
        .where(
            sa.func.lower(t.c[dc.CITY_NAME]) == city.lower(),
            t.c[dc.YEAR] == year,
        )
        .order_by(index_col)
    )
    return pd.read_sql_query(sql, conn)


def observations_from_frame(
    df: pd.DataFrame, granularity: models.Granularity
) -> list[models.Observation]:
    """Converts rows read by read_observations into Observations (NaN -> None)."""
    index_column = periods.period_spec(granularity).index_column
    return [
        models.Observation(
            period_index=int(row[index_column]),
            high=_none_if_nan(row[dc.TEMP_MAX]),
            low=_none_if_nan(row[dc.TEMP_MIN]),
            year=int(row[dc.YEAR]),
        )
        for row in df.to_dict(orient="records")
    ]


def recompute_city_extremes(engine: sa.Engine, city: str) -> models.CityExtremes:
    """Derives min_temp and max_temp of a city from all its stored observations.

    The city_names row is created if it doesn't exist yet.

    Raises:
        NoDataError if there are no observations for city.
    """
    lows, highs = [], []
    with engine.begin() as conn:
        for table_spec in ds.OBSERVATION_TABLES.values():
            t = table_spec.sa_table
            sql = sa.select(
                sa.func.min(t.c[dc.TEMP_MIN]), sa.func.max(t.c[dc.TEMP_MAX])
            ).where(sa.func.lower(t.c[dc.CITY_NAME]) == city.lower())
            lo, hi = conn.execute(sql).one()
            if lo is not None:
                lows.append(lo)
            if hi is not None:
                highs.append(hi)

    if not lows or not highs:
        raise NoDataError(f"No observations for {city}")

    extremes = models.CityExtremes(city=city, known_low=min(lows), known_high=max(highs))
    Importer(engine).upsert_city(city, extremes.known_low, extremes.known_high)
    logger.info(
        "Updated extremes of %s: low=%s high=%s",
        city,
        extremes.known_low,
        extremes.known_high,
    )
    return extremes


def period_averages(
    observations: Iterable[models.Observation],
) -> list[models.PeriodAverage]:
    """Returns one summary row per observation, in bucket order."""
    return [
        models.PeriodAverage(
            year=o.year, period_index=o.period_index, high=o.high, low=o.low
        )
        for o in sorted(observations, key=lambda o: o.period_index)
    ]

