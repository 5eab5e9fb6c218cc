"""Observation sources consumed by the chart renderer."""

import logging
from typing import Protocol
import sqlalchemy as sa

from service.tempchart import models
from service.tempchart.base.errors import (
    CityNotFoundError,
    NoDataError,
    SourceUnavailableError,
)

from . import db

logger = logging.getLogger("source")


class ObservationSource(Protocol):
    def city_extremes(self, city: str) -> models.CityExtremes:
        """Returns the long-run extremes of city.

        Raises:
            CityNotFoundError, NoDataError, SourceUnavailableError
        """
        ...

    def observations(
        self, city: str, year: int, granularity: models.Granularity
    ) -> list[models.Observation]:
        """Returns the observations of city in year, ordered by bucket index.

        Raises:
            NoDataError, SourceUnavailableError
        """
        ...


class SqlObservationSource:
    """ObservationSource reading from the tempchart database schema."""

    def __init__(self, engine: sa.Engine):
        self.engine = engine

    def city_extremes(self, city: str) -> models.CityExtremes:
        try:
            with self.engine.begin() as conn:
                return db.read_city_extremes(conn, city)
        except sa.exc.SQLAlchemyError as e:
            raise SourceUnavailableError(
                f"Failed to read extremes of {city}: {e.__class__.__name__}"
            ) from e

    def observations(
        self, city: str, year: int, granularity: models.Granularity
    ) -> list[models.Observation]:
        try:
            with self.engine.begin() as conn:
                df = db.read_observations(conn, city, year, granularity)
        except sa.exc.SQLAlchemyError as e:
            raise SourceUnavailableError(
                f"Failed to read {granularity.value} observations of {city}: {e.__class__.__name__}"
            ) from e

        if df.empty:
            raise NoDataError(f"No {granularity.value} data for {city} in {year}")
        logger.debug("Read %d %s rows for %s/%d", len(df), granularity.value, city, year)
        return db.observations_from_frame(df, granularity)


class StaticObservationSource:
    """ObservationSource serving fixed in-memory data."""

    def __init__(
        self,
        extremes: dict[str, models.CityExtremes],
        observations: dict[tuple[str, int, models.Granularity], list[models.Observation]],
    ):
        self._extremes = {k.lower(): v for k, v in extremes.items()}
        self._observations = {
            (c.lower(), y, g): obs for (c, y, g), obs in observations.items()
        }

    def city_extremes(self, city: str) -> models.CityExtremes:
        if city.lower() not in self._extremes:
            raise CityNotFoundError(f"No city found with name={city}")
        return self._extremes[city.lower()]

    def observations(
        self, city: str, year: int, granularity: models.Granularity
    ) -> list[models.Observation]:
        obs = self._observations.get((city.lower(), year, granularity))
        if not obs:
            raise NoDataError(f"No {granularity.value} data for {city} in {year}")
        return sorted(obs, key=lambda o: o.period_index)
