"""Contains database schema definitions."""

import logging
import sqlalchemy as sa

from service.tempchart.base.errors import SchemaValidationError, SchemaColumnMismatchInfo
from service.tempchart.models import Granularity

from . import constants as dc

logger = logging.getLogger("schema")

# SQLAlchemy pattern: have a global 'metadata' variable that holds all table defs.
metadata = sa.MetaData()


sa_table_city_names = sa.Table(
    dc.CITY_NAMES_TABLE,
    metadata,
    sa.Column(dc.CITY_NAME, sa.Text, primary_key=True),
    sa.Column(dc.CITY_MIN_TEMP, sa.REAL),
    sa.Column(dc.CITY_MAX_TEMP, sa.REAL),
)


class ObservationTableSpec:
    """Schema specification for a per-granularity observation table + SQLAlchemy Table binding."""

    def __init__(
        self,
        name: str,
        granularity: Granularity,
        index_column: str,
    ) -> None:
        self.name: str = name
        self.granularity: Granularity = granularity
        self.index_column: str = index_column
        self.measurements: list[str] = [dc.TEMP_MAX, dc.TEMP_MIN]
        # Ensure this table gets registered in metadata immediately.
        self.sa_table: sa.Table = self._define_sa_table()

    def _define_sa_table(self) -> sa.Table:
        """Converts the spec into a SQLAlchemy Core Table definition.

        Registers this table in the global `metadata`.
        """
        return sa.Table(
            self.name,
            metadata,
            sa.Column(dc.CITY_NAME, sa.Text, primary_key=True),
            sa.Column(dc.YEAR, sa.Integer, primary_key=True),
            sa.Column(self.index_column, sa.Integer, primary_key=True),
            # Measurements are nullable: a bucket may lack its high or low value.
            *(sa.Column(c, sa.REAL) for c in self.measurements),
        )


# Table definitions

TABLE_WEEKLY_TEMPS = ObservationTableSpec(
    name="temp_week",
    granularity=Granularity.WEEK,
    index_column=dc.WEEK_INDEX,
)

TABLE_FORTNIGHTLY_TEMPS = ObservationTableSpec(
    name="temp_fort",
    granularity=Granularity.FORTNIGHT,
    index_column=dc.FORTNIGHT_INDEX,
)

TABLE_MONTHLY_TEMPS = ObservationTableSpec(
    name="temp_month",
    granularity=Granularity.MONTH,
    index_column=dc.MONTH_INDEX,
)

OBSERVATION_TABLES: dict[Granularity, ObservationTableSpec] = {
    t.granularity: t
    for t in [TABLE_WEEKLY_TEMPS, TABLE_FORTNIGHTLY_TEMPS, TABLE_MONTHLY_TEMPS]
}


def observation_table(granularity: Granularity) -> ObservationTableSpec:
    return OBSERVATION_TABLES[granularity]


def validate_schema(engine: sa.Engine, allow_missing_tables: bool = True) -> None:
    """Validates that the database schema matches the SQLAlchemy MetaData.

    Args:
        engine: the sqlalchemy engine to use
        allow_missing_tables: if True, do not fail if a table is missing in the
            database, but present in the schema (e.g., if it will be created
            during an import).

    Raises:
        SchemaValidationError: If there is a mismatch.
    """
    inspector = sa.inspect(engine)
    db_tables = inspector.get_table_names()

    missing_tables = {t for t in metadata.tables if t not in db_tables}
    if missing_tables and not allow_missing_tables:
        raise SchemaValidationError(
            f"Tables {sorted(missing_tables)} are defined in the schema "
            "but do not exist in the database.",
            missing_tables=missing_tables,
        )

    mismatched_columns = []
    for table_name, table in metadata.tables.items():
        if table_name in missing_tables:
            continue

        db_columns = {col["name"]: col for col in inspector.get_columns(table_name)}

        for col_name, column in table.columns.items():
            if col_name not in db_columns:
                mismatched_columns.append(
                    SchemaColumnMismatchInfo(
                        table=table_name, column=col_name, is_missing=True
                    )
                )
                continue

            db_col_type = db_columns[col_name]["type"]
            code_col_type = column.type
            # str() comparison is good enough for the few types we use.
            if not isinstance(db_col_type, type(code_col_type)):
                if str(code_col_type).upper() not in str(db_col_type).upper():
                    mismatched_columns.append(
                        SchemaColumnMismatchInfo(
                            table=table_name,
                            column=col_name,
                            info=f"Schema: {code_col_type}, DB: {db_col_type}",
                        )
                    )

    if mismatched_columns:
        raise SchemaValidationError(
            "Column mismatches detected", mismatched_columns=mismatched_columns
        )
    logger.debug("Schema of %d tables validated", len(metadata.tables) - len(missing_tables))
