import argparse
import logging
import sys

from service.tempchart.base import logging_config as _  # configure logging

from service.tempchart.base import constants as bc
from service.tempchart.base.errors import (
    CityNotFoundError,
    InvalidRangeError,
    NoDataError,
    SchemaValidationError,
    SourceUnavailableError,
    UnsupportedGranularityError,
)
from service.tempchart.chart import periods
from service.tempchart.db import db
from service.tempchart.db import dbconn
from service.tempchart.db import schema as ds
from service.tempchart.db.source import SqlObservationSource
from service.tempchart.render import renderer
from service.tempchart.render.options import (
    RenderOptions,
    base_dir_from_env,
    output_dir_from_env,
)

logger = logging.getLogger("exporter")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Render a high/low temperature bar chart to a PNG file.",
        allow_abbrev=False,
    )
    parser.add_argument("--city", required=True, help="City name, e.g. Phoenix_AZ.")
    parser.add_argument("--year", required=True, type=int, help="Year to render.")
    parser.add_argument(
        "--granularity",
        required=True,
        metavar="PERIOD",
        help="One of Week, Fortnight (or Fort), Month.",
    )
    parser.add_argument(
        "--base-dir",
        dest="base_dir",
        metavar="PATH",
        help="Directory of the sqlite DB (defaults to $TEMPCHART_BASE_DIR or '.').",
    )
    parser.add_argument(
        "--postgres-url",
        dest="postgres_url",
        metavar="URL",
        help=(
            "Connection URL for Postgres "
            "(e.g., postgresql+psycopg://user@host:port/dbname). "
            "Avoid hardcoding the password - use ~/.pgpass or PGPASSWORD env variable."
        ),
    )
    parser.add_argument(
        "--out-dir",
        dest="out_dir",
        metavar="PATH",
        help="Output directory (defaults to $TEMPCHART_OUTPUT_DIR or BASE_DIR/imgs).",
    )
    parser.add_argument(
        "--bar-placement",
        dest="bar_placement",
        choices=bc.BAR_PLACEMENTS,
        help="Bar placement (defaults to $TEMPCHART_BAR_PLACEMENT or legacy).",
    )
    parser.add_argument(
        "--import-csv",
        dest="import_csv",
        metavar="PATH",
        help="CSV file with observations (tyear, index column, tmax, tmin) to import first.",
    )
    parser.add_argument(
        "--set-extremes",
        dest="set_extremes",
        nargs=2,
        type=float,
        metavar=("LOW", "HIGH"),
        help="Store the long-run low and high temperature of the city.",
    )
    parser.add_argument(
        "--recompute-extremes",
        action="store_true",
        default=False,
        help="Derive the city's long-run extremes from all stored observations.",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        default=False,
        help="Log the per-period averages that are rendered.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="More verbose logging (e.g. SQLAlchemy statements)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _parser()
    args = parser.parse_args(argv)

    base_dir = args.base_dir or base_dir_from_env()
    out_dir = args.out_dir or output_dir_from_env(base_dir)

    if args.set_extremes and args.recompute_extremes:
        parser.error("--set-extremes and --recompute-extremes are mutually exclusive")

    db_config = dbconn.DatabaseConfig.from_env(base_dir, args.postgres_url)
    engine = db_config.create_engine(echo=args.verbose)
    logger.info("Using DB engine '%s'", engine.name)

    try:
        ds.validate_schema(engine=engine, allow_missing_tables=True)
    except SchemaValidationError as e:
        logger.error("Schema mismatch detected: %s", str(e))
        return 1
    ds.metadata.create_all(engine)

    importer = db.Importer(engine)
    try:
        if args.import_csv:
            granularity = periods.parse_granularity(args.granularity)
            importer.insert_csv_observations(args.import_csv, args.city, granularity)
        if args.set_extremes:
            low, high = args.set_extremes
            importer.upsert_city(args.city, low, high)
        if args.recompute_extremes:
            db.recompute_city_extremes(engine, args.city)
    except (ValueError, FileNotFoundError) as e:
        logger.error("Import failed: %s", e)
        return 1
    if args.import_csv:
        logger.info(
            "Imported %d rows from %d files",
            importer.imported_rows_count(),
            importer.imported_files_count(),
        )

    options = RenderOptions.from_env(bar_placement=args.bar_placement)
    source = SqlObservationSource(engine)

    if args.summary:
        _log_summary(source, args.city, args.year, args.granularity)

    try:
        report = renderer.render_to_file(
            source,
            args.city,
            args.year,
            args.granularity,
            out_dir,
            options=options,
        )
    except (
        CityNotFoundError,
        NoDataError,
        InvalidRangeError,
        SourceUnavailableError,
    ) as e:
        logger.error("Chart not rendered: %s", e)
        return 1

    for err in report.errors:
        logger.warning("%s", err)
    print(report.artifact_path)
    return 0


def _log_summary(source: SqlObservationSource, city: str, year: int, granularity: str):
    try:
        g = periods.parse_granularity(granularity)
        observations = source.observations(city, year, g)
    except (UnsupportedGranularityError, NoDataError, SourceUnavailableError) as e:
        logger.info("No %s data for %s in %d: %s", granularity, city, year, e)
        return
    logger.info("Avg %s temps for %s in %d", g.value, city, year)
    for row in db.period_averages(observations):
        logger.info("%s", row)


if __name__ == "__main__":
    sys.exit(main())
