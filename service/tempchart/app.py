from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI, HTTPException, Request, status, Response
from fastapi.responses import JSONResponse

from service.tempchart.base import logging_config as _  # configure logging

from service.tempchart import models
from service.tempchart.base.errors import (
    CityNotFoundError,
    InvalidRangeError,
    NoDataError,
    SourceUnavailableError,
)
from service.tempchart.db import db
from service.tempchart.db import schema as ds
from service.tempchart.db import dbconn
from service.tempchart.db.source import SqlObservationSource
from service.tempchart.render import renderer
from service.tempchart.render.options import RenderOptions, base_dir_from_env


logger = logging.getLogger("app")

# Response header listing non-fatal render errors, separated by "; ".
WARNINGS_HEADER = "X-Tempchart-Warnings"


@asynccontextmanager
async def lifespan(app: FastAPI):
    db_config = dbconn.DatabaseConfig.from_env(base_dir_from_env())
    engine = db_config.create_engine()
    if db_config.is_sqlite:
        # Local sqlite: make sure the tables exist.
        ds.metadata.create_all(engine)

    app.state.engine = engine
    app.state.render_options = RenderOptions.from_env()
    app.state.server_options = models.ServerOptions(
        base_dir=db_config.base_dir,
        sanitized_postgres_url=None if db_config.is_sqlite else db_config.sanitized_url(),
        bar_placement=app.state.render_options.bar_placement,
    )

    yield

    logger.info("Shutting down")
    engine.dispose()


# Always create the app, we're running this thing with uvicorn ONLY.
app = FastAPI(lifespan=lifespan)


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


@app.exception_handler(CityNotFoundError)
async def city_not_found_handler(request, exc: CityNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(NoDataError)
async def no_data_error_handler(request, exc: NoDataError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


@app.exception_handler(InvalidRangeError)
async def invalid_range_handler(request, exc: InvalidRangeError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc)},
    )


@app.exception_handler(SourceUnavailableError)
async def source_unavailable_handler(request, exc: SourceUnavailableError):
    logger.error("Observation source unavailable: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Temperature database unavailable"},
    )


@app.get("/health")
def health():
    """Health check endpoint for cloud deployments."""
    return {"status": "ok"}


@app.get("/status")
def server_status() -> models.ServerOptions:
    return app.state.server_options


@app.get("/cities")
def list_cities() -> list[models.CityExtremes]:
    with app.state.engine.begin() as conn:
        return db.read_cities(conn)


@app.get("/cities/{city}/charts/{year}/{granularity}.png")
def get_chart(request: Request, city: str, year: str, granularity: str):
    """Returns the high/low temperature chart of a city as a PNG image."""
    try:
        year_int = int(year)
    except ValueError:
        raise _bad_request(f"not a number: {year}")

    source = SqlObservationSource(request.app.state.engine)
    result = renderer.render_chart(
        source,
        city,
        year_int,
        granularity,
        options=request.app.state.render_options,
    )

    headers = {}
    if result.report.errors:
        headers[WARNINGS_HEADER] = "; ".join(result.report.errors)
    return Response(content=result.image, media_type="image/png", headers=headers)
