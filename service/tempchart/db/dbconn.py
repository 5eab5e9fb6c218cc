"""Database settings: a Postgres server if one is configured, else a local SQLite file."""

import json
import logging
import os
from urllib.parse import urlparse
from pydantic import BaseModel
import sqlalchemy as sa

from service.tempchart.base import constants as bc

logger = logging.getLogger("dbconn")

ENV_POSTGRES_URL = "TEMPCHART_POSTGRES_URL"
ENV_ROLE_SECRET = "TEMPCHART_POSTGRES_ROLE_SECRET"
ENV_DB_PREFIX = "TEMPCHART_DB_"


def _read_secret(secret_var: str) -> dict[str, str]:
    raw = os.getenv(secret_var)
    if not raw:
        raise ValueError(f"{secret_var} is specified but not set")
    try:
        secret = json.loads(raw)
        return {"user": secret["username"], "password": secret["password"]}
    except (ValueError, KeyError, TypeError):
        raise ValueError(f"Invalid JSON value for {secret_var}")


class PgConnectionInfo(BaseModel):
    user: str | None = None
    password: str | None = None
    host: str | None = None
    port: int | None = None
    dbname: str | None = None

    @classmethod
    def from_url(cls, url: str) -> "PgConnectionInfo":
        parsed = urlparse(url)
        return cls(
            user=parsed.username,
            password=parsed.password,
            host=parsed.hostname,
            port=parsed.port,
            dbname=parsed.path.removeprefix("/") or None,
        )

    @classmethod
    def from_env(cls, secret_var: str | None = None) -> "PgConnectionInfo":
        """Reads TEMPCHART_POSTGRES_URL, or else TEMPCHART_DB_{USER,PASSWORD,HOST,PORT,DBNAME}.

        secret_var names a variable holding {"username": ..., "password": ...}
        JSON, which replaces the credentials read otherwise.
        """
        url = os.getenv(ENV_POSTGRES_URL)
        if url:
            info = cls.from_url(url)
        else:
            env = {
                k: os.getenv(ENV_DB_PREFIX + k.upper())
                for k in ("user", "password", "host", "port", "dbname")
            }
            info = cls(**{k: v for k, v in env.items() if v})

        if secret_var:
            info = info.model_copy(update=_read_secret(secret_var))
        return info

    def url(self, hide_password: bool = False) -> str:
        """Returns the SQLAlchemy URL. Use hide_password=True for anything that gets logged."""
        credentials = self.user or ""
        if self.password and not hide_password:
            credentials += f":{self.password}"
        netloc = self.host or ""
        if self.port:
            netloc += f":{self.port}"
        if credentials:
            netloc = f"{credentials}@{netloc}"
        return f"postgresql+psycopg://{netloc}/{self.dbname or ''}"


class DatabaseConfig(BaseModel):
    """Where temperatures are stored.

    Postgres is used if postgres is set, otherwise the SQLite file
    temperatures.sqlite in base_dir.
    """

    base_dir: str = "."
    postgres: PgConnectionInfo | None = None

    @classmethod
    def from_env(cls, base_dir: str, postgres_url: str | None = None) -> "DatabaseConfig":
        """Picks Postgres if postgres_url or any TEMPCHART_ Postgres variable is set."""
        if postgres_url:
            postgres = PgConnectionInfo.from_url(postgres_url)
        elif ENV_ROLE_SECRET in os.environ:
            postgres = PgConnectionInfo.from_env(secret_var=ENV_ROLE_SECRET)
        elif os.getenv(ENV_POSTGRES_URL) or os.getenv(ENV_DB_PREFIX + "HOST"):
            postgres = PgConnectionInfo.from_env()
        else:
            postgres = None
        return cls(base_dir=base_dir, postgres=postgres)

    @property
    def is_sqlite(self) -> bool:
        return self.postgres is None

    @property
    def sqlite_path(self) -> str:
        return os.path.join(self.base_dir, bc.SQLITE_DB_FILENAME)

    def sanitized_url(self) -> str:
        if self.postgres:
            return self.postgres.url(hide_password=True)
        return f"sqlite:///{self.sqlite_path}"

    def create_engine(self, echo: bool = False) -> sa.Engine:
        logger.info("Connecting to %s", self.sanitized_url())
        if self.postgres:
            return sa.create_engine(self.postgres.url(), echo=echo)
        return sa.create_engine(f"sqlite:///{self.sqlite_path}", echo=echo)
