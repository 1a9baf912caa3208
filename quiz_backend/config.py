"""
Central settings for the quiz backend, its CLI and the quiz client.

Settings are resolved once (``Settings.from_env``) and handed to every
collaborator: the FastAPI app keeps them on ``app.state``, the CLI passes
them explicitly. Nothing else reads the process environment.

Env file precedence: process environment > .env.<QUIZ_ENV>.local > .env
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from dotenv import dotenv_values, load_dotenv
from pydantic import BaseModel, Field
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"

DEFAULT_FRONTEND_ORIGINS = ["http://localhost:5173", "http://localhost:4173"]
DEFAULT_MYSQL_PORT = 3306


class ConfigurationError(RuntimeError):
    pass


def env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def normalize_database_url(url: str) -> str:
    """Point bare mysql/mariadb URLs at the PyMySQL driver."""
    for scheme in ("mysql", "mariadb"):
        if url.startswith(f"{scheme}://"):
            return f"{scheme}+pymysql://" + url[len(scheme) + 3:]
    return url


def build_database_url(
    host: Optional[str],
    username: Optional[str],
    password: Optional[str],
    name: Optional[str],
    port: Optional[str] = None,
) -> Optional[str]:
    """Build a MySQL URL from discrete parts; None unless every part is set."""
    if not (host and username and password and name):
        return None
    url = URL.create(
        "mysql+pymysql",
        username=username,
        password=password,
        host=host,
        port=int(port or DEFAULT_MYSQL_PORT),
        database=name,
    )
    return url.render_as_string(hide_password=False)


def mask_database_url(url: Optional[str]) -> str:
    if not url:
        return "(not set)"
    try:
        return make_url(url).render_as_string(hide_password=True)
    except ArgumentError:
        return "(unparseable)"


def load_env_files(env: str, base_dir: Optional[Path] = None) -> None:
    base_dir = base_dir or Path.cwd()
    local_env = base_dir / f".env.{env}.local"
    package_env = base_dir / ".env"
    logger.debug(f"Loading env files: {local_env}, {package_env}")
    # load_dotenv never overrides variables that are already set
    load_dotenv(local_env)
    load_dotenv(package_env)


class Settings(BaseModel):
    env: str = "development"

    # Database
    database_url: Optional[str] = None
    database_name: Optional[str] = None  # explicit DATABASE_NAME, wins over the URL path
    sql_echo: bool = False

    # Test reset endpoint
    enable_test_endpoint: bool = False
    test_reset_secret: Optional[str] = None

    # HTTP
    frontend_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_FRONTEND_ORIGINS))
    port: int = 3000
    max_question_limit: int = 50

    # Answer handling
    record_attempts: bool = False
    verify_option_ownership: bool = False

    # Seeding
    allow_prod_seed: bool = False
    data_dir: Path = DATA_DIR

    log_level: str = "INFO"

    # Client
    mock_mode: bool = False
    api_base: str = "http://localhost:3000/api"

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        *,
        load_files: bool = True,
        base_dir: Optional[Path] = None,
    ) -> "Settings":
        if environ is None:
            env_name = os.environ.get("QUIZ_ENV", "development")
            if load_files:
                load_env_files(env_name, base_dir)
            environ = os.environ

        database_url = environ.get("DATABASE_URL") or build_database_url(
            environ.get("DATABASE_HOST"),
            environ.get("DATABASE_USERNAME"),
            environ.get("DATABASE_PASSWORD"),
            environ.get("DATABASE_NAME"),
            environ.get("DATABASE_PORT"),
        )
        if database_url:
            database_url = normalize_database_url(database_url)

        origins = environ.get("FRONTEND_ORIGIN")
        frontend_origins = (
            [o.strip() for o in origins.split(",") if o.strip()]
            if origins
            else list(DEFAULT_FRONTEND_ORIGINS)
        )

        values: Dict = {
            "env": environ.get("QUIZ_ENV", "development"),
            "database_url": database_url,
            "database_name": environ.get("DATABASE_NAME") or None,
            "sql_echo": env_flag(environ.get("SQL_ECHO")),
            "enable_test_endpoint": env_flag(environ.get("ENABLE_TEST_ENDPOINT")),
            "test_reset_secret": environ.get("TEST_RESET_SECRET") or None,
            "frontend_origins": frontend_origins,
            "allow_prod_seed": env_flag(environ.get("QUIZ_ALLOW_PROD_SEED")),
            "record_attempts": env_flag(environ.get("QUIZ_RECORD_ATTEMPTS")),
            "verify_option_ownership": env_flag(environ.get("QUIZ_VERIFY_OPTION_OWNERSHIP")),
            "log_level": environ.get("LOG_LEVEL", "INFO").upper(),
            "mock_mode": env_flag(environ.get("QUIZ_MOCK")),
        }
        if environ.get("PORT"):
            values["port"] = int(environ["PORT"])
        if environ.get("QUIZ_API_BASE"):
            values["api_base"] = environ["QUIZ_API_BASE"]

        settings = cls(**values)
        logger.debug(f"Resolved DATABASE_URL: {mask_database_url(settings.database_url)}")
        return settings

    def require_database_url(self) -> str:
        if not self.database_url:
            raise ConfigurationError(
                "DATABASE_URL is not set. Set DATABASE_URL or DATABASE_HOST, "
                "DATABASE_USERNAME, DATABASE_PASSWORD and DATABASE_NAME "
                "(e.g. in .env.<QUIZ_ENV>.local)."
            )
        return self.database_url

    @property
    def effective_database_name(self) -> str:
        """Name used by the reset and production guards."""
        if self.database_name:
            return self.database_name
        if not self.database_url:
            return ""
        try:
            return make_url(self.database_url).database or ""
        except ArgumentError:
            return ""

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


class ProvisioningSettings(BaseModel):
    """Root credentials and target databases for the provisioning commands."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_MYSQL_PORT
    root_user: str = "root"
    root_password: str = ""

    dev_database: str = "quiz_dev"

    test_database: str = "quiz_test"
    test_user: str = "quiz_test_user"
    test_password: Optional[str] = None

    prod_database: str = "quiz_prod"
    prod_user: str = "quiz_prod_user"
    prod_password: Optional[str] = None
    create_prod: bool = False

    @classmethod
    def from_env_file(cls, env_file: Optional[Path] = None) -> "ProvisioningSettings":
        """Read ``env_file`` (if given) layered over the process environment."""
        environ: Dict[str, Optional[str]] = dict(os.environ)
        if env_file is not None and env_file.exists():
            environ.update(dotenv_values(env_file))

        values: Dict = {
            "host": environ.get("DATABASE_HOST") or "127.0.0.1",
            "root_user": environ.get("DB_ROOT_USERNAME") or environ.get("DATABASE_USERNAME") or "root",
            "root_password": environ.get("DB_ROOT_PASSWORD") or environ.get("DATABASE_PASSWORD") or "",
            "dev_database": environ.get("DATABASE_NAME") or "quiz_dev",
            "test_database": environ.get("TEST_DATABASE_NAME") or "quiz_test",
            "test_user": environ.get("TEST_DATABASE_USER") or "quiz_test_user",
            "test_password": environ.get("TEST_DATABASE_PASSWORD") or None,
            "prod_database": environ.get("PROD_DATABASE_NAME") or "quiz_prod",
            "prod_user": environ.get("PROD_DATABASE_USER") or "quiz_prod_user",
            "prod_password": environ.get("PROD_DATABASE_PASSWORD") or None,
            "create_prod": env_flag(environ.get("CREATE_PROD")) or env_flag(environ.get("CONFIRM_CREATE_PROD")),
        }
        if environ.get("DATABASE_PORT"):
            values["port"] = int(environ["DATABASE_PORT"])
        return cls(**values)

    def server_url(self) -> str:
        url = URL.create(
            "mysql+pymysql",
            username=self.root_user,
            password=self.root_password,
            host=self.host,
            port=self.port,
        )
        return url.render_as_string(hide_password=False)
