"""
Database provisioning for MySQL-compatible servers:
- create a single database
- create the test (and optionally prod) database plus its user
- rotate application user passwords and write them back to an env file

Identifiers cannot be bound as SQL parameters, so database and user names are
validated against a strict pattern before being interpolated.
"""
import logging
import os
import re
import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from dotenv import set_key
from sqlalchemy import create_engine, text

from quiz_backend.config import ProvisioningSettings

logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z0-9_]+$")

# (user key, password key) pairs managed by rotate_passwords
ROTATED_USERS = [
    ("DEV_DATABASE_USER", "DEV_DATABASE_PASSWORD"),
    ("TEST_DATABASE_USER", "TEST_DATABASE_PASSWORD"),
    ("PROD_DATABASE_USER", "PROD_DATABASE_PASSWORD"),
]


def check_identifier(name: str) -> str:
    if not name or not _IDENTIFIER.match(name):
        raise ValueError(f"Invalid database identifier: {name!r}")
    return name


def generate_password() -> str:
    return secrets.token_urlsafe(24)


def mask(value: Optional[str]) -> str:
    if not value:
        return "(not set)"
    if len(value) <= 6:
        return "***"
    return f"{value[:3]}***{value[-3:]}"


def _server_engine(server_url: str):
    return create_engine(server_url, isolation_level="AUTOCOMMIT")


def create_database(server_url: str, name: str) -> None:
    check_identifier(name)
    engine = _server_engine(server_url)
    try:
        with engine.connect() as conn:
            conn.execute(text(f"CREATE DATABASE IF NOT EXISTS `{name}`"))
        logger.info(f"Database {name} ensured")
    finally:
        engine.dispose()


def _ensure_database_and_user(conn, database: str, user: str, password: str) -> None:
    check_identifier(database)
    check_identifier(user)
    conn.execute(text(f"CREATE DATABASE IF NOT EXISTS `{database}`"))
    conn.execute(
        text(f"CREATE USER IF NOT EXISTS `{user}`@'%' IDENTIFIED BY :password"),
        {"password": password},
    )
    conn.execute(text(f"GRANT ALL PRIVILEGES ON `{database}`.* TO `{user}`@'%'"))


def create_multi_db(settings: ProvisioningSettings, with_prod: Optional[bool] = None) -> Dict[str, Dict[str, str]]:
    """
    Ensure the test database/user and, when confirmed, the prod database/user.
    Returns the credentials that were applied, keyed by environment.
    """
    if not settings.root_password:
        raise ValueError(
            "DB root password is required. Set DB_ROOT_PASSWORD or DATABASE_PASSWORD."
        )
    create_prod = settings.create_prod if with_prod is None else with_prod

    targets = {
        "test": {
            "database": settings.test_database,
            "user": settings.test_user,
            "password": settings.test_password or generate_password(),
        }
    }
    if create_prod:
        targets["prod"] = {
            "database": settings.prod_database,
            "user": settings.prod_user,
            "password": settings.prod_password or generate_password(),
        }
    else:
        logger.info("Prod creation skipped. Set CONFIRM_CREATE_PROD=true to create the prod database.")

    engine = _server_engine(settings.server_url())
    try:
        with engine.connect() as conn:
            logger.info(f"Connected to {settings.host}:{settings.port} as {settings.root_user}")
            for env_name, target in targets.items():
                logger.info(f"Ensuring {env_name} database {target['database']} and user {target['user']}")
                _ensure_database_and_user(conn, target["database"], target["user"], target["password"])
            conn.execute(text("FLUSH PRIVILEGES"))
    finally:
        engine.dispose()
    return targets


@dataclass
class RotationStep:
    user: str
    password_key: str
    new_password: str


def plan_rotation(env: Mapping[str, Optional[str]]) -> List[RotationStep]:
    plan = []
    for user_key, pass_key in ROTATED_USERS:
        user = env.get(user_key)
        if not user:
            continue
        plan.append(RotationStep(user=user, password_key=pass_key, new_password=generate_password()))
    return plan


def apply_rotation(server_url: str, plan: List[RotationStep]) -> List[str]:
    """Alter each planned user's password. Returns the users that failed."""
    failed = []
    engine = _server_engine(server_url)
    try:
        with engine.connect() as conn:
            for step in plan:
                user = check_identifier(step.user)
                logger.info(f"Altering password for {user}")
                # MySQL and older MariaDB accept different syntaxes
                statements = [
                    f"ALTER USER '{user}'@'%' IDENTIFIED BY :password",
                    f"SET PASSWORD FOR '{user}'@'%' = :password",
                ]
                for statement in statements:
                    try:
                        conn.execute(text(statement), {"password": step.new_password})
                        break
                    except Exception as e:
                        logger.debug(f"Password change attempt failed for {user}: {e}")
                else:
                    logger.warning(f"Failed to alter password for {user}. The user may not exist.")
                    failed.append(user)
    finally:
        engine.dispose()
    return failed


def write_env_updates(path: Path, updates: Dict[str, str]) -> None:
    """Replace KEY=value lines in place, append missing keys, chmod 0600."""
    for key, value in updates.items():
        set_key(path, key, value, quote_mode="never")
    os.chmod(path, 0o600)
