#!/usr/bin/env python3
# cli.py
#
# Provisioning, seeding and maintenance commands for the quiz backend,
# plus a terminal client for playing the quiz.

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from quiz_backend.config import ProvisioningSettings, Settings, mask_database_url, normalize_database_url
from quiz_backend.infrastructure.db.session import (
    create_db_engine,
    create_session_factory,
    init_db,
    session_scope,
)
from quiz_backend.utils.logging_config import configure_logging

logger = logging.getLogger("quiz_backend.cli")


def _open_session(settings: Settings):
    engine = create_db_engine(settings)
    init_db(engine)
    return session_scope(create_session_factory(engine))


# --------------------- server --------------------------

def cmd_serve(args, settings: Settings) -> int:
    import uvicorn

    uvicorn.run("main:app", host=args.host, port=args.port or settings.port, reload=args.reload)
    return 0


def cmd_init_db(args, settings: Settings) -> int:
    init_db(create_db_engine(settings))
    logger.info(f"Tables ensured on {mask_database_url(settings.database_url)}")
    return 0


# --------------------- provisioning --------------------------

def cmd_create_db(args, settings: Settings) -> int:
    from quiz_backend.application.admin.provisioning import create_database

    prov = ProvisioningSettings.from_env_file(args.env_file)
    name = args.name or prov.dev_database
    create_database(prov.server_url(), name)
    print(f"Database {name} ensured")
    return 0


def cmd_create_multi_db(args, settings: Settings) -> int:
    from quiz_backend.application.admin.provisioning import create_multi_db

    prov = ProvisioningSettings.from_env_file(args.env_file)
    created = create_multi_db(prov, with_prod=True if args.with_prod else None)

    print("\nSummary (store these secrets safely):")
    for env_name, target in created.items():
        print(f"{env_name.upper()} DB: {target['database']}")
        print(f"{env_name.upper()} USER: {target['user']}")
        print(f"{env_name.upper()} PASSWORD: {target['password']}")
    if "prod" not in created:
        print("PROD DB not created in this run")
    print("\nNow copy these values into your .env.test.local / .env.production.local as appropriate.")
    return 0


def cmd_rotate_db_passwords(args, settings: Settings) -> int:
    from dotenv import dotenv_values

    from quiz_backend.application.admin.provisioning import (
        apply_rotation,
        mask,
        plan_rotation,
        write_env_updates,
    )

    env_file: Path = args.env_file
    if not env_file.exists():
        logger.error(f"Missing {env_file}. Create it with DB_ROOT_* and DATABASE_HOST set.")
        return 1

    env = dotenv_values(env_file)
    if not (env.get("DB_ROOT_USERNAME") and env.get("DB_ROOT_PASSWORD") and env.get("DATABASE_HOST")):
        logger.error(f"DB_ROOT_USERNAME, DB_ROOT_PASSWORD and DATABASE_HOST must be set in {env_file}")
        return 1

    plan = plan_rotation(env)
    print("Password rotation plan (masked):")
    for step in plan:
        print(f" - {step.user}: {mask(step.new_password)}")

    if not args.yes:
        print(f"Dry-run mode. Rerun with --yes to apply changes and write new passwords to {env_file}.")
        return 0

    prov = ProvisioningSettings.from_env_file(env_file)
    failed = apply_rotation(prov.server_url(), plan)
    write_env_updates(env_file, {s.password_key: s.new_password for s in plan if s.user not in failed})
    print(f"Wrote new passwords to {env_file} (file mode 0600).")
    return 1 if failed else 0


# --------------------- seeding --------------------------

def cmd_seed(args, settings: Settings) -> int:
    from quiz_backend.application.admin.seed_usecase import seed_dev

    with _open_session(settings) as db:
        print(seed_dev(db, settings, args.file))
    return 0


def cmd_seed_system(args, settings: Settings) -> int:
    from quiz_backend.application.admin.seed_usecase import seed_system

    with _open_session(settings) as db:
        seed_system(db, settings)
    return 0


def cmd_seed_test(args, settings: Settings) -> int:
    from quiz_backend.application.admin.seed_usecase import seed_test

    with _open_session(settings) as db:
        print(seed_test(db, settings, args.file))
    return 0


def cmd_reset_test(args, settings: Settings) -> int:
    from quiz_backend.application.admin.seed_usecase import reset_test

    with _open_session(settings) as db:
        print(reset_test(db, settings, args.file))
    return 0


def cmd_list_questions(args, settings: Settings) -> int:
    from quiz_backend.infrastructure.repositories.question_repository import QuestionRepository
    from quiz_backend.presentation.schemas.question_schema import QuestionSummaryOut

    if args.url:
        settings = settings.model_copy(update={"database_url": normalize_database_url(args.url)})
    with _open_session(settings) as db:
        for q in QuestionRepository(db).list_all():
            row = QuestionSummaryOut.model_validate(q)
            print(f"{row.id}\t{row.stem}")
    return 0


def cmd_import(args, settings: Settings) -> int:
    from quiz_backend.application.admin.bulk_upload_usecase import process_bulk_upload

    path: Path = args.file
    tags = [t.strip() for t in args.tags.split(",")] if args.tags else None
    with _open_session(settings) as db:
        result = process_bulk_upload(db, path.read_bytes(), path.name, default_tags=tags)
    print(f"Rows: {result['total_rows']}, inserted: {result['inserted']}, failed: {result['failed']}")
    for err in result["errors"]:
        print(f"  {err}")
    return 0 if result["failed"] == 0 else 1


# --------------------- client --------------------------

def cmd_play(args, settings: Settings) -> int:
    from quiz_backend.client.api_client import QuizApiClient
    from quiz_backend.client.quiz_session import QuizSession
    from quiz_backend.client.sources import make_question_source
    from quiz_backend.client.terminal import play

    update = {}
    if args.mock:
        update["mock_mode"] = True
    if args.api_base:
        update["api_base"] = args.api_base
    settings = settings.model_copy(update=update)

    async def _run():
        api = None if settings.mock_mode else QuizApiClient(settings.api_base)
        try:
            await play(QuizSession(make_question_source(settings, api)), max_rounds=args.rounds)
        finally:
            if api is not None:
                await api.aclose()

    asyncio.run(_run())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="quiz-backend", description="Quiz backend tooling")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("serve", help="Run the API server")
    p.add_argument("--host", default="0.0.0.0")
    p.add_argument("--port", type=int, default=None)
    p.add_argument("--reload", action="store_true")
    p.set_defaults(func=cmd_serve)

    p = sub.add_parser("init-db", help="Create tables")
    p.set_defaults(func=cmd_init_db)

    p = sub.add_parser("create-db", help="CREATE DATABASE IF NOT EXISTS on the server")
    p.add_argument("--name", default=None)
    p.add_argument("--env-file", type=Path, default=None)
    p.set_defaults(func=cmd_create_db)

    p = sub.add_parser("create-multi-db", help="Ensure test (and optionally prod) databases and users")
    p.add_argument("--with-prod", action="store_true")
    p.add_argument("--env-file", type=Path, default=Path(".env.create-db.local"))
    p.set_defaults(func=cmd_create_multi_db)

    p = sub.add_parser("rotate-db-passwords", help="Rotate application database user passwords")
    p.add_argument("--env-file", type=Path, default=Path(".env.create-db.local"))
    p.add_argument("--yes", action="store_true", help="Apply changes (default is a dry run)")
    p.set_defaults(func=cmd_rotate_db_passwords)

    p = sub.add_parser("seed", help="Seed the system question and the development dataset")
    p.add_argument("--file", type=Path, default=None)
    p.set_defaults(func=cmd_seed)

    p = sub.add_parser("seed-system", help="Create the base question if missing")
    p.set_defaults(func=cmd_seed_system)

    p = sub.add_parser("seed-test", help="Upsert the test fixture")
    p.add_argument("--file", type=Path, default=None)
    p.set_defaults(func=cmd_seed_test)

    p = sub.add_parser("reset-test", help="Wipe all questions and reseed test data")
    p.add_argument("--file", type=Path, default=None)
    p.set_defaults(func=cmd_reset_test)

    p = sub.add_parser("list-questions", help="Print id and stem of every question")
    p.add_argument("--url", default=None, help="Database URL overriding the configured one")
    p.set_defaults(func=cmd_list_questions)

    p = sub.add_parser("import", help="Bulk import questions from CSV/XLSX")
    p.add_argument("file", type=Path)
    p.add_argument("--tags", default=None, help="Comma-separated tags for rows without a tags column")
    p.set_defaults(func=cmd_import)

    p = sub.add_parser("play", help="Play the quiz in the terminal")
    p.add_argument("--mock", action="store_true", help="Use the built-in mock question")
    p.add_argument("--api-base", default=None)
    p.add_argument("--rounds", type=int, default=None)
    p.set_defaults(func=cmd_play)

    return parser


def main(argv: Optional[List[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    try:
        return args.func(args, settings)
    except Exception as e:
        logger.error(f"{args.command} failed: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
