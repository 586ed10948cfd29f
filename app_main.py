"""Application entry point for the QuizPortal server."""

from __future__ import annotations

import argparse
from pathlib import Path

from quiz_portal.core.quiz_importer import load_quiz_from_file
from quiz_portal.core.quiz_manager import QuizManager
from quiz_portal.core.services.authorization import Credential
from quiz_portal.core.settings import Settings, get_settings
from quiz_portal.server.api_server import run_api_server
from quiz_portal.utils.logging_config import configure_logging


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the QuizPortal API server.")
    parser.add_argument("--host", help="Interface to bind.")
    parser.add_argument("--port", type=int, help="Port to listen on.")
    parser.add_argument("--auth-mode", choices=["password", "role"], help="Authorization strategy.")
    parser.add_argument("--seed", type=Path, help="Quiz text file imported as a draft at start-up.")
    return parser.parse_args(argv)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        "host": args.host,
        "port": args.port,
        "auth_mode": args.auth_mode,
        "seed_quiz_file": args.seed,
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def _seed_quiz(manager: QuizManager, settings: Settings) -> str | None:
    """Import the configured quiz file as a draft owned by the start-up author."""
    if settings.seed_quiz_file is None:
        return None
    if settings.auth_mode == "role":
        admins = settings.admin_identity_list()
        if not admins:
            raise SystemExit("Seeding a quiz in role mode requires QUIZ_PORTAL_ADMIN_IDENTITIES.")
        credential = Credential(identity=admins[0])
    else:
        credential = Credential(secret=settings.teacher_password)
    imported = load_quiz_from_file(settings.seed_quiz_file)
    return manager.create_imported_quiz(credential, imported)


def main(argv: list[str] | None = None) -> None:
    """Initialize logging, build the quiz manager and serve the API."""
    settings = _apply_overrides(get_settings(), _parse_args(argv))
    logger = configure_logging(settings.log_level)
    logger.info("Starting QuizPortal with %s authorization", settings.auth_mode)

    quiz_manager = QuizManager.from_settings(settings)
    seeded_id = _seed_quiz(quiz_manager, settings)
    if seeded_id is not None:
        logger.info("Seeded draft quiz %s from %s", seeded_id, settings.seed_quiz_file)

    run_api_server(
        quiz_manager=quiz_manager,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
