"""Composition root for the IdeaHub review-access system.

This module is the ONLY location that imports both core domain logic
and concrete adapter implementations. All wiring of dependencies
happens here, creating a clear entry point for the application.

Module Structure:
- Configuration loading via config module
- Adapter instantiation
- Core service initialization
- Dependency injection
- Entry point selection (cli, server)
"""

import asyncio
import json
import logging
import sys
from typing import Any

from ideahub.adapters.blob.local import LocalBlobStorageAdapter
from ideahub.adapters.blob.remote import HttpBlobStorageAdapter
from ideahub.adapters.cli.commands import CLICommandHandler
from ideahub.adapters.health.http_server import HealthHTTPServer
from ideahub.adapters.store.sqlite import SQLiteStore
from ideahub.config import Settings, load_settings
from ideahub.core.attachment_service import AttachmentService
from ideahub.core.authorization import ReviewAuthorizationService
from ideahub.core.contacts import ContactChecker
from ideahub.core.entitlement_service import EntitlementService
from ideahub.core.health import HealthService
from ideahub.core.ports import BlobStoragePort
from ideahub.core.status import StatusClassifier

logger = logging.getLogger(__name__)


async def _run_cli_interactive(cli_handler: CLICommandHandler, acting_user: str) -> None:
    """Run interactive CLI loop.

    Provides a REPL-like interface for operator commands.

    Args:
        cli_handler: CLICommandHandler instance for executing commands.
        acting_user: Acting user recorded when a command does not name one.
    """
    logger.info("Starting interactive CLI. Type 'help' for available commands or 'exit' to quit.")

    loop = asyncio.get_running_loop()

    while True:
        try:
            # Read command from stdin in a thread to avoid blocking
            command_line = await loop.run_in_executor(None, input, "ideahub> ")
            command_line = command_line.strip()

            if not command_line:
                continue

            if command_line.lower() == "exit":
                logger.info("Exiting CLI")
                break

            if command_line.lower() == "help":
                _print_cli_help()
                continue

            parts = command_line.split(maxsplit=1)
            command = parts[0].lower()
            args_str = parts[1] if len(parts) > 1 else ""

            try:
                args = json.loads(args_str) if args_str else {}
            except json.JSONDecodeError:
                logger.error("Invalid JSON arguments. Use 'help' for command syntax.")
                continue

            if not isinstance(args, dict):
                logger.error("Arguments must be a JSON object. Use 'help' for command syntax.")
                continue

            try:
                result = await _execute_cli_command(cli_handler, command, args, acting_user)
                print(json.dumps(result, indent=2, default=str))
            except Exception as e:
                logger.error(f"Command execution error: {e}", exc_info=True)
                print(json.dumps({"status": "error", "message": str(e)}, indent=2))

        except EOFError:
            # Ctrl+D to exit
            logger.info("EOF received, exiting CLI")
            break
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            continue


def _require(args: dict[str, Any], *names: str) -> None:
    missing = [name for name in names if name not in args]
    if missing:
        raise ValueError(f"Missing required parameter: {', '.join(missing)}")


async def _execute_cli_command(
    cli_handler: CLICommandHandler,
    command: str,
    args: dict[str, Any],
    acting_user: str = "cli",
) -> dict[str, Any]:
    """Execute a CLI command.

    Args:
        cli_handler: CLICommandHandler instance.
        command: Command name.
        args: Command arguments.
        acting_user: Default acting user for grant changes.

    Returns:
        Command result dictionary.

    Raises:
        ValueError: If command is not recognized or a parameter is missing.
    """
    if command == "can-edit":
        _require(args, "idea_id", "user_id")
        return await cli_handler.can_edit(int(args["idea_id"]), str(args["user_id"]))

    elif command == "submitted":
        _require(args, "idea_id")
        return await cli_handler.submitted(int(args["idea_id"]))

    elif command == "entitlements":
        return await cli_handler.list_entitlements(args.get("user_ids"))

    elif command == "user-entitlements":
        _require(args, "user_id")
        return await cli_handler.user_entitlements(str(args["user_id"]))

    elif command == "grants":
        return await cli_handler.list_grants()

    elif command == "grant":
        _require(args, "user_id", "entitlement")
        return await cli_handler.grant(
            user_id=str(args["user_id"]),
            entitlement=str(args["entitlement"]),
            acting_user=str(args.get("acting_user", acting_user)),
        )

    elif command == "revoke":
        _require(args, "user_id", "entitlement")
        return await cli_handler.revoke(
            user_id=str(args["user_id"]),
            entitlement=str(args["entitlement"]),
            acting_user=str(args.get("acting_user", acting_user)),
        )

    elif command == "files":
        _require(args, "idea_id")
        return await cli_handler.list_files(int(args["idea_id"]))

    elif command == "health":
        return await cli_handler.check_health()

    else:
        raise ValueError(f"Unknown command: {command}. Use 'help' for available commands.")


def _print_cli_help() -> None:
    """Print CLI help message."""
    help_text = """
Available Commands (JSON format):

  can-edit
    Check whether a user may edit an idea.
    Required: idea_id, user_id

    Example: can-edit {"idea_id": 1, "user_id": "u1"}

  submitted
    Check whether an idea is in the Submitted status group.
    Required: idea_id

    Example: submitted {"idea_id": 1}

  entitlements
    List the entitlement catalog, or the entitlements held by users.
    Optional: user_ids

    Example: entitlements {"user_ids": ["u1", "u2"]}

  user-entitlements
    List the active entitlements of one user.
    Required: user_id

    Example: user-entitlements {"user_id": "u1"}

  grants
    List every active grant.

  grant
    Grant an entitlement to a user.
    Required: user_id, entitlement
    Optional: acting_user

    Example: grant {"user_id": "u1", "entitlement": "IPO_REVIEWER_ACCESS"}

  revoke
    Revoke an entitlement from a user.
    Required: user_id, entitlement
    Optional: acting_user

    Example: revoke {"user_id": "u1", "entitlement": "IPO_REVIEWER_ACCESS"}

  files
    List the active attachments of an idea.
    Required: idea_id

    Example: files {"idea_id": 1}

  health
    Run liveness and readiness checks.

  help
    Show this help message.

  exit
    Exit the CLI.

Note: All commands accept arguments as a single JSON object.
Provide the JSON after the command name on the same line.
    """
    print(help_text)


def configure_logging(log_level: str, log_format: str) -> None:
    """Configure application logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Log format (json, text).
    """
    level = getattr(logging, log_level, logging.INFO)

    if log_format == "json":
        format_str = (
            '{"time": "%(asctime)s", "level": "%(levelname)s", '
            '"logger": "%(name)s", "message": "%(message)s"}'
        )
    else:
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


def build_blob_storage(settings: Settings) -> BlobStoragePort:
    """Instantiate the configured blob storage adapter.

    Raises:
        ValueError: If the http backend is selected without a container URL.
    """
    if settings.blob_backend == "http":
        if not settings.blob_container_url:
            raise ValueError("HTTP blob backend selected but BLOB_CONTAINER_URL not set")
        logger.info(f"Blob storage: HTTP container {settings.blob_container_url}")
        return HttpBlobStorageAdapter(
            container_url=settings.blob_container_url,
            sas_token=settings.blob_sas_token,
            timeout=settings.blob_timeout_seconds,
        )

    logger.info(f"Blob storage: local directory {settings.blob_local_dir}")
    return LocalBlobStorageAdapter(root_dir=settings.blob_local_dir)


async def _serve_forever(server: HealthHTTPServer) -> None:
    await server.start()
    try:
        while True:
            await asyncio.sleep(1)
    finally:
        await server.stop()


async def bootstrap(settings: Settings | None = None) -> None:
    """Load configuration, wire adapters, and start the application.

    This is the composition root: the single place where all components
    are instantiated and wired together.

    Steps:
    1. Load configuration from environment
    2. Configure logging
    3. Instantiate adapters with configuration
    4. Initialize core services
    5. Select and start run mode

    Raises:
        SystemExit: On fatal errors (configuration, adapter initialization)
        asyncio.CancelledError: On graceful shutdown signal
    """
    # Step 1: Load configuration
    if settings is None:
        settings = load_settings()

    # Step 2: Configure logging
    configure_logging("DEBUG" if settings.debug else settings.log_level, settings.log_format)
    logger.info("Loading IdeaHub review-access system...")

    # Step 3: Instantiate adapters
    logger.info("Initializing adapters...")
    store = SQLiteStore(
        db_path=settings.store_sqlite_path,
        pool_size=settings.store_pool_size,
    )
    logger.info(f"Store initialized: {settings.store_sqlite_path}")

    try:
        blobs = build_blob_storage(settings)
    except ValueError as e:
        logger.error(str(e))
        await store.close_pool()
        sys.exit(1)

    # Step 4: Initialize core services
    logger.info("Initializing core services...")
    classifier = StatusClassifier(store)
    contacts = ContactChecker(store)
    access_service = ReviewAuthorizationService(
        ideas=store,
        reviewers=store,
        classifier=classifier,
        contacts=contacts,
    )
    entitlement_service = EntitlementService(store)
    attachment_service = AttachmentService(store, blobs)
    health_service = HealthService(store)

    # Step 5: Select run mode and start
    logger.info(f"Starting in {settings.run_mode} mode...")

    try:
        if settings.run_mode == "cli":
            cli_handler = CLICommandHandler(
                access=access_service,
                entitlements=entitlement_service,
                attachments=attachment_service,
                health=health_service,
            )
            await _run_cli_interactive(cli_handler, settings.cli_acting_user)

        elif settings.run_mode == "server":
            await _serve_forever(
                HealthHTTPServer(
                    health=health_service,
                    host=settings.http_host,
                    port=settings.http_port,
                )
            )

        else:
            logger.error(f"Unknown run mode: {settings.run_mode}")
            sys.exit(1)

    finally:
        # Clean up resources
        await store.close_pool()
        if isinstance(blobs, HttpBlobStorageAdapter):
            await blobs.close()


def main() -> None:
    """Application entry point.

    Loads configuration, wires adapters, initializes core services,
    and starts the appropriate run mode (cli or server).

    Exit codes:
        0: Successful shutdown
        1: Fatal bootstrap or runtime error
        130: Interrupted by user (SIGINT/KeyboardInterrupt)
    """
    try:
        asyncio.run(bootstrap())
    except KeyboardInterrupt:
        logger.warning("Shutdown requested by user (SIGINT)")
        sys.exit(130)
    except asyncio.CancelledError:
        logger.info("Graceful shutdown completed")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
