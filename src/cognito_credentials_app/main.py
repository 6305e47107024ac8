"""Command-line interface and main entry point.

This module provides the CLI for printing one credential field for a Cognito
login, and for clearing the cached entry of a login.
"""
# ruff: noqa: T201

import asyncio
import sys
from typing import Any, NoReturn

import structlog

from cognito_credentials_app.cli_config import RunConfig, create_run_config
from cognito_credentials_app.observability import configure_logging, observe_around
from cognito_credentials_core import __version__
from cognito_credentials_core.config_factory import (
    CredentialsConfig,
    create_credentials_config,
)
from cognito_credentials_core.exceptions import CognitoCredentialsError

# Get logger for this module
logger = structlog.get_logger(__name__)


def _factory_kwargs(config: RunConfig) -> dict[str, Any]:
    """Map CLI config fields to factory kwargs, only including provided values."""
    factory_kwargs: dict[str, Any] = {}

    if config.kvstore_default_ttl is not None:
        factory_kwargs["default_ttl"] = config.kvstore_default_ttl
    if config.kvstore_key_prefix is not None:
        factory_kwargs["key_prefix"] = config.kvstore_key_prefix
    if config.kvstore_redis_host is not None:
        factory_kwargs["redis_host"] = config.kvstore_redis_host
    if config.kvstore_redis_port is not None:
        factory_kwargs["redis_port"] = config.kvstore_redis_port
    if config.kvstore_redis_db is not None:
        factory_kwargs["redis_db"] = config.kvstore_redis_db
    if config.kvstore_redis_password is not None:
        factory_kwargs["redis_password"] = config.kvstore_redis_password
    if config.idp_endpoint_url is not None:
        factory_kwargs["idp_endpoint_url"] = config.idp_endpoint_url
    if config.identity_endpoint_url is not None:
        factory_kwargs["identity_endpoint_url"] = config.identity_endpoint_url

    return factory_kwargs


def build_app_config(config: RunConfig) -> CredentialsConfig:
    """Create the application components for a run configuration."""
    return create_credentials_config(
        kv_store_type=config.kvstore, **_factory_kwargs(config)
    )


async def run_async(config: RunConfig) -> str:
    """Resolve the requested credential field."""
    app_config = build_app_config(config)
    async with app_config.kv_store:
        orchestrator = app_config.create_orchestrator()
        with (
            structlog.contextvars.bound_contextvars(
                user_pool_id=config.user_pool_id,
                identity_pool_id=config.identity_pool_id,
                kvstore=config.kvstore,
            ),
            observe_around(logger, "GET_CREDENTIAL"),
        ):
            return await orchestrator.run(
                config.username,
                config.password,
                config.user_pool_id,
                config.client_id,
                config.identity_pool_id,
                config.region,
                config.credential_type,
            )


async def clear_async(config: RunConfig) -> bool:
    """Remove the cached entry for a login."""
    app_config = build_app_config(config)
    async with app_config.kv_store:
        orchestrator = app_config.create_orchestrator()
        return await orchestrator.clear(
            config.username,
            config.password,
            config.user_pool_id,
            config.client_id,
            config.identity_pool_id,
            config.region,
        )


def _fail(event: str, error: Exception) -> NoReturn:
    """Log the error, report it on stderr and exit with status 1.

    ``ValueError`` covers configuration problems such as an unknown store
    type or a non-numeric setting.
    """
    message = getattr(error, "message", None) or str(error)
    logger.exception(event, error=message, code=getattr(error, "error_code", None))
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def run_command(args: list[str] | None = None) -> None:
    """Print one credential field for a Cognito login.

    Args:
        args: Command line arguments following the command name.
    """
    try:
        config = create_run_config(args)
        configure_logging(log_level=config.log_level, dev_mode=config.dev_mode)
        value = asyncio.run(run_async(config))
    except (CognitoCredentialsError, ValueError) as e:
        _fail("RUN_COMMAND_ERROR", e)

    print(value)


def clear_command(args: list[str] | None = None) -> None:
    """Remove the cached entry for a Cognito login.

    Args:
        args: Command line arguments following the command name.
    """
    try:
        config = create_run_config(args, prog="cognito-credentials clear")
        configure_logging(log_level=config.log_level, dev_mode=config.dev_mode)
        removed = asyncio.run(clear_async(config))
    except (CognitoCredentialsError, ValueError) as e:
        _fail("CLEAR_COMMAND_ERROR", e)

    print("Cache entry removed." if removed else "No cache entry found.")


def show_help() -> None:
    """Show help information for the CLI."""
    help_text = """
Cognito Credentials

Usage:
    cognito-credentials <command> [options]

Commands:
    run                Print one credential field for a Cognito login
    clear              Remove the cached entry for a Cognito login
    --help, -h         Show this help message
    --version, -v      Show version information

Options for run and clear:
    --username <name>             User pool username
    --password <password>         User pool password
    --user-pool-id <id>           User pool id (e.g. eu-west-1_AbCdEf)
    --client-id <id>              User pool app client id
    --identity-pool-id <id>       Identity pool id
    --region <region>             Identity pool region
    --credential-type <field>     accessKeyId, secretAccessKey or sessionToken
    --kvstore <type>              Key-value store type (redis, memory)
    --log-level <level>           Log level (DEBUG, INFO, WARNING, ERROR)
    --dev-mode                    Enable development mode

Every option can also be set as COGNITO_CREDENTIALS_<OPTION> in the
environment, e.g. COGNITO_CREDENTIALS_PASSWORD.

Examples:
    cognito-credentials run --username alice --user-pool-id eu-west-1_AbCdEf \\
        --client-id 1example23456789 --identity-pool-id eu-west-1:1234-abcd \\
        --region eu-west-1 --credential-type sessionToken
    cognito-credentials clear --username alice ...
"""
    print(help_text)


def main() -> None:
    """Main entry point for the CLI."""
    min_args = 2
    if len(sys.argv) < min_args:
        show_help()
        sys.exit(1)

    command = sys.argv[1]
    args = sys.argv[2:]
    # stderr logging until the command has read its own settings
    configure_logging()

    if command == "run":
        run_command(args)
    elif command == "clear":
        clear_command(args)
    elif command in ["--help", "-h", "help"]:
        show_help()
        sys.exit(0)
    elif command in ["--version", "-v", "version"]:
        print(f"cognito-credentials, version {__version__}")
        sys.exit(0)
    else:
        show_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
