"""CLI configuration using environ-config.

This module defines the configuration classes for the command-line commands.
Every value can come from a ``COGNITO_CREDENTIALS_*`` environment variable
and be overridden by the matching command-line flag.
"""

import argparse
import os
from collections.abc import Mapping
from typing import TypeVar

import environ

from cognito_credentials_core.models import CredentialType

ENV_PREFIX = "COGNITO_CREDENTIALS"

T = TypeVar("T")


def _optional_int(value: object) -> int | None:
    """Convert an environment value to int, keeping None."""
    if value is None or value == "":
        return None
    return int(str(value))


@environ.config(prefix=ENV_PREFIX)
class RunConfig:
    """Configuration for the run and clear commands."""

    username: str = environ.var(default="", help="User pool username")
    password: str = environ.var(default="", help="User pool password")
    user_pool_id: str = environ.var(default="", help="User pool id")
    client_id: str = environ.var(default="", help="User pool app client id")
    identity_pool_id: str = environ.var(default="", help="Identity pool id")
    region: str = environ.var(default="", help="Identity pool region")
    credential_type: str = environ.var(
        default=CredentialType.ACCESS_KEY_ID.value,
        help="Credential field to print (accessKeyId, secretAccessKey or sessionToken)",
    )
    kvstore: str = environ.var(
        default="redis", help="Key-value store to use (redis or memory)"
    )

    # KV store configuration
    kvstore_default_ttl: int | None = environ.var(
        default=None,
        converter=_optional_int,
        help="Default TTL (seconds) for cache entries",
    )
    kvstore_key_prefix: str | None = environ.var(
        default=None, help="Prefix applied to cache keys"
    )
    kvstore_redis_host: str | None = environ.var(
        default=None, help="Redis host (when using redis)"
    )
    kvstore_redis_port: int | None = environ.var(
        default=None, converter=_optional_int, help="Redis port (when using redis)"
    )
    kvstore_redis_db: int | None = environ.var(
        default=None,
        converter=_optional_int,
        help="Redis database number (when using redis)",
    )
    kvstore_redis_password: str | None = environ.var(
        default=None, help="Redis password (when using redis)"
    )

    # AWS endpoint overrides
    idp_endpoint_url: str | None = environ.var(
        default=None, help="cognito-idp endpoint URL (e.g., LocalStack)"
    )
    identity_endpoint_url: str | None = environ.var(
        default=None, help="cognito-identity endpoint URL (e.g., LocalStack)"
    )

    log_level: str = environ.var(default="INFO", help="Log level")
    dev_mode: bool = environ.bool_var(
        default=False, help="Enable development mode logging"
    )


def _build_run_parser(prog: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=prog, add_help=True)
    parser.add_argument("--username")
    parser.add_argument("--password")
    parser.add_argument("--user-pool-id")
    parser.add_argument("--client-id")
    parser.add_argument("--identity-pool-id")
    parser.add_argument("--region")
    parser.add_argument(
        "--credential-type", choices=[t.value for t in CredentialType]
    )
    parser.add_argument("--kvstore", choices=["redis", "memory"])
    parser.add_argument("--kvstore-default-ttl")
    parser.add_argument("--kvstore-key-prefix")
    parser.add_argument("--kvstore-redis-host")
    parser.add_argument("--kvstore-redis-port")
    parser.add_argument("--kvstore-redis-db")
    parser.add_argument("--kvstore-redis-password")
    parser.add_argument("--idp-endpoint-url")
    parser.add_argument("--identity-endpoint-url")
    parser.add_argument("--log-level")
    parser.add_argument("--dev-mode", action="store_const", const="true")
    return parser


def args_to_config(
    config_cls: type[T],
    parser: argparse.ArgumentParser,
    args: list[str] | None,
    environ_map: Mapping[str, str] | None = None,
) -> T:
    """Build a config instance from environment variables and CLI flags.

    Flags that were given override the ``COGNITO_CREDENTIALS_<NAME>``
    environment variable of the same name.
    """
    namespace = parser.parse_args(args or [])
    merged = dict(os.environ if environ_map is None else environ_map)
    for name, value in vars(namespace).items():
        if value is not None:
            merged[f"{ENV_PREFIX}_{name.upper()}"] = str(value)
    return environ.to_config(config_cls, environ=merged)


def create_run_config(
    args: list[str] | None = None,
    environ_map: Mapping[str, str] | None = None,
    prog: str = "cognito-credentials run",
) -> RunConfig:
    """Create the run/clear configuration from CLI arguments and environment."""
    return args_to_config(RunConfig, _build_run_parser(prog), args, environ_map)
