"""Configuration loading and management for ScopeGuard.

Functions:
    load_config: Load configuration from ~/.scopeguard/config.yaml
    load_config_or_default: Same, falling back to defaults when absent
    load_credentials: Load credentials from ~/.scopeguard/credentials.yaml
    resolve_api_key: Find the oracle credential (env, .env, credentials file)
    create_default_config: Create default configuration files
    ensure_config_dir: Ensure ~/.scopeguard/ directory exists
"""

import os
from pathlib import Path
import stat
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
import yaml

load_dotenv()
load_dotenv(Path.home() / ".scopeguard" / ".env")

from scopeguard.config.models import (  # noqa: E402
    PLACEHOLDER_API_KEY,
    CredentialsConfig,
    ScopeGuardConfig,
    get_config_dir,
    get_default_config,
    get_default_credentials,
)
from scopeguard.core.errors import ConfigError  # noqa: E402

API_KEY_ENV_VAR = "SCOPEGUARD_API_KEY"

# Provider-native variables consulted after SCOPEGUARD_API_KEY
_PROVIDER_ENV_VARS = {
    "gemini": "GEMINI_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def ensure_config_dir() -> Path:
    """Create ~/.scopeguard/ with its data and logs subdirectories."""
    config_dir = get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    (config_dir / "data").mkdir(exist_ok=True)
    (config_dir / "logs").mkdir(exist_ok=True)

    return config_dir


def _set_secure_permissions(file_path: Path) -> None:
    os.chmod(file_path, stat.S_IRUSR | stat.S_IWUSR)


def _dump_yaml(model: BaseModel, path: Path) -> None:
    with path.open("w") as f:
        yaml.dump(
            model.model_dump(mode="json"),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


def create_default_config(
    config_dir: Path | None = None,
    *,
    overwrite: bool = False,
) -> tuple[Path, Path]:
    """Create config.yaml and credentials.yaml with default templates.

    credentials.yaml is created with chmod 600.

    Args:
        config_dir: Directory to create files in. Defaults to ~/.scopeguard/
        overwrite: If True, overwrite existing files.

    Returns:
        Tuple of (config_path, credentials_path).

    Raises:
        ConfigError: If files exist and overwrite=False.
    """
    if config_dir is None:
        config_dir = ensure_config_dir()
    else:
        config_dir.mkdir(parents=True, exist_ok=True)
        (config_dir / "data").mkdir(exist_ok=True)
        (config_dir / "logs").mkdir(exist_ok=True)

    config_path = config_dir / "config.yaml"
    credentials_path = config_dir / "credentials.yaml"

    if not overwrite:
        for path in (config_path, credentials_path):
            if path.exists():
                raise ConfigError(
                    f"Configuration file already exists: {path}",
                    config_file=str(path),
                )

    _dump_yaml(get_default_config(), config_path)
    _dump_yaml(get_default_credentials(), credentials_path)
    _set_secure_permissions(credentials_path)

    return config_path, credentials_path


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Failed to parse {path.name}: {e}",
            config_file=str(path),
            details={"yaml_error": str(e)},
        ) from e
    return data or {}


def _format_validation_errors(e: PydanticValidationError) -> str:
    lines = []
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"])
        lines.append(f"  - {loc}: {error['msg']}")
    return "\n".join(lines)


def load_config(config_path: Path | None = None) -> ScopeGuardConfig:
    """Load and validate configuration from YAML.

    Raises:
        ConfigError: If the file doesn't exist, is malformed, or fails validation.
    """
    if config_path is None:
        config_path = get_config_dir() / "config.yaml"

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}. "
            "Run `scopeguard config init` to create default configuration.",
            config_file=str(config_path),
        )

    config_dict = _read_yaml(config_path)

    try:
        return ScopeGuardConfig.model_validate(config_dict)
    except PydanticValidationError as e:
        raise ConfigError(
            "Configuration validation failed:\n" + _format_validation_errors(e),
            config_file=str(config_path),
            details={"validation_errors": e.errors()},
        ) from e


def load_config_or_default(config_path: Path | None = None) -> ScopeGuardConfig:
    """Load configuration, using defaults when no config file exists.

    A present but invalid file still raises ConfigError.
    """
    if config_path is None:
        config_path = get_config_dir() / "config.yaml"
    if not config_path.exists():
        return get_default_config()
    return load_config(config_path)


def load_credentials(credentials_path: Path | None = None) -> CredentialsConfig:
    """Load and validate credentials from YAML.

    Raises:
        ConfigError: If the file doesn't exist, is malformed, or fails validation.
    """
    if credentials_path is None:
        credentials_path = get_config_dir() / "credentials.yaml"

    if not credentials_path.exists():
        raise ConfigError(
            f"Credentials file not found: {credentials_path}. "
            "Run `scopeguard config init` to create default configuration.",
            config_file=str(credentials_path),
        )

    credentials_dict = _read_yaml(credentials_path)

    try:
        return CredentialsConfig.model_validate(credentials_dict)
    except PydanticValidationError as e:
        raise ConfigError(
            "Credentials validation failed:\n" + _format_validation_errors(e),
            config_file=str(credentials_path),
            details={"validation_errors": e.errors()},
        ) from e


def resolve_api_key(
    config: ScopeGuardConfig,
    credentials_path: Path | None = None,
) -> str | None:
    """Find the oracle access credential.

    Priority:
        1. SCOPEGUARD_API_KEY environment variable (or .env)
        2. credentials.yaml entry for the configured provider
        3. Provider-native environment variable (e.g. GEMINI_API_KEY)

    Placeholder keys written by ``config init`` count as absent.

    Returns:
        The API key, or None if no usable credential is configured.
    """
    env_key = os.environ.get(API_KEY_ENV_VAR, "").strip()
    if env_key:
        return env_key

    provider = config.provider
    if credentials_path is None:
        credentials_path = get_config_dir() / "credentials.yaml"
    if credentials_path.exists():
        credentials = load_credentials(credentials_path)
        entry = credentials.providers.get(provider)
        if entry and entry.api_key != PLACEHOLDER_API_KEY:
            return entry.api_key

    native_var = _PROVIDER_ENV_VARS.get(provider)
    if native_var:
        native_key = os.environ.get(native_var, "").strip()
        if native_key:
            return native_key

    return None


def config_exists() -> bool:
    """True if both config.yaml and credentials.yaml exist."""
    config_dir = get_config_dir()
    return (config_dir / "config.yaml").exists() and (
        config_dir / "credentials.yaml"
    ).exists()


def credentials_file_secure(credentials_path: Path | None = None) -> bool:
    """True if the credentials file exists with chmod 600."""
    if credentials_path is None:
        credentials_path = get_config_dir() / "credentials.yaml"

    if not credentials_path.exists():
        return False

    file_mode = credentials_path.stat().st_mode
    return (file_mode & 0o777) == 0o600


def resolve_path(relative: str, config_dir: Path | None = None) -> Path:
    """Resolve a config-relative path (absolute and ~ paths pass through)."""
    path = Path(relative).expanduser()
    if path.is_absolute():
        return path
    return (config_dir or get_config_dir()) / path
