"""Config command group for ScopeGuard."""

from typing import Annotated

import typer

from scopeguard.cli.formatters.panels import print_error, print_info, print_success, print_warning
from scopeguard.cli.formatters.tables import create_key_value_table, print_table
from scopeguard.cli.runtime import load_settings
from scopeguard.config import (
    create_default_config,
    credentials_file_secure,
    get_config_dir,
    resolve_api_key,
    resolve_path,
)
from scopeguard.core.errors import ConfigError
from scopeguard.core.security import mask_api_key

app = typer.Typer(
    name="config",
    help="Manage ScopeGuard configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing configuration files."),
    ] = False,
) -> None:
    """Create default config.yaml and credentials.yaml in ~/.scopeguard/."""
    try:
        config_path, credentials_path = create_default_config(overwrite=force)
    except ConfigError as e:
        print_error(f"{e.message}\nUse --force to overwrite.", title="Configuration Error")
        raise typer.Exit(code=1) from e

    print_success(f"Created {config_path}\nCreated {credentials_path} (chmod 600)")
    print_info("Add your API key to credentials.yaml or set SCOPEGUARD_API_KEY.")


@app.command()
def show() -> None:
    """Display the effective configuration."""
    config = load_settings()

    try:
        api_key = resolve_api_key(config)
    except ConfigError as e:
        print_warning(e.message)
        api_key = None

    data = {
        "config_dir": get_config_dir(),
        "model": config.oracle.model,
        "provider": config.provider,
        "api_key": mask_api_key(api_key) if api_key else "not configured",
        "min_call_interval": f"{config.oracle.min_call_interval_seconds}s",
        "max_questions": config.questioning.max_questions,
        "checkpoint_question": config.questioning.checkpoint_question,
        "daily_project_limit": config.usage.daily_project_limit,
        "usage_store": resolve_path(config.usage.store_path),
        "sessions_dir": resolve_path(config.sessions.state_dir),
        "log_level": config.logging.level,
        "log_file": resolve_path(config.logging.log_path),
    }
    print_table(create_key_value_table(data, "Current Configuration"))

    credentials_path = get_config_dir() / "credentials.yaml"
    if credentials_path.exists() and not credentials_file_secure(credentials_path):
        print_warning(
            f"{credentials_path} is readable by other users. "
            f"Run: chmod 600 {credentials_path}"
        )


__all__ = ["app"]
