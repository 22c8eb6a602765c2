"""Usage command: today's project allowance."""

from scopeguard.cli.formatters.panels import print_warning
from scopeguard.cli.formatters.tables import create_key_value_table, print_table
from scopeguard.cli.runtime import load_settings, rate_limiter_for, usage_store_for


def usage() -> None:
    """Show how many projects were started today and how many remain."""
    config = load_settings()
    limiter = rate_limiter_for(config, usage_store_for(config))

    used = limiter.used_today()
    remaining = limiter.remaining()
    print_table(
        create_key_value_table(
            {
                "Projects started today": used,
                "Daily limit": limiter.daily_limit,
                "Remaining": remaining,
            },
            "Daily Usage",
        )
    )
    if remaining == 0:
        print_warning("Daily limit reached. Please try again tomorrow!")


__all__ = ["usage"]
