"""Command-line entry point.

Every option can also be given through its ``PERCONA_*`` environment
variable; an option on the command line wins over the environment.
"""

from __future__ import annotations

import os
import sys

import click
from pydantic import ValidationError

from percona_telemetry import __version__
from percona_telemetry.config import (
    DEFAULT_CONFIG_FILE_PATH,
    DEFAULT_SEND_TIMEOUT,
    DEFAULT_TELEMETRY_URL,
    DISABLE_ENV_VAR,
    Settings,
    is_disabled,
)
from percona_telemetry.logging import setup_logging
from percona_telemetry.runner import EXIT_FAILURE, EXIT_SUCCESS, RunStatus, run_once

PRODUCT_FAMILIES = (
    "PRODUCT_FAMILY_PS",
    "PRODUCT_FAMILY_PXC",
    "PRODUCT_FAMILY_PXB",
    "PRODUCT_FAMILY_PSMDB",
    "PRODUCT_FAMILY_PBM",
    "PRODUCT_FAMILY_POSTGRESQL",
    "PRODUCT_FAMILY_PMM",
    "PRODUCT_FAMILY_EVEREST",
    "PRODUCT_FAMILY_PERCONA_TOOLKIT",
)

USAGE = """\
usage: percona-telemetry OPTIONS

Collects telemetry information and sends it to a Telemetry service. The data
collection may be disabled by setting the environment variable
{disable_var}=1.

Only the presence of mandatory parameters is validated; their values are
sent as given.

The data will be sent to {url} in JSON format.

OPTIONS can be:

  -h  Show this message

  -f  [PERCONA_PRODUCT_FAMILY]              Product family identifier.          [REQUIRED]
  -v  [PERCONA_PRODUCT_VERSION]             Product version.                    [REQUIRED]
  -s  [PERCONA_OPERATING_SYSTEM]            Operating system identifier.        [Default: autodetected, "unknown" if detection fails]
  -d  [PERCONA_DEPLOYMENT_METHOD]           Deployment method.                  [REQUIRED]
  -i  [PERCONA_INSTANCE_ID]                 Instance id.                        [Default: autogenerated]
  -j  [PERCONA_TELEMETRY_CONFIG_FILE_PATH]  File storing the instance id.       [Default: {config_file}]
  -u  [PERCONA_TELEMETRY_URL]               Telemetry service endpoint.         [Default: {url}]
  -t  [PERCONA_SEND_TIMEOUT]                Send timeout in seconds.            [Default: {timeout:g}]
  -l  [PERCONA_LOG_LEVEL]                   Log level.                          [Default: WARNING]

The product family can be any string, but the Telemetry service only accepts:

{families}

For example:

  percona-telemetry -f PRODUCT_FAMILY_PS -v 8.0.33 -d PACKAGE -j /tmp/percona.telemetry -t 1
"""


def usage_text() -> str:
    return USAGE.format(
        disable_var=DISABLE_ENV_VAR,
        url=DEFAULT_TELEMETRY_URL,
        config_file=DEFAULT_CONFIG_FILE_PATH,
        timeout=DEFAULT_SEND_TIMEOUT,
        families="\n".join(f"  {family}" for family in PRODUCT_FAMILIES),
    )


class ReporterCommand(click.Command):
    """Command whose usage errors exit with the regular failure code."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = EXIT_FAILURE
            raise


def _show_usage(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(usage_text())
    ctx.exit(EXIT_FAILURE)


@click.command(cls=ReporterCommand, context_settings={"help_option_names": []})
@click.option(
    "-h",
    "--help",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_show_usage,
    help="Show usage and exit",
)
@click.option("-f", "--product-family", default=None, help="Product family identifier")
@click.option("-v", "--product-version", default=None, help="Product version")
@click.option("-s", "--operating-system", default=None, help="Operating system descriptor")
@click.option("-d", "--deployment-method", default=None, help="Deployment method")
@click.option("-i", "--instance-id", default=None, help="Instance UUID")
@click.option("-j", "--config-file", default=None, help="State file path")
@click.option("-u", "--url", default=None, help="Telemetry service endpoint")
@click.option("-t", "--timeout", default=None, help="Send timeout in seconds")
@click.option("-l", "--log-level", default=None, help="Log level")
@click.version_option(__version__, "--version", prog_name="percona-telemetry")
def cli(
    product_family: str | None,
    product_version: str | None,
    operating_system: str | None,
    deployment_method: str | None,
    instance_id: str | None,
    config_file: str | None,
    url: str | None,
    timeout: str | None,
    log_level: str | None,
) -> None:
    """Report this product installation to the Percona Telemetry service once."""
    if is_disabled(os.environ.get(DISABLE_ENV_VAR)):
        sys.exit(EXIT_SUCCESS)

    overrides = {
        "product_family": product_family,
        "product_version": product_version,
        "operating_system": operating_system,
        "deployment_method": deployment_method,
        "instance_id": instance_id,
        "telemetry_config_file_path": config_file,
        "telemetry_url": url,
        "send_timeout": timeout,
        "log_level": log_level,
    }
    try:
        # an empty flag behaves like an unset one, matching empty PERCONA_* variables
        settings = Settings(**{k: v for k, v in overrides.items() if v})
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            click.echo(f"Invalid value for {field}: {error['msg']}", err=True)
        sys.exit(EXIT_FAILURE)

    setup_logging(settings.log_level)
    result = run_once(settings)

    if result.status is RunStatus.CONFIGURATION_ERROR:
        for name in result.missing:
            click.echo(f"{name} is not provided. See usage for details.", err=True)
        click.echo(usage_text())
    elif result.error:
        click.echo(f"Error: {result.error}", err=True)

    sys.exit(result.exit_code)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
