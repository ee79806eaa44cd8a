"""AppContext — shared Click context for all commands.

Created once by the root CLI group and handed to subcommands via
``@click.pass_obj``. The service is built lazily so ``--help`` and
``--version`` never need a configured working copy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from gitosisctl.config.logging import configure_logging
from gitosisctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from gitosisctl.config.settings import GitosisSettings
    from gitosisctl.services.access import AccessControlService
    from gitosisctl.services.result import ServiceResult


class AppContext:
    """Settings, the lazily built service, and result emission."""

    def __init__(self, settings: GitosisSettings) -> None:
        self.settings = settings
        self._service: AccessControlService | None = None
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def service(self) -> AccessControlService:
        """The access-control service; exits with an error if unconfigured."""
        if self._service is None:
            from gitosisctl.domain.errors import ConfigurationMissing
            from gitosisctl.services.access import AccessControlService
            from gitosisctl.services.result import ServiceResult

            try:
                self._service = AccessControlService.from_settings(self.settings)
            except ConfigurationMissing as exc:
                self.emit(ServiceResult.failure("configure", exc))
                raise SystemExit(1) from exc
        return self._service

    def emit(self, result: ServiceResult) -> None:
        """Print *result*; exit with status 1 if it failed.

        Success goes to stdout with warnings on stderr. Failure goes to
        stderr.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
