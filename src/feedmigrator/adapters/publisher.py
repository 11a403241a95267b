"""Publishing staged packages through the ``dotnet nuget push`` command line."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from feedmigrator.config.errors import ConfigurationError
from feedmigrator.config.feeds import DEFAULT_PUBLISHER_COMMAND
from feedmigrator.domain.ports import PublisherUnavailableError
from feedmigrator.domain.types import PublishResult

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)


@dataclass(slots=True)
class CommandLinePublisher:
    """Runs ``<command> push <artifact> --source <destination> --api-key <key>``.

    Output streams are captured as UTF-8 (undecodable bytes replaced) and never
    interpreted.
    """

    api_key: str
    command: tuple[str, ...] = field(default=DEFAULT_PUBLISHER_COMMAND)
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if not self.command:
            raise ConfigurationError("Publisher command must not be empty")

    def ensure_available(self) -> str:
        """Return the resolved executable, raising if it is not on ``PATH``."""

        executable = shutil.which(self.command[0])
        if executable is None:
            raise ConfigurationError(f"Publisher executable {self.command[0]!r} not found on PATH")
        return executable

    def build_arguments(self, artifact: Path, *, destination: str) -> list[str]:
        return [
            *self.command,
            "push",
            str(artifact),
            "--source",
            destination,
            "--api-key",
            self.api_key,
        ]

    def publish(self, artifact: Path, *, destination: str) -> PublishResult:
        arguments = self.build_arguments(artifact, destination=destination)
        log.debug("Running publisher: %s", " ".join(_redact(arguments, self.api_key)))
        try:
            completed = subprocess.run(  # noqa: S603
                arguments,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise PublisherUnavailableError(
                f"Publisher timed out after {self.timeout_seconds}s"
            ) from exc
        except OSError as exc:
            raise PublisherUnavailableError(f"Publisher could not be started: {exc}") from exc

        return PublishResult(
            exit_status=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )


def _redact(arguments: list[str], secret: str) -> list[str]:
    return ["***" if argument == secret else argument for argument in arguments]
