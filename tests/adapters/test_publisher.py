from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from feedmigrator.adapters import publisher as publisher_module
from feedmigrator.adapters.publisher import CommandLinePublisher
from feedmigrator.config.errors import ConfigurationError
from feedmigrator.domain.migration import MigrationDriver
from feedmigrator.domain.ports import Publisher, PublisherUnavailableError
from feedmigrator.domain.types import CatalogEntry, DownloadResult, PackageReference

ARTIFACT = Path("/tmp/staging/package.nupkg")
DESTINATION = "https://destination.test/v3/index.json"


def test_publisher_satisfies_port() -> None:
    assert isinstance(CommandLinePublisher(api_key="key"), Publisher)


def test_build_arguments_uses_push_verb() -> None:
    publisher = CommandLinePublisher(api_key="key")

    arguments = publisher.build_arguments(ARTIFACT, destination=DESTINATION)

    assert arguments == [
        "dotnet",
        "nuget",
        "push",
        str(ARTIFACT),
        "--source",
        DESTINATION,
        "--api-key",
        "key",
    ]


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        CommandLinePublisher(api_key="key", command=())


def test_publish_captures_streams_and_exit_status(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: dict[str, object] = {}

    def fake_run(arguments: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        seen["arguments"] = arguments
        seen.update(kwargs)
        return subprocess.CompletedProcess(arguments, 1, stdout="pushing", stderr="409 conflict")

    monkeypatch.setattr(publisher_module.subprocess, "run", fake_run)

    result = CommandLinePublisher(api_key="key", command=("nuget",), timeout_seconds=5.0).publish(
        ARTIFACT, destination=DESTINATION
    )

    assert result.exit_status == 1
    assert result.stdout == "pushing"
    assert result.stderr == "409 conflict"
    assert seen["arguments"] == [
        "nuget",
        "push",
        str(ARTIFACT),
        "--source",
        DESTINATION,
        "--api-key",
        "key",
    ]
    assert seen["timeout"] == 5.0
    assert seen["check"] is False
    assert seen["encoding"] == "utf-8"
    assert seen["errors"] == "replace"


def test_publish_raises_when_executable_cannot_start(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(arguments: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError(arguments[0])

    monkeypatch.setattr(publisher_module.subprocess, "run", fake_run)

    with pytest.raises(PublisherUnavailableError, match="could not be started"):
        CommandLinePublisher(api_key="key").publish(ARTIFACT, destination=DESTINATION)


def test_publish_raises_on_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(arguments: list[str], **_: object) -> subprocess.CompletedProcess[str]:
        raise subprocess.TimeoutExpired(arguments, 1.0)

    monkeypatch.setattr(publisher_module.subprocess, "run", fake_run)

    with pytest.raises(PublisherUnavailableError, match="timed out"):
        CommandLinePublisher(api_key="key", timeout_seconds=1.0).publish(
            ARTIFACT, destination=DESTINATION
        )


def test_ensure_available(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(publisher_module.shutil, "which", lambda name: f"/usr/bin/{name}")

    assert CommandLinePublisher(api_key="key").ensure_available() == "/usr/bin/dotnet"


def test_ensure_available_raises_when_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(publisher_module.shutil, "which", lambda _name: None)

    with pytest.raises(ConfigurationError, match="not found"):
        CommandLinePublisher(api_key="key").ensure_available()


def test_api_key_is_redacted_in_debug_log(
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level("DEBUG", logger="feedmigrator.adapters.publisher")
    monkeypatch.setattr(
        publisher_module.subprocess,
        "run",
        lambda arguments, **_: subprocess.CompletedProcess(arguments, 0, stdout="", stderr=""),
    )

    CommandLinePublisher(api_key="s3cret").publish(ARTIFACT, destination=DESTINATION)

    assert "s3cret" not in caplog.text
    assert "***" in caplog.text


def test_undecodable_output_does_not_stop_the_run(tmp_path: Path) -> None:
    command = (
        sys.executable,
        "-c",
        "import sys; sys.stdout.buffer.write(b'\\xff\\xfe'); sys.stderr.buffer.write(b'\\x81')",
    )
    publisher = CommandLinePublisher(api_key="key", command=command, timeout_seconds=30.0)
    entries = [
        CatalogEntry(PackageReference("A", "1.0"), "mem://A/1.0"),
        CatalogEntry(PackageReference("B", "1.0"), "mem://B/1.0"),
    ]

    def downloader(location: str) -> DownloadResult:
        return DownloadResult(status=200, content=location.encode())

    outcomes = MigrationDriver(downloader, publisher, tmp_path / "package.nupkg").run(
        entries, destination=DESTINATION
    )

    assert [outcome.entry for outcome in outcomes] == entries
    for outcome in outcomes:
        assert outcome.publisher_status == 0
        assert outcome.stdout == "\ufffd\ufffd"
        assert outcome.stderr == "\ufffd"
