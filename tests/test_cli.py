"""End-to-end tests for the npm-lock-audit command line."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest

from npm_lock_audit import cli


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "NPM_LOCK_AUDIT_CONFIG",
        "NPM_LOCK_AUDIT_DATASET",
        "NPM_LOCK_AUDIT_LOG_LEVEL",
        "NPM_LOCK_AUDIT_WARN_ONLY",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def dataset_path(fixtures_dir: Path) -> str:
    return str(fixtures_dir / "compromised-packages.json")


def test_scan_reports_findings_and_exits_10(
    fixtures_dir: Path, dataset_path: str, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(
        ["scan", str(fixtures_dir / "package-lock-v3.json"), "--dataset", dataset_path]
    )

    assert code == cli.EXIT_FINDINGS
    report = json.loads(capsys.readouterr().out)
    assert report["safeCount"] == 3
    assert report["totalCount"] == 5
    assert report["totals"] == {"critical": 1, "high": 1, "warning": 0}
    assert report["findings"][0]["name"] == "@asyncapi/parser"
    assert report["findings"][0]["exactMatch"] is True


def test_scan_warn_only_exits_0(fixtures_dir: Path, dataset_path: str) -> None:
    code = cli.main(
        [
            "scan",
            str(fixtures_dir / "package-lock-v1.json"),
            "--dataset",
            dataset_path,
            "--warn-only",
        ]
    )

    assert code == cli.EXIT_OK


def test_scan_warn_only_from_environment(
    monkeypatch: pytest.MonkeyPatch, fixtures_dir: Path, dataset_path: str
) -> None:
    monkeypatch.setenv("NPM_LOCK_AUDIT_WARN_ONLY", "true")

    code = cli.main(["scan", str(fixtures_dir / "package-lock-v1.json"), "--dataset", dataset_path])

    assert code == cli.EXIT_OK


def test_scan_reads_pasted_lockfile_from_stdin(
    monkeypatch: pytest.MonkeyPatch, dataset_path: str, capsys: pytest.CaptureFixture[str]
) -> None:
    lockfile = {"packages": {"": {}, "node_modules/express": {"version": "4.18.2"}}}
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(lockfile)))

    code = cli.main(["scan", "-", "--dataset", dataset_path])

    assert code == cli.EXIT_OK
    report = json.loads(capsys.readouterr().out)
    assert report["safeCount"] == 1
    assert report["findings"] == []


def test_scan_rejects_empty_stdin(
    monkeypatch: pytest.MonkeyPatch, dataset_path: str, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("   \n"))

    assert cli.main(["scan", "--dataset", dataset_path]) == cli.EXIT_ERROR
    assert "No lockfile content" in capsys.readouterr().err


def test_scan_invalid_lockfile_exits_1(
    tmp_path: Path, dataset_path: str, capsys: pytest.CaptureFixture[str]
) -> None:
    lockfile = tmp_path / "package-lock.json"
    lockfile.write_text("{oops", encoding="utf-8")

    code = cli.main(["scan", str(lockfile), "--dataset", dataset_path])

    assert code == cli.EXIT_ERROR
    assert "valid package-lock.json" in capsys.readouterr().err


def test_scan_missing_lockfile_exits_1(tmp_path: Path, dataset_path: str) -> None:
    assert cli.main(["scan", str(tmp_path / "nope.json"), "--dataset", dataset_path]) == 1


def test_scan_missing_dataset_exits_1(
    fixtures_dir: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(
        [
            "scan",
            str(fixtures_dir / "package-lock-v3.json"),
            "--dataset",
            str(tmp_path / "missing.json"),
        ]
    )

    assert code == cli.EXIT_ERROR
    assert "Dataset file not found" in capsys.readouterr().err


def test_scan_markdown_output_to_file(fixtures_dir: Path, dataset_path: str, tmp_path: Path) -> None:
    output = tmp_path / "summary.md"

    code = cli.main(
        [
            "scan",
            str(fixtures_dir / "package-lock-v3.json"),
            "--dataset",
            dataset_path,
            "--format",
            "markdown",
            "--output",
            str(output),
        ]
    )

    assert code == cli.EXIT_FINDINGS
    text = output.read_text(encoding="utf-8")
    assert text.startswith("# npm-lock-audit Summary")
    assert "`npm uninstall @asyncapi/parser`" in text


def test_scan_uses_dataset_from_config_file(
    fixtures_dir: Path, dataset_path: str, tmp_path: Path
) -> None:
    config = tmp_path / "settings.json"
    config.write_text(json.dumps({"dataset": dataset_path, "warnOnly": True}), encoding="utf-8")

    code = cli.main(["--config", str(config), "scan", str(fixtures_dir / "package-lock-v3.json")])

    assert code == cli.EXIT_OK


def test_invalid_config_exits_1(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    code = cli.main(["--config", str(tmp_path / "missing.json"), "scan"])

    assert code == cli.EXIT_ERROR
    assert "Configuration file not found" in capsys.readouterr().err


def test_update_dataset_writes_file(
    monkeypatch: pytest.MonkeyPatch, fixtures_dir: Path, tmp_path: Path
) -> None:
    payload = (fixtures_dir / "consolidated_iocs.csv").read_bytes()
    requested: list[str] = []

    def fake_fetch(url: str) -> bytes:
        requested.append(url)
        return payload

    monkeypatch.setattr(cli, "fetch_datadog_feed", fake_fetch)
    output = tmp_path / "out" / "compromised-packages.json"

    code = cli.main(
        ["update-dataset", "--url", "https://example.invalid/iocs.csv", "--output", str(output)]
    )

    assert code == cli.EXIT_OK
    assert requested == ["https://example.invalid/iocs.csv"]
    written = json.loads(output.read_text(encoding="utf-8"))
    assert [p["name"] for p in written["compromisedPackages"]] == [
        "@asyncapi/parser",
        "posthog-node",
    ]
    assert cli.main(["validate-dataset", "--input", str(output)]) == cli.EXIT_OK


def test_validate_dataset_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "data.json"
    path.write_text(json.dumps({"attackName": "A"}), encoding="utf-8")

    code = cli.main(["validate-dataset", "--input", str(path)])

    assert code == cli.EXIT_ERROR
    err = capsys.readouterr().err
    assert "'lastUpdate' is a required property" in err
    assert "'compromisedPackages' is a required property" in err


def test_validate_dataset_missing_file(tmp_path: Path) -> None:
    assert cli.main(["validate-dataset", "--input", str(tmp_path / "missing.json")]) == 1


def test_scan_lockfile_with_invalid_utf8_exits_1(
    tmp_path: Path, dataset_path: str, capsys: pytest.CaptureFixture[str]
) -> None:
    lockfile = tmp_path / "package-lock.json"
    lockfile.write_bytes(b'{"name": "app", "version": "\xff"}')

    code = cli.main(["scan", str(lockfile), "--dataset", dataset_path])

    assert code == cli.EXIT_ERROR
    err = capsys.readouterr().err
    assert err.startswith("ERROR:")
    assert "not valid UTF-8" in err


def test_scan_directory_instead_of_lockfile_exits_1(
    tmp_path: Path, dataset_path: str, capsys: pytest.CaptureFixture[str]
) -> None:
    code = cli.main(["scan", str(tmp_path), "--dataset", dataset_path])

    assert code == cli.EXIT_ERROR
    assert capsys.readouterr().err.startswith("ERROR:")


def test_update_dataset_unwritable_output_exits_1(
    monkeypatch: pytest.MonkeyPatch,
    fixtures_dir: Path,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    payload = (fixtures_dir / "consolidated_iocs.csv").read_bytes()
    monkeypatch.setattr(cli, "fetch_datadog_feed", lambda url: payload)
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")

    code = cli.main(["update-dataset", "--output", str(blocker / "compromised-packages.json")])

    assert code == cli.EXIT_ERROR
    assert capsys.readouterr().err.startswith("ERROR:")
