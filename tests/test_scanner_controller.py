import logging
import zipfile
from pathlib import Path

import pytest

from scanner import (
    ContentIdentifier,
    ContentKind,
    ScanError,
    ScanHandle,
    ScanKind,
    ScanSettings,
    ScanStatus,
    StepOutcome,
    open_scan,
    run_scan,
    step,
)
from scanner.controller import FINISHED_MESSAGE


class StubStatus:
    def __init__(self) -> None:
        self.pushed = []

    def push(self, text, priority=1, duration=180, flush=True):  # pragma: no cover - recorder
        self.pushed.append(text)


def _handle(paths, kind=ScanKind.BUILD_CATALOG):
    status = StubStatus()
    identifier = ContentIdentifier(ScanSettings(), status=status)
    return ScanHandle(paths, kind, identifier=identifier, status=status), status


def _write(path: Path, payload: bytes) -> str:
    path.write_bytes(payload)
    return str(path)


def test_each_step_processes_one_path_then_finishes(tmp_path: Path) -> None:
    paths = [_write(tmp_path / f"{name}.nes", name.encode()) for name in ("a", "b", "c")]
    handle, status = _handle(paths)

    outcomes = []
    while True:
        outcome = step(handle)
        outcomes.append(outcome)
        if outcome is not StepOutcome.CONTINUE:
            break

    assert outcomes == [StepOutcome.CONTINUE] * 3 + [StepOutcome.FINISHED]
    assert handle.status is ScanStatus.DONE
    assert handle.index == 3
    assert [result.path for result in handle.results] == paths
    assert all(result.checksums is not None for result in handle.results)
    assert status.pushed[0] == f"0/3: Scanning {paths[0]}..."
    assert status.pushed[-1] == FINISHED_MESSAGE


def test_steps_after_finish_do_not_reprocess(tmp_path: Path) -> None:
    handle, status = _handle([_write(tmp_path / "a.nes", b"a")])
    run_scan(handle)
    pushed = len(status.pushed)

    for _ in range(3):
        assert handle.step() is StepOutcome.FINISHED

    assert len(handle.results) == 1
    assert len(status.pushed) == pushed
    assert handle.index == 1


def test_none_kind_advances_without_identifying(tmp_path: Path) -> None:
    handle, status = _handle([_write(tmp_path / "a.nes", b"a"), _write(tmp_path / "b.nes", b"b")], ScanKind.NONE)

    assert run_scan(handle) is StepOutcome.FINISHED
    assert handle.results == []
    assert handle.index == 2
    assert status.pushed == [FINISHED_MESSAGE]


def test_malformed_entry_does_not_advance(tmp_path: Path) -> None:
    handle, _ = _handle([None, _write(tmp_path / "a.nes", b"a")])

    assert step(handle) is StepOutcome.CONTINUE
    assert step(handle) is StepOutcome.CONTINUE
    assert handle.index == 0
    assert handle.at_malformed_entry

    handle.skip()
    assert step(handle) is StepOutcome.CONTINUE
    assert handle.index == 2
    assert step(handle) is StepOutcome.FINISHED


def test_run_scan_moves_past_malformed_entries(tmp_path: Path) -> None:
    handle, _ = _handle(["", _write(tmp_path / "a.nes", b"a"), None])
    calls = []

    outcome = run_scan(handle, on_step=lambda current, result: calls.append(result))

    assert outcome is StepOutcome.FINISHED
    assert [result.path for result in handle.results] == [str(tmp_path / "a.nes")]
    assert calls == [StepOutcome.CONTINUE] * 2 + [StepOutcome.FINISHED]


def test_invalid_or_closed_handle_is_an_error(tmp_path: Path) -> None:
    assert step(None) is StepOutcome.ERROR

    handle, _ = _handle([_write(tmp_path / "a.nes", b"a")])
    handle.close()
    assert handle.closed
    assert step(handle) is StepOutcome.ERROR


def test_unreadable_file_yields_only_scanning_notice(tmp_path: Path) -> None:
    missing = str(tmp_path / "gone.nes")
    handle, status = _handle([missing])

    assert step(handle) is StepOutcome.CONTINUE

    assert status.pushed == [f"0/1: Scanning {missing}..."]
    result = handle.results[0]
    assert result.ok is False
    assert result.bytes_read == 0
    assert result.checksums is None
    assert handle.index == 1


def test_empty_file_produces_nothing(tmp_path: Path) -> None:
    handle, _ = _handle([_write(tmp_path / "empty.nes", b"")])

    step(handle)

    assert handle.results[0].checksums is None
    assert handle.results[0].ok is False


def test_archive_members_are_inspected(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    bundle = tmp_path / "pack.zip"
    with zipfile.ZipFile(bundle, "w") as archive:
        archive.writestr("a.nes", b"first")
        archive.writestr("b.nes", b"second")
    handle, status = _handle([str(bundle)])

    with caplog.at_level(logging.INFO, logger="contentcatalog"):
        step(handle)

    result = handle.results[0]
    assert result.kind is ContentKind.ARCHIVE
    assert result.ok is True
    assert [entry.name for entry in result.entries] == ["a.nes", "b.nes"]
    assert status.pushed == [f"0/1: Scanning {bundle}..."]
    assert sum("CRC32: 0x" in message for message in caplog.messages) == 2


def test_broken_archive_is_logged_and_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    bogus = tmp_path / "broken.zip"
    bogus.write_bytes(b"garbage")
    handle, _ = _handle([str(bogus)])

    with caplog.at_level(logging.INFO, logger="contentcatalog"):
        assert step(handle) is StepOutcome.CONTINUE

    assert handle.results[0].ok is False
    assert "Could not process ZIP file." in caplog.messages
    assert handle.index == 1


def test_custom_archive_callback_is_used(tmp_path: Path) -> None:
    bundle = tmp_path / "pack.zip"
    with zipfile.ZipFile(bundle, "w") as archive:
        archive.writestr("a.nes", b"first")
    seen = []

    def _inspect(entry, valid_exts, userdata):
        seen.append((entry.name, userdata))
        return True

    identifier = ContentIdentifier(ScanSettings(), status=StubStatus(), callback=_inspect)
    result = identifier.identify(str(bundle))

    assert result.ok is True
    assert seen == [("a.nes", str(tmp_path))]


def test_open_scan_lists_directory_with_settings(tmp_path: Path) -> None:
    _write(tmp_path / "a.sfc", b"a")
    _write(tmp_path / "b.txt", b"b")
    with zipfile.ZipFile(tmp_path / "c.zip", "w") as archive:
        archive.writestr("c.sfc", b"c")
    settings = {"scan": {"extensions": ["sfc"], "checksums": ["crc32", "sha1"]}}

    with open_scan(tmp_path, settings=settings) as handle:
        assert [Path(p).name for p in handle.paths] == ["a.sfc", "c.zip"]
        assert run_scan(handle) is StepOutcome.FINISHED
        summary = handle.summary()

    assert handle.closed
    assert summary["processed"] == 2
    first = summary["results"][0]
    assert set(first["checksums"]) == {"crc32", "sha1"}
    assert summary["results"][1]["entries"][0]["name"] == "c.sfc"


def test_open_scan_rejects_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ScanError):
        open_scan(tmp_path / "absent")
