import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tubegrab.api import app
from tubegrab.core.config import settings
from tubegrab.core.enums import ToolName
from tubegrab.managers import job_manager
from tubegrab.services import metadata_service, download_service
from tubegrab.services.process_runner import ProcessResult


SAMPLE_INFO = {
    "title": "Test",
    "duration": 125,
    "uploader": "U",
    "formats": [
        {"format_id": "18", "height": 360, "vcodec": "h264", "ext": "mp4", "filesize": 1000000},
        {"format_id": "22", "height": 720, "vcodec": "h264", "ext": "mp4", "filesize": 5000000},
    ],
}


class FakeRunner:
    """Sustituye a ProcessRunner: registra los argv y nunca lanza procesos."""

    def __init__(self):
        self.calls = []
        self.info_result = ProcessResult(0, stdout=json.dumps(SAMPLE_INFO))
        self.title_result = ProcessResult(0, stdout="Test Video\n")
        self.download_returncode = 0
        self.download_timed_out = False
        self.download_lines = [
            "[download] Destination: out.f137.mp4",
            "[download]  50.0% of 10.00MiB at 1.00MiB/s ETA 00:05",
            "[download] 100.0% of 10.00MiB at 1.00MiB/s ETA 00:00",
            "[download] Destination: out.f140.m4a",
            "[download] 100.0% of 1.00MiB at 1.00MiB/s ETA 00:00",
            '[Merger] Merging formats into "out.mp4"',
        ]
        self.download_content = b"\x00\x00\x00\x18ftypmp42" + b"x" * 4096
        self.partial_content = None
        self.progress_seen = []

    def run(self, command, timeout=None):
        self.calls.append(command)
        if "--dump-json" in command:
            return self.info_result
        if "--get-title" in command:
            return self.title_result
        raise AssertionError(f"unexpected command {command}")

    def run_streaming(self, command, on_line=None, timeout=None, job_id=None):
        self.calls.append(command)
        output = Path(command[command.index("-o") + 1])
        for line in self.download_lines:
            if on_line:
                on_line(line)
            if job_id:
                self.progress_seen.append(job_manager.get_progress(job_id))
        if self.partial_content is not None:
            output.with_name(output.name + ".part").write_bytes(self.partial_content)
        if self.download_returncode == 0 and not self.download_timed_out and self.download_content is not None:
            output.write_bytes(self.download_content)
        return ProcessResult(
            returncode=self.download_returncode if not self.download_timed_out else -1,
            stdout="\n".join(self.download_lines + (["ERROR: boom"] if self.download_returncode else [])),
            timed_out=self.download_timed_out,
            elapsed=0.5,
        )


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Temporales aislados y binarios resueltos siempre por nombre."""
    monkeypatch.setattr(settings, "TMP_DIR", tmp_path / "tmp")
    monkeypatch.setattr(settings, "DEBUG", False)
    monkeypatch.setattr(settings, "TOOL_CANDIDATES", {ToolName.FETCHER: [], ToolName.MUXER: []})
    monkeypatch.delenv("YT_DLP_PATH", raising=False)
    monkeypatch.delenv("FFMPEG_PATH", raising=False)
    return tmp_path


@pytest.fixture
def fake_runner(monkeypatch):
    runner = FakeRunner()
    monkeypatch.setattr(metadata_service, "runner", runner)
    monkeypatch.setattr(download_service, "runner", runner)
    return runner


@pytest.fixture
def client(fake_runner):
    return TestClient(app)


@pytest.fixture
def temp_dir():
    path = Path(settings.TMP_DIR)
    path.mkdir(parents=True, exist_ok=True)
    return path
