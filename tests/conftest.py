"""Shared test fixtures for OBS-Cutter tests."""

import json
import threading
from pathlib import Path

import pytest

from obs_cutter.domain.exceptions import ProcessCancelledException, ToolNotFoundException
from obs_cutter.utils.process_runner import ProcessResult, ProcessRunner


def probe_json(*streams, duration=None):
    """Build an ffprobe JSON document from stream dicts."""
    data = {"streams": list(streams)}
    if duration is not None:
        data["format"] = {"duration": str(duration)}
    return json.dumps(data)


def video_stream(index=0, width=3840, height=1080, codec_name="h264"):
    stream = {"index": index, "codec_type": "video", "codec_name": codec_name}
    if width is not None:
        stream["width"] = width
    if height is not None:
        stream["height"] = height
    return stream


def audio_stream(index=1, codec_name="aac"):
    return {"index": index, "codec_type": "audio", "codec_name": codec_name}


def _output_path(args):
    # ffmpeg-python places the output file right before the global args.
    first_global = min(args.index(flag) for flag in ("-hide_banner", "-nostdin", "-y") if flag in args)
    return Path(args[first_global - 1])


def _side_of(output_path):
    return "left" if "-left." in output_path.name else "right"


class FakeRunner(ProcessRunner):
    """
    Stands in for ffprobe and ffmpeg.

    Probe calls answer with `probe_stdout`. Encode calls write the output file
    (unless told not to) and exit with the per-side exit code.
    """

    def __init__(self, probe_stdout=None, probe_exit_code=0, missing=()):
        super().__init__(poll_interval=0.01, terminate_grace=0.1)
        self.probe_stdout = probe_stdout if probe_stdout is not None else probe_json(video_stream(), duration=60)
        self.probe_exit_code = probe_exit_code
        self.missing = set(missing)
        self.encode_exit_codes = {"left": 0, "right": 0}
        self.write_output = {"left": True, "right": True}
        self.stderr_lines = {"left": [], "right": []}
        self.cancel_on = set()
        self.calls = []
        self._lock = threading.Lock()

    def locate(self, executable):
        if executable in self.missing:
            raise ToolNotFoundException(executable)
        return executable

    def run(self, executable, args, cwd=None, timeout=None, on_stderr_line=None, cancel_event=None):
        args = [str(arg) for arg in args]
        with self._lock:
            self.calls.append((executable, args))
        if executable in self.missing:
            raise ToolNotFoundException(executable)

        if "-show_entries" in args:
            return ProcessResult(
                args=tuple([executable] + args),
                exit_code=self.probe_exit_code,
                stdout=self.probe_stdout if self.probe_exit_code == 0 else "",
                stderr="" if self.probe_exit_code == 0 else "Invalid data found when processing input",
                elapsed_seconds=0.01,
            )

        output = _output_path(args)
        side = _side_of(output)
        if self.write_output[side]:
            output.write_bytes(b"\x00" * 2048)

        for line in self.stderr_lines[side]:
            if on_stderr_line is not None:
                on_stderr_line(line)

        if side in self.cancel_on:
            cancel_event.set()
            raise ProcessCancelledException(executable)

        exit_code = self.encode_exit_codes[side]
        return ProcessResult(
            args=tuple([executable] + args),
            exit_code=exit_code,
            stdout="",
            stderr="" if exit_code == 0 else "Conversion failed!\nError while opening encoder",
            elapsed_seconds=0.01,
        )

    @property
    def encode_calls(self):
        return [call for call in self.calls if "-show_entries" not in call[1]]


@pytest.fixture
def input_video(tmp_path):
    """A placeholder input file; its content is never read by the fake runner."""
    path = tmp_path / "recording.mkv"
    path.write_bytes(b"fake video")
    return path


@pytest.fixture
def fake_runner():
    return FakeRunner()
