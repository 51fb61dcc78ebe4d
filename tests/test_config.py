"""Tests for obs_cutter.config.common.load_user_config."""

import sys
from pathlib import Path

from obs_cutter.config.common import UserConfig, load_user_config


def _write(tmp_path, text):
    path = tmp_path / "config.user.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadUserConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        assert load_user_config(tmp_path / "nope.yaml") == UserConfig()

    def test_defaults(self):
        config = UserConfig()
        assert config.ffmpeg == "ffmpeg"
        assert config.ffprobe == "ffprobe"
        assert config.default_quality is None

    def test_ffmpeg_dir(self, tmp_path):
        path = _write(tmp_path, "paths:\n  ffmpeg_dir: /opt/ffmpeg/bin\n")
        config = load_user_config(path)
        suffix = ".exe" if sys.platform == "win32" else ""
        assert config.ffmpeg == str(Path("/opt/ffmpeg/bin") / f"ffmpeg{suffix}")
        assert config.ffprobe == str(Path("/opt/ffmpeg/bin") / f"ffprobe{suffix}")

    def test_explicit_tools_win_over_directory(self, tmp_path):
        path = _write(
            tmp_path,
            "paths:\n  ffmpeg_dir: /opt/ffmpeg/bin\ntools:\n  ffprobe: /usr/local/bin/ffprobe\n",
        )
        config = load_user_config(path)
        assert config.ffprobe == "/usr/local/bin/ffprobe"
        assert "opt" in config.ffmpeg

    def test_default_quality(self, tmp_path):
        path = _write(tmp_path, "defaults:\n  quality: high\n")
        assert load_user_config(path).default_quality == "high"

    def test_empty_sections(self, tmp_path):
        path = _write(tmp_path, "paths:\ntools:\ndefaults:\n")
        assert load_user_config(path) == UserConfig()

    def test_malformed_yaml_gives_defaults(self, tmp_path):
        path = _write(tmp_path, "paths: [unclosed\n")
        assert load_user_config(path) == UserConfig()

    def test_non_mapping_gives_defaults(self, tmp_path):
        path = _write(tmp_path, "- just\n- a list\n")
        assert load_user_config(path) == UserConfig()
