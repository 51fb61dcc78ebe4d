"""
OBS-Cutter: split 32:9 OBS recordings into two 16:9 videos with FFmpeg.

Convenience imports for library use:

    from obs_cutter import SplitOrchestrator

    result = SplitOrchestrator().split(Path("recording.mkv"), preset_name="high")
"""
from .pipeline.split_pipeline import SplitOrchestrator

__version__ = "2.0.0"

__all__ = ["SplitOrchestrator", "__version__"]
