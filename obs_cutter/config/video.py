"""
Configuration settings related to video splitting.

This module defines the expected source geometry, the quality preset table
and the naming conventions for the two output files.
"""

# --- Expected Source Geometry ---
# A 32:9 OBS canvas made of two 1920x1080 halves.
EXPECTED_WIDTH = 3840
EXPECTED_HEIGHT = 1080
EXPECTED_ASPECT_RATIO = "32:9"

# --- Probe Settings ---
# Only the first video stream is requested; the container duration comes along
# for progress reporting.
PROBE_STREAM_SELECTOR = "v:0"
PROBE_SHOW_ENTRIES = "stream=index,codec_type,codec_name,width,height:format=duration"

# --- Encoder Settings ---
# Software H.264 for every preset: (encoder, crf, speed preset).
DEFAULT_VIDEO_ENCODER = "libx264"
AUDIO_COPY_CODEC = "copy"
# Streams mapped into each output: the first video stream and every audio
# stream ("?" keeps inputs without audio valid).
VIDEO_STREAM_SELECTOR = "v:0"
AUDIO_STREAM_SELECTOR = "a?"
QUALITY_PRESETS = {
    "lossless": (DEFAULT_VIDEO_ENCODER, 0, "veryslow"),
    "high": (DEFAULT_VIDEO_ENCODER, 18, "slow"),
    "medium": (DEFAULT_VIDEO_ENCODER, 23, "medium"),
}
DEFAULT_QUALITY = "lossless"

# --- Output Naming ---
# Outputs are named "{stem}-left.{ext}" and "{stem}-right.{ext}".
LEFT_SUFFIX = "left"
RIGHT_SUFFIX = "right"
FALLBACK_EXTENSION = "mp4"
