"""
Configuration Package for OBS-Cutter.

This package centralizes the static settings of the application so they can be
adjusted without changing the core code:
- Common settings such as the logging format, exit codes and user-overridable
  tool paths (`common.py`).
- Video settings such as the expected 32:9 geometry, the quality preset table
  and output naming (`video.py`).
"""
