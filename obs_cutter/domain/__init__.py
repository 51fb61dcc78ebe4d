"""
This package contains the core domain models of OBS-Cutter.

Modules:
    exceptions.py: The error taxonomy, grouped by stage (process, probe,
                   planning, encoding).
    media.py: Stream descriptors, probe output parsing and the `MediaProber`
              that selects the authoritative video stream.
    jobs.py: Crop geometry, encode jobs and the per-side / overall results.
"""
