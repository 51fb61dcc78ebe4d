"""
Services Package for OBS-Cutter.

- **Encoding Planner (`encoding_planner.py`):** maps a quality preset name to
  concrete encoder parameters.
- **Result Reporter (`result_reporter.py`):** assembles the final split result
  and writes optional YAML summaries.
"""
