"""
This package contains the split pipeline, which orchestrates analysis,
planning and the two encode jobs for one input file.
"""
