"""
Sequential ID dumper.

This package walks a numeric ID range with a pool of worker threads,
fetches one URL per ID, and sorts the responses into category directories.
Progress is checkpointed so an interrupted run can be resumed.
"""

__version__ = "0.1.0"
