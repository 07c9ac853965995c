# voxel_worldgen/progress.py

"""
================================================================================
GENERATION PROGRESS REPORTING
================================================================================
A ProgressReporter is created per generation call and handed to the stages
that report. There is no module-level progress state.

Data Contract:
---------------
- Inputs:
    - callback: Optional callable(message: str, percent: int), invoked
      synchronously on the generating thread.
    - logger: Optional logging.Logger; every report is also logged at DEBUG.
- Outputs: None.
- Side Effects: Invokes the callback and logs.
- Invariants: Reported percentages never decrease, stay within [0, 100], and
  exactly one report at 100 is emitted, by finish().
================================================================================
"""

import logging


class ProgressReporter:
    def __init__(self, callback=None, logger: logging.Logger = None):
        self.callback = callback
        self.logger = logger
        self.last_percent = 0
        self.finished = False

    def _emit(self, message: str, percent: int):
        self.last_percent = percent
        if self.logger is not None:
            self.logger.debug(f"[{percent:3d}%] {message}")
        if self.callback is not None:
            self.callback(message, percent)

    def report(self, message: str, percent: float):
        """Reports a stage milestone. Values below the last report are raised to it."""
        if self.finished:
            return
        percent = int(percent)
        if percent >= 100:
            self.finish(message)
            return
        self._emit(message, max(self.last_percent, max(percent, 0)))

    def report_rows(self, label: str, row: int, row_count: int, start: float, end: float):
        """
        Reports progress through a row loop, roughly every 10% of the rows,
        mapping the row position onto the [start, end] percentage span.
        """
        step = max(1, -(-row_count // 10))
        if row % step != 0:
            return
        fraction = row / row_count
        self.report(f"{label}: {int(fraction * 100)}% complete", int(start + fraction * (end - start)))

    def finish(self, message: str = "World generation complete."):
        """Emits the single final report at 100. Later calls are ignored."""
        if self.finished:
            return
        self.finished = True
        self._emit(message, 100)
