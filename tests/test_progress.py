import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from voxel_worldgen.progress import ProgressReporter


def recording_reporter():
    calls = []
    return ProgressReporter(lambda message, percent: calls.append((message, percent))), calls


def test_reports_never_decrease():
    progress, calls = recording_reporter()
    progress.report("a", 10)
    progress.report("b", 5)
    progress.report("c", -3)
    progress.report("d", 40)
    assert [percent for _, percent in calls] == [10, 10, 10, 40]


def test_finish_emits_exactly_one_hundred():
    progress, calls = recording_reporter()
    progress.report("half", 50)
    progress.finish()
    progress.finish("again")
    progress.report("late", 70)
    hundreds = [call for call in calls if call[1] == 100]
    assert hundreds == [("World generation complete.", 100)]
    assert calls[-1][1] == 100
    assert progress.finished


def test_report_at_one_hundred_finishes():
    progress, calls = recording_reporter()
    progress.report("done", 120)
    progress.finish()
    assert calls == [("done", 100)]


def test_report_rows_spans_range():
    progress, calls = recording_reporter()
    for row in range(20):
        progress.report_rows("Building", row, 20, 40, 60)
    percents = [percent for _, percent in calls]
    assert len(calls) == 10
    assert percents[0] == 40
    assert percents == sorted(percents)
    assert max(percents) < 60
    assert calls[1][0] == "Building: 10% complete"


def test_reporter_without_callback_is_silent():
    progress = ProgressReporter()
    progress.report("quiet", 30)
    progress.finish()
    assert progress.last_percent == 100
