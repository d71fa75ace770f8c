"""
Tests for filters, jobs, statuses and conversion results
"""
import unittest
import uuid
from pathlib import Path

from gpsconv.models.format import AUTO_DETECT, COMMON_FORMATS
from gpsconv.models.job import (
    ConversionJob, JobState, JobStatus, MergeTracks, RemoveDuplicates, Simplify,
)
from gpsconv.models.result import ConversionResult, format_size

GPX, KML = COMMON_FORMATS[0], COMMON_FORMATS[1]


def _result(**kw):
    base = dict(job_id=uuid.uuid4(), exit_code=0, stdout="", stderr="", duration=0.5)
    base.update(kw)
    return ConversionResult(**base)


class TestFilters(unittest.TestCase):

    def test_arguments(self):
        self.assertEqual(Simplify("0.001k").args(), ["-x", "simplify,error=0.001k"])
        self.assertEqual(RemoveDuplicates().args(), ["-x", "duplicate,location"])
        self.assertEqual(MergeTracks().args(), ["-x", "track,merge"])

    def test_display_names(self):
        self.assertEqual(Simplify("5m").display_name, "Simplify track (error: 5m)")
        self.assertEqual(RemoveDuplicates().display_name, "Remove duplicate waypoints")
        self.assertEqual(MergeTracks().display_name, "Merge all tracks")


class TestConversionJob(unittest.TestCase):

    def test_paths_are_normalised(self):
        job = ConversionJob("in.gpx", None, "out.kml", KML, [MergeTracks()])
        self.assertIsInstance(job.input_path, Path)
        self.assertEqual(job.filters, (MergeTracks(),))
        self.assertIsInstance(job.id, uuid.UUID)

    def test_auto_detect_rejected_as_output(self):
        with self.assertRaises(ValueError):
            ConversionJob("in.gpx", None, "out.gpx", AUTO_DETECT)

    def test_detects_input(self):
        self.assertTrue(ConversionJob("a", None, "b", GPX).detects_input)
        self.assertTrue(ConversionJob("a", AUTO_DETECT, "b", GPX).detects_input)
        self.assertFalse(ConversionJob("a", KML, "b", GPX).detects_input)

    def test_create_assigns_fresh_id(self):
        first = ConversionJob.create("in.fit", None, "out.gpx", GPX, [Simplify("5m")])
        second = ConversionJob.create("in.fit", None, "out.gpx", GPX)
        self.assertIsInstance(first.id, uuid.UUID)
        self.assertNotEqual(first.id, second.id)
        self.assertEqual(first.input_path, Path("in.fit"))
        self.assertEqual(first.filters, (Simplify("5m"),))
        self.assertEqual(second.filters, ())
        with self.assertRaises(ValueError):
            ConversionJob.create("in.fit", None, "out.gpx", AUTO_DETECT)

    def test_ids_are_unique(self):
        self.assertNotEqual(ConversionJob("a", None, "b", GPX).id, ConversionJob("a", None, "b", GPX).id)


class TestJobStatus(unittest.TestCase):

    def test_terminal_states(self):
        self.assertFalse(JobStatus.pending().is_terminal)
        self.assertFalse(JobStatus.running().is_terminal)
        self.assertTrue(JobStatus.completed(_result()).is_terminal)
        self.assertTrue(JobStatus.failed("boom").is_terminal)
        self.assertTrue(JobStatus.cancelled().is_terminal)
        self.assertEqual(JobStatus.failed("boom").state, JobState.FAILED)


class TestConversionResult(unittest.TestCase):

    def test_success_with_size(self):
        r = _result(output_size=12_345)
        self.assertTrue(r.is_success)
        self.assertEqual(r.status_message, "Conversion successful. Output file size: 12.3 KB")
        self.assertIsNone(r.error_message)

    def test_success_ignores_stderr_chatter(self):
        r = _result(stderr="WARNING: something harmless")
        self.assertTrue(r.is_success)
        self.assertIsNone(r.error_message)

    def test_error_message_prefers_stderr(self):
        self.assertEqual(_result(exit_code=1, stdout="out", stderr="err").error_message, "err")
        self.assertEqual(_result(exit_code=1, stdout="out").error_message, "out")
        self.assertEqual(_result(exit_code=3).error_message, "Conversion failed with exit code 3")
        self.assertEqual(_result(exit_code=3).status_message, "Conversion failed with exit code 3.")

    def test_full_log(self):
        self.assertEqual(_result(stdout="a", stderr="b").full_log, "STDOUT:\na\n\nSTDERR:\nb")
        self.assertEqual(_result(stderr="b").full_log, "STDERR:\nb")
        self.assertEqual(_result().full_log, "No output from gpsbabel")

    def test_format_size(self):
        self.assertEqual(format_size(999), "999 bytes")
        self.assertEqual(format_size(1_500_000), "1.5 MB")


if __name__ == "__main__":
    unittest.main()
