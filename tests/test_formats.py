"""
Tests for the format model and the gpsbabel capability listing parser
"""
import unittest
from pathlib import Path

from gpsconv.models.format import AUTO_DETECT, COMMON_FORMATS, GpsFormat, detect_from_extension
from gpsconv.parsers.capabilities import infer_extensions, parse_formats, split_extensions


class TestCapabilityParser(unittest.TestCase):
    """Parsing of ``gpsbabel -^2`` output"""

    def test_flag_layout(self):
        formats = parse_formats("file\trwrwrw\tgpx\tgpx\tGPX XML\n")
        self.assertEqual(len(formats), 1)
        gpx = formats[0]
        self.assertEqual(gpx.id, "gpx")
        self.assertEqual(gpx.extensions, (".gpx",))
        self.assertTrue(gpx.supports_read)
        self.assertTrue(gpx.supports_write)
        self.assertEqual(gpx.description, "GPX XML")

    def test_kind_tagged_layout(self):
        gpx = parse_formats("file\tgpx\tgpx\tGPX XML")[0]
        self.assertEqual(gpx.id, "gpx")
        self.assertTrue(gpx.supports_read)
        self.assertTrue(gpx.supports_write)
        self.assertEqual(gpx.extensions, (".gpx",))

    def test_kind_tagged_serial_is_read_only(self):
        fmt = parse_formats("serial\tgarmin\tgarmin\tGarmin serial/USB protocol")[0]
        self.assertTrue(fmt.supports_read)
        self.assertFalse(fmt.supports_write)

    def test_kind_tagged_internal_is_dropped(self):
        self.assertEqual(parse_formats("internal\tarc\tarc\tSomething"), [])

    def test_mixed_layouts_in_one_listing(self):
        text = "file\trwrwrw\tgpx\tgpx\tGPX XML\nfile\tkml\tkml\tKML\n"
        self.assertEqual([f.id for f in parse_formats(text)], ["gpx", "kml"])

    def test_short_records_are_skipped(self):
        self.assertEqual(parse_formats("file\trw\tgpx\n\n"), [])

    def test_no_read_no_write_dropped(self):
        self.assertEqual(parse_formats("file\t------\tgpx\tgpx\tGPX XML"), [])

    def test_write_only(self):
        fmt = parse_formats("file\t-w-w-w\ttext\ttxt\tTextual output")[0]
        self.assertFalse(fmt.supports_read)
        self.assertTrue(fmt.supports_write)
        self.assertEqual(fmt.extensions, (".txt",))

    def test_slash_separated_extensions(self):
        fmt = parse_formats("file\trwrwrw\tgtrnctr\ttcx/crs/hst/xml\tGarmin Training Center")[0]
        self.assertEqual(fmt.extensions, (".tcx", ".crs", ".hst", ".xml"))

    def test_empty_extension_field_is_inferred(self):
        fmt = parse_formats("file\trwrwrw\tnmea\t\tNMEA 0183 sentences")[0]
        self.assertEqual(fmt.extensions, (".nmea", ".txt"))

    def test_parsing_is_idempotent(self):
        text = "file\trwrwrw\tgpx\tgpx\tGPX XML\nfile\tkml\tkml\tKML\nbad line\n"
        self.assertEqual(parse_formats(text), parse_formats(text))
        self.assertEqual(
            [(f.id, f.extensions, f.supports_read, f.supports_write) for f in parse_formats(text)],
            [(f.id, f.extensions, f.supports_read, f.supports_write) for f in parse_formats(text)],
        )


class TestExtensionInference(unittest.TestCase):

    def test_known_ids(self):
        self.assertEqual(infer_extensions("garmin_fit"), (".fit",))
        self.assertEqual(infer_extensions("gtrnctr"), (".tcx",))
        self.assertEqual(infer_extensions("gpsman"), (".gpsman",))

    def test_short_id_used_as_extension(self):
        self.assertEqual(infer_extensions("ozi"), (".ozi",))

    def test_long_or_underscored_ids_have_none(self):
        self.assertEqual(infer_extensions("magellanx"), ())
        self.assertEqual(infer_extensions("a_b"), ())

    def test_split_extensions_normalises_dots(self):
        self.assertEqual(split_extensions("gpx/.xml"), (".gpx", ".xml"))
        self.assertEqual(split_extensions(""), ())


class TestGpsFormat(unittest.TestCase):

    def test_extension_matching_ignores_case_and_dot(self):
        fmt = GpsFormat("gpx", "GPX", (".GPX",))
        for ext in ("gpx", ".gpx", "GPX"):
            self.assertTrue(fmt.matches_extension(ext), ext)
        self.assertFalse(fmt.matches_extension("kml"))
        self.assertFalse(fmt.matches_extension(""))

    def test_identity_is_id(self):
        self.assertEqual(GpsFormat("gpx", "One"), GpsFormat("gpx", "Other"))
        self.assertEqual(len({GpsFormat("gpx", "One"), GpsFormat("gpx", "Other")}), 1)

    def test_auto_detect_sentinel(self):
        self.assertTrue(AUTO_DETECT.is_auto)
        self.assertFalse(AUTO_DETECT.supports_write)
        self.assertNotIn(AUTO_DETECT, COMMON_FORMATS)

    def test_builtin_catalog_contents(self):
        ids = {f.id for f in COMMON_FORMATS}
        self.assertEqual(ids, {"gpx", "kml", "garmin_fit", "gtrnctr", "csv", "gdb"})
        gpx = next(f for f in COMMON_FORMATS if f.id == "gpx")
        self.assertIn(".gpx", gpx.extensions)

    def test_detect_from_extension(self):
        self.assertEqual(detect_from_extension(Path("/tmp/ride.FIT")).id, "garmin_fit")
        self.assertEqual(detect_from_extension("walk.tcx").id, "gtrnctr")
        self.assertIsNone(detect_from_extension("notes.doc"))
        self.assertIsNone(detect_from_extension("README"))

    def test_default_extension(self):
        self.assertEqual(COMMON_FORMATS[0].default_extension, "gpx")
        self.assertIsNone(AUTO_DETECT.default_extension)


if __name__ == "__main__":
    unittest.main()
