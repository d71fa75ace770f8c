# gpsconv/cli.py
"""
gpsconv: convert GPS files with gpsbabel.

Usage:
    gpsconv track.fit track.gpx                 # formats from the file names
    gpsconv in.csv out.kml -i csv -o kml        # explicit formats
    gpsconv ride.gpx --simplify --dedupe        # output next to input, filters applied
    gpsconv --formats                           # what this gpsbabel can read/write
    gpsconv --version-info                      # which gpsbabel is used
    gpsconv --set-binary /opt/gpsbabel/bin/gpsbabel
"""
import argparse
import logging
import signal
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication, QObject, QThread, QTimer, Slot

from .errors import GpsConvError
from .models.format import AUTO_DETECT
from .models.job import ConversionJob, JobState, MergeTracks, RemoveDuplicates, Simplify
from .utils.paths import suggest_output_path
from .utils.settings import Preferences
from .workers.catalog import FormatCatalog
from .workers.locator import BinaryLocator
from .workers.orchestrator import JobOrchestrator

EXIT_CODES = {JobState.COMPLETED: 0, JobState.FAILED: 1, JobState.CANCELLED: 130}


class _Console(QObject):
    """Lives in the main thread; receives the worker's signals queued."""

    def __init__(self, app: QCoreApplication, thread: QThread):
        super().__init__()
        self.app, self.thread = app, thread
        self.exit_code = 1

    @Slot(str)
    def print_line(self, line: str):
        print(line, flush=True)

    @Slot(object)
    def finish(self, status):
        self.exit_code = EXIT_CODES.get(status.state, 1)
        self.thread.quit()
        self.thread.wait()
        self.app.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gpsconv", description="Convert GPS files with gpsbabel.")
    p.add_argument("input", nargs="?", type=Path, help="file to convert")
    p.add_argument("output", nargs="?", type=Path, help="destination (default: next to the input)")
    p.add_argument("-i", "--input-format", default=AUTO_DETECT.id, help="gpsbabel input format (default: auto)")
    p.add_argument("-o", "--output-format", help="gpsbabel output format (default: from the output name)")
    p.add_argument("--simplify", nargs="?", const="", metavar="ERROR",
                   help="simplify tracks, optional error distance such as 0.001k")
    p.add_argument("--dedupe", action="store_true", help="remove duplicate waypoints")
    p.add_argument("--merge", action="store_true", help="merge all tracks into one")
    p.add_argument("--formats", action="store_true", help="list supported formats and exit")
    p.add_argument("--version-info", action="store_true", help="show the gpsbabel in use and exit")
    p.add_argument("--set-binary", metavar="PATH", help="remember a custom gpsbabel path")
    p.add_argument("--clear-binary", action="store_true", help="forget the custom gpsbabel path")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return p


def _list_formats(catalog: FormatCatalog) -> None:
    for title, formats in (("Input formats", catalog.input_choices()), ("Output formats", catalog.write_formats())):
        print(f"{title}:")
        for f in formats:
            exts = " ".join(f.extensions)
            print(f"  {f.id:<14} {f.name}" + (f"  [{exts}]" if exts else ""))
    if catalog.used_fallback:
        print("(built-in list: gpsbabel did not report its formats)")


def _build_job(args, catalog: FormatCatalog, prefs: Preferences) -> ConversionJob:
    in_fmt = catalog.find(args.input_format)
    if in_fmt is None:
        raise SystemExit(f"gpsconv: unknown input format '{args.input_format}'")

    if args.output_format:
        out_fmt = catalog.find(args.output_format)
    elif args.output:
        out_fmt = catalog.detect(args.output) or catalog.find(prefs.get("default_output_format", "gpx"))
    else:
        out_fmt = catalog.find(prefs.get("default_output_format", "gpx"))
    if out_fmt is None or out_fmt.is_auto or not out_fmt.supports_write:
        raise SystemExit("gpsconv: no usable output format, pass -o")

    filters = []
    if args.simplify is not None:
        filters.append(Simplify(args.simplify or prefs.get("simplify_distance", "0.001k")))
    if args.dedupe:
        filters.append(RemoveDuplicates())
    if args.merge:
        filters.append(MergeTracks())

    output = args.output or suggest_output_path(args.input, out_fmt.default_extension)
    return ConversionJob.create(
        input_path=args.input.expanduser().resolve(),
        input_format=None if in_fmt.is_auto else in_fmt,
        output_path=output.expanduser().resolve(),
        output_format=out_fmt,
        filters=tuple(filters),
    )


def _run_threaded(orchestrator: JobOrchestrator, job: ConversionJob) -> int:
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    thread = QThread()
    console = _Console(app, thread)

    orchestrator.submit(job)
    orchestrator.moveToThread(thread)
    orchestrator.line_out.connect(console.print_line)
    orchestrator.job_done.connect(console.finish)
    thread.started.connect(orchestrator.run)

    # Ctrl-C cancels the running gpsbabel; the timer lets Python see the signal
    signal.signal(signal.SIGINT, lambda *_: orchestrator.cancel())
    ticker = QTimer()
    ticker.timeout.connect(lambda: None)
    ticker.start(200)

    thread.start()
    app.exec()
    return console.exit_code


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    prefs = Preferences()
    locator = BinaryLocator(prefs)
    if args.clear_binary:
        locator.set_custom_path(None)
        print("Custom gpsbabel path cleared.")
    if args.set_binary:
        locator.set_custom_path(Path(args.set_binary).expanduser())
        print(f"Custom gpsbabel path set to {args.set_binary}")
    catalog = FormatCatalog(locator)

    try:
        if args.version_info:
            print(f"{locator.locate()}\n{locator.version()}")
            return 0
        if args.formats:
            _list_formats(catalog)
            return 0
    except GpsConvError as e:
        print(e, file=sys.stderr)
        return 1

    if args.input is None:
        if args.set_binary or args.clear_binary:
            return 0
        build_parser().print_usage(sys.stderr)
        return 2

    job = _build_job(args, catalog, prefs)
    return _run_threaded(JobOrchestrator(locator, catalog), job)


if __name__ == "__main__":
    sys.exit(main())
