"""Main entry point for the vocal-search CLI."""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from ..core.config import ConfigManager
from ..core.factory import ComponentFactory
from ..detection.range_analyzer import HIGHEST, LOWEST
from ..detection.range_fit import find_closest_vocal_range_fit, recommend_song
from ..detection.range_validator import classify_range
from ..detection.session import RangeDetectionSession
from ..errors import ImplausibleRangeError, SearchUnavailableError, StoreError
from ..logger import get_logger
from ..logging_config import setup_logging
from ..search.ranker import search_songs_by_query

logger = get_logger(__name__)

WAV_MAX_DURATION_S = 600.0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="vocal-search - Song search by vocal range")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--config-dir", default=None, help="Configuration directory (default ~/.config/vocal_search)"
    )
    parser.add_argument("--db", default=None, help="SQLite song database path")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    import_parser = subparsers.add_parser("import", help="Load songs from a JSON file")
    import_parser.add_argument(
        "file", help="JSON list of {name, artist, vocalRange} objects"
    )

    search_parser = subparsers.add_parser("search", help="Fuzzy search songs or artists")
    search_parser.add_argument("query", help="Search text")
    search_parser.add_argument(
        "--artists", action="store_true", help="Search artists instead of songs"
    )
    search_parser.add_argument(
        "--related", action="store_true", help="Also list artists from the song results"
    )

    artists_parser = subparsers.add_parser("artists", help="Artists whose name contains the query")
    artists_parser.add_argument("query", help="Search text")

    simple_parser = subparsers.add_parser("simple-search", help="Plain substring search")
    simple_parser.add_argument("query", help="Search text")

    classify_parser = subparsers.add_parser("classify", help="Classify a vocal range")
    classify_parser.add_argument("low", help="Lowest note, e.g. E2")
    classify_parser.add_argument("high", help="Highest note, e.g. G4")

    fit_parser = subparsers.add_parser("fit", help="Closest voice types for a song range")
    fit_parser.add_argument("range", help='Song range, e.g. "E2 - G4"')
    fit_parser.add_argument("--low", default=None, help="Your lowest note")
    fit_parser.add_argument("--high", default=None, help="Your highest note")

    detect_parser = subparsers.add_parser("detect", help="Detect your vocal range")
    detect_parser.add_argument(
        "--source",
        choices=["microphone", "synthetic", "wav"],
        default=None,
        help="Pitch source (default from configuration)",
    )
    detect_parser.add_argument("--low-file", default=None, help="Recording of your lowest note (wav source)")
    detect_parser.add_argument("--high-file", default=None, help="Recording of your highest note (wav source)")
    detect_parser.add_argument(
        "--duration", type=float, default=None, help="Recording duration in seconds"
    )
    detect_parser.add_argument("--device", type=int, default=None, help="Audio input device ID")

    return parser


def _print_songs(results) -> None:
    if not results:
        print("No songs found.")
        return
    for candidate in results:
        song = candidate.song
        print(f"{candidate.score:>6}  {song.name} - {song.artist} ({song.vocal_range})")


def _print_artists(artists) -> None:
    if not artists:
        print("No artists found.")
        return
    for artist in artists:
        span = f"{artist.lowest_note} - {artist.highest_note}" if artist.lowest_note else "?"
        print(f"{artist.name}: {artist.song_count} song(s), range {span}")


def _run_import(factory: ComponentFactory, args) -> int:
    with open(args.file, "r") as f:
        records = json.load(f)
    store = factory.create_song_store(args.db)
    count = store.import_songs(records)
    print(f"Imported {count} songs.")
    return 0


def _run_search(factory: ComponentFactory, args) -> int:
    service = factory.create_search_service(factory.create_song_store(args.db))

    async def run():
        if args.artists:
            _print_artists(await service.search(args.query, "artists"))
            return
        results = await service.search(args.query, "songs")
        _print_songs(results)
        if args.related and results:
            print()
            _print_artists(await service.related_artists(results, args.query))

    asyncio.run(run())
    return 0


def _run_artists(factory: ComponentFactory, args) -> int:
    service = factory.create_search_service(factory.create_song_store(args.db))
    _print_artists(asyncio.run(service.search(args.query, "artists")))
    return 0


def _run_simple_search(factory: ComponentFactory, args) -> int:
    results = search_songs_by_query(factory.create_song_store(args.db), args.query)
    if not results:
        print("No songs found.")
    for song, score in results:
        print(f"{score:>4}  {song.name} - {song.artist} ({song.vocal_range})")
    return 0


def _run_classify(args) -> int:
    result = classify_range(args.low, args.high)
    print(f"{args.low} - {args.high}: {result.classification} ({result.range_description})")
    return 0


def _run_fit(args) -> int:
    fit = find_closest_vocal_range_fit(args.range)
    if fit is None:
        print("Invalid song vocal range provided.")
        return 1
    print(f"Male: {fit.male}" + (f" (song goes {fit.male_out_of_range})" if fit.male_out_of_range else ""))
    print(f"Female: {fit.female}" + (f" (song goes {fit.female_out_of_range})" if fit.female_out_of_range else ""))
    if args.low and args.high:
        print(recommend_song(args.range, args.low, args.high))
    return 0


def _run_detect(factory: ComponentFactory, args) -> int:
    range_config = factory.config_manager.get_config("range_detection")
    implementation = args.source or factory.config_manager.get_config("pitch_source")["implementation"]

    if implementation == "wav":
        if not (args.low_file and args.high_file):
            print("The wav source needs --low-file and --high-file.")
            return 1
        # The take ends with the file
        duration = args.duration or WAV_MAX_DURATION_S
    else:
        duration = args.duration or range_config["recording_duration_s"]

    analyzer_config = factory.create_analyzer_config(implementation)
    detected = {}
    for which, path in ((LOWEST, args.low_file), (HIGHEST, args.high_file)):
        kwargs = {}
        if implementation == "wav":
            kwargs["file_path"] = path
        elif implementation == "microphone" and args.device is not None:
            kwargs["device_id"] = args.device
        source = factory.create_pitch_source(implementation, **kwargs)
        session = RangeDetectionSession(source, analyzer_config, duration_s=duration)

        print(f"Sing your {which} comfortable note and hold it...")
        result = session.record(which)
        if result is None:
            print(f"Could not detect a sustained {which} note. Please try again.")
            return 1
        print(f"  {which}: {result.note} ({result.frequency:.1f} Hz, confidence {result.confidence:.2f})")
        detected[which] = result.note

    try:
        detected_range = session.finish(detected[LOWEST], detected[HIGHEST])
    except ImplausibleRangeError as e:
        print(f"{e}. Please try again.")
        return 1

    classification = detected_range.classification
    print(
        f"Your range: {detected_range.low} - {detected_range.high} "
        f"({classification.range_description}), {classification.classification}"
    )
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command line arguments, or None to use sys.argv

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = _build_parser()
    parsed_args = parser.parse_args(args)

    setup_logging("DEBUG" if parsed_args.debug else None)

    if parsed_args.command == "classify":
        return _run_classify(parsed_args)
    if parsed_args.command == "fit":
        return _run_fit(parsed_args)

    handlers = {
        "import": _run_import,
        "search": _run_search,
        "artists": _run_artists,
        "simple-search": _run_simple_search,
        "detect": _run_detect,
    }
    if parsed_args.command not in handlers:
        parser.print_help()
        return 1

    factory = ComponentFactory(ConfigManager(parsed_args.config_dir))
    try:
        return handlers[parsed_args.command](factory, parsed_args)
    except (SearchUnavailableError, StoreError) as e:
        logger.error(f"{parsed_args.command} failed: {e}")
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    sys.exit(main())
