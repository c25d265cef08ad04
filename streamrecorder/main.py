from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import os
import signal
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from .api.twitch_api import TwitchAPI, extract_channel
from .errors import RecorderError
from .models import RecorderSettings, Variant
from .recorder.append_sink import AppendSink
from .recorder.playlist_parser import choose_variant
from .recorder.progress import ProgressReporter
from .recorder.segment_recorder import SegmentRecorder
from .recorder.supervisor import RetryPolicy, run_supervised
from .utils.file_utils import resolve_output_path
from .utils.http_client import HttpClient

load_dotenv()


def _env_str(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return None
    return value


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _env_default(value, default):
    return default if value is None else value


def _env_bool(name: str) -> bool:
    value = _env_str(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    defaults = RecorderSettings()
    parser = argparse.ArgumentParser(description="Record a live Twitch HLS stream to a .ts file.")
    parser.add_argument("url", help="Channel URL (https://www.twitch.tv/<channel>) or bare channel name")
    parser.add_argument(
        "quality",
        nargs="?",
        default=_env_str("STREAM_QUALITY") or "best",
        help="Stream quality: best, worst, or a variant name such as 720p60",
    )
    parser.add_argument("-r", "--record", default=_env_str("RECORD_PATH"), help="Output file (defaults to <channel>_<timestamp>.ts)")
    parser.add_argument("--output-dir", default=_env_str("OUTPUT_DIR"), help="Directory for relative output paths")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=_env_int("VERBOSE") or 0,
        help="Report download progress (-v) and debug details (-vv)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=_env_default(_env_float("POLL_INTERVAL"), defaults.poll_interval),
        help="Seconds to wait between playlist polls",
    )
    parser.add_argument(
        "--playlist-timeout",
        type=float,
        default=_env_default(_env_float("PLAYLIST_TIMEOUT"), defaults.playlist_timeout),
        help="Seconds before a playlist fetch is treated as failed",
    )
    parser.add_argument(
        "--segment-timeout",
        type=float,
        default=_env_default(_env_float("SEGMENT_TIMEOUT"), defaults.segment_timeout),
        help="Seconds before a segment download is treated as failed (0 disables)",
    )
    parser.add_argument(
        "--retries",
        type=int,
        default=_env_default(_env_int("RETRIES"), defaults.retries),
        help="Restart the poll loop this many times after transient network errors",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=_env_default(_env_int("WORKERS"), defaults.workers),
        help="Concurrent segment downloads per poll (appends stay in playlist order)",
    )
    parser.add_argument(
        "--no-fsync",
        action="store_true",
        default=_env_bool("NO_FSYNC"),
        help="Skip fsync after each appended segment",
    )
    return parser.parse_args(argv)


def configure_logging(verbose: int = 0) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose > 1 else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def build_settings(args: argparse.Namespace) -> RecorderSettings:
    return RecorderSettings(
        poll_interval=args.poll_interval,
        playlist_timeout=args.playlist_timeout,
        segment_timeout=args.segment_timeout,
        retries=args.retries,
        workers=args.workers,
        fsync=not args.no_fsync,
    )


def resolve_variant(http_client: HttpClient, channel: str, quality: str) -> Variant:
    variants = TwitchAPI(http_client).get_variants(channel)
    logging.debug("Available variants: %s", ", ".join(variant.name for variant in variants))
    return choose_variant(variants, quality)


def _cancel_on_sigterm(task: asyncio.Task) -> None:
    loop = asyncio.get_running_loop()
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGTERM, task.cancel)


async def record(
    http_client: HttpClient,
    playlist_url: str,
    output_path: str,
    settings: RecorderSettings,
    verbose: bool = False,
) -> None:
    """Records ``playlist_url`` into ``output_path`` until an error or cancellation."""

    current = asyncio.current_task()
    if current is not None:
        _cancel_on_sigterm(current)

    progress = ProgressReporter(settings.progress_threshold) if verbose else None
    policy = RetryPolicy(settings.retries, settings.retry_base_delay, settings.retry_max_delay)
    sink = AppendSink(output_path, fsync=settings.fsync)
    try:
        with sink:
            recorder = SegmentRecorder(http_client, sink, playlist_url, settings, progress)
            try:
                await run_supervised(recorder, policy)
            finally:
                logging.info(
                    "Recorded %s segment(s), %s bytes to %s",
                    recorder.segments_recorded,
                    sink.bytes_written,
                    output_path,
                )
    finally:
        await http_client.aclose()


def _fail(exc: RecorderError) -> None:
    logging.error("Recording failed during %s: %s", exc.stage or "recording", exc)
    raise SystemExit(1)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = build_settings(args)
    except ValidationError as exc:
        logging.error("Invalid settings: %s", exc)
        raise SystemExit(2)

    try:
        channel = extract_channel(args.url)
    except ValueError as exc:
        logging.error("%s", exc)
        raise SystemExit(2)

    with HttpClient(timeout=settings.playlist_timeout) as http_client:
        try:
            variant = resolve_variant(http_client, channel, args.quality)
        except RecorderError as exc:
            _fail(exc)

        output_path = resolve_output_path(args.record, channel, args.output_dir)
        logging.info(
            "Recording '%s' @ %s kbps (\"%s\") -> %s",
            channel,
            variant.bandwidth // 1000,
            variant.name,
            output_path,
        )

        try:
            asyncio.run(record(http_client, variant.url, output_path, settings, verbose=args.verbose > 0))
        except (KeyboardInterrupt, asyncio.CancelledError):
            logging.info("Recording stopped; output kept at %s", output_path)
        except RecorderError as exc:
            _fail(exc)


if __name__ == "__main__":
    main()
