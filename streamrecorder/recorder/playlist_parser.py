"""Tools for parsing HLS playlists into segment locators and variants."""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional, Sequence

from ..errors import NoVariantsFoundError, QualityNotAvailableError
from ..models import Variant

STREAM_INF_TAG = "#EXT-X-STREAM-INF:"
_ATTRIBUTE = re.compile(r'([A-Z0-9-]+)=("[^"]*"|[^,]*)')


def iter_segment_locators(text: str) -> Iterator[str]:
    """Yields segment URIs of a media playlist in document order.

    Directive and comment lines (``#...``) and blank lines are skipped; a
    truncated playlist simply yields fewer locators.
    """

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        yield line


def _parse_attributes(tag_line: str) -> dict:
    attributes = {}
    for key, value in _ATTRIBUTE.findall(tag_line.split(":", 1)[-1]):
        attributes[key] = value.strip('"')
    return attributes


def _variant_name(attributes: dict, bandwidth: int) -> str:
    resolution = attributes.get("RESOLUTION")
    frame_rate = attributes.get("FRAME-RATE")
    if resolution and frame_rate:
        height = resolution.split("x")[1] if "x" in resolution else "?"
        return f"{height}p{frame_rate.split('.')[0]}"
    return f"{bandwidth // 1000}kbps"


def parse_variants(text: str) -> List[Variant]:
    """Extracts the variant streams listed in a master playlist."""

    variants: List[Variant] = []
    pending: Optional[dict] = None
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith(STREAM_INF_TAG):
            pending = _parse_attributes(line)
            continue
        if pending is None or not line or line.startswith("#"):
            continue

        try:
            bandwidth = int(pending.get("BANDWIDTH", "0"))
        except ValueError:
            bandwidth = 0
        variants.append(Variant(name=_variant_name(pending, bandwidth), url=line, bandwidth=bandwidth))
        pending = None

    if not variants:
        logging.warning("Master playlist did not list any variant streams")
    return variants


def choose_variant(variants: Sequence[Variant], quality: str) -> Variant:
    """Returns ``best``/``worst`` by bandwidth, or the variant named ``quality``."""

    if not variants:
        raise NoVariantsFoundError("stream exposes no variants", stage="variant resolution")

    wanted = quality.strip().lower()
    if wanted == "best":
        return max(variants, key=lambda variant: variant.bandwidth)
    if wanted == "worst":
        return min(variants, key=lambda variant: variant.bandwidth)
    for variant in variants:
        if variant.name.lower() == wanted:
            return variant

    available = ", ".join(variant.name for variant in variants)
    raise QualityNotAvailableError(
        f"quality {quality!r} not available (choose from: best, worst, {available})",
        stage="variant resolution",
    )
