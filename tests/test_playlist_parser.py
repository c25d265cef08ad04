import pytest

from streamrecorder.errors import NoVariantsFoundError, QualityNotAvailableError
from streamrecorder.models import Variant
from streamrecorder.recorder.playlist_parser import choose_variant, iter_segment_locators, parse_variants

MASTER_PLAYLIST = """#EXTM3U
#EXT-X-TWITCH-INFO:NODE="video-edge",MANIFEST-NODE-TYPE="weaver_cluster"
#EXT-X-MEDIA:TYPE=VIDEO,GROUP-ID="chunked",NAME="1080p60 (source)",AUTOSELECT=YES,DEFAULT=YES
#EXT-X-STREAM-INF:BANDWIDTH=8534030,RESOLUTION=1920x1080,CODECS="avc1.64002A,mp4a.40.2",VIDEO="chunked",FRAME-RATE=60.000
https://video-weaver.example.net/v1/playlist/source.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=3422999,RESOLUTION=1280x720,CODECS="avc1.4D401F,mp4a.40.2",VIDEO="720p30",FRAME-RATE=30.000
https://video-weaver.example.net/v1/playlist/720p30.m3u8
#EXT-X-STREAM-INF:BANDWIDTH=160000,CODECS="mp4a.40.2",VIDEO="audio_only"
https://video-weaver.example.net/v1/playlist/audio.m3u8
"""


def test_locators_follow_document_order():
    text = "#EXTM3U\n#EXT-X-VERSION:3\nseg0.ts\nseg1.ts\n"
    assert list(iter_segment_locators(text)) == ["seg0.ts", "seg1.ts"]


def test_locators_skip_directives_and_blank_lines():
    text = "#EXTM3U\r\n\r\n#EXTINF:2.000,live\r\n  https://cdn.example/a.ts  \r\n#EXT-X-PROGRAM-DATE-TIME:2025\r\n\r\nb.ts"
    assert list(iter_segment_locators(text)) == ["https://cdn.example/a.ts", "b.ts"]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "#EXTM3U\n#EXT-X-VERSION:3\n#EXT-X-TARGETDURATION:2\n",
        "#EXTM3U\n#EXTINF:2.000,live",
        "\n\n   \n",
    ],
)
def test_locators_empty_for_playlists_without_segments(text):
    assert list(iter_segment_locators(text)) == []


def test_locators_are_lazy_and_restartable():
    text = "a.ts\nb.ts\n"
    iterator = iter_segment_locators(text)
    assert next(iterator) == "a.ts"
    assert list(iter_segment_locators(text)) == ["a.ts", "b.ts"]
    assert list(iterator) == ["b.ts"]


def test_parse_variants_reads_names_urls_and_bandwidth():
    variants = parse_variants(MASTER_PLAYLIST)
    assert [variant.name for variant in variants] == ["1080p60", "720p30", "160kbps"]
    assert variants[0].url == "https://video-weaver.example.net/v1/playlist/source.m3u8"
    assert variants[0].bandwidth == 8534030
    assert variants[2].bandwidth == 160000


def test_parse_variants_defaults_bad_bandwidth_to_zero():
    text = "#EXTM3U\n#EXT-X-STREAM-INF:BANDWIDTH=abc\nlow.m3u8\n#EXT-X-STREAM-INF:RESOLUTION=640x360\n"
    variants = parse_variants(text)
    assert variants == [Variant(name="0kbps", url="low.m3u8", bandwidth=0)]


def test_parse_variants_empty_master():
    assert parse_variants("#EXTM3U\n") == []


def test_choose_variant_best_and_worst():
    variants = parse_variants(MASTER_PLAYLIST)
    assert choose_variant(variants, "best").name == "1080p60"
    assert choose_variant(variants, "BEST").name == "1080p60"
    assert choose_variant(variants, "worst").name == "160kbps"


def test_choose_variant_by_name_is_case_insensitive():
    variants = parse_variants(MASTER_PLAYLIST)
    assert choose_variant(variants, "720P30").url.endswith("720p30.m3u8")


def test_choose_variant_missing_quality():
    variants = parse_variants(MASTER_PLAYLIST)
    with pytest.raises(QualityNotAvailableError) as excinfo:
        choose_variant(variants, "480p30")
    assert "720p30" in str(excinfo.value)
    assert excinfo.value.stage == "variant resolution"


def test_choose_variant_without_variants():
    with pytest.raises(NoVariantsFoundError):
        choose_variant([], "best")
