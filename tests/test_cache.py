import pytest

from core.errors import CacheIoError
from core.models import LineTimestamp, LyricNone, LyricPair, PlainText, TrackMeta
from lyric.cache import (
    dump_lyric_pair, get_cache_path, load_lyric_cache, load_lyric_pair, update_lyric_cache,
)

META = TrackMeta(title="Song", album="Album", artists=("Artist",))


class TestCachePath:

    def test_deterministic(self, tmp_path):
        assert get_cache_path(META, tmp_path) == get_cache_path(TrackMeta("Song", "Album", ("Artist",)), tmp_path)

    def test_distinct_tracks(self, tmp_path):
        other = TrackMeta(title="Other", album="Album", artists=("Artist",))
        assert get_cache_path(META, tmp_path) != get_cache_path(other, tmp_path)

    def test_artist_boundaries_matter(self, tmp_path):
        a = TrackMeta(title="t", artists=("a b", "c"))
        b = TrackMeta(title="t", artists=("a", "b c"))
        assert get_cache_path(a, tmp_path) != get_cache_path(b, tmp_path)

    def test_cosmetic_differences_collapse(self, tmp_path):
        loud = TrackMeta(title="SONG!", album="Álbum", artists=("Artist",))
        quiet = TrackMeta(title="song", album="album", artists=("artist",))
        assert get_cache_path(loud, tmp_path) == get_cache_path(quiet, tmp_path)

    def test_under_root(self, tmp_path):
        path = get_cache_path(META, tmp_path)
        assert path.suffix == ".json"
        assert path.parent.parent == tmp_path


@pytest.mark.parametrize("pair", [
    LyricPair.empty(),
    LyricPair.removed(),
    LyricPair(LineTimestamp(((0, "la"), (1500, "lá lá"))), LyricNone()),
    LyricPair(PlainText("line one\nline two"), LineTimestamp(((0, "译文"),))),
])
def test_round_trip(tmp_path, pair):
    path = get_cache_path(META, tmp_path)
    update_lyric_cache(path, pair)
    assert load_lyric_cache(path) == pair


class TestLoad:

    def test_missing_is_none(self, tmp_path):
        assert load_lyric_cache(tmp_path / "nope.json") is None

    def test_corrupt_is_none(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        assert load_lyric_cache(path) is None

    def test_unknown_kind_is_none(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"version": 1, "origin": {"kind": "karaoke"}, "translation": {"kind": "none"}}')
        assert load_lyric_cache(path) is None

    def test_wrong_version_rejected(self):
        blob = dump_lyric_pair(LyricPair.empty()).replace('"version": 1', '"version": 99')
        with pytest.raises(ValueError):
            load_lyric_pair(blob)


class TestUpdate:

    def test_overwrites(self, tmp_path):
        path = get_cache_path(META, tmp_path)
        update_lyric_cache(path, LyricPair(PlainText("old"), LyricNone()))
        update_lyric_cache(path, LyricPair.removed())
        assert load_lyric_cache(path) == LyricPair.removed()
        assert [p.name for p in path.parent.iterdir()] == [path.name]

    def test_io_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        with pytest.raises(CacheIoError):
            update_lyric_cache(blocker / "sub" / "entry.json", LyricPair.empty())
