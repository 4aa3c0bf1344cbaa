"""
Test suite for text normalization helpers.

System role: Verification of capture text processing utilities
"""

from linkmeld.core.text_utils import (
    collapse_whitespace,
    content_hash,
    count_words,
    reading_time_minutes,
    remove_boilerplate,
    slugify,
)


class TestCollapseWhitespace:
    def test_runs_should_become_single_spaces(self) -> None:
        """Test whitespace runs collapse and ends are trimmed."""
        assert collapse_whitespace("  a \n\n b\t c ") == "a b c"

    def test_none_like_input_should_give_empty_string(self) -> None:
        """Test empty input stays empty."""
        assert collapse_whitespace("") == ""


class TestRemoveBoilerplate:
    def test_script_style_and_tags_should_be_stripped(self) -> None:
        """Test markup is removed and text kept."""
        html = (
            "<html><script>var x = 1;</script><style>p { color: red; }</style>"
            "<p>Hello <b>world</b></p></html>"
        )

        assert remove_boilerplate(html) == "Hello world"

    def test_plain_text_should_pass_through(self) -> None:
        """Test text without markup is only whitespace-normalized."""
        assert remove_boilerplate("Plain   text.") == "Plain text."


class TestContentHash:
    def test_empty_text_should_hash_to_empty_string(self) -> None:
        assert content_hash("") == ""

    def test_whitespace_differences_should_not_change_hash(self) -> None:
        """Test formatting-only differences hash identically."""
        assert content_hash("a  b\nc") == content_hash("a b c")

    def test_compatibility_characters_should_be_normalized(self) -> None:
        """Test NFKC folds ligatures before hashing."""
        assert content_hash("ﬁle") == content_hash("file")

    def test_hash_should_be_sha256_hex(self) -> None:
        digest = content_hash("text")

        assert len(digest) == 64
        assert all(ch in "0123456789abcdef" for ch in digest)


class TestReadingMetrics:
    def test_count_words(self) -> None:
        assert count_words("") == 0
        assert count_words("one two  three") == 3

    def test_reading_time_should_round_up_with_one_minute_floor(self) -> None:
        """Test 200 words per minute, at least one minute for any text."""
        assert reading_time_minutes("") == 0
        assert reading_time_minutes("word") == 1
        assert reading_time_minutes(" ".join(["word"] * 401)) == 3


class TestSlugify:
    def test_title_should_be_lowercased_and_hyphenated(self) -> None:
        assert slugify("Hello, World!") == "hello-world"

    def test_accents_should_be_transliterated(self) -> None:
        assert slugify("Café déjà vu") == "cafe-deja-vu"

    def test_unusable_title_should_fall_back(self) -> None:
        assert slugify("!!!") == "untitled"
