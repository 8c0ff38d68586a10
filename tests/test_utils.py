from flickfinder.utils import build_image_url, normalize_query, tokenize, tokenize_all


def test_tokenize_splits_on_punctuation_and_drops_short_tokens():
    assert tokenize("Spider-Man: No Way Home") == ["spider", "man", "way", "home"]


def test_tokenize_handles_empty_input():
    assert tokenize("") == []
    assert tokenize(None) == []


def test_tokenize_keeps_digits_and_unicode_letters():
    assert tokenize("Amélie 2001") == ["amélie", "2001"]


def test_tokenize_all_unions_tokens():
    assert tokenize_all(["The Matrix", "Matrix Reloaded"]) == {"the", "matrix", "reloaded"}


def test_normalize_query_collapses_whitespace():
    assert normalize_query("  the   dark\tknight ") == "the dark knight"
    assert normalize_query(None) == ""


def test_build_image_url():
    assert build_image_url("/abc.jpg") == "https://image.tmdb.org/t/p/w500/abc.jpg"
    assert build_image_url("https://cdn.example.com/x.jpg") == "https://cdn.example.com/x.jpg"
    assert build_image_url(None) is None
