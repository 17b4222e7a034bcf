import unittest
from datetime import datetime, timezone
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "cosmos" / "src"
sys.path.insert(0, str(SRC))

from cosmos.search.parser import (
    CitationParser,
    ParserState,
    extract_domain,
    make_result_id,
    parse_answer,
    utc_now_iso,
)


NOW = datetime(2026, 1, 25, 10, 30, tzinfo=timezone.utc)


class TestExtractDomain(unittest.TestCase):
    def test_strips_leading_www(self):
        self.assertEqual(extract_domain("https://www.example.com/a"), "example.com")

    def test_keeps_other_subdomains(self):
        self.assertEqual(extract_domain("https://news.example.co.uk/x?y=1"), "news.example.co.uk")

    def test_only_leading_www_is_removed(self):
        self.assertEqual(extract_domain("https://blog.www.example.com/"), "blog.www.example.com")

    def test_unparseable_is_unknown(self):
        self.assertEqual(extract_domain("not a url"), "Unknown")
        self.assertEqual(extract_domain(""), "Unknown")
        self.assertEqual(extract_domain(None), "Unknown")
        self.assertEqual(extract_domain("http://[::1"), "Unknown")


class TestCitationParser(unittest.TestCase):
    def test_prior_text_line_becomes_title(self):
        content = "Fusion progress\nSource: https://example.com/fusion"
        results = parse_answer(content, "general", "fusion", now=NOW)

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].url, "https://example.com/fusion")
        self.assertEqual(results[0].title, "Fusion progress")
        self.assertEqual(results[0].source, "example.com")
        self.assertEqual(results[0].type, "general")

    def test_title_is_trimmed(self):
        results = parse_answer("   Fusion progress   \nhttps://example.com/f", "blog", "q", now=NOW)
        self.assertEqual(results[0].title, "Fusion progress")

    def test_placeholder_title_when_none_seen(self):
        results = parse_answer("See https://www.example.com/x", "blog", "quantum", now=NOW)

        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].title, 'blog result for "quantum"')
        self.assertEqual(results[0].description, "")
        self.assertEqual(results[0].content, "See https://www.example.com/x")

    def test_each_url_line_flushes_previous_result(self):
        content = "\n".join([
            "Intro line about the topic here",
            "https://www.a.com/1 first citation",
            "Title for the second item",
            "",
            "https://b.org/2",
            "Another title!!",
            "A description line that is clearly long enough.",
        ])
        results = parse_answer(content, "general", "topic", now=NOW)

        self.assertEqual([r.url for r in results], ["https://www.a.com/1", "https://b.org/2"])
        self.assertEqual(results[0].title, "Intro line about the topic here")
        self.assertEqual(results[0].description, "Title for the second item")
        self.assertEqual(results[0].source, "a.com")
        self.assertEqual(results[1].title, "Another title!!")
        self.assertEqual(results[1].description, "A description line that is clearly long enough.")
        self.assertEqual(results[1].source, "b.org")

    def test_short_and_long_lines_do_not_become_titles(self):
        long_line = "x" * 250
        content = f"https://example.com/a\nshort\n{long_line}"
        results = parse_answer(content, "general", "q", now=NOW)

        self.assertEqual(results[0].title, 'general result for "q"')
        self.assertEqual(results[0].description, long_line)

    def test_url_stops_at_closing_paren(self):
        results = parse_answer("Markdown link here [site](https://example.com/page).", "blog", "q", now=NOW)
        self.assertEqual(results[0].url, "https://example.com/page")

    def test_no_url_yields_single_fallback(self):
        content = "Plain answer without any links. " * 20
        results = parse_answer(content, "general", "plain", now=NOW)

        self.assertEqual(len(results), 1)
        fallback = results[0]
        self.assertEqual(fallback.source, "Perplexity AI")
        self.assertEqual(fallback.description, content[:200] + "...")
        self.assertEqual(fallback.url, "")
        self.assertEqual(fallback.title, 'general search results for "plain"')
        self.assertEqual(fallback.content, content)

    def test_blank_answer_yields_nothing(self):
        self.assertEqual(parse_answer("", "blog", "q", now=NOW), [])
        self.assertEqual(parse_answer("  \n\n ", "blog", "q", now=NOW), [])

    def test_timestamps_are_parse_time(self):
        results = parse_answer("Some title text\nhttps://example.com", "blog", "q", now=NOW)
        self.assertEqual(results[0].published_at, "2026-01-25T10:30:00.000Z")

    def test_parser_ends_without_active_result(self):
        parser = CitationParser("blog", "q", now=NOW)
        parser.parse("Title line here\nhttps://example.com/1")
        self.assertIs(parser.state, ParserState.NO_ACTIVE_RESULT)
        self.assertEqual(len(parser.results), 1)


class TestIdentifiers(unittest.TestCase):
    def test_ids_are_prefixed_and_unique(self):
        ids = {make_result_id("news") for _ in range(200)}
        self.assertEqual(len(ids), 200)
        self.assertTrue(all(i.startswith("news-") for i in ids))

    def test_utc_now_iso_converts_offsets(self):
        from datetime import timedelta
        local = datetime(2026, 1, 25, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(utc_now_iso(local), "2026-01-25T10:00:00.000Z")


if __name__ == "__main__":
    unittest.main()
