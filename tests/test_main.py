"""Tests for the command-line entry point and search shell."""

import io

from rss_search import __main__ as cli
from rss_search.errors import IngestionAborted, SourceReadError
from rss_search.models import Article
from rss_search.search import SearchEngine


def article(title, content):
    return Article.from_content(
        title=title,
        description=f"<p>About <b>{title}</b></p>",
        address=f"http://x.com/{title}",
        published_date="Mon, 06 Sep 2021 16:45:00 +0000",
        content=content,
    )


def scripted(*lines):
    answers = iter(lines)

    def read(prompt):
        try:
            return next(answers)
        except StopIteration:
            raise EOFError
    return read


class TestRunShell:
    def test_prints_ranked_results(self):
        engine = SearchEngine([article("One", "cat"), article("Two", "cat cat")])
        out = io.StringIO()

        cli.run_shell(engine, max_results=10, read=scripted("  Cat!  ", ""), out=out)

        text = out.getvalue()
        assert "Actual query: cat" in text
        assert "Search returned 2 results" in text
        assert text.index("1. Two (2 hits)") < text.index("2. One (1 hit)")
        assert "About Two" in text
        assert "http://x.com/Two" in text
        assert "Published: 2021-09-06 16:45" in text

    def test_limits_displayed_results(self):
        engine = SearchEngine([article(str(n), "x") for n in range(4)])
        out = io.StringIO()

        cli.run_shell(engine, max_results=2, read=scripted("x"), out=out)

        text = out.getvalue()
        assert "Search returned 4 results" in text
        assert "Only the first 2 results are shown" in text
        assert "3. " not in text

    def test_stops_on_end_of_input(self):
        out = io.StringIO()
        cli.run_shell(SearchEngine([]), max_results=10, read=scripted(), out=out)
        assert out.getvalue() == ""

    def test_no_results(self):
        out = io.StringIO()
        cli.run_shell(SearchEngine([]), max_results=10, read=scripted("dog", ""), out=out)
        assert "Search returned 0 results" in out.getvalue()

    def test_whitespace_line_does_not_exit(self):
        out = io.StringIO()
        cli.run_shell(SearchEngine([article("One", "cat")]), max_results=10, read=scripted("   ", "cat", ""), out=out)

        text = out.getvalue()
        assert "Actual query: \n" in text
        assert "Search returned 0 results" in text
        assert "1. One (1 hit)" in text


class TestMain:
    def test_arguments_override_config(self, tmp_path):
        args = cli.parse_args([str(tmp_path / "feeds.txt"), "4", "--max-results", "3"])
        config = cli.build_config(args)
        assert config.feed_file == tmp_path / "feeds.txt"
        assert config.max_threads == 4
        assert config.max_results == 3

    def test_invalid_thread_count_means_no_limit(self, tmp_path, caplog):
        config = cli.build_config(cli.parse_args([str(tmp_path / "feeds.txt"), "lots"]))
        assert config.max_threads == 0
        assert config.unbounded
        assert "Invalid thread limit" in caplog.text

    def test_indexes_then_runs_shell(self, monkeypatch, capsys, tmp_path):
        engine = SearchEngine([article("One", "cat")])
        seen = {}
        monkeypatch.setattr(cli.SearchEngine, "from_feed_file", classmethod(lambda cls, config: engine))
        monkeypatch.setattr(cli, "run_shell", lambda eng, max_results: seen.update(engine=eng, max_results=max_results))

        status = cli.main([str(tmp_path / "feeds.txt"), "0"])

        assert status == 0
        assert seen == {"engine": engine, "max_results": 10}
        assert "Indexed 1 article" in capsys.readouterr().out

    def test_unreadable_feed_list(self, monkeypatch, tmp_path):
        def fail(cls, config):
            raise SourceReadError("Cannot read feed list")

        monkeypatch.setattr(cli.SearchEngine, "from_feed_file", classmethod(fail))
        assert cli.main([str(tmp_path / "missing.txt")]) == 1

    def test_aborted_ingestion(self, monkeypatch, tmp_path):
        def abort(cls, config):
            raise IngestionAborted("Ingestion interrupted")

        monkeypatch.setattr(cli.SearchEngine, "from_feed_file", classmethod(abort))
        assert cli.main([str(tmp_path / "feeds.txt")]) == 130
