# tests/test_cli.py
"""Tests for the command-line interface."""

import json

import pytest

from seo_engine import cli
from seo_engine.cache import seo_cache


def page(doc_id, slug, links=(), focus_keyword=""):
    children = [{'type': 'link', 'fields': {'url': url}, 'children': [{'type': 'text', 'text': url}]}
                for url in links]
    return {
        'id': doc_id,
        'title': slug.replace('-', ' ').title(),
        'slug': slug,
        'focusKeyword': focus_keyword,
        'meta': {'title': f"{slug} | Studio", 'description': "Description"},
        'content': {'root': {'children': [{'type': 'paragraph', 'children': children}]}},
    }


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    """Keep the shared cache and the root logger untouched between tests."""
    monkeypatch.setattr(cli, "setup_logging", lambda **kwargs: None)
    seo_cache.invalidate()
    yield
    seo_cache.invalidate()


@pytest.fixture
def corpus_file(tmp_path):
    path = tmp_path / "corpus.json"
    path.write_text(json.dumps({
        'collections': {
            'pages': [
                page(1, "services", ["/contact"], focus_keyword="site vitrine"),
                page(2, "contact"),
            ],
            'posts': [page(3, "guide", ["/services", "/tarifs"], focus_keyword="Site vitrine")],
        },
        'redirects': [],
    }), encoding='utf-8')
    return str(path)


@pytest.fixture
def document_file(tmp_path):
    path = tmp_path / "document.json"
    path.write_text(json.dumps(page(12, "creation-site")), encoding='utf-8')
    return str(path)


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def test_single_document_text(self, document_file, capsys):
        """A single document is printed with its score and checks."""
        cli.main(["analyze", document_file])
        out = capsys.readouterr().out
        assert "SEO Analysis for: pages/creation-site" in out
        assert "Score:" in out
        assert "[title]" in out

    def test_corpus_json(self, corpus_file, capsys):
        """A corpus export gives one JSON entry per document."""
        cli.main(["analyze", corpus_file, "--output", "json"])
        payload = json.loads(capsys.readouterr().out)
        assert [entry['slug'] for entry in payload] == ["services", "contact", "guide"]
        assert all('checks' in entry and 'result' not in entry for entry in payload)

    def test_output_file(self, document_file, tmp_path, capsys):
        """JSON output can be written to a file."""
        output = tmp_path / "out" / "result.json"
        output.parent.mkdir()
        cli.main(["analyze", document_file, "-o", "json", "-f", str(output)])
        assert "Results written to" in capsys.readouterr().out
        assert json.loads(output.read_text(encoding='utf-8'))['slug'] == "creation-site"

    def test_record_and_history(self, document_file, tmp_path, capsys):
        """Recorded snapshots show up in the history command."""
        db_url = f"sqlite:///{tmp_path}/history.db"
        cli.main(["analyze", document_file, "--record", "--db-url", db_url, "-o", "json"])
        score = json.loads(capsys.readouterr().out)['score']

        cli.main(["history", "12", "--collection", "pages", "--db-url", db_url, "-o", "json"])
        data = json.loads(capsys.readouterr().out)
        assert [snapshot['score'] for snapshot in data['history']] == [score]
        assert data['trend'] == "stable"

    def test_missing_file(self, tmp_path, capsys):
        """An unreadable input file exits with status 1."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["analyze", str(tmp_path / "missing.json")])
        assert exc_info.value.code == 1
        captured = capsys.readouterr()
        assert "cannot read" in captured.err
        assert captured.out == ""


class TestCorpusCommands:
    """Tests for the corpus commands."""

    def test_link_graph_json(self, corpus_file, capsys):
        """The link graph is serialized with its stats."""
        cli.main(["link-graph", corpus_file, "-o", "json"])
        graph = json.loads(capsys.readouterr().out)
        assert graph['stats']['total_nodes'] == 3
        assert graph['stats']['total_edges'] == 2

    def test_audit_text(self, corpus_file, capsys):
        """Broken links are listed unless their route is known."""
        cli.main(["audit", corpus_file])
        assert "Broken links (1)" in capsys.readouterr().out

        seo_cache.invalidate()
        cli.main(["audit", corpus_file, "--known-route", "tarifs"])
        assert "Broken links" not in capsys.readouterr().out

    def test_cannibalization(self, corpus_file, capsys):
        """Documents sharing a focus keyword are reported."""
        cli.main(["cannibalization", corpus_file])
        out = capsys.readouterr().out
        assert "1 conflict(s), 2 page(s) affected" in out
        assert '"site vitrine"' in out

    def test_keywords_json(self, corpus_file, capsys):
        """Keyword research is serialized with its stats."""
        cli.main(["keywords", corpus_file, "-o", "json"])
        research = json.loads(capsys.readouterr().out)
        assert research['stats']['total_keywords_analyzed'] == 1

    def test_suggest_links_unknown_slug(self, corpus_file, capsys):
        """An unknown slug gets no suggestions."""
        cli.main(["suggest-links", corpus_file, "nope"])
        assert "No link suggestions for nope" in capsys.readouterr().out

    def test_site_audit_json(self, corpus_file, capsys):
        """The site audit lists every document, worst first, with its stats."""
        cli.main(["site-audit", corpus_file, "-o", "json"])
        audit = json.loads(capsys.readouterr().out)
        assert audit['stats']['total_pages'] == 3
        assert audit['stats']['no_keyword'] == 1
        scores = [row['score'] for row in audit['entries']]
        assert scores == sorted(scores)

    def test_check_keyword(self, corpus_file, capsys):
        """Documents already using a keyword are listed unless excluded."""
        cli.main(["check-keyword", corpus_file, "SITE VITRINE", "--exclude-id", "1"])
        out = capsys.readouterr().out
        assert '"site vitrine" is already used by:' in out
        assert "(posts/guide)" in out
        assert "(pages/services)" not in out

    def test_check_keyword_empty(self, corpus_file, capsys):
        """An empty keyword is an error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["check-keyword", corpus_file, " "])
        assert exc_info.value.code == 1
        assert "Missing keyword" in capsys.readouterr().err


class TestParser:
    """Tests for argument handling."""

    def test_no_command_prints_help(self, capsys):
        """Without a subcommand the usage is printed."""
        cli.main([])
        assert "usage:" in capsys.readouterr().out

    def test_locale_flag(self):
        """The request locale selects the analysis locale."""
        args = cli.build_parser().parse_args(["--locale", "en-US", "history", "1", "--collection", "pages"])
        assert cli._load_config(args).locale == "en"

    def test_config_file(self, tmp_path):
        """A site configuration file is loaded."""
        config_path = tmp_path / "seo.yaml"
        config_path.write_text("site_name: Nova\n", encoding='utf-8')
        args = cli.build_parser().parse_args(["--config", str(config_path), "keywords", "corpus.json"])
        assert cli._load_config(args).site_name == "Nova"
