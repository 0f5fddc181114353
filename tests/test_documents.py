# tests/test_documents.py
"""Tests for raw document adapters and corpus loading."""

import json

import pytest

from seo_engine.documents import (
    FetchedDoc,
    build_doc_record,
    build_seo_input,
    extract_doc_text,
    file_fetcher,
    load_corpus,
    load_corpus_file,
    read_corpus_file,
    read_redirects,
)


def rich_text(*paragraphs):
    return {'root': {'children': [
        {'type': 'paragraph', 'children': [{'type': 'text', 'text': p}]} for p in paragraphs
    ]}}


@pytest.fixture
def raw_page():
    return {
        'id': 12,
        'title': "Création de site",
        'slug': "creation-site",
        'focusKeyword': "création de site",
        'focusKeywords': [{'keyword': "site vitrine"}, "refonte", {'keyword': ""}, 3],
        'meta': {'title': "Création de site | Studio", 'description': "Votre site sur mesure.",
                 'canonicalUrl': "https://studio.fr/creation-site"},
        'hero': {'richText': rich_text("Un site qui vous ressemble.")},
        'layout': [
            {'blockType': 'content', 'columns': [{'richText': rich_text("Nous créons des sites.")}]},
            {'blockType': 'services', 'services': [{'title': "Refonte", 'description': "Modernisez."}]},
        ],
        'updatedAt': "2026-01-15T10:00:00.000Z",
        'isCornerstone': True,
    }


class TestBuildSeoInput:
    """Tests for build_seo_input."""

    def test_page_fields(self, raw_page):
        """Meta, hero and layout fields are flattened."""
        data = build_seo_input(raw_page, 'pages')
        assert data.meta_title == "Création de site | Studio"
        assert data.slug == "creation-site"
        assert data.focus_keyword == "création de site"
        assert data.focus_keywords == ("site vitrine", "refonte")
        assert len(data.blocks) == 2
        assert data.is_cornerstone
        assert not data.is_post
        assert data.hero_title == ""
        assert data.content is None
        assert data.canonical_url == "https://studio.fr/creation-site"
        assert data.robots_meta is None

    def test_post_fields(self, raw_page):
        """Posts keep their title as hero title and their content tree."""
        raw_page['content'] = rich_text("Article.")
        data = build_seo_input(raw_page, 'posts')
        assert data.is_post
        assert data.hero_title == "Création de site"
        assert data.content == raw_page['content']

    def test_malformed_document(self):
        """Wrong types degrade to empty values."""
        data = build_seo_input({'meta': "oops", 'hero': None, 'layout': {}, 'updatedAt': 5}, 'pages')
        assert data.meta_title == ""
        assert data.blocks == ()
        assert data.updated_at is None

    def test_wrong_scalar_types(self):
        """Non-string title, slug, keyword and meta fields read as empty strings."""
        raw = {'title': 7, 'slug': 3, 'focusKeyword': 42,
               'meta': {'title': 5, 'description': ['x']}}
        data = build_seo_input(raw, 'posts')
        assert data.hero_title == ""
        assert data.slug == ""
        assert data.focus_keyword == ""
        assert data.meta_title == ""
        assert data.meta_description == ""


class TestDocRecords:
    """Tests for corpus records."""

    def test_extract_doc_text(self, raw_page):
        """Titles, meta, hero, columns and services make up the text."""
        text = extract_doc_text(raw_page)
        for fragment in ("Création de site", "Votre site sur mesure.", "Un site qui vous ressemble.",
                         "Nous créons des sites.", "Modernisez."):
            assert fragment in text

    def test_build_doc_record(self, raw_page):
        """Records carry text, word count and keywords."""
        record = build_doc_record(raw_page, 'pages')
        assert record.id == 12
        assert record.key == "pages::12"
        assert record.word_count == len(record.full_text.split())
        assert record.focus_keywords == ["site vitrine", "refonte"]

    def test_global_record(self):
        """Globals use their slug as id and title when they have none."""
        record = build_doc_record({'slug': ''}, 'global:footer')
        assert record.id == "footer"
        assert record.title == "footer"
        assert record.collection == "global:footer"

    def test_record_with_wrong_scalar_types(self):
        """A numeric title or keyword does not leak into the record."""
        record = build_doc_record({'id': 5, 'title': 7, 'slug': 3, 'focusKeyword': 42}, 'pages')
        assert record.title == "(untitled)"
        assert record.slug == ""
        assert record.focus_keyword == ""


class TestCorpusLoading:
    """Tests for fetching documents."""

    def test_load_corpus(self):
        """Collections and globals are fetched in order; failures are skipped."""
        def fetch(kind, slug, limit):
            if slug == "broken":
                raise ConnectionError("down")
            if kind == "global":
                return {'slug': '', 'title': "Header"}
            return [{'id': 1, 'slug': f"{slug}-1"}, "not a document"]

        fetched = load_corpus(fetch, ["pages", "broken", "posts"], ["header"])
        assert [item.collection for item in fetched] == ["pages", "posts", "global:header"]

    def test_fetched_doc_collection(self):
        """Globals are prefixed."""
        assert FetchedDoc(doc={}, source_type="global", source_slug="nav").collection == "global:nav"
        assert FetchedDoc(doc={}, source_type="collection", source_slug="pages").collection == "pages"

    def test_file_fetcher_limit(self):
        """The page size caps collection queries."""
        fetch = file_fetcher({'collections': {'pages': [{'id': i} for i in range(5)]}})
        assert len(fetch("collection", "pages", 3)) == 3
        with pytest.raises(KeyError):
            fetch("global", "missing", 3)

    def test_corpus_file(self, tmp_path):
        """Corpus exports are read from JSON files."""
        path = tmp_path / "corpus.json"
        path.write_text(json.dumps({
            'collections': {'pages': [{'id': 1, 'slug': 'a'}]},
            'globals': {'footer': {'slug': ''}},
            'redirects': [{'from': '/old', 'to': '/a'}, {'to': '/nowhere'}],
        }), encoding='utf-8')

        fetched = load_corpus_file(str(path))
        assert [item.collection for item in fetched] == ["pages", "global:footer"]

        redirects = read_redirects(read_corpus_file(str(path)))
        assert [(r.from_path, r.to_path) for r in redirects] == [("/old", "/a")]

    def test_corpus_file_must_be_object(self, tmp_path):
        """A JSON array is rejected."""
        path = tmp_path / "corpus.json"
        path.write_text("[]", encoding='utf-8')
        with pytest.raises(ValueError):
            read_corpus_file(str(path))
