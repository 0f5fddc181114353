# tests/test_text_extraction.py
"""Tests for rich-text extraction and string normalization."""

import pytest

from seo_engine.models import LinkRef
from seo_engine.text_extraction import (
    extract_all_internal_links,
    extract_external_urls,
    extract_headings,
    extract_images,
    extract_links,
    extract_lists,
    extract_payload_link,
    extract_plain_text,
    normalize_for_comparison,
    normalize_slug_key,
    normalize_to_slug,
    slugify_keyword,
)


def text(value):
    return {'type': 'text', 'text': value}


def paragraph(*children):
    return {'type': 'paragraph', 'children': [text(c) if isinstance(c, str) else c for c in children]}


def heading(tag, value):
    return {'type': 'heading', 'tag': tag, 'children': [text(value)]}


def link(url, label):
    return {'type': 'link', 'fields': {'url': url}, 'children': [text(label)]}


def tree(*nodes):
    return {'root': {'type': 'root', 'children': list(nodes)}}


class TestNormalization:
    """Tests for comparison and slug normalization."""

    def test_normalize_for_comparison(self):
        """Accents are stripped, case folded and whitespace collapsed."""
        assert normalize_for_comparison("  Réalité   Augmentée ") == "realite augmentee"

    def test_normalize_for_comparison_empty(self):
        """None and empty strings normalize to an empty string."""
        assert normalize_for_comparison(None) == ""
        assert normalize_for_comparison("") == ""

    def test_normalize_to_slug_strips_slashes(self):
        """Leading and trailing slashes are trimmed."""
        assert normalize_to_slug("/blog/mon-article/") == "blog/mon-article"

    def test_normalize_to_slug_root_is_home(self):
        """The empty path and the root map to home."""
        assert normalize_to_slug("") == "home"
        assert normalize_to_slug("/") == "home"

    def test_normalize_to_slug_external(self):
        """External, mailto, tel and fragment-only URLs are not internal slugs."""
        assert normalize_to_slug("https://x.com/a") is None
        assert normalize_to_slug("mailto:hello@example.com") is None
        assert normalize_to_slug("tel:+33100000000") is None
        assert normalize_to_slug("#section") is None

    def test_normalize_to_slug_drops_query_and_fragment(self):
        """Query strings and fragments do not change the target page."""
        assert normalize_to_slug("/services?ref=nav#top") == "services"

    def test_normalize_to_slug_strips_accents(self):
        """Accented slugs compare equal to their plain form."""
        assert normalize_to_slug("/créations") == "creations"
        assert normalize_slug_key("Créations/") == "creations"

    def test_slugify_keyword(self):
        """Keywords are slugified for URL comparison."""
        assert slugify_keyword("Next.js & React") == "nextjs-react"
        assert slugify_keyword("Création  de site") == "creation-de-site"


class TestTreeExtraction:
    """Tests for walking rich-text trees."""

    @pytest.fixture
    def document(self):
        return tree(
            heading('h1', "Guide complet"),
            paragraph("Premier paragraphe avec ", link("/contact", "un lien"), "."),
            heading('h2', "Section"),
            {'type': 'list', 'listType': 'number', 'children': [
                {'type': 'listitem', 'children': [text("un")]},
                {'type': 'listitem', 'children': [text("deux")]},
            ]},
            {'type': 'upload', 'value': {'alt': " Logo de l'agence ", 'filename': 'logo.png'}},
        )

    def test_extract_plain_text(self, document):
        """Text leaves are concatenated in document order."""
        plain = extract_plain_text(document)
        assert "Guide complet" in plain
        assert "un lien" in plain
        assert plain.index("Guide complet") < plain.index("Section")

    def test_extract_headings(self, document):
        """Headings keep their level and text."""
        headings = extract_headings(document)
        assert [(h.level, h.text) for h in headings] == [(1, "Guide complet"), (2, "Section")]

    def test_extract_links(self, document):
        """Links carry their URL and label."""
        links = extract_links(document)
        assert len(links) == 1
        assert links[0].url == "/contact"
        assert links[0].text == "un lien"

    def test_extract_lists(self, document):
        """Lists report their type and item count."""
        lists = extract_lists(document)
        assert len(lists) == 1
        assert lists[0].list_type == 'number'
        assert lists[0].items == 2

    def test_extract_images_trims_alt(self, document):
        """Upload nodes become images with a trimmed alt."""
        images = extract_images(document)
        assert len(images) == 1
        assert images[0].alt == "Logo de l'agence"
        assert images[0].filename == "logo.png"

    def test_malformed_nodes_are_ignored(self):
        """Non-dict nodes and unknown shapes contribute nothing."""
        broken = {'root': {'children': [None, 42, "text", {'type': 'text'}, paragraph("ok")]}}
        assert extract_plain_text(broken).strip() == "ok"
        assert extract_headings(broken) == []
        assert extract_links(None) == []

    def test_recursion_depth_is_bounded(self):
        """Very deep trees stop at the depth limit instead of raising."""
        node = text("deep")
        for _ in range(200):
            node = {'type': 'paragraph', 'children': [node]}
        assert extract_plain_text(node).strip() == ""


class TestPayloadLinks:
    """Tests for CMS link fields."""

    def test_custom_link(self):
        """Custom links use their URL."""
        resolved = extract_payload_link({'type': 'custom', 'url': '/devis', 'label': 'Devis'})
        assert resolved.url == '/devis'
        assert resolved.text == 'Devis'

    def test_populated_reference(self):
        """Populated references resolve to the referenced slug."""
        resolved = extract_payload_link({
            'type': 'reference',
            'reference': {'relationTo': 'pages', 'value': {'slug': 'services'}},
        })
        assert resolved.url == '/services'

    def test_unresolved_reference(self):
        """A reference holding only an id degrades to no link."""
        assert extract_payload_link({'type': 'reference', 'reference': {'value': 12}}) is None


class TestDocumentLinks:
    """Tests for links gathered across a raw document."""

    @pytest.fixture
    def raw_doc(self):
        return {
            'slug': 'accueil',
            'hero': {
                'richText': tree(paragraph(link("/services/", "Nos services"))),
                'links': [{'link': {'type': 'custom', 'url': '/contact', 'label': 'Contact'}}],
            },
            'layout': [
                {'blockType': 'content', 'columns': [
                    {'richText': tree(paragraph(link("https://example.org/doc", "doc externe")))},
                ]},
                {'blockType': 'services', 'services': [{'title': 'SEO', 'link': '/seo'}]},
                {'blockType': 'cta', 'links': [{'link': {'type': 'custom', 'url': '#form'}}]},
            ],
        }

    def test_internal_links(self, raw_doc):
        """Only internal links are kept, normalized to slugs."""
        links = extract_all_internal_links(raw_doc)
        assert links == [
            LinkRef(url='/services/', slug='services', text='Nos services'),
            LinkRef(url='/contact', slug='contact', text='Contact'),
            LinkRef(url='/seo', slug='seo', text='SEO'),
        ]

    def test_external_urls(self, raw_doc):
        """External URLs come from rich text only."""
        assert extract_external_urls(raw_doc) == ["https://example.org/doc"]

    def test_external_urls_skip_site_host(self, raw_doc):
        """Links to the site host are not external."""
        assert extract_external_urls(raw_doc, site_host="example.org") == []

    def test_non_dict_document(self):
        """Anything but a dict has no links."""
        assert extract_all_internal_links(None) == []
        assert extract_external_urls([]) == []
