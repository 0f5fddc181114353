# tests/test_rules.py
"""Tests for the individual rule groups."""

import time
from datetime import datetime, timedelta, timezone

import pytest

from seo_engine.config import SeoConfig
from seo_engine.context import build_context
from seo_engine.models import CheckCategory, CheckStatus, SeoInput
from seo_engine.rules.content import check_content
from seo_engine.rules.cornerstone import check_cornerstone
from seo_engine.rules.ecommerce import check_ecommerce
from seo_engine.rules.freshness import check_freshness, days_since, parse_date
from seo_engine.rules.headings import check_headings
from seo_engine.rules.images import check_images
from seo_engine.rules.linking import check_linking
from seo_engine.rules.meta_description import check_meta_description, has_call_to_action
from seo_engine.rules.quality import check_quality
from seo_engine.rules.schema import check_schema
from seo_engine.rules.secondary_keywords import check_secondary_keywords
from seo_engine.rules.social import check_social
from seo_engine.rules.technical import check_technical
from seo_engine.rules.title import check_title
from seo_engine.rules.url import check_url

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


def text(value):
    return {'type': 'text', 'text': value}


def paragraph(*children):
    return {'type': 'paragraph', 'children': [text(c) if isinstance(c, str) else c for c in children]}


def heading(tag, value):
    return {'type': 'heading', 'tag': tag, 'children': [text(value)]}


def link(url, label):
    return {'type': 'link', 'fields': {'url': url}, 'children': [text(label)]}


def image(alt, filename="photo.jpg"):
    return {'type': 'upload', 'value': {'alt': alt, 'filename': filename}}


def tree(*nodes):
    return {'root': {'type': 'root', 'children': list(nodes)}}


def words(count, prefix="mot"):
    return ' '.join(f"{prefix}{i}" for i in range(count))


def make_context(config=None, now=NOW, **fields):
    return build_context(SeoInput(**fields), config or SeoConfig(), now=now)


def by_id(checks, check_id):
    matches = [c for c in checks if c.id == check_id]
    assert matches, f"no finding {check_id}"
    return matches[0]


def ids(checks):
    return {c.id for c in checks}


class TestTitleRules:
    """Tests for the title group."""

    def test_missing_title_is_a_single_failure(self):
        """Without a title only title-missing is reported."""
        checks = check_title(make_context(meta_title="   "))
        assert [c.id for c in checks] == ['title-missing']
        assert checks[0].status == CheckStatus.FAIL
        assert checks[0].category == CheckCategory.CRITICAL

    @pytest.mark.parametrize("length,expected", [
        (29, CheckStatus.WARNING),
        (30, CheckStatus.PASS),
        (60, CheckStatus.PASS),
        (61, CheckStatus.WARNING),
    ])
    def test_title_length_boundaries(self, length, expected):
        """Length bounds are inclusive."""
        checks = check_title(make_context(meta_title="a" * length))
        assert by_id(checks, 'title-length').status == expected

    def test_keyword_present_and_leading(self):
        """A leading keyword passes both keyword checks."""
        checks = check_title(make_context(
            meta_title="Chaussures rouges : le guide complet",
            focus_keyword="Chaussures rouges",
        ))
        assert by_id(checks, 'title-keyword').status == CheckStatus.PASS
        assert by_id(checks, 'title-keyword-position').status == CheckStatus.PASS

    def test_keyword_missing_fails(self):
        """A missing keyword fails and skips the position check."""
        checks = check_title(make_context(
            meta_title="Le guide complet de la mode en 2026",
            focus_keyword="chaussures rouges",
        ))
        assert by_id(checks, 'title-keyword').status == CheckStatus.FAIL
        assert 'title-keyword-position' not in ids(checks)

    def test_keyword_late_in_title(self):
        """A keyword in the second half of the title is a warning."""
        checks = check_title(make_context(
            meta_title="Tout ce qu'il faut savoir avant d'acheter des chaussures rouges",
            focus_keyword="chaussures rouges",
        ))
        assert by_id(checks, 'title-keyword-position').status == CheckStatus.WARNING

    def test_no_keyword_skips_keyword_checks(self):
        """Keyword checks need a focus keyword."""
        checks = check_title(make_context(meta_title="Un titre assez long pour passer la limite"))
        assert 'title-keyword' not in ids(checks)

    def test_repeated_segment(self):
        """A separator-delimited segment used twice is flagged."""
        checks = check_title(make_context(meta_title="Studio Nova | Création web | Studio Nova"))
        assert by_id(checks, 'title-duplicate-brand').status == CheckStatus.WARNING

    def test_repeated_site_name(self):
        """The configured site name counts as the brand."""
        config = SeoConfig(site_name="Nova")
        checks = check_title(make_context(config=config, meta_title="Nova crée votre site, Nova vous accompagne"))
        assert by_id(checks, 'title-duplicate-brand').status == CheckStatus.WARNING

    def test_bonus_checks(self):
        """Numbers, questions and power words earn bonus passes."""
        checks = check_title(make_context(meta_title="Comment réussir son site en 7 étapes : le guide complet ?"))
        assert by_id(checks, 'title-has-number').status == CheckStatus.PASS
        assert by_id(checks, 'title-is-question').status == CheckStatus.PASS
        assert by_id(checks, 'title-power-words').status == CheckStatus.PASS
        assert by_id(checks, 'title-has-number').category == CheckCategory.BONUS


class TestMetaDescriptionRules:
    """Tests for the meta description group."""

    def test_missing_description(self):
        """An empty description is a single critical failure."""
        checks = check_meta_description(make_context(meta_description=""))
        assert [c.id for c in checks] == ['meta-desc-missing']
        assert checks[0].status == CheckStatus.FAIL

    @pytest.mark.parametrize("length,expected", [
        (119, CheckStatus.WARNING),
        (120, CheckStatus.PASS),
        (160, CheckStatus.PASS),
        (161, CheckStatus.WARNING),
    ])
    def test_length_boundaries(self, length, expected):
        """Description length bounds are inclusive."""
        checks = check_meta_description(make_context(meta_description="a" * length))
        assert by_id(checks, 'meta-desc-length').status == expected

    def test_keyword_in_description(self):
        """The keyword is matched after normalization."""
        checks = check_meta_description(make_context(
            meta_description="Découvrez nos CHAUSSURES rouges fabriquées en France.",
            focus_keyword="chaussures rouges",
        ))
        assert by_id(checks, 'meta-desc-keyword').status == CheckStatus.PASS

    def test_call_to_action(self):
        """Action verbs, numbered promises and questions count as calls to action."""
        assert has_call_to_action("Découvrez notre offre.", 'fr')
        assert has_call_to_action("5 conseils pour bien choisir.", 'fr')
        assert has_call_to_action("Comment choisir un hébergeur ?", 'fr')
        assert has_call_to_action("Get a free quote today.", 'en')
        assert not has_call_to_action("Une boutique de chaussures.", 'fr')


class TestUrlRules:
    """Tests for the URL group."""

    def test_missing_slug(self):
        """A page without a slug fails once."""
        checks = check_url(make_context(slug=""))
        assert [c.id for c in checks] == ['slug-missing']

    @pytest.mark.parametrize("length,expected", [
        (75, CheckStatus.PASS),
        (76, CheckStatus.FAIL),
    ])
    def test_slug_length(self, length, expected):
        """Slugs over the maximum length fail."""
        checks = check_url(make_context(slug="a" * length))
        assert by_id(checks, 'slug-length').status == expected

    def test_slug_format(self):
        """Uppercase letters and underscores are flagged."""
        assert by_id(check_url(make_context(slug="Mon_Article")), 'slug-format').status == CheckStatus.WARNING
        assert by_id(check_url(make_context(slug="mon-article")), 'slug-format').status == CheckStatus.PASS

    def test_keyword_in_slug(self):
        """The slugified keyword must appear in the slug."""
        ok = check_url(make_context(slug="chaussures-rouges-cuir", focus_keyword="Chaussures rouges"))
        missing = check_url(make_context(slug="bottes-noires", focus_keyword="Chaussures rouges"))
        assert by_id(ok, 'slug-keyword').status == CheckStatus.PASS
        assert by_id(missing, 'slug-keyword').status == CheckStatus.WARNING

    def test_utility_slug_needs_no_keyword(self):
        """Utility pages pass the keyword check regardless."""
        checks = check_url(make_context(slug="contact", focus_keyword="agence web"))
        finding = by_id(checks, 'slug-keyword')
        assert finding.status == CheckStatus.PASS
        assert finding.category == CheckCategory.BONUS

    def test_stop_words(self):
        """Stop words are flagged unless part of a fixed expression."""
        flagged = check_url(make_context(slug="guide-de-la-chaussure"))
        compound = check_url(make_context(slug="creation-sur-mesure"))
        assert by_id(flagged, 'slug-stopwords').status == CheckStatus.WARNING
        assert "de" in by_id(flagged, 'slug-stopwords').message
        assert by_id(compound, 'slug-stopwords').status == CheckStatus.PASS


class TestHeadingRules:
    """Tests for the headings group."""

    def test_missing_h1(self):
        """No H1 is a failure."""
        checks = check_headings(make_context(content=tree(heading('h2', "Section"), paragraph("texte"))))
        assert by_id(checks, 'h1-missing').status == CheckStatus.FAIL

    def test_multiple_h1(self):
        """More than one H1 is a warning."""
        checks = check_headings(make_context(content=tree(heading('h1', "Un"), heading('h1', "Deux"))))
        assert by_id(checks, 'h1-unique').status == CheckStatus.WARNING

    def test_skipped_level(self):
        """H2 followed by H4 breaks the hierarchy."""
        checks = check_headings(make_context(content=tree(
            heading('h1', "Titre"), heading('h2', "Section"), heading('h4', "Détail"),
        )))
        assert by_id(checks, 'heading-hierarchy').status == CheckStatus.WARNING

    def test_keyword_in_h1_and_h2(self):
        """Keyword checks cover the H1 and the H2s."""
        checks = check_headings(make_context(
            focus_keyword="site vitrine",
            content=tree(heading('h1', "Créer un site vitrine"), heading('h2', "Pourquoi un site vitrine")),
        ))
        assert by_id(checks, 'h1-keyword').status == CheckStatus.PASS
        assert by_id(checks, 'h2-keyword').status == CheckStatus.PASS

    def test_h1_identical_to_title(self):
        """An H1 equal to the meta title is a light warning."""
        checks = check_headings(make_context(
            meta_title="Créer un site vitrine",
            content=tree(heading('h1', "Créer un  site vitrine")),
        ))
        finding = by_id(checks, 'h1-title-different')
        assert finding.status == CheckStatus.WARNING
        assert finding.weight == 1

    def test_post_hero_title_counts_as_h1(self):
        """Posts render their hero title as the H1."""
        checks = check_headings(make_context(is_post=True, hero_title="Mon article", content=tree(paragraph("x"))))
        assert by_id(checks, 'h1-unique').status == CheckStatus.PASS


class TestContentRules:
    """Tests for the content group."""

    def test_thin_content_fails(self):
        """Fewer words than the thin threshold fail."""
        checks = check_content(make_context(slug="page", content=tree(paragraph(words(40)))))
        assert by_id(checks, 'content-wordcount').status == CheckStatus.FAIL
        assert by_id(checks, 'content-thin').status == CheckStatus.WARNING

    def test_page_type_minimum(self):
        """Legal pages need fewer words than generic pages."""
        body = tree(paragraph(words(250)))
        legal = check_content(make_context(slug="mentions-legales", content=body))
        generic = check_content(make_context(slug="page", content=body))
        assert by_id(legal, 'content-wordcount').status == CheckStatus.PASS
        assert by_id(generic, 'content-wordcount').status == CheckStatus.WARNING

    def test_placeholder_fails(self):
        """Lorem ipsum is a critical failure."""
        checks = check_content(make_context(content=tree(paragraph("Lorem ipsum dolor sit amet"))))
        finding = by_id(checks, 'content-no-placeholder')
        assert finding.status == CheckStatus.FAIL
        assert finding.category == CheckCategory.CRITICAL

    def test_keyword_in_introduction(self):
        """The keyword must appear in the first sentences."""
        checks = check_content(make_context(
            focus_keyword="zorglub",
            content=tree(paragraph(f"Le zorglub est partout. {words(20)}")),
        ))
        assert by_id(checks, 'content-keyword-intro').status == CheckStatus.PASS

    def test_keyword_never_used(self):
        """A keyword absent from the body fails the density check."""
        checks = check_content(make_context(focus_keyword="zorglub", content=tree(paragraph(words(120)))))
        assert by_id(checks, 'content-keyword-density').status == CheckStatus.FAIL

    def test_long_content_without_lists(self):
        """Long content without a list gets a bonus warning."""
        checks = check_content(make_context(content=tree(paragraph(words(600)))))
        assert by_id(checks, 'content-has-lists').status == CheckStatus.WARNING


class TestImageAndLinkRules:
    """Tests for the images and linking groups."""

    def test_no_image_on_generic_page(self):
        """Generic pages should have at least one image."""
        checks = check_images(make_context(slug="page", content=tree(paragraph("texte"))))
        assert by_id(checks, 'images-present').status == CheckStatus.WARNING

    def test_images_optional_on_contact_page(self):
        """Contact pages pass without images."""
        checks = check_images(make_context(slug="contact", content=tree(paragraph("texte"))))
        assert by_id(checks, 'images-present').status == CheckStatus.PASS

    def test_post_without_image(self):
        """Articles without an image fail the quantity check."""
        checks = check_images(make_context(is_post=True, slug="mon-article", content=tree(paragraph("x"))))
        assert by_id(checks, 'images-quantity').status == CheckStatus.FAIL

    def test_alt_coverage(self):
        """Coverage below the ratio fails; full coverage passes."""
        partial_alt = check_images(make_context(slug="page", content=tree(image("Un chat"), image(""))))
        full_alt = check_images(make_context(slug="page", content=tree(image("Un chat"), image("Un chien"))))
        assert by_id(partial_alt, 'images-alt').status == CheckStatus.FAIL
        assert by_id(full_alt, 'images-alt').status == CheckStatus.PASS

    def test_links(self):
        """Internal and external links pass; generic anchors warn."""
        checks = check_linking(make_context(slug="page", content=tree(paragraph(
            link("/services", "nos services"), link("https://example.org", "ici"),
        ))))
        assert by_id(checks, 'linking-internal').status == CheckStatus.PASS
        assert by_id(checks, 'linking-external').status == CheckStatus.PASS
        assert by_id(checks, 'linking-generic-anchors').status == CheckStatus.WARNING

    def test_mailto_tel_and_anchors_are_not_internal(self):
        """Only links to pages of the site count as internal."""
        body = tree(paragraph(
            link("mailto:a@b.fr", "écrire"), link("tel:+33100", "appeler"), link("#top", "haut"),
        ))
        checks = check_linking(make_context(slug="page", content=body))
        assert by_id(checks, 'linking-internal').status == CheckStatus.WARNING

        pillar = check_cornerstone(make_context(is_cornerstone=True, content=tree(paragraph(
            *(link(f"/page-{i}", f"page {i}") for i in range(4)), link("mailto:a@b.fr", "écrire"),
        ))))
        assert by_id(pillar, 'cornerstone-internal-links').message.startswith("4 internal link(s)")

    def test_no_links(self):
        """A page without links warns and skips anchor checks."""
        checks = check_linking(make_context(slug="page", content=tree(paragraph("texte"))))
        assert by_id(checks, 'linking-internal').status == CheckStatus.WARNING
        assert 'linking-generic-anchors' not in ids(checks)


class TestTechnicalRules:
    """Tests for canonical and robots checks."""

    def test_fields_absent(self):
        """Nothing is reported when the CMS has no such fields."""
        assert check_technical(make_context()) == []

    @pytest.mark.parametrize("canonical,expected_id", [
        ("", 'canonical-missing'),
        ("/page", 'canonical-invalid'),
        ("https://other.com/page", 'canonical-external'),
        ("https://example.com/page", 'canonical-ok'),
    ])
    def test_canonical(self, canonical, expected_id):
        """Canonical URLs must be absolute and on the site."""
        config = SeoConfig(site_url="https://example.com")
        checks = check_technical(make_context(config=config, canonical_url=canonical))
        assert [c.id for c in checks] == [expected_id]

    def test_noindex_on_generic_page_fails(self):
        """noindex on a regular page is a critical failure."""
        checks = check_technical(make_context(slug="services/seo", robots_meta="noindex"))
        finding = by_id(checks, 'robots-noindex')
        assert finding.status == CheckStatus.FAIL
        assert finding.category == CheckCategory.CRITICAL

    def test_noindex_on_legal_page_warns(self):
        """noindex is acceptable on legal pages."""
        checks = check_technical(make_context(slug="mentions-legales", robots_meta="noindex"))
        assert by_id(checks, 'robots-noindex').status == CheckStatus.WARNING

    def test_robots_ok(self):
        """index, follow passes."""
        checks = check_technical(make_context(slug="page", robots_meta="index, follow"))
        assert [c.id for c in checks] == ['robots-ok']

    def test_nofollow(self):
        """nofollow warns alongside noindex."""
        checks = check_technical(make_context(slug="page", robots_meta="noindex, nofollow"))
        assert ids(checks) == {'robots-noindex', 'robots-nofollow'}


class TestFreshnessRules:
    """Tests for the freshness group; ages are measured from a fixed now."""

    def updated(self, days):
        return (NOW - timedelta(days=days)).isoformat()

    @pytest.mark.parametrize("days,expected", [
        (10, CheckStatus.PASS),
        (180, CheckStatus.PASS),
        (181, CheckStatus.WARNING),
        (365, CheckStatus.WARNING),
        (366, CheckStatus.FAIL),
    ])
    def test_age(self, days, expected):
        """Age thresholds are 180 days to warn and 365 to fail."""
        checks = check_freshness(make_context(slug="page", updated_at=self.updated(days),
                                              content=tree(paragraph(words(600)))))
        assert by_id(checks, 'freshness-age').status == expected

    def test_evergreen_page(self):
        """Evergreen pages only warn after two years."""
        recent = check_freshness(make_context(slug="contact", updated_at=self.updated(400)))
        stale = check_freshness(make_context(slug="contact", updated_at=self.updated(800)))
        assert by_id(recent, 'freshness-age').status == CheckStatus.PASS
        assert by_id(stale, 'freshness-age').status == CheckStatus.WARNING
        assert 'freshness-thin-aging' not in ids(stale)

    def test_thin_and_aging(self):
        """Short content that has not been updated for months fails."""
        checks = check_freshness(make_context(slug="page", updated_at=self.updated(200),
                                              content=tree(paragraph(words(50)))))
        assert by_id(checks, 'freshness-thin-aging').status == CheckStatus.FAIL

    def test_unknown_date(self):
        """Without a date neither the age nor thin-aging check runs."""
        checks = check_freshness(make_context(slug="page", content=tree(paragraph(words(50)))))
        assert 'freshness-age' not in ids(checks)
        assert 'freshness-thin-aging' not in ids(checks)

    def test_year_references(self):
        """Old years without a recent one warn; the current year passes."""
        old = check_freshness(make_context(content=tree(paragraph("Les tendances de 2019 sont là."))))
        current = check_freshness(make_context(content=tree(paragraph("Les tendances de 2026 sont là."))))
        assert by_id(old, 'freshness-year-ref').status == CheckStatus.WARNING
        assert by_id(current, 'freshness-year-ref').status == CheckStatus.PASS

    def test_review_date(self):
        """Reviews older than the review threshold warn."""
        checks = check_freshness(make_context(content_last_reviewed=self.updated(200)))
        assert by_id(checks, 'freshness-reviewed').status == CheckStatus.WARNING

    def test_date_parsing(self):
        """ISO dates with Z parse; naive dates are taken as UTC; garbage is None."""
        assert parse_date("2026-05-01T00:00:00Z") == datetime(2026, 5, 1, tzinfo=timezone.utc)
        assert days_since("2026-05-31T12:00:00", NOW) == 1
        assert parse_date("yesterday") is None


class TestQualityRules:
    """Tests for the quality group."""

    def test_original_content(self):
        """Distinct sentences pass."""
        checks = check_quality(make_context(content=tree(paragraph(f"{words(250)}."))))
        assert by_id(checks, 'quality-no-duplicate').status == CheckStatus.PASS
        assert by_id(checks, 'quality-substantial').status == CheckStatus.PASS

    def test_repeated_sentence(self):
        """A sentence written twice is a repeated block."""
        sentence = "Nous livrons votre projet clé en main en quatre semaines."
        checks = check_quality(make_context(content=tree(
            paragraph(sentence), paragraph(words(100)), paragraph(sentence),
        )))
        assert by_id(checks, 'quality-no-duplicate').status == CheckStatus.FAIL

    def test_filler_text(self):
        """Template text fails."""
        checks = check_quality(make_context(content=tree(paragraph("Lorem ipsum dolor sit amet."))))
        assert by_id(checks, 'quality-no-duplicate').status == CheckStatus.FAIL

    def test_long_document_is_fast(self):
        """Long articles are checked in well under a second."""
        sentence = "Un paragraphe copié deux fois dans un long article."
        body = tree(paragraph(words(3000)), paragraph(sentence), paragraph(words(3000, "terme")),
                    paragraph(sentence))
        ctx = make_context(is_post=True, content=body)

        started = time.perf_counter()
        checks = check_quality(ctx)
        assert time.perf_counter() - started < 1.0
        assert by_id(checks, 'quality-no-duplicate').status == CheckStatus.FAIL


class TestOtherRules:
    """Tests for the smaller groups."""

    def test_ecommerce_complete_product(self):
        """A described, priced, illustrated product passes."""
        body = tree(
            paragraph(f"Prix : 49 € seulement. En stock. Lisez les avis clients. {words(100)}"),
            image("Chaussure vue de face"), image("Chaussure vue de dos"),
        )
        checks = check_ecommerce(make_context(
            is_product=True, meta_title="Chaussure Nova en cuir", focus_keyword="chaussure nova",
            meta_description="La chaussure Nova à partir de 49 €", content=body,
        ))
        for check_id in ('product-price-mentioned', 'product-short-description', 'product-has-images',
                         'product-title-includes-brand', 'product-meta-includes-price',
                         'product-review-readiness', 'product-availability'):
            assert by_id(checks, check_id).status == CheckStatus.PASS

    def test_ecommerce_without_images(self):
        """A product without photos fails the critical image check."""
        checks = check_ecommerce(make_context(is_product=True, content=tree(paragraph("x"))))
        assert by_id(checks, 'product-has-images').status == CheckStatus.FAIL
        assert by_id(checks, 'product-short-description').status == CheckStatus.FAIL

    def test_cornerstone_only_when_flagged(self):
        """Cornerstone checks are skipped for regular pages."""
        assert check_cornerstone(make_context()) == []
        checks = check_cornerstone(make_context(is_cornerstone=True))
        assert by_id(checks, 'cornerstone-focus-keyword').status == CheckStatus.FAIL
        assert by_id(checks, 'cornerstone-meta-description').weight == 5

    def test_secondary_keywords(self):
        """Each secondary keyword gets its own numbered checks."""
        checks = check_secondary_keywords(make_context(
            focus_keyword="site vitrine",
            focus_keywords=("site vitrine", "Site e-commerce", "refonte"),
            meta_title="Site vitrine et site e-commerce",
            content=tree(heading('h2', "La refonte"), paragraph("Une refonte réussie.")),
        ))
        assert by_id(checks, 'secondary-kw-title-0').status == CheckStatus.PASS
        assert by_id(checks, 'secondary-kw-title-1').status == CheckStatus.WARNING
        assert by_id(checks, 'secondary-kw-content-1').status == CheckStatus.PASS
        assert by_id(checks, 'secondary-kw-heading-1').status == CheckStatus.PASS
        assert 'secondary-kw-title-2' not in ids(checks)

    def test_social_and_schema(self):
        """Missing preview data is reported."""
        ctx = make_context(meta_title="Titre", meta_description="")
        assert by_id(check_social(ctx), 'social-og-image').status == CheckStatus.WARNING
        schema = by_id(check_schema(ctx), 'schema-readiness')
        assert schema.status == CheckStatus.WARNING
        assert "description" in schema.message
