"""Build the derived analysis context from a SeoInput."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from seo_engine.config import SeoConfig
from seo_engine.locales import get_lexicon
from seo_engine.models import (
    AnalysisContext,
    ExtractedImage,
    ExtractedLink,
    Heading,
    PageType,
    SeoInput,
)
from seo_engine.lexical import count_words, detect_page_type, split_sentences
from seo_engine.text_extraction import (
    extract_block_links,
    extract_headings,
    extract_images,
    extract_links,
    extract_lists,
    extract_payload_link,
    extract_plain_text,
    media_image,
    normalize_for_comparison,
)

logger = logging.getLogger(__name__)


def _block_text(block: dict) -> list[str]:
    """Plain-text fragments of one layout block, in reading order."""
    parts = []
    for column in block.get('columns') or []:
        if isinstance(column, dict) and column.get('richText'):
            parts.append(extract_plain_text(column['richText']))
    if block.get('richText'):
        parts.append(extract_plain_text(block['richText']))
    if block.get('blockType') == 'services':
        for service in block.get('services') or []:
            if isinstance(service, dict):
                for key in ('title', 'description'):
                    if isinstance(service.get(key), str):
                        parts.append(service[key])
    if block.get('blockType') == 'testimonials':
        for testimonial in block.get('testimonials') or []:
            if isinstance(testimonial, dict) and isinstance(testimonial.get('quote'), str):
                parts.append(testimonial['quote'])
    return parts


def _block_headings(block: dict) -> list[Heading]:
    headings = []
    for column in block.get('columns') or []:
        if isinstance(column, dict) and column.get('richText'):
            headings.extend(extract_headings(column['richText']))
    if block.get('richText'):
        headings.extend(extract_headings(block['richText']))
    return headings


def _block_images(block: dict) -> list[ExtractedImage]:
    images = []
    if block.get('blockType') in ('mediaBlock', 'media') and block.get('media'):
        images.append(media_image(block['media']))
    for column in block.get('columns') or []:
        if isinstance(column, dict) and column.get('richText'):
            images.extend(extract_images(column['richText']))
    return images


def _standalone_image(media: Any) -> Optional[ExtractedImage]:
    """Hero or meta image; counted only when it points at a file."""
    if isinstance(media, dict) and (media.get('url') or media.get('filename')):
        return media_image(media)
    return None


def build_context(data: SeoInput, config: SeoConfig,
                  now: Optional[datetime] = None) -> AnalysisContext:
    """Extract text, headings, links, images and lists once per analysis.

    Args:
        data: Document under analysis
        config: Site configuration
        now: Reference time for freshness checks; taken once when omitted

    Returns:
        AnalysisContext shared by every rule group
    """
    locale = get_lexicon(config.locale).code
    text_parts: list[str] = []
    headings: list[Heading] = []
    links: list[ExtractedLink] = []
    images: list[ExtractedImage] = []
    lists = []

    if data.hero_rich_text:
        text_parts.append(extract_plain_text(data.hero_rich_text))
        links.extend(extract_links(data.hero_rich_text))
        headings.extend(extract_headings(data.hero_rich_text))
        lists.extend(extract_lists(data.hero_rich_text))

    for item in data.hero_links or ():
        if isinstance(item, dict):
            resolved = extract_payload_link(item.get('link'))
            if resolved:
                links.append(resolved)

    for block in data.blocks or ():
        if not isinstance(block, dict):
            logger.debug(f"Skipping non-object block {block!r}")
            continue
        text_parts.extend(_block_text(block))
        headings.extend(_block_headings(block))
        links.extend(extract_block_links(block))
        images.extend(_block_images(block))
        if block.get('richText'):
            lists.extend(extract_lists(block['richText']))
        for column in block.get('columns') or []:
            if isinstance(column, dict) and column.get('richText'):
                lists.extend(extract_lists(column['richText']))

    if data.content:
        text_parts.append(extract_plain_text(data.content))
        links.extend(extract_links(data.content))
        headings.extend(extract_headings(data.content))
        images.extend(extract_images(data.content))
        lists.extend(extract_lists(data.content))

    # Post titles render as the page h1
    if data.is_post and data.hero_title and not any(h.level == 1 for h in headings):
        headings.insert(0, Heading(level=1, text=data.hero_title))
        text_parts.insert(0, data.hero_title)

    for media in (data.hero_media, data.meta_image):
        image = _standalone_image(media)
        if image is not None:
            images.append(image)

    full_text = ' '.join(part for part in text_parts if part)

    primary = normalize_for_comparison(data.focus_keyword)
    secondary: list[str] = []
    for keyword in data.focus_keywords or ():
        normalized = normalize_for_comparison(keyword) if isinstance(keyword, str) else ""
        if normalized and normalized != primary and normalized not in secondary:
            secondary.append(normalized)

    if data.is_post:
        page_type = PageType.BLOG
    else:
        page_type = detect_page_type(data.slug, config.local_seo_slugs)

    return AnalysisContext(
        input=data,
        locale=locale,
        full_text=full_text,
        normalized_text=normalize_for_comparison(full_text),
        word_count=count_words(full_text),
        sentences=split_sentences(full_text, locale),
        headings=headings,
        links=links,
        images=images,
        lists=lists,
        page_type=page_type,
        normalized_keyword=primary,
        secondary_normalized_keywords=secondary,
        now=now or datetime.now(timezone.utc),
        thresholds=config.thresholds,
        site_name=config.site_name,
        site_url=config.site_url,
    )
