# src/seo_engine/text_extraction.py
"""Rich-text tree extraction and string normalization.

Documents arrive as editor JSON trees: a ``root`` wrapper, containers with
``children`` and ``text`` leaves. Malformed or unknown nodes never raise;
they contribute nothing, or only their children.
"""

import logging
import re
import unicodedata
from typing import Any, Iterable, Optional
from urllib.parse import urlparse

from seo_engine.constants import HEADING_LEVELS, HOME_SLUG, MAX_RECURSION_DEPTH
from seo_engine.models import ExtractedImage, ExtractedLink, Heading, LinkRef, ListInfo

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'\s+')
_NON_SLUG_CHARS = re.compile(r'[^a-z0-9\s-]')
_HYPHEN_RUNS = re.compile(r'-+')


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


# =============================================================================
# Normalization
# =============================================================================

def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize('NFD', text)
    return ''.join(c for c in decomposed if not unicodedata.combining(c))


def normalize_for_comparison(text: Optional[str]) -> str:
    """Lowercase, strip diacritics and collapse whitespace.

    "Réalité  augmentée " -> "realite augmentee"
    """
    if not text:
        return ""
    return _WHITESPACE.sub(' ', strip_accents(text.lower())).strip()


def slugify_keyword(keyword: str) -> str:
    """Slugify a keyword for URL comparison.

    "Next.js & React" -> "nextjs-react"
    """
    slug = _NON_SLUG_CHARS.sub('', normalize_for_comparison(keyword))
    slug = _WHITESPACE.sub('-', slug)
    return _HYPHEN_RUNS.sub('-', slug)


def normalize_slug_key(slug: Optional[str]) -> str:
    """Comparable form of a document slug (accents stripped, no outer slashes)."""
    if not slug:
        return ""
    return strip_accents(slug.strip().strip('/').lower())


def normalize_to_slug(url: Optional[str]) -> Optional[str]:
    """Map a link URL to a comparable internal slug.

    Returns None for external, mailto, tel and anchor-only URLs. The
    site root maps to "home".

    Examples:
        "/blog/mon-article/" -> "blog/mon-article"
        "" -> "home"
        "https://x.com/a" -> None
    """
    if url is None:
        return None
    url = url.strip()
    if not url:
        return HOME_SLUG
    if url.startswith(('#', 'http://', 'https://', 'mailto:', 'tel:', '//')):
        return None

    cleaned = url.split('#')[0].split('?')[0].strip('/')
    if not cleaned:
        return HOME_SLUG
    return strip_accents(cleaned.lower())


def is_internal_url(url: str) -> bool:
    url = url.strip()
    if url.startswith('/'):
        return True
    return (
        bool(url)
        and url != '#'
        and not url.startswith(('http', 'mailto:', 'tel:'))
    )


# =============================================================================
# Tree walking
# =============================================================================

def _children(node: dict) -> list:
    children = node.get('children')
    return children if isinstance(children, list) else []


def _descend(node: dict) -> Iterable[Any]:
    """Children of a node, with a ``root`` wrapper treated as a child."""
    yield from _children(node)
    root = node.get('root')
    if isinstance(root, dict):
        yield root


def extract_plain_text(node: Any, max_depth: int = MAX_RECURSION_DEPTH) -> str:
    """Concatenate the text leaves of a tree, separated by single spaces."""
    return _extract_text(node, 0, max_depth)


def _extract_text(node: Any, depth: int, max_depth: int) -> str:
    if depth >= max_depth or not isinstance(node, dict):
        return ""

    if node.get('type') == 'text' and isinstance(node.get('text'), str):
        return node['text']

    children = node.get('children')
    if isinstance(children, list):
        return ' '.join(_extract_text(child, depth + 1, max_depth) for child in children)

    root = node.get('root')
    if isinstance(root, dict):
        return _extract_text(root, depth + 1, max_depth)

    return ""


def extract_headings(node: Any, max_depth: int = MAX_RECURSION_DEPTH) -> list[Heading]:
    """Headings in document order."""
    headings: list[Heading] = []
    _collect_headings(node, 0, max_depth, headings)
    return headings


def _collect_headings(node: Any, depth: int, max_depth: int, out: list) -> None:
    if depth >= max_depth or not isinstance(node, dict):
        return
    if node.get('type') == 'heading' and isinstance(node.get('tag'), str):
        level = HEADING_LEVELS.get(node['tag'].lower())
        if level:
            out.append(Heading(level=level, text=_extract_text(node, 0, max_depth - depth)))
    for child in _descend(node):
        _collect_headings(child, depth + 1, max_depth, out)


def extract_links(node: Any, max_depth: int = MAX_RECURSION_DEPTH) -> list[ExtractedLink]:
    """Link and autolink nodes with a URL, with their label text."""
    links: list[ExtractedLink] = []
    _collect_links(node, 0, max_depth, links)
    return links


def _collect_links(node: Any, depth: int, max_depth: int, out: list) -> None:
    if depth >= max_depth or not isinstance(node, dict):
        return
    if node.get('type') in ('link', 'autolink'):
        fields = node.get('fields') if isinstance(node.get('fields'), dict) else {}
        url = fields.get('url') or node.get('url') or ""
        if isinstance(url, str) and url:
            out.append(ExtractedLink(url=url, text=_extract_text(node, 0, max_depth - depth)))
    for child in _descend(node):
        _collect_links(child, depth + 1, max_depth, out)


def extract_images(node: Any, max_depth: int = MAX_RECURSION_DEPTH) -> list[ExtractedImage]:
    """Upload nodes; alt is empty when missing or blank."""
    images: list[ExtractedImage] = []
    _collect_images(node, 0, max_depth, images)
    return images


def _collect_images(node: Any, depth: int, max_depth: int, out: list) -> None:
    if depth >= max_depth or not isinstance(node, dict):
        return
    if node.get('type') == 'upload':
        out.append(media_image(node.get('value')))
    for child in _descend(node):
        _collect_images(child, depth + 1, max_depth, out)


def media_image(media: Any) -> ExtractedImage:
    """Image record for a media document (or a bare id when unpopulated)."""
    if not isinstance(media, dict):
        return ExtractedImage(alt="")
    alt = media.get('alt')
    filename = media.get('filename') or media.get('url') or ""
    return ExtractedImage(
        alt=alt.strip() if isinstance(alt, str) else "",
        filename=filename if isinstance(filename, str) else "",
    )


def extract_lists(node: Any, max_depth: int = MAX_RECURSION_DEPTH) -> list[ListInfo]:
    lists: list[ListInfo] = []
    _collect_lists(node, 0, max_depth, lists)
    return lists


def _collect_lists(node: Any, depth: int, max_depth: int, out: list) -> None:
    if depth >= max_depth or not isinstance(node, dict):
        return
    if node.get('type') == 'list':
        list_type = 'number' if node.get('listType') == 'number' else 'bullet'
        out.append(ListInfo(list_type=list_type, items=len(_children(node))))
    for child in _descend(node):
        _collect_lists(child, depth + 1, max_depth, out)


def top_level_nodes(node: Any) -> list:
    """Direct children of the tree root (paragraphs, headings, lists...)."""
    if not isinstance(node, dict):
        return []
    root = node.get('root') if isinstance(node.get('root'), dict) else node
    return [child for child in _children(root) if isinstance(child, dict)]


# =============================================================================
# CMS link fields
# =============================================================================

def extract_payload_link(link: Any) -> Optional[ExtractedLink]:
    """Resolve a CMS link field to a URL and label.

    ``custom`` links use their url; ``reference`` links resolve to
    ``/<slug>`` when the referenced document is populated. Unresolved
    references give None.
    """
    if not isinstance(link, dict):
        return None

    label = link.get('label') if isinstance(link.get('label'), str) else ""

    if link.get('type') == 'custom' and isinstance(link.get('url'), str) and link['url']:
        return ExtractedLink(url=link['url'], text=label)

    reference = link.get('reference')
    if link.get('type') == 'reference' and isinstance(reference, dict):
        value = reference.get('value')
        if isinstance(value, dict) and isinstance(value.get('slug'), str):
            return ExtractedLink(url=f"/{value['slug']}", text=label)
        if isinstance(reference.get('slug'), str):
            return ExtractedLink(url=f"/{reference['slug']}", text=label)

    if isinstance(link.get('url'), str) and link['url']:
        return ExtractedLink(url=link['url'], text=label)

    logger.debug(f"Dropping unresolved link field of type {link.get('type')!r}")
    return None


def _link_group(items: Any) -> list[ExtractedLink]:
    links = []
    if isinstance(items, list):
        for item in items:
            if isinstance(item, dict):
                resolved = extract_payload_link(item.get('link'))
                if resolved:
                    links.append(resolved)
    return links


def extract_block_links(block: Any) -> list[ExtractedLink]:
    """Links carried by one layout block (rich text, columns and link fields)."""
    if not isinstance(block, dict):
        return []

    links: list[ExtractedLink] = []
    block_type = block.get('blockType')

    for column in block.get('columns') or []:
        if not isinstance(column, dict):
            continue
        if column.get('richText'):
            links.extend(extract_links(column['richText']))
        if column.get('enableLink') and column.get('link'):
            resolved = extract_payload_link(column['link'])
            if resolved:
                links.append(resolved)

    if block.get('richText'):
        links.extend(extract_links(block['richText']))

    if block_type == 'services':
        for service in block.get('services') or []:
            if isinstance(service, dict) and isinstance(service.get('link'), str) and service['link']:
                links.append(ExtractedLink(url=service['link'], text=_string(service.get('title'))))

    if block_type in ('cta', 'callToAction'):
        links.extend(_link_group(block.get('links')))

    if block_type == 'latestPosts' and isinstance(block.get('ctaLink'), str) and block['ctaLink']:
        links.append(ExtractedLink(url=block['ctaLink'], text=_string(block.get('ctaLabel'))))

    if block_type == 'portfolio':
        for project in block.get('projects') or []:
            if isinstance(project, dict) and isinstance(project.get('link'), str) and project['link']:
                links.append(ExtractedLink(url=project['link'], text=_string(project.get('title'))))

    if block_type == 'banner' and block.get('link'):
        resolved = extract_payload_link(block['link'])
        if resolved:
            links.append(resolved)

    return links


def extract_document_links(raw_doc: dict) -> list[ExtractedLink]:
    """Every link of a raw document: hero, layout blocks, then post content."""
    links: list[ExtractedLink] = []
    hero = raw_doc.get('hero') if isinstance(raw_doc.get('hero'), dict) else {}

    if hero.get('richText'):
        links.extend(extract_links(hero['richText']))
    links.extend(_link_group(hero.get('links')))

    layout = raw_doc.get('layout')
    for block in layout if isinstance(layout, list) else []:
        links.extend(extract_block_links(block))

    if isinstance(raw_doc.get('content'), dict):
        links.extend(extract_links(raw_doc['content']))

    return links


def extract_all_internal_links(raw_doc: Any) -> list[LinkRef]:
    """Internal links of a raw document, normalized to slugs."""
    if not isinstance(raw_doc, dict):
        return []

    internal = []
    for link in extract_document_links(raw_doc):
        url = link.url.strip()
        if not is_internal_url(url):
            continue
        slug = normalize_to_slug(url)
        if slug is not None:
            internal.append(LinkRef(url=url, slug=slug, text=link.text or ""))
    return internal


def extract_external_urls(raw_doc: Any, site_host: Optional[str] = None) -> list[str]:
    """Absolute http(s) URLs linked from a raw document, excluding the site host."""
    if not isinstance(raw_doc, dict):
        return []

    trees = []
    hero = raw_doc.get('hero') if isinstance(raw_doc.get('hero'), dict) else {}
    if hero.get('richText'):
        trees.append(hero['richText'])
    layout = raw_doc.get('layout')
    for block in layout if isinstance(layout, list) else []:
        if not isinstance(block, dict):
            continue
        if block.get('richText'):
            trees.append(block['richText'])
        for column in block.get('columns') or []:
            if isinstance(column, dict) and column.get('richText'):
                trees.append(column['richText'])
    if isinstance(raw_doc.get('content'), dict):
        trees.append(raw_doc['content'])

    urls = []
    for tree in trees:
        for link in extract_links(tree):
            url = link.url.strip()
            if not url.startswith(('http://', 'https://')):
                continue
            if site_host and (urlparse(url).hostname or '').lower() == site_host.lower():
                continue
            urls.append(url)
    return urls
