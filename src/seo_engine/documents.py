# src/seo_engine/documents.py
"""Adapters from raw CMS documents to analyzer inputs.

Raw documents are the JSON objects returned by the content store:
``meta`` (title, description, image), ``hero`` (richText, links,
media), ``layout`` blocks, and ``content`` for posts.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional

from seo_engine.constants import CORPUS_PAGE_SIZE
from seo_engine.lexical import count_words
from seo_engine.models import DocRecord, Redirect, SeoInput
from seo_engine.text_extraction import extract_all_internal_links, extract_plain_text

logger = logging.getLogger(__name__)

POSTS_COLLECTION = "posts"
GLOBAL_PREFIX = "global:"

# fetch(kind, slug, limit): kind is "collection" (returns a list of
# documents) or "global" (returns one document or None)
Fetcher = Callable[[str, str, int], Any]


@dataclass
class FetchedDoc:
    doc: Dict[str, Any]
    source_type: str
    source_slug: str

    @property
    def collection(self) -> str:
        if self.source_type == "global":
            return f"{GLOBAL_PREFIX}{self.source_slug}"
        return self.source_slug


def _keyword_entries(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    keywords = []
    for entry in value:
        keyword = entry.get('keyword') if isinstance(entry, dict) else entry
        if isinstance(keyword, str) and keyword:
            keywords.append(keyword)
    return keywords


def _optional_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def string_field(value: Any) -> str:
    """Scalar string field; anything else reads as empty."""
    return value if isinstance(value, str) else ""


def build_seo_input(raw_doc: Dict[str, Any], collection: str, is_global: bool = False) -> SeoInput:
    """Flatten a raw document into an SeoInput.

    Args:
        raw_doc: Document as returned by the content store
        collection: Collection slug; "posts" enables the article checks
        is_global: Whether the document is a site-wide global

    Returns:
        SeoInput ready for analysis
    """
    meta = raw_doc.get('meta') if isinstance(raw_doc.get('meta'), dict) else {}
    hero = raw_doc.get('hero') if isinstance(raw_doc.get('hero'), dict) else {}
    is_post = collection == POSTS_COLLECTION
    layout = raw_doc.get('layout')
    hero_links = hero.get('links')

    return SeoInput(
        meta_title=string_field(meta.get('title')),
        meta_description=string_field(meta.get('description')),
        meta_image=meta.get('image') or None,
        slug=string_field(raw_doc.get('slug')),
        focus_keyword=string_field(raw_doc.get('focusKeyword')),
        focus_keywords=tuple(_keyword_entries(raw_doc.get('focusKeywords'))),
        hero_title=string_field(raw_doc.get('title')) if is_post else "",
        hero_rich_text=hero.get('richText') or None,
        hero_links=tuple(hero_links) if isinstance(hero_links, list) else (),
        hero_media=hero.get('media') or None,
        blocks=tuple(layout) if isinstance(layout, list) else (),
        content=raw_doc.get('content') if is_post else None,
        is_post=is_post,
        is_cornerstone=bool(raw_doc.get('isCornerstone')),
        updated_at=_optional_str(raw_doc.get('updatedAt')) or None,
        content_last_reviewed=_optional_str(raw_doc.get('contentLastReviewed')) or None,
        is_global=is_global,
        is_product=bool(raw_doc.get('isProduct')),
        canonical_url=_optional_str(raw_doc.get('canonicalUrl', meta.get('canonicalUrl'))),
        robots_meta=_optional_str(raw_doc.get('robotsMeta', meta.get('robots'))),
    )


def extract_doc_text(raw_doc: Dict[str, Any]) -> str:
    """Searchable text of a document: titles, meta, hero, blocks and content."""
    parts = []
    meta = raw_doc.get('meta') if isinstance(raw_doc.get('meta'), dict) else {}
    for value in (raw_doc.get('title'), meta.get('title'), meta.get('description')):
        if isinstance(value, str) and value:
            parts.append(value)

    hero = raw_doc.get('hero') if isinstance(raw_doc.get('hero'), dict) else {}
    if hero.get('richText'):
        parts.append(extract_plain_text(hero['richText']))

    layout = raw_doc.get('layout')
    for block in layout if isinstance(layout, list) else []:
        if not isinstance(block, dict):
            continue
        if block.get('richText'):
            parts.append(extract_plain_text(block['richText']))
        for column in block.get('columns') or []:
            if isinstance(column, dict) and column.get('richText'):
                parts.append(extract_plain_text(column['richText']))
        if block.get('blockType') == 'services':
            for service in block.get('services') or []:
                if not isinstance(service, dict):
                    continue
                for key in ('title', 'description'):
                    if isinstance(service.get(key), str) and service[key]:
                        parts.append(service[key])

    if isinstance(raw_doc.get('content'), dict):
        parts.append(extract_plain_text(raw_doc['content']))

    return ' '.join(part for part in parts if part).strip()


def build_doc_record(raw_doc: Dict[str, Any], collection: str) -> DocRecord:
    """Corpus view of a raw document."""
    full_text = extract_doc_text(raw_doc)
    is_global = collection.startswith(GLOBAL_PREFIX)
    global_slug = collection[len(GLOBAL_PREFIX):] if is_global else None
    doc_id = raw_doc.get('id')
    if doc_id is None and global_slug:
        doc_id = global_slug
    return DocRecord(
        id=doc_id,
        title=string_field(raw_doc.get('title')) or global_slug or "(untitled)",
        slug=string_field(raw_doc.get('slug')),
        collection=collection,
        focus_keyword=string_field(raw_doc.get('focusKeyword')),
        full_text=full_text,
        word_count=count_words(full_text),
        focus_keywords=_keyword_entries(raw_doc.get('focusKeywords')),
        links=extract_all_internal_links(raw_doc),
    )


def load_corpus(
    fetch: Fetcher,
    collections: Iterable[str],
    globals_: Iterable[str] = (),
    limit: int = CORPUS_PAGE_SIZE,
) -> List[FetchedDoc]:
    """Fetch every document of the given collections and globals.

    A source that fails is logged and skipped; the others are still
    returned.

    Args:
        fetch: Data store accessor
        collections: Collection slugs
        globals_: Global slugs
        limit: Page size per collection query

    Returns:
        Fetched documents in source order
    """
    results: List[FetchedDoc] = []

    for slug in collections:
        try:
            docs = fetch("collection", slug, limit) or []
        except Exception as e:
            logger.warning(f"Skipping collection {slug}: {e}")
            continue
        for doc in docs:
            if isinstance(doc, dict):
                results.append(FetchedDoc(doc=doc, source_type="collection", source_slug=slug))

    for slug in globals_:
        try:
            doc = fetch("global", slug, limit)
        except Exception as e:
            logger.warning(f"Skipping global {slug}: {e}")
            continue
        if isinstance(doc, dict):
            results.append(FetchedDoc(doc=doc, source_type="global", source_slug=slug))

    logger.debug(f"Loaded {len(results)} documents")
    return results


def build_doc_records(fetched: Iterable[FetchedDoc]) -> List[DocRecord]:
    return [build_doc_record(item.doc, item.collection) for item in fetched]


# =============================================================================
# Corpus files
# =============================================================================

def read_corpus_file(path: str) -> Dict[str, Any]:
    """Read a corpus export.

    The file holds ``collections`` (slug -> list of documents), and
    optionally ``globals`` (slug -> document) and ``redirects``
    (list of ``{"from": ..., "to": ...}``).
    """
    with open(Path(path), 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Corpus file {path} must contain a JSON object")
    return data


def file_fetcher(data: Dict[str, Any]) -> Fetcher:
    """Fetcher serving documents from a corpus export."""
    collections = data.get('collections') or {}
    globals_ = data.get('globals') or {}

    def fetch(kind: str, slug: str, limit: int) -> Any:
        if kind == "global":
            if slug not in globals_:
                raise KeyError(f"unknown global {slug!r}")
            return globals_[slug]
        if slug not in collections:
            raise KeyError(f"unknown collection {slug!r}")
        return list(collections[slug])[:limit]

    return fetch


def load_corpus_file(path: str) -> List[FetchedDoc]:
    data = read_corpus_file(path)
    return load_corpus(
        file_fetcher(data),
        list((data.get('collections') or {}).keys()),
        list((data.get('globals') or {}).keys()),
    )


def read_redirects(data: Dict[str, Any]) -> List[Redirect]:
    redirects = []
    for item in data.get('redirects') or []:
        if isinstance(item, dict) and isinstance(item.get('from'), str):
            redirects.append(Redirect(from_path=item['from'], to_path=item.get('to') or ""))
    return redirects
