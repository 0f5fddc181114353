"""Internal link graph, sitemap audit and internal link suggestions.

All slugs are compared through ``normalize_slug_key`` so accented and
unaccented variants of the same slug resolve to the same page. A
document with an empty slug is the homepage.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Sequence

from seo_engine.constants import (
    HOME_SLUG,
    HOME_SLUGS,
    HUB_OUTGOING_THRESHOLD,
    LINK_SUGGESTION_CONTEXT_CHARS,
    MAX_LINK_SUGGESTIONS,
    SLUG_SUGGESTION_MIN_RATIO,
)
from seo_engine.models import (
    BrokenLink,
    DocRecord,
    GraphEdge,
    GraphNode,
    IncomingLink,
    LinkGraph,
    LinkRef,
    LinkSuggestion,
    PageLinkInfo,
    Redirect,
    RedirectPlan,
    SitemapAudit,
)
from seo_engine.text_extraction import normalize_for_comparison, normalize_slug_key

logger = logging.getLogger(__name__)


def doc_slug_key(doc: DocRecord) -> str:
    """Comparable slug of a document; the homepage maps to "home"."""
    return normalize_slug_key(doc.slug) or HOME_SLUG


def _index_docs(docs: Iterable[DocRecord]) -> "OrderedDict[str, DocRecord]":
    """Documents by slug key; the first document wins on duplicate slugs."""
    index: "OrderedDict[str, DocRecord]" = OrderedDict()
    for doc in docs:
        key = doc_slug_key(doc)
        if key in index:
            logger.debug(f"Duplicate slug {key!r} ({doc.key}), keeping {index[key].key}")
            continue
        index[key] = doc
    return index


def dedupe_links(links: Iterable[LinkRef]) -> List[LinkRef]:
    """Keep the first link to each target slug."""
    seen = set()
    unique = []
    for link in links:
        if link.slug in seen:
            continue
        seen.add(link.slug)
        unique.append(link)
    return unique


# =============================================================================
# Link graph
# =============================================================================

def build_link_graph(docs: Sequence[DocRecord]) -> LinkGraph:
    """Build the internal link graph of a corpus.

    Outgoing links are deduplicated by target (first anchor wins) and
    self-links are dropped. Only links between existing documents count
    toward degrees and edges.

    Args:
        docs: Corpus documents with their outgoing internal links

    Returns:
        LinkGraph with one node per document
    """
    index = _index_docs(docs)

    outgoing: Dict[str, List[LinkRef]] = {}
    for key, doc in index.items():
        outgoing[key] = [
            link for link in dedupe_links(doc.links)
            if link.slug != key and link.slug in index
        ]

    in_degree: Dict[str, int] = {key: 0 for key in index}
    for links in outgoing.values():
        for link in links:
            in_degree[link.slug] += 1

    nodes = []
    edges = []
    for key, doc in index.items():
        out_degree = len(outgoing[key])
        nodes.append(GraphNode(
            slug=key,
            title=doc.title,
            collection=doc.collection,
            id=doc.id,
            in_degree=in_degree[key],
            out_degree=out_degree,
            is_orphan=key not in HOME_SLUGS and in_degree[key] == 0,
            is_hub=out_degree > HUB_OUTGOING_THRESHOLD,
        ))
        for link in outgoing[key]:
            edges.append(GraphEdge(source=key, target=link.slug, anchor_text=link.text))

    total_degree = sum(node.in_degree + node.out_degree for node in nodes)
    stats = {
        'total_nodes': len(nodes),
        'total_edges': len(edges),
        'orphan_count': sum(1 for node in nodes if node.is_orphan),
        'hub_count': sum(1 for node in nodes if node.is_hub),
        'avg_degree': round(total_degree / len(nodes), 1) if nodes else 0,
    }
    logger.debug(f"Link graph: {stats}")
    return LinkGraph(nodes=nodes, edges=edges, stats=stats)


# =============================================================================
# Sitemap audit
# =============================================================================

def find_suggested_slug(broken_slug: str, candidates: Iterable[str]) -> Optional[str]:
    """Existing slug sharing the most hyphen-separated segments with a broken one.

    The ratio is shared segments over the larger segment count; it must
    reach 0.3, and the first candidate wins ties.
    """
    broken_parts = broken_slug.split('-')
    best_match = None
    best_ratio = 0.0

    for candidate in candidates:
        if candidate == broken_slug:
            continue
        candidate_parts = candidate.split('-')
        common = sum(1 for part in broken_parts if part in candidate_parts)
        ratio = common / max(len(broken_parts), len(candidate_parts))
        if ratio >= SLUG_SUGGESTION_MIN_RATIO and ratio > best_ratio:
            best_ratio = ratio
            best_match = candidate

    return best_match


def _page_info(doc: DocRecord, **counts) -> PageLinkInfo:
    return PageLinkInfo(
        id=doc.id, title=doc.title, slug=doc.slug, collection=doc.collection, **counts
    )


def audit_sitemap(
    docs: Sequence[DocRecord],
    redirects: Optional[Iterable[Redirect]] = None,
    known_routes: Optional[Iterable[str]] = None,
) -> SitemapAudit:
    """Find orphan, weak and hub pages and broken internal links.

    Args:
        docs: Corpus documents
        redirects: Existing redirects; their sources are not reported as broken
        known_routes: Slugs served outside the corpus (treated like the homepage)

    Returns:
        SitemapAudit with sorted page lists and stats
    """
    index = _index_docs(docs)
    redirected = {
        normalize_slug_key(redirect.from_path.lstrip('/'))
        for redirect in redirects or []
        if isinstance(redirect.from_path, str)
    }
    home_slugs = set(HOME_SLUGS) | {normalize_slug_key(route) for route in known_routes or []}

    incoming: Dict[str, List[IncomingLink]] = {key: [] for key in index}
    for key, doc in index.items():
        for link in doc.links:
            if link.slug == key or link.slug not in incoming:
                continue
            incoming[link.slug].append(IncomingLink(slug=doc.slug, anchor_text=link.text))

    orphan_pages = []
    weak_pages = []
    link_hubs = []
    broken_links = []
    seen_broken = set()
    total_links = 0

    for key, doc in index.items():
        sources = set()
        unique_incoming = []
        for item in incoming[key]:
            if item.slug in sources:
                continue
            sources.add(item.slug)
            unique_incoming.append(item)

        outgoing_slugs = {link.slug for link in doc.links}
        total_links += len(doc.links)

        if key not in home_slugs and not unique_incoming:
            orphan_pages.append(_page_info(doc, outgoing_count=len(outgoing_slugs)))
        elif key not in home_slugs and len(unique_incoming) == 1:
            weak_pages.append(_page_info(
                doc, incoming_count=1, outgoing_count=len(outgoing_slugs),
                incoming_from=unique_incoming,
            ))

        if len(outgoing_slugs) > HUB_OUTGOING_THRESHOLD:
            link_hubs.append(_page_info(
                doc, incoming_count=len(unique_incoming), outgoing_count=len(outgoing_slugs),
            ))

        for link in doc.links:
            target = link.slug
            if target in index or target in home_slugs or target in redirected:
                continue
            dedupe_key = f"{key}::{target}"
            if dedupe_key in seen_broken:
                continue
            seen_broken.add(dedupe_key)
            broken_links.append(BrokenLink(
                source_id=doc.id,
                source_title=doc.title,
                source_slug=doc.slug,
                target_url=link.url,
                target_slug=target,
                collection=doc.collection,
                anchor_text=link.text,
                suggested_slug=find_suggested_slug(target, index.keys()),
            ))

    orphan_pages.sort(key=lambda page: page.title.lower())
    weak_pages.sort(key=lambda page: page.title.lower())
    link_hubs.sort(key=lambda page: -page.outgoing_count)

    total_pages = len(index)
    stats = {
        'total_pages': total_pages,
        'total_links': total_links,
        'avg_links_per_page': round(total_links / total_pages, 1) if total_pages else 0,
        'orphan_count': len(orphan_pages),
        'weak_count': len(weak_pages),
        'hub_count': len(link_hubs),
        'broken_count': len(broken_links),
    }
    logger.info(
        f"Sitemap audit: {stats['orphan_count']} orphan, {stats['weak_count']} weak, "
        f"{stats['broken_count']} broken link(s) across {total_pages} pages"
    )
    return SitemapAudit(
        orphan_pages=orphan_pages,
        weak_pages=weak_pages,
        link_hubs=link_hubs,
        broken_links=broken_links,
        stats=stats,
    )


# =============================================================================
# Redirects
# =============================================================================

def _as_path(slug: str) -> str:
    return slug if slug.startswith('/') else f"/{slug}"


def plan_slug_redirect(
    old_slug: Optional[str],
    new_slug: Optional[str],
    redirects: Iterable[Redirect] = (),
) -> Optional[RedirectPlan]:
    """Redirect to create when a document's slug changes.

    Existing redirects leaving the new path, or landing on the old one,
    would chain with the new redirect and are reported as warnings.

    Args:
        old_slug: Slug before the change
        new_slug: Slug after the change
        redirects: Redirects already stored

    Returns:
        RedirectPlan, marked ``exists`` when the same redirect is stored;
        None when either slug is empty or the path did not change
    """
    if not (isinstance(old_slug, str) and isinstance(new_slug, str)) or not (old_slug and new_slug):
        return None
    redirect = Redirect(from_path=_as_path(old_slug), to_path=_as_path(new_slug))
    if redirect.from_path == redirect.to_path:
        return None

    existing = list(redirects)
    if any(r.from_path == redirect.from_path and r.to_path == redirect.to_path for r in existing):
        logger.info(f"Redirect already exists: {redirect.from_path} -> {redirect.to_path}")
        return RedirectPlan(redirect=redirect, exists=True)

    warnings = []
    if any(r.from_path == redirect.to_path for r in existing):
        warnings.append(f"{redirect.to_path} already redirects elsewhere")
    if any(r.to_path == redirect.from_path for r in existing):
        warnings.append(f"a redirect already points to {redirect.from_path}")
    for warning in warnings:
        logger.warning(f"Potential redirect chain: {warning}")
    return RedirectPlan(redirect=redirect, chain_warnings=warnings)


# =============================================================================
# Link suggestions
# =============================================================================

def _context_phrase(normalized: str, term: str, original: str) -> str:
    """About sixty characters of the original text around a matched term."""
    index = normalized.find(term)
    if index == -1:
        return ""
    start = max(0, index - LINK_SUGGESTION_CONTEXT_CHARS)
    end = min(len(original), index + len(term) + LINK_SUGGESTION_CONTEXT_CHARS)
    phrase = original[start:end].strip()
    if start > 0:
        phrase = '...' + phrase
    if end < len(original):
        phrase = phrase + '...'
    return phrase


def suggest_links(
    source: DocRecord,
    candidates: Iterable[DocRecord],
    limit: int = MAX_LINK_SUGGESTIONS,
) -> List[LinkSuggestion]:
    """Suggest internal link targets for a document.

    Scoring per candidate: its focus keyword appears in the source text
    (+3), at least two of its significant title words appear (+2), or,
    failing both, one of its slug segments appears (+1).

    Args:
        source: Document being edited
        candidates: Possible link targets; the source itself is skipped
        limit: Maximum suggestions returned

    Returns:
        Suggestions sorted by score, best first
    """
    content = source.full_text or ""
    if not content.strip():
        return []
    normalized = normalize_for_comparison(content)

    suggestions = []
    for doc in candidates:
        if doc.key == source.key:
            continue
        if not doc.title and not doc.slug:
            continue

        score = 0
        match_type = 'slug'
        context = ""

        keyword = normalize_for_comparison(doc.focus_keyword)
        if len(keyword) > 2 and keyword in normalized:
            score += 3
            match_type = 'keyword'
            context = _context_phrase(normalized, keyword, content)

        title_words = [w for w in normalize_for_comparison(doc.title).split() if len(w) > 3]
        if len(title_words) >= 2:
            matching = [w for w in title_words if w in normalized]
            if len(matching) >= 2:
                score += 2
                if not context:
                    match_type = 'title'
                    context = _context_phrase(normalized, matching[0], content)

        slug_parts = [part for part in (doc.slug or "").split('-') if len(part) > 3]
        matching_parts = [part for part in slug_parts if part in normalized]
        if matching_parts and score == 0:
            score += 1
            match_type = 'slug'
            context = _context_phrase(normalized, matching_parts[0], content)

        if score:
            suggestions.append(LinkSuggestion(
                id=doc.id,
                title=doc.title,
                slug=doc.slug,
                collection=doc.collection,
                score=score,
                match_type=match_type,
                context=context,
            ))

    suggestions.sort(key=lambda s: -s.score)
    return suggestions[:limit]
