"""Command-line interface for the SEO engine."""

import argparse
import json
import sys
from dataclasses import asdict, replace
from typing import Any, Dict, List, Optional

from seo_engine.cache import seo_cache
from seo_engine.config import SeoConfig, settings
from seo_engine.documents import (
    file_fetcher,
    load_corpus,
    read_corpus_file,
    read_redirects,
    string_field,
)
from seo_engine.engine import SeoEngine
from seo_engine.history import ScoreHistoryDatabase
from seo_engine.link_checker import ExternalLinkChecker
from seo_engine.locale import resolve_analysis_locale
from seo_engine.logging_config import setup_logging
from seo_engine.models import AnalysisResult, CheckStatus

STATUS_ICONS = {
    CheckStatus.PASS: "✅",
    CheckStatus.WARNING: "⚠️ ",
    CheckStatus.FAIL: "❌",
}


# =============================================================================
# Input / output helpers
# =============================================================================

def _load_json(path: str) -> Dict[str, Any]:
    try:
        return read_corpus_file(path)
    except (OSError, ValueError) as e:
        print(f"Error: cannot read {path}: {e}", file=sys.stderr)
        sys.exit(1)


def _load_config(args) -> SeoConfig:
    config = SeoConfig.from_file(args.config) if args.config else SeoConfig.from_env()
    if getattr(args, 'locale', None):
        config = replace(config, locale=resolve_analysis_locale(request_locale=args.locale))
    return config


def _build_engine(args, data: Dict[str, Any], history: Optional[ScoreHistoryDatabase] = None) -> SeoEngine:
    config = _load_config(args).merge_settings(data.get('settings'))
    corpus = load_corpus(
        file_fetcher(data),
        list((data.get('collections') or {}).keys()),
        list((data.get('globals') or {}).keys()),
    )
    return SeoEngine(
        config=config,
        corpus=corpus,
        redirects=read_redirects(data),
        history=history,
        cache=seo_cache,
    )


def _open_history(args) -> ScoreHistoryDatabase:
    return ScoreHistoryDatabase(getattr(args, 'db_url', None) or settings.DATABASE_URL)


def _write_json(args, payload: Any) -> None:
    output = json.dumps(payload, indent=2, default=str, ensure_ascii=False)
    if args.output_file:
        with open(args.output_file, "w", encoding="utf-8") as f:
            f.write(output)
        print(f"Results written to {args.output_file}")
    else:
        print(output)


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )


def print_analysis(label: str, result: AnalysisResult) -> None:
    """Print an analysis result in a formatted way."""
    print(f"\n{'=' * 60}")
    print(f"SEO Analysis for: {label}")
    print(f"{'=' * 60}")
    print(f"\n📊 Score: {result.score}/100 ({result.level.value})")

    for group, checks in result.by_group().items():
        print(f"\n[{group}]")
        for check in checks:
            print(f"  {STATUS_ICONS[check.status]} {check.label}: {check.message}")
            if check.tip and check.status != CheckStatus.PASS:
                print(f"     💡 {check.tip}")

    print(f"\n{'=' * 60}\n")


# =============================================================================
# Commands
# =============================================================================

def analyze_command(args):
    """Analyze a single document, or every document of a corpus export."""
    data = _load_json(args.file)
    history = _open_history(args) if args.record else None

    try:
        if 'collections' in data or 'globals' in data:
            engine = _build_engine(args, data, history)
            entries = engine.analyze_corpus(record=args.record)
        else:
            engine = SeoEngine(config=_load_config(args), history=history)
            result = engine.analyze_document(data, args.collection, record=args.record)
            entries = [{
                'id': data.get('id'),
                'title': string_field(data.get('title')),
                'slug': string_field(data.get('slug')),
                'collection': args.collection,
                'score': result.score,
                'level': result.level.value,
                'result': result,
            }]
    finally:
        if history is not None:
            history.close()

    if args.output == "json":
        payload = []
        for entry in entries:
            item = {k: v for k, v in entry.items() if k != 'result'}
            item['checks'] = entry['result'].to_dict()['checks']
            payload.append(item)
        _write_json(args, payload if len(payload) != 1 else payload[0])
    else:
        for entry in entries:
            label = f"{entry['collection']}/{entry['slug'] or '(home)'}"
            print_analysis(label, entry['result'])


def link_graph_command(args):
    """Print the internal link graph of a corpus."""
    engine = _build_engine(args, _load_json(args.file))
    graph = engine.link_graph()

    if args.output == "json":
        _write_json(args, graph.to_dict())
        return

    print(f"\nLink graph: {graph.stats['total_nodes']} pages, {graph.stats['total_edges']} links")
    print(f"Average degree: {graph.stats['avg_degree']}")
    for node in sorted(graph.nodes, key=lambda n: (-n.in_degree, n.slug)):
        flags = []
        if node.is_orphan:
            flags.append("orphan")
        if node.is_hub:
            flags.append("hub")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(f"  • {node.slug}: in={node.in_degree} out={node.out_degree}{suffix}")


def audit_command(args):
    """Audit orphan, weak and hub pages and broken internal links."""
    engine = _build_engine(args, _load_json(args.file))
    audit = engine.sitemap_audit(known_routes=args.known_route)

    if args.output == "json":
        _write_json(args, audit.to_dict())
        return

    stats = audit.stats
    print(f"\n{'=' * 60}")
    print(f"Sitemap audit: {stats['total_pages']} pages, {stats['total_links']} links "
          f"({stats['avg_links_per_page']} per page)")
    print(f"{'=' * 60}")

    if audit.orphan_pages:
        print(f"\n❌ Orphan pages ({stats['orphan_count']}):")
        for page in audit.orphan_pages:
            print(f"  • {page.title} ({page.collection}/{page.slug})")

    if audit.weak_pages:
        print(f"\n⚠️  Weak pages ({stats['weak_count']}):")
        for page in audit.weak_pages:
            source = page.incoming_from[0].slug if page.incoming_from else "?"
            print(f"  • {page.title} ({page.collection}/{page.slug}) <- {source}")

    if audit.link_hubs:
        print(f"\n🔗 Link hubs ({stats['hub_count']}):")
        for page in audit.link_hubs:
            print(f"  • {page.title}: {page.outgoing_count} outgoing")

    if audit.broken_links:
        print(f"\n❌ Broken links ({stats['broken_count']}):")
        for link in audit.broken_links:
            hint = f" (did you mean /{link.suggested_slug}?)" if link.suggested_slug else ""
            print(f"  • {link.source_slug or '(home)'} -> {link.target_url}{hint}")
    print()


def keywords_command(args):
    """Suggest keywords mined from the corpus."""
    engine = _build_engine(args, _load_json(args.file))
    research = engine.keyword_research()

    if args.output == "json":
        _write_json(args, research.to_dict())
        return

    print(f"\nKeyword research: {research.stats['unique_terms']} unique terms, "
          f"{research.stats['suggestions_count']} suggestions")
    for suggestion in research.suggestions[:args.limit]:
        targets = ", ".join(suggestion.suggested_for)
        print(f"  • [{suggestion.type.value}] {suggestion.keyword} "
              f"(score {suggestion.score}, {suggestion.frequency} docs)"
              + (f" -> {targets}" if targets else ""))


def cannibalization_command(args):
    """List keywords targeted by more than one document."""
    data = _load_json(args.file)
    history = _open_history(args) if args.with_scores else None
    try:
        report = _build_engine(args, data, history).cannibalization()
    finally:
        if history is not None:
            history.close()

    if args.output == "json":
        _write_json(args, report.to_dict())
        return

    if not report.conflicts:
        print("\n✅ No keyword cannibalization found")
        return

    print(f"\n⚠️  {report.stats['total_conflicts']} conflict(s), "
          f"{report.stats['total_affected_pages']} page(s) affected")
    for conflict in report.conflicts:
        print(f"\n  \"{conflict.keyword}\"")
        for page in conflict.pages:
            print(f"    • {page.title} ({page.collection}/{page.slug}) score {page.score}")


def site_audit_command(args):
    """Score every document of the corpus, worst first, with site-wide stats."""
    data = _load_json(args.file)
    history = _open_history(args) if args.with_history else None
    try:
        audit = _build_engine(args, data, history).site_audit()
    finally:
        if history is not None:
            history.close()

    if args.output == "json":
        _write_json(args, audit.to_dict())
        return

    stats = audit.stats
    print(f"\n{'=' * 60}")
    print(f"Site audit: {stats['total_pages']} pages, average score {stats['avg_score']}")
    print(f"{'=' * 60}")
    print(f"  ✅ Good: {stats['good']}   ⚠️  Needs work: {stats['needs_work']}   "
          f"❌ Critical: {stats['critical']}")
    print(f"  No focus keyword: {stats['no_keyword']}, no meta title: {stats['no_meta_title']}, "
          f"no meta description: {stats['no_meta_description']}")
    print(f"  Average word count: {stats['avg_word_count']}, "
          f"average readability: {stats['avg_readability']}")

    if audit.entries:
        print("\nWorst pages:")
    for entry in audit.entries[:args.limit]:
        change = ""
        if entry.previous_score is not None:
            change = f" ({entry.score - entry.previous_score:+d})"
        print(f"  • {entry.score}{change} {entry.title or entry.slug} "
              f"({entry.collection}/{entry.slug or '(home)'})")
    print()


def check_keyword_command(args):
    """Tell whether a focus keyword is already used by another document."""
    engine = _build_engine(args, _load_json(args.file))
    try:
        usage = engine.check_keyword(args.keyword, exclude_id=args.exclude_id)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.output == "json":
        _write_json(args, {**usage, 'pages': [asdict(page) for page in usage['pages']]})
        return

    if not usage['used']:
        print(f"\n✅ \"{usage['keyword']}\" is not used by another document")
        return
    print(f"\n⚠️  \"{usage['keyword']}\" is already used by:")
    for page in usage['pages']:
        print(f"  • {page.title} ({page.collection}/{page.slug})")


def suggest_links_command(args):
    """Suggest internal links for one document of the corpus."""
    engine = _build_engine(args, _load_json(args.file))
    suggestions = engine.suggest_links(args.slug, args.collection)

    if args.output == "json":
        _write_json(args, [asdict(s) for s in suggestions])
        return

    if not suggestions:
        print(f"\nNo link suggestions for {args.slug}")
        return
    print(f"\nLink suggestions for {args.slug}:")
    for suggestion in suggestions:
        print(f"  • /{suggestion.slug} {suggestion.title} "
              f"({suggestion.match_type}, score {suggestion.score})")
        if suggestion.context:
            print(f"      {suggestion.context}")


def check_links_command(args):
    """Check that external links of the corpus are reachable."""
    engine = _build_engine(args, _load_json(args.file))
    if args.site_url:
        engine.config = replace(engine.config, site_url=args.site_url)
    checker = ExternalLinkChecker(timeout=args.timeout, cache=seo_cache)
    report = engine.check_external_links(checker, force_refresh=args.force_refresh)

    if args.output == "json":
        _write_json(args, report.to_dict())
        return

    stats = report.stats
    print(f"\nExternal links: {stats['ok']}/{stats['total']} reachable, "
          f"{stats['broken']} broken, {stats['timeout']} timed out")
    for result in report.results:
        if result.ok:
            continue
        reason = result.error or f"HTTP {result.status}"
        print(f"  ❌ {result.url} ({reason})")
        for page in result.source_pages:
            print(f"      on {page}")


def history_command(args):
    """Show the score history of a document."""
    history = _open_history(args)
    try:
        engine = SeoEngine(config=_load_config(args), history=history)
        data = engine.score_history(args.document_id, args.collection, args.limit)
    finally:
        history.close()

    if args.output == "json":
        _write_json(args, data)
        return

    if not data['history']:
        print(f"No score history for {args.collection}::{args.document_id}")
        return

    print(f"\n{'=' * 60}")
    print(f"Score history for {args.collection}::{args.document_id}")
    print(f"{'=' * 60}\n")
    for snapshot in data['history']:
        summary = snapshot['checks_summary']
        print(f"{snapshot['snapshot_date']}: {snapshot['score']} ({snapshot['level']}) "
              f"pass={summary['pass']} warning={summary['warning']} fail={summary['fail']}")
    print(f"\nTrend: {data['trend']} ({data['score_delta']:+d})")


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SEO engine - Score content documents and audit site structure"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )
    parser.add_argument(
        "--config",
        help="Site configuration file (JSON or YAML)",
    )
    parser.add_argument(
        "--locale",
        help="Request locale (e.g. en-US); overrides the configured analysis locale",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Score a document JSON file or every document of a corpus export."
    )
    analyze_parser.add_argument("file", help="Document or corpus JSON file")
    analyze_parser.add_argument(
        "--collection",
        default="pages",
        help="Collection of a single document; 'posts' enables article checks (default: pages)",
    )
    analyze_parser.add_argument(
        "--record",
        action="store_true",
        help="Store a score snapshot in the history database",
    )
    analyze_parser.add_argument("--db-url", help="History database URL (sqlite:///path)")
    _add_output_arguments(analyze_parser)
    analyze_parser.set_defaults(func=analyze_command)

    graph_parser = subparsers.add_parser("link-graph", help="Build the internal link graph.")
    graph_parser.add_argument("file", help="Corpus JSON file")
    _add_output_arguments(graph_parser)
    graph_parser.set_defaults(func=link_graph_command)

    audit_parser = subparsers.add_parser(
        "audit", help="Find orphan, weak and hub pages and broken internal links."
    )
    audit_parser.add_argument("file", help="Corpus JSON file")
    audit_parser.add_argument(
        "--known-route",
        action="append",
        default=[],
        help="Route served outside the corpus; never reported as broken (repeatable)",
    )
    _add_output_arguments(audit_parser)
    audit_parser.set_defaults(func=audit_command)

    keywords_parser = subparsers.add_parser("keywords", help="Suggest keywords from the corpus.")
    keywords_parser.add_argument("file", help="Corpus JSON file")
    keywords_parser.add_argument(
        "--limit",
        type=int,
        default=30,
        help="Suggestions shown in text output (default: 30)",
    )
    _add_output_arguments(keywords_parser)
    keywords_parser.set_defaults(func=keywords_command)

    cannibalization_parser = subparsers.add_parser(
        "cannibalization", help="Find documents competing for the same keyword."
    )
    cannibalization_parser.add_argument("file", help="Corpus JSON file")
    cannibalization_parser.add_argument(
        "--with-scores",
        action="store_true",
        help="Enrich pages with their latest score from the history database",
    )
    cannibalization_parser.add_argument("--db-url", help="History database URL (sqlite:///path)")
    _add_output_arguments(cannibalization_parser)
    cannibalization_parser.set_defaults(func=cannibalization_command)

    site_audit_parser = subparsers.add_parser(
        "site-audit", help="Score every document and summarize the site, worst pages first."
    )
    site_audit_parser.add_argument("file", help="Corpus JSON file")
    site_audit_parser.add_argument(
        "--limit",
        type=int,
        default=20,
        help="Pages shown in text output (default: 20)",
    )
    site_audit_parser.add_argument(
        "--with-history",
        action="store_true",
        help="Show the change since the previous score from the history database",
    )
    site_audit_parser.add_argument("--db-url", help="History database URL (sqlite:///path)")
    _add_output_arguments(site_audit_parser)
    site_audit_parser.set_defaults(func=site_audit_command)

    check_keyword_parser = subparsers.add_parser(
        "check-keyword", help="Check whether a focus keyword is already used."
    )
    check_keyword_parser.add_argument("file", help="Corpus JSON file")
    check_keyword_parser.add_argument("keyword", help="Focus keyword to check")
    check_keyword_parser.add_argument("--exclude-id", help="Id of the document being edited")
    _add_output_arguments(check_keyword_parser)
    check_keyword_parser.set_defaults(func=check_keyword_command)

    suggest_parser = subparsers.add_parser(
        "suggest-links", help="Suggest internal links for a document."
    )
    suggest_parser.add_argument("file", help="Corpus JSON file")
    suggest_parser.add_argument("slug", help="Slug of the document being edited")
    suggest_parser.add_argument("--collection", help="Restrict the lookup to one collection")
    _add_output_arguments(suggest_parser)
    suggest_parser.set_defaults(func=suggest_links_command)

    check_parser = subparsers.add_parser(
        "check-links", help="Check that external links are reachable."
    )
    check_parser.add_argument("file", help="Corpus JSON file")
    check_parser.add_argument("--site-url", help="Site origin; links to it are not external")
    check_parser.add_argument(
        "--timeout",
        type=float,
        default=settings.LINK_CHECK_TIMEOUT,
        help=f"Per-URL timeout in seconds (default: {settings.LINK_CHECK_TIMEOUT:g})",
    )
    check_parser.add_argument(
        "--force-refresh",
        action="store_true",
        help="Ignore cached results",
    )
    _add_output_arguments(check_parser)
    check_parser.set_defaults(func=check_links_command)

    history_parser = subparsers.add_parser("history", help="Show the score history of a document.")
    history_parser.add_argument("document_id", help="Document identifier")
    history_parser.add_argument("--collection", required=True, help="Collection slug")
    history_parser.add_argument(
        "--limit",
        type=int,
        default=30,
        help="Snapshots to show, 1-100 (default: 30)",
    )
    history_parser.add_argument("--db-url", help="History database URL (sqlite:///path)")
    _add_output_arguments(history_parser)
    history_parser.set_defaults(func=history_command)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
