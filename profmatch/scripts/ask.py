"""
ProfMatch - Command-Line Query Tool
====================================
CLI entry point that runs one question through the pipeline:
    1. Validate that ``GOOGLE_API_KEY`` is set (fail-fast).
    2. Initialise the embedder and the LanceDB professor store.
    3. Retrieve, rank and print the candidates that would be injected.
    4. Stream the model's answer to stdout (unless ``--show-only``).

Flags:
    --no-rank     Keep vector-search order instead of re-ranking.
    --show-only   Print the ranked candidates and exit (no LLM call).

Usage:
    python -m profmatch.scripts.ask "recommend an easy biology professor"
    python -m profmatch.scripts.ask "calculus help" --show-only
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

# ── Ensure project root is importable when run directly ────────────────
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ask", description="ProfMatch — ask for professor recommendations from the command line.")
    parser.add_argument("query", help="Question to ask, e.g. 'recommend an easy biology professor'.")
    parser.add_argument("--no-rank", action="store_true", default=False, help="Skip re-ranking; keep vector-search order.")
    parser.add_argument("--show-only", action="store_true", default=False, help="Print the ranked candidates and exit without calling the LLM.")
    return parser.parse_args(argv)


# ── Main Orchestration ─────────────────────────────────────────────────

async def _run(args: argparse.Namespace) -> None:
    t_start = time.perf_counter()

    try:
        from profmatch.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your .env file:\n")
        print(f"  {exc}")
        print()
        sys.exit(1)

    from profmatch.src.utils.logger import get_logger
    logger = get_logger(__name__)

    _print_header(settings, args)

    from profmatch.src.core.models import ConversationMessage
    from profmatch.src.core.rag_engine import UpstreamServiceError
    from profmatch.src.main import build_rag_manager

    t_init = time.perf_counter()
    rag, _ = build_rag_manager()
    init_ms = (time.perf_counter() - t_init) * 1000
    logger.info("Collaborators initialised in %.1fms", init_ms)

    conversation = [ConversationMessage(role="user", content=args.query)]
    try:
        prepared = await rag.prepare(conversation, ranking_enabled=not args.no_rank)
    except UpstreamServiceError as exc:
        logger.error("%s failed: %s", exc.stage, exc)
        sys.exit(1)

    _print_candidates(prepared.candidates, settings.PROMPT_TOP_K)

    if args.show_only:
        _print_footer(len(prepared.candidates), time.perf_counter() - t_start, init_ms)
        return

    print("-" * 60)
    try:
        async for text in rag.stream_answer(prepared):
            sys.stdout.write(text)
            sys.stdout.flush()
    except UpstreamServiceError as exc:
        logger.error("Completion failed: %s", exc)
        sys.exit(1)
    print()

    _print_footer(len(prepared.candidates), time.perf_counter() - t_start, init_ms)


def main(argv: list[str] | None = None) -> None:
    asyncio.run(_run(_parse_args(argv)))


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_header(settings: object, args: argparse.Namespace) -> None:
    print()
    print("=" * 60)
    print("  PROFMATCH — Professor Recommendation")
    print("=" * 60)
    print(f"  Environment  : {settings.ENV}")                   # type: ignore[attr-defined]
    print(f"  Embedding    : {settings.EMBEDDING_MODEL}")       # type: ignore[attr-defined]
    print(f"  LLM          : {settings.LLM_MODEL}")             # type: ignore[attr-defined]
    print(f"  LanceDB      : {settings.LANCEDB_URI} ({settings.LANCEDB_TABLE_NAME})")  # type: ignore[attr-defined]
    print(f"  Min rating   : {settings.MIN_RATING}")            # type: ignore[attr-defined]
    print(f"  Ranking      : {'off' if args.no_rank else 'on'}")
    print(f"  Query        : {args.query}")
    print("=" * 60)
    print()


def _print_candidates(candidates: list, limit: int) -> None:
    if not candidates:
        print("  No professors matched.")
        return
    for i, candidate in enumerate(candidates, 1):
        marker = "*" if i <= limit else " "
        score = "N/A" if candidate.rank_score is None else f"{candidate.rank_score:.2f}"
        meta = candidate.metadata
        print(f" {marker}{i:>2}. {candidate.id:<28} score={score:>6}  sim={candidate.record.similarity_score:.3f}  rating={meta.get('rating', 'N/A')}  difficulty={meta.get('difficulty', 'N/A')}  subject={meta.get('subject', 'N/A')}")
    print(f"\n  (* = injected into the prompt, top {limit})")


def _print_footer(total: int, elapsed: float, init_ms: float) -> None:
    print()
    print("=" * 60)
    print("  EXECUTION SUMMARY")
    print("-" * 60)
    print(f"  Candidates retrieved : {total}")
    print(f"  Startup time         : {init_ms:>8.1f}ms")
    print(f"  Total elapsed        : {elapsed:>8.2f}s")
    print("=" * 60)
    print()


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()
