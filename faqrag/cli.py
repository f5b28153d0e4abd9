"""Command line entry points.

Usage:
    faqrag-convert                                   # data/covid_faq.csv -> data/context.json
    faqrag-convert --input faq.csv --output ctx.json
    faqrag-ask --query "How does COVID spread?"
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import structlog

from faqrag import config
from faqrag.exceptions import FaqRagError, InputUnavailable
from faqrag.log import configure_logging
from faqrag.rag.converter import convert
from faqrag.rag.pipeline import QAPipeline

logger = structlog.get_logger()


def build_ask_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Answer a question from the FAQ context",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  faqrag-ask --query "How does COVID spread?"
  faqrag-ask                                  # uses the default query
        """,
    )
    parser.add_argument(
        "--query",
        type=str,
        nargs="?",
        default=None,
        help=f"Question to answer (default: {config.DEFAULT_QUERY!r})",
    )
    return parser


def build_convert_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a FAQ CSV (questions, answers) into the context file",
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=config.FAQ_CSV_PATH,
        help=f"FAQ CSV file (default: {config.FAQ_CSV_PATH})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=config.CONTEXT_PATH,
        help=f"Context JSON file to write (default: {config.CONTEXT_PATH})",
    )
    parser.add_argument(
        "--sep",
        type=str,
        default=",",
        help="Column delimiter (default: ',')",
    )
    return parser


async def run_ask(query: str, pipeline: QAPipeline = None) -> str:
    """Answer ``query``, printing the prompt and then the answer."""
    if pipeline is None:
        pipeline = QAPipeline.from_paths()

    prepared = await pipeline.prepare(query)
    print("PROMPT: ", prepared.prompt)

    answer = await pipeline.complete(prepared)
    print("\nCOMPLETION ANSWER: ", answer.text, "\n")

    return answer.text


def ask_main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``faqrag-ask``."""
    configure_logging()
    args = build_ask_parser().parse_args(argv)

    if args.query is None:
        print('No query provided... use --query "Some questions you have?" to provide a query')
    query = args.query or config.DEFAULT_QUERY

    try:
        asyncio.run(run_ask(query))

    except KeyboardInterrupt:
        print("\nCancelled by user.\n")
        sys.exit(1)

    except InputUnavailable as e:
        logger.error("input_unavailable", error=str(e), path=e.path)
        print(f"\nError reading context file: {e}\n", file=sys.stderr)
        sys.exit(1)

    except FaqRagError as e:
        logger.error("ask_failed", error=str(e), error_type=type(e).__name__)
        print(f"\nError: {e}\n", file=sys.stderr)
        sys.exit(1)


def convert_main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``faqrag-convert``."""
    configure_logging()
    args = build_convert_parser().parse_args(argv)

    try:
        passages = convert(args.input, args.output, sep=args.sep)
    except FaqRagError as e:
        logger.error("convert_failed", error=str(e), error_type=type(e).__name__)
        print(f"\nError: {e}\n", file=sys.stderr)
        sys.exit(1)

    print(f"Wrote {len(passages)} passages to {args.output}")


if __name__ == "__main__":
    ask_main()
