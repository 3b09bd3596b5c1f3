#!/usr/bin/env python3
"""Command-line runner for the search assistant agents."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from papergrid.agents.confidence import analyze_confidence
from papergrid.agents.query_builder import generate_query
from papergrid.agents.summarizer import summarize_query
from papergrid.core.config import AssistantConfig, load_config
from papergrid.core.errors import MODEL_FAILURES, ConfigurationError, InputError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("assistant")

EXIT_INPUT = 1
EXIT_FAILURE = 2


# ── Commands ─────────────────────────────────────────────────────────


async def _cmd_generate(args: argparse.Namespace, config: AssistantConfig) -> None:
    query = await generate_query(
        args.description, provider=args.provider, model=args.model, config=config
    )
    print(query)


async def _cmd_refine(args: argparse.Namespace, config: AssistantConfig) -> None:
    query = await generate_query(
        args.feedback,
        existing_query=args.query,
        action="refine",
        provider=args.provider,
        model=args.model,
        config=config,
    )
    print(query)


async def _cmd_summarize(args: argparse.Namespace, config: AssistantConfig) -> None:
    print(await summarize_query(args.query, args.provider, args.model, config))


async def _cmd_confidence(args: argparse.Namespace, config: AssistantConfig) -> None:
    source_text = Path(args.text).read_text()
    fields = json.loads(Path(args.fields).read_text())

    report = await analyze_confidence(source_text, fields, args.provider, args.model, config)
    print(report.model_dump_json(by_alias=True, exclude_none=True, indent=2))


def _cmd_serve(args: argparse.Namespace) -> None:
    from uvicorn import run

    run("papergrid.api.app:app", host=args.host, port=args.port, reload=args.reload)


COMMANDS = {
    "generate": _cmd_generate,
    "refine": _cmd_refine,
    "summarize": _cmd_summarize,
    "confidence": _cmd_confidence,
}


# ── CLI ──────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Literature search assistant")
    parser.add_argument("--config", default=None, help="Path to a providers YAML file")
    parser.add_argument("--provider", default=None, help="openai or openrouter")
    parser.add_argument("--model", default=None, help="Model id for the chosen provider")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate", help="Boolean query from a research description")
    p.add_argument("description")

    p = sub.add_parser("refine", help="Refine an existing Boolean query")
    p.add_argument("query", help="Current Boolean query")
    p.add_argument("feedback", help="What to change")

    p = sub.add_parser("summarize", help="Short title for a Boolean query")
    p.add_argument("query")

    p = sub.add_parser("confidence", help="Score extracted fields against a text file")
    p.add_argument("--text", required=True, help="Source text file")
    p.add_argument("--fields", required=True, help="JSON file with a list of extracted fields")

    p = sub.add_parser("serve", help="Run the HTTP API")
    p.add_argument("--host", default="localhost")
    p.add_argument("--port", type=int, default=8000)
    p.add_argument("--reload", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        _cmd_serve(args)
        return 0

    try:
        config = load_config(args.config)
    except (OSError, yaml.YAMLError, ValidationError) as exc:
        logger.error("Could not load config: %s", exc)
        return EXIT_FAILURE

    try:
        asyncio.run(COMMANDS[args.command](args, config))
    except InputError as exc:
        logger.error("Invalid input: %s", exc)
        return EXIT_INPUT
    except (OSError, json.JSONDecodeError) as exc:
        logger.error("Could not read input file: %s", exc)
        return EXIT_INPUT
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return EXIT_FAILURE
    except MODEL_FAILURES as exc:
        logger.error("%s failed: %s", args.command, exc)
        return EXIT_FAILURE
    return 0


if __name__ == "__main__":
    sys.exit(main())
