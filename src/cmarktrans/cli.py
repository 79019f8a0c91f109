"""Command line interface for cmarktrans."""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path
from typing import Sequence

from cmarktrans.config import CMARKTRANS_LOG_LEVEL
from cmarktrans.deepl import DeeplClient, Formality, Language
from cmarktrans.discovery import discover_files
from cmarktrans.exceptions import CmarkTransError
from cmarktrans.glossary import read_glossary
from cmarktrans.schemas import Settings
from cmarktrans.settings import load_settings
from cmarktrans.translation import DocumentTranslator, TranslationOptions

logger = logging.getLogger(__name__)

_LANGUAGES = [language.value for language in Language]
_FORMALITIES = [formality.value for formality in Formality]


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        settings = load_settings(args.config)
        return asyncio.run(args.handler(args, settings))
    except (CmarkTransError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmarktrans",
        description="Translate CommonMark documents with DeepL, keeping their structure.",
    )
    parser.add_argument("-c", "--config", type=Path, help="Settings file (default: ./deepl.toml, then ~/.deepl.toml)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity (-vv for debug)")
    commands = parser.add_subparsers(dest="command")

    translate = commands.add_parser("translate", help="Translate a file or a directory tree")
    translate.add_argument("-f", "--from", dest="source", required=True, choices=_LANGUAGES, help="Source language")
    translate.add_argument("-t", "--to", dest="target", required=True, choices=_LANGUAGES, help="Target language")
    translate.add_argument("--formality", choices=_FORMALITIES, default=Formality.DEFAULT.value)
    translate.add_argument("--project", help="Project whose glossary and ignore phrases apply")
    translate.add_argument("--max-depth", type=int, help="Maximum directory depth to descend into")
    translate.add_argument("input", type=Path, help="Input file or directory")
    translate.add_argument("output", type=Path, help="Output file or directory")
    translate.set_defaults(handler=_run_translate)

    glossary = commands.add_parser("glossary", help="Manage DeepL glossaries")
    glossary_commands = glossary.add_subparsers(dest="glossary_command", required=True)

    register = glossary_commands.add_parser("register", help="Register a glossary from a TOML file")
    register.add_argument("-n", "--name", required=True, help="Glossary name in the file")
    register.add_argument("-f", "--from", dest="source", required=True, choices=_LANGUAGES)
    register.add_argument("-t", "--to", dest="target", required=True, choices=_LANGUAGES)
    register.add_argument("file", type=Path, help="TOML file with a [glossaries.<name>] table")
    register.set_defaults(handler=_run_glossary_register)

    listing = glossary_commands.add_parser("list", help="List registered glossaries")
    listing.set_defaults(handler=_run_glossary_list)

    delete = glossary_commands.add_parser("delete", help="Delete a registered glossary")
    delete.add_argument("glossary_id", help="Glossary id")
    delete.set_defaults(handler=_run_glossary_delete)

    usage = commands.add_parser("usage", help="Show the character usage of the API key")
    usage.set_defaults(handler=_run_usage)
    return parser


def configure_logging(verbosity: int) -> None:
    if verbosity:
        level = logging.INFO if verbosity == 1 else logging.DEBUG
    else:
        level = logging.getLevelName(CMARKTRANS_LOG_LEVEL.upper() or "WARNING")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


async def _run_translate(args: argparse.Namespace, settings: Settings) -> int:
    options = TranslationOptions(
        source=Language.parse(args.source),
        target=Language.parse(args.target),
        formality=Formality.parse(args.formality),
        project=args.project,
    )
    pairs = discover_files(
        args.input,
        args.output,
        extensions=settings.extensions_for(args.project),
        max_depth=args.max_depth,
    )
    if not pairs:
        logger.warning("No documents found in %s", args.input)
        return 0

    async with DeeplClient(settings) as client:
        translator = DocumentTranslator(client, settings, options)
        results = await translator.translate_files(pairs)

    failed = 0
    for result in results:
        if result.ok:
            logger.info("Translated %s -> %s", result.source, result.destination)
        else:
            failed += 1
            logger.error("Failed to translate %s: %s", result.source, result.error)
    print(f"Translated {len(results) - failed} of {len(results)} file(s)")
    return 1 if failed else 0


async def _run_glossary_register(args: argparse.Namespace, settings: Settings) -> int:
    entries = read_glossary(args.name, args.file)
    async with DeeplClient(settings) as client:
        glossary = await client.register_glossary(
            args.name, Language.parse(args.source), Language.parse(args.target), entries
        )
    print(f"Registered glossary {glossary.name}: {glossary.glossary_id} ({glossary.entry_count} entries)")
    return 0


async def _run_glossary_list(args: argparse.Namespace, settings: Settings) -> int:
    async with DeeplClient(settings) as client:
        glossaries = await client.list_glossaries()
    for glossary in glossaries:
        print(
            f"{glossary.glossary_id}\t{glossary.name}\t"
            f"{glossary.source_lang}->{glossary.target_lang}\t{glossary.entry_count}"
        )
    return 0


async def _run_glossary_delete(args: argparse.Namespace, settings: Settings) -> int:
    async with DeeplClient(settings) as client:
        await client.remove_glossary(args.glossary_id)
    print(f"Deleted glossary {args.glossary_id}")
    return 0


async def _run_usage(args: argparse.Namespace, settings: Settings) -> int:
    async with DeeplClient(settings) as client:
        usage = await client.get_usage()
    print(f"{usage.character_count}/{usage.character_limit} characters used")
    return 0
