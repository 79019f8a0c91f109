"""Translation pipeline for CommonMark documents."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from cmarktrans.config import CMARKTRANS_MAX_CONCURRENCY, MAX_TRANSLATE_LENGTH
from cmarktrans.deepl import DeeplClient, Formality, Language
from cmarktrans.exceptions import CmarkTransError, QuotaExceededError
from cmarktrans.file_utils import read_document, write_document
from cmarktrans.frontmatter import join_frontmatter, split_frontmatter, translate_toml
from cmarktrans.ignore_tags import IgnoreList, strip_ignore_markers
from cmarktrans.markup_decoder import cmark_from_markup
from cmarktrans.markup_encoder import DEFAULT_TAG_OPTIONS, markup_from_cmark
from cmarktrans.schemas import Settings

logger = logging.getLogger(__name__)

_MARKDOWN_SUFFIXES = (".md", ".mdx")


@dataclass
class TranslationOptions:
    """Options for document translation.

    Attributes:
        source: Language of the input documents.
        target: Language to translate into.
        formality: Requested formality of the output.
        project: Project whose glossary and ignore phrases apply. Defaults to
            the settings' ``project_name``.
    """

    source: Language
    target: Language
    formality: Formality = Formality.DEFAULT
    project: str | None = None


@dataclass
class FileResult:
    """Outcome of translating one file."""

    source: Path
    destination: Path
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DocumentTranslator:
    """Translate documents with one client, one settings object and one matcher.

    Built once per run and shared by every document task; it holds no
    per-document state.
    """

    def __init__(self, client: DeeplClient, settings: Settings, options: TranslationOptions) -> None:
        self.client = client
        self.settings = settings
        self.options = options
        project = options.project or settings.project_name
        self.ignore_list = IgnoreList(settings.ignore_phrases(project))
        self.glossary_id = settings.glossary_id(options.source.code, options.target.code, project)

    async def check_quota(self, payload: str) -> None:
        """Fail fast when ``payload`` does not fit in the remaining quota.

        Only free-plan keys have a hard character limit, so other keys skip
        the check.

        Raises:
            QuotaExceededError: If the payload is longer than the remaining
                character budget.
        """
        if not self.settings.is_free_api_key:
            return
        usage = await self.client.get_usage()
        limit = usage.character_limit or MAX_TRANSLATE_LENGTH
        remaining = max(0, limit - usage.character_count)
        logger.info("Remaining characters: %d", remaining)
        if len(payload) > remaining:
            raise QuotaExceededError(
                "The number of characters to be translated exceeds the limit. "
                f"{usage.character_count}/{limit} used."
            )

    async def translate_cmark(self, cmark_text: str) -> str:
        """Translate a CommonMark body, keeping its structure."""
        if not cmark_text.strip():
            return ""
        markup = self.ignore_list.apply(markup_from_cmark(cmark_text, wrap_in_root=True))
        logger.debug("Markup: %s", markup)

        await self.check_quota(markup)
        translated = await self.client.translate_markup(
            markup,
            self.options.source,
            self.options.target,
            self.options.formality,
            tag_options=DEFAULT_TAG_OPTIONS,
            glossary_id=self.glossary_id,
        )
        logger.debug("Translated markup: %s", translated)
        return cmark_from_markup(strip_ignore_markers(translated), unwrap_root=True)

    async def translate_strings(self, texts: list[str]) -> list[str]:
        await self.check_quota("".join(texts))
        return await self.client.translate_strings(
            texts,
            self.options.source,
            self.options.target,
            self.options.formality,
            glossary_id=self.glossary_id,
        )

    async def translate_document(self, text: str, *, translate_frontmatter: bool = True) -> str:
        """Translate a whole file's text, front matter included.

        Args:
            text: The file contents.
            translate_frontmatter: If False, front matter is copied unchanged.

        Returns:
            The text to write: front matter, translated body and, when
            ``backup_original_text`` is set, the original body in a comment.
        """
        document = split_frontmatter(text)
        frontmatter = document.frontmatter
        if frontmatter is not None and translate_frontmatter:
            frontmatter = await translate_toml(frontmatter, self.translate_strings)

        body = await self.translate_cmark(document.body)
        output = join_frontmatter(document.delimiter, frontmatter, body)

        if self.settings.backup_original_text:
            # "-->" inside the original would close the comment early
            original = document.body.replace("-->", "-!->")
            output += f"\n<!---\n{original}\n-->\n"
        return output

    async def translate_file(self, source: Path, destination: Path) -> None:
        logger.debug("Start translating %s", source)
        text = await read_document(source)
        is_markdown = source.suffix.lower() in _MARKDOWN_SUFFIXES
        output = await self.translate_document(text, translate_frontmatter=not is_markdown)
        await write_document(destination, output)
        logger.debug("Wrote %s", destination)

    async def translate_files(
        self,
        pairs: Iterable[tuple[Path, Path]],
        *,
        max_concurrency: int = CMARKTRANS_MAX_CONCURRENCY,
    ) -> list[FileResult]:
        """Translate files concurrently; one failure never stops the others."""
        semaphore = asyncio.Semaphore(max(1, max_concurrency))

        async def run(source: Path, destination: Path) -> FileResult:
            async with semaphore:
                try:
                    await self.translate_file(source, destination)
                except (CmarkTransError, OSError) as exc:
                    return FileResult(source=source, destination=destination, error=exc)
            return FileResult(source=source, destination=destination)

        return list(await asyncio.gather(*(run(source, destination) for source, destination in pairs)))
