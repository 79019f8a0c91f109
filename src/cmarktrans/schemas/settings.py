"""Settings model read from ``deepl.toml``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_EXTENSIONS = ("md",)


class Settings(BaseModel):
    """Read-only view of the translation settings.

    Attributes:
        api_key: DeepL authentication key. Keys ending in ``:fx`` belong to
            the free plan.
        project_name: Project whose glossary and ignore phrases are used.
        backup_original_text: If True, the original body is kept as an HTML
            comment after the translated body.
        target_extensions: File extensions to translate, per project.
        glossaries: Glossary ids per project, keyed by ``{source}_{target}``
            language codes (e.g. ``en_ja``).
        ignores: Phrases that must never be translated, per project.
    """

    model_config = ConfigDict(frozen=True)

    api_key: str
    project_name: str = ""
    backup_original_text: bool = False
    target_extensions: dict[str, list[str]] = Field(default_factory=dict)
    glossaries: dict[str, dict[str, str]] = Field(default_factory=dict)
    ignores: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that ``api_key`` is not empty."""
        if not v.strip():
            raise ValueError("api_key must not be empty")
        return v.strip()

    @property
    def is_free_api_key(self) -> bool:
        return self.api_key.endswith(":fx")

    def ignore_phrases(self, project: str | None = None) -> list[str]:
        return list(self.ignores.get(project or self.project_name, []))

    def extensions_for(self, project: str | None = None) -> tuple[str, ...]:
        extensions = self.target_extensions.get(project or self.project_name)
        if not extensions:
            return DEFAULT_EXTENSIONS
        return tuple(extension.lstrip(".").lower() for extension in extensions)

    def glossary_id(self, source: str, target: str, project: str | None = None) -> str | None:
        """Find the glossary id for a language pair.

        The project's own table wins; otherwise the first table that has the
        language pair is used.
        """
        key = f"{source}_{target}"
        project_table = self.glossaries.get(project or self.project_name)
        if project_table and key in project_table:
            return project_table[key]
        for table in self.glossaries.values():
            if key in table:
                return table[key]
        return None
