"""Programming language catalog: lookup and resolve-or-create."""

from learnboard.core.logging import get_logger
from learnboard.schemas.language import Language, LanguageCatalog, LanguageCreate
from learnboard.services.tree_store import new_id, slugify

logger = get_logger(__name__)

LANGUAGE_COLORS: dict[str, str] = {
    "python": "#3776AB",
    "javascript": "#F7DF1E",
    "typescript": "#3178C6",
    "php": "#777BB4",
}
DEFAULT_LANGUAGE_COLOR = "#6366F1"


def language_color(name: str) -> str:
    """Deterministic color for a language name."""
    return LANGUAGE_COLORS.get(name.strip().lower(), DEFAULT_LANGUAGE_COLOR)


def list_languages(catalog: LanguageCatalog) -> list[Language]:
    return sorted(catalog.languages.values(), key=lambda language: language.name.lower())


def get_language(catalog: LanguageCatalog, language_id: str) -> Language | None:
    return catalog.languages.get(language_id)


def find_language_by_name(catalog: LanguageCatalog, name: str) -> Language | None:
    """Case-insensitive name match."""
    wanted = name.strip().lower()
    return next((lang for lang in catalog.languages.values() if lang.name.lower() == wanted), None)


def add_language(
    catalog: LanguageCatalog,
    data: LanguageCreate,
    language_id: str | None = None,
) -> Language:
    """Create a language entry and return it directly."""
    language = Language(
        id=language_id or new_id(),
        name=data.name,
        slug=slugify(data.name),
        color=data.color or language_color(data.name),
        icon=data.icon if data.icon is not None else data.name.lower(),
    )
    catalog.languages[language.id] = language
    logger.info("Language created", language_id=language.id, name=language.name)
    return language


def resolve_language(
    catalog: LanguageCatalog,
    *,
    language_id: str | None = None,
    name: str | None = None,
) -> Language:
    """Find the referenced language, creating it when nothing matches.

    Lookup order: exact id, then case-insensitive name (the given name, or the
    id when no name was given). A created entry keeps the referenced id so the
    fragment's roadmap points at it.
    """
    if language_id and language_id in catalog.languages:
        return catalog.languages[language_id]

    lookup_name = name or language_id
    if not lookup_name:
        raise ValueError("A language id or name is required")

    existing = find_language_by_name(catalog, lookup_name)
    if existing is not None:
        return existing

    return add_language(catalog, LanguageCreate(name=lookup_name), language_id=language_id)
