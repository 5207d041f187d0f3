from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class LanguageSpec:
    name: str
    extensions: tuple[str, ...]
    # Grammar name in `tree-sitter-languages`; None means the stdlib front end.
    grammar: str | None = None


LANGUAGES: tuple[LanguageSpec, ...] = (
    LanguageSpec("python", (".py", ".pyi")),
    LanguageSpec("javascript", (".js", ".jsx", ".mjs", ".cjs"), "javascript"),
    LanguageSpec("typescript", (".ts", ".tsx", ".mts", ".cts"), "typescript"),
    LanguageSpec("go", (".go",), "go"),
    LanguageSpec("rust", (".rs",), "rust"),
    LanguageSpec("java", (".java",), "java"),
    LanguageSpec("kotlin", (".kt", ".kts"), "kotlin"),
    LanguageSpec("ruby", (".rb",), "ruby"),
    LanguageSpec("php", (".php",), "php"),
    LanguageSpec("c", (".c", ".h"), "c"),
    LanguageSpec("cpp", (".cc", ".cpp", ".cxx", ".hpp", ".hh"), "cpp"),
    LanguageSpec("csharp", (".cs",), "c_sharp"),
)

LANGUAGE_NAMES: tuple[str, ...] = tuple(spec.name for spec in LANGUAGES)

_EXT_TO_SPEC = {ext: spec for spec in LANGUAGES for ext in spec.extensions}


def detect_language(path: Path) -> str | None:
    """
    Best-effort language detection based on file extension.

    Returns the canonical language name from `LANGUAGES` or None if unsupported.
    """

    spec = _EXT_TO_SPEC.get(path.suffix.lower())
    return spec.name if spec is not None else None


def allowed_extensions(enabled_languages: tuple[str, ...]) -> set[str]:
    enabled = {lang.strip().lower() for lang in enabled_languages}
    exts: set[str] = set()
    for spec in LANGUAGES:
        if spec.name in enabled:
            exts.update(spec.extensions)
    return exts


def tree_sitter_language_for_path(path: Path) -> str | None:
    """
    Map a file path to its tree-sitter grammar name.

    Returns None for Python (indexed with `ast`/`tokenize`) and unknown files.
    TSX needs its own grammar.
    """

    suffix = path.suffix.lower()
    spec = _EXT_TO_SPEC.get(suffix)
    if spec is None:
        return None
    if spec.name == "typescript" and suffix == ".tsx":
        return "tsx"
    return spec.grammar
