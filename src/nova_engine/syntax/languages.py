"""Language profiles driving the tokenizer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePath
from types import MappingProxyType
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True, slots=True)
class LanguageProfile:
    """Lexical conventions for one language.

    ``plain`` profiles only separate whitespace from text.
    """

    name: str
    keywords: frozenset[str] = frozenset()
    line_comments: Tuple[str, ...] = ()
    block_comment: Optional[Tuple[str, str]] = None
    quotes: str = ""
    multiline_quotes: str = ""
    triple_quotes: bool = False
    identifier_extras: str = ""
    plain: bool = False

    @property
    def comment_prefix(self) -> str:
        if self.line_comments:
            return self.line_comments[0]
        if self.block_comment:
            return self.block_comment[0]
        return "#"


def _words(text: str) -> frozenset[str]:
    return frozenset(text.split())


_C_FAMILY = _words(
    "auto break case char const continue default do double else enum extern "
    "float for goto if int long register return short signed sizeof static "
    "struct switch typedef union unsigned void volatile while"
)

_JS = _words(
    "async await break case catch class const continue debugger default delete "
    "do else export extends false finally for function if import in instanceof "
    "let new null of return super switch this throw true try typeof undefined "
    "var void while with yield"
)

_PROFILES: Mapping[str, LanguageProfile] = MappingProxyType(
    {
        "plaintext": LanguageProfile("plaintext", plain=True),
        "markdown": LanguageProfile("markdown", plain=True),
        "python": LanguageProfile(
            "python",
            keywords=_words(
                "False None True and as assert async await break class continue "
                "def del elif else except finally for from global if import in "
                "is lambda nonlocal not or pass raise return try while with yield"
            ),
            line_comments=("#",),
            quotes="'\"",
            triple_quotes=True,
        ),
        "rust": LanguageProfile(
            "rust",
            keywords=_words(
                "as async await break const continue crate dyn else enum extern "
                "false fn for if impl in let loop match mod move mut pub ref "
                "return self Self static struct super trait true type unsafe use "
                "where while"
            ),
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes='"',
        ),
        "javascript": LanguageProfile(
            "javascript",
            keywords=_JS,
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes="'\"",
            multiline_quotes="`",
            identifier_extras="$",
        ),
        "typescript": LanguageProfile(
            "typescript",
            keywords=_JS
            | _words("interface type enum implements private public readonly"),
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes="'\"",
            multiline_quotes="`",
            identifier_extras="$",
        ),
        "go": LanguageProfile(
            "go",
            keywords=_words(
                "break case chan const continue default defer else fallthrough "
                "for func go goto if import interface map package range return "
                "select struct switch type var nil true false"
            ),
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes="'\"",
            multiline_quotes="`",
        ),
        "c": LanguageProfile(
            "c",
            keywords=_C_FAMILY,
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes="'\"",
        ),
        "cpp": LanguageProfile(
            "cpp",
            keywords=_C_FAMILY
            | _words(
                "bool catch class delete false friend inline namespace new "
                "nullptr operator private protected public template this throw "
                "true try typename using virtual"
            ),
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes="'\"",
        ),
        "java": LanguageProfile(
            "java",
            keywords=_words(
                "abstract boolean break byte case catch char class continue "
                "default do double else enum extends final finally float for if "
                "implements import instanceof int interface long new null "
                "package private protected public return short static super "
                "switch this throw throws true false try void while"
            ),
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes="'\"",
        ),
        "csharp": LanguageProfile(
            "csharp",
            keywords=_words(
                "abstract bool break case catch class const continue default do "
                "else enum false finally for foreach if in interface internal is "
                "namespace new null override private protected public return "
                "static string struct this throw true try using var virtual void "
                "while"
            ),
            line_comments=("//",),
            block_comment=("/*", "*/"),
            quotes="'\"",
        ),
        "php": LanguageProfile(
            "php",
            keywords=_words(
                "array as break case class const continue default do echo else "
                "elseif extends false for foreach function if include new null "
                "private protected public require return static switch true "
                "use while"
            ),
            line_comments=("//", "#"),
            block_comment=("/*", "*/"),
            quotes="'\"",
            identifier_extras="$",
        ),
        "ruby": LanguageProfile(
            "ruby",
            keywords=_words(
                "begin break case class def do else elsif end ensure false for "
                "if in module next nil not or redo rescue retry return self "
                "super then true undef unless until when while yield"
            ),
            line_comments=("#",),
            quotes="'\"",
        ),
        "bash": LanguageProfile(
            "bash",
            keywords=_words(
                "case do done elif else esac fi for function if in local return "
                "then until while export"
            ),
            line_comments=("#",),
            quotes="'\"",
            identifier_extras="$",
        ),
        "json": LanguageProfile(
            "json", keywords=_words("true false null"), quotes='"'
        ),
        "yaml": LanguageProfile(
            "yaml",
            keywords=_words("true false null yes no on off"),
            line_comments=("#",),
            quotes="'\"",
        ),
        "toml": LanguageProfile(
            "toml",
            keywords=_words("true false"),
            line_comments=("#",),
            quotes="'\"",
            triple_quotes=True,
        ),
        "css": LanguageProfile(
            "css",
            block_comment=("/*", "*/"),
            quotes="'\"",
            identifier_extras="-",
        ),
        "html": LanguageProfile(
            "html", block_comment=("<!--", "-->"), quotes="'\"", identifier_extras="-"
        ),
        "xml": LanguageProfile(
            "xml", block_comment=("<!--", "-->"), quotes="'\"", identifier_extras="-"
        ),
    }
)

_EXTENSIONS: Mapping[str, str] = MappingProxyType(
    {
        "rs": "rust",
        "js": "javascript",
        "mjs": "javascript",
        "ts": "typescript",
        "mts": "typescript",
        "py": "python",
        "rb": "ruby",
        "go": "go",
        "java": "java",
        "c": "c",
        "h": "c",
        "cpp": "cpp",
        "cc": "cpp",
        "cxx": "cpp",
        "hpp": "cpp",
        "cs": "csharp",
        "php": "php",
        "sh": "bash",
        "bash": "bash",
        "zsh": "bash",
        "json": "json",
        "yaml": "yaml",
        "yml": "yaml",
        "toml": "toml",
        "xml": "xml",
        "html": "html",
        "htm": "html",
        "css": "css",
        "md": "markdown",
    }
)


def detect_language(path: str | PurePath) -> str:
    """Map a file name to a language name by extension."""

    suffix = PurePath(path).suffix.lstrip(".").lower()
    return _EXTENSIONS.get(suffix, "plaintext")


def profile_for(language: str) -> LanguageProfile:
    return _PROFILES.get(language.lower(), _PROFILES["plaintext"])


def known_languages() -> tuple[str, ...]:
    return tuple(sorted(_PROFILES))


__all__ = [
    "LanguageProfile",
    "detect_language",
    "known_languages",
    "profile_for",
]
