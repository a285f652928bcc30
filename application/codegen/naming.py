"""Identifier transforms.

Method identifiers use snake_case, type and variant identifiers use UpperCamel.
Both are pure functions of the IR name.
"""
from __future__ import annotations

import keyword
import re
from typing import List


_WORD_RE = re.compile(
    r"""
    [A-Z]+(?=[A-Z][a-z])   # acronym followed by a capitalised word: HTTPServer -> HTTP
    | [A-Z]?[a-z]+[0-9]*   # Capitalised or lower-case word with trailing digits
    | [A-Z]+[0-9]*         # trailing acronym
    | [0-9]+               # bare digits
    """,
    re.VERBOSE,
)

# Members of generated clients; a method named like one of them would shadow it
RESERVED_CLIENT_MEMBERS = frozenset({"client", "set_client", "require_client", "with_callopt"})

# Implicit first parameters of generated methods
RESERVED_ARG_NAMES = frozenset({"self", "cls"})


def split_words(name: str) -> List[str]:
    words: List[str] = []
    for chunk in re.split(r"[^0-9A-Za-z]+", name):
        words.extend(_WORD_RE.findall(chunk))
    return words


def escape_keyword(name: str) -> str:
    if keyword.iskeyword(name):
        return name + "_"
    return name


def to_snake_case(name: str) -> str:
    return "_".join(word.lower() for word in split_words(name))


def to_upper_camel_case(name: str) -> str:
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(name))


def method_ident(name: str) -> str:
    ident = escape_keyword(to_snake_case(name))
    if ident in RESERVED_CLIENT_MEMBERS:
        ident += "_"
    return ident


def arg_ident(name: str) -> str:
    ident = escape_keyword(to_snake_case(name)) or "req"
    if ident in RESERVED_ARG_NAMES:
        ident += "_"
    return ident


def type_ident(name: str) -> str:
    return escape_keyword(to_upper_camel_case(name))


def variant_ident(name: str) -> str:
    # UpperCamel can only hit the None/True/False keywords
    return escape_keyword(to_upper_camel_case(name))
