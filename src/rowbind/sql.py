"""
Placeholder syntax for generated and caller-written SQL.

Generated statements take their placeholder syntax from a DB-API paramstyle
name so the generator stays backend agnostic:

    qmark    ?         (sqlite3)
    format   %s        (psycopg)
    numeric  :1, :2
    dollar   $1, $2

Caller-written clauses may use either ``?`` or ``%s``; `standardize_placeholders`
rewrites them to the connection's style without touching string literals.
"""
import re
from dataclasses import dataclass
from enum import Enum, auto

__all__ = [
    'PARAMSTYLES',
    'placeholder',
    'make_placeholders',
    'standardize_placeholders',
    'count_placeholders',
]

PARAMSTYLES = ('qmark', 'format', 'numeric', 'dollar')


class TokenType(Enum):
    """Token types identified during SQL scanning."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    POSITIONAL_PH = auto()      # %s or ?


@dataclass(slots=True)
class Token:
    """Token from SQL scanning."""
    type: TokenType
    text: str


# Quoted text is matched first so markers inside it are left alone
_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<percent_s>%s)
    |(?P<qmark>\?)
""", re.VERBOSE)

# Unescaped percent signs in string content
_UNESCAPED_PERCENT = re.compile(r'(?<!%)%(?!%)')


def _validate_paramstyle(paramstyle: str) -> None:
    if paramstyle not in PARAMSTYLES:
        raise ValueError(f'Unknown paramstyle: {paramstyle}. Available: {list(PARAMSTYLES)}')


def placeholder(paramstyle: str, position: int) -> str:
    """Return the placeholder for the 1-based argument ``position``.
    """
    _validate_paramstyle(paramstyle)
    if paramstyle == 'qmark':
        return '?'
    if paramstyle == 'format':
        return '%s'
    if paramstyle == 'numeric':
        return f':{position}'
    return f'${position}'


def make_placeholders(count: int, paramstyle: str = 'qmark', start: int = 1) -> list[str]:
    """Return ``count`` placeholders numbered from ``start``.

    >>> make_placeholders(3)
    ['?', '?', '?']
    >>> make_placeholders(2, 'dollar', start=4)
    ['$4', '$5']
    """
    return [placeholder(paramstyle, start + i) for i in range(count)]


def tokenize_sql(sql: str) -> list[Token]:
    """Split SQL into text, string literal and positional placeholder tokens.
    """
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()
        if start > last_end:
            tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:start]))
        if match.group('string'):
            tokens.append(Token(TokenType.STRING_LITERAL, match.group(0)))
        else:
            tokens.append(Token(TokenType.POSITIONAL_PH, match.group(0)))
        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:]))

    return tokens


def count_placeholders(sql: str) -> int:
    """Count positional placeholders outside string literals.

    >>> count_placeholders("SELECT a FROM t WHERE b=? AND c='?'")
    1
    """
    return sum(1 for t in tokenize_sql(sql) if t.type == TokenType.POSITIONAL_PH)


def _escape_percent_in_literal(literal: str) -> str:
    """Escape unescaped percent signs in string literal."""
    quote = literal[0]
    content = literal[1:-1]
    escaped = _UNESCAPED_PERCENT.sub('%%', content)
    return f'{quote}{escaped}{quote}'


def standardize_placeholders(sql: str, paramstyle: str = 'qmark') -> str:
    """Rewrite ``?`` and ``%s`` markers into ``paramstyle``.

    Numbered styles are numbered in order of appearance. For the ``format``
    style, percent signs inside quoted literals and identifiers are doubled so
    the driver does not read them as placeholders.

    >>> standardize_placeholders('SELECT a FROM t WHERE b=%s')
    'SELECT a FROM t WHERE b=?'
    >>> standardize_placeholders("SELECT a FROM t WHERE b LIKE '%x' AND c=?", 'format')
    "SELECT a FROM t WHERE b LIKE '%%x' AND c=%s"
    """
    _validate_paramstyle(paramstyle)
    if not sql:
        return sql

    result = []
    position = 0
    for token in tokenize_sql(sql):
        if token.type == TokenType.POSITIONAL_PH:
            position += 1
            result.append(placeholder(paramstyle, position))
        elif token.type == TokenType.STRING_LITERAL and paramstyle == 'format':
            # psycopg collapses %% anywhere in the text, identifiers included
            result.append(_escape_percent_in_literal(token.text))
        else:
            result.append(token.text)
    return ''.join(result)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
