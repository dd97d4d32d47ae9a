"""Tokenizer and structural grouper for mish command lines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .exceptions import ParseError


class TokenKind(Enum):
    WORD = "word"
    PIPE = "|"
    PARALLEL = "&"
    REDIRECT_OUT = ">"
    REDIRECT_APPEND = ">>"
    REDIRECT_IN = "<"


REDIRECT_KINDS = frozenset(
    {TokenKind.REDIRECT_OUT, TokenKind.REDIRECT_APPEND, TokenKind.REDIRECT_IN}
)
_OPERATOR_CHARS = {"|": TokenKind.PIPE, "&": TokenKind.PARALLEL}
_REDIRECT_WORDS = {kind.value: kind for kind in REDIRECT_KINDS}


@dataclass(frozen=True)
class Redirection:
    kind: TokenKind
    filename: str


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    redirection: Redirection | None = None


@dataclass
class Stage:
    argv: list[str] = field(default_factory=list)
    redirections: list[Redirection] = field(default_factory=list)
    piped_from_predecessor: bool = False
    runs_parallel: bool = False
    group_id: int = 0

    @property
    def name(self) -> str:
        return self.argv[0]


def _split_chunk(chunk: str) -> list[Token]:
    if chunk in _REDIRECT_WORDS:
        return [Token(_REDIRECT_WORDS[chunk], chunk)]
    pieces: list[Token] = []
    word = ""
    for char in chunk:
        kind = _OPERATOR_CHARS.get(char)
        if kind is None:
            word += char
            continue
        if word:
            pieces.append(Token(TokenKind.WORD, word))
            word = ""
        pieces.append(Token(kind, char))
    if word:
        pieces.append(Token(TokenKind.WORD, word))
    return pieces


def tokenize(line: str) -> list[Token]:
    """Split ``line`` into word and operator tokens.

    ``|`` and ``&`` are separated even when glued to a word. Redirection
    operators must stand alone and absorb the following word as their target.
    """
    raw: list[Token] = []
    for chunk in line.split():
        raw.extend(_split_chunk(chunk))

    tokens: list[Token] = []
    idx = 0
    while idx < len(raw):
        token = raw[idx]
        if token.kind in REDIRECT_KINDS:
            if idx + 1 >= len(raw) or raw[idx + 1].kind is not TokenKind.WORD:
                raise ParseError(f"Missing redirection target after {token.text}")
            redirection = Redirection(token.kind, raw[idx + 1].text)
            tokens.append(Token(token.kind, token.text, redirection))
            idx += 2
            continue
        tokens.append(token)
        idx += 1
    return tokens


class _Grouper:
    """Single forward pass over the token stream.

    ``&`` separates parallel groups. When a line has at least one separating
    ``&``, its last group is detached as a whole; an earlier group is detached
    only when it is a single stage, while an earlier multi-stage pipeline is
    waited for as a unit. A stage closed by ``&|`` is always detached and
    heads the pipeline that follows it.
    """

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.stages: list[Stage] = []
        self.current = Stage()
        self.pending_pipe = False
        self.group_id = 0
        self.separated = False

    def close(self, *, runs_parallel: bool = False) -> None:
        self.current.piped_from_predecessor = self.pending_pipe
        self.current.runs_parallel = runs_parallel
        self.current.group_id = self.group_id
        self.stages.append(self.current)
        self.current = Stage()
        self.pending_pipe = False

    def group(self, group_id: int) -> list[Stage]:
        return [stage for stage in self.stages if stage.group_id == group_id]

    def end_group(self) -> None:
        members = self.group(self.group_id)
        if len(members) == 1:
            members[0].runs_parallel = True
        self.group_id += 1
        self.separated = True

    def run(self) -> list[Stage]:
        idx = 0
        last = len(self.tokens) - 1
        while idx <= last:
            token = self.tokens[idx]
            if token.kind is TokenKind.PIPE:
                if not self.current.argv:
                    raise ParseError("Missing command before pipe")
                if idx == last:
                    raise ParseError("Missing command after pipe")
                self.close()
                self.pending_pipe = True
            elif token.kind is TokenKind.PARALLEL:
                if not self.current.argv:
                    raise ParseError("Missing command before parallel operator")
                follower = self.tokens[idx + 1] if idx < last else None
                if follower is not None and follower.kind is TokenKind.PIPE:
                    # "&|": the detached stage heads a pipeline.
                    if idx + 1 == last:
                        raise ParseError("Missing command after pipe")
                    self.close(runs_parallel=True)
                    self.pending_pipe = True
                    idx += 1
                else:
                    self.close()
                    self.end_group()
            elif token.redirection is not None:
                self.current.redirections.append(token.redirection)
            else:
                self.current.argv.append(token.text)
            idx += 1

        if self.current.argv:
            self.close()
        elif self.current.redirections:
            raise ParseError("Redirection without command is not supported")

        if self.separated:
            final = self.group(self.group_id) or self.group(self.group_id - 1)
            for stage in final:
                stage.runs_parallel = True
        return self.stages


def group_stages(tokens: list[Token]) -> list[Stage]:
    """Group tokens into stages, validating operator placement.

    A line consisting of the single word ``exit`` terminates the process.
    """
    if tokens and tokens[0].kind is TokenKind.WORD and tokens[0].text == "exit":
        if len(tokens) > 1:
            raise ParseError("exit: too many arguments")
        raise SystemExit(0)
    return _Grouper(tokens).run()


def parse_line(line: str) -> list[Stage]:
    return group_stages(tokenize(line))


__all__ = [
    "TokenKind",
    "Token",
    "Redirection",
    "Stage",
    "tokenize",
    "group_stages",
    "parse_line",
]
