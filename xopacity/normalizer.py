"""
Argument normalizer.

Turns a free-form argument vector into a CanonicalRequest in three passes:

1. classify: rewrite long options to their short form and label every
   token as a flag bundle, an option value, a bare opacity operand or a
   stray positional, tracking which flags consume the following token.
2. rewrite: insert ``-o`` before every bare opacity operand so the
   stream only contains canonical short options.
3. parse: walk the canonical stream against the fixed short-option
   grammar, recording everything on a RequestBuilder.

A single bare opacity token ("xopacity 75") short-circuits all passes.
"""

import logging
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

from .errors import OpacityError, ParseError
from .models import Action, CanonicalRequest, OpacityOperand, SelectionMode

logger = logging.getLogger(__name__)

# long name -> (short flag, takes value)
LONG_OPTIONS: Dict[str, Tuple[str, bool]] = {
    "help": ("h", False),
    "opacity": ("o", True),
    "get": ("g", False),
    "delete": ("d", False),
    "toggle": ("t", False),
    "reset": ("r", False),
    "select": ("s", False),
    "current": ("c", False),
    "name": ("n", True),
    "window": ("w", True),
}

SHORT_OPTIONS = frozenset("hodtrgsnwc")
VALUE_OPTIONS = frozenset("own")

ACTION_FLAGS = {
    "g": Action.GET,
    "d": Action.DELETE,
    "t": Action.TOGGLE,
    "r": Action.RESET,
}

FocusLookup = Callable[[], int]


class Token(NamedTuple):
    kind: str  # "flags", "value", "operand" or "positional"
    text: str


class RequestBuilder:
    """Mutable state accumulated while walking the canonical options."""

    def __init__(self, focus_lookup: Optional[FocusLookup] = None):
        self.focus_lookup = focus_lookup
        self.action = Action.SET
        self.mode = SelectionMode.INTERACTIVE
        self.window_name: Optional[str] = None
        self.window_id: Optional[str] = None
        self.opacity: Optional[OpacityOperand] = None
        self.show_help = False

    def set_action(self, action: Action) -> None:
        self.action = action

    def set_opacity(self, text: str) -> None:
        try:
            self.opacity = OpacityOperand.parse(text)
        except ValueError:
            raise ParseError(f"invalid opacity value: {text!r}", option="-o")

    def select_interactive(self) -> None:
        self.mode = SelectionMode.INTERACTIVE
        self.window_id = None
        self.window_name = None

    def select_current(self) -> None:
        self.mode = SelectionMode.CURRENT
        self.window_name = None
        self.window_id = None
        if self.focus_lookup is None:
            return
        # Left unresolved on failure; the resolver queries again when a
        # window is actually needed (not for -h or -r)
        try:
            self.window_id = hex(self.focus_lookup())
        except OpacityError as e:
            logger.debug(f"Focused window lookup deferred: {e}")
            return
        logger.debug(f"Focused window resolved at parse time: {self.window_id}")

    def select_name(self, name: str) -> None:
        self.mode = SelectionMode.NAME
        self.window_name = name
        self.window_id = None

    def select_id(self, window_id: str) -> None:
        self.mode = SelectionMode.ID
        self.window_id = window_id
        self.window_name = None

    def apply(self, flag: str, value: Optional[str] = None) -> None:
        """Record one short option."""
        if flag in ACTION_FLAGS:
            self.set_action(ACTION_FLAGS[flag])
        elif flag == "o":
            self.set_opacity(value)
        elif flag == "s":
            self.select_interactive()
        elif flag == "c":
            self.select_current()
        elif flag == "n":
            self.select_name(value)
        elif flag == "w":
            self.select_id(value)
        elif flag == "h":
            self.show_help = True
        else:
            raise ParseError(f"illegal option -- {flag}", option=f"-{flag}")

    def build(self) -> CanonicalRequest:
        return CanonicalRequest(
            action=self.action,
            mode=self.mode,
            window_name=self.window_name,
            window_id=self.window_id,
            opacity=self.opacity,
            show_help=self.show_help,
        )


def _bundle_needs_value(bundle: str) -> Optional[str]:
    """
    Return the flag that consumes the next token, if any.

    In ``-cgo`` the trailing ``o`` takes the next token; in ``-o50`` the
    value is attached and nothing is consumed.
    """
    for index, flag in enumerate(bundle):
        if flag in VALUE_OPTIONS:
            return flag if index == len(bundle) - 1 else None
    return None


def _expand_long_option(token: str, remaining: int) -> Tuple[List[Token], Optional[str]]:
    name, has_value, value = token[2:].partition("=")
    if name not in LONG_OPTIONS:
        raise ParseError(f"illegal option -- {token}", option=token)

    short, takes_value = LONG_OPTIONS[name]
    flag = Token("flags", f"-{short}")

    if has_value:
        if not takes_value:
            raise ParseError(f"option '--{name}' doesn't allow an argument", option=f"--{name}")
        if not value:
            raise ParseError(f"option '--{name}' requires an argument", option=f"--{name}")
        return [flag, Token("value", value)], None

    if takes_value:
        if remaining == 0:
            raise ParseError(f"option '--{name}' requires an argument", option=f"--{name}")
        return [flag], short
    return [flag], None


def classify(tokens: Sequence[str]) -> List[Token]:
    """Rewrite long options and label each token."""
    classified: List[Token] = []
    pending: Optional[str] = None

    for position, token in enumerate(tokens):
        if pending is not None:
            classified.append(Token("value", token))
            pending = None
        elif token.startswith("--"):
            expanded, pending = _expand_long_option(token, len(tokens) - position - 1)
            classified.extend(expanded)
        elif OpacityOperand.matches(token):
            classified.append(Token("operand", token))
        elif token.startswith("-") and len(token) > 1:
            classified.append(Token("flags", token))
            pending = _bundle_needs_value(token[1:])
        else:
            classified.append(Token("positional", token))

    return classified


def rewrite(classified: Sequence[Token]) -> List[str]:
    """Flatten classified tokens, tagging bare operands with -o."""
    canonical: List[str] = []
    for token in classified:
        if token.kind == "operand":
            canonical.append("-o")
        canonical.append(token.text)
    return canonical


def parse_canonical(tokens: Sequence[str], focus_lookup: Optional[FocusLookup] = None) -> CanonicalRequest:
    """Parse a canonical short-option stream (-h -o: -d -t -r -g -s -n: -w: -c)."""
    builder = RequestBuilder(focus_lookup)
    index = 0

    while index < len(tokens):
        token = tokens[index]
        index += 1

        if not token.startswith("-") or token == "-":
            raise ParseError(f"unexpected argument: {token!r}")

        bundle = token[1:]
        for position, flag in enumerate(bundle):
            if flag not in SHORT_OPTIONS:
                raise ParseError(f"illegal option -- {flag}", option=f"-{flag}")

            if flag == "h":
                builder.apply(flag)
                return builder.build()

            if flag in VALUE_OPTIONS:
                value = bundle[position + 1:]
                if not value:
                    if index >= len(tokens):
                        raise ParseError(f"option requires an argument -- {flag}", option=f"-{flag}")
                    value = tokens[index]
                    index += 1
                builder.apply(flag, value)
                break

            builder.apply(flag)

    return builder.build()


def normalize(tokens: Sequence[str], focus_lookup: Optional[FocusLookup] = None) -> CanonicalRequest:
    """
    Reduce an argument vector to a CanonicalRequest.

    Args:
        tokens: Raw arguments (without the program name)
        focus_lookup: Returns the focused window id; called when -c is
            parsed. Without it the CURRENT mode is left unresolved.

    Returns:
        CanonicalRequest

    Raises:
        ParseError: Unknown options, missing option values, stray arguments
    """
    tokens = list(tokens)

    if len(tokens) == 1 and OpacityOperand.matches(tokens[0]):
        return CanonicalRequest(
            action=Action.SET,
            mode=SelectionMode.INTERACTIVE,
            opacity=OpacityOperand.parse(tokens[0]),
        )

    canonical = rewrite(classify(tokens))
    logger.debug(f"Normalized arguments: {tokens} -> {canonical}")
    return parse_canonical(canonical, focus_lookup)
