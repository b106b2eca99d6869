import re
from typing import NamedTuple, Optional, Tuple


class UsernameRule(NamedTuple):
    name: str
    pattern: re.Pattern


# Ordered from most to least confident; the first rule that matches wins.
# The link rule runs in ASCII mode so \b treats non-ASCII letters as boundaries:
# "github.com/jöhn" gives "j".
RULES: Tuple[UsernameRule, ...] = (
    # https://github.com/username, www.github.com/username, github.com/username
    UsernameRule("link", re.compile(r"(?:https?://)?(?:www\.)?github\.com/(?P<user>[a-z0-9-]+)(?:\b|/)", re.I | re.A)),
    # "GitHub: username", "Github - username"
    UsernameRule("label", re.compile(r"github\s*[:\-]\s*(?P<user>[a-z0-9-]+)", re.I)),
    # an @username after the word github on the same line
    UsernameRule("mention", re.compile(r"github[^\n\r@]*@(?P<user>[a-z0-9-]+)", re.I)),
)


def detect_username_with_rule(text: Optional[str]) -> Optional[Tuple[str, str]]:
    """Return (login, rule name) for the first rule that matches, else None."""
    if not text:
        return None
    lower = text.lower()
    for rule in RULES:
        m = rule.pattern.search(lower)
        if m and m.group("user"):
            return m.group("user"), rule.name
    return None


def detect_username(text: Optional[str]) -> Optional[str]:
    """Find a GitHub login in free text. Purely syntactic; the login is lowercased."""
    hit = detect_username_with_rule(text)
    return hit[0] if hit else None


def normalize_username(value: Optional[str]) -> Optional[str]:
    """Clean a manually entered handle: trim and drop one leading '@'."""
    v = (value or "").strip()
    if v.startswith("@"):
        v = v[1:]
    return v or None


_LOGIN = re.compile(r"[a-z0-9-]+", re.I | re.A)


def is_valid_username(value: Optional[str]) -> bool:
    """True for strings made only of ASCII letters, digits and hyphens."""
    return bool(value) and _LOGIN.fullmatch(value) is not None
