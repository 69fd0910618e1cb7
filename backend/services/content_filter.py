import re

# Chat is not moderated, so these are masked on the way in
BLOCKED_WORDS: set[str] = {
    "fuck", "shit", "asshole", "bitch", "bastard", "cunt", "dick",
    "slut", "whore", "retard", "faggot", "nigger", "nigga",
}

_BLOCKED_PATTERNS: list[re.Pattern[str]] = [
    re.compile(rf"\b{re.escape(w)}\w*\b", re.IGNORECASE)
    for w in sorted(BLOCKED_WORDS)
]


def _mask(match: re.Match) -> str:
    return "*" * len(match.group(0))


def filter_message(message: str) -> str:
    """Replace blocked words, and words starting with them, by asterisks of the same length"""
    filtered = message
    for pattern in _BLOCKED_PATTERNS:
        filtered = pattern.sub(_mask, filtered)
    return filtered
