"""Commit subjects that say nothing about the change."""

USELESS_COMMIT_MESSAGES = (
    "wip",
    "fix",
    "fixes",
    "fixed",
    "update",
    "updates",
    "updated",
    "minor fix",
    "minor fixes",
    "minor changes",
    "small fix",
    "quick fix",
    "changes",
    "change",
    "stuff",
    "things",
    "misc",
    "tmp",
    "temp",
    "test",
    "testing",
    "commit",
    "save",
    "oops",
    "typo",
    "asdf",
    "cleanup",
    "refactor",
    "more",
    "done",
    "work",
    "final",
    "...",
    ".",
)

_USELESS = frozenset(USELESS_COMMIT_MESSAGES)


def is_useless(subject: str) -> bool:
    """Return True if the subject is exactly one of the known useless messages.

    Matching ignores case and surrounding whitespace. An empty subject is
    not useless so repositories without commits are left alone.
    """
    normalized = subject.strip().lower()
    if not normalized:
        return False
    return normalized in _USELESS
