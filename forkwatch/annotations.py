"""Block annotations ("Blocked by #N") in pull request bodies.

forkwatch writes the annotation as a marker line tagged with an HTML
comment, which GitHub does not render:

    Blocked by #7 <!-- forkwatch:blocked-by -->

Tagged lines are rewritten as lines. Untagged "Blocked by #N" text, as
written by hand or by older versions, is rewritten in place: the first
occurrence is pointed at the new pull request and verbatim copies of that
occurrence are dropped; anything else is left as it is.
"""

import re
from typing import List

MARKER_TAG = "<!-- forkwatch:blocked-by -->"

# Tolerates irregular spacing around "by" and "#": "Blocked by#12", "Blocked by  #  12"
BLOCKED_BY_RE = re.compile(r"Blocked[ \t]+by[ \t]*#[ \t]*\d+")

_MARKER_LINE_RE = re.compile(r"[ \t]*" + BLOCKED_BY_RE.pattern + r"[ \t]*" + re.escape(MARKER_TAG) + r"[ \t]*\r?")


def block_annotation(pr_number: int) -> str:
    """Annotation text for a blocking pull request."""
    return f"Blocked by #{pr_number}"


def block_marker_line(pr_number: int) -> str:
    """Tagged marker line carrying the annotation."""
    return f"{block_annotation(pr_number)} {MARKER_TAG}"


def blocked_comment(pr_number: int) -> str:
    """Notification comment posted on a re-linked pull request."""
    return f"This PR is now {block_annotation(pr_number)}."


def find_block_annotations(body: str | None) -> List[str]:
    """Return every annotation occurrence in body, tagged or not, in order."""
    return [m.group(0) for m in BLOCKED_BY_RE.finditer(body or "")]


def _rewrite_marker_lines(body: str, pr_number: int) -> str | None:
    """Rewrite the first tagged line and drop later ones; None if there is
    no tagged line."""
    out: List[str] = []
    seen = False
    for line in body.split("\n"):
        if _MARKER_LINE_RE.fullmatch(line) is None:
            out.append(line)
            continue
        if seen:
            continue
        seen = True
        out.append(block_marker_line(pr_number) + ("\r" if line.endswith("\r") else ""))
    return "\n".join(out) if seen else None


def _rewrite_untagged(body: str, pr_number: int) -> str | None:
    """Replace the first occurrence; strip exact copies of it that follow.

    A copy must not continue with a digit: "#3" does not strip "#34".
    """
    match = BLOCKED_BY_RE.search(body)
    if match is None:
        return None
    duplicate = re.compile(re.escape(match.group(0)) + r"(?!\d)")
    rest = duplicate.sub("", body[match.end() :])
    return body[: match.start()] + block_annotation(pr_number) + rest


def rewrite_block_annotation(body: str | None, pr_number: int) -> str:
    """Return body annotated as blocked by pr_number.

    Tagged marker lines take precedence over untagged text; a body
    without any annotation gets a marker line appended as a new paragraph.
    """
    text = body or ""

    rewritten = _rewrite_marker_lines(text, pr_number)
    if rewritten is not None:
        return rewritten

    rewritten = _rewrite_untagged(text, pr_number)
    if rewritten is not None:
        return rewritten

    if not text.strip():
        return block_marker_line(pr_number)
    return f"{text}\n\n{block_marker_line(pr_number)}"
