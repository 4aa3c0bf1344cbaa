"""
Context assembler.

Builds the single prompt string sent to the generative model from the
document summary, retrieved chunks and recent conversation turns. All capture
and user text is markdown-escaped so it renders as literal text downstream:
control characters get a backslash and [text](url) links get their URL
wrapped in angle brackets.

Dependencies: linkmeld.core.rag.prompts, linkmeld.models.conversation
System role: RAG prompt assembly with markdown-injection escaping
"""

import re
from collections.abc import Sequence

from linkmeld.core.rag.prompts import CONVERSATION_PROMPT
from linkmeld.models.conversation import ConversationTurn, latest_user_message

RETRIEVAL_SEPARATOR = "\n---\n"
NO_CONTEXT_FOUND = "No specific relevant information found in this document for your query."
NO_SUMMARY = "No summary available."

DEFAULT_SUMMARY_CHARS = 1500
DEFAULT_WINDOW = 6

MARKDOWN_SPECIAL = re.compile(r"([*_\[\]()~`>#+=|{}.!\\-])")
MARKDOWN_LINK = re.compile(r"\[([^\]\n]*)\]\(([^)\s]*)\)")


def _escape_plain(text: str) -> str:
    return MARKDOWN_SPECIAL.sub(r"\\\1", text)


def _bracket_url(url: str) -> str:
    return url.replace("<", "%3C").replace(">", "%3E")


def escape_markdown(text: str) -> str:
    """
    Escape markdown control characters and neutralize links.

    Args:
        text: Untrusted text

    Returns:
        str: Text that renders literally, e.g. "*bold*" -> "\\*bold\\*" and
            "[a](http://x)" -> "\\[a\\]\\(<http://x>\\)"
    """
    if not text:
        return ""

    parts: list[str] = []
    position = 0
    for match in MARKDOWN_LINK.finditer(text):
        parts.append(_escape_plain(text[position:match.start()]))
        label, url = match.group(1), match.group(2)
        parts.append(rf"\[{_escape_plain(label)}\]\(<{_bracket_url(url)}>\)")
        position = match.end()
    parts.append(_escape_plain(text[position:]))
    return "".join(parts)


def join_retrieved_texts(texts: Sequence[str]) -> str:
    """Join retrieved chunk texts, or return the nothing-found sentinel."""
    non_empty = [text for text in texts if text]
    if not non_empty:
        return NO_CONTEXT_FOUND
    return RETRIEVAL_SEPARATOR.join(non_empty)


def render_turns(turns: Sequence[ConversationTurn], window: int = DEFAULT_WINDOW) -> str:
    """Render the last `window` turns as escaped "ROLE: content" lines."""
    recent = list(turns)[-window:] if window > 0 else []
    return "\n".join(
        f"{turn.role.value.upper()}: {escape_markdown(turn.content)}" for turn in recent
    )


def build_prompt(
    user_name: str,
    document_summary: str | None,
    conversation_turns: Sequence[ConversationTurn],
    retrieved_context: str,
    *,
    summary_chars: int = DEFAULT_SUMMARY_CHARS,
    window: int = DEFAULT_WINDOW,
) -> str:
    """
    Build the grounded conversation prompt.

    Args:
        user_name: Display name of the user
        document_summary: Stored AI summary of the capture (may be empty)
        conversation_turns: Conversation so far, oldest first
        retrieved_context: Joined retrieved chunks or the sentinel
        summary_chars: Summary length cap applied before escaping
        window: Number of recent turns to include

    Returns:
        str: Prompt text for a single user-role message
    """
    summary = (document_summary or "").strip()[:summary_chars]
    return CONVERSATION_PROMPT.format(
        user_name=escape_markdown(user_name or "the user"),
        document_summary=escape_markdown(summary) if summary else NO_SUMMARY,
        retrieved_context=escape_markdown(retrieved_context),
        conversation=render_turns(conversation_turns, window),
        latest_message=latest_user_message(list(conversation_turns)),
    )
