"""
Test suite for the context assembler.

Covers markdown escaping, retrieved-context joining and prompt layout.

System role: Verification of RAG prompt assembly
"""

from linkmeld.core.rag.context_assembler import (
    NO_CONTEXT_FOUND,
    NO_SUMMARY,
    RETRIEVAL_SEPARATOR,
    build_prompt,
    escape_markdown,
    join_retrieved_texts,
    render_turns,
)
from linkmeld.models.conversation import ConversationTurn, TurnRole


def _turns(*pairs: tuple[str, str]) -> list[ConversationTurn]:
    return [ConversationTurn(role=TurnRole(role), content=content) for role, content in pairs]


# ============================================================================
# escape_markdown
# ============================================================================


class TestEscapeMarkdown:
    """Test suite for escape_markdown."""

    def test_emphasis_should_be_escaped(self) -> None:
        """Test emphasis markers get a backslash."""
        assert escape_markdown("*bold* and _it_") == r"\*bold\* and \_it\_"

    def test_link_should_be_neutralized(self) -> None:
        """Test [text](url) becomes an escaped label with a bracketed URL."""
        assert escape_markdown("[a](http://x.com)") == r"\[a\]\(<http://x.com>\)"

    def test_text_around_link_should_be_escaped(self) -> None:
        """Test characters outside the link are escaped normally."""
        assert escape_markdown("see [docs](https://d.io) now!") == (
            r"see \[docs\]\(<https://d.io>\) now\!"
        )

    def test_angle_brackets_in_url_should_be_encoded(self) -> None:
        """Test < and > inside a link URL cannot close the bracket."""
        assert escape_markdown("[a](http://x/<b>)") == r"\[a\]\(<http://x/%3Cb%3E>\)"

    def test_headings_and_code_should_be_escaped(self) -> None:
        assert escape_markdown("# Title `code`") == r"\# Title \`code\`"

    def test_backslash_should_be_escaped(self) -> None:
        assert escape_markdown("a\\b") == "a\\\\b"

    def test_empty_text_should_stay_empty(self) -> None:
        assert escape_markdown("") == ""


# ============================================================================
# Retrieved context and turns
# ============================================================================


class TestJoinRetrievedTexts:
    def test_no_results_should_use_sentinel(self) -> None:
        """Test an empty retrieval yields the nothing-found sentinel."""
        assert join_retrieved_texts([]) == NO_CONTEXT_FOUND
        assert join_retrieved_texts(["", ""]) == NO_CONTEXT_FOUND

    def test_results_should_be_joined_with_separator(self) -> None:
        """Test chunk texts are joined in rank order, skipping empties."""
        assert join_retrieved_texts(["first", "", "second"]) == f"first{RETRIEVAL_SEPARATOR}second"


class TestRenderTurns:
    def test_only_recent_window_should_be_rendered(self) -> None:
        """Test older turns fall outside the window."""
        turns = _turns(*[("user" if i % 2 == 0 else "assistant", f"turn {i}") for i in range(8)])

        rendered = render_turns(turns, window=6).splitlines()

        assert len(rendered) == 6
        assert rendered[0] == "USER: turn 2"
        assert rendered[-1] == "ASSISTANT: turn 7"

    def test_turn_content_should_be_escaped(self) -> None:
        assert render_turns(_turns(("user", "Is *this* real?"))) == r"USER: Is \*this\* real?"


# ============================================================================
# build_prompt
# ============================================================================


class TestBuildPrompt:
    """Test suite for build_prompt."""

    def test_prompt_should_contain_all_sections(self) -> None:
        """Test summary, context, conversation and latest question appear in the prompt."""
        turns = _turns(("user", "Hi"), ("assistant", "Hello"), ("user", "What about *foxes*?"))

        prompt = build_prompt("Ada", "A document about foxes", turns, "Foxes live in dens")

        assert "helping Ada" in prompt
        assert "A document about foxes" in prompt
        assert "Foxes live in dens" in prompt
        assert "USER: Hi\nASSISTANT: Hello\n" in prompt
        assert r"USER: What about \*foxes\*?" in prompt
        assert prompt.rstrip().endswith("What about *foxes*?")

    def test_summary_should_be_capped_before_escaping(self) -> None:
        """Test only the first summary_chars characters of the summary are used."""
        summary = "s" * 2000

        prompt = build_prompt("Ada", summary, _turns(("user", "q")), "ctx", summary_chars=1500)

        assert "s" * 1500 in prompt
        assert "s" * 1501 not in prompt

    def test_missing_summary_should_use_placeholder(self) -> None:
        prompt = build_prompt("Ada", None, _turns(("user", "q")), "ctx")

        assert NO_SUMMARY in prompt

    def test_injected_link_in_context_should_be_neutralized(self) -> None:
        """Test links planted in captured text cannot render as links."""
        prompt = build_prompt(
            "Ada",
            "summary",
            _turns(("user", "q")),
            "Click [here](http://evil.example)",
        )

        assert "[here](http://evil.example)" not in prompt
        assert r"\[here\]\(<http://evil.example>\)" in prompt

    def test_sentinel_context_should_be_rendered(self) -> None:
        prompt = build_prompt("Ada", "summary", _turns(("user", "q")), NO_CONTEXT_FOUND)

        assert escape_markdown(NO_CONTEXT_FOUND) in prompt
