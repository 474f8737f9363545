"""Markdown + LaTeX rendering for question and option text.

Math is left as ``$...$`` / ``$$...$$`` in the HTML output and typeset by
MathJax in the browser, so stored quiz text stays plain markdown.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from markdown_it import MarkdownIt

from quizboard.core.models import QuizQuestion


@dataclass(slots=True)
class MarkdownMathRenderer:
    """Converts markdown-with-math into HTML fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_fragment(self, markdown_text: str) -> str:
        """Render a block of markdown, e.g. a question body."""
        sanitized = markdown_text.strip()
        if not sanitized:
            return "<p><em>No content provided.</em></p>"
        return self._markdown.render(sanitized)

    def render_inline(self, markdown_text: str) -> str:
        """Render a single line without a wrapping paragraph, e.g. an option label."""
        return self._markdown.renderInline(markdown_text.strip())

    def render_question(self, question: QuizQuestion) -> dict[str, object]:
        return {
            "question_html": self.render_fragment(question.text),
            "options_html": [self.render_inline(option.text) for option in question.options],
        }


renderer = MarkdownMathRenderer()
# MarkdownIt is safe to share for read-only renders.
