"""Unit tests for message renderers."""
from rich.console import Console, Group
from rich.markdown import Markdown
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from streamchat.render import ConsoleRenderer, HtmlRenderer
from streamchat.render.base import count_lines, show_line_numbers

SHORT_CODE = "```python\nprint(1)\n```"
LONG_CODE = "```python\n" + "".join(f"x = {i}\n" for i in range(6)) + "```"
FIVE_LINE_CODE = "```py\na\nb\nc\nd\ne\n```"
LONG_SPAN = "Run `l1\nl2\nl3\nl4\nl5\nl6` now"


class TestLineNumbers:
    """Tests for the line number threshold."""

    def test_count_lines(self):
        assert count_lines("a") == 1
        assert count_lines("a\n") == 2
        assert count_lines("a\nb") == 2

    def test_threshold(self):
        assert not show_line_numbers("1\n2\n3\n4\n5")
        assert show_line_numbers("1\n2\n3\n4\n5\n")


class TestHtmlRenderer:
    """Tests for HtmlRenderer."""

    def setup_method(self):
        self.renderer = HtmlRenderer()

    def test_links_open_in_new_context(self):
        html = self.renderer.render_message("See [docs](https://example.com).")
        assert 'href="https://example.com"' in html
        assert 'target="_blank"' in html
        assert 'rel="noopener noreferrer"' in html

    def test_raw_html_is_escaped(self):
        html = self.renderer.render_message("<script>alert(1)</script>")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_tables_are_rendered(self):
        html = self.renderer.render_message("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert "<table>" in html
        assert "<td>1</td>" in html

    def test_code_block_has_language_title(self):
        html = self.renderer.render_message(SHORT_CODE)
        assert '<div class="code-block-title">python</div>' in html
        assert 'class="highlight"' in html

    def test_short_code_has_no_line_numbers(self):
        assert "highlighttable" not in self.renderer.render_message(SHORT_CODE)

    def test_long_code_has_line_numbers(self):
        assert "highlighttable" in self.renderer.render_message(LONG_CODE)

    def test_five_line_block_has_line_numbers(self):
        """Test that the newline closing a block's last line counts as a line."""
        assert "highlighttable" in self.renderer.render_message(FIVE_LINE_CODE)

    def test_long_code_span_becomes_code_block(self):
        html = self.renderer.render_message(LONG_SPAN)
        assert 'class="code-block"' in html
        assert "<code>" not in html
        assert "Run" in html
        assert "l6" in html

    def test_short_code_span_stays_inline(self):
        html = self.renderer.render_message("Use `a\nb` here")
        assert "<code>a b</code>" in html
        assert "code-block" not in html

    def test_unknown_language_falls_back_to_text(self):
        html = self.renderer.render_message("```nosuchlang\nabc\n```")
        assert "nosuchlang" in html
        assert "abc" in html

    def test_pending_indicator(self):
        html = self.renderer.render_message("", is_streaming=True)
        assert "Thinking..." in html
        assert 'class="caret"' not in html

    def test_streaming_adds_caret(self):
        html = self.renderer.render_message("Hel", is_streaming=True)
        assert html.endswith('<span class="caret"></span></div>')

    def test_finished_message_has_no_caret(self):
        assert "caret" not in self.renderer.render_message("Hello")

    def test_open_block_is_marked_streaming(self):
        html = self.renderer.render_message("```js\nconst x", is_streaming=True)
        assert 'class="code-block streaming"' in html

    def test_empty_finished_message(self):
        assert self.renderer.render_message("") == '<div class="message"></div>'

    def test_stylesheet(self):
        assert ".highlight" in self.renderer.stylesheet()


class TestConsoleRenderer:
    """Tests for ConsoleRenderer."""

    def setup_method(self):
        self.renderer = ConsoleRenderer()

    def test_returns_group_per_segment(self):
        output = self.renderer.render_message("Intro\n" + SHORT_CODE + "\nDone")
        assert isinstance(output, Group)
        kinds = [type(part) for part in output.renderables]
        assert kinds == [Markdown, Panel, Markdown]

    def test_code_panel(self):
        (panel,) = self.renderer.render_message(SHORT_CODE).renderables
        assert panel.title == "python"
        assert panel.border_style == "magenta"
        assert isinstance(panel.renderable, Syntax)
        assert panel.renderable.line_numbers is False

    def test_long_code_gets_line_numbers(self):
        (panel,) = self.renderer.render_message(LONG_CODE).renderables
        assert panel.renderable.line_numbers is True

    def test_open_block_border(self):
        parts = self.renderer.render_message("```py\nx = 1", is_streaming=True).renderables
        assert parts[0].border_style == "yellow"
        assert isinstance(parts[-1], Text)

    def test_long_code_span_becomes_panel(self):
        (prose,) = self.renderer.render_message(LONG_SPAN).renderables
        assert isinstance(prose, Group)
        kinds = [type(part) for part in prose.renderables]
        assert kinds == [Markdown, Panel, Markdown]
        panel = prose.renderables[1]
        assert panel.title == "text"
        assert panel.renderable.line_numbers is True

    def test_short_code_span_stays_markdown(self):
        (prose,) = self.renderer.render_message("Use `a\nb` here").renderables
        assert isinstance(prose, Markdown)

    def test_pending_indicator(self):
        (pending,) = self.renderer.render_message("", is_streaming=True).renderables
        assert "Thinking..." in pending.plain

    def test_renders_to_console(self):
        console = Console(width=60, record=True, color_system=None)
        console.print(self.renderer.render_message("**Bold** text\n" + SHORT_CODE))
        output = console.export_text()
        assert "Bold text" in output
        assert "print(1)" in output
