from quizgenius.constants.about import HELP_TEXT
from quizgenius.core.markdown_renderer import MarkdownRenderer, fence_code
from quizgenius.styling.color_palette import ColorPalette, Theme
from quizgenius.styling.styles import Styles


def test_fence_outgrows_backticks_in_code():
    assert fence_code("print(1)") == "```\nprint(1)\n```"
    assert fence_code("a = '````'").startswith("`````\n")


def test_question_with_code_is_escaped():
    html = MarkdownRenderer().render_question("What does **this** print?", "print('<b>')")

    assert "<strong>this</strong>" in html
    assert "<pre><code>" in html
    assert "&lt;b&gt;" in html


def test_raw_html_is_not_passed_through():
    html = MarkdownRenderer().render_fragment("Which tag? <script>alert(1)</script>")

    assert "<script>" not in html


def test_empty_fragment_placeholder():
    assert "No content provided" in MarkdownRenderer().render_fragment("   ")


def test_wrap_document_applies_theme_values():
    document = MarkdownRenderer().wrap_document("<p>x</p>", "Title & more", background="#000", font_size=18)

    assert "<title>Title &amp; more</title>" in document
    assert "background: #000" in document
    assert "font-size: 18pt" in document


def test_theme_toggle_and_palette():
    assert Theme.LIGHT.toggled() is Theme.DARK
    assert Theme.DARK.toggled() is Theme.LIGHT
    assert ColorPalette.TEXT_PRIMARY.get(Theme.DARK) != ColorPalette.TEXT_PRIMARY.get(Theme.LIGHT)
    assert ColorPalette.BACKGROUND_PRIMARY.get(Theme.DARK) in Styles.get_main_window_style(Theme.DARK)


def test_timer_and_score_styles_follow_state():
    calm = Styles.get_timer_label_style(Theme.LIGHT, warning=False)
    urgent = Styles.get_timer_label_style(Theme.LIGHT, warning=True)

    assert ColorPalette.TIMER_NORMAL.light in calm
    assert ColorPalette.TIMER_WARNING.light in urgent
    assert ColorPalette.ANSWER_CORRECT.dark in Styles.get_score_label_style(Theme.DARK, passed=True)
    assert ColorPalette.ANSWER_INCORRECT.dark in Styles.get_score_label_style(Theme.DARK, passed=False)


def test_help_text_lists_every_quiz_shortcut():
    for keys in ("Left / P", "Right / N", "Home / End", "1-4", "S: submit"):
        assert keys in HELP_TEXT
