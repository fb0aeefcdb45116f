# tests/test_formatting.py
import pytest

from archeval.ui.formatting import bold_segments, score_percent, split_explanation


class TestSplitExplanation:

    def test_intro_and_bullets(self):
        text = (
            "The SLM is recommended.\n"
            "Edge hardware drives this.\n"
            "\n"
            "• **Latency:** responses must be instant.\n"
            "- **Cost:** volume is high.\n"
            "* Stable scope."
        )

        intro, bullets = split_explanation(text)

        assert intro == "The SLM is recommended. Edge hardware drives this."
        assert bullets == [
            "**Latency:** responses must be instant.",
            "**Cost:** volume is high.",
            "Stable scope.",
        ]

    def test_plain_lines_after_bullets_kept(self):
        intro, bullets = split_explanation("Intro\n- one\ntrailing note")

        assert intro == "Intro"
        assert bullets == ["one", "trailing note"]

    def test_no_bullets(self):
        assert split_explanation("Just a paragraph.") == ("Just a paragraph.", [])

    @pytest.mark.parametrize("text", ["", None, "\n\n  \n"])
    def test_empty(self, text):
        assert split_explanation(text) == ("", [])

    def test_empty_bullet_marker_ignored(self):
        intro, bullets = split_explanation("Intro\n-\n- real")

        assert bullets == ["real"]


class TestBoldSegments:

    def test_mixed(self):
        assert bold_segments("a **b** c") == [("a ", False), ("b", True), (" c", False)]

    def test_leading_bold(self):
        assert bold_segments("**Cost:** high") == [("Cost:", True), (" high", False)]

    def test_no_bold(self):
        assert bold_segments("plain text") == [("plain text", False)]

    def test_blank(self):
        assert bold_segments("   ") == []


class TestScorePercent:

    @pytest.mark.parametrize("score, max_score, expected", [
        (130, 260, 50),
        (260, 260, 100),
        (52, 260, 20),
        (0, 260, 0),
        (10, 0, 0),
    ])
    def test_percent(self, score, max_score, expected):
        assert score_percent(score, max_score) == expected
