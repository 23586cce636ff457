"""Tests for prompt builders."""

import pytest

from niche_finder import prompts

NICHE = {
    "niche_name": {"original": "Cocina casera", "translated": "Home cooking"},
    "description": "Simple family recipes.",
    "audience_demographics": "Parents 25-45.",
    "analysis": {
        "interest_level": {"score": 80, "explanation": "steady"},
        "monetization_potential": {
            "score": 60,
            "rpm_estimate": "$2 - $4",
            "explanation": "food brands",
        },
        "competition_level": {"score": 70, "explanation": "crowded"},
        "sustainability": {"score": 90, "explanation": "evergreen"},
    },
    "content_strategy": "Weekly recipes.",
}


class TestFilters:
    def test_all_is_no_rule(self):
        assert prompts.filter_rules(None) == []
        assert prompts.filter_rules({"interest": "all"}) == []

    def test_ranges(self):
        rules = prompts.filter_rules({"interest": "high", "monetization": "low"})
        assert len(rules) == 2
        assert "'interest_level.score' must be in the range 67-100" in rules[0]
        assert "'monetization_potential.score' must be in the range 1-33" in rules[1]

    def test_competition_note(self):
        (rule,) = prompts.filter_rules({"competition": "medium"})
        assert "34-66" in rule
        assert "lower score is better" in rule

    def test_invalid_level(self):
        with pytest.raises(ValueError, match="interest"):
            prompts.filter_rules({"interest": "extreme"})


class TestAnalysis:
    def test_count_language_and_filters(self):
        text = prompts.analysis_system(
            7, filters={"sustainability": "high"}, language="Spanish"
        )
        assert "exactly 7 distinct sub-niches" in text
        assert "MUST be in SPANISH" in text
        assert "CRITICAL FILTERING REQUIREMENTS" in text

    def test_avoid_list(self):
        text = prompts.analysis_system(3, avoid=["A", "", "B"])
        assert "Niches to avoid: A, B." in text
        assert "CRITICAL FILTERING" not in text

    def test_no_avoid(self):
        assert "IMPORTANT: You have already" not in prompts.analysis_system(3)

    def test_prompt(self):
        assert prompts.analysis_prompt("cats", "Japan") == (
            'Analyze the YouTube niche idea: "cats". Target market: Japan.'
        )


class TestNicheCard:
    def test_card_fields(self):
        card = prompts.format_niche_card(NICHE)
        assert "**Niche name (original):** Cocina casera" in card
        assert "- Monetization: 60/100 (RPM: $2 - $4) (food brands)" in card
        assert "Initial video ideas" not in card

    def test_card_with_video_ideas(self):
        niche = dict(
            NICHE,
            video_ideas=[
                {
                    "title": {"original": "Paella fácil", "translated": "Easy paella"},
                    "draft_content": "One pan.",
                }
            ],
        )
        card = prompts.format_niche_card(niche)
        assert "- Paella fácil (Easy paella): One pan." in card

    def test_channel_plan(self):
        prompt = prompts.channel_plan_prompt(NICHE, language="English")
        assert "Present the result in **English**" in prompt
        assert prompt.endswith("--- END OF CARD DATA ---")
        assert "more detailed" in prompts.channel_plan_system(detailed=True)
        assert "VIETNAMESE" in prompts.channel_plan_system()


class TestContentPlans:
    def test_content_plan_system(self):
        text = prompts.content_plan_system("Cocina casera", "Recipes", 4, avoid=["x"])
        assert "generate 4 highly detailed" in text
        assert "Video ideas to avoid: x." in text

    def test_develop_ideas_prompt(self):
        niche = dict(
            NICHE,
            video_ideas=[
                {"title": {"original": "A", "translated": "a"}, "draft_content": "d1"},
                {"title": {"original": "B", "translated": "b"}, "draft_content": "d2"},
            ],
        )
        text = prompts.develop_ideas_prompt(niche)
        assert "- Title (Original): A" in text
        assert "Draft Content: d2" in text
