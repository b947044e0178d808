"""Tests for the astrology prompt."""

from astrochat.app.services.prompts import build_astrology_prompt
from astrochat.app.services.quota_tracker import PersonData


def test_prompt_includes_birth_details(person):
    prompt = build_astrology_prompt(person, "  When will I get married?  ")

    assert '"When will I get married?"' in prompt
    assert "Name: Asha Verma" in prompt
    assert "Date of Birth: 1990-05-15" in prompt
    assert "Time of Birth: 06:45" in prompt
    assert "Place of Birth: Jaipur, India" in prompt
    assert 'Start with "Namaste Asha ji!"' in prompt


def test_prompt_mentions_markers(person):
    prompt = build_astrology_prompt(person, "career?")
    assert "<green>" in prompt
    assert "<red>" in prompt


def test_missing_optional_details_render_unknown():
    person = PersonData(first_name="Ravi", date_of_birth="1985-12-01")

    prompt = build_astrology_prompt(person, "health?")

    assert "Name: Ravi\n" in prompt
    assert "Time of Birth: unknown" in prompt
    assert "Place of Birth: unknown" in prompt


def test_braces_in_message_are_kept_verbatim(person):
    prompt = build_astrology_prompt(person, "what about {this}?")
    assert "what about {this}?" in prompt
