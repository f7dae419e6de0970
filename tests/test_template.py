"""Tests for prompt templates

Tests use # TEST###: comments for the test catalog.
"""

import pytest
from capserve.cap.template import PromptTemplate, split_list, bullet_addendum


# TEST069: Test placeholders are replaced verbatim
def test_placeholder_substitution():
    template = PromptTemplate("```{language}\n{code}\n```")

    assert template.render({"language": "python", "code": "print('<hi>')"}) == "```python\nprint('<hi>')\n```"
    assert template.placeholders() == ["language", "code"]


# TEST070: Test substituted values are not re-scanned for placeholders
def test_single_pass_substitution():
    template = PromptTemplate("{language}: {code}")

    rendered = template.render({"language": "{code}", "code": "x = {language}"})
    assert rendered == "{code}: x = {language}"


# TEST071: Test placeholders without input are left intact
def test_unknown_placeholder_left_intact():
    template = PromptTemplate("Hello {name} from {place}")
    assert template.render({"name": "Ada"}) == "Hello Ada from {place}"


# TEST072: Test list splitting trims entries and drops empty ones
def test_split_list():
    assert split_list(" security, performance ,, ") == ["security", "performance"]
    assert split_list("") == []
    assert split_list(None) == []
    assert split_list("a;b", delimiter=";") == ["a", "b"]


# TEST073: Test list field renders as a bulleted addendum after the base text
def test_list_field_addendum():
    template = PromptTemplate("Review {code}", list_fields={"focusAreas": "Focus:"})

    rendered = template.render({"code": "x", "focusAreas": "security, performance"})
    assert rendered == "Review x\n\n**Focus:**\n- security\n- performance\n"


# TEST074: Test absent or empty list fields leave the base template unmodified
def test_empty_list_field_no_addendum():
    template = PromptTemplate("Review {code}", list_fields={"focusAreas": "Focus:"})

    assert template.render({"code": "x"}) == "Review x"
    assert template.render({"code": "x", "focusAreas": ""}) == "Review x"
    assert template.render({"code": "x", "focusAreas": " , ,"}) == "Review x"


# TEST075: Test bullet addendum format
def test_bullet_addendum():
    assert bullet_addendum("Areas:", ["a"]) == "\n\n**Areas:**\n- a\n"


# TEST076: Test template handler wraps the rendered text in a single user message
@pytest.mark.asyncio
async def test_as_handler():
    handler = PromptTemplate("Hi {name}").as_handler("Greeting prompt")

    result = await handler({"name": "Ada"})
    assert len(result.messages) == 1
    assert result.messages[0].role == "user"
    assert result.messages[0].content.text == "Hi Ada"
    assert result.description == "Greeting prompt"
