"""Prompt templates

A PromptTemplate holds a fixed body with `{field}` placeholders. Rendering
substitutes validated input verbatim in a single pass, so substituted values
are never scanned for further placeholders. List fields (comma-separated
input such as focus areas) are appended as a bulleted addendum.
"""

import re
from typing import Any, Dict, List, Mapping, Optional

from capserve.cap.definition import TemplateHandler
from capserve.cap.response import PromptResult


PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def split_list(value: Optional[str], delimiter: str = ",") -> List[str]:
    """Split delimited input, trimming entries and dropping empty ones"""
    if not value:
        return []
    return [item.strip() for item in value.split(delimiter) if item.strip()]


def bullet_addendum(heading: str, items: List[str]) -> str:
    bullets = "\n".join(f"- {item}" for item in items)
    return f"\n\n**{heading}**\n{bullets}\n"


class PromptTemplate:
    """Text template rendered into a user message

    Args:
        body: Template text with `{field}` placeholders
        list_fields: Field name -> heading for fields rendered as bullets
        delimiter: Separator used to split list field values
    """

    def __init__(self, body: str, list_fields: Optional[Dict[str, str]] = None, delimiter: str = ","):
        self.body = body
        self.list_fields = dict(list_fields or {})
        self.delimiter = delimiter

    def placeholders(self) -> List[str]:
        return PLACEHOLDER.findall(self.body)

    def render(self, args: Mapping[str, Any]) -> str:
        """Render the template with validated input"""
        def substitute(match: "re.Match[str]") -> str:
            key = match.group(1)
            if key in self.list_fields or args.get(key) is None:
                return match.group(0)
            return str(args[key])

        text = PLACEHOLDER.sub(substitute, self.body)

        for field_name, heading in self.list_fields.items():
            items = split_list(args.get(field_name), self.delimiter)
            if items:
                text += bullet_addendum(heading, items)

        return text

    def as_handler(self, description: Optional[str] = None) -> TemplateHandler:
        """Wrap the template as a template capability handler"""
        async def handler(args: Dict[str, Any]) -> PromptResult:
            return PromptResult.user_text(self.render(args), description)
        return handler
