"""Response envelopes for capability output

Operations return a ResponseEnvelope: an ordered list of content items plus a
structured mirror of the same information. The builders here always derive
the mirror from the content list, so a consumer reading either representation
gets the same answer.

Resources return a ResourceResult and templates return a PromptResult.

Error-as-data envelopes carry `is_error` for in-process callers. On the wire
they look like a normal answer; `to_dict(flag_errors=True)` adds `isError`.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class ContentType(Enum):
    """Wire tag of a content item"""
    TEXT = "text"
    IMAGE = "image"


class EnvelopeMismatchError(Exception):
    """content and structuredContent disagree"""
    def __init__(self, details: str):
        super().__init__(f"Response envelope mirror mismatch: {details}")
        self.details = details


@dataclass(frozen=True)
class TextContent:
    """Text content item"""
    text: str

    @property
    def content_type(self) -> ContentType:
        return ContentType.TEXT

    def to_dict(self) -> Dict[str, Any]:
        return {"type": ContentType.TEXT.value, "text": self.text}


@dataclass(frozen=True)
class ImageContent:
    """Binary image content item"""
    data: bytes
    mime_type: str = "image/png"

    @property
    def content_type(self) -> ContentType:
        return ContentType.IMAGE

    def base64_data(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": ContentType.IMAGE.value, "data": self.base64_data(), "mimeType": self.mime_type}

    def __repr__(self) -> str:
        return f"ImageContent(mime_type={self.mime_type!r}, size={len(self.data)})"


ContentItem = Union[TextContent, ImageContent]


def content_item_from_dict(data: Dict[str, Any]) -> ContentItem:
    """Parse a content item from its wire shape"""
    kind = data.get("type")
    if kind == ContentType.TEXT.value:
        return TextContent(data["text"])
    elif kind == ContentType.IMAGE.value:
        return ImageContent(base64.b64decode(data["data"]), data["mimeType"])
    else:
        raise ValueError(f"Unknown content item type: {kind!r}")


def mirror_content(items: List[ContentItem]) -> Dict[str, Any]:
    """Build the structured mirror for a content list"""
    return {"content": [item.to_dict() for item in items]}


@dataclass
class ResponseEnvelope:
    """Dual-encoded operation result

    `content` is ordered and the first item is primary. `is_error` marks
    error-as-data: a successful invocation whose content reports a
    predictable failure to the caller.
    """
    content: List[ContentItem]
    structured_content: Dict[str, Any]
    is_error: bool = False

    @classmethod
    def from_content(cls, items: List[ContentItem], is_error: bool = False) -> "ResponseEnvelope":
        """Create an envelope whose mirror is derived from the items"""
        items = list(items)
        return cls(items, mirror_content(items), is_error)

    @classmethod
    def text(cls, text: str) -> "ResponseEnvelope":
        """Create a single text item envelope"""
        return cls.from_content([TextContent(text)])

    @classmethod
    def error_text(cls, text: str) -> "ResponseEnvelope":
        """Create an error-as-data envelope carrying a descriptive message"""
        return cls.from_content([TextContent(text)], is_error=True)

    @classmethod
    def image(cls, data: bytes, mime_type: str = "image/png") -> "ResponseEnvelope":
        """Create a single image item envelope"""
        return cls.from_content([ImageContent(data, mime_type)])

    @property
    def primary(self) -> Optional[ContentItem]:
        return self.content[0] if self.content else None

    def first_text(self) -> Optional[str]:
        """Text of the first item, if it is a text item"""
        primary = self.primary
        if isinstance(primary, TextContent):
            return primary.text
        return None

    def check_mirror(self) -> None:
        """Verify that structured_content mirrors content

        Raises:
            EnvelopeMismatchError: If the two representations disagree
        """
        mirrored = self.structured_content.get("content") if isinstance(self.structured_content, dict) else None
        if not isinstance(mirrored, list):
            raise EnvelopeMismatchError("structuredContent has no content list")
        if len(mirrored) != len(self.content):
            raise EnvelopeMismatchError(
                f"content has {len(self.content)} items but structuredContent has {len(mirrored)}"
            )
        for index, item in enumerate(self.content):
            if mirrored[index] != item.to_dict():
                raise EnvelopeMismatchError(f"item {index} differs")

    def to_dict(self, flag_errors: bool = False) -> Dict[str, Any]:
        """Convert to the wire shape

        Error-as-data is success-shaped on the wire, so `isError` is only
        written when the host asks for it with `flag_errors`.
        """
        result: Dict[str, Any] = {
            "content": [item.to_dict() for item in self.content],
            "structuredContent": self.structured_content,
        }
        if flag_errors and self.is_error:
            result["isError"] = True
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResponseEnvelope":
        """Parse from the wire shape"""
        return cls(
            content=[content_item_from_dict(item) for item in data["content"]],
            structured_content=data.get("structuredContent", {}),
            is_error=data.get("isError", False),
        )


@dataclass(frozen=True)
class ResourceContents:
    """One document served by a resource"""
    uri: str
    text: str
    mime_type: str = "application/json"

    def to_dict(self) -> Dict[str, Any]:
        return {"uri": self.uri, "mimeType": self.mime_type, "text": self.text}


@dataclass
class ResourceResult:
    """Result of fetching a resource"""
    contents: List[ResourceContents] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"contents": [c.to_dict() for c in self.contents]}


@dataclass(frozen=True)
class PromptMessage:
    """Role-tagged message produced by a template"""
    role: str
    content: ContentItem

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "content": self.content.to_dict()}


@dataclass
class PromptResult:
    """Ordered message sequence rendered by a template"""
    messages: List[PromptMessage] = field(default_factory=list)
    description: Optional[str] = None

    @classmethod
    def user_text(cls, text: str, description: Optional[str] = None) -> "PromptResult":
        return cls([PromptMessage("user", TextContent(text))], description)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"messages": [m.to_dict() for m in self.messages]}
        if self.description is not None:
            result["description"] = self.description
        return result
