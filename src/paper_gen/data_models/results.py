from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

TEXT_KEYS = ("questions", "result", "message")


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return "\n".join(value)
    return json.dumps(value, indent=2)


class JsonResult(BaseModel):
    """Structured response body, kept as parsed so callers can inspect other fields."""

    kind: Literal["json"] = "json"
    value: Any = None

    @property
    def usable_text(self) -> Optional[str]:
        """The generated text carried by the body, or None when it has none (e.g. `{"error": ...}`)."""
        payload = self.value
        if isinstance(payload, str):
            return payload
        if isinstance(payload, dict):
            for key in TEXT_KEYS:
                if payload.get(key) is not None:
                    return _as_text(payload[key])
        return None

    @property
    def text(self) -> str:
        usable = self.usable_text
        return usable if usable is not None else json.dumps(self.value, indent=2)


class TextResult(BaseModel):
    """Plain-text response body."""

    kind: Literal["text"] = "text"
    value: str = ""

    @property
    def text(self) -> str:
        return self.value


ApiResult = Annotated[Union[JsonResult, TextResult], Field(discriminator="kind")]
