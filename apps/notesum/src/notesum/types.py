from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

FailureKind = Literal["not_found", "read_failure"]
Role = Literal["system", "user"]


@dataclass(frozen=True)
class Document:
    path: str
    text: str
    aliases: tuple[str, ...] = ()
    links: tuple[str, ...] = ()


@dataclass(frozen=True)
class AggregateEntry:
    token: str
    path: str
    text: str

    def render(self) -> str:
        return f"Internal Link ({self.token}):\n{self.text}\n\n"


@dataclass(frozen=True)
class ReferenceFailure:
    token: str
    kind: FailureKind
    detail: str = ""


@dataclass(frozen=True)
class AggregateResult:
    entries: tuple[AggregateEntry, ...] = ()
    failures: tuple[ReferenceFailure, ...] = ()

    @property
    def text(self) -> str:
        return "".join(entry.render() for entry in self.entries)


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: str

    def as_payload(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class PromptMessages:
    messages: tuple[ChatMessage, ...]

    def as_payload(self) -> list[dict[str, str]]:
        return [message.as_payload() for message in self.messages]


@dataclass(frozen=True)
class LLMConfig:
    provider: str
    model: str
    api_key: str = field(default="", repr=False)


@dataclass(frozen=True)
class SummaryResult:
    summary: str
    provider: str
    model: str
    aggregate: AggregateResult | None = None
