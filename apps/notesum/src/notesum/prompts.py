from __future__ import annotations

from notesum.types import ChatMessage, PromptMessages

SYSTEM_PROMPT = "You are a helpful assistant that briefly summarizes text."


def build_messages(
    root_text: str,
    aggregate_text: str | None,
    *,
    with_links: bool,
) -> PromptMessages:
    if with_links:
        content = (
            "Please briefly summarize the following text and its linked content:\n\n"
            f"Main Content:\n{root_text}\n\n"
            f"Linked Content:\n{aggregate_text or ''}"
        )
    else:
        content = f"Please briefly summarize the following text:\n\n{root_text}"

    return PromptMessages(
        messages=(
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=content),
        )
    )
