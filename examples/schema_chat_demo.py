"""Minimal demonstration of the retrieval chat pipeline."""

import asyncio
import sys

from schema_chat import PipelineConfig, stream_chat
from schema_chat.config.settings import settings
from schema_chat.domain.models import ChatMessage
from schema_chat.providers.registry import get_model


async def main(question: str) -> None:
    channel = await stream_chat(
        get_model(settings.default_model),
        None,
        settings.default_temperature,
        None,
        [ChatMessage(role="user", content=question)],
        PipelineConfig.from_settings(),
    )
    async with channel:
        async for chunk in channel:
            sys.stdout.write(chunk.decode("utf-8"))
            sys.stdout.flush()
    print()


if __name__ == "__main__":
    question = " ".join(sys.argv[1:]) or "How many orders did each customer place last month?"
    print("User:", question)
    asyncio.run(main(question))
