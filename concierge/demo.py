"""CLI demonstration of a single dispatched turn."""
from __future__ import annotations

import asyncio
import sys
from typing import NoReturn

from concierge.config import config
from concierge.core.log import setup_logging
from concierge.core.models import Context, Message
from concierge.runtime import initialize_agents, shutdown_agents


async def main(text: str) -> None:
    root = await initialize_agents()
    context = Context()
    message = Message.user_request(text, context=context, recipient=root.identity)

    try:
        response = await root.process(message, context)
    finally:
        await shutdown_agents()

    print(f"[{response.agent_id}] ({response.confidence:.2f}) {response.text}")
    for action in response.actions:
        print(f"  action: {action}")


def run() -> NoReturn:
    setup_logging(config.log_level)
    text = " ".join(sys.argv[1:]) or "I'm looking for a good restaurant tonight"
    asyncio.run(main(text))
    sys.exit(0)


if __name__ == "__main__":
    run()
