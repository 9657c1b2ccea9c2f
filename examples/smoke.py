import asyncio
import sys

from nahj_assistant import AssistantService, AssistantState, JSONFileStore, Provider, configure_logging
from nahj_assistant.settings import get_settings


async def main(prompt: str) -> None:
    configure_logging("DEBUG")
    settings = get_settings()
    service = AssistantService(AssistantState(JSONFileStore(settings.store_path)), settings=settings)
    service.make_tool_enabled_session(
        lambda section: print(f"[open {section.value}]"),
        lambda dark: print(f"[dark mode {'on' if dark else 'off'}]"),
    )

    if not service.is_available:
        print(f"{service.current_provider.display_name}: {service.availability.reason}")
        print(f"Falling back to {Provider.LOCAL_STUB.display_name}")

    try:
        async for turn in service.stream_turn(prompt):
            if turn.reply is not None:
                print(turn.reply)
            for result in turn.search_results or []:
                print(f"  - {result}")
    finally:
        await service.aclose()


if __name__ == "__main__":
    asyncio.run(main(" ".join(sys.argv[1:]) or "open sermons please"))
