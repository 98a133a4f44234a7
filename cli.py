# Role: Terminal client for the Rezervo concierge. Same SessionController the web UI uses, rendered as text.
# Useful for poking at a backend without a browser and for seeing debug logs in the terminal.

from __future__ import annotations

import rezervo.config
rezervo.config.load_env()

from rezervo.api.chat_client import ChatClient
from rezervo.config import ChatConfig
from rezervo.core.session_controller import SessionController
from rezervo.core.store import JsonFileSessionStore
from rezervo.models.message import Message
from rezervo.utils.formatting import is_success_message, message_lines
from rezervo.utils.logging import setup_logging


def build_controller(config: ChatConfig) -> SessionController:
    return SessionController(
        ChatClient(config),
        JsonFileSessionStore(config.state_file),
        auto_greet=config.auto_greet,
        system_prefers_light=lambda: config.theme_preference == "light",
    )


def render_message(controller: SessionController, message: Message) -> None:
    speaker = "You" if message.role == "user" else "Rezervo"
    marker = " [ok]" if message.role == "assistant" and is_success_message(message) else ""
    lines = message_lines(message)
    print(f"\n{speaker}{marker}: {lines[0]}")
    for line in lines[1:]:
        print(f"  {line}")

    for idx, suggestion in enumerate(message.suggestions or [], start=1):
        mark = "x" if controller.is_selected(suggestion) else " "
        print(f"  [{idx}] ({mark}) {suggestion.title}")


def render_new(controller: SessionController, seen: int, typed: str = "") -> int:
    transcript = controller.transcript
    if len(transcript) < seen:
        seen = 0
    for message in transcript[seen:]:
        # Already on screen at the prompt.
        if message.role == "user" and message.text == typed:
            continue
        render_message(controller, message)

    toast = controller.current_toast()
    if toast is not None:
        print(f"\n<{toast.type}> {toast.message}")
        controller.dismiss_toast()
    return len(transcript)


def render_chips(controller: SessionController) -> None:
    # Key line: toggles don't add transcript entries, so re-print the chip row to show selection state.
    for idx, suggestion in enumerate(controller.last_suggestions(), start=1):
        mark = "x" if controller.is_selected(suggestion) else " "
        print(f"  [{idx}] ({mark}) {suggestion.title}")


def main() -> None:
    # 1) Resolve config once, report missing values and stop
    # 2) Restore persisted session (conversation id, theme) and greet if new
    # 3) Route input: commands, chip numbers, or free text
    config = ChatConfig.from_env()
    setup_logging("DEBUG" if rezervo.config.DEBUG else "WARNING", secrets=[config.anon_key])
    controller = build_controller(config)

    print("Rezervo: your personal concierge for restaurant bookings in Madrid")
    print("Commands: /reset (new conversation), /theme, /session, /exit. Type a number to click a chip.")
    print("-" * 50)

    if controller.startup_error:
        print("Configuration needed")
        print(controller.startup_error)
        print("Required:")
        print("  CHAT_URL      = your chat endpoint URL")
        print("  CHAT_ANON_KEY = your bearer key")
        return

    controller.bootstrap()
    seen = render_new(controller, 0)

    while True:
        try:
            user_message = input("\nYou: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            return

        if not user_message:
            continue

        cmd = user_message.lower()

        if cmd in {"/exit", "exit", "quit", "/quit"}:
            print("Bye!")
            return

        if cmd in {"/reset", "reset"}:
            controller.reset()
            print("Conversation reset.")
            if controller.show_landing:
                print("Say hello to begin...")
            seen = render_new(controller, 0)
            continue

        if cmd == "/theme":
            print(f"Theme: {controller.toggle_theme().value}")
            continue

        if cmd == "/session":
            print(f"conversation_id: {controller.session.conversation_id or '(none yet)'}")
            continue

        if user_message.isdigit():
            chips = controller.last_suggestions()
            idx = int(user_message) - 1
            if not 0 <= idx < len(chips):
                print("No chip with that number.")
                continue
            before = len(controller.transcript)
            controller.handle_chip_click(chips[idx])
            if len(controller.transcript) == before:
                render_chips(controller)
            seen = render_new(controller, seen)
            continue

        if controller.show_landing:
            controller.start_with_text(user_message)
        else:
            controller.submit_text(user_message)
        seen = render_new(controller, seen, typed=user_message)


if __name__ == "__main__":
    main()
