#!/usr/bin/env python3
# =============================================================================
# scripts/skycast_interactive.py - SkyCast in your terminal
# =============================================================================
# A terminal front end for the application controller. Talks to a running
# SkyCast API (SKYCAST_API_URL) and to Supabase for sign in and history.
#
# Usage:
#   python scripts/skycast_interactive.py
#
# Commands:
#   <city>      - Look up current weather
#   /signin     - Sign in with email and password
#   /signup     - Create an account
#   /signout    - Sign out
#   /history    - Show your previous searches
#   /help       - Show help
#   /quit       - Exit
# =============================================================================

import asyncio
import getpass
import logging
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.config import get_settings
from core.controller import (
    ApplicationController,
    ControllerView,
    HistoryState,
    build_controller,
)
from core.models import format_history_entry, format_result_card
from lib.utils import ApplicationError


def print_header():
    print("\n" + "=" * 60)
    print("  SkyCast - Simple, fast weather updates")
    print("=" * 60)
    print("\nType a city name to get the current weather.")
    print("Sign in to keep track of your last searches. /help for commands.\n")


def print_help():
    print("\n" + "-" * 40)
    print("COMMANDS:")
    print("  <city>    - Look up current weather")
    print("  /signin   - Sign in")
    print("  /signup   - Create an account")
    print("  /signout  - Sign out")
    print("  /history  - Show previous searches")
    print("  /help     - Show this help")
    print("  /quit     - Exit")
    print("-" * 40 + "\n")


def print_result(view: ControllerView):
    if view.error:
        print(f"\n  ! {view.error}\n")
        return
    if view.result is None:
        return

    card = format_result_card(view.result)
    print("\n" + "-" * 40)
    print(f"  {card['city']}")
    print(f"  {card['temperature']}°C  {card['description']}")
    print("-" * 40)
    print(f"  Feels like: {card['feels_like']}°C")
    print(f"  Humidity:   {card['humidity']}%")
    print(f"  Wind:       {card['wind']} m/s")
    print(f"  Condition:  {card['condition']}")
    print("-" * 40 + "\n")


def print_history(view: ControllerView):
    if not view.show_history:
        print("\n  Sign in to see your previous searches.\n")
        return

    print("\nPrevious Searches")
    if view.history_state is HistoryState.HISTORY_LOADING:
        print("  Loading previous searches...")
    elif not view.history:
        print("  No previous searches found.")
    for record in view.history:
        print(f"  - {format_history_entry(record)}")
    print()


async def prompt(text: str, secret: bool = False) -> str:
    reader = getpass.getpass if secret else input
    return await asyncio.to_thread(reader, text)


async def handle_auth(controller: ApplicationController, sign_up: bool):
    view = controller.show_auth()
    if not view.show_auth_form:
        print(f"\n  Already signed in as {view.identity.email}.\n")
        return

    title = "Create Account" if sign_up else "Welcome Back"
    print(f"\n{title}")
    email = await prompt("  Email: ")
    password = await prompt("  Password: ", secret=True)

    if sign_up:
        await controller.sign_up(email, password)
    else:
        await controller.sign_in(email, password)

    view = controller.view()
    if view.auth_error:
        print(f"\n  ! {view.auth_error}\n")
    elif view.identity:
        print(f"\n  Signed in as {view.identity.email}.\n")


async def handle_sign_out(controller: ApplicationController):
    # A failed sign out is only logged by the controller
    if await controller.sign_out():
        print("\n  Signed out.\n")


async def main_async() -> int:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        controller = await build_controller(settings)
    except ApplicationError as e:
        print(f"ERROR: {e.message}")
        if e.suggestion:
            print(e.suggestion)
        return 1

    print("Loading...")
    view = await controller.start()
    print_header()
    if view.identity:
        print(f"Signed in as {view.identity.email}.\n")

    try:
        while True:
            try:
                user_input = (await prompt("City: ")).strip()
            except (KeyboardInterrupt, EOFError):
                print("\n\nGoodbye!\n")
                break

            if not user_input:
                continue

            command = user_input.lower()
            if command in ("/quit", "/exit"):
                print("\nGoodbye!\n")
                break
            elif command == "/help":
                print_help()
            elif command in ("/signin", "/signup"):
                await handle_auth(controller, sign_up=command == "/signup")
            elif command == "/signout":
                await handle_sign_out(controller)
            elif command == "/history":
                await controller.wait_for_background_tasks()
                print_history(controller.view())
            elif command.startswith("/"):
                print(f"\n  Unknown command {user_input}. Type /help.\n")
            else:
                print("  Searching...")
                print_result(await controller.submit(user_input))
    finally:
        await controller.aclose()

    return 0


def main():
    sys.exit(asyncio.run(main_async()))


if __name__ == "__main__":
    main()
