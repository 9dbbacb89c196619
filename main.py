#!/usr/bin/env python3
"""
FocusHub - Main Entry Point

Headless harness for the dashboard session state: inspect and edit the
active widgets, or run a monitoring session with break reminders in the
terminal.

Usage:
    python main.py --status              # Print the session snapshot
    python main.py --list-widgets        # Show catalog and active widgets
    python main.py --add-widget TYPE     # Add a widget (optionally --size)
    python main.py --remove-widget ID    # Remove a widget
    python main.py --run                 # Monitor with break reminders
"""

import argparse
import asyncio
import json
import logging
import sys

import config
from core.engine import DashboardSession

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format=config.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def print_widgets(session: DashboardSession) -> None:
    """Print catalog entries and the active set."""
    print("\nAvailable widgets:")
    for descriptor in session.widgets.available_widgets():
        print(f"  {descriptor.type:<14} {descriptor.title} ({descriptor.size.value}) - {descriptor.description}")

    active = session.widgets.active_widgets
    print(f"\nActive widgets ({len(active)}):")
    if not active:
        print("  No custom widgets added yet.")
    for widget in active:
        print(f"  {widget.id}  [{widget.size.value}]")
    print()


async def run_monitoring(session: DashboardSession) -> None:
    """Monitor until interrupted, prompting when a break is due."""
    loop = asyncio.get_running_loop()
    break_due = asyncio.Event()
    session.on_break_due = break_due.set
    session.on_warning = lambda kind, message: print(f"⚠️  {message}")

    session.start_monitoring()
    session.run_reminder_loop()
    status = session.get_status()
    print(f"\n⏱  Monitoring. Next break in {status['seconds_until_break'] // 60} min. Ctrl+C to stop.\n")

    try:
        while True:
            await break_due.wait()
            break_due.clear()
            answer = await loop.run_in_executor(
                None, input, "☕ Time for a break! [b]reak now / [s]nooze: "
            )
            if answer.strip().lower().startswith("b"):
                session.take_break()
                print("✓ Enjoy your break. Timer restarted.\n")
            else:
                session.dismiss_break()
                print(f"✓ Snoozed for {session.breaks.snooze_minutes} min.\n")
    finally:
        session.stop_monitoring()
        await session.stop_reminder_loop()


def main():
    """Main entry point: parses arguments and runs the requested action."""
    parser = argparse.ArgumentParser(
        description="FocusHub - Dashboard session state",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --status
  python main.py --add-widget focus_timer --size large
  python main.py --run
        """
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--status", action="store_true", help="Print the session status as JSON (default)")
    group.add_argument("--list-widgets", action="store_true", help="List available and active widgets")
    group.add_argument("--add-widget", metavar="TYPE", help="Add a widget of the given catalog type")
    group.add_argument("--remove-widget", metavar="ID", help="Remove the widget with this id")
    group.add_argument("--run", action="store_true", help="Run monitoring with break reminders")
    parser.add_argument("--size", choices=sorted(config.WIDGET_HEIGHTS), help="Size for --add-widget")

    args = parser.parse_args()

    session = DashboardSession()
    session.on_error = lambda kind, message: print(f"\n❌ {message}")
    session.start()

    try:
        if args.list_widgets:
            print_widgets(session)
        elif args.add_widget:
            result = session.add_widget(args.add_widget, args.size)
            if not result["success"]:
                print(f"❌ {result['error']}")
                sys.exit(1)
            print(f"✓ Added {result['widget']['id']}")
        elif args.remove_widget:
            result = session.remove_widget(args.remove_widget)
            print("✓ Removed" if result["removed"] else "Nothing to remove")
        elif args.run:
            asyncio.run(run_monitoring(session))
        else:
            print(json.dumps(session.get_status(), indent=2))
    except KeyboardInterrupt:
        print("\n\nGoodbye!")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        print(f"\nFatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
