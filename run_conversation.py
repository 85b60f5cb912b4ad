#!/usr/bin/env python3
"""
Interactive terminal conversation with a running Heavy Lifter server.

Start the server first:
    python3 web_app.py

Then, in another terminal:
    python3 run_conversation.py [--url http://localhost:5001] [--output ./outputs]

Type your answers; once the assistant has what it needs you can generate
the app, watch the simulated build and save the files locally.
"""

import argparse
import sys
import time
from pathlib import Path

from heavylifter.client import HeavyLifterAPIError, HeavyLifterClient
from heavylifter.config import Settings
from heavylifter.signals import contains_app_idea


def save_files(app: dict, output_dir: Path) -> Path:
    """Write the generated files under output_dir/<app name>/."""
    root = output_dir / app["name"]
    for generated in app["generatedFiles"]:
        target = root / generated["path"]
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated["content"])
    return root


def watch_build(client: HeavyLifterClient, build_id: str, poll_interval: float = 0.5) -> dict:
    """Poll the build until it finishes, printing progress changes."""
    seen: dict[str, int] = {}
    while True:
        state = client.build_status(build_id)
        for platform in state["platforms"]:
            name = platform["platform"]
            if seen.get(name) != platform["progress"]:
                seen[name] = platform["progress"]
                print(f"  🔨 {name:<8} {platform['progress']:>3}%  ({platform['status']})")
        if state["status"] in ("completed", "failed"):
            return state
        time.sleep(poll_interval)


def app_idea(messages: list[dict]) -> str:
    """The user message that introduced the app idea, else the first one."""
    user_messages = [m["content"] for m in messages if m["role"] == "user"]
    for content in user_messages:
        if contains_app_idea(content):
            return content
    return user_messages[0] if user_messages else ""


def generate_and_build(client: HeavyLifterClient, conversation: dict, output_dir: Path):
    idea = app_idea(conversation["messages"])
    requirements = conversation.get("extractedRequirements") or {}
    platforms = requirements.get("platforms") or ["web"]

    print(f"\nGenerating '{idea}' for {', '.join(platforms)}...")
    app = client.generate(idea, platforms)
    print(f"  📦 {app['name']}: {len(app['generatedFiles'])} files")

    build_id = client.start_build(app)
    state = watch_build(client, build_id)
    if state["status"] != "completed":
        print("\n⚠️ Build did not complete")
        return

    root = save_files(app, output_dir)
    print(f"\n📄 Files saved to: {root}")
    print(f"\nBuild command:\n  {app['buildCommand']}")
    print(f"\n{app['instructions']}")


def chat(client: HeavyLifterClient, conversation_id: str) -> bool:
    """Read turns from stdin until 'done'. True once the assistant is ready to generate."""
    ready = False
    while True:
        try:
            text = input("You: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\n\n⏹️ Conversation interrupted")
            return ready

        if text.lower() == "done":
            return ready

        if text.lower() == "status":
            state = client.get_conversation(conversation_id)
            print(f"  Step: {state['currentStep']}")
            print(f"  Requirements: {state.get('extractedRequirements') or 'None yet'}")
            continue

        if not text:
            continue

        result = client.send_message(conversation_id, text)
        print(f"\n🤖 {result['assistantMessage']['content']}\n")

        if result.get("requiresAction"):
            ready = True
            answer = input("Generate the app now? [Y/n] ").strip().lower()
            if answer in ("", "y", "yes"):
                return ready


def main():
    parser = argparse.ArgumentParser(description="Chat with Heavy Lifter from the terminal")
    parser.add_argument("--url", default=None, help="Server base URL")
    parser.add_argument("--user", default="terminal", help="User id for the conversation")
    parser.add_argument("--output", default="./outputs", help="Where generated files are saved")
    args = parser.parse_args()

    client = HeavyLifterClient(args.url or Settings.from_env().api_url)

    print("""
╔═══════════════════════════════════════════════════════════════╗
║         HEAVY LIFTER                                           ║
║         Describe your app, we'll build it                      ║
╚═══════════════════════════════════════════════════════════════╝
    """)
    print("Commands: 'status' - show gathered requirements, 'done' - end conversation\n")

    try:
        started = client.start_conversation(args.user)
    except HeavyLifterAPIError as e:
        print(f"Could not reach the server: {e}")
        sys.exit(1)

    conversation_id = started["conversationId"]
    print(f"🤖 {started['message']['content']}\n")

    try:
        ready = chat(client, conversation_id)

        ended = client.end_conversation(conversation_id)
        print(f"\n🤖 {ended['message']['content']}")
        print(f"   {ended['conversationSummary']['text']}")

        if ready:
            generate_and_build(client, client.get_conversation(conversation_id), Path(args.output))
    except HeavyLifterAPIError as e:
        print(f"\n⚠️ Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nExiting...")
        sys.exit(0)
