#!/usr/bin/env python3
"""Check an API key against the generation API and show which model it resolves to.

Usage:
    python -m scam_trainer.cli --key "$GEMINI_API_KEY"
    python -m scam_trainer.cli --say "hello"   # also send one test message
"""

import argparse
import asyncio
import os
import sys

import httpx

from scam_trainer.llm import GeminiClient, GeminiError, ModelResolver


# ANSI color codes
class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"


def colorize(text: str, color: str) -> str:
    """Apply ANSI color to text."""
    return f"{color}{text}{Colors.RESET}"


async def check(
    api_key: str,
    say: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Resolve the endpoint for a key and optionally send one message.

    Returns:
        Process exit code.
    """
    async with GeminiClient(api_key=api_key, transport=transport) as client:
        resolver = ModelResolver(client)
        endpoint = await resolver.resolve_endpoint()
        resolution = resolver.last_resolution

        if resolution is not None and resolution.is_fallback:
            print(colorize("Catalog lookup failed, using default model", Colors.YELLOW))
            print(f"  reason: {resolution.failure}")
        else:
            print(colorize("Model resolved from catalog", Colors.GREEN))
        print(f"  {Colors.BOLD}endpoint:{Colors.RESET} {endpoint}")

        if say:
            contents = [{"role": "user", "parts": [{"text": say}]}]
            try:
                reply = await client.generate_content(endpoint, contents)
            except GeminiError as e:
                print(colorize(f"Generation failed: {e}", Colors.RED))
                return 1
            print(f"  {Colors.BOLD}reply:{Colors.RESET} {reply}")

    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--key",
        default=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        help="API key (defaults to GEMINI_API_KEY / GOOGLE_API_KEY)",
    )
    parser.add_argument("--say", help="Optional message to send to the resolved model")
    args = parser.parse_args()

    if not args.key:
        print(colorize("No API key given. Pass --key or set GEMINI_API_KEY.", Colors.RED))
        sys.exit(2)

    sys.exit(asyncio.run(check(args.key, args.say)))


if __name__ == "__main__":
    main()
