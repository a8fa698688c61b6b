#!/usr/bin/env python3
"""
CreatorStudio - Main Entry Point

Drives the creator tool panels from the terminal.

Usage:
    # List the tools
    python main.py tools

    # Upload pack (titles, description, tags, pinned comment, thumbnail ideas)
    python main.py pack --keywords "ai automation"

    # Thumbnail, optionally styled after a reference image
    python main.py thumbnail --prompt "Shocked man, glowing chart" --reference ref.jpg -o thumb.png

    # Narration
    python main.py voice --text "Welcome back to the channel" --voice Puck -o intro.wav

    # Veo video (prompts for a paid-project key with --select-key)
    python main.py video --prompt "Drone shot of a cyberpunk city" --select-key -o clip.mp4
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from core.config import get_config
from services.studio import (
    TOOLS,
    AspectRatio,
    MediaResult,
    ReferenceMedia,
    Resolution,
    StudioSession,
    TerminalKeySelector,
    UploadPackResult,
    VoiceName,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("creatorstudio")


def notify(message: str):
    """Blocking user notification."""
    print(f"\n!! {message}", file=sys.stderr)


def print_status(panel: str, message: str):
    if message:
        print(f"[{panel}] {message}")


def print_pack(pack: UploadPackResult):
    print("\n=== Titles ===")
    for i, title in enumerate(pack.titles, 1):
        print(f"  {i}. {title}")
    print("\n=== Description ===")
    print(pack.description)
    print("\n=== Tags ===")
    print(", ".join(pack.to_youtube_tags()))
    print("\n=== Hashtags ===")
    print(" ".join(pack.hashtags))
    print("\n=== Pinned Comment ===")
    print(pack.pinned_comment)
    print("\n=== Thumbnail Concepts ===")
    for i, concept in enumerate(pack.thumbnail_concepts, 1):
        print(f"  {i}. {concept}")


def save_media(result: MediaResult, output: Optional[str]):
    if not output:
        print(f"Generated {result.handle.mime_type} ({result.handle.size / 1024:.1f} KB); pass --output to save")
        return
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(result.handle.data)
    print(f"Saved {path} ({result.handle.size / 1024:.1f} KB)")


def install_cancel_handlers(loop: asyncio.AbstractEventLoop, panel) -> tuple:
    """First SIGINT/SIGTERM stops video polling; the next one gets the default handler."""
    signals = (signal.SIGTERM, signal.SIGINT)

    def handle_signal():
        logger.info("Stopping video polling (signal again to abort)")
        panel.cancel()
        for sig in signals:
            loop.remove_signal_handler(sig)

    for sig in signals:
        loop.add_signal_handler(sig, handle_signal)
    return signals


def list_tools():
    print("CreatorStudio tools:\n")
    for tool in TOOLS:
        print(f"  {tool.name:<10} {tool.title}")
        print(f"  {'':<10} {tool.description}")


async def run_command(args: argparse.Namespace) -> bool:
    """Run one panel action. Returns True on success."""
    config = get_config()
    for issue in config.validate():
        logger.warning(issue)

    selector = TerminalKeySelector() if getattr(args, "select_key", False) else None

    async with StudioSession(
        config=config,
        selector=selector,
        notify=notify,
        on_status=print_status,
    ) as studio:
        if args.command == "pack":
            pack = await studio.upload_pack.submit(args.keywords, args.script)
            if pack is None:
                return False
            print_pack(pack)
            return True

        if args.command == "thumbnail":
            reference = None
            if args.reference:
                try:
                    reference = ReferenceMedia.from_path(args.reference)
                except OSError as e:
                    notify(f"Could not read reference image: {e}")
                    return False
            result = await studio.thumbnail.submit(args.prompt, reference)
            if result is None:
                return False
            if result.analysis_text:
                print("\n=== Style Analysis ===")
                print(result.analysis_text)
            save_media(result, args.output)
            return True

        if args.command == "voice":
            result = await studio.voice.submit(args.text, args.voice)
            if result is None:
                return False
            save_media(result, args.output)
            return True

        if args.command == "video":
            loop = asyncio.get_running_loop()
            signals = install_cancel_handlers(loop, studio.video)
            try:
                result = await studio.video.submit(args.prompt, args.aspect_ratio, args.resolution)
            finally:
                for sig in signals:
                    loop.remove_signal_handler(sig)
            if result is None:
                return False
            save_media(result, args.output)
            return True

    return False


def main():
    parser = argparse.ArgumentParser(
        description="CreatorStudio - AI tools for YouTube creators",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python main.py pack --keywords "ai automation"
    python main.py thumbnail --prompt "Shocked face, neon chart" -o thumb.png
    python main.py voice --text "Hello world" --voice Fenrir -o hello.wav
    python main.py video --prompt "Sunset timelapse" --aspect-ratio 9:16 -o clip.mp4
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("tools", help="List available tools")

    # Upload pack command
    pack_parser = subparsers.add_parser("pack", help="Generate a YouTube upload pack")
    pack_parser.add_argument("--keywords", "-k", required=True, help="Target keywords")
    pack_parser.add_argument("--script", "-s", help="Optional script or context")

    # Thumbnail command
    thumb_parser = subparsers.add_parser("thumbnail", help="Generate a 16:9 thumbnail")
    thumb_parser.add_argument("--prompt", "-p", required=True, help="Thumbnail idea / text")
    thumb_parser.add_argument("--reference", "-r", help="Reference thumbnail to analyze")
    thumb_parser.add_argument("--output", "-o", help="Where to save the image")

    # Voice command
    voice_parser = subparsers.add_parser("voice", help="Narrate a script")
    voice_parser.add_argument("--text", "-t", required=True, help="Script to read")
    voice_parser.add_argument(
        "--voice",
        choices=[v.value for v in VoiceName],
        default=VoiceName.KORE.value,
        help="Narrator voice",
    )
    voice_parser.add_argument("--output", "-o", help="Where to save the WAV file")

    # Video command
    video_parser = subparsers.add_parser("video", help="Generate a Veo video")
    video_parser.add_argument("--prompt", "-p", required=True, help="Video description")
    video_parser.add_argument(
        "--aspect-ratio",
        choices=[a.value for a in AspectRatio],
        default=AspectRatio.LANDSCAPE.value,
    )
    video_parser.add_argument(
        "--resolution",
        choices=[r.value for r in Resolution],
        default=Resolution.FULL_HD.value,
    )
    video_parser.add_argument(
        "--select-key",
        action="store_true",
        help="Prompt for a paid-project API key instead of using GEMINI_API_KEY",
    )
    video_parser.add_argument("--output", "-o", help="Where to save the MP4 file")

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "tools":
        list_tools()
        return

    ok = asyncio.run(run_command(args))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
