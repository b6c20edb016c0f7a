#!/usr/bin/env python3
"""
CLI for writing a children's story (and optionally illustrating it).

Usage:
    python cli/generate_book.py "a brave little turtle"
    python cli/generate_book.py "space cats" --language en --pages 8
    python cli/generate_book.py "a rainy day" --images output/rainy_day
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

load_dotenv()

from storybook.config import STORY_CONSTANTS  # noqa: E402
from storybook.config.story import clamp_page_count  # noqa: E402
from storybook.core.errors import StorybookError  # noqa: E402
from storybook.core.images import extension_for  # noqa: E402
from storybook.api.services.book_generation import (  # noqa: E402
    GenerationOptions,
    illustrate_story,
    write_story_from_theme,
)


async def generate(theme: str, options: GenerationOptions, images_dir: Path | None) -> dict:
    story = await write_story_from_theme(theme, options)
    result = story.to_dict()

    if images_dir is not None:
        images = await illustrate_story(story, options.image_model)
        images_dir.mkdir(parents=True, exist_ok=True)
        paths = []
        for index, image in enumerate(images):
            if image is None:
                paths.append(None)
                continue
            path = images_dir / f"page-{index}.{extension_for(image.mime_type)}"
            path.write_bytes(image.data)
            paths.append(str(path))
        result["images"] = paths

    return result


def main():
    parser = argparse.ArgumentParser(
        description="Write a children's picture book story from a theme",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("theme", type=str, help="Theme or idea for the story")
    parser.add_argument(
        "--language", "-l",
        type=str,
        default=STORY_CONSTANTS["default_language"],
        help=f"Story language code (default: {STORY_CONSTANTS['default_language']})",
    )
    parser.add_argument(
        "--pages", "-p",
        type=int,
        default=STORY_CONSTANTS["default_page_count"],
        help=f"Number of pages (default: {STORY_CONSTANTS['default_page_count']})",
    )
    parser.add_argument("--model", type=str, default=None, help="Story model name")
    parser.add_argument(
        "--images",
        type=str,
        default=None,
        help="Also illustrate the pages and save them to this directory",
    )
    parser.add_argument("--image-model", type=str, default=None, help="Image model name")

    args = parser.parse_args()

    options = GenerationOptions(
        language=args.language,
        page_count=clamp_page_count(args.pages),
        model=args.model,
        image_model=args.image_model,
    )
    images_dir = Path(args.images) if args.images else None

    try:
        result = asyncio.run(generate(args.theme, options, images_dir))
    except StorybookError as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, ensure_ascii=False, indent=2))


if __name__ == "__main__":
    main()
