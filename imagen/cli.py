"""imagen - AI image generation CLI for Gemini and OpenAI.

Usage:
    imagen "a cat on a mat"
    imagen -m gpt-1 -a 16:9 -f png -o cat.png "a cat on a mat"
    imagen -p prompt.txt -n 3

Environment:
    GEMINI_API_KEY / OPENAI_API_KEY   provider keys (override config file)
    IMAGEN_CONFIG                     config file path
    IMAGEN_REPLAY=<cassette>          serve results from a cassette, no network
    IMAGEN_REC=1                      record live calls to .imagen/cassettes/
    IMAGEN_CASSETTE_DIR               where recordings are written
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from dotenv import load_dotenv

from imagen import __version__
from imagen.config import Config, discover_config_path
from imagen.context import Mode, RecordingSession, ServiceContext, select_mode
from imagen.errors import ImageError, InvalidArgumentError
from imagen.model import Provider, detect_provider, resolve_model
from imagen.output import numbered_path, resolve_output_path, save_image
from imagen.params import (
    validate_aspect_ratio,
    validate_count,
    validate_format,
    validate_quality,
    validate_size,
    validate_thinking,
)
from imagen.ports.image_generator import ImageRequest, ImageResponse

log = logging.getLogger("imagen.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imagen",
        description="AI image generation CLI - unified interface for Gemini and OpenAI",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("prompt", nargs="?", help="Text prompt describing the desired image")
    source.add_argument("-p", "--prompt-file", help="Path to a file containing the prompt text")
    parser.add_argument("-m", "--model", help="Model name or short alias (default: nano-banana)")
    parser.add_argument("-a", "--aspect-ratio", help="Aspect ratio, e.g. 1:1, 16:9, 9:16")
    parser.add_argument("-s", "--size", help="Image size: 1K, 2K, 4K")
    parser.add_argument("-q", "--quality", help="Quality (OpenAI only): auto, low, medium, high")
    parser.add_argument("-f", "--format", help="Output format: jpeg, png, webp")
    parser.add_argument("-o", "--output", help="Output file path (auto-generated if omitted)")
    parser.add_argument("-n", "--count", type=int, default=1, help="Number of images to generate")
    parser.add_argument("-t", "--thinking", help="Thinking level (Gemini only): none, minimal, low, medium, high")
    parser.add_argument("--config", help="Config file path override")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_prompt(args: argparse.Namespace) -> str:
    if args.prompt:
        return args.prompt
    if args.prompt_file:
        try:
            return Path(args.prompt_file).read_text(encoding="utf-8")
        except OSError as e:
            raise InvalidArgumentError(f"Failed to read prompt file {args.prompt_file}: {e}") from e
    raise InvalidArgumentError("Provide a prompt string or use -p/--prompt-file")


def build_request(args: argparse.Namespace, config: Config) -> tuple[ImageRequest, Provider]:
    """Resolve, validate and assemble the request. No network or cassette access."""
    defaults = config.defaults
    prompt = resolve_prompt(args)

    model_name = args.model or defaults.model
    model = resolve_model(model_name)
    provider = detect_provider(model)
    log.info("Model: %s (resolved from '%s')", model, model_name)
    log.info("Provider: %s", provider.label)

    aspect_ratio = args.aspect_ratio or defaults.aspect_ratio
    size = args.size or defaults.size
    quality = args.quality or defaults.quality
    fmt = args.format or defaults.format

    validate_aspect_ratio(aspect_ratio, provider)
    validate_size(size)
    validate_quality(quality)
    validate_format(fmt)
    validate_count(args.count)
    if args.thinking:
        validate_thinking(args.thinking, provider)

    request = ImageRequest(
        model=model,
        prompt=prompt,
        aspect_ratio=aspect_ratio,
        size=size,
        quality=quality,
        format=fmt,
        count=args.count,
        thinking=args.thinking,
    )
    return request, provider


def save_images(response: ImageResponse, request: ImageRequest, output: Optional[str]) -> list[Path]:
    base_path = resolve_output_path(output, request.prompt, request.format)
    saved: list[Path] = []
    total = len(response.images)
    for i, image in enumerate(response.images):
        path = numbered_path(base_path, i, total)
        save_image(image.data, image.mime_type, request.format, path)
        print(f"Saved: {path}", file=sys.stderr)
        saved.append(path)
    return saved


def finish_recording(session: RecordingSession) -> None:
    try:
        path = session.finish()
    except ImageError as e:
        print(f"Warning: failed to save cassette: {e}", file=sys.stderr)
        return
    print(f"Cassette saved: {path}", file=sys.stderr)


async def run(args: argparse.Namespace) -> list[Path]:
    config = Config.load(discover_config_path(args.config))
    request, provider = build_request(args, config)

    mode, cassette_path = select_mode()
    session: Optional[RecordingSession] = None
    if mode is Mode.REPLAYING:
        log.info("Replaying from: %s", cassette_path)
        ctx = ServiceContext.replaying(cassette_path)
    elif mode is Mode.RECORDING:
        log.info("Recording mode enabled")
        cassette_dir = os.environ.get("IMAGEN_CASSETTE_DIR")
        ctx, session = ServiceContext.recording(
            provider, config, Path(cassette_dir) if cassette_dir else None,
        )
    else:
        ctx = ServiceContext.live(provider, config)

    try:
        response = await ctx.generator.generate(request)
    finally:
        try:
            await ctx.close()
        finally:
            if session is not None:
                finish_recording(session)

    return save_images(response, request, args.output)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> None:
    load_dotenv()
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        asyncio.run(run(args))
    except ImageError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
