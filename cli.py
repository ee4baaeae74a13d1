#!/usr/bin/env python3
"""
Command-line interface for Screenshot to Code.
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from screen2code.config import Settings
from screen2code.errors import Screen2CodeError
from screen2code.io.upload_loader import UploadLoader
from screen2code.pipeline.generation import ScreenshotConverter

# Load environment variables
load_dotenv()


def cmd_serve(args):
    """Run the conversion API."""
    import uvicorn

    settings = Settings.from_env()
    host = args.host or settings.host
    port = args.port or settings.port

    print(f"🚀 Server running on http://{host}:{port}")
    if not settings.has_credentials:
        print("⚠️  GEMINI_API_KEY is not set; conversions will fail until it is configured")

    uvicorn.run(
        "screen2code.server.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=args.reload,
        log_level=args.log_level,
    )
    return 0


def cmd_convert(args):
    """Convert a local screenshot to HTML."""
    # Keep stdout clean when the HTML itself goes there
    status = sys.stdout if args.output else sys.stderr

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"❌ Error: Image not found: {image_path}", file=status)
        return 1

    loader = UploadLoader()
    upload = loader.load_path(image_path)

    is_valid, error_msg = loader.check(upload)
    if not is_valid:
        print(f"❌ {error_msg}", file=status)
        return 1

    settings = Settings.from_env()
    converter = ScreenshotConverter(model_name=args.model, settings=settings, loader=loader)

    print(f"📷 Image: {image_path} ({upload.media_type}, {upload.size:,} bytes)", file=status)
    print(f"🤖 Using {converter.model_name}", file=status)

    try:
        result = converter.convert(upload, request_id=image_path.stem)
    except Screen2CodeError as e:
        print(f"❌ {e.message}", file=status)
        return 1

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(result.html, encoding="utf-8")
        print(f"✅ HTML generated successfully!", file=status)
        print(f"📄 HTML: {output_path}", file=status)
    else:
        print(result.html)

    if result.prompt_tokens is not None:
        print(
            f"📊 Tokens: {result.prompt_tokens} prompt, {result.completion_tokens} completion",
            file=status
        )

    return 0


def cmd_check(args):
    """Report whether the service is configured."""
    settings = Settings.from_env()

    print(f"🤖 Model: {settings.gemini_model}")
    print(f"🌐 Port: {settings.port}")
    if settings.has_credentials:
        print("✅ GEMINI_API_KEY is configured")
        return 0

    print("❌ Gemini API key not configured. Add GEMINI_API_KEY to your .env file.")
    return 1


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Convert UI screenshots to HTML + Tailwind CSS",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the conversion API")
    serve_parser.add_argument("--host", help="Bind address (default: HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", "-p", type=int, help="Port (default: PORT or 5000)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve_parser.add_argument("--log-level", default="info", help="uvicorn log level")

    # Convert command
    convert_parser = subparsers.add_parser("convert", help="Convert a screenshot without the server")
    convert_parser.add_argument("image", help="Path to a PNG, JPEG or WebP screenshot")
    convert_parser.add_argument("--output", "-o", help="Output HTML file (default: stdout)")
    convert_parser.add_argument("--model", help="Gemini model (default: GEMINI_MODEL)")

    # Check command
    subparsers.add_parser("check", help="Check the API key configuration")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    try:
        if args.command == "serve":
            return cmd_serve(args)
        elif args.command == "convert":
            return cmd_convert(args)
        elif args.command == "check":
            return cmd_check(args)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
