#!/usr/bin/env python3
"""
Command-line Image-to-ASCII Meme Generator

Usage:
    meme-ascii cat.png                          # Print ASCII art
    meme-ascii cat.png --charset block -w 80    # Pick ramp and width
    meme-ascii cat.png --enhance -o cat.txt     # AI enhance, save
    meme-ascii cat.png --interactive            # REPL
    meme-ascii --list-charsets
"""

import argparse
import sys
from typing import Callable, List, Optional

from .charsets import ASCII_CHARSETS, DEFAULT_CHARSET_KEY
from .config import ConversionOptions, Settings
from .errors import MemeAsciiError
from .logging_conf import setup_logging
from .pipeline import MemeAsciiSession

REPL_HELP = """Commands:
  width <N>        - Set output width
  charset <KEY>    - Set character ramp
  invert           - Toggle inverted brightness
  contrast <X>     - Set contrast multiplier (1.0 = none)
  enhance          - AI meme enhancement of the current art
  show             - Print the current art
  save <file>      - Save current art (.txt, .html or .png)
  history          - List history entries
  load <id>        - Restore a history entry
  delete <id>      - Delete a history entry
  help             - Show this help
  quit / exit      - Exit"""


def print_charsets():
    for key, charset in ASCII_CHARSETS.items():
        marker = " (default)" if key == DEFAULT_CHARSET_KEY else ""
        print(f"  {key:<14} {charset.name}{marker}: {charset.description}")
        print(f"  {'':<14} [{charset.chars}]")


def print_history(session: MemeAsciiSession):
    if not len(session.history):
        print("📭 History is empty.")
        return
    for entry in session.history:
        opts = entry.options
        print(
            f"  {entry.id[:8]}  width={opts.output_width} charset={opts.charset_key} "
            f"invert={opts.invert} contrast={opts.contrast:g}  |{entry.preview[:40]}"
        )


def _resolve_entry_id(session: MemeAsciiSession, prefix: str) -> str:
    """Expand a short id prefix, as shown by `history`, to the full id."""
    matches = [e.id for e in session.history if e.id.startswith(prefix)]
    return matches[0] if len(matches) == 1 else prefix


def save_art(session: MemeAsciiSession, path: str) -> str:
    if path.endswith(".png"):
        return session.export_png(path)
    if path.endswith((".html", ".htm")):
        session.result().save(path)
        return path
    return session.export_text(path)


def handle_command(session: MemeAsciiSession, line: str) -> bool:
    """Run one REPL command. Returns False when the user asked to quit."""
    cmd, _, arg = line.strip().partition(" ")
    cmd = cmd.lower()
    arg = arg.strip()

    if cmd in ("quit", "exit", "q"):
        print("👋 Goodbye!")
        return False
    if cmd == "help":
        print(REPL_HELP)
    elif cmd == "width":
        try:
            width = int(arg)
        except ValueError:
            print("❌ Invalid width. Usage: width 80")
            return True
        session.update_options(output_width=width)
        print(f"✅ Width set to {width}")
    elif cmd == "charset":
        if arg not in ASCII_CHARSETS:
            print(f"⚠️  Unknown charset '{arg}', the default '{DEFAULT_CHARSET_KEY}' will be used")
        session.update_options(charset_key=arg or DEFAULT_CHARSET_KEY)
        print(f"✅ Charset set to {session.options.charset_key}")
    elif cmd == "invert":
        session.update_options(invert=not session.options.invert)
        print(f"✅ Invert {'on' if session.options.invert else 'off'}")
    elif cmd == "contrast":
        try:
            contrast = float(arg)
        except ValueError:
            print("❌ Invalid contrast. Usage: contrast 1.5")
            return True
        session.update_options(contrast=contrast)
        print(f"✅ Contrast set to {contrast:g}")
    elif cmd == "enhance":
        print("🧠 Enhancing with AI...")
        session.enhance()
        print(session.current_art)
    elif cmd == "show":
        print(session.current_art or "❌ No output yet!")
    elif cmd == "save":
        if not arg:
            print("❌ Usage: save <file>")
            return True
        print(f"✅ Saved to {save_art(session, arg)}")
    elif cmd == "history":
        print_history(session)
    elif cmd == "load":
        entry = session.load_from_history(_resolve_entry_id(session, arg))
        print(f"✅ Loaded {entry.id[:8]}")
        print(session.current_art)
    elif cmd == "delete":
        if session.delete_from_history(_resolve_entry_id(session, arg)):
            print("🗑️  History entry deleted")
        else:
            print(f"❌ No history entry '{arg}'")
    else:
        print(f"❓ Unknown command '{cmd}'. Type 'help'.")
    return True


def interactive_mode(session: MemeAsciiSession, input_fn: Callable[[str], str] = input):
    """Interactive REPL over one session."""
    print("\n" + "=" * 60)
    print("   MEMEASCII INTERACTIVE MODE")
    print("=" * 60)
    print(REPL_HELP)

    while True:
        try:
            line = input_fn("\n🎛️  > ")
        except (KeyboardInterrupt, EOFError):
            print("\n👋 Goodbye!")
            break
        if not line.strip():
            continue
        try:
            if not handle_command(session, line):
                break
            if line.strip().split()[0].lower() in ("width", "charset", "invert", "contrast"):
                print(session.current_art)
        except Exception as e:
            # Report and keep the REPL alive; art is left as it was
            print(f"❌ Error: {e}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="meme-ascii",
        description="Convert images to ASCII art memes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  meme-ascii cat.png
    Print ASCII art with default settings

  meme-ascii cat.png --charset block --no-invert -w 80
    Block shading, dark-on-light, 80 columns

  meme-ascii cat.png --enhance --output cat.txt
    AI meme enhancement (needs GEMINI_API_KEY or GROQ_API_KEY)
""",
    )
    parser.add_argument("image", nargs="?", help="Image file to convert")
    parser.add_argument("--width", "-w", type=int, default=ConversionOptions.output_width,
                        help=f"Output width in characters (default: {ConversionOptions.output_width})")
    parser.add_argument("--charset", "-c", default=DEFAULT_CHARSET_KEY,
                        help=f"Character ramp key (default: {DEFAULT_CHARSET_KEY})")
    parser.add_argument("--invert", dest="invert", action="store_true", default=True,
                        help="Light art for dark backgrounds (default)")
    parser.add_argument("--no-invert", dest="invert", action="store_false",
                        help="Dark art for light backgrounds")
    parser.add_argument("--contrast", type=float, default=1.0,
                        help="Contrast multiplier (default: 1.0)")
    parser.add_argument("--enhance", "-e", action="store_true",
                        help="Enhance the result with AI")
    parser.add_argument("--output", "-o", help="Save art as text (.txt) or HTML (.html)")
    parser.add_argument("--html", help="Also save the art as a styled HTML page")
    parser.add_argument("--png", help="Also render the art to a PNG file")
    parser.add_argument("--interactive", "-i", action="store_true", help="Start interactive mode")
    parser.add_argument("--list-charsets", action="store_true", help="List character ramps and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    setup_logging(settings)

    if args.list_charsets:
        print_charsets()
        return 0
    if not args.image:
        parser.print_usage(sys.stderr)
        print("❌ An image file is required", file=sys.stderr)
        return 2

    try:
        options = ConversionOptions(
            output_width=args.width,
            charset_key=args.charset,
            invert=args.invert,
            contrast=args.contrast,
        )
        session = MemeAsciiSession(
            options=options,
            max_history=settings.max_history,
            history_file=settings.history_file,
        )
        session.load_image_file(args.image)

        if args.interactive:
            interactive_mode(session)
            return 0

        if args.enhance:
            print("🧠 Enhancing with AI...", file=sys.stderr)
            session.enhance()

        print(session.current_art)

        if args.output:
            print(f"✅ Saved to {save_art(session, args.output)}", file=sys.stderr)
        if args.html:
            session.result().save(args.html, format="html")
            print(f"✅ HTML saved to {args.html}", file=sys.stderr)
        if args.png:
            print(f"✅ Rendered to {session.export_png(args.png)}", file=sys.stderr)
    except MemeAsciiError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
