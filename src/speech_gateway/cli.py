"""
Command-Line Interface for speech-gateway.

Runs the HTTP server, or performs a single synthesis without it using
the same configuration, validators and synthesis client as the API.

Usage Examples:
    # Serve the API
    speech-gateway serve --host 0.0.0.0 --port 8000

    # One-off synthesis to a file
    speech-gateway synthesize "Hello world" --out hello.mp3

    # Faster speech, JSON summary
    speech-gateway synthesize "Hello world" --rate 10 --json

Exit Codes:
    0  success
    1  synthesis or configuration failure
    2  invalid input (empty text, too many words)

Environment Variables:
    SPEECH_GW_SPEECH_KEY: Speech service key
    SPEECH_GW_SPEECH_REGION: Speech service region
    SPEECH_GW_SETTINGS: Settings file (default config/settings.yaml)
    SPEECH_GW_LOG_LEVEL: Log level 1-4
"""

from __future__ import annotations

import argparse
import asyncio
import json
import os
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

from speech_gateway.core.config import GatewayConfig, load_config
from speech_gateway.core.errors import (
    ConfigurationError,
    GatewayError,
    InvalidInputError,
    TextTooLongError,
)
from speech_gateway.core.logging import configure_logging, get_logger, info, set_request_id
from speech_gateway.services.speech_service import SpeechService, SynthesisOutcome
from speech_gateway.synthesis.client import SynthesisClient

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_INPUT = 2


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="speech-gateway", description="speech-gateway CLI")
    parser.add_argument("--settings", help="Settings file (default: config/settings.yaml)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true", help="Reload on code changes")

    synth = sub.add_parser("synthesize", help="Synthesize one text to an audio file")
    synth.add_argument("text", help="Text to synthesize")
    synth.add_argument("--rate", type=int, default=0, help="Prosody rate offset in percent")
    synth.add_argument("--out", default="out.mp3", help="Output audio file")
    synth.add_argument("--json", action="store_true", help="Print JSON summary")

    return parser.parse_args(argv)


async def _convert(config: GatewayConfig, text: str, rate: int) -> SynthesisOutcome:
    client = SynthesisClient(config.speech)
    await client.start()
    try:
        return await SpeechService(client).convert(text, rate)
    finally:
        await client.close()


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    if args.settings:
        # The app is imported by uvicorn and reads its settings path from here
        os.environ["SPEECH_GW_SETTINGS"] = args.settings
    uvicorn.run("speech_gateway.main:app", host=args.host, port=args.port, reload=args.reload)
    return EXIT_OK


def _synthesize(args: argparse.Namespace) -> int:
    log = get_logger("speech-gateway.cli")
    set_request_id(str(uuid4())[:12])

    try:
        config = load_config(args.settings)
        configure_logging(config.logging.level, force=True, settings=config.logging.as_dict())
        outcome = asyncio.run(_convert(config, args.text, args.rate))
    except (InvalidInputError, TextTooLongError) as e:
        _report(args, {"ok": False, "code": e.code, "message": e.message})
        return EXIT_INVALID_INPUT
    except (GatewayError, FileNotFoundError) as e:
        code = e.code if isinstance(e, GatewayError) else ConfigurationError.default_code
        _report(args, {"ok": False, "code": code, "message": str(e)})
        return EXIT_FAILED

    out_path = Path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(outcome.audio_data)
    info(log, "written", out=str(out_path), bytes=len(outcome.audio_data))

    _report(args, {
        "ok": True,
        "out": str(out_path),
        "bytes": len(outcome.audio_data),
        "duration_seconds": round(outcome.duration_seconds, 3),
        "wpm": round(outcome.wpm, 1),
        "word_count": outcome.word_count,
    })
    return EXIT_OK


def _report(args: argparse.Namespace, payload: dict) -> None:
    if args.json:
        print(json.dumps(payload, ensure_ascii=False))
    elif payload["ok"]:
        print(
            f"{payload['out']}: {payload['bytes']} bytes, "
            f"{payload['duration_seconds']}s, {payload['wpm']} wpm"
        )
    else:
        print(f"[{payload['code']}] {payload['message']}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Optional list of command-line arguments.

    Returns:
        Exit code (see module docstring).
    """
    args = _parse_args(argv)
    if args.command == "serve":
        return _serve(args)
    return _synthesize(args)


if __name__ == "__main__":
    raise SystemExit(main())
