"""
Text to speech, saved as mp3.

    kotoba-sound "text to convert to speech"
    kotoba-sound --voice nova --model tts-1-hd "text to convert to speech"

Voices: alloy (default), ash, ballad, coral, echo, fable, nova, onyx, sage, shimmer, verse
Models: tts-1 (default), tts-1-hd, gpt-4o-mini-tts
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import click
import requests

from kotoba.cli.common import fail, join_prompt, require_prompt, send

USAGE = 'Please provide text to convert to speech. Usage: kotoba-sound [--voice VOICE] [--model MODEL] "text to speak"'


def output_path(output_dir: Path, prompt: str, now: Optional[datetime] = None) -> Path:
    now = now or datetime.now(timezone.utc)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S-") + f"{now.microsecond // 1000:03d}Z"
    prefix = re.sub(r"[^a-zA-Z0-9]", "_", prompt[:20])
    return output_dir / f"{prefix}_{timestamp}.mp3"


@click.command()
@click.option("--voice", default="alloy", show_default=True)
@click.option("--model", default="tts-1", show_default=True)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("output"),
    show_default=True,
)
@click.argument("words", nargs=-1)
@click.pass_context
def main(ctx: click.Context, voice: str, model: str, output_dir: Path, words: tuple) -> None:
    prompt = join_prompt(words)
    require_prompt(ctx, prompt, USAGE)

    target = output_path(output_dir, prompt)
    click.echo(f'Converting text to speech: "{prompt}"')
    click.echo(f"Voice: {voice}, Model: {model}")

    try:
        response = send("/sound/open", {"prompt": prompt, "voice": voice, "model": model}, stream=True)
        with response:
            if response.status_code != 200:
                click.echo(f"Error: Received status code {response.status_code}", err=True)
                click.echo(response.text, err=True)
                ctx.exit(1)
            output_dir.mkdir(parents=True, exist_ok=True)
            click.echo(f"Saving audio to {target}")
            with target.open("wb") as handle:
                for chunk in response.iter_content(chunk_size=8192):
                    if chunk:
                        handle.write(chunk)
    except requests.RequestException as exc:
        fail(str(exc))
    click.echo("Audio file saved successfully!")


if __name__ == "__main__":
    main()
