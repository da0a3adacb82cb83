"""
Sentence pairs for a word.

    kotoba-ask "your prompt here"              # Workers AI
    kotoba-ask --open "言葉::kotoba::word;language"
"""
from __future__ import annotations

import click
import requests

from kotoba.cli.common import fail, join_prompt, require_prompt, send

USAGE = 'Please provide a prompt. Usage: kotoba-ask [--cf|--open] "your question here"'


@click.command()
@click.option("--cf", "use_cf", is_flag=True, help="Use Cloudflare Workers AI (default).")
@click.option("--open", "use_open", is_flag=True, help="Use OpenAI.")
@click.argument("words", nargs=-1)
@click.pass_context
def main(ctx: click.Context, use_cf: bool, use_open: bool, words: tuple) -> None:
    if use_cf and use_open:
        raise click.UsageError("--cf and --open are mutually exclusive")
    prompt = join_prompt(words)
    require_prompt(ctx, prompt, USAGE)

    provider = "open" if use_open else "cf"
    try:
        response = send(f"/ask/{provider}", {"prompt": prompt})
    except requests.RequestException as exc:
        fail(str(exc))
    click.echo(response.text)


if __name__ == "__main__":
    main()
