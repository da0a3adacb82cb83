"""
Streamed explanations.

    kotoba-explain --vocab "実現"
    kotoba-explain --grammar "ても"
    kotoba-explain "実現"                      # vocabulary
"""
from __future__ import annotations

import click
import requests

from kotoba.cli.common import fail, join_prompt, require_prompt, send

USAGE = 'Please provide a prompt. Usage: kotoba-explain [--vocab|--grammar] "word or grammar pattern"'


@click.command()
@click.option("--vocab", "vocab", is_flag=True, help="Vocabulary explanation (default).")
@click.option("--grammar", "grammar", is_flag=True, help="Grammar explanation.")
@click.argument("words", nargs=-1)
@click.pass_context
def main(ctx: click.Context, vocab: bool, grammar: bool, words: tuple) -> None:
    if vocab and grammar:
        raise click.UsageError("--vocab and --grammar are mutually exclusive")
    prompt = join_prompt(words)
    require_prompt(ctx, prompt, USAGE)

    kind = "grammar" if grammar else "vocabulary"
    try:
        response = send("/explain/open", {"prompt": prompt, "type": kind}, stream=True)
        click.echo(f"Status: {response.status_code}")
        with response:
            for chunk in response.iter_content(chunk_size=None, decode_unicode=True):
                if chunk:
                    click.echo(chunk, nl=False)
    except requests.RequestException as exc:
        fail(str(exc))
    click.echo("\n--- End of response ---")


if __name__ == "__main__":
    main()
