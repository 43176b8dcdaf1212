"""CLI entry point for epicviz."""

import json
import logging
import sys

import click

from epicviz.config import DEFAULT_CONFIG
from epicviz.ir.model import Epic
from epicviz.layout.engine import compute_layout
from epicviz.mock import get_mock_epic
from epicviz.types import InnerDirection


@click.command()
@click.argument("input", required=False, type=click.Path(exists=True))
@click.option("--mock", "use_mock", is_flag=True, help="Lay out the built-in demo epic instead of reading input")
@click.option(
    "--direction",
    "-d",
    "direction",
    type=click.Choice([d.value for d in InnerDirection]),
    default=None,
    help="Direction of the task layers inside each batch",
)
@click.option("--task-width", "-w", "task_width", type=int, default=None, help="Task card width in pixels")
@click.option("--indent", "-i", "indent", type=int, default=2, help="JSON indentation (0 for compact output)")
@click.option("--output", "-o", "output", type=str, default=None, help="Write output to this file instead of stdout")
@click.option("--verbose", "-v", "verbose", is_flag=True, help="Log layout phases to stderr")
def main(
    input: str | None,
    use_mock: bool,
    direction: str | None,
    task_width: int | None,
    indent: int,
    output: str | None,
    verbose: bool,
) -> None:
    """Epic → Batch → Task diagram layout as JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if use_mock:
        epic = get_mock_epic()
    else:
        if input:
            try:
                with open(input) as f:
                    text = f.read()
            except OSError as e:
                click.echo(f"error: cannot read '{input}': {e}", err=True)
                sys.exit(1)
        else:
            text = sys.stdin.read()

        try:
            epic = Epic.from_json(text)
        except json.JSONDecodeError as e:
            click.echo(f"error: invalid JSON: {e}", err=True)
            sys.exit(1)
        except ValueError as e:
            click.echo(f"error: invalid epic: {e}", err=True)
            sys.exit(1)

    overrides: dict[str, object] = {}
    if direction is not None:
        overrides["inner_direction"] = InnerDirection(direction)
    if task_width is not None:
        overrides["task_width"] = task_width
    config = DEFAULT_CONFIG.with_overrides(**overrides)

    result = compute_layout(epic, config)
    rendered = json.dumps(result.to_dict(), indent=indent or None, ensure_ascii=False) + "\n"

    if output:
        try:
            with open(output, "w") as f:
                f.write(rendered)
        except OSError as e:
            click.echo(f"error: cannot write '{output}': {e}", err=True)
            sys.exit(1)
    else:
        click.echo(rendered, nl=False)


if __name__ == "__main__":
    main()
