import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

import click
import structlog
from rich.console import Console

from crystal_drop.config import (
    DEFAULT_DEMO_ENDPOINT,
    DEFAULT_PLAYBACK_DELAY,
    InvalidConfiguration,
    SearchConfig,
    validate_floor_count,
)
from crystal_drop.engine import SearchInconsistency, ThresholdSearchEngine
from crystal_drop.oracle import BreakOracleFn, fetch_building, http_oracle, load_oracle_fn
from crystal_drop.planner import plan, worst_case_drops
from crystal_drop.playback import play_search
from crystal_drop.state_queue import SingleSlotQueue
from crystal_drop.state_snapshot import SearchState
from crystal_drop.ui import render, ui_loop

console = Console()


def stderr_logger(*args) -> structlog.PrintLogger:
    return structlog.PrintLogger(sys.stderr)


def configure_logging(verbose: bool) -> None:
    """Send structlog output to stderr so it stays clear of the live view."""
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=stderr_logger,
        cache_logger_on_first_use=False,
    )


def build_config(n: int, secret_f: int) -> SearchConfig:
    try:
        return SearchConfig(n=n, secret_f=secret_f)
    except InvalidConfiguration as e:
        raise click.BadParameter(str(e)) from e


def finish(engine: ThresholdSearchEngine) -> None:
    """Exit non-zero when the run never located the breaking floor."""
    try:
        engine.raise_for_inconsistency()
    except SearchInconsistency as e:
        raise click.ClickException(f"Search inconsistency: {e}") from e


def play(engine: ThresholdSearchEngine, state_queue: SingleSlotQueue[SearchState],
         delay: float, secret_f: Optional[int] = None) -> SearchState:
    """Play the search in a worker thread while the main thread renders it."""
    stop = threading.Event()

    with ThreadPoolExecutor() as executor:
        future = executor.submit(play_search, engine, state_queue, delay=delay, stop=stop)

        try:
            ui_loop(state_queue, secret_f)
        except KeyboardInterrupt:
            stop.set()
            state_queue.close()

        return future.result()


def search(engine: ThresholdSearchEngine, state_queue: SingleSlotQueue[SearchState],
           delay: float, animated: bool, secret_f: Optional[int] = None) -> SearchState:
    if animated:
        state = play(engine, state_queue, delay, secret_f)
    else:
        state = engine.run_to_completion()
        console.print(render(state, secret_f))
    return state


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log every probe to stderr")
def cli(verbose: bool):
    configure_logging(verbose)


@cli.command("plan")
@click.argument("n", type=int)
def plan_cmd(n: int):
    """Show k and the planned first-probe floors for N floors."""
    try:
        validate_floor_count(n)
    except InvalidConfiguration as e:
        raise click.BadParameter(str(e), param_hint="N") from e

    probe_plan = plan(n)
    console.print(f"k = {probe_plan.k}")
    console.print(f"sequence = [{', '.join(str(f) for f in probe_plan.sequence)}]")
    console.print(f"worst case drops <= {worst_case_drops(probe_plan)}")


@cli.command()
@click.argument("n", type=int)
@click.argument("secret_f", type=int)
@click.option("--delay", "-d", type=float, default=DEFAULT_PLAYBACK_DELAY, show_default=True,
              help="Seconds between drops during playback")
@click.option("--animate/--no-animate", default=True, help="Play the drops back one at a time")
def run(n: int, secret_f: int, delay: float, animate: bool):
    """Find the breaking floor SECRET_F of an N floor building."""
    config = build_config(n, secret_f)
    state_queue: SingleSlotQueue[SearchState] = SingleSlotQueue()
    engine = ThresholdSearchEngine.from_config(config)
    search(engine, state_queue, delay, animate, config.secret_f)
    finish(engine)


@cli.command()
@click.argument("n", type=int)
@click.argument("secret_f", type=int)
def step(n: int, secret_f: int):
    """
    Walk through the search one drop at a time.

    Going back only re-shows an earlier state; the drops already made stay made.
    """
    config = build_config(n, secret_f)
    engine = ThresholdSearchEngine.from_config(config)

    history = [engine.snapshot()]
    position = 0
    console.print(render(history[position], config.secret_f))
    while True:
        at_latest = position == len(history) - 1
        if at_latest and engine.finished:
            break

        choice = click.prompt(
            "[n]ext, [b]ack or [q]uit",
            type=click.Choice(["n", "b", "q"]),
            default="n",
            show_choices=False,
        )
        if choice == "q":
            break
        if choice == "b":
            position = max(0, position - 1)
        elif not at_latest:
            position += 1
        else:
            result = engine.advance()
            if result.floor is not None:
                outcome = "broke" if result.broke else "safe"
                console.print(f"{result.action}: floor {result.floor} {outcome}")
            history.append(engine.snapshot())
            position += 1
        console.print(render(history[position], config.secret_f))

    finish(engine)


@cli.command()
@click.argument("n", type=int)
@click.option("--oracle-fn", "-o", required=True, type=click.Path(exists=True),
              help="Python file defining breaks(floor: int) -> bool")
@click.option("--delay", "-d", type=float, default=0.0, show_default=True)
@click.option("--animate/--no-animate", default=False)
def solve(n: int, oracle_fn: str, delay: float, animate: bool):
    """Search an N floor building with a user defined break oracle."""
    try:
        validate_floor_count(n)
    except InvalidConfiguration as e:
        raise click.BadParameter(str(e), param_hint="N") from e

    breaks: BreakOracleFn = load_oracle_fn(oracle_fn)
    state_queue: SingleSlotQueue[SearchState] = SingleSlotQueue()
    engine = ThresholdSearchEngine(plan(n), breaks)
    state = search(engine, state_queue, delay, animate)
    finish(engine)
    click.echo(state.found_floor)


@cli.command()
@click.option("--endpoint", "-e", default=DEFAULT_DEMO_ENDPOINT, show_default=True)
@click.option("--delay", "-d", type=float, default=DEFAULT_PLAYBACK_DELAY, show_default=True)
@click.option("--animate/--no-animate", default=True)
def demo(endpoint: str, delay: float, animate: bool):
    """Search the hidden building served by the demo API."""
    n = fetch_building(endpoint)
    state_queue: SingleSlotQueue[SearchState] = SingleSlotQueue()
    engine = ThresholdSearchEngine(plan(n), http_oracle(endpoint))
    state = search(engine, state_queue, delay, animate)
    finish(engine)
    click.echo(state.found_floor)


@cli.command("demo-api")
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to bind the server to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def demo_api(host: str, port: int, reload: bool):
    """Start the demo API that hides a breaking floor."""
    try:
        import uvicorn
        from demo_api.api import app
    except ImportError as e:
        click.echo(f"Error: Demo API dependencies not available: {e}")
        click.echo("Install with: pip install 'crystal-drop[demo]'")
        raise click.Abort()

    click.echo(f"Starting demo API server on http://{host}:{port}")
    click.echo("Available endpoints:")
    click.echo("  - GET  /api/building - Number of floors")
    click.echo("  - POST /api/drop     - Drop a probe from a floor")
    click.echo("\nPress Ctrl+C to stop the server")

    if reload:
        uvicorn.run("demo_api.api:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, reload=False)


if __name__ == "__main__":
    cli()
