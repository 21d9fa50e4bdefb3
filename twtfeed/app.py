"""Typer CLI entrypoint for twtfeed."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import typer
import yaml
from rich.console import Console

from .config import ClientConfig, ConfigLocator, ConfigRepository, SortOrder
from .engine import LocalRecordSink, MentionTransformer, Record, ThreadPoolManager
from .errors import ConfigurationError, PublishHookError
from .infra import SQLiteManager
from .logging_conf import configure_logging
from .orchestrator import TimelineAggregator
from .ui import display, render

app = typer.Typer(
    help="twtfeed - client for twtxt, the minimalist decentralised microblog.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
config_app = typer.Typer(
    name="config",
    help="Read and change the configuration file.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
app.add_typer(config_app, name="config")

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


@dataclass
class CliOptions:
    """Global options collected by the callback before any state exists."""

    config_file: Path | None = None
    verbose: bool = False
    force: bool = False
    overrides: dict[str, Any] = field(default_factory=dict)


@dataclass
class AppState:
    repository: ConfigRepository
    aggregator: TimelineAggregator
    force: bool = False


def build_state(options: CliOptions) -> AppState:
    locator = ConfigLocator(config_file=options.config_file)
    repository = ConfigRepository(locator, overrides=options.overrides)
    configure_logging(verbose=options.verbose, log_dir=locator.logs_dir)
    aggregator = TimelineAggregator(
        config_repository=repository,
        thread_pool=ThreadPoolManager(),
        storage=SQLiteManager(),
    )
    return AppState(repository=repository, aggregator=aggregator, force=options.force)


def _get_state(ctx: typer.Context) -> AppState:
    # Built on first use so usage errors never touch config, cache or network.
    root = ctx.find_root()
    if not isinstance(root.obj, AppState):
        root.obj = build_state(root.obj or CliOptions())
        root.call_on_close(root.obj.aggregator.close)
    return root.obj


def _fail(message: str, code: int = 1) -> typer.Exit:
    err_console.print(message, style="red", markup=False, soft_wrap=True)
    return typer.Exit(code=code)


def _load_config(state: AppState) -> ClientConfig:
    try:
        return state.repository.load()
    except ConfigurationError as exc:
        raise _fail(str(exc)) from exc


def _show(config: ClientConfig, records: list[Record]) -> None:
    transformer = MentionTransformer(config.known_identities)
    lines = render(records, config.twtxt.time_format, transformer)
    display(lines, use_pager=config.twtxt.use_pager, console=console)


def _parse_option_value(value: str) -> Any:
    parsed = yaml.safe_load(value) if value.strip() else value
    if isinstance(parsed, (dict, list)):
        return value
    return parsed


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to the configuration file."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    cache: Optional[bool] = typer.Option(
        None, "--cache/--no-cache", help="Use conditional requests and the feed cache."
    ),
    pager: Optional[bool] = typer.Option(None, "--pager/--no-pager", help="Page the timeline."),
    rewrite_urls: Optional[bool] = typer.Option(
        None,
        "--rewrite-urls/--no-rewrite-urls",
        help="Update followed urls after a permanent redirect.",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Maximum number of tweets."),
    sorting: Optional[SortOrder] = typer.Option(None, "--sorting", help="Timeline order."),
    since: Optional[str] = typer.Option(
        None, "--since", help="Oldest tweet to show (ISO-8601 or duration such as 2d)."
    ),
    until: Optional[str] = typer.Option(
        None, "--until", help="Newest tweet to show (ISO-8601 or duration such as 1h)."
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    time_format: Optional[str] = typer.Option(
        None, "--time-format", help="strftime format for timestamps."
    ),
    twtfile: Optional[Path] = typer.Option(None, "--twtfile", "-f", help="Local twtfile."),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing follow entry."),
) -> None:
    overrides = {
        "use_cache": cache,
        "use_pager": pager,
        "rewrite_urls": rewrite_urls,
        "limit_timeline": limit,
        "sorting": sorting,
        "since": since,
        "until": until,
        "timeout": timeout,
        "time_format": time_format,
        "twtfile": twtfile,
    }
    ctx.obj = CliOptions(
        config_file=config_file,
        verbose=verbose,
        force=force,
        overrides={key: value for key, value in overrides.items() if value is not None},
    )


@app.command("timeline", help="Show the merged timeline of everyone you follow.")
def timeline(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    _show(config, state.aggregator.timeline(config))


@app.command("view", help="Show the timeline of a single followed source.")
def view(ctx: typer.Context, nick: str = typer.Argument(..., help="Nick to view.")) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    if nick not in config.following:
        console.print(f"You're not following {nick}.", markup=False, soft_wrap=True)
        raise typer.Exit(code=1)
    _show(config, state.aggregator.timeline(config, selector=nick))


@app.command("tweet", help="Append a tweet to your twtfile.")
def tweet(ctx: typer.Context, text: str = typer.Argument(..., help="Tweet text.")) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    settings = config.twtxt
    transformer = MentionTransformer(config.known_identities)
    author = settings.nick or os.environ.get("USER") or "me"
    record = Record.create(author, transformer.expand(text, embed_names=settings.embed_names))
    sink = LocalRecordSink(settings.twtfile, settings.pre_tweet_hook, settings.post_tweet_hook)
    try:
        sink.append(record)
    except PublishHookError as exc:
        if exc.appended:
            raise _fail(f"{exc} Your tweet was added to {sink.twtfile} anyway.") from exc
        raise _fail(f"{exc} Your tweet was not added.") from exc


@app.command("follow", help="Follow a source.")
def follow(
    ctx: typer.Context,
    nick: str = typer.Argument(..., help="Nick to follow."),
    url: str = typer.Argument(..., help="Url of the twtfile."),
) -> None:
    state = _get_state(ctx)
    state.repository.initialise()
    config = _load_config(state)
    current = config.following.get(nick)
    if current == url:
        console.print(f"You're already following {nick}.", markup=False, soft_wrap=True)
        raise typer.Exit(code=1)
    if current and not state.force:
        console.print(
            f"You're already following {nick} under a different url.", markup=False, soft_wrap=True
        )
        raise typer.Exit(code=1)
    config.following[nick] = url
    state.repository.sync_following(config.following)
    console.print(f"You're now following {nick}.", markup=False, soft_wrap=True)


@app.command("unfollow", help="Stop following a source.")
def unfollow(ctx: typer.Context, nick: str = typer.Argument(..., help="Nick to unfollow.")) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    if nick not in config.following:
        console.print(f"You're not following {nick}.", markup=False, soft_wrap=True)
        raise typer.Exit(code=1)
    del config.following[nick]
    state.repository.sync_following(config.following)
    console.print(f"You've unfollowed {nick}.", markup=False, soft_wrap=True)


@app.command("following", help="List the sources you follow.")
def following(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    config = _load_config(state)
    for nick, url in config.following.items():
        console.print(f"{nick} @ {url}", markup=False, soft_wrap=True)


@config_app.command("edit", help="Open the configuration file in $VISUAL or $EDITOR.")
def config_edit(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    state.repository.initialise()
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR") or "vi"
    typer.edit(filename=str(state.repository.path), editor=editor)
    _load_config(state)


@config_app.command("get", help="Print a configuration value.")
def config_get(ctx: typer.Context, key: str = typer.Argument(..., help="Option name.")) -> None:
    state = _get_state(ctx)
    try:
        value = state.repository.get_option(key)
    except ConfigurationError as exc:
        raise _fail(str(exc)) from exc
    if value is None:
        console.print(f"The configuration key {key} is unset.", markup=False, soft_wrap=True)
        return
    console.print(str(value), markup=False)


@config_app.command("set", help="Set a configuration value.")
def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Option name."),
    value: str = typer.Argument(..., help="New value."),
) -> None:
    state = _get_state(ctx)
    state.repository.initialise()
    try:
        state.repository.set_option(key, _parse_option_value(value))
    except ConfigurationError as exc:
        raise _fail(str(exc)) from exc


@config_app.command("remove", help="Remove a configuration value.")
def config_remove(ctx: typer.Context, key: str = typer.Argument(..., help="Option name.")) -> None:
    state = _get_state(ctx)
    try:
        removed = state.repository.remove_option(key)
    except ConfigurationError as exc:
        raise _fail(str(exc)) from exc
    if not removed:
        console.print(f"The configuration key {key} is unset.", markup=False, soft_wrap=True)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
