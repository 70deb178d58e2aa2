"""Defines the command-line interface for regcheck.

This module uses the `click` library to expose every registration-data
check as a subcommand, so a value or an uploaded file can be checked from a
shell or a script. Each check prints a PASS/FAIL line and exits with 0 when
the check passes, 1 when it fails, and 2 when it cannot be evaluated (an
unparseable date, a missing file).
"""
import json
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import click
from halo import Halo
from rich.console import Console
from rich.panel import Panel

from . import __version__
from .core.checker import RegistrationDataChecker
from .core.config import Config
from .core.errors import RegCheckError
from .validators.malware import find_malware_signature

console = Console(emoji=True)
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

EXIT_PASS = 0
EXIT_FAIL = 1
EXIT_ERROR = 2


class AliasedGroup(click.Group):
    """A click Group that supports command aliases and unique-prefix matching."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._aliases: Dict[str, str] = {}

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        """Gets a command by exact name, alias, or unique prefix."""
        cmd_name = cmd_name.lower()
        rv = super().get_command(ctx, cmd_name)
        if rv is not None:
            return rv
        if cmd_name in self._aliases:
            return super().get_command(ctx, self._aliases[cmd_name])
        matches = [x for x in self.list_commands(ctx) if x.startswith(cmd_name)]
        if not matches:
            return None
        if len(matches) == 1:
            return super().get_command(ctx, matches[0])
        ctx.fail(f"Ambiguous command: '{cmd_name}'. Matches: {', '.join(sorted(matches))}")
        return None

    def add_alias(self, alias: str, command_name: str) -> None:
        self._aliases[alias.lower()] = command_name.lower()


def _report(label: str, passed: bool, detail: Optional[str] = None) -> None:
    """Prints a verdict and exits with the matching status code."""
    suffix = f" ({detail})" if detail else ""
    if passed:
        console.print(f"[green]PASS[/green] {label}{suffix}")
        sys.exit(EXIT_PASS)
    console.print(f"[red]FAIL[/red] {label}{suffix}")
    sys.exit(EXIT_FAIL)


def _evaluate(check: Callable[..., bool], *args: Any) -> bool:
    """Runs a check, turning an evaluation error into exit status 2."""
    try:
        return check(*args)
    except RegCheckError as e:
        err_console.print(f"[red]ERROR[/red] ({e.kind.value}) {e}")
        sys.exit(EXIT_ERROR)


@click.group(cls=AliasedGroup, invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="regcheck")
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to a custom config file.")
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool, debug: bool) -> None:
    """Check registration data: emails, passwords, phone numbers, dates of
    birth, uploaded files, and country or language names.
    """
    log_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug("Debug mode enabled.")

    config_obj = Config(config_path=Path(config_path) if config_path else None)
    ctx.obj = RegistrationDataChecker(config=config_obj)

    if ctx.invoked_subcommand is None:
        console.print("Use 'regcheck <check> <value>' to run a check, or 'regcheck --help' for the list of checks.")


@main.command()
@click.argument("address")
@click.pass_obj
def email(checker: RegistrationDataChecker, address: str) -> None:
    """Check that ADDRESS is a well-formed email address."""
    _report(f"email {address!r}", checker.is_valid_email(address))


@main.command()
@click.argument("value")
@click.pass_obj
def password(checker: RegistrationDataChecker, value: str) -> None:
    """Check that a password is long enough."""
    min_length = checker.config.get("identity.password_min_length")
    _report(f"password of {len(value)} characters", checker.is_valid_password(value), f"minimum {min_length}")


@main.command()
@click.argument("number")
@click.pass_obj
def phone(checker: RegistrationDataChecker, number: str) -> None:
    """Check that NUMBER is an international phone number, e.g. +44 2071838750."""
    _report(f"phone number {number!r}", checker.is_valid_phone_number(number))


@main.command()
@click.argument("date_of_birth")
@click.pass_obj
def age(checker: RegistrationDataChecker, date_of_birth: str) -> None:
    """Check that someone born on DATE_OF_BIRTH (YYYY-MM-DD) is old enough."""
    minimum_age = checker.config.get("identity.minimum_age")
    passed = _evaluate(checker.is_age_valid, date_of_birth)
    _report(f"date of birth {date_of_birth}", passed, f"minimum age {minimum_age}")


@main.command()
@click.argument("path", type=click.Path())
@click.option("--max-size", type=int, default=None, help="Size limit in bytes (default from config).")
@click.pass_obj
def image(checker: RegistrationDataChecker, path: str, max_size: Optional[int]) -> None:
    """Check that PATH is an image file within the size limit."""
    _report(f"image {path}", _evaluate(checker.is_valid_image, path, max_size))


@main.command()
@click.argument("path", type=click.Path())
@click.option("--max-size", type=int, default=None, help="Size limit in bytes (default from config).")
@click.pass_obj
def document(checker: RegistrationDataChecker, path: str, max_size: Optional[int]) -> None:
    """Check that PATH is a document file within the size limit."""
    _report(f"document {path}", _evaluate(checker.is_valid_document, path, max_size))


@main.command()
@click.argument("path", type=click.Path())
@click.option("--allow", "-a", "allowed", multiple=True, required=True, help="An allowed extension; repeat for more.")
@click.pass_obj
def extension(checker: RegistrationDataChecker, path: str, allowed: Tuple[str, ...]) -> None:
    """Check the extension of PATH against an allow-list."""
    _report(f"extension of {path}", checker.is_valid_custom_extension(path, allowed), f"allowed: {', '.join(allowed)}")


@main.command()
@click.argument("path", type=click.Path())
@click.option("--min", "minimum", type=(int, int), default=None, metavar="W H", help="Minimum width and height.")
@click.option("--max", "maximum", type=(int, int), default=None, metavar="W H", help="Maximum width and height.")
@click.pass_obj
def dimensions(checker: RegistrationDataChecker, path: str, minimum: Optional[Tuple[int, int]], maximum: Optional[Tuple[int, int]]) -> None:
    """Check the pixel dimensions of the image at PATH."""
    if minimum is None and maximum is None:
        raise click.UsageError("Give --min and/or --max.")
    passed = True
    if minimum is not None:
        passed = _evaluate(checker.has_minimum_dimensions, path, *minimum)
    if passed and maximum is not None:
        passed = not _evaluate(checker.exceeds_maximum_dimensions, path, *maximum)
    _report(f"dimensions of {path}", passed)


@main.command()
@click.argument("path", type=click.Path())
@click.option("--min", "min_size", type=int, default=None, help="Minimum size in bytes.")
@click.option("--max", "max_size", type=int, default=None, help="Maximum size in bytes.")
@click.pass_obj
def size(checker: RegistrationDataChecker, path: str, min_size: Optional[int], max_size: Optional[int]) -> None:
    """Check the byte size of the file at PATH."""
    if min_size is None and max_size is None:
        raise click.UsageError("Give --min and/or --max.")
    passed = True
    if min_size is not None:
        passed = _evaluate(checker.meets_minimum_size, path, min_size)
    if passed and max_size is not None:
        passed = not _evaluate(checker.exceeds_maximum_size, path, max_size)
    _report(f"size of {path}", passed)


@main.command()
@click.argument("path", type=click.Path())
def malware(path: str) -> None:
    """Scan PATH for suspicious code signatures (heuristic only).

    A clean result is not a guarantee that the file is safe.
    """
    signature = _evaluate(find_malware_signature, path)
    if signature:
        _report(f"malware scan of {path}", False, f"matched '{signature}'")
    _report(f"malware scan of {path}", True, "no known signature")


@main.command()
@click.argument("name")
@click.pass_obj
def country(checker: RegistrationDataChecker, name: str) -> None:
    """Check that NAME is the common name of a country (needs network)."""
    with Halo(text="Looking up countries...", spinner="dots"):
        passed = checker.is_valid_country(name)
    _report(f"country {name!r}", passed)


@main.command()
@click.argument("name")
@click.pass_obj
def language(checker: RegistrationDataChecker, name: str) -> None:
    """Check that NAME is a language spoken in some country (needs network)."""
    with Halo(text="Looking up languages...", spinner="dots"):
        passed = checker.is_valid_language(name)
    _report(f"language {name!r}", passed)


@main.command()
@click.argument("action", type=click.Choice(['get', 'set', 'list', 'reset']), required=True)
@click.argument("key", type=str, required=False)
@click.argument("value", type=str, required=False)
@click.pass_obj
def config(checker: RegistrationDataChecker, action: str, key: Optional[str], value: Optional[str]) -> None:
    """Manage the regcheck configuration.

    \b
    ACTION:
        get <key>          Get a configuration value.
        set <key> <value>  Set a value and save it to the user config.
        list               List all current configuration values.
        reset              Delete the user config file.
    """
    config_obj = checker.config
    if action == "list":
        console.print(Panel(json.dumps(config_obj.config, indent=2), title="Current Configuration"))
    elif action == "get":
        if not key:
            err_console.print("[red]Error: 'get' action requires a key.[/red]")
            sys.exit(1)
        console.print(config_obj.get(key))
    elif action == "set":
        if not key or value is None:
            err_console.print("[red]Error: 'set' action requires a key and a value.[/red]")
            sys.exit(1)
        if not config_obj.set_from_string(key, value):
            err_console.print(f"[red]Error: invalid value '{value}' for '{key}'.[/red]")
            sys.exit(1)
        processed_value = config_obj.get(key)
        try:
            config_obj.save_user_config()
            console.print(f"[green]'{key}' set to '{processed_value}' and saved to user config.[/green]")
        except IOError as e:
            err_console.print(f"[red]Error saving configuration: {e}[/red]")
            sys.exit(1)
    elif action == "reset":
        if Config.reset_user_config():
            console.print("[green]Configuration reset to defaults.[/green]")
        else:
            console.print("[yellow]No user configuration file to reset.[/yellow]")


main.add_alias('tel', 'phone')
main.add_alias('dob', 'age')
main.add_alias('ext', 'extension')

if __name__ == "__main__":
    main()
