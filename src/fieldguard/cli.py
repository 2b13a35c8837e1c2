"""CLI interface for fieldguard using Typer framework."""

import importlib
import importlib.util
import json as jsonlib
import logging
import sys
from pathlib import Path
from typing import Annotated, Any

import pydantic
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from fieldguard import __description__, __version__
from fieldguard.compiler import collect_errors
from fieldguard.config import FieldguardConfig, OutputFormat, load_config
from fieldguard.diagnostics import DiagnosticCollector, IssueSeverity, ShapeDefinitionError
from fieldguard.loader import load_instance_file
from fieldguard.parser.introspect import introspect, is_shape_class
from fieldguard.synthesis import REGISTRY
from fieldguard.validation import create_default_validator

app = typer.Typer(
    name="fieldguard",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"fieldguard version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """fieldguard - schema-driven validation for Python data shapes."""


def _setup(config_path: Path | None, format: str | None, verbose: bool) -> tuple[FieldguardConfig, OutputFormat]:
    """Load configuration, configure logging and resolve the output format."""
    try:
        config = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    level = logging.DEBUG if verbose else config.logging.level.to_logging()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if format is None:
        output_format = config.output.format
    else:
        try:
            output_format = OutputFormat(format)
        except ValueError:
            valid = ", ".join(f.value for f in OutputFormat)
            console.print(f"[red]Error:[/red] Invalid format '{format}'. Must be one of: {valid}")
            raise typer.Exit(1)

    REGISTRY.config = config
    return config, output_format


def _import_target(target: str) -> tuple[Any, str | None]:
    """Import the module part of ``module:Class`` (or ``path/to/file.py:Class``)."""
    module_name, _, class_name = target.partition(":")
    if str(Path.cwd()) not in sys.path:
        sys.path.insert(0, str(Path.cwd()))

    if module_name.endswith(".py"):
        path = Path(module_name)
        if not path.exists():
            raise FileNotFoundError(f"No such file: {path}")
        spec = importlib.util.spec_from_file_location(path.stem, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[path.stem] = module
        spec.loader.exec_module(module)
    else:
        module = importlib.import_module(module_name)
    return module, class_name or None


def _resolve_classes(module: Any, class_name: str | None) -> list[type]:
    if class_name:
        obj: Any = module
        for part in class_name.split("."):
            obj = getattr(obj, part, None)
            if obj is None:
                raise LookupError(f"'{class_name}' not found in {module.__name__}")
        if not isinstance(obj, type):
            raise LookupError(f"'{class_name}' is not a class")
        return [obj]

    return [
        value for value in vars(module).values()
        if is_shape_class(value) and value.__module__ == module.__name__
    ]


def _load_target(target: str) -> list[type]:
    module, class_name = _import_target(target)
    return _resolve_classes(module, class_name)


def _check_class(cls: type, config: FieldguardConfig) -> DiagnosticCollector:
    raw = introspect(
        cls,
        context=getattr(cls, "__fieldguard_context__", None),
        validate_patterns=config.patterns.validate_early,
    )
    return create_default_validator().run(raw)


@app.command()
def check(
    targets: Annotated[
        list[str],
        typer.Argument(help="Shapes to check: module:Class, module, or path/to/file.py[:Class]")
    ],
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .fieldguard.json)")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: from config)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Check shape definitions and report every annotation problem."""
    fieldguard_config, output_format = _setup(config, format, verbose)

    reports: list[DiagnosticCollector] = []
    for target in targets:
        try:
            classes = _load_target(target)
        except ShapeDefinitionError as e:
            # raised while importing a module that uses @validated
            collector = DiagnosticCollector(e.shape)
            collector.issues.extend(e.issues)
            reports.append(collector)
            continue
        except (ImportError, LookupError, FileNotFoundError) as e:
            console.print(f"[red]Error:[/red] Cannot load '{target}': {escape(str(e))}")
            raise typer.Exit(1)

        if not classes:
            console.print(f"[yellow]No shapes found in {target}[/yellow]")
        for cls in classes:
            reports.append(_check_class(cls, fieldguard_config))

    failed = any(report.has_errors() for report in reports)

    if output_format == OutputFormat.JSON:
        typer.echo(jsonlib.dumps({
            "status": "fail" if failed else "pass",
            "shapes": [report.to_dict() for report in reports],
        }, indent=2))
    else:
        for report in reports:
            if not report.issues:
                console.print(f"[green]✓[/green] {report.shape}")
                continue

            marker = "[red]✗[/red]" if report.has_errors() else "[yellow]![/yellow]"
            console.print(f"{marker} {report.shape}: {len(report.issues)} issue(s)")
            issues_table = Table()
            issues_table.add_column("Location", style="cyan")
            issues_table.add_column("Check", style="dim")
            issues_table.add_column("Severity", style="white")
            issues_table.add_column("Message", style="white")

            for issue in report.issues:
                severity_color = "red" if issue.severity == IssueSeverity.ERROR else "yellow"
                issues_table.add_row(
                    escape(issue.location),
                    issue.check,
                    f"[{severity_color}]{issue.severity.value.upper()}[/{severity_color}]",
                    escape(issue.message),
                )

            console.print(issues_table)

    raise typer.Exit(1 if failed else 0)


@app.command()
def validate(
    target: Annotated[
        str,
        typer.Argument(help="Shape to validate against: module:Class or path/to/file.py:Class")
    ],
    data: Annotated[
        Path,
        typer.Argument(help="JSON file holding the instance")
    ],
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help="Configuration file path (default: search for .fieldguard.json)")
    ] = None,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json (default: from config)")
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging")
    ] = False,
) -> None:
    """Validate a JSON instance against a shape."""
    _, output_format = _setup(config, format, verbose)

    if ":" not in target:
        console.print("[red]Error:[/red] Target must name a class: module:Class")
        raise typer.Exit(1)

    try:
        (cls,) = _load_target(target)
        instance = load_instance_file(cls, data)
        errors = collect_errors(instance)
    except ShapeDefinitionError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except (ImportError, LookupError, FileNotFoundError) as e:
        console.print(f"[red]Error:[/red] Cannot load '{target}': {escape(str(e))}")
        raise typer.Exit(1)
    except jsonlib.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Invalid JSON in {data}: {escape(str(e))}")
        raise typer.Exit(1)
    except pydantic.ValidationError as e:
        console.print(f"[red]Error:[/red] Data does not describe a {cls.__qualname__}: {data}\n{escape(str(e))}")
        raise typer.Exit(1)

    violations = errors.flatten()

    if output_format == OutputFormat.JSON:
        typer.echo(jsonlib.dumps({
            "valid": not violations,
            "errors": errors.to_dict(),
            "violations": [
                {"path": path, "message": error.message} for path, error in violations
            ],
        }, indent=2))
    elif not violations:
        console.print(f"[green]✓ {data} is a valid {cls.__qualname__}[/green]")
    else:
        console.print(f"[red]✗ {len(violations)} violation(s)[/red]")
        violations_table = Table()
        violations_table.add_column("Path", style="cyan")
        violations_table.add_column("Message", style="white")
        for path, error in violations:
            violations_table.add_row(escape(path or "(root)"), escape(error.message))
        console.print(violations_table)

    raise typer.Exit(1 if violations else 0)


if __name__ == "__main__":
    app()
