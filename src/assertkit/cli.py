from __future__ import annotations

import json
from pathlib import Path

import typer

app = typer.Typer(name="assertkit", help="Validate test data and responses")
schema_app = typer.Typer(name="schema", help="Generate schema tooling")
app.add_typer(schema_app, name="schema")


@app.command()
def validate(
    data: str = typer.Argument(help="Path to the JSON document to check"),
    schema: str = typer.Argument(help="Path to the schema file (YAML or JSON)"),
    junit: str | None = typer.Option(None, help="Also write the result as JUnit XML"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Validate a JSON document against a schema file."""
    from pydantic import ValidationError

    from assertkit.assertions.schema import validate_schema
    from assertkit.schema import load_schema_file
    from assertkit.verbose import setup_logger

    logger = setup_logger(verbose=verbose, logger_name="assertkit_cli")

    data_path = Path(data)
    schema_path = Path(schema)
    for path in (data_path, schema_path):
        if not path.exists():
            typer.echo(f"Error: file not found: {path}", err=True)
            raise typer.Exit(1)

    try:
        document = json.loads(data_path.read_text())
    except json.JSONDecodeError as exc:
        typer.echo(
            f"Error: invalid JSON in {data_path} at line {exc.lineno}, column {exc.colno}: {exc.msg}",
            err=True,
        )
        raise typer.Exit(1)

    try:
        schema_node = load_schema_file(schema_path)
    except (ValueError, ValidationError) as exc:
        typer.echo(f"Error: invalid schema {schema_path}: {exc}", err=True)
        raise typer.Exit(1)

    logger.debug(f"Validating {data_path} against {schema_path}")
    result = validate_schema(document, schema_node)
    logger.debug(f"Validation finished with {len(result.errors)} error(s)")

    if junit is not None:
        from assertkit.reporting.junit import validation_suite, write_junit

        junit_path = write_junit(Path(junit), [validation_suite(data_path.name, result)])
        typer.echo(f"JUnit report: {junit_path}")

    if result.is_valid:
        typer.echo(f"{data_path}: valid")
        return

    typer.echo(f"{data_path}: {len(result.errors)} error(s)")
    for error in result.errors:
        typer.echo(f"- {error}")
    raise typer.Exit(1)


@app.command()
def init(
    dir: str = typer.Option(
        ".", "--dir", help="Directory to write assertkit.yaml into"
    ),
):
    """Write a starter assertkit.yaml with the facade defaults."""
    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    config_file = project_dir / "assertkit.yaml"
    if config_file.exists():
        typer.echo(f"assertkit.yaml already exists in {dir}, skipping.")
        return

    config_file.write_text("""\
# Defaults inherited by every AssertionFactory built from this file.
# Timeouts are in milliseconds. ${VAR:-default} references are expanded.
default_timeout: ${ASSERT_TIMEOUT:-10000}
default_soft: false
screenshot_on_failure: true
screenshot_dir: test-results/screenshots
""")

    typer.echo(f"Initialized assertkit config in {dir}:")
    typer.echo("  assertkit.yaml   - facade defaults")


@schema_app.command("generate")
def schema_generate(
    out_dir: Path = typer.Option(
        Path("schemas"), "--out-dir", "-o", help="Directory receiving schema-node.json"
    ),
    doc: bool = typer.Option(
        True, "--doc/--no-doc", help="Also write schema-node.md next to the JSON Schema"
    ),
):
    """Export the schema-node format so editors can check schema files."""
    from assertkit.schema import write_json_schema, write_schema_doc

    json_path = out_dir / "schema-node.json"
    write_json_schema(json_path)
    typer.echo(f"Wrote schema: {json_path}")
    if doc:
        doc_path = out_dir / "schema-node.md"
        write_schema_doc(doc_path)
        typer.echo(f"Wrote docs: {doc_path}")
