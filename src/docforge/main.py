"""docforge CLI entry point.

Provides the Typer CLI interface for parsing saved model responses and
running document analyses.
"""

import json
import logging
import os
import sys
from typing import List, Optional

import typer

from docforge import __version__
from docforge.audit import close_audit_log, init_audit_log, log_outcome
from docforge.config import get_explain_model, get_min_code_length, validate_credentials
from docforge.errors import DocforgeError
from docforge.fuzzy import extract_function
from docforge.pipeline import run_pipeline
from docforge.scanner import scan_balanced
from docforge.utils import read_reference_file, read_text_input

app = typer.Typer(
    name="docforge",
    help="Recover structured document-generation results from LLM output",
)


def version_callback(value: bool) -> None:
    """Display version and exit."""
    if value:
        print(f"docforge version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", help="Log pipeline progress to stderr"
    ),
) -> None:
    """Recover structured document-generation results from LLM output."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def parse(
    file: str = typer.Argument(..., help="Saved model response, or '-' for stdin"),
) -> None:
    """Run the repair pipeline on a saved model response."""
    raw = _read_or_exit(file)

    init_audit_log()
    try:
        outcome = run_pipeline(raw, min_code_length=get_min_code_length())
        log_outcome(outcome, source=file)
    finally:
        close_audit_log()

    if outcome.error is not None:
        print(f"Error: {outcome.error.diagnostic}", file=sys.stderr)
        raise typer.Exit(1)

    print(json.dumps(outcome.result.to_dict(), indent=2, ensure_ascii=False))


@app.command("extract-block")
def extract_block(
    file: str = typer.Argument(..., help="Source text, or '-' for stdin"),
    start: Optional[int] = typer.Option(
        None, "--start", help="Character offset to start scanning from"
    ),
    function: Optional[str] = typer.Option(
        None, "--function", help="Name of a function declaration to extract"
    ),
) -> None:
    """Print a balanced {...} block from a source file."""
    if start is not None and function is not None:
        print("Error: use either --start or --function, not both", file=sys.stderr)
        raise typer.Exit(1)

    text = _read_or_exit(file)

    if function is not None:
        block = extract_function(text, function)
    else:
        if start is None:
            start = text.find("{")
        found = scan_balanced(text, start) if start >= 0 else None
        block = found.text if found is not None else None

    if block is None:
        print("Error: no balanced block found", file=sys.stderr)
        raise typer.Exit(1)
    print(block)


@app.command()
def analyze(
    target: str = typer.Argument(..., help="Target document (text or JSON)"),
    ref: Optional[List[str]] = typer.Option(
        None, "--ref", "-r", help="Reference template file (repeatable, max 3)"
    ),
    instructions: Optional[str] = typer.Option(
        None, "--instructions", "-i", help="Extra instructions for the model"
    ),
) -> None:
    """Analyze a document with the model and print the recovered result."""
    is_valid, message = validate_credentials()
    if not is_valid:
        print(f"\nError: {message}\n", file=sys.stderr)
        raise typer.Exit(1)

    content = _read_or_exit(target)
    references = [read_reference_file(path) for path in (ref or [])]

    # Imported here so litellm is only loaded for commands that call a model
    from docforge.llm_client import analyze_document

    init_audit_log()
    try:
        result = analyze_document(
            content, references, instructions, target_name=os.path.basename(target)
        )
    except DocforgeError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1)
    finally:
        close_audit_log()

    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@app.command()
def explain(
    file: str = typer.Argument(..., help="Generated code file, or '-' for stdin"),
    kind: str = typer.Option("pdfmake", "--kind", "-k", help="Library the code targets"),
) -> None:
    """Ask the explanation model to describe generated code."""
    is_valid, message = validate_credentials(get_explain_model())
    if not is_valid:
        print(f"\nError: {message}\n", file=sys.stderr)
        raise typer.Exit(1)

    code = _read_or_exit(file)

    from docforge.llm_client import explain_code

    print(explain_code(code, kind))


def _read_or_exit(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    try:
        return read_text_input(path)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
