"""Top-level module for client generation."""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import tempfile
from pathlib import Path

from xidl_stub_generator import xidl_types
from xidl_stub_generator.parser import parse_schema
from xidl_stub_generator.writer import Writer

logger = logging.getLogger(__name__)

DEFAULT_INPUT = os.path.join("sdk-files", "VirtualBox.xidl")
DEFAULT_OUTPUT = "index.ts"


def format_outputs(raw_input: str) -> str:
    """Formats raw input using prettier.

    Args:
        raw_input (str): The unformatted input.

    Returns:
        str: The formatted outputs, or the raw input when prettier is unavailable or fails.
    """
    try:
        result = subprocess.run(
            ["prettier", "--parser", "typescript"],
            input=raw_input,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    except FileNotFoundError:
        logger.error("prettier not found. Please install prettier: npm install -g prettier")
        return raw_input
    except subprocess.CalledProcessError as e:
        logger.error(f"Prettier formatting failed: {e}")
        logger.error(f"Stderr: {e.stderr}")
        # Return unformatted output on error
        return raw_input


def generate_client(
    schema_path: str,
    target: str = xidl_types.DEFAULT_TARGET,
    endpoint: str = xidl_types.DEFAULT_ENDPOINT,
    wsdl_path: str = xidl_types.DEFAULT_WSDL_PATH,
) -> str:
    """Entry-point for generating the client source from a schema file.

    Args:
        schema_path (str): The path of the XIDL schema.
        target (str): The transport whose `<if target=...>` sections are kept.
        endpoint (str): The default SOAP endpoint of the generated client.
        wsdl_path (str): The WSDL location baked into the generated client.

    Returns:
        str: The generated TypeScript source.
    """
    logger.info("Reading schema '%s'.", schema_path)
    with open(schema_path, "rb") as schema_file:
        model = parse_schema(schema_file, target=target)

    writer = Writer(model, schema_name=os.path.basename(schema_path), endpoint=endpoint, wsdl_path=wsdl_path)
    writer.generate_all()
    return writer.dumps()


def _default_file_mode() -> int:
    """The mode a newly created file gets under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_output(output_path: str, content: str) -> None:
    """Write the output through a temporary file, so a failed run never leaves a partial file behind."""
    output_directory = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(output_directory, exist_ok=True)

    temp_file = tempfile.NamedTemporaryFile(
        mode="w", dir=output_directory, suffix=".tmp", delete=False, encoding="utf8"
    )
    temp_path = Path(temp_file.name)

    try:
        with temp_file:
            temp_file.write(content)
        # Temporary files are private, the output is not.
        os.chmod(temp_path, _default_file_mode())
        os.replace(temp_path, output_path)
    finally:
        temp_path.unlink(missing_ok=True)


def run(args: argparse.Namespace, root_directory: str) -> str:
    """Run the client generator on a schema.

    Args:
        args (argparse.Namespace): The arguments that were passed when calling the generator.
        root_directory (str): The directory, from which the generator is executed.

    Returns:
        str: The path of the written output file.
    """
    input_path = os.path.join(root_directory, getattr(args, "input", DEFAULT_INPUT))
    output_path = os.path.join(root_directory, getattr(args, "output", DEFAULT_OUTPUT))
    target: str = getattr(args, "target", xidl_types.DEFAULT_TARGET)
    endpoint: str = getattr(args, "endpoint", xidl_types.DEFAULT_ENDPOINT)
    wsdl_path: str = getattr(args, "wsdl", xidl_types.DEFAULT_WSDL_PATH)
    use_prettier: bool = getattr(args, "prettier", False)

    output = generate_client(input_path, target=target, endpoint=endpoint, wsdl_path=wsdl_path)

    if use_prettier:
        output = format_outputs(output)

    write_output(output_path, output)
    logger.info("Wrote client to '%s'.", output_path)

    return output_path
