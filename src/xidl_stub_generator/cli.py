"""Command-line interface for generating a TypeScript SOAP client out of an *.xidl schema.

Notes:
    - The generated client depends on the `soap` npm package.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Sequence

from xidl_stub_generator import xidl_types
from xidl_stub_generator.run import DEFAULT_INPUT, DEFAULT_OUTPUT, run

logger = logging.getLogger(__name__)


def setup_parser() -> argparse.ArgumentParser:
    """Setup for the parser.

    Returns:
        argparse.ArgumentParser: The parser after setup.
    """
    parser = argparse.ArgumentParser(description="Generate a typed TypeScript client for an XIDL schema.")

    parser.add_argument(
        "-i",
        "--input",
        type=str,
        default=DEFAULT_INPUT,
        help="path of the *.xidl schema to compile.",
    )

    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=DEFAULT_OUTPUT,
        help="path of the generated TypeScript file.",
    )

    parser.add_argument(
        "-t",
        "--target",
        type=str,
        default=xidl_types.DEFAULT_TARGET,
        help="transport whose <if target=...> sections are kept.",
    )

    parser.add_argument(
        "--endpoint",
        type=str,
        default=xidl_types.DEFAULT_ENDPOINT,
        help="default SOAP endpoint of the generated connect function.",
    )

    parser.add_argument(
        "--wsdl",
        type=str,
        default=xidl_types.DEFAULT_WSDL_PATH,
        help="WSDL location used by the generated client; relative paths are resolved against the generated file.",
    )

    parser.add_argument(
        "--prettier",
        dest="prettier",
        default=False,
        action="store_true",
        help="format the generated client with prettier.",
    )

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the client generator.

    Args:
        argv (Sequence[str] | None, optional): Run arguments. Defaults to None.

    Returns:
        int: Error code.
    """
    logging.basicConfig(level=logging.INFO)

    root_directory = os.getcwd()
    logging.info("Working from root directory: %s", root_directory)

    parser = setup_parser()
    args = parser.parse_args(argv)

    run(args, root_directory)

    return 0
