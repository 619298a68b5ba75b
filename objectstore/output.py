"""Command output writers."""

import json
from typing import Any, TextIO

import yaml

OUTPUT_FORMATS = ("yaml", "json")


def write_json(stream: TextIO, value: Any) -> None:
    """Write value as tab-indented JSON."""
    stream.write(json.dumps(value, indent="\t", default=str))
    stream.write("\n")


def write_yaml(stream: TextIO, value: Any) -> None:
    """Write value as block-style YAML."""
    stream.write(yaml.safe_dump(value, default_flow_style=False, sort_keys=False))


def write_output(stream: TextIO, value: Any, output_format: str = "yaml") -> None:
    """Write value in the requested format."""
    if output_format == "json":
        write_json(stream, value)
    else:
        write_yaml(stream, value)
