from pathlib import Path
from typing import Dict, Optional

from hypothesis import settings

# Prevent Hypothesis from writing a local example database (e.g. `.hypothesis/`) during tests.
settings.register_profile("stencil-tests", database=None)
settings.load_profile("stencil-tests")


def write_template(directory: Path, text: str, name: str = "page.tmpl") -> Path:
    """Write a template file under ``directory`` and return its path."""
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


def write_vars_file(
    directory: Path,
    variables: Optional[Dict[str, object]] = None,
    *,
    encoding: Optional[str] = None,
) -> Path:
    """Write a minimal stencil.toml with a [variables] table for tests.

    Args:
        directory: Temporary directory (tmp_path).
        variables: Mapping written as TOML key/value pairs. Strings are quoted,
            booleans lowercased, everything else written as-is.
        encoding: Optional top-level ``encoding`` setting.

    Returns:
        Path to the written config file.
    """
    lines = []
    if encoding is not None:
        lines.append(f'encoding = "{encoding}"')
        lines.append("")

    lines.append("[variables]")
    for key, value in (variables or {}).items():
        if isinstance(value, bool):
            rendered = "true" if value else "false"
        elif isinstance(value, str):
            rendered = f'"{value}"'
        else:
            rendered = str(value)
        lines.append(f"{key} = {rendered}")

    path = directory / "stencil.toml"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path
