"""
Resolving and loading pipeline configuration resources.

A configuration resource is named by a string: an HTTP(S) URL, a filesystem
path, a file in one of the caller's search directories, or a resource
bundled with this package. Loading resolves the name, reads the JSON
document, substitutes ${placeholders} and parses it into a PipelineConfig.
"""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from importlib.resources import files
from pathlib import Path
from typing import Any, Iterable, Mapping

import httpx
from pydantic import ValidationError

from filecopy.directories import DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_DIR
from filecopy.errors import ConfigurationResolutionError

from .models import PipelineConfig
from .validation import validate_config

LOGGER = logging.getLogger(__name__)

RESOURCE_SUFFIX = ".json"

# ${name} placeholders; $$ escapes a literal dollar sign
PLACEHOLDER = re.compile(r"\$\$|\$\{(\w+)\}")


def _is_url(name: str) -> bool:
    return name.startswith("http://") or name.startswith("https://")


def _bundled_resources():
    return files(__package__).joinpath("resources")


def list_bundled_configs() -> list[str]:
    """
    List configuration resources bundled with the package.

    Returns:
        Sorted resource names without the .json suffix

    Example:
        >>> list_bundled_configs()
        ['filecopy-binary', 'filecopy-bytes', 'filecopy-text']
    """
    return sorted(
        entry.name[: -len(RESOURCE_SUFFIX)]
        for entry in _bundled_resources().iterdir()
        if entry.name.endswith(RESOURCE_SUFFIX)
    )


def resolve_resource(name: str, search_paths: Iterable[Path] = ()) -> str:
    """
    Resolve a configuration resource name to a URL or file path.

    Resolution order:
    1. HTTP(S) URLs are returned unchanged
    2. An existing filesystem path
    3. A file of that name in one of `search_paths`
    4. A resource bundled with the package (the .json suffix is optional)

    Parameters:
        name: Resource name, path or URL
        search_paths: Extra directories to look in

    Returns:
        URL or filesystem path as a string

    Raises:
        ConfigurationResolutionError: If the name cannot be resolved

    Example:
        >>> resolve_resource("filecopy-binary")
        '/.../filecopy/config/resources/filecopy-binary.json'
    """
    if not name:
        raise ConfigurationResolutionError(name, "empty resource name")

    if _is_url(name):
        return name

    candidates = [name] if name.endswith(RESOURCE_SUFFIX) else [name, name + RESOURCE_SUFFIX]

    for candidate in candidates:
        p = Path(candidate).expanduser()
        if p.is_file():
            return str(p)

    for directory in search_paths:
        for candidate in candidates:
            p = Path(directory).expanduser() / candidate
            if p.is_file():
                return str(p)

    bundled = _bundled_resources()
    for candidate in candidates:
        resource = bundled.joinpath(candidate)
        if resource.is_file():
            return str(resource)

    raise ConfigurationResolutionError(name, "configuration resource not found")


def fetch_json(url: str, *, timeout: float = 10.0) -> dict[str, Any]:
    """
    Fetch JSON from URL.

    Parameters:
        url: HTTP(S) URL to fetch
        timeout: Request timeout in seconds

    Returns:
        Parsed JSON as dictionary

    Raises:
        httpx.HTTPError: If request fails
        json.JSONDecodeError: If response is not valid JSON
    """
    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        resp = client.get(url)
        resp.raise_for_status()
        return resp.json()


def load_json(path_or_url: str) -> dict[str, Any]:
    """
    Load JSON from file path or URL.

    Parameters:
        path_or_url: File path or URL

    Returns:
        Parsed JSON as dictionary

    Raises:
        FileNotFoundError: If file path doesn't exist
        httpx.HTTPError: If URL fetch fails
        json.JSONDecodeError: If JSON is invalid
    """
    if _is_url(path_or_url):
        return fetch_json(path_or_url)

    p = Path(path_or_url).expanduser()
    return json.loads(p.read_text(encoding="utf-8"))


def default_context(
    input_dir: Path = DEFAULT_INPUT_DIR,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
) -> dict[str, str]:
    """Placeholder values available to every configuration."""
    return {
        "input_dir": str(input_dir),
        "output_dir": str(output_dir),
        "tmpdir": tempfile.gettempdir(),
    }


def interpolate(data: Any, context: Mapping[str, str]) -> Any:
    """
    Substitute ${name} placeholders in every string of a JSON document.

    Values come from `context` first, then from the environment. Only the
    braced form is a placeholder: a bare $name is left as written and $$
    produces a single $.

    Parameters:
        data: Parsed JSON (dict, list or scalar)
        context: Placeholder values

    Returns:
        A new document with placeholders substituted

    Raises:
        KeyError: If a placeholder has no value

    Example:
        >>> interpolate({"directory": "${tmpdir}/in"}, {"tmpdir": "/tmp"})
        {'directory': '/tmp/in'}
    """
    if isinstance(data, str):
        values = {**os.environ, **context}

        def replace(match: re.Match[str]) -> str:
            name = match.group(1)
            return "$" if name is None else values[name]

        return PLACEHOLDER.sub(replace, data)
    if isinstance(data, dict):
        return {k: interpolate(v, context) for k, v in data.items()}
    if isinstance(data, list):
        return [interpolate(v, context) for v in data]
    return data


def parse_config(data: dict[str, Any], *, name: str = "<inline>") -> PipelineConfig:
    """
    Parse configuration dict into Pydantic model.

    Parameters:
        data: Configuration JSON as dictionary
        name: Resource name used in error messages

    Returns:
        PipelineConfig model

    Raises:
        ConfigurationResolutionError: If the data doesn't match the schema
    """
    try:
        return PipelineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationResolutionError(name, f"invalid configuration:\n{e}") from e


def load_config(
    name: str,
    *,
    context: Mapping[str, str] | None = None,
    search_paths: Iterable[Path] = (),
) -> PipelineConfig:
    """
    Resolve, load, interpolate, parse and validate a configuration resource.

    Parameters:
        name: Resource name, path or URL
        context: Placeholder values (defaults to default_context())
        search_paths: Extra directories to look in

    Returns:
        Validated PipelineConfig

    Raises:
        ConfigurationResolutionError: If any step fails

    Example:
        >>> config = load_config("filecopy-binary")
        >>> config.source.directory
        PosixPath('/tmp/filecopy-demo/input')
    """
    location = resolve_resource(name, search_paths)

    try:
        data = load_json(location)
    except (OSError, httpx.HTTPError, ValueError) as e:
        # ValueError covers JSONDecodeError and UnicodeDecodeError
        raise ConfigurationResolutionError(name, f"could not load {location}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationResolutionError(name, "configuration root must be a JSON object")

    try:
        data = interpolate(data, default_context() if context is None else context)
    except KeyError as e:
        raise ConfigurationResolutionError(name, f"unresolved placeholder {e}") from e

    config = parse_config(data, name=name)

    issues = validate_config(config)
    if issues:
        raise ConfigurationResolutionError(
            name, f"{len(issues)} validation issue(s)", issues=issues
        )

    LOGGER.info("config_loaded", extra={"resource": name, "location": location})
    return config
