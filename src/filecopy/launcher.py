"""
Two-step startup: prepare directories, then bootstrap the pipeline.

Directory preparation always completes before the configuration resource
is loaded. A failure in either step is fatal and nothing is started.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Literal

from filecopy.config import PipelineConfig, default_context, load_config
from filecopy.directories import DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_DIR, setup_directories
from filecopy.pipeline.runner import PipelineHandle, start_pipeline

LOGGER = logging.getLogger(__name__)

DEFAULT_RESOURCE = "filecopy-binary"


def bootstrap(
    resource_name: str,
    *,
    input_dir: Path = DEFAULT_INPUT_DIR,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
    search_paths: Iterable[Path] = (),
    trigger: Literal["once", "poll"] | None = None,
) -> PipelineConfig:
    """
    Load the named configuration with the directory layout as context.

    Parameters:
        resource_name: Configuration resource name, path or URL
        input_dir: Value of the ${input_dir} placeholder
        output_dir: Value of the ${output_dir} placeholder
        search_paths: Extra directories to look for the resource in
        trigger: Override the configured poller trigger

    Returns:
        Validated PipelineConfig

    Raises:
        ConfigurationResolutionError: If the resource cannot be resolved or loaded
    """
    config = load_config(
        resource_name,
        context=default_context(input_dir, output_dir),
        search_paths=search_paths,
    )
    if trigger is not None and trigger != config.poller.trigger:
        poller = config.poller.model_copy(update={"trigger": trigger})
        config = config.model_copy(update={"poller": poller})
    return config


def launch(
    resource_name: str = DEFAULT_RESOURCE,
    *,
    input_dir: Path = DEFAULT_INPUT_DIR,
    output_dir: Path = DEFAULT_OUTPUT_DIR,
    search_paths: Iterable[Path] = (),
    trigger: Literal["once", "poll"] | None = None,
) -> PipelineHandle:
    """
    Prepare directories, load the pipeline configuration and start it.

    Parameters:
        resource_name: Configuration resource name, path or URL
        input_dir: Directory to prepare and read from
        output_dir: Directory to prepare and write to
        search_paths: Extra directories to look for the resource in
        trigger: Override the configured poller trigger

    Returns:
        Started PipelineHandle

    Raises:
        DirectoryPreparationError: If the directories cannot be prepared
        ConfigurationResolutionError: If the configuration cannot be loaded
        PipelineStateError: If the configured directories do not exist

    Example:
        >>> with launch("filecopy-binary", trigger="once") as handle:
        ...     handle.wait()
    """
    layout = setup_directories(input_dir, output_dir)
    config = bootstrap(
        resource_name,
        input_dir=layout.input_dir,
        output_dir=layout.output_dir,
        search_paths=search_paths,
        trigger=trigger,
    )
    LOGGER.info("pipeline_bootstrap", extra={"resource": resource_name, "pipeline": config.name})
    return start_pipeline(config)
