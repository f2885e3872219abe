import json
import logging
import sys
from pathlib import Path

import click

from .errors import CodeGenerationError
from .pipeline import AtomicWriter, CodeGeneratorConfig, Installer, IntegrationMode, PipelineGenerator, load_registry

logger = logging.getLogger(__name__)


@click.command()
@click.option("--language", "-l", default="python3", type=click.Choice(["python3", "rust"]))
@click.option(
    "--integration-mode",
    "-m",
    default=None,
    type=click.Choice([mode.value for mode in IntegrationMode]),
    help="Plain data definitions or definitions annotated for the binary encoding runtime",
)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option("--module-name", "-n", default=None, type=str, help="Module to install, as name or name:version")
@click.option(
    "--target-source-dir",
    default=None,
    type=click.Path(file_okay=False, resolve_path=True),
    help="Install a project skeleton in this directory instead of writing a single file",
)
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
@click.argument("output", default=None, required=False, type=click.Path(dir_okay=False, resolve_path=True))
def registry_to_code(language, integration_mode, config, module_name, target_source_dir, verbose, path, output):
    """Generate type definitions from the registry stored in PATH."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    if config is not None:
        with open(config) as f:
            try:
                config = CodeGeneratorConfig.from_dict(json.load(f))
            except ValueError as e:
                raise click.BadParameter(str(e), param_hint="--config") from e
    else:
        config = CodeGeneratorConfig()

    # CLI flag overrides the config file
    if integration_mode is not None:
        config.integration_mode = IntegrationMode(integration_mode)

    try:
        registry = load_registry(path)
        logger.debug("Loaded %d containers from %s", len(registry), path)

        if target_source_dir is not None:
            if module_name is None:
                raise click.UsageError("--module-name is required with --target-source-dir")
            Installer(target_source_dir, language).install_module(module_name, registry, config)
            return

        codegen = PipelineGenerator(registry, config, language)
        if output is None:
            codegen.output(sys.stdout)
        else:
            AtomicWriter().write(Path(output), codegen.generate(), language, validate=config.validate_output)
    except CodeGenerationError as e:
        raise click.ClickException(str(e)) from e
