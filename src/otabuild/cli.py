"""CLI entry point for otabuild.

Provides commands for:
- Building OTA packages (otabuild launch)
- Generating release manifests (otabuild gen-json)
- Previewing the build plan (otabuild plan)
"""

import sys
from pathlib import Path

import click
from rich.console import Console

from otabuild import __version__
from otabuild.artifacts.manifest import ManifestGenerator
from otabuild.config import (
    ConfigError,
    EnvConfig,
    OtaBuildConfig,
    build_prop_path,
    load_config_or_default,
    load_env_config,
)
from otabuild.core.logging import LogLevel, configure_logging
from otabuild.core.validation import validate_intent
from otabuild.display import StatusDisplay, create_status_display
from otabuild.exceptions import OtaBuildError
from otabuild.launcher import create_launcher
from otabuild.planner import BuildIntent, TargetPlanner

# Global console for Rich output
console = Console()


def _load_settings(display: StatusDisplay) -> tuple[EnvConfig, OtaBuildConfig]:
    env = load_env_config()
    try:
        config = load_config_or_default(env.build_top)
    except ConfigError as e:
        display.error(f"Configuration error: {e}")
        sys.exit(1)
    return env, config


@click.group()
@click.version_option(version=__version__, prog_name="otabuild")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logs and detailed output")
@click.option("--json-logs", is_flag=True, help="Emit structured logs as JSON lines")
@click.pass_context
def main(ctx: click.Context, verbose: bool, json_logs: bool) -> None:
    """otabuild - Build full and incremental OTA packages and release manifests."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(
        level=LogLevel.DEBUG if verbose else LogLevel.WARNING,
        json_format=json_logs,
    )


@main.command()
@click.argument("device")
@click.argument("variant")
@click.option("-g", "--gapps", is_flag=True, help="Build the GApps variant")
@click.option("-w", "--wipe", is_flag=True, help="Wipe the out directory (make clean)")
@click.option(
    "-c",
    "install_clean",
    is_flag=True,
    help="Do an install-clean; also empties the target files dir given with -i",
)
@click.option("-j", "generate_json", is_flag=True, help="Generate the OTA json")
@click.option("-f", "fastboot", is_flag=True, help="Generate a fastboot zip")
@click.option("-b", "boot_image", is_flag=True, help="Generate boot.img")
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(path_type=Path),
    help="Destination dir (relative to the source root) for generated packages",
)
@click.option(
    "-i",
    "--incremental",
    "history_dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Dir of previous target files; builds an incremental package when not empty",
)
@click.option(
    "--build-both-targets",
    "build_both",
    is_flag=True,
    help="Build the full OTA along with the incremental one (needs -i)",
)
@click.option("-s", "--signbuild", "sign", is_flag=True, help="Sign the build with release keys")
@click.pass_context
def launch(
    ctx: click.Context,
    device: str,
    variant: str,
    gapps: bool,
    wipe: bool,
    install_clean: bool,
    generate_json: bool,
    fastboot: bool,
    boot_image: bool,
    output_dir: Path | None,
    history_dir: Path | None,
    build_both: bool,
    sign: bool,
) -> None:
    """Build an OTA package for DEVICE with build VARIANT.

    Examples:
        otabuild launch guacamole userdebug -j
        otabuild launch guacamole user -i ../target-files --build-both-targets -s
    """
    display = create_status_display(console=console, verbose=ctx.obj["verbose"])
    env, config = _load_settings(display)

    intent = BuildIntent(
        device=device,
        variant=variant,
        wipe=wipe,
        install_clean=install_clean,
        gapps=gapps,
        generate_json=generate_json,
        fastboot=fastboot,
        boot_image=boot_image,
        output_dir=output_dir,
        history_dir=history_dir,
        build_both=build_both,
        sign=sign,
    )

    launcher = create_launcher(env, config, intent, display=display)
    try:
        result = launcher.run(intent)
    except OtaBuildError as e:
        display.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)

    sys.exit(0 if result.success else 1)


@main.command("gen-json")
@click.option(
    "-o",
    "output_dir",
    type=click.Path(path_type=Path),
    help="Dir (relative to the source root) with the OTA zip files (default: $OUT)",
)
@click.option(
    "-i",
    "incremental",
    type=click.BOOL,
    default=False,
    show_default=True,
    help="true to create json for the incremental OTA",
)
@click.option(
    "-b",
    "both",
    type=click.BOOL,
    default=False,
    show_default=True,
    help="true to also create json for the full OTA (-i must be true)",
)
@click.option("--build", "build_id", help="Build identifier (default: $KRYPTON_BUILD)")
@click.pass_context
def gen_json(
    ctx: click.Context,
    output_dir: Path | None,
    incremental: bool,
    both: bool,
    build_id: str | None,
) -> None:
    """Generate OTA json info for the latest packages.

    Examples:
        otabuild gen-json
        otabuild gen-json -o out/release -i true -b true
    """
    display = create_status_display(console=console, verbose=ctx.obj["verbose"])
    env, config = _load_settings(display)

    # Relative -o paths are taken from the source root, as for launch
    if output_dir is None:
        output_dir = env.product_out or Path.cwd()
    else:
        output_dir = env.build_top / output_dir
    product_out = env.product_out or output_dir

    generator = ManifestGenerator(
        json_root=env.build_top / config.release.json_dir,
        prop_file=build_prop_path(product_out),
        release=config.release,
        product_prefix=config.product.prefix,
    )
    try:
        manifests = generator.generate(
            output_dir,
            build_id or env.build_id or "",
            want_incremental=incremental,
            want_both=both,
        )
    except OtaBuildError as e:
        display.error(str(e))
        sys.exit(1)

    display.show_manifests(manifests)


@main.command()
@click.argument("device")
@click.argument("variant")
@click.option("-f", "fastboot", is_flag=True, help="Include the fastboot zip target")
@click.option("-b", "boot_image", is_flag=True, help="Include the boot.img target")
@click.option(
    "-i",
    "--incremental",
    "history_dir",
    type=click.Path(path_type=Path, file_okay=False),
    help="Dir of previous target files",
)
@click.option("--build-both-targets", "build_both", is_flag=True)
@click.option("-s", "--signbuild", "sign", is_flag=True)
@click.pass_context
def plan(
    ctx: click.Context,
    device: str,
    variant: str,
    fastboot: bool,
    boot_image: bool,
    history_dir: Path | None,
    build_both: bool,
    sign: bool,
) -> None:
    """Show the targets a launch would build, without building.

    Examples:
        otabuild plan guacamole userdebug -i ../target-files --build-both-targets
    """
    display = create_status_display(console=console, verbose=ctx.obj["verbose"])
    env, config = _load_settings(display)

    intent = BuildIntent(
        device=device,
        variant=variant,
        fastboot=fastboot,
        boot_image=boot_image,
        history_dir=history_dir,
        build_both=build_both,
        sign=sign,
    )
    validation = validate_intent(intent)
    if not validation.valid:
        for error in validation.errors:
            display.error(error)
        sys.exit(1)
    for warning in validation.warnings:
        display.warn(warning)

    context = TargetPlanner(config.targets).resolve(intent, env.product_out or env.build_top)

    for note in context.notes:
        display.info(note)
    display.show_plan(context)


if __name__ == "__main__":
    main()
