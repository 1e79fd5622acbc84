"""Launch orchestration: clean, plan, build, sign, rotate, describe.

One launch is strictly sequential. Later targets and signing consume
what earlier targets left in the output directory, so every step is
awaited before the next starts and the first failure aborts the rest.
"""

from dataclasses import dataclass, field
from pathlib import Path

from otabuild.artifacts.history import HistoryStore, RotationResult, clear_directory
from otabuild.artifacts.locator import find_latest
from otabuild.artifacts.manifest import GeneratedManifests, ManifestGenerator
from otabuild.builder.make import MakeBuilder, lunch_combo
from otabuild.builder.protocols import Builder, BuildResult, Signer, SignResult
from otabuild.builder.signer import ReleaseSigner
from otabuild.config.env import EnvConfig
from otabuild.config.props import build_prop_path
from otabuild.config.schema import OtaBuildConfig
from otabuild.core.logging import get_logger
from otabuild.core.timing import Timer, format_duration
from otabuild.core.validation import is_valid_variant, validate_intent
from otabuild.display import StatusDisplay
from otabuild.exceptions import (
    ArchiveIOError,
    BuildFailedError,
    InvalidRequestError,
    InvalidVariantError,
    SigningFailedError,
)
from otabuild.planner.intent import BuildContext, BuildIntent
from otabuild.planner.planner import TargetPlanner

PRODUCT_OUT_RELPATH = Path("out") / "target" / "product"

# Unsigned target files produced by the dist packaging step
TARGET_FILES_INTERMEDIATES = Path("obj") / "PACKAGING" / "target_files_intermediates"
UNSIGNED_TARGET_FILES_PATTERN = "*-target_files-*.zip"


@dataclass
class LaunchResult:
    """Everything a launch did.

    Attributes:
        context: Resolved per-run context, including the plan.
        builds: Results of the target builds, in order.
        signatures: Results of the signing passes, in order.
        rotation: History rotation result, if a history directory was set.
        manifests: Manifests written, if JSON generation ran.
        duration_seconds: Wall time of the launch.
    """

    context: BuildContext
    builds: list[BuildResult] = field(default_factory=list)
    signatures: list[SignResult] = field(default_factory=list)
    rotation: RotationResult | None = None
    manifests: GeneratedManifests | None = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        """False when the history rotation found nothing to copy."""
        return self.rotation is None or self.rotation.success


class Launcher:
    """Runs a complete launch for one BuildIntent."""

    def __init__(
        self,
        env: EnvConfig,
        config: OtaBuildConfig,
        builder: Builder,
        signer: Signer | None = None,
        display: StatusDisplay | None = None,
    ) -> None:
        """Initialize the launcher.

        Args:
            env: Environment configuration.
            config: otabuild.yaml configuration.
            builder: Builder used for every target.
            signer: Signer; required only for signed launches.
            display: Console display (a default one if None).
        """
        self.env = env
        self.config = config
        self.builder = builder
        self.signer = signer
        self.display = display or StatusDisplay()
        self.planner = TargetPlanner(config.targets)
        self._logger = get_logger("launcher")

    def product_out(self, device: str) -> Path:
        """Product output directory: $OUT, or the default for the device."""
        if self.env.product_out is not None:
            return self.env.product_out
        return self.env.build_top / PRODUCT_OUT_RELPATH / device

    def build_id(self, device: str) -> str:
        """Build identifier used in package names and manifest paths."""
        return self.env.build_id or device

    def key_dir(self) -> Path:
        """Directory holding the release keys."""
        if self.config.signing.key_dir:
            return self.env.build_top / self.config.signing.key_dir
        return self.env.key_dir

    def resolve_output_dir(self, intent: BuildIntent) -> Path:
        """Resolve and create the output directory.

        Without -o the product output directory is used as is.
        """
        if intent.output_dir is None:
            return self.product_out(intent.device)
        output_dir = self.env.build_top / intent.output_dir
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveIOError(output_dir, "create", e) from e
        return output_dir

    def manifest_generator(self, device: str) -> ManifestGenerator:
        """Create the manifest generator for a device build."""
        return ManifestGenerator(
            json_root=self.env.build_top / self.config.release.json_dir,
            prop_file=build_prop_path(self.product_out(device)),
            release=self.config.release,
            product_prefix=self.config.product.prefix,
        )

    def _check_intent(self, intent: BuildIntent) -> None:
        if not is_valid_variant(intent.variant):
            raise InvalidVariantError(intent.variant)
        validation = validate_intent(intent)
        if not validation.valid:
            raise InvalidRequestError("; ".join(validation.errors))
        for warning in validation.warnings:
            self.display.warn(warning)
        if intent.sign and self.signer is None:
            raise InvalidRequestError("Signing requested but no signer is configured")
        if intent.output_dir is not None and (intent.wipe or intent.install_clean):
            self._check_clearable(self.env.build_top / intent.output_dir)

    def _check_clearable(self, output_dir: Path) -> None:
        # Never empty the source root or anything above it
        target = output_dir.resolve()
        build_top = self.env.build_top.resolve()
        if target == build_top or target in build_top.parents:
            raise InvalidRequestError(
                f"Refusing to clear output dir {output_dir}: it contains the source tree"
            )

    def _clean(self, intent: BuildIntent) -> None:
        if intent.wipe:
            result = self.builder.clean()
        elif intent.install_clean:
            result = self.builder.install_clean()
        else:
            return
        if not result.success:
            raise BuildFailedError(result.target, result.exit_code)
        if intent.output_dir is not None:
            clear_directory(self.env.build_top / intent.output_dir)

    def _sign(self, target: str, device: str) -> SignResult:
        if self.signer is None:
            raise SigningFailedError("Signing requested but no signer is configured", target)
        intermediates = self.product_out(device) / TARGET_FILES_INTERMEDIATES
        unsigned = find_latest(intermediates, pattern=UNSIGNED_TARGET_FILES_PATTERN)
        if unsigned is None:
            raise SigningFailedError(
                f"No target files package found in {intermediates} to sign", target
            )
        result = self.signer.sign(unsigned.path, self.key_dir())
        self._logger.log_signing(
            target,
            result.success,
            signed_ota=str(result.signed_ota) if result.signed_ota else None,
        )
        if not result.success:
            raise SigningFailedError(result.message or "Signing failed", target)
        return result

    def _build_all(self, context: BuildContext, device: str, result: LaunchResult) -> None:
        env = context.builder_env()
        for target in context.plan:
            build = self.builder.build(target, env=env)
            self._logger.log_target_build(
                target, build.success, build.duration_ms, build.exit_code
            )
            result.builds.append(build)
            if not build.success:
                raise BuildFailedError(target, build.exit_code)
            if context.sign:
                result.signatures.append(self._sign(target, device))

    def _generate_manifests(
        self, intent: BuildIntent, context: BuildContext
    ) -> GeneratedManifests:
        # Describe what the executed plan actually produced
        want_incremental = self.config.targets.incremental in context.plan
        want_both = want_incremental and self.config.targets.base in context.plan
        generator = self.manifest_generator(intent.device)
        return generator.generate(
            context.output_dir,
            self.build_id(intent.device),
            want_incremental=want_incremental,
            want_both=want_both,
        )

    def run(self, intent: BuildIntent) -> LaunchResult:
        """Run a launch.

        Args:
            intent: The launch request.

        Returns:
            LaunchResult; success is False when no new target files
            package was found to rotate into the history.

        Raises:
            InvalidVariantError: If the variant is not user, userdebug or eng.
            InvalidRequestError: If the request is otherwise invalid.
            BuildFailedError: If a clean or target build fails.
            SigningFailedError: If signing fails.
            ArtifactNotFoundError: If a package needed for a manifest is missing.
            ArchiveIOError: If a file operation fails.
        """
        self._check_intent(intent)
        self._logger.log_launch_start(intent.device, intent.variant)

        result: LaunchResult | None = None
        timer = Timer()
        try:
            with timer:
                result = self._launch(intent)
        finally:
            self.display.info(f"Build finished in {format_duration(timer.duration_seconds)}")
            self._logger.log_launch_end(
                intent.device,
                result is not None and result.success,
                duration_ms=timer.duration_ms,
            )

        result.duration_seconds = timer.duration_seconds
        return result

    def _launch(self, intent: BuildIntent) -> LaunchResult:
        self._clean(intent)
        output_dir = self.resolve_output_dir(intent)

        history = HistoryStore(intent.history_dir) if intent.history_dir else None
        if history is not None:
            history.ensure()

        context = self.planner.resolve(intent, output_dir)
        for note in context.notes:
            self.display.info(note)
        self.display.show_plan(context)

        result = LaunchResult(context=context)
        self._build_all(context, intent.device, result)

        if history is not None:
            if context.wipe_history:
                self.display.info("Deleting old target files")
            result.rotation = history.rotate(
                self.product_out(intent.device),
                wipe_first=context.wipe_history,
            )
            if result.rotation.success:
                self.display.info("Copying new target files package")
            else:
                self.display.error(
                    "No new target files package found, skipping release manifests"
                )
                return result

        if context.generate_json:
            result.manifests = self._generate_manifests(intent, context)
            self.display.show_manifests(result.manifests)

        return result


def create_launcher(
    env: EnvConfig,
    config: OtaBuildConfig,
    intent: BuildIntent,
    display: StatusDisplay | None = None,
) -> Launcher:
    """Create a launcher wired to the real build system.

    Args:
        env: Environment configuration.
        config: otabuild.yaml configuration.
        intent: The launch request; selects the lunch combo.
        display: Console display.

    Returns:
        Launcher using MakeBuilder and, when signing, ReleaseSigner.
    """
    builder = MakeBuilder(
        env.build_top,
        lunch_combo(config.product.lunch_prefix, intent.device, intent.variant),
    )
    signer = ReleaseSigner(env.build_top, builder) if intent.sign else None
    return Launcher(env, config, builder, signer=signer, display=display)
