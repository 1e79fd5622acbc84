"""Launch request, build plan and per-invocation build context."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from otabuild.config.env import ENV_GAPPS_BUILD, ENV_KOSP_OUT, ENV_PREVIOUS_TARGET_FILES


@dataclass(frozen=True)
class BuildIntent:
    """What the operator asked for on one invocation.

    Attributes:
        device: Device codename.
        variant: Build variant (user, userdebug, eng).
        wipe: Run a full clean before building.
        install_clean: Run an install-clean before building.
        gapps: Build the GApps variant.
        generate_json: Write release manifests after building.
        fastboot: Also build the fastboot package.
        boot_image: Also build the boot image.
        output_dir: Output directory relative to the source root, if set.
        history_dir: Directory of previous target-files packages, if set.
        build_both: Build the full package next to the incremental one.
        sign: Sign the build with the release keys.
    """

    device: str
    variant: str
    wipe: bool = False
    install_clean: bool = False
    gapps: bool = False
    generate_json: bool = False
    fastboot: bool = False
    boot_image: bool = False
    output_dir: Path | None = None
    history_dir: Path | None = None
    build_both: bool = False
    sign: bool = False

    @property
    def wipe_history(self) -> bool:
        """Whether the history directory is emptied before the new copy."""
        return self.wipe or self.install_clean


@dataclass(frozen=True)
class BuildPlan:
    """Ordered, de-duplicated targets to build.

    The order is the invocation order and therefore the order in which
    signing is applied.
    """

    targets: tuple[str, ...] = ()

    @classmethod
    def from_targets(cls, targets: Iterable[str]) -> "BuildPlan":
        """Create a plan, keeping the first occurrence of each target."""
        return cls(targets=tuple(dict.fromkeys(targets)))

    def __iter__(self) -> Iterator[str]:
        return iter(self.targets)

    def __len__(self) -> int:
        return len(self.targets)

    def __contains__(self, target: object) -> bool:
        return target in self.targets


@dataclass
class BuildContext:
    """State resolved for a single invocation. Never shared between runs."""

    plan: BuildPlan
    output_dir: Path
    previous_target_files: Path | None = None
    wipe_history: bool = False
    build_both: bool = False
    sign: bool = False
    generate_json: bool = False
    fastboot: bool = False
    boot_image: bool = False
    gapps: bool = False
    history_dir: Path | None = None
    notes: list[str] = field(default_factory=list)

    @property
    def incremental(self) -> bool:
        """Whether an incremental base was found."""
        return self.previous_target_files is not None

    def builder_env(self) -> dict[str, str]:
        """Environment handed to the builder for every target.

        The previous target-files variable is always present so that a
        value left over from an earlier run is cleared, not inherited.
        """
        return {
            ENV_KOSP_OUT: str(self.output_dir),
            ENV_GAPPS_BUILD: "true" if self.gapps else "false",
            ENV_PREVIOUS_TARGET_FILES: (
                str(self.previous_target_files) if self.previous_target_files else ""
            ),
        }
