"""Build target resolution.

Decides which targets to build for a launch request:

1. The base target is always the starting point.
2. With a history directory holding a previous target-files package the
   run is incremental: the incremental target replaces the base target,
   or follows it when both were requested.
3. Fastboot and boot image targets are appended when requested.
"""

from pathlib import Path

from otabuild.artifacts.locator import TARGET_FILES_PATTERN, find_latest
from otabuild.config.schema import TargetsConfig
from otabuild.core.logging import get_logger
from otabuild.planner.intent import BuildContext, BuildIntent, BuildPlan


class TargetPlanner:
    """Resolves a BuildIntent into a BuildPlan and BuildContext."""

    def __init__(self, targets: TargetsConfig | None = None) -> None:
        """Initialize the planner.

        Args:
            targets: Target names; defaults to the stock kosp targets.
        """
        self.targets = targets or TargetsConfig()
        self._logger = get_logger("planner")

    def find_incremental_base(self, history_dir: Path) -> Path | None:
        """Find the previous target-files package to diff against.

        Args:
            history_dir: Directory of archived target-files packages.

        Returns:
            Path of the most recent package, or None.
        """
        latest = find_latest(history_dir, pattern=TARGET_FILES_PATTERN)
        return latest.path if latest is not None else None

    def resolve(self, intent: BuildIntent, output_dir: Path | None = None) -> BuildContext:
        """Resolve targets and per-run state for a launch request.

        Args:
            intent: The launch request.
            output_dir: Resolved output directory; falls back to the
                intent's output directory, then the working directory.

        Returns:
            BuildContext holding the plan and the incremental base, if any.
        """
        targets = [self.targets.base]
        previous: Path | None = None
        notes: list[str] = []

        if intent.history_dir is not None:
            previous = self.find_incremental_base(intent.history_dir)
            if previous is not None:
                if intent.build_both:
                    targets.append(self.targets.incremental)
                else:
                    targets = [self.targets.incremental]
            else:
                notes.append("Previous target files package not present, using default target")

        if intent.fastboot:
            targets.append(self.targets.fastboot)
        if intent.boot_image:
            targets.append(self.targets.boot)

        plan = BuildPlan.from_targets(targets)
        context = BuildContext(
            plan=plan,
            output_dir=output_dir or intent.output_dir or Path.cwd(),
            previous_target_files=previous,
            wipe_history=intent.wipe_history,
            build_both=intent.build_both,
            sign=intent.sign,
            generate_json=intent.generate_json,
            fastboot=intent.fastboot,
            boot_image=intent.boot_image,
            gapps=intent.gapps,
            history_dir=intent.history_dir,
            notes=notes,
        )

        self._logger.log_plan_resolved(
            list(plan.targets),
            incremental=context.incremental,
            previous_target_files=str(previous) if previous else None,
        )
        return context

    def plan(self, intent: BuildIntent) -> BuildPlan:
        """Resolve only the ordered targets for a launch request."""
        return self.resolve(intent).plan
