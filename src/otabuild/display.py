"""Rich console output for launch and manifest commands.

Operator-facing lines use the same colored Info/Warning/Error tags the
build shell helpers print.
"""

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from otabuild.artifacts.manifest import GeneratedManifests
from otabuild.planner.intent import BuildContext


class StatusDisplay:
    """Console display for build status."""

    def __init__(
        self,
        console: Console | None = None,
        verbose: bool = False,
    ) -> None:
        """Initialize the status display.

        Args:
            console: Rich console (uses default if None)
            verbose: Whether to show detailed output
        """
        self.console = console or Console()
        self.verbose = verbose

    def info(self, message: str) -> None:
        """Print an informational line."""
        self.console.print(Text.assemble(("Info", "bold green"), f": {message}"))

    def warn(self, message: str) -> None:
        """Print a warning line."""
        self.console.print(Text.assemble(("Warning", "bold yellow"), f": {message}"))

    def error(self, message: str) -> None:
        """Print an error line."""
        self.console.print(Text.assemble(("Error", "bold red"), f": {message}"))

    def show_plan(self, context: BuildContext) -> None:
        """Display the resolved build plan.

        Args:
            context: Resolved build context
        """
        table = Table(title="Build Plan", show_header=True)
        table.add_column("#", style="dim", width=4)
        table.add_column("Target")
        table.add_column("Signed", width=8)

        for pos, target in enumerate(context.plan, start=1):
            table.add_row(str(pos), target, "yes" if context.sign else "-")

        self.console.print(table)

        details = Table(show_header=False, box=None, padding=(0, 1))
        details.add_column("Key", style="bold")
        details.add_column("Value")
        details.add_row("Output", str(context.output_dir))
        details.add_row("Incremental", "yes" if context.incremental else "no")
        if context.previous_target_files is not None:
            details.add_row("Base", str(context.previous_target_files))
        if context.history_dir is not None:
            details.add_row("History", str(context.history_dir))
        if self.verbose:
            details.add_row("GApps", "yes" if context.gapps else "no")
            details.add_row("JSON", "yes" if context.generate_json else "no")
        self.console.print(details)

    def show_manifests(self, manifests: GeneratedManifests) -> None:
        """Display the manifests that were written.

        Args:
            manifests: Result of manifest generation
        """
        content = Text()
        if manifests.incremental is not None:
            content.append("Incremental: ", style="bold")
            content.append(f"{manifests.incremental.file_name}\n")
            content.append(f"  {manifests.incremental_path}\n", style="dim")
            if manifests.incremental.pre_build_incremental:
                content.append(
                    f"  based on {manifests.incremental.pre_build_incremental}\n",
                    style="dim",
                )
        if manifests.full is not None:
            content.append("Full: ", style="bold")
            content.append(f"{manifests.full.file_name}\n")
            content.append(f"  {manifests.full_path}\n", style="dim")
            if self.verbose:
                content.append(f"  md5 {manifests.full.md5}\n", style="dim")

        panel = Panel(
            content,
            title="[bold green]Release Manifests[/bold green]",
            border_style="green",
        )
        self.console.print(panel)


def create_status_display(
    console: Console | None = None,
    verbose: bool = False,
) -> StatusDisplay:
    """Create a new status display.

    Args:
        console: Rich console (uses default if None)
        verbose: Whether to show detailed output

    Returns:
        New StatusDisplay instance
    """
    return StatusDisplay(console=console, verbose=verbose)
