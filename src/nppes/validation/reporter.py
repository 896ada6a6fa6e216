"""Rich rendering of file validation results."""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from nppes.validation.core import ValidationResult

_STATUS_STYLES = {
    "ok": ("OK", "green"),
    "missing": ("missing", "yellow"),
    "missing-required": ("MISSING", "bold red"),
    "header": ("bad header", "red"),
    "rows": ("invalid rows", "yellow"),
}


def _status(result: ValidationResult) -> str:
    if not result.exists:
        return "missing-required" if result.required else "missing"
    if not result.schema_valid:
        return "header"
    if result.invalid_rows:
        return "rows"
    return "ok"


class ConsoleReporter:
    """Prints one table row per dataset file, then a summary line and errors."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def print_results(self, results: list[ValidationResult]) -> None:
        """
        Render validation results.

        Args:
            results: One result per dataset part, in registry order.
        """
        self.console.print(self._table(results))
        self._print_summary(results)
        self._print_errors(results)

    def _table(self, results: list[ValidationResult]) -> Table:
        table = Table(title="NPPES File Validation", show_header=True)
        table.add_column("Part", style="cyan", no_wrap=True)
        table.add_column("Schema", style="blue")
        table.add_column("Required", justify="center")
        table.add_column("Status", justify="center")
        table.add_column("Sampled", justify="right")
        table.add_column("File", style="dim", overflow="fold")

        for result in results:
            label, style = _STATUS_STYLES[_status(result)]
            sampled = "-"
            if result.row_count is not None:
                sampled = f"{result.row_count:,}"
                if result.invalid_rows:
                    sampled += f" ({result.invalid_rows:,} bad)"
            table.add_row(
                result.dataset_name,
                result.schema_name,
                "yes" if result.required else "",
                Text(label, style=style),
                sampled,
                result.file_path.name if result.file_path else "-",
            )
        return table

    def _print_summary(self, results: list[ValidationResult]) -> None:
        statuses = [_status(r) for r in results]
        passed = sum(1 for r in results if r.exists and r.passed)
        failed = sum(1 for r in results if not r.passed)
        missing = sum(1 for s in statuses if s.startswith("missing"))

        summary = Text.assemble(
            f"{len(results)} files: ",
            (f"Passed: {passed}", "green"),
            ", ",
            (f"Failed: {failed}", "red" if failed else "dim"),
            ", ",
            (f"Missing: {missing}", "yellow" if missing else "dim"),
        )
        self.console.print()
        self.console.print(summary)

    def _print_errors(self, results: list[ValidationResult]) -> None:
        """Print the error message of every file that exists but failed."""
        failed = [r for r in results if r.exists and not r.passed]
        if not failed:
            return

        self.console.print()
        self.console.print("[bold red]Validation Errors[/bold red]")
        for result in failed:
            self.console.print(f"[bold]{result.dataset_name}[/bold] {result.file_path}")
            # Messages may contain [brackets] from column names
            for line in (result.error_message or "").splitlines():
                self.console.print(f"    {line}", markup=False)
