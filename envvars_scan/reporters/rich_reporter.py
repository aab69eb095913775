"""
Rich 终端报告器 - 使用 Rich 库输出彩色终端格式

按变量名分组列出出现位置，可选显示（遮蔽后的）值及其来源。
"""

from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from envvars_scan.core.scanner.models import ComparisonResult, EnvVarOccurrence, ScanResult
from envvars_scan.reporters.masking import display_value

# 每个变量最多显示的位置数
MAX_LOCATIONS = 3


def _relative(file: str, root: Optional[str]) -> str:
    if not root:
        return file
    try:
        return str(Path(file).relative_to(root))
    except ValueError:
        return file


class RichReporter:
    """Rich 终端报告器"""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def report_scan(self, result: ScanResult, show_values: bool = False) -> None:
        """生成 Rich 格式扫描报告"""
        if not result.env_vars:
            self.console.print("[yellow]No environment variables found[/yellow]")
            return

        groups = result.group_by_name()
        names = sorted(groups)

        self.console.print()
        self.console.print(f"[bold]Found {len(names)} unique environment variables:[/bold]")
        self.console.print()

        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Variable", style="green", no_wrap=True)
        table.add_column("Usages", justify="right")
        table.add_column("Locations", style="dim")
        if show_values:
            table.add_column("Value")

        for name in names:
            locations = groups[name]
            row = [
                name,
                str(len(locations)),
                self._format_locations(locations, result.path),
            ]
            if show_values:
                row.append(self._format_value(name, locations))
            table.add_row(*row)

        self.console.print(table)
        self.console.print()
        self.console.print(
            f"[blue]Total: {len(names)} unique env vars, {len(result.env_vars)} usages[/blue]"
        )

    def _format_locations(self, locations: list[EnvVarOccurrence], root: str) -> str:
        lines = [
            f"{_relative(loc.file, root)}:{loc.line}"
            for loc in locations[:MAX_LOCATIONS]
        ]
        if len(locations) > MAX_LOCATIONS:
            lines.append(f"... and {len(locations) - MAX_LOCATIONS} more")
        return "\n".join(lines)

    def _format_value(self, name: str, locations: list[EnvVarOccurrence]) -> Text:
        """显示第一个带值的位置的值和来源"""
        first = next((loc for loc in locations if loc.value), None)
        text = Text()
        if first is None:
            return text
        shown = display_value(name, first.value, True)
        text.append(shown or "", style="yellow")
        if first.value_source:
            label = first.value_source.value + (", default" if first.is_default else "")
            text.append(f" ({label})", style="dim")
        return text

    def report_comparison(
        self,
        comparison: ComparisonResult,
        base: ScanResult,
        head: ScanResult,
        title: str = "Env Var Changes",
    ) -> None:
        """生成对比报告"""
        self.console.print()
        self.console.print(f"[bold]{title}:[/bold]")
        self.console.print()

        if not comparison.has_changes:
            self.console.print("  [dim]No changes detected[/dim]")
        else:
            head_groups = head.group_by_name()
            base_groups = base.group_by_name()
            for name in comparison.added:
                loc = head_groups[name][0]
                self.console.print(
                    f"  [green]+ {name}[/green] [dim]({_relative(loc.file, head.path)}:{loc.line})[/dim]"
                )
            for name in comparison.removed:
                loc = base_groups[name][0]
                self.console.print(
                    f"  [red]- {name}[/red] [dim](was in {_relative(loc.file, base.path)}:{loc.line})[/dim]"
                )

        summary = (
            f"{len(comparison.added)} added, "
            f"{len(comparison.removed)} removed, "
            f"{len(comparison.unchanged)} unchanged"
        )
        self.console.print()
        self.console.print(Panel(summary, title="Summary", border_style="blue", expand=False))
