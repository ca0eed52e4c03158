"""Rich-powered console output for primpact."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.tree import Tree

from primpact.models import BreakingChange, ImpactGraph, RiskAssessment, RiskLevel, Severity

LEVEL_COLORS = {
    RiskLevel.LOW: "green",
    RiskLevel.MEDIUM: "yellow",
    RiskLevel.HIGH: "red",
    RiskLevel.CRITICAL: "bold red",
}

SEVERITY_COLORS = {
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "green",
}


class Console:
    """Terminal output for primpact using Rich."""

    def __init__(self, stderr: bool = False) -> None:
        self.console = RichConsole(stderr=stderr)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def progress(self) -> Progress:
        """Spinner shown while an analysis runs."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    def show_risk(self, risk: RiskAssessment) -> None:
        """Display the risk score and its factor breakdown."""
        color = LEVEL_COLORS[risk.level]
        self.console.print(
            Panel(
                f"[bold]Score:[/bold] [{color}]{risk.score}/100[/{color}]  "
                f"[bold]Level:[/bold] [{color}]{risk.level.value.upper()}[/{color}]",
                title="[bold]Risk Assessment[/bold]",
                border_style=color,
            )
        )

        table = Table(title="Factor Breakdown", border_style="cyan")
        table.add_column("Factor", style="bold")
        table.add_column("Score", justify="right", style="cyan")
        table.add_column("Weight", justify="right")
        table.add_column("Contribution", justify="right")
        table.add_column("Description", style="dim")

        for factor in risk.factors:
            table.add_row(
                factor.name,
                f"{factor.score:.0f}",
                f"{factor.weight:.2f}",
                f"{factor.score * factor.weight:.1f}",
                factor.description,
            )
        self.console.print(table)

        for factor in risk.factors:
            if factor.details:
                self.console.print(f"\n[bold]{factor.name}:[/bold]")
                for detail in factor.details:
                    self.console.print(f"  [dim]- {detail}[/dim]")

    def show_breaking(self, changes: list[BreakingChange]) -> None:
        """Display breaking changes with before/after and consumers."""
        noun = "breaking change" if len(changes) == 1 else "breaking changes"
        self.console.print(f"[bold]Found {len(changes)} {noun}:[/bold]\n")

        for bc in changes:
            color = SEVERITY_COLORS[bc.severity]
            self.console.print(
                f"  [{color}]{bc.severity.value}[/{color}]  "
                f"[bold]{bc.symbol_name}[/bold] ({bc.type.value})"
            )
            self.console.print(f"       [dim]{bc.file_path}[/dim]")
            self.console.print(f"       [red]- {bc.before}[/red]")
            if bc.after:
                self.console.print(f"       [green]+ {bc.after}[/green]")
            if bc.consumers:
                self.console.print(f"       [dim]Consumers:[/dim] {', '.join(bc.consumers)}")
            self.console.print()

    def show_impact(self, graph: ImpactGraph) -> None:
        """Display the impact graph as a tree of changed files and their importers."""
        tree = Tree("[bold]Impact Graph[/bold]")

        changed = tree.add("[bold]Directly Changed[/bold]")
        for path in graph.directly_changed:
            node = changed.add(f"[cyan]{path}[/cyan]")
            for edge in graph.edges:
                if edge.to == path:
                    node.add(f"[dim]{edge.from_} ({edge.type})[/dim]")

        if graph.indirectly_affected:
            affected = tree.add("[bold]Indirectly Affected[/bold]")
            for path in graph.indirectly_affected:
                affected.add(f"[yellow]{path}[/yellow]")

        self.console.print(tree)
        edges = "edge" if len(graph.edges) == 1 else "edges"
        self.console.print(
            f"[dim]{len(graph.directly_changed)} directly changed, "
            f"{len(graph.indirectly_affected)} indirectly affected, "
            f"{len(graph.edges)} {edges}[/dim]"
        )
