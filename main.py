"""Tech tree research planner CLI."""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from techtree.graph.errors import TechGraphError
from techtree.graph.tech_manager import TechManager
from techtree.models import PathStatus, ResearchPath, Tech
from techtree.solvers.cpsat_path_solver import CPSATPathSolver
from techtree.solvers.progression import ProgressionResolver
from techtree.utils.tech_loader import load_tech_manager

console = Console()

QUERIES = [
    "list",
    "frontier",
    "cheapest",
    "path",
    "cheapest-path",
    "optimal-path",
    "prereqs",
    "dump",
    "validate",
]
GOAL_QUERIES = {"path", "cheapest-path", "optimal-path", "prereqs", "dump"}

EXIT_INVALID = 1
EXIT_UNKNOWN_TECH = 2
EXIT_UNREACHABLE = 3


def create_tech_table(techs: list[Tech], title: str) -> Table:
    """Create a rich table listing techs in the given order."""
    table = Table(title=title, show_header=True, header_style="bold magenta")

    table.add_column("#", style="dim", width=4, justify="right")
    table.add_column("Tech", style="cyan", width=28)
    table.add_column("Category", style="magenta", width=24)
    table.add_column("Type", style="green", width=12)
    table.add_column("Cost", style="yellow", width=8, justify="right")
    table.add_column("Turns", style="blue", width=6, justify="right")
    table.add_column("Prerequisites", style="white", width=40)

    for i, tech in enumerate(techs, 1):
        name = tech.name if tech.researchable else f"{tech.name} [dim](unresearchable)[/dim]"
        table.add_row(
            str(i),
            name,
            tech.category,
            tech.type.value,
            f"{tech.research_cost:g}",
            str(tech.research_turns),
            ", ".join(sorted(tech.prerequisites)) or "-",
        )

    return table


def tech_to_dict(tech: Tech) -> dict:
    return {
        "name": tech.name,
        "category": tech.category,
        "type": tech.type.value,
        "research_cost": tech.research_cost,
        "research_turns": tech.research_turns,
        "researchable": tech.researchable,
        "prerequisites": sorted(tech.prerequisites),
        "unlocked_techs": sorted(tech.unlocked_techs),
    }


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Tech Tree Research Planner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s list                                    # All techs by category
  %(prog)s frontier --known LRN_ALGO_ELEGANCE      # What can be researched now
  %(prog)s path --goal GRO_SUBTER_HAB              # Everything needed for a tech
  %(prog)s cheapest-path --goal PRO_EXOBOTS -q     # Cheapest-first order, names only
  %(prog)s validate --data my_techs.json           # Check a tech file
        """,
    )

    parser.add_argument("query", choices=QUERIES, help="Query to run")

    parser.add_argument("--goal", type=str, help="Goal tech for path queries")

    parser.add_argument(
        "--known",
        "-k",
        action="append",
        default=[],
        metavar="TECH",
        help="Already researched tech (repeatable, or comma separated)",
    )

    parser.add_argument("--category", type=str, help="Restrict 'list' to a category")

    parser.add_argument(
        "--data",
        type=Path,
        help="Path to tech data JSON file (default: data/techs.json)",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Minimal output (only tech names)",
    )

    parser.add_argument("--export", type=Path, help="Export result to JSON file")

    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    if args.query in GOAL_QUERIES and not args.goal:
        parser.error(f"'{args.query}' requires --goal")

    args.known = {
        name.strip()
        for value in args.known
        for name in value.split(",")
        if name.strip()
    }
    return args


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def print_techs(techs: list[Tech], title: str, quiet: bool) -> None:
    if quiet:
        for tech in techs:
            print(tech.name)
    elif techs:
        console.print(create_tech_table(techs, title))
    else:
        console.print(f"[yellow]{title}: nothing to research[/yellow]")


def report_path(path: ResearchPath, title: str, quiet: bool) -> int:
    """Print a goal-directed result and return the exit status for it."""
    if path.status is PathStatus.UNKNOWN_TECH:
        console.print(f"[red]✗ No such tech: {path.goal}[/red]")
        return EXIT_UNKNOWN_TECH
    if path.status is PathStatus.UNREACHABLE:
        console.print(
            f"[red]✗ {path.goal} can never be researched "
            f"(blocked by {', '.join(path.blocked_by)})[/red]"
        )
        return EXIT_UNREACHABLE

    if not path.techs:
        if not quiet:
            console.print(f"[green]✓ {path.goal} is already known[/green]")
        return 0

    print_techs(list(path.techs), title, quiet)
    if not quiet:
        console.print(
            f"\n[bold]Total cost:[/bold] [cyan]{path.total_cost:g}[/cyan]  "
            f"[bold]Minimum turns:[/bold] [cyan]{path.min_turns}[/cyan]  "
            f"[bold]Completion cost:[/bold] [cyan]{path.completion_cost:g}[/cyan]"
        )
    return 0


def run_query(args: argparse.Namespace, manager: TechManager) -> tuple[int, dict]:
    """Run the selected query, print it, and return exit status and export data."""
    resolver = ProgressionResolver(manager)
    export: dict = {"query": args.query, "known": sorted(args.known)}

    if args.query == "list":
        names = (
            manager.names_in_category(args.category)
            if args.category
            else manager.all_names()
        )
        techs = [manager.lookup(name) for name in names]
        print_techs(techs, args.category or "All Techs", args.quiet)
        export["techs"] = [tech_to_dict(tech) for tech in techs]
        return 0, export

    if args.query == "frontier":
        techs = resolver.frontier(args.known)
        print_techs(techs, "Researchable Now", args.quiet)
        export["techs"] = [tech_to_dict(tech) for tech in techs]
        return 0, export

    if args.query == "cheapest":
        tech = resolver.cheapest_frontier(args.known)
        print_techs([tech] if tech else [], "Cheapest Researchable", args.quiet)
        export["techs"] = [tech_to_dict(tech)] if tech else []
        return 0, export

    if args.query == "validate":
        if not args.quiet:
            console.print(
                f"[bold green]✓ {len(manager)} techs in "
                f"{len(manager.category_names())} categories are valid[/bold green]"
            )
        export["techs"] = len(manager)
        return 0, export

    export["goal"] = args.goal
    tech = manager.lookup(args.goal)

    if args.query in ("prereqs", "dump"):
        if tech is None:
            console.print(f"[red]✗ No such tech: {args.goal}[/red]")
            return EXIT_UNKNOWN_TECH, export
        if args.query == "dump":
            print(tech.dump(), end="")
            export["dump"] = tech.dump()
            return 0, export
        prereqs = [manager.lookup(name) for name in manager.recursive_prereqs(args.goal)]
        print_techs(prereqs, f"Prerequisites of {args.goal}", args.quiet)
        export["techs"] = [tech_to_dict(prereq) for prereq in prereqs]
        return 0, export

    if args.query == "path":
        path = resolver.path_towards(args.known, args.goal)
    elif args.query == "cheapest-path":
        path = resolver.cheapest_path_towards(args.known, args.goal)
    else:  # optimal-path
        if not args.quiet:
            console.print("\n[bold magenta]Solving...[/bold magenta]")
        path = CPSATPathSolver(manager, args.known, args.goal).solve()
        if path is None:
            console.print("[red]✗ No solution found[/red]")
            return EXIT_INVALID, export

    export["status"] = path.status.value
    export["blocked_by"] = list(path.blocked_by)
    export["techs"] = [tech_to_dict(t) for t in path.techs]
    return report_path(path, f"Research Order → {args.goal}", args.quiet), export


def main(argv: list[str] | None = None) -> int:
    """Run a tech tree query from the command line."""
    args = parse_args(argv)
    setup_logging(args.verbose)

    if not args.quiet:
        console.print(
            Panel.fit(
                "[bold cyan]Tech Tree[/bold cyan]\n[yellow]Research Planner[/yellow]",
                border_style="blue",
            )
        )

    try:
        manager = load_tech_manager(args.data)
    except TechGraphError as e:
        console.print(f"[red]✗ Invalid tech graph ({e.invariant}): {e}[/red]")
        return EXIT_INVALID
    except (OSError, ValueError) as e:
        console.print(f"[red]✗ Could not load tech data: {e}[/red]")
        return EXIT_INVALID

    unknown = sorted(name for name in args.known if name not in manager)
    if unknown:
        logging.getLogger(__name__).warning("Ignoring unknown techs: %s", unknown)

    status, export = run_query(args, manager)

    if args.export:
        args.export.write_text(json.dumps(export, indent=2))
        if not args.quiet:
            console.print(f"\n[green]✓ Exported to {args.export}[/green]")

    return status


if __name__ == "__main__":
    sys.exit(main())
