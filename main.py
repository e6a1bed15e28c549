#!/usr/bin/env python3
"""
RateMyFit - Main Entry Point

Extracts clothing tags from outfit feedback, rates outfit photos, and runs
the maintenance jobs behind them (whitelist sync, tag backfill).

Usage:
    python main.py --text "Try a white cardigan with dark jeans"
    python main.py --entry 42                 # Extract + save for a wardrobe entry
    python main.py --analyze outfit.jpg       # Rate an outfit photo
"""
import argparse
import asyncio
import base64
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from config.settings import config
from ratemyfit.ai import OpenAIClient, OutfitAnalyzer, ResponseRecoveryParser
from ratemyfit.loaders import SupabaseStore
from ratemyfit.models import AnalyzeOutfitRequest
from ratemyfit.pipeline import ClothingExtractionPipeline, print_result
from ratemyfit.services import sync_whitelist_with_primary_taxonomy

console = Console()


class CustomHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """Custom formatter that preserves formatting and adds width."""

    def __init__(self, prog):
        super().__init__(prog, max_help_position=40, width=100)


def parse_args(argv=None):
    """Parse command line arguments."""

    epilog = """
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
EXAMPLES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  Tag Extraction:
    python main.py --text "Try a white cardigan with dark jeans"
    python main.py --text "..." -s "Swap in loafers" --strategy basic
    python main.py --entry 42                   Extract and save for entry 42
    python main.py --entry 42 --no-write        Extract only (dry run)
    python main.py --backfill --limit 50        Re-extract the 50 newest entries

  Outfit Analysis (requires OPENAI_API_KEY in .env):
    python main.py --analyze outfit.jpg
    python main.py --analyze outfit.jpg --mode roast --gender male
    python main.py --analyze outfit.jpg --event "job interview"
    python main.py --parse-response reply.txt   Run saved model text through recovery
    python main.py --ai-status                  Check OpenAI availability

  Maintenance:
    python main.py --sync-whitelist             Refresh whitelist from taxonomy

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
STRATEGIES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
    basic       Lexical patterns + fashion whitelist
    enhanced    basic + product catalog matches
    hybrid      enhanced + AI extraction (default)

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
NOTES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  • Requires .env with SUPABASE_URL and SUPABASE_KEY for whitelist, catalog
    and wardrobe access; --text runs on built-in vocabulary without them
  • A failing source (whitelist, catalog, AI) never stops a run
"""

    parser = argparse.ArgumentParser(
        prog="python main.py",
        description="""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
                    RATEMYFIT CLOTHING TAGS & OUTFIT ANALYSIS
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
Turns outfit feedback into up to six short clothing tags, and outfit photos
into a scored, structured analysis.
""",
        epilog=epilog,
        formatter_class=CustomHelpFormatter,
    )

    # Extraction options
    extract_group = parser.add_argument_group(
        "Tag Extraction", "Extract clothing tags from feedback"
    )
    extract_group.add_argument(
        "--text",
        "-t",
        metavar="TEXT",
        help="Feedback text to extract tags from (nothing is saved)",
    )
    extract_group.add_argument(
        "--suggestion",
        "-s",
        action="append",
        default=[],
        metavar="TEXT",
        help="Improvement suggestion accompanying --text (repeatable)",
    )
    extract_group.add_argument(
        "--entry",
        metavar="ID",
        help="Extract tags for a stored wardrobe entry",
    )
    extract_group.add_argument(
        "--backfill",
        action="store_true",
        help="Re-extract tags for every wardrobe entry with feedback",
    )
    extract_group.add_argument(
        "--limit",
        type=int,
        metavar="N",
        help="Maximum entries for --backfill",
    )
    extract_group.add_argument(
        "--strategy",
        choices=["basic", "enhanced", "hybrid"],
        default=config.extraction.strategy,
        help=f"Extraction strategy (default: {config.extraction.strategy})",
    )
    extract_group.add_argument(
        "--max-items",
        type=int,
        default=config.extraction.max_items,
        metavar="N",
        help=f"Maximum tags per run (default: {config.extraction.max_items})",
    )
    extract_group.add_argument(
        "--gender",
        choices=["male", "female", "neutral"],
        help="Gender filter for catalog matches / analysis audience",
    )
    extract_group.add_argument(
        "--no-write",
        action="store_true",
        help="Do not save extracted tags back to wardrobe entries",
    )

    # Analysis options
    ai_group = parser.add_argument_group(
        "Outfit Analysis", "Rate outfit photos (requires OPENAI_API_KEY)"
    )
    ai_group.add_argument(
        "--analyze",
        metavar="IMAGE",
        help="Path to an outfit photo to rate",
    )
    ai_group.add_argument(
        "--mode",
        choices=["normal", "roast"],
        default="normal",
        help="Feedback mode (default: normal)",
    )
    ai_group.add_argument(
        "--event",
        metavar="CONTEXT",
        help='Occasion to judge the outfit for (e.g. "wedding guest")',
    )
    ai_group.add_argument(
        "--parse-response",
        metavar="FILE",
        help="Recover an analysis from saved model output text",
    )
    ai_group.add_argument(
        "--json",
        action="store_true",
        help="Print the analysis as camelCase JSON",
    )
    ai_group.add_argument(
        "--ai-status",
        action="store_true",
        help="Check OpenAI API availability",
    )

    # Maintenance
    db_group = parser.add_argument_group("Maintenance", "Reference data jobs")
    db_group.add_argument(
        "--sync-whitelist",
        action="store_true",
        help="Refresh fashion_whitelist from primary_fashion_taxonomy",
    )
    db_group.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=config.logging.verbose,
        help="Show candidates, source counts and validation warnings (env: RATEMYFIT_VERBOSE)",
    )

    return parser.parse_args(argv)


def _open_store(required: bool = True):
    """Create the Supabase store; None (with a note) when optional and unconfigured."""
    try:
        return SupabaseStore(config.supabase)
    except ValueError as e:
        if required:
            console.print(f"[red]{escape(str(e))}[/red]")
        else:
            console.print("[yellow]Supabase not configured, using built-in vocabulary only[/yellow]")
        return None


async def ai_status():
    """Check OpenAI availability."""
    console.print("\n[bold cyan]AI Service Status[/bold cyan]\n")

    try:
        client = OpenAIClient()
    except ValueError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        return 1

    async with client:
        if await client.is_available():
            console.print("[green]✓ OpenAI is available[/green]")
            console.print(f"[dim]Chat model: {client.config.chat_model}[/dim]")
            console.print(f"[dim]Vision model: {client.config.vision_model}[/dim]")
            return 0
    console.print("[red]✗ OpenAI not available[/red]")
    return 1


async def extract_text(args):
    """Dry-run extraction on text from the command line."""
    store = _open_store(required=False)
    async with ClothingExtractionPipeline(store) as pipeline:
        result = await pipeline.extract_from_text(
            args.text,
            args.suggestion,
            args.gender,
            strategy=args.strategy,
            max_items=args.max_items,
        )
    print_result(result, verbose=args.verbose)
    return 0


async def extract_entry(args):
    """Extract (and by default save) tags for one wardrobe entry."""
    store = _open_store()
    if store is None:
        return 1
    async with ClothingExtractionPipeline(store) as pipeline:
        result = await pipeline.extract_for_entry(
            args.entry,
            write_back=not args.no_write,
            strategy=args.strategy,
            max_items=args.max_items,
        )
    if result is None:
        return 1
    print_result(result, title=f"Wardrobe Entry {args.entry}", verbose=args.verbose)
    if not args.no_write:
        if result.persisted:
            console.print("[green]✓ Tags saved[/green]")
        else:
            console.print("[red]✗ Tags were not saved[/red]")
            return 1
    return 0


async def backfill(args):
    """Re-extract tags for stored wardrobe entries."""
    store = _open_store()
    if store is None:
        return 1
    async with ClothingExtractionPipeline(store) as pipeline:
        summary = await pipeline.backfill(
            limit=args.limit, write_back=not args.no_write, strategy=args.strategy
        )
    if not summary.get("success"):
        console.print(f"[red]Backfill failed: {escape(str(summary.get('error')))}[/red]")
        return 1

    table = Table(title="Backfill Results", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Entries Processed", str(summary["processed"]))
    table.add_row("Saved", str(summary["saved"]))
    table.add_row("Failed", str(summary["failed"]))
    console.print(table)
    return 0 if summary["failed"] == 0 else 1


def print_analysis(outcome, as_json: bool = False, verbose: bool = False) -> None:
    """Print a recovered analysis as a rich panel (or JSON)."""
    response = outcome.response
    if as_json:
        console.print_json(response.model_dump_json(by_alias=True))
        return

    suggestions = "\n".join(f"  {i}. {escape(s)}" for i, s in enumerate(response.suggestions, 1))
    body = f"[bold]Score:[/bold] {response.score}/10\n\n{escape(response.feedback)}\n\n[bold]Suggestions:[/bold]\n{suggestions}"
    console.print(Panel(body, title="Outfit Analysis", border_style="magenta"))

    if response.style_analysis:
        colors = response.style_analysis.color_analysis
        body_type = response.style_analysis.body_type
        table = Table(title="Style Analysis", show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Seasonal Type", escape(colors.seasonal_type))
        table.add_row("Undertone", escape(f"{colors.undertone.value} ({colors.undertone.description})"))
        table.add_row("Intensity", escape(f"{colors.intensity.value} ({colors.intensity.description})"))
        table.add_row("Lightness", escape(f"{colors.lightness.value} ({colors.lightness.description})"))
        table.add_row("Style Archetype", escape(f"{body_type.type} ({body_type.visual_shape})"))
        console.print(table)

    details = f"[dim]Stage: {outcome.stage}"
    if outcome.policy_violation:
        details += " | content policy refusal"
    if outcome.errors:
        details += f" | {escape('; '.join(outcome.errors))}"
    console.print(details + "[/dim]")
    if verbose:
        for warning in outcome.warnings:
            console.print(f"[dim]  warning: {escape(warning)}[/dim]")


async def analyze_image(args):
    """Rate an outfit photo."""
    image_path = Path(args.analyze)
    if not image_path.exists():
        console.print(f"[red]Image not found: {escape(str(image_path))}[/red]")
        return 1

    request = AnalyzeOutfitRequest(
        image_base64=base64.b64encode(image_path.read_bytes()).decode("utf-8"),
        gender="male" if args.gender == "male" else "female",
        feedback_mode=args.mode,
        event_context=args.event,
        is_neutral=args.gender == "neutral",
    )
    async with OutfitAnalyzer(recovery_config=config.recovery) as analyzer:
        outcome = await analyzer.analyze(request)
    print_analysis(outcome, args.json, args.verbose)
    return 0


def parse_response_file(args):
    """Run saved model output through the recovery parser."""
    path = Path(args.parse_response)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Could not read {escape(str(path))}: {escape(str(e))}[/red]")
        return 1
    outcome = ResponseRecoveryParser(config.recovery).parse(text, args.mode, args.event)
    print_analysis(outcome, args.json, args.verbose)
    return 0


def sync_whitelist():
    """Refresh the whitelist table from the primary taxonomy."""
    store = _open_store()
    if store is None:
        return 1
    result = sync_whitelist_with_primary_taxonomy(store)
    return 0 if result["success"] else 1


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    try:
        if args.ai_status:
            return asyncio.run(ai_status())

        if args.sync_whitelist:
            return sync_whitelist()

        if args.parse_response:
            return parse_response_file(args)

        if args.analyze:
            return asyncio.run(analyze_image(args))

        if args.entry:
            return asyncio.run(extract_entry(args))

        if args.backfill:
            return asyncio.run(backfill(args))

        if args.text:
            return asyncio.run(extract_text(args))

    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        return 130

    console.print("[yellow]Nothing to do. Run with --help to see available commands.[/yellow]")
    return 2


if __name__ == "__main__":
    sys.exit(main())
