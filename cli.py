# cli.py
import logging
import sys
from datetime import datetime
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.logging import RichHandler
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.catalog import CatalogAPIError, CatalogClient, Product
from sdk.state import ALL, SORT_KEYS, CatalogState, display_category

console = Console()

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


class ViewOptions:
    """Search/filter/sort settings for the list view."""

    def __init__(self):
        self.search = ""
        self.category = ALL
        self.sort = "name-asc"

    def is_filtered(self) -> bool:
        return bool(self.search) or self.category != ALL

    def clear(self):
        self.search = ""
        self.category = ALL


# ---------------------------
# Display helpers
# ---------------------------
def show_stats(state: CatalogState):
    stats = state.stats()
    console.print(Panel.fit(
        f"📦 [bold]{stats['count']}[/bold] products   "
        f"💰 Total value [green]${stats['total_value']:.2f}[/green]   "
        f"📈 Avg price [cyan]${stats['average_price']:.2f}[/cyan]",
        title="Catalog",
        border_style="blue",
    ))


def show_products(products: List[Product], title: str = "📦 Products Catalog"):
    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("#", justify="right", width=4)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=16)
    table.add_column("Image", style="dim", width=30, overflow="ellipsis")

    for i, p in enumerate(products, start=1):
        table.add_row(
            str(i),
            p.name,
            f"${p.price:.2f}",
            display_category(p),
            p.image,
        )
    console.print(table)


def show_list_view(state: CatalogState, opts: ViewOptions) -> List[Product]:
    """Render the home view; returns the products shown, in display order."""
    if state.status == "error":
        console.print(Panel.fit(
            f"[red]Could not load products:[/red] {state.error}\n[dim]Choose 'r' to try again.[/dim]",
            title="❌ Error",
            border_style="red",
        ))
        return []

    if not state.products:
        console.print(Panel.fit(
            "[italic yellow]No products yet.[/italic yellow] Choose 'c' to add your first one.",
            border_style="yellow",
        ))
        return []

    show_stats(state)
    visible = state.visible_products(opts.search, opts.category, opts.sort)
    if opts.is_filtered():
        chips = []
        if opts.search:
            chips.append(f'Search: "{opts.search}"')
        if opts.category != ALL:
            chips.append(f"Category: {opts.category}")
        console.print(f"[blue]{'  •  '.join(chips)}[/blue]  [dim](sort: {opts.sort})[/dim]")

    if not visible:
        console.print("[italic yellow]No products match your filters. Choose 'x' to clear them.[/italic yellow]")
        return []

    show_products(visible)
    return visible


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def show_field_errors(errors: Dict[str, str]):
    lines = "\n".join(f"• [bold]{field}[/bold]: {msg}" for field, msg in errors.items())
    console.print(Panel.fit(f"[red]{lines}[/red]", title="Please fix", border_style="red"))


# ---------------------------
# API wrapper
# ---------------------------
def with_spinner(fn, *args, **kwargs):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        transient=True,
    ) as progress:
        progress.add_task(description="Processing...", total=None)
        return fn(*args, **kwargs)


def report_failure(action: str, e: Exception):
    # blocking alert: the user has to acknowledge it
    console.print(Panel.fit(f"[red]Error {action}: {e}[/red]", title="❌ Failed", border_style="red"))
    Prompt.ask("[dim]Press Enter to continue[/dim]", default="", show_default=False)


# ---------------------------
# Input helpers with autocomplete
# ---------------------------
def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def pick_product(shown: List[Product]) -> Optional[Product]:
    if not shown:
        console.print("[yellow]No products on screen to choose from.[/yellow]")
        return None
    names = WordCompleter([p.name for p in shown], ignore_case=True)
    raw = prompt_with_autocomplete("Product # or name", completer=names).strip()
    if raw.isdigit() and 1 <= int(raw) <= len(shown):
        return shown[int(raw) - 1]
    for p in shown:
        if p.name.lower() == raw.lower():
            return p
    console.print(f"[red]No product matching '{raw}'.[/red]")
    return None


def run_form(state: CatalogState):
    """The create/edit view. Loops until saved or cancelled."""
    form = state.form_defaults()
    title = f"✏️ Edit {state.editing.name}" if state.editing else "➕ New product"
    console.print(Panel.fit("Leave a field as is to keep it. Type '!cancel' as the name to go back.", title=title))

    while state.view == "create":
        form["name"] = prompt_with_autocomplete("🏷️ Name", default=form["name"])
        if form["name"].strip() == "!cancel":
            state.cancel_edit()
            return
        form["price"] = prompt_with_autocomplete("💰 Price", default=form["price"])
        form["image"] = prompt_with_autocomplete("🖼️ Image URL", default=form["image"])
        cats = WordCompleter([c for c in state.categories() if c != ALL], ignore_case=True)
        form["category"] = prompt_with_autocomplete("📂 Category (optional)", completer=cats, default=form["category"])

        try:
            errors = with_spinner(state.submit, form)
        except (CatalogAPIError, OSError) as e:
            report_failure("saving product", e)
            if not Confirm.ask("Try again?", default=True):
                state.cancel_edit()
            continue

        if errors:
            show_field_errors(errors)
            continue
        console.print(show_status(f"Saved '{form['name'].strip()}'"))


# ---------------------------
# Layout and Header
# ---------------------------
def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        "🛍️ Catalog Store",
        "[bold blue]Product catalog manager[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Main menu
# ---------------------------
def menu(client: CatalogClient):
    state = CatalogState(client)
    opts = ViewOptions()

    console.clear()
    console.print(create_header())
    with_spinner(state.load)

    while True:
        if state.view == "create":
            run_form(state)
            continue

        shown = show_list_view(state, opts)

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=26)
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=26)
        for row in [
            ("s", "🔍 Search", "c", "➕ Create product"),
            ("f", "📂 Filter category", "e", "✏️ Edit product"),
            ("o", "↕️ Sort", "d", "🗑️ Delete product"),
            ("x", "🧹 Clear filters", "r", "🔄 Refresh / try again"),
            ("", "", "q", "👋 Quit"),
        ]:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(["s", "f", "o", "x", "c", "e", "d", "r", "q", "quit", "exit"])
        ).strip().lower()

        if choice == "s":
            opts.search = prompt_with_autocomplete("Search products", default=opts.search).strip()

        elif choice == "f":
            cats = state.categories()
            opts.category = Prompt.ask("Category", choices=cats, default=opts.category if opts.category in cats else ALL)

        elif choice == "o":
            opts.sort = Prompt.ask("Sort by", choices=list(SORT_KEYS), default=opts.sort)

        elif choice == "x":
            opts.clear()

        elif choice == "c":
            state.start_create()

        elif choice == "e":
            product = pick_product(shown)
            if product:
                state.start_edit(product)

        elif choice == "d":
            product = pick_product(shown)
            if product:
                try:
                    deleted = state.delete(
                        product,
                        lambda p: Confirm.ask(f'[red]Are you sure you want to delete "{p.name}"?[/red]'),
                    )
                except (CatalogAPIError, OSError) as e:
                    report_failure("deleting product", e)
                else:
                    if deleted:
                        console.print(show_status(f"Deleted '{product.name}'"))

        elif choice == "r":
            with_spinner(state.retry)

        elif choice in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, handlers=[RichHandler(console=console)])
    try:
        menu(CatalogClient())
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
