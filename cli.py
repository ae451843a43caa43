# cli.py
import argparse
import json
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, IntPrompt
from rich.table import Table

from sdk.shopclient import ShopClient

console = Console()

DEFAULT_URL = "http://127.0.0.1:3000"
KNOWN_CATEGORIES = {"coffee", "music"}

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
})


# ---------------------------
# Field parsing
# ---------------------------
def parse_fields(pairs: List[str]) -> Dict[str, Any]:
    """
    Turn ["name=Latte", "price=4.5"] into {"name": "Latte", "price": 4.5}.
    Values are read as JSON when they parse, else kept as strings.
    """
    fields: Dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"expected key=value, got {pair!r}")
        try:
            fields[key] = json.loads(raw)
        except ValueError:
            fields[key] = raw
    return fields


# ---------------------------
# Display helpers
# ---------------------------
def show_products(products: List[Dict[str, Any]], category: str = ""):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    extra_keys: List[str] = []
    for p in products:
        for k in p:
            if k not in ("id", "createdAt", "updatedAt") and k not in extra_keys:
                extra_keys.append(k)

    table = Table(
        title=f"📦 {category or 'Products'}",
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", justify="right")
    for k in extra_keys:
        table.add_column(k)
    table.add_column("Updated", style="dim")

    for p in products:
        table.add_row(
            str(p.get("id", "N/A")),
            *[_cell(p.get(k)) for k in extra_keys],
            str(p.get("updatedAt", "")),
        )
    console.print(table)


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Errors are printed and None is returned.
    """
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)
        if success_msg:
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        console.print(show_status(f"Error: {e}", False))
        return None


# ---------------------------
# Interactive menu
# ---------------------------
def create_header():
    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    return Panel(f"🛍️ [bold blue]TUTU Shop admin[/bold blue]  [dim]{now}[/dim]", style="bold blue")


def ask(message: str, completer=None, default: str = "") -> str:
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default).strip()


def menu(c: ShopClient):
    categories = set(KNOWN_CATEGORIES)
    console.clear()
    console.print(create_header())

    options = [
        ("1", "📦 List products"),
        ("2", "ℹ️ Get product"),
        ("3", "➕ Create product"),
        ("4", "✏️ Update product"),
        ("5", "🗑️ Delete product"),
        ("6", "🖼️ Upload image"),
        ("7", "🎵 Upload audio"),
        ("q", "👋 Quit"),
    ]

    while True:
        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=30)
        for row in options:
            menu_table.add_row(*row)
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = ask("Choose an option", WordCompleter([k for k, _ in options] + ["quit", "exit"]))
        category_completer = WordCompleter(sorted(categories), ignore_case=True)

        if choice == "1":
            category = ask("Category", category_completer)
            categories.add(category)
            products = try_api(c.list_products, category)
            if products is not None:
                show_products(products, category)

        elif choice == "2":
            category = ask("Category", category_completer)
            pid = IntPrompt.ask("Product ID")
            product = try_api(c.get_product, category, pid)
            if product:
                show_products([product], category)

        elif choice in ("3", "4"):
            category = ask("Category", category_completer)
            categories.add(category)
            raw = ask("Fields (key=value, space separated)")
            try:
                fields = parse_fields(raw.split())
            except ValueError as e:
                console.print(show_status(str(e), False))
                continue
            if choice == "3":
                product = try_api(c.create_product, category, fields, success_msg="Product created")
            else:
                pid = IntPrompt.ask("Product ID")
                product = try_api(c.update_product, category, pid, fields, success_msg=f"Product {pid} updated")
            if product:
                show_products([product], category)

        elif choice == "5":
            category = ask("Category", category_completer)
            pid = IntPrompt.ask("Product ID")
            if Confirm.ask(f"[red]Delete product {pid} from {category}?[/red]"):
                try_api(c.delete_product, category, pid, success_msg=f"Product {pid} deleted")

        elif choice in ("6", "7"):
            path = ask("File path")
            upload = c.upload_image if choice == "6" else c.upload_audio
            resp = try_api(upload, path, success_msg="Upload stored")
            if resp:
                console.print(Panel.fit(f"URL: [bold]{resp['url']}[/bold]", title="📤 Upload"))

        elif choice.lower() in ("q", "quit", "exit"):
            console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
            return

        console.print()
        console.rule(style="dim")


# ---------------------------
# Argument parsing
# ---------------------------
def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TUTU Shop CLI")
    parser.add_argument("--url", default=DEFAULT_URL, help="API base URL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("health", help="Check the API is up")
    subparsers.add_parser("menu", help="Interactive menu")
    subparsers.add_parser("serve", help="Run the API server")

    lp = subparsers.add_parser("list", help="List a category's products")
    lp.add_argument("category")

    gp = subparsers.add_parser("get", help="Get a product by ID")
    gp.add_argument("category")
    gp.add_argument("product_id", type=int)

    cp = subparsers.add_parser("create", help="Create a product")
    cp.add_argument("category")
    cp.add_argument("--field", action="append", default=[], metavar="KEY=VALUE")

    up = subparsers.add_parser("update", help="Update some fields of a product")
    up.add_argument("category")
    up.add_argument("product_id", type=int)
    up.add_argument("--field", action="append", default=[], metavar="KEY=VALUE")

    dp = subparsers.add_parser("delete", help="Delete a product")
    dp.add_argument("category")
    dp.add_argument("product_id", type=int)

    for kind in ("image", "audio"):
        u = subparsers.add_parser(f"upload-{kind}", help=f"Upload an {kind} file")
        u.add_argument("path")
        u.add_argument("--content-type", help="Override the guessed MIME type")

    return parser


def run(args: argparse.Namespace, c: ShopClient) -> Any:
    if args.command == "health":
        return c.health()
    if args.command == "list":
        products = c.list_products(args.category)
        show_products(products, args.category)
        return products
    if args.command == "get":
        product = c.get_product(args.category, args.product_id)
        show_products([product], args.category)
        return product
    if args.command == "create":
        return c.create_product(args.category, parse_fields(args.field))
    if args.command == "update":
        return c.update_product(args.category, args.product_id, parse_fields(args.field))
    if args.command == "delete":
        return c.delete_product(args.category, args.product_id)
    if args.command == "upload-image":
        return c.upload_image(args.path, args.content_type)
    if args.command == "upload-audio":
        return c.upload_audio(args.path, args.content_type)
    raise ValueError(f"unknown command {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        from tutushop.main import main as serve
        serve()
        return 0

    c = ShopClient(base_url=args.url)
    if args.command == "menu":
        menu(c)
        return 0

    try:
        result = run(args, c)
    except Exception as e:
        console.print(show_status(f"Error: {e}", False))
        return 1
    if args.command not in ("list", "get"):
        console.print_json(data=result)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
