"""Category commands."""

import click
from pocketledger.cli.error_handling import handle_domain_error
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import CategoryType

TYPE_CHOICE = click.Choice([t.value for t in CategoryType], case_sensitive=False)


def _echo_tree(nodes: list[dict], depth: int = 0) -> None:
    for node in nodes:
        click.echo(f"{'  ' * depth}{node['name']} (ID: {node['id']}, {node['category_type'].value})")
        _echo_tree(node["children"], depth + 1)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="Only income or only expense trees")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """Show categories as a tree."""
    service = CategoryService(ctx.obj["db"])

    roots = service.get_category_tree()
    if category_type is not None:
        roots = [node for node in roots if node["category_type"].value == category_type.lower()]
    if not roots:
        click.echo("No categories found. Run 'init-categories' to create default categories.")
        return

    click.echo("\nCategories:")
    _echo_tree(roots)


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Parent category path, e.g. 'Food'")
@click.option("--type", "category_type", type=TYPE_CHOICE, default=CategoryType.EXPENSE.value, show_default=True)
@click.pass_context
def create_category(ctx, name: str, parent: str | None, category_type: str):
    """Create a category, optionally under PARENT."""
    service = CategoryService(ctx.obj["db"])

    try:
        category_id = service.create_category(
            name=name, parent_path=parent, category_type=category_type.lower()
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
        return

    where = f" under '{parent}'" if parent else ""
    click.echo(f"Created {category_type.lower()} category '{name}'{where} (ID: {category_id})")


def register_commands(cli):
    cli.add_command(category_group, name="category")
