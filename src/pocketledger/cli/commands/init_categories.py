"""Initialize default categories."""

import click
from pocketledger.domain.category import CategoryService
from pocketledger.domain.entities import CategoryType

EXPENSE = CategoryType.EXPENSE
INCOME = CategoryType.INCOME

# Root names match the keyword table used to suggest categories on import.
INITIAL_CATEGORIES = [
    # Root categories
    ("Food", None, EXPENSE),
    ("Transport", None, EXPENSE),
    ("Housing", None, EXPENSE),
    ("Health", None, EXPENSE),
    ("Leisure", None, EXPENSE),
    ("Shopping", None, EXPENSE),
    ("Bills", None, EXPENSE),
    ("Education", None, EXPENSE),
    ("Other", None, EXPENSE),
    ("Salary", None, INCOME),
    ("Freelance", None, INCOME),
    ("Investments", None, INCOME),
    ("Other Income", None, INCOME),
    # Subcategories
    ("Groceries", "Food", EXPENSE),
    ("Restaurants", "Food", EXPENSE),
    ("Fuel", "Transport", EXPENSE),
    ("Public Transit", "Transport", EXPENSE),
    ("Rent", "Housing", EXPENSE),
    ("Utilities", "Housing", EXPENSE),
    ("Pharmacy", "Health", EXPENSE),
    ("Streaming", "Leisure", EXPENSE),
    ("Travel", "Leisure", EXPENSE),
]


@click.command("init-categories")
@click.option("--force", is_flag=True, help="Create defaults even if categories exist")
@click.pass_context
def init_categories(ctx, force: bool):
    """Initialize database with default category tree."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    existing = service.list_categories()
    if existing and not force:
        click.echo("Categories already exist. Use --force to add the defaults anyway.")
        return

    click.echo("Creating initial category tree...")

    # Parents first, then children
    ordered = sorted(INITIAL_CATEGORIES, key=lambda entry: entry[1] is not None)

    created = 0
    errors = 0
    for category_name, parent_name, category_type in ordered:
        try:
            service.create_category(
                name=category_name, parent_path=parent_name, category_type=category_type
            )
            created += 1
        except ValueError as e:
            click.echo(f"Warning: Could not create category '{category_name}': {e}", err=True)
            errors += 1

    if errors == 0:
        click.echo(f"Successfully created {created} categories.")
    else:
        click.echo(f"Created {created} categories with {errors} errors.")


def register_commands(cli):
    """Register init-categories command with main CLI."""
    cli.add_command(init_categories)
