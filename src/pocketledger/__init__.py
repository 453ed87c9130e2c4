"""pocketledger: installments, recurring expenses, OFX import and card invoices."""

__version__ = "0.1.0"


# The CLI pulls in every service; load it only when asked for
def __getattr__(name):
    if name == "main":
        from pocketledger.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
