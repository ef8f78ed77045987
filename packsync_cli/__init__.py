"""packsync - declarative plugin manager for Neovim's native packages."""

__app_name__ = "packsync"
__version__ = "0.3.0"
