"""domagent -- resolve task strings into page-interaction commands and run them."""

__version__ = "0.1.0"
