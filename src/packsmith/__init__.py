"""packsmith - scaffold Laravel-style packages from feature toggles."""

__version__ = "0.1.0"
