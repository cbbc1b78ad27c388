"""Port-o-Potty: watch TCP listeners in configured port ranges and kill their owners."""

__version__ = "0.1.0"
