"""CherryChain -- reefer container transit simulation."""

__version__ = "0.1.0"
