"""Download, verify, and locate versioned nohuman kraken2 databases."""

__version__ = "0.1.0"
