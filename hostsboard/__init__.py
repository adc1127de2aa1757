"""hostsboard — admin console backend for grouped hosts-file entries."""

__version__ = "0.1.0"
