"""prwatch: trigger builds for GitHub pull requests on commits and trusted comments."""

__version__ = "0.1.0"
