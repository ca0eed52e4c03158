"""primpact - pull request impact analysis for git repositories."""

__version__ = "0.1.0"
