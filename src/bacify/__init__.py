"""bacify — verify that the latest restic snapshot matches the live source tree."""

__version__ = "0.3.0"
