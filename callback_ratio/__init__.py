"""callback-ratio: job application lifecycle tracking and funnel metrics."""

__version__ = "0.1.0"
