"""forkwatch: record a repository's fork parent through a status pull
request."""

__version__ = "0.1.0"
