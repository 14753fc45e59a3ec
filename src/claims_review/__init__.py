"""Insurance claims-review service: entity store, review workflow and REST gateway."""

__version__ = "1.0.0"
