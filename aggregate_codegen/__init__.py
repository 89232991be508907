"""aggregate-codegen: generate CQRS source files from a YAML domain model."""

__version__ = "0.1.0"
