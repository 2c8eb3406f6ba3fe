"""rxmigrate - RxJS 5 to 6 source migration for TypeScript projects."""

__version__ = "0.1.0"
