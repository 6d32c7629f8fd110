"""typearch-guard - TypeScript type architecture enforcer."""

__version__ = "1.0.0"
