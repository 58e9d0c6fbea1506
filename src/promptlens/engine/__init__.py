"""Analysis engine: document parsing, static rules and semantic analysis."""
