"""To-do manager with an explainability engine (lexical / syntactic / semantic event log)."""

__version__ = "0.1.0"
