"""
Explainability subsystem.

Components:
- events.py: event record (Event, EventLevel, ActionType, LogLevel)
- log_store.py: append-only EventLog with the current semantic parent
- explainable.py: ExplainableState, state wrapper emitting syntactic + semantic events
- interactions.py: ambient click/keydown capture as lexical events
- projector.py: grouped, level-filtered, task-focused log view
- sinks.py: forwarding of events to Python logging
- engine.py: ExplanationEngine facade used by the rest of the app
"""
