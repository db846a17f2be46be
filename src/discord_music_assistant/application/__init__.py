"""
Application Layer

Contains use cases and the services that orchestrate domain objects and
infrastructure ports to fulfill them.

Structure:
- commands/: Request objects and the uniform CommandResult
- services/: Playback engine, audio pipeline, generation pipeline and helpers
- interfaces/: Port interfaces for infrastructure adapters
"""
