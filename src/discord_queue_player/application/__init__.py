"""
Application Layer

Orchestrates domain objects and infrastructure adapters to fulfil bot commands.

Structure:
- services/: Queue registry, playback controller and the music player facade
- interfaces/: Port interfaces for infrastructure adapters
"""
