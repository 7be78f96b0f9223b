"""Clients for external collaborators (subprocess tools)."""

from .process_runner import ProcessOutput, ProcessRunner

__all__ = [
    'ProcessOutput',
    'ProcessRunner',
]
