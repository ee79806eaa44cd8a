"""Infrastructure layer — git subprocess backend and the working copy.

This layer depends on the stdlib and on :mod:`gitosisctl.domain.errors`.
It must never import from services, commands, or output.
"""
