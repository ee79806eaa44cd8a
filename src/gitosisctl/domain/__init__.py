"""Domain layer — config document model, section kinds, group rules, errors.

This layer depends only on the stdlib.
It must never import from services, infrastructure, commands, or config.
"""
