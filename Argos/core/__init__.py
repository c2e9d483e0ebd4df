"""
Core detection engine for Argos: data model, configuration, fusion and
the concurrent orchestrator.
"""
