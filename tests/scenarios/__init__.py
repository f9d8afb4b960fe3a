"""End-to-end conformance scenarios.

Each module drives the engine against the in-process fake booking API and
verifies one aspect of flow execution or session processing.
"""
