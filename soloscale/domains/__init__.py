"""Domain layer (business rules for intake, pricing, conflicts and signing).

Domain modules should not depend on UI. Anything stateful or networked is
passed in by the orchestration layer.
"""
