"""Orchestration layer: the intake wizard state machine and the LLM triage client."""
