"""Medintake services.

- question_service: static question bank, contextual rule engine and the
  filters applied to every question shown to a patient
- summary_service: deterministic severity, narrative and chart records
- oracle_service: LLM-backed diagnostic suggestions with local fallback
- intake_service: session state and the Flask HTTP surface
"""
