"""medintake: patient intake question engine.

Services:
- question_service: taxonomy, question bank, contextual rules, duplicate filter
- summary_service: severity, PHQ-9 and narrative derivation, report data
- oracle_service: LLM-backed question and analysis generation with fallback
- intake_service: session state and HTTP endpoints
"""

__version__ = "0.1.0"
