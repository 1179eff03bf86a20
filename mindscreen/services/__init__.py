"""mindscreen services.

- analysis_service: per-message risk analysis and the HTTP surface
- clustering_service: k-means behavioural risk clusters
- llm_service: therapeutic replies with deterministic fallbacks
- session_service: session and user roll-ups
"""
