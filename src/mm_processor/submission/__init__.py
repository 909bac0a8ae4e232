"""
Submission event processing: validation, enrichment, routing and dispatch.

Modules:
    - validation: parse and schema-check raw message values
    - api_client / enrichment: Submission and Challenge API lookups
    - routing: the relevance cascade and resource branching
    - dispatcher: legacy store score mutations
    - service: single-message entry point
"""
