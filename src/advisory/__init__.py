"""
Crop recommendation logic.

Modules:
    advisor  - Hosted AI advisor client and prompt construction
    rules    - Static season, latitude-band and crop profile tables
    engine   - Ranked recommendations, delegated or rule-based
"""
