"""
Location-aware context resolution for the crop advisory service.

Modules:
    season    - Cropping season for a calendar date
    resolver  - Reverse/forward geocoding with provider fallbacks
    weather   - Current weather and 5-day rainfall with an offline estimator
    insights  - Irrigation, pest and planting signals from weather
    defaults  - Soil type and climate class inferred from place names
    pipeline  - Orchestrate all of the above into advisory recommendations
"""
