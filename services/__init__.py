"""
Campaign Studio Services

Core services for the campaign pipeline:
- campaign_planner: brand research and structured plan generation
- media_generation: image/video orchestration against Gemini / Veo
- api: FastAPI server
- studio: shared wiring for the CLI and the API
"""
