"""
Feature modules for RunTrack.

Each feature is a self-contained module with:
- models.py - Dataclasses for the domain
- schemas.py - Pydantic schemas (optional)
- errors.py - Feature exceptions (optional)
- service modules - Business logic
"""
