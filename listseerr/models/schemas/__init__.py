"""Pydantic models for third-party API payloads."""
