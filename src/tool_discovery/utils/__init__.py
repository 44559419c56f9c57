"""Utility helpers for tool discovery."""
