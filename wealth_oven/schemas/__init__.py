"""Pydantic request schemas"""
