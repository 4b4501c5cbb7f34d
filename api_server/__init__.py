"""Local HTTP API for debate practice"""
