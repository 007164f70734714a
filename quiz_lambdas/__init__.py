"""Serverless handlers for the quiz game API."""
