"""Tardiness System package.

Feature modules (tardiness, discipline, incidents, processing) sit on top of a
narrow transactional store, with a thin Flask controller layer in front.
"""
