"""Core domain package for notibridge.

Core contains matching, classification, and deduplication logic without any
page scraping or delivery-specific code, keeping the decision logic portable.
"""
