"""FastAPI application module for ShopScore.

This module contains the FastAPI application and the route handlers that
expose training and recommendation over HTTP.
"""
