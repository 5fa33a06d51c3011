"""ShopScore: personalized product scoring with a small dense classifier.

This package encodes users and products into fixed-width weighted vectors,
trains a classifier on every (user, product) pair, and ranks the catalog
for a given user.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: Feature encoding, training and ranking logic
"""

__version__ = "0.1.0"
