"""Encoding, training and ranking for ShopScore.

Users and products are encoded against a shared context, every user with a
purchase history is paired with every product to build the training matrix,
and the fitted classifier scores the catalog for a query user.
"""
