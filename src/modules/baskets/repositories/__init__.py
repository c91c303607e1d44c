"""Basket repositories package."""

from modules.baskets.repositories.django_repository import BasketDjangoRepository
from modules.baskets.repositories.interfaces import IBasketRepository

__all__ = ["BasketDjangoRepository", "IBasketRepository"]
