"""Feature extraction for the expiration model."""

from .feature_engineer import ExpirationFeatureEngineer, FeatureVector, EXPIRATION_FEATURES

__all__ = ["ExpirationFeatureEngineer", "FeatureVector", "EXPIRATION_FEATURES"]
