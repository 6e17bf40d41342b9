# src/api/dependencies/identity.py
from src.services.identity import IdentityClient


def get_identity_client() -> IdentityClient:
    # One client per request; the server keeps no signed-in state
    return IdentityClient()
