from fastapi import Request

from cardcatalog.scryfall.client import ScryfallClient


def get_scryfall_client(request: Request) -> ScryfallClient:
    """The app-wide Scryfall client created in the lifespan handler."""
    client: ScryfallClient = request.app.state.scryfall_client
    return client
