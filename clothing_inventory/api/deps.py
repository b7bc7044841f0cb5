from fastapi import Request

from clothing_inventory.context import AppContext


def get_context(request: Request) -> AppContext:
    return request.app.state.context
