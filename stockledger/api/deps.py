from fastapi import Request

from stockledger.services.reference_cache import ReferenceCache


def get_reference_cache(request: Request) -> ReferenceCache:
    return request.app.state.reference_cache
