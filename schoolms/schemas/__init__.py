from schoolms.schemas.common import PagedResponse, SearchRequest

__all__ = ["PagedResponse", "SearchRequest"]
