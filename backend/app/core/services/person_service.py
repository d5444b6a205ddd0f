from typing import Optional
from ..interfaces import PersonServiceInterface, TMDBResponse, TMDBClientInterface
from ..cache import CacheService

class PersonService(PersonServiceInterface):
    """Service class for person-related operations"""
    
    def __init__(self, client: TMDBClientInterface, cache: Optional[CacheService] = None):
        self.client = client
        self.cache = cache or CacheService()
    
    def get_person_details(self, person_id: int) -> TMDBResponse:
        """Get person details by ID"""
        cache_key = f"tmdb:person:{person_id}:details"
        cached = self.cache.get_json(cache_key)
        if cached is not None:
            return TMDBResponse(cached, 200, True)
        resp = self.client.make_request(f"person/{person_id}")
        if resp.success:
            self.cache.set_json(cache_key, resp.data)
        return resp
    
    def get_person_movie_credits(self, person_id: int) -> TMDBResponse:
        """Get person's movie credits by ID"""
        return self.client.make_request(f"person/{person_id}/movie_credits", localized=False)
    
    def get_popular_people(self, page: int = 1) -> TMDBResponse:
        return self.client.make_request("person/popular", {"page": page})
    
    def search_people(self, query: str, page: int = 1) -> TMDBResponse:
        """Search people by query"""
        params = {"query": query, "page": page}
        return self.client.make_request("search/person", params)
